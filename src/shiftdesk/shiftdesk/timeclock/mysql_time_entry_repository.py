from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Sequence

from ..core.enums import TimeEntryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import bounds_clause, db_cursor, fetchall, fetchone, in_clause
from .model import TimeEntry
from .repository import TimeEntryRepository

_ENTRY_COLUMNS = """
    entry_id, company_id, employee_id, shift_id, clock_in, clock_out,
    break_minutes, status, notes, import_batch_id
"""


def _to_entry(r: dict) -> TimeEntry:
    return TimeEntry(
        entry_id=int(r["entry_id"]),
        company_id=int(r["company_id"]),
        employee_id=int(r["employee_id"]),
        clock_in=r["clock_in"],
        clock_out=r.get("clock_out"),
        shift_id=r.get("shift_id"),
        break_minutes=int(r.get("break_minutes") or 0),
        status=TimeEntryStatus(r["status"]),
        notes=r.get("notes"),
        import_batch_id=r.get("import_batch_id"),
    )


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_entry(
        self,
        *,
        company_id: int,
        employee_id: int,
        clock_in: datetime,
        clock_out: Optional[datetime],
        status: TimeEntryStatus,
        shift_id: Optional[int] = None,
        break_minutes: int = 0,
        notes: Optional[str] = None,
        import_batch_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(
                    company_id, employee_id, shift_id, clock_in, clock_out,
                    break_minutes, status, notes, import_batch_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(company_id),
                    int(employee_id),
                    shift_id,
                    clock_in,
                    clock_out,
                    int(break_minutes or 0),
                    status.value,
                    notes,
                    import_batch_id,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, company_id: int, entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ENTRY_COLUMNS} FROM time_entries WHERE company_id=%s AND entry_id=%s",
                (int(company_id), int(entry_id)),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def get_open_for_employee(self, company_id: int, employee_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM time_entries
                WHERE company_id=%s AND employee_id=%s AND clock_out IS NULL
                ORDER BY clock_in DESC
                LIMIT 1
                """,
                (int(company_id), int(employee_id)),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def close_entry(self, company_id: int, entry_id: int, *, clock_out: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET clock_out=%s
                WHERE company_id=%s AND entry_id=%s AND clock_out IS NULL
                """,
                (clock_out, int(company_id), int(entry_id)),
            )
            return cur.rowcount > 0

    def admin_update_entry(
        self,
        company_id: int,
        entry_id: int,
        *,
        clock_in: datetime,
        clock_out: Optional[datetime],
        break_minutes: int,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET clock_in=%s, clock_out=%s, break_minutes=%s, notes=%s
                WHERE company_id=%s AND entry_id=%s
                """,
                (clock_in, clock_out, int(break_minutes or 0), notes, int(company_id), int(entry_id)),
            )
            return cur.rowcount > 0

    def set_status(self, company_id: int, entry_id: int, *, status: TimeEntryStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE time_entries SET status=%s WHERE company_id=%s AND entry_id=%s",
                (status.value, int(company_id), int(entry_id)),
            )
            return cur.rowcount > 0

    def list_for_employee_between(
        self, company_id: int, *, employee_id: int, start: datetime, end: datetime
    ) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM time_entries
                WHERE company_id=%s AND employee_id=%s
                  AND clock_in < %s AND (clock_out IS NULL OR clock_out > %s)
                ORDER BY clock_in ASC
                """,
                (int(company_id), int(employee_id), end, start),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def list_for_shifts(self, company_id: int, shift_ids: Sequence[int]) -> Sequence[TimeEntry]:
        if not shift_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM time_entries
                WHERE company_id=%s AND shift_id IN ({in_clause(shift_ids)})
                ORDER BY clock_in ASC
                """,
                (int(company_id), *[int(s) for s in shift_ids]),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def delete_by_batches(
        self,
        company_id: int,
        batch_ids: Sequence[int],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        if not batch_ids:
            return 0
        ids = tuple(int(b) for b in batch_ids)
        lower = datetime.combine(date_from, time.min) if date_from is not None else None
        upper = datetime.combine(date_to + timedelta(days=1), time.min) if date_to is not None else None
        window, window_params = bounds_clause("clock_in", lower, upper)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM time_entries WHERE company_id=%s AND import_batch_id IN ({in_clause(ids)}){window}",
                (int(company_id), *ids, *window_params),
            )
            return cur.rowcount
