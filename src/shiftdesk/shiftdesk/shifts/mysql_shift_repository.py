from __future__ import annotations

from datetime import date, timedelta
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from ..core.constants import DEFAULT_SHIFT_SLOTS
from ..core.enums import AssignmentStatus, ShiftStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import bounds_clause, db_cursor, fetchall, fetchone, in_clause, normalize_mysql_time
from .model import EDITABLE_FIELDS, Assignment, Shift, ShiftDraft
from .repository import ShiftRepository

_SHIFT_COLUMNS = """
    shift_id, company_id, title, date, start_time, end_time, client_id, location_id,
    slots, claimable, status, shift_code, notes, meeting_point, import_batch_id
"""
_UPDATABLE = frozenset(EDITABLE_FIELDS) | {"status", "shift_code"}


def _to_shift(r: dict) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        company_id=int(r["company_id"]),
        title=r["title"],
        date=r["date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        client_id=r.get("client_id"),
        location_id=r.get("location_id"),
        slots=int(r.get("slots") or DEFAULT_SHIFT_SLOTS),
        claimable=bool(r.get("claimable")),
        status=ShiftStatus(r["status"]),
        shift_code=r.get("shift_code"),
        notes=r.get("notes"),
        meeting_point=r.get("meeting_point"),
        import_batch_id=r.get("import_batch_id"),
    )


def _to_assignment(r: dict) -> Assignment:
    return Assignment(
        assignment_id=int(r["assignment_id"]),
        company_id=int(r["company_id"]),
        shift_id=int(r["shift_id"]),
        employee_id=int(r["employee_id"]),
        status=AssignmentStatus(r["status"]),
        import_batch_id=r.get("import_batch_id"),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_shift(self, *, company_id: int, draft: ShiftDraft, import_batch_id: Optional[int] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO scheduled_shifts(
                    company_id, title, date, start_time, end_time, client_id, location_id,
                    slots, claimable, status, shift_code, notes, meeting_point, import_batch_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(company_id),
                    draft.title,
                    draft.date,
                    draft.start_time,
                    draft.end_time,
                    draft.client_id,
                    draft.location_id,
                    int(draft.slots),
                    1 if draft.claimable else 0,
                    draft.status.value,
                    draft.shift_code,
                    draft.notes,
                    draft.meeting_point,
                    import_batch_id,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, company_id: int, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SHIFT_COLUMNS} FROM scheduled_shifts WHERE company_id=%s AND shift_id=%s",
                (int(company_id), int(shift_id)),
            )
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def update_shift(self, company_id: int, shift_id: int, changes: Mapping[str, Any]) -> bool:
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ValidationError(f"Cannot update shift fields: {', '.join(sorted(unknown))}")
        if not changes:
            return True

        assignments = []
        params: list[object] = []
        for column, value in changes.items():
            assignments.append(f"{column}=%s")
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, bool):
                value = 1 if value else 0
            params.append(value)
        params.extend([int(company_id), int(shift_id)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE scheduled_shifts SET {', '.join(assignments)} WHERE company_id=%s AND shift_id=%s",
                tuple(params),
            )
            return cur.rowcount > 0

    def list_range(self, company_id: int, *, start: date, end: date) -> Sequence[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SHIFT_COLUMNS}
                FROM scheduled_shifts
                WHERE company_id=%s AND date BETWEEN %s AND %s
                ORDER BY date ASC, start_time ASC, shift_id ASC
                """,
                (int(company_id), start, end),
            )
            return [_to_shift(r) for r in fetchall(cur)]

    def find_by_code(self, company_id: int, *, shift_code: str, day: date) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SHIFT_COLUMNS}
                FROM scheduled_shifts
                WHERE company_id=%s AND shift_code=%s AND date=%s
                ORDER BY shift_id ASC
                LIMIT 1
                """,
                (int(company_id), shift_code, day),
            )
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def create_assignment(
        self,
        *,
        company_id: int,
        shift_id: int,
        employee_id: int,
        status: AssignmentStatus,
        import_batch_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_assignments(company_id, shift_id, employee_id, status, import_batch_id)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(company_id), int(shift_id), int(employee_id), status.value, import_batch_id),
            )
            return int(cur.lastrowid)

    def get_assignment(self, company_id: int, assignment_id: int) -> Optional[Assignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT assignment_id, company_id, shift_id, employee_id, status, import_batch_id
                FROM shift_assignments
                WHERE company_id=%s AND assignment_id=%s
                """,
                (int(company_id), int(assignment_id)),
            )
            r = fetchone(cur)
            return _to_assignment(r) if r else None

    def delete_assignment(self, company_id: int, assignment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM shift_assignments WHERE company_id=%s AND assignment_id=%s",
                (int(company_id), int(assignment_id)),
            )
            return cur.rowcount > 0

    def list_assignments(self, company_id: int, shift_ids: Sequence[int]) -> Sequence[Assignment]:
        if not shift_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT assignment_id, company_id, shift_id, employee_id, status, import_batch_id
                FROM shift_assignments
                WHERE company_id=%s AND shift_id IN ({in_clause(shift_ids)})
                ORDER BY assignment_id ASC
                """,
                (int(company_id), *[int(s) for s in shift_ids]),
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def list_employee_shifts(self, company_id: int, *, employee_id: int, day: date) -> Sequence[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.shift_id, s.company_id, s.title, s.date, s.start_time, s.end_time, s.client_id,
                       s.location_id, s.slots, s.claimable, s.status, s.shift_code, s.notes,
                       s.meeting_point, s.import_batch_id
                FROM shift_assignments a
                JOIN scheduled_shifts s ON s.shift_id = a.shift_id
                WHERE a.company_id=%s AND a.employee_id=%s AND s.date=%s AND a.status <> %s
                ORDER BY s.start_time ASC, s.shift_id ASC
                """,
                (int(company_id), int(employee_id), day, AssignmentStatus.REJECTED.value),
            )
            return [_to_shift(r) for r in fetchall(cur)]

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
        upper = date_to + timedelta(days=1) if date_to is not None else None
        window, window_params = bounds_clause("s.date", date_from, upper)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                DELETE a FROM shift_assignments a
                JOIN scheduled_shifts s ON s.shift_id = a.shift_id
                WHERE a.company_id=%s AND a.import_batch_id IN ({in_clause(ids)}){window}
                """,
                (int(company_id), *ids, *window_params),
            )
            cur.execute(
                f"DELETE s FROM scheduled_shifts s WHERE s.company_id=%s AND s.import_batch_id IN ({in_clause(ids)}){window}",
                (int(company_id), *ids, *window_params),
            )
            return cur.rowcount
