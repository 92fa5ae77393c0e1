from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ShiftRequest
from .repository import ShiftRequestRepository

_COLUMNS = "request_id, company_id, shift_id, employee_id, status, rejection_reason, created_at, reviewed_at"


def _to_request(r: dict) -> ShiftRequest:
    return ShiftRequest(
        request_id=int(r["request_id"]),
        company_id=int(r["company_id"]),
        shift_id=int(r["shift_id"]),
        employee_id=int(r["employee_id"]),
        status=RequestStatus(r["status"]),
        rejection_reason=r.get("rejection_reason"),
        created_at=r.get("created_at"),
        reviewed_at=r.get("reviewed_at"),
    )


class MySQLShiftRequestRepository(ShiftRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, company_id: int, shift_id: int, employee_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO shift_requests(company_id, shift_id, employee_id, status) VALUES(%s,%s,%s,%s)",
                (int(company_id), int(shift_id), int(employee_id), RequestStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_by_id(self, company_id: int, request_id: int) -> Optional[ShiftRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM shift_requests WHERE company_id=%s AND request_id=%s",
                (int(company_id), int(request_id)),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def find_pending(self, company_id: int, *, shift_id: int, employee_id: int) -> Optional[ShiftRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shift_requests
                WHERE company_id=%s AND shift_id=%s AND employee_id=%s AND status=%s
                LIMIT 1
                """,
                (int(company_id), int(shift_id), int(employee_id), RequestStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def decide(
        self,
        company_id: int,
        request_id: int,
        *,
        status: RequestStatus,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shift_requests
                SET status=%s, rejection_reason=%s, reviewed_at=NOW()
                WHERE company_id=%s AND request_id=%s AND status=%s
                """,
                (status.value, rejection_reason, int(company_id), int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_by_status(self, company_id: int, *, status: RequestStatus, limit: int = 200) -> Sequence[ShiftRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shift_requests
                WHERE company_id=%s AND status=%s
                ORDER BY created_at ASC, request_id ASC
                LIMIT %s
                """,
                (int(company_id), status.value, int(limit)),
            )
            return [_to_request(r) for r in fetchall(cur)]
