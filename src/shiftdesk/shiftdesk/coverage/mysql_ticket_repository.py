from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import TicketKind, TicketStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import DiscrepancyTicket
from .repository import TicketRepository


class MySQLTicketRepository(TicketRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_if_absent(
        self,
        *,
        company_id: int,
        shift_id: int,
        employee_id: int,
        kind: TicketKind,
        description: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # uq_ticket_shift_employee_kind turns the duplicate into a no-op
            cur.execute(
                """
                INSERT IGNORE INTO discrepancy_tickets(company_id, shift_id, employee_id, kind, description, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(company_id), int(shift_id), int(employee_id), kind.value, description, TicketStatus.NEW.value),
            )
            return cur.rowcount > 0

    def list_for_shifts(self, company_id: int, shift_ids: Sequence[int]) -> Sequence[DiscrepancyTicket]:
        if not shift_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ticket_id, company_id, shift_id, employee_id, kind, description, status
                FROM discrepancy_tickets
                WHERE company_id=%s AND shift_id IN ({in_clause(shift_ids)})
                ORDER BY ticket_id ASC
                """,
                (int(company_id), *[int(s) for s in shift_ids]),
            )
            return [
                DiscrepancyTicket(
                    ticket_id=int(r["ticket_id"]),
                    company_id=int(r["company_id"]),
                    shift_id=int(r["shift_id"]),
                    employee_id=int(r["employee_id"]),
                    kind=TicketKind(r["kind"]),
                    description=r.get("description"),
                    status=TicketStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def set_status(self, company_id: int, ticket_id: int, *, status: TicketStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE discrepancy_tickets SET status=%s WHERE company_id=%s AND ticket_id=%s",
                (status.value, int(company_id), int(ticket_id)),
            )
            return cur.rowcount > 0
