from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AvailabilityOverride, Employee
from .repository import EmployeeRepository


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        company_id=int(r["company_id"]),
        first_name=r["first_name"],
        last_name=r.get("last_name") or "",
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_company(self, company_id: int, *, active_only: bool = False) -> Sequence[Employee]:
        sql = """
            SELECT employee_id, company_id, first_name, last_name, is_active
            FROM employees
            WHERE company_id=%s
        """
        if active_only:
            sql += " AND is_active=1"
        sql += " ORDER BY first_name, last_name"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (int(company_id),))
            return [_to_employee(r) for r in fetchall(cur)]

    def get_by_id(self, company_id: int, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, company_id, first_name, last_name, is_active
                FROM employees
                WHERE company_id=%s AND employee_id=%s
                """,
                (int(company_id), int(employee_id)),
            )
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def create(self, *, company_id: int, first_name: str, last_name: str, is_active: bool = True) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(company_id, first_name, last_name, is_active)
                VALUES(%s,%s,%s,%s)
                """,
                (int(company_id), first_name, last_name, 1 if is_active else 0),
            )
            return int(cur.lastrowid)

    def set_active(self, company_id: int, employee_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET is_active=%s WHERE company_id=%s AND employee_id=%s",
                (1 if is_active else 0, int(company_id), int(employee_id)),
            )
            return cur.rowcount > 0

    def upsert_availability(
        self,
        *,
        company_id: int,
        employee_id: int,
        day: date,
        is_available: bool,
        reason: Optional[str] = None,
        source: str = "manual",
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employee_availability_overrides(company_id, employee_id, date, is_available, reason, source)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE is_available=VALUES(is_available), reason=VALUES(reason), source=VALUES(source)
                """,
                (int(company_id), int(employee_id), day, 1 if is_available else 0, reason, source),
            )

    def list_availability(self, company_id: int, *, start: date, end: date) -> Sequence[AvailabilityOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, company_id, date, is_available, reason, source
                FROM employee_availability_overrides
                WHERE company_id=%s AND date BETWEEN %s AND %s
                ORDER BY date, employee_id
                """,
                (int(company_id), start, end),
            )
            return [
                AvailabilityOverride(
                    employee_id=int(r["employee_id"]),
                    company_id=int(r["company_id"]),
                    date=r["date"],
                    is_available=bool(r["is_available"]),
                    reason=r.get("reason"),
                    source=r.get("source") or "manual",
                )
                for r in fetchall(cur)
            ]
