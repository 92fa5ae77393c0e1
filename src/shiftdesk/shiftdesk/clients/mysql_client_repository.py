from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Client, Location
from .repository import ClientRepository


class MySQLClientRepository(ClientRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_clients(self, company_id: int) -> Sequence[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT client_id, company_id, name, notes
                FROM clients
                WHERE company_id=%s AND deleted_at IS NULL
                ORDER BY name
                """,
                (int(company_id),),
            )
            return [
                Client(
                    client_id=int(r["client_id"]),
                    company_id=int(r["company_id"]),
                    name=r["name"],
                    notes=r.get("notes"),
                )
                for r in fetchall(cur)
            ]

    def create_client(self, *, company_id: int, name: str, notes: Optional[str] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO clients(company_id, name, notes) VALUES(%s,%s,%s)",
                (int(company_id), name, notes),
            )
            return int(cur.lastrowid)

    def soft_delete_client(self, company_id: int, client_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE clients SET deleted_at=NOW() WHERE company_id=%s AND client_id=%s AND deleted_at IS NULL",
                (int(company_id), int(client_id)),
            )
            return cur.rowcount > 0

    def list_locations(self, company_id: int) -> Sequence[Location]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT location_id, company_id, name, notes
                FROM locations
                WHERE company_id=%s AND deleted_at IS NULL
                ORDER BY name
                """,
                (int(company_id),),
            )
            return [
                Location(
                    location_id=int(r["location_id"]),
                    company_id=int(r["company_id"]),
                    name=r["name"],
                    notes=r.get("notes"),
                )
                for r in fetchall(cur)
            ]

    def create_location(self, *, company_id: int, name: str, notes: Optional[str] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO locations(company_id, name, notes) VALUES(%s,%s,%s)",
                (int(company_id), name, notes),
            )
            return int(cur.lastrowid)
