from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import ImportKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import ImportBatch
from .repository import ImportBatchRepository


class MySQLImportBatchRepository(ImportBatchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_batches(
        self, company_id: int, *, kind: ImportKind, range_start: date, range_end: date
    ) -> Sequence[ImportBatch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT import_batch_id, company_id, kind, range_start, range_end, file_name, created_at
                FROM import_batches
                WHERE company_id=%s AND kind=%s AND range_start<=%s AND range_end>=%s
                ORDER BY import_batch_id ASC
                """,
                (int(company_id), kind.value, range_end, range_start),
            )
            rows = fetchall(cur)
            return [
                ImportBatch(
                    import_batch_id=int(r["import_batch_id"]),
                    company_id=int(r["company_id"]),
                    kind=ImportKind(r["kind"]),
                    range_start=r["range_start"],
                    range_end=r["range_end"],
                    file_name=r.get("file_name"),
                    created_at=r.get("created_at"),
                )
                for r in rows
            ]

    def create_batch(
        self,
        *,
        company_id: int,
        kind: ImportKind,
        range_start: date,
        range_end: date,
        file_name: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO import_batches(company_id, kind, range_start, range_end, file_name)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(company_id), kind.value, range_start, range_end, file_name),
            )
            return int(cur.lastrowid)

    def delete_batches(self, company_id: int, batch_ids: Sequence[int]) -> int:
        if not batch_ids:
            return 0
        ids = tuple(int(b) for b in batch_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM import_batches WHERE company_id=%s AND import_batch_id IN ({in_clause(ids)})",
                (int(company_id), *ids),
            )
            return cur.rowcount
