from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ImportKind
from .model import ImportBatch


class ImportBatchRepository(Protocol):
    """Bookkeeping for import runs; rows written by a run carry its batch id."""

    def find_batches(
        self, company_id: int, *, kind: ImportKind, range_start: date, range_end: date
    ) -> Sequence[ImportBatch]:
        """Batches of ``kind`` whose range shares at least one day with the given one."""

        raise NotImplementedError

    def create_batch(
        self,
        *,
        company_id: int,
        kind: ImportKind,
        range_start: date,
        range_end: date,
        file_name: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def delete_batches(self, company_id: int, batch_ids: Sequence[int]) -> int:
        raise NotImplementedError
