from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Sequence, Tuple

from ..clients.repository import ClientRepository
from ..core.constants import DEFAULT_PROVISION_DENYLIST
from ..core.enums import ImportKind
from ..core.events import EntityChange, EventBus
from ..employees.repository import EmployeeRepository
from ..resolver.service import EntityResolver
from .repository import ImportBatchRepository

_logger = logging.getLogger(__name__)


class BatchedImport(ABC):
    """Replace-by-key skeleton shared by the schedule and time-clock imports.

    A run is keyed by (company, kind, date range). Rows left by earlier runs whose
    range overlaps the new one are deleted before the new batch is opened, so
    re-uploading a corrected file converges instead of accumulating.
    """

    kind: ImportKind

    def __init__(
        self,
        *,
        employees: EmployeeRepository,
        clients: ClientRepository,
        batches: ImportBatchRepository,
        events: Optional[EventBus] = None,
        denylist: Sequence[str] = DEFAULT_PROVISION_DENYLIST,
    ):
        self._employees = employees
        self._clients = clients
        self._batches = batches
        self._events = events
        self._denylist = tuple(denylist)

    def new_resolver(self, company_id: int) -> EntityResolver:
        return EntityResolver(company_id, self._employees, self._clients, denylist=self._denylist)

    @abstractmethod
    def _delete_batch_rows(
        self,
        company_id: int,
        batch_ids: Sequence[int],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        raise NotImplementedError

    def _open_batch(
        self, company_id: int, *, range_start: date, range_end: date, file_name: Optional[str]
    ) -> Tuple[int, int]:
        """Clear earlier imports overlapping the range; return (replaced_batches, new_batch_id).

        A batch lying inside the range is dropped with all its rows. A wider batch
        only loses its rows dated inside the range and keeps the rest.
        """
        previous = self._batches.find_batches(
            company_id, kind=self.kind, range_start=range_start, range_end=range_end
        )
        contained = [b.import_batch_id for b in previous if b.within(range_start, range_end)]
        straddling = [b.import_batch_id for b in previous if not b.within(range_start, range_end)]
        removed = 0
        if contained:
            removed += self._delete_batch_rows(company_id, contained)
            self._batches.delete_batches(company_id, contained)
        if straddling:
            removed += self._delete_batch_rows(
                company_id, straddling, date_from=range_start, date_to=range_end
            )
        if previous:
            _logger.info(
                "%s import %s..%s for company %s: replaced %s batch(es), trimmed %s, %s row(s) removed",
                self.kind.value,
                range_start,
                range_end,
                company_id,
                len(contained),
                len(straddling),
                removed,
            )

        batch_id = self._batches.create_batch(
            company_id=company_id,
            kind=self.kind,
            range_start=range_start,
            range_end=range_end,
            file_name=file_name,
        )
        return len(previous), batch_id

    def _emit(self, company_id: int, entity: str, action: str = "imported") -> None:
        if self._events is not None:
            self._events.publish(EntityChange(company_id=int(company_id), entity=entity, action=action))
