from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Pattern, Sequence

from ..clients.repository import ClientRepository
from ..core.constants import DEFAULT_PROVISION_DENYLIST
from ..employees.repository import EmployeeRepository
from ..normalize.parsers import normalize_full_name, normalize_label, parse_person_name, strip_site_code

_logger = logging.getLogger(__name__)


def compile_denylist(patterns: Iterable[str]) -> List[Pattern[str]]:
    return [re.compile(p, re.IGNORECASE) for p in patterns if p]


class EntityResolver:
    """Matches export names to employees and clients for one company and one run.

    Employees match on the exact (case-insensitive) full name only. Clients fall
    back to the label without its site code, then to substring containment.
    Everything resolved or provisioned is cached, so the same raw string always
    yields the same id within a run.
    """

    def __init__(
        self,
        company_id: int,
        employees: EmployeeRepository,
        clients: ClientRepository,
        *,
        denylist: Sequence[str] = DEFAULT_PROVISION_DENYLIST,
    ):
        self._company_id = int(company_id)
        self._employees_repo = employees
        self._clients_repo = clients
        self._denylist = compile_denylist(denylist)
        self._loaded = False

        self._employees: Dict[str, int] = {}
        self._clients: Dict[str, int] = {}
        self._client_cache: Dict[str, Optional[int]] = {}

        self.created_employees = 0
        self.created_clients = 0
        self.unmatched_employees: List[str] = []
        self.unmatched_clients: List[str] = []

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        for emp in self._employees_repo.list_for_company(self._company_id):
            self._employees.setdefault(normalize_full_name(emp.first_name, emp.last_name), emp.employee_id)
        for client in self._clients_repo.list_clients(self._company_id):
            self._clients.setdefault(normalize_label(client.name), client.client_id)
        self._loaded = True

    # -- employees ---------------------------------------------------------

    def resolve_employee(self, name: str) -> Optional[int]:
        self._ensure_loaded()
        key = normalize_label(name)
        if not key:
            return None
        return self._employees.get(key)

    def is_denied(self, name: str) -> bool:
        text = (name or "").strip()
        return any(p.search(text) for p in self._denylist)

    def provision_employee(self, name: str) -> Optional[int]:
        existing = self.resolve_employee(name)
        if existing is not None:
            return existing

        person = parse_person_name(name)
        if person is None:
            return None
        if self.is_denied(name):
            _logger.info("skipping auto-provision for denylisted name %r", name)
            return None

        employee_id = self._employees_repo.create(
            company_id=self._company_id, first_name=person.first, last_name=person.last
        )
        self._employees[normalize_full_name(person.first, person.last)] = employee_id
        self.created_employees += 1
        _logger.info("provisioned employee %s (%s) for company %s", employee_id, person.full, self._company_id)
        return employee_id

    def resolve_or_provision_employee(self, name: str, *, auto_provision: bool) -> Optional[int]:
        employee_id = self.resolve_employee(name)
        if employee_id is None and auto_provision:
            if self.is_denied(name):
                return None
            employee_id = self.provision_employee(name)
        if employee_id is None:
            self._mark_unmatched(self.unmatched_employees, name)
        return employee_id

    # -- clients -----------------------------------------------------------

    def resolve_client(self, label: str) -> Optional[int]:
        self._ensure_loaded()
        key = normalize_label(label)
        if not key:
            return None
        if key in self._client_cache:
            return self._client_cache[key]

        client_id = self._clients.get(key)
        if client_id is None:
            stripped = normalize_label(strip_site_code(label))
            client_id = self._clients.get(stripped) if stripped else None
            if client_id is None and stripped:
                client_id = self._match_by_containment(stripped)

        if client_id is not None:
            self._client_cache[key] = client_id
        return client_id

    def _match_by_containment(self, needle: str) -> Optional[int]:
        for name, client_id in self._clients.items():
            if needle in name or name in needle:
                return client_id
        return None

    def provision_client(self, label: str) -> int:
        existing = self.resolve_client(label)
        if existing is not None:
            return existing

        original = " ".join((label or "").split())
        clean = strip_site_code(original) or original
        notes = f"Imported from label '{original}'" if clean != original else None
        client_id = self._clients_repo.create_client(company_id=self._company_id, name=clean, notes=notes)

        self._clients[normalize_label(clean)] = client_id
        self._client_cache[normalize_label(original)] = client_id
        self.created_clients += 1
        _logger.info("provisioned client %s (%s) for company %s", client_id, clean, self._company_id)
        return client_id

    def resolve_or_provision_client(self, label: str, *, auto_provision: bool) -> Optional[int]:
        if not normalize_label(label):
            return None
        client_id = self.resolve_client(label)
        if client_id is None and auto_provision:
            client_id = self.provision_client(label)
        if client_id is None:
            self._mark_unmatched(self.unmatched_clients, label)
        return client_id

    @staticmethod
    def _mark_unmatched(bucket: List[str], name: str) -> None:
        text = " ".join((name or "").split())
        if text and text not in bucket:
            bucket.append(text)
