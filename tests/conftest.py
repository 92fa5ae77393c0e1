from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime
from types import SimpleNamespace
from typing import Any, Mapping, Optional, Sequence

import pytest

from src.shiftdesk.shiftdesk.clients.model import Client, Location
from src.shiftdesk.shiftdesk.container import wire
from src.shiftdesk.shiftdesk.core.enums import (
    AssignmentStatus,
    ImportKind,
    RecipientType,
    RequestStatus,
    TicketKind,
    TicketStatus,
    TimeEntryStatus,
)
from src.shiftdesk.shiftdesk.core.exceptions import ConflictError
from src.shiftdesk.shiftdesk.coverage.model import DiscrepancyTicket
from src.shiftdesk.shiftdesk.employees.model import AvailabilityOverride, Employee
from src.shiftdesk.shiftdesk.imports.model import ImportBatch
from src.shiftdesk.shiftdesk.notifications.model import NewNotification, Notification
from src.shiftdesk.shiftdesk.requests.model import ShiftRequest
from src.shiftdesk.shiftdesk.shifts.model import Assignment, Shift, ShiftDraft
from src.shiftdesk.shiftdesk.timeclock.model import TimeEntry


class InMemoryEmployees:
    def __init__(self):
        self.rows: dict[int, Employee] = {}
        self.availability: dict[tuple[int, date], AvailabilityOverride] = {}
        self._id = 0

    def add(self, first_name: str, last_name: str = "", *, company_id: int = 1, is_active: bool = True) -> int:
        return self.create(company_id=company_id, first_name=first_name, last_name=last_name, is_active=is_active)

    def list_for_company(self, company_id: int, *, active_only: bool = False):
        rows = [e for e in self.rows.values() if e.company_id == company_id]
        if active_only:
            rows = [e for e in rows if e.is_active]
        return sorted(rows, key=lambda e: (e.first_name, e.last_name))

    def get_by_id(self, company_id: int, employee_id: int) -> Optional[Employee]:
        emp = self.rows.get(employee_id)
        return emp if emp and emp.company_id == company_id else None

    def create(self, *, company_id: int, first_name: str, last_name: str, is_active: bool = True) -> int:
        self._id += 1
        self.rows[self._id] = Employee(self._id, company_id, first_name, last_name, is_active)
        return self._id

    def set_active(self, company_id: int, employee_id: int, *, is_active: bool) -> bool:
        emp = self.get_by_id(company_id, employee_id)
        if not emp:
            return False
        self.rows[employee_id] = dataclasses.replace(emp, is_active=is_active)
        return True

    def upsert_availability(self, *, company_id, employee_id, day, is_available, reason=None, source="manual"):
        self.availability[(employee_id, day)] = AvailabilityOverride(
            employee_id=employee_id,
            company_id=company_id,
            date=day,
            is_available=is_available,
            reason=reason,
            source=source,
        )

    def list_availability(self, company_id: int, *, start: date, end: date):
        return [
            a for a in self.availability.values() if a.company_id == company_id and start <= a.date <= end
        ]


class InMemoryClients:
    def __init__(self):
        self.rows: dict[int, Client] = {}
        self.deleted: set[int] = set()
        self.locations: dict[int, Location] = {}
        self._id = 0

    def add(self, name: str, *, company_id: int = 1) -> int:
        return self.create_client(company_id=company_id, name=name)

    def list_clients(self, company_id: int):
        return [c for c in self.rows.values() if c.company_id == company_id and c.client_id not in self.deleted]

    def create_client(self, *, company_id: int, name: str, notes: Optional[str] = None) -> int:
        self._id += 1
        self.rows[self._id] = Client(self._id, company_id, name, notes)
        return self._id

    def soft_delete_client(self, company_id: int, client_id: int) -> bool:
        if client_id not in self.rows or client_id in self.deleted:
            return False
        self.deleted.add(client_id)
        return True

    def list_locations(self, company_id: int):
        return [loc for loc in self.locations.values() if loc.company_id == company_id]

    def create_location(self, *, company_id: int, name: str, notes: Optional[str] = None) -> int:
        location_id = len(self.locations) + 1
        self.locations[location_id] = Location(location_id, company_id, name, notes)
        return location_id


class InMemoryShifts:
    def __init__(self):
        self.shifts: dict[int, Shift] = {}
        self.assignments: dict[int, Assignment] = {}
        self._shift_id = 0
        self._assignment_id = 0

    def create_shift(self, *, company_id: int, draft: ShiftDraft, import_batch_id: Optional[int] = None) -> int:
        self._shift_id += 1
        self.shifts[self._shift_id] = Shift(
            shift_id=self._shift_id,
            company_id=company_id,
            import_batch_id=import_batch_id,
            **dataclasses.asdict(draft),
        )
        return self._shift_id

    def get_by_id(self, company_id: int, shift_id: int) -> Optional[Shift]:
        shift = self.shifts.get(shift_id)
        return shift if shift and shift.company_id == company_id else None

    def update_shift(self, company_id: int, shift_id: int, changes: Mapping[str, Any]) -> bool:
        shift = self.get_by_id(company_id, shift_id)
        if not shift:
            return False
        self.shifts[shift_id] = dataclasses.replace(shift, **dict(changes))
        return True

    def list_range(self, company_id: int, *, start: date, end: date):
        rows = [s for s in self.shifts.values() if s.company_id == company_id and start <= s.date <= end]
        return sorted(rows, key=lambda s: (s.date, s.start_time, s.shift_id))

    def find_by_code(self, company_id: int, *, shift_code: str, day: date) -> Optional[Shift]:
        for shift in sorted(self.shifts.values(), key=lambda s: s.shift_id):
            if shift.company_id == company_id and shift.shift_code == shift_code and shift.date == day:
                return shift
        return None

    def create_assignment(self, *, company_id, shift_id, employee_id, status, import_batch_id=None) -> int:
        if any(a.shift_id == shift_id and a.employee_id == employee_id for a in self.assignments.values()):
            raise ConflictError("Duplicate assignment")
        self._assignment_id += 1
        self.assignments[self._assignment_id] = Assignment(
            self._assignment_id, company_id, shift_id, employee_id, status, import_batch_id
        )
        return self._assignment_id

    def get_assignment(self, company_id: int, assignment_id: int) -> Optional[Assignment]:
        a = self.assignments.get(assignment_id)
        return a if a and a.company_id == company_id else None

    def delete_assignment(self, company_id: int, assignment_id: int) -> bool:
        if not self.get_assignment(company_id, assignment_id):
            return False
        del self.assignments[assignment_id]
        return True

    def list_assignments(self, company_id: int, shift_ids: Sequence[int]):
        wanted = set(shift_ids)
        return [a for a in self.assignments.values() if a.company_id == company_id and a.shift_id in wanted]

    def list_employee_shifts(self, company_id: int, *, employee_id: int, day: date):
        ids = {
            a.shift_id
            for a in self.assignments.values()
            if a.company_id == company_id and a.employee_id == employee_id and a.status != AssignmentStatus.REJECTED
        }
        rows = [s for s in self.shifts.values() if s.shift_id in ids and s.date == day]
        return sorted(rows, key=lambda s: (s.start_time, s.shift_id))

    def delete_by_batches(self, company_id: int, batch_ids: Sequence[int], *, date_from=None, date_to=None) -> int:
        ids = set(batch_ids)
        doomed = {
            s.shift_id
            for s in self.shifts.values()
            if s.company_id == company_id
            and s.import_batch_id in ids
            and (date_from is None or s.date >= date_from)
            and (date_to is None or s.date <= date_to)
        }
        self.assignments = {k: a for k, a in self.assignments.items() if a.shift_id not in doomed}
        for shift_id in doomed:
            del self.shifts[shift_id]
        return len(doomed)


class InMemoryTimeEntries:
    def __init__(self):
        self.rows: dict[int, TimeEntry] = {}
        self._id = 0

    def create_entry(
        self,
        *,
        company_id,
        employee_id,
        clock_in,
        clock_out,
        status,
        shift_id=None,
        break_minutes=0,
        notes=None,
        import_batch_id=None,
    ) -> int:
        for e in self.rows.values():
            if e.employee_id != employee_id:
                continue
            if e.clock_in == clock_in or (clock_out is None and e.is_open):
                raise ConflictError("Duplicate time entry")
        self._id += 1
        self.rows[self._id] = TimeEntry(
            entry_id=self._id,
            company_id=company_id,
            employee_id=employee_id,
            clock_in=clock_in,
            clock_out=clock_out,
            shift_id=shift_id,
            break_minutes=break_minutes,
            status=status,
            notes=notes,
            import_batch_id=import_batch_id,
        )
        return self._id

    def get_by_id(self, company_id: int, entry_id: int) -> Optional[TimeEntry]:
        e = self.rows.get(entry_id)
        return e if e and e.company_id == company_id else None

    def get_open_for_employee(self, company_id: int, employee_id: int) -> Optional[TimeEntry]:
        for e in self.rows.values():
            if e.company_id == company_id and e.employee_id == employee_id and e.is_open:
                return e
        return None

    def close_entry(self, company_id: int, entry_id: int, *, clock_out: datetime) -> bool:
        e = self.get_by_id(company_id, entry_id)
        if not e or not e.is_open:
            return False
        self.rows[entry_id] = dataclasses.replace(e, clock_out=clock_out)
        return True

    def admin_update_entry(self, company_id, entry_id, *, clock_in, clock_out, break_minutes, notes=None) -> bool:
        e = self.get_by_id(company_id, entry_id)
        if not e:
            return False
        self.rows[entry_id] = dataclasses.replace(
            e, clock_in=clock_in, clock_out=clock_out, break_minutes=break_minutes, notes=notes
        )
        return True

    def set_status(self, company_id: int, entry_id: int, *, status: TimeEntryStatus) -> bool:
        e = self.get_by_id(company_id, entry_id)
        if not e:
            return False
        self.rows[entry_id] = dataclasses.replace(e, status=status)
        return True

    def list_for_employee_between(self, company_id: int, *, employee_id: int, start: datetime, end: datetime):
        return [
            e
            for e in sorted(self.rows.values(), key=lambda e: e.clock_in)
            if e.company_id == company_id
            and e.employee_id == employee_id
            and e.clock_in < end
            and (e.clock_out is None or e.clock_out > start)
        ]

    def list_for_shifts(self, company_id: int, shift_ids: Sequence[int]):
        wanted = set(shift_ids)
        return [e for e in self.rows.values() if e.company_id == company_id and e.shift_id in wanted]

    def delete_by_batches(self, company_id: int, batch_ids: Sequence[int], *, date_from=None, date_to=None) -> int:
        ids = set(batch_ids)
        doomed = [
            k
            for k, e in self.rows.items()
            if e.company_id == company_id
            and e.import_batch_id in ids
            and (date_from is None or e.clock_in.date() >= date_from)
            and (date_to is None or e.clock_in.date() <= date_to)
        ]
        for k in doomed:
            del self.rows[k]
        return len(doomed)


class InMemoryTickets:
    def __init__(self):
        self.rows: dict[int, DiscrepancyTicket] = {}

    def create_if_absent(self, *, company_id, shift_id, employee_id, kind: TicketKind, description=None) -> bool:
        if any((t.shift_id, t.employee_id, t.kind) == (shift_id, employee_id, kind) for t in self.rows.values()):
            return False
        ticket_id = len(self.rows) + 1
        self.rows[ticket_id] = DiscrepancyTicket(ticket_id, company_id, shift_id, employee_id, kind, description)
        return True

    def list_for_shifts(self, company_id: int, shift_ids: Sequence[int]):
        wanted = set(shift_ids)
        return [t for t in self.rows.values() if t.company_id == company_id and t.shift_id in wanted]

    def set_status(self, company_id: int, ticket_id: int, *, status: TicketStatus) -> bool:
        t = self.rows.get(ticket_id)
        if not t or t.company_id != company_id:
            return False
        self.rows[ticket_id] = dataclasses.replace(t, status=status)
        return True


class InMemoryNotifications:
    def __init__(self):
        self.rows: list[Notification] = []

    def create_many(self, company_id: int, notifications: Sequence[NewNotification]) -> int:
        for n in notifications:
            self.rows.append(
                Notification(
                    notification_id=len(self.rows) + 1,
                    company_id=company_id,
                    recipient_id=n.recipient_id,
                    recipient_type=n.recipient_type,
                    type=n.type,
                    title=n.title,
                    body=n.body,
                    metadata=dict(n.metadata),
                )
            )
        return len(notifications)

    def list_for_recipient(
        self,
        company_id: int,
        *,
        recipient_type: RecipientType,
        recipient_id: int,
        unread_only: bool = False,
        limit: int = 50,
    ):
        rows = [
            n
            for n in reversed(self.rows)
            if n.company_id == company_id and n.recipient_type == recipient_type and n.recipient_id == recipient_id
        ]
        if unread_only:
            rows = [n for n in rows if n.read_at is None]
        return rows[:limit]

    def mark_read(self, company_id: int, notification_id: int) -> bool:
        for i, n in enumerate(self.rows):
            if n.notification_id == notification_id and n.company_id == company_id:
                self.rows[i] = dataclasses.replace(n, read_at=datetime(2026, 1, 1))
                return True
        return False

    def of_type(self, kind) -> list[Notification]:
        return [n for n in self.rows if n.type == kind]


class InMemoryRequests:
    def __init__(self):
        self.rows: dict[int, ShiftRequest] = {}

    def create(self, *, company_id: int, shift_id: int, employee_id: int) -> int:
        request_id = len(self.rows) + 1
        self.rows[request_id] = ShiftRequest(request_id, company_id, shift_id, employee_id)
        return request_id

    def get_by_id(self, company_id: int, request_id: int) -> Optional[ShiftRequest]:
        r = self.rows.get(request_id)
        return r if r and r.company_id == company_id else None

    def find_pending(self, company_id: int, *, shift_id: int, employee_id: int) -> Optional[ShiftRequest]:
        for r in self.rows.values():
            if (r.company_id, r.shift_id, r.employee_id, r.status) == (
                company_id,
                shift_id,
                employee_id,
                RequestStatus.PENDING,
            ):
                return r
        return None

    def decide(self, company_id, request_id, *, status, rejection_reason=None) -> bool:
        r = self.get_by_id(company_id, request_id)
        if not r or r.status != RequestStatus.PENDING:
            return False
        self.rows[request_id] = dataclasses.replace(r, status=status, rejection_reason=rejection_reason)
        return True

    def list_by_status(self, company_id: int, *, status: RequestStatus, limit: int = 200):
        return [r for r in self.rows.values() if r.company_id == company_id and r.status == status][:limit]


@dataclass
class InMemoryBatches:
    rows: dict[int, ImportBatch] = field(default_factory=dict)
    next_id: int = 0

    def find_batches(self, company_id: int, *, kind: ImportKind, range_start: date, range_end: date):
        return [
            b
            for b in self.rows.values()
            if (b.company_id, b.kind) == (company_id, kind)
            and b.range_start <= range_end
            and b.range_end >= range_start
        ]

    def create_batch(self, *, company_id, kind, range_start, range_end, file_name=None) -> int:
        self.next_id += 1
        self.rows[self.next_id] = ImportBatch(self.next_id, company_id, kind, range_start, range_end, file_name)
        return self.next_id

    def delete_batches(self, company_id: int, batch_ids: Sequence[int]) -> int:
        removed = 0
        for batch_id in batch_ids:
            if self.rows.pop(batch_id, None) is not None:
                removed += 1
        return removed


@pytest.fixture
def store():
    return SimpleNamespace(
        employees=InMemoryEmployees(),
        clients=InMemoryClients(),
        shifts=InMemoryShifts(),
        time_entries=InMemoryTimeEntries(),
        tickets=InMemoryTickets(),
        notifications=InMemoryNotifications(),
        requests=InMemoryRequests(),
        batches=InMemoryBatches(),
    )


@pytest.fixture
def settings():
    return {}


@pytest.fixture
def container(store, settings):
    return wire(
        employees_repo=store.employees,
        clients_repo=store.clients,
        shifts_repo=store.shifts,
        time_entries_repo=store.time_entries,
        tickets_repo=store.tickets,
        notifications_repo=store.notifications,
        requests_repo=store.requests,
        batches_repo=store.batches,
        settings=settings,
    )
