from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .clients.mysql_client_repository import MySQLClientRepository
from .clients.repository import ClientRepository
from .conflicts.detector import ConflictDetector
from .core.constants import DEFAULT_IMPORT_MAX_ROWS, DEFAULT_PROVISION_DENYLIST
from .core.events import EventBus
from .coverage.mysql_ticket_repository import MySQLTicketRepository
from .coverage.repository import TicketRepository
from .coverage.service import CoverageService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .imports.mysql_import_repository import MySQLImportBatchRepository
from .imports.repository import ImportBatchRepository
from .imports.schedule_import import ScheduleImportService
from .imports.timeclock_import import TimeClockImportService
from .notifications.dispatcher import NotificationDispatcher
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .requests.mysql_request_repository import MySQLShiftRequestRepository
from .requests.repository import ShiftRequestRepository
from .requests.service import ShiftRequestService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.service import ShiftService
from .timeclock.mysql_time_entry_repository import MySQLTimeEntryRepository
from .timeclock.repository import TimeEntryRepository
from .timeclock.service import TimeClockService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    events: EventBus
    import_max_rows: int

    employees_repo: EmployeeRepository
    clients_repo: ClientRepository
    shifts_repo: ShiftRepository
    time_entries_repo: TimeEntryRepository
    tickets_repo: TicketRepository
    notifications_repo: NotificationRepository
    requests_repo: ShiftRequestRepository
    batches_repo: ImportBatchRepository

    conflict_detector: ConflictDetector
    dispatcher: NotificationDispatcher
    schedule_import_service: ScheduleImportService
    timeclock_import_service: TimeClockImportService
    coverage_service: CoverageService
    shift_service: ShiftService
    timeclock_service: TimeClockService
    request_service: ShiftRequestService


def wire(
    *,
    employees_repo: EmployeeRepository,
    clients_repo: ClientRepository,
    shifts_repo: ShiftRepository,
    time_entries_repo: TimeEntryRepository,
    tickets_repo: TicketRepository,
    notifications_repo: NotificationRepository,
    requests_repo: ShiftRequestRepository,
    batches_repo: ImportBatchRepository,
    settings: Optional[Mapping[str, Any]] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build services on top of any set of repositories (MySQL in production, fakes in tests)."""
    settings = dict(settings or {})
    denylist = tuple(settings.get("PROVISION_DENYLIST") or DEFAULT_PROVISION_DENYLIST)
    events = EventBus()

    conflict_detector = ConflictDetector(shifts_repo, time_entries_repo)
    dispatcher = NotificationDispatcher(notifications_repo, shifts_repo, employees_repo)
    import_deps = dict(
        employees=employees_repo,
        clients=clients_repo,
        batches=batches_repo,
        events=events,
        denylist=denylist,
    )

    return Container(
        conn=conn,
        events=events,
        import_max_rows=int(settings.get("IMPORT_MAX_ROWS") or DEFAULT_IMPORT_MAX_ROWS),
        employees_repo=employees_repo,
        clients_repo=clients_repo,
        shifts_repo=shifts_repo,
        time_entries_repo=time_entries_repo,
        tickets_repo=tickets_repo,
        notifications_repo=notifications_repo,
        requests_repo=requests_repo,
        batches_repo=batches_repo,
        conflict_detector=conflict_detector,
        dispatcher=dispatcher,
        schedule_import_service=ScheduleImportService(
            shifts=shifts_repo, conflicts=conflict_detector, **import_deps
        ),
        timeclock_import_service=TimeClockImportService(
            shifts=shifts_repo, time_entries=time_entries_repo, conflicts=conflict_detector, **import_deps
        ),
        coverage_service=CoverageService(
            shifts_repo,
            time_entries_repo,
            tickets_repo,
            employees_repo,
            ticket_unassigned=bool(settings.get("TICKET_UNASSIGNED_ATTENDANCE", False)),
        ),
        shift_service=ShiftService(shifts_repo, employees_repo, conflict_detector, dispatcher, events),
        timeclock_service=TimeClockService(
            time_entries_repo, employees_repo, shifts_repo, conflict_detector, events
        ),
        request_service=ShiftRequestService(
            requests_repo, shifts_repo, employees_repo, conflict_detector, dispatcher, events
        ),
    )


def build_container(*, db_config: dict, settings: Optional[Mapping[str, Any]] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire(
        employees_repo=MySQLEmployeeRepository(conn),
        clients_repo=MySQLClientRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        time_entries_repo=MySQLTimeEntryRepository(conn),
        tickets_repo=MySQLTicketRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        requests_repo=MySQLShiftRequestRepository(conn),
        batches_repo=MySQLImportBatchRepository(conn),
        settings=settings,
        conn=conn,
    )
