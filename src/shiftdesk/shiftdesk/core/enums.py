from __future__ import annotations

from enum import Enum


class ShiftStatus(str, Enum):
    """Lifecycle of a planned shift."""

    DRAFT = "draft"
    PUBLISHED = "published"


class AssignmentStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class TimeEntryStatus(str, Enum):
    """Review state of an attendance record."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RequestStatus(str, Enum):
    """State of an open-shift claim request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TicketKind(str, Enum):
    MISSING_ATTENDANCE = "missing_attendance"
    UNASSIGNED_ATTENDANCE = "unassigned_attendance"


class TicketStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class RecipientType(str, Enum):
    EMPLOYEE = "employee"
    COMPANY = "company"


class ImportKind(str, Enum):
    SCHEDULE = "schedule"
    TIME_CLOCK = "time_clock"


class NotificationType(str, Enum):
    SHIFT_CHANGED = "shift_changed"
    SHIFT_UPDATED = "shift_updated"
    SHIFT_ASSIGNED = "shift_assigned"
    SHIFT_PUBLISHED = "shift_published"
    SHIFT_UNASSIGNED = "shift_unassigned"
    OPEN_SHIFT = "open_shift"
    CLAIM_REQUESTED = "claim_requested"
    CLAIM_APPROVED = "claim_approved"
    CLAIM_REJECTED = "claim_rejected"
