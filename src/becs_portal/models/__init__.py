"""SQLModel table definitions for the portal."""

from __future__ import annotations

from .attendance import AttendanceRecord, AttendanceState, hours_between
from .common import TimestampMixin, as_utc, today, utcnow
from .invoice import Invoice, InvoiceStatus
from .leave import LeaveApplication, LeaveStatus, LeaveType, inclusive_days
from .project import Consortium, Project, ProjectStatus, ProjectType
from .task import OVERDUE, Review, ReviewDecision, Task, TaskPriority, TaskStatus
from .template import DocumentTemplate
from .user import PRIVILEGED_ROLES, User, UserRole

__all__ = [
    "OVERDUE",
    "PRIVILEGED_ROLES",
    "AttendanceRecord",
    "AttendanceState",
    "Consortium",
    "DocumentTemplate",
    "Invoice",
    "InvoiceStatus",
    "LeaveApplication",
    "LeaveStatus",
    "LeaveType",
    "Project",
    "ProjectStatus",
    "ProjectType",
    "Review",
    "ReviewDecision",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TimestampMixin",
    "User",
    "UserRole",
    "as_utc",
    "hours_between",
    "inclusive_days",
    "today",
    "utcnow",
]
