"""Database repositories for encapsulating persistence logic."""

from __future__ import annotations

from .attendance import AttendanceRepository
from .base import BaseRepository
from .invoices import InvoiceRepository
from .leave import LeaveApplicationRepository
from .projects import ProjectRepository
from .tasks import ReviewRepository, TaskFilters, TaskRepository
from .templates import TemplateRepository
from .users import UserRepository

__all__ = [
    "AttendanceRepository",
    "BaseRepository",
    "InvoiceRepository",
    "LeaveApplicationRepository",
    "ProjectRepository",
    "ReviewRepository",
    "TaskFilters",
    "TaskRepository",
    "TemplateRepository",
    "UserRepository",
]
