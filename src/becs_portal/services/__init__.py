"""Service layer orchestrating repositories and business rules."""

from __future__ import annotations

from .attendance import AttendanceService
from .auth import AuthService, TokenPair
from .bulk_import import BulkImportService
from .dashboard import DashboardService
from .invoices import InvoiceService
from .leave import LeaveService
from .projects import ProjectService
from .tasks import TaskService
from .templates import TemplateService
from .users import UserService

__all__ = [
    "AttendanceService",
    "AuthService",
    "BulkImportService",
    "DashboardService",
    "InvoiceService",
    "LeaveService",
    "ProjectService",
    "TaskService",
    "TemplateService",
    "TokenPair",
    "UserService",
]
