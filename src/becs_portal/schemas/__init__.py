"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .attendance import AttendanceCreate, AttendanceRead, AttendanceSummary, ClockRequest
from .auth import (
    AuthResponse,
    AuthTokens,
    LogoutRequest,
    LogoutResponse,
    RefreshRequest,
    RefreshResponse,
    TokenPayload,
)
from .bulk_import import BulkImportRequest, BulkImportResult, BulkImportRowError, ImportType
from .dashboard import DashboardStats
from .invoice import InvoiceCreate, InvoiceRead, InvoiceSummary, InvoiceUpdate
from .leave import LeaveApplicationCreate, LeaveApplicationRead, LeaveDecision
from .project import ConsortiumGroup, GroupedProjects, ProjectCreate, ProjectRead, ProjectUpdate
from .system import ErrorResponse, HealthCheckResponse, RootResponse
from .task import (
    DeliverableBatch,
    DeliverableBatchResult,
    DeliverableItem,
    ReviewCreate,
    ReviewOutcome,
    ReviewRead,
    TaskCreate,
    TaskListResponse,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)
from .template import TemplateCategory, TemplateRead
from .user import UserCreate, UserPublic, UserSelfUpdate, UserUpdate

__all__ = [
    "AttendanceCreate",
    "AttendanceRead",
    "AttendanceSummary",
    "AuthResponse",
    "AuthTokens",
    "BulkImportRequest",
    "BulkImportResult",
    "BulkImportRowError",
    "ClockRequest",
    "ConsortiumGroup",
    "DashboardStats",
    "DeliverableBatch",
    "DeliverableBatchResult",
    "DeliverableItem",
    "ErrorResponse",
    "GroupedProjects",
    "HealthCheckResponse",
    "ImportType",
    "InvoiceCreate",
    "InvoiceRead",
    "InvoiceSummary",
    "InvoiceUpdate",
    "LeaveApplicationCreate",
    "LeaveApplicationRead",
    "LeaveDecision",
    "LogoutRequest",
    "LogoutResponse",
    "ProjectCreate",
    "ProjectRead",
    "ProjectUpdate",
    "RefreshRequest",
    "RefreshResponse",
    "ReviewCreate",
    "ReviewOutcome",
    "ReviewRead",
    "RootResponse",
    "TaskCreate",
    "TaskListResponse",
    "TaskRead",
    "TaskStatusUpdate",
    "TaskUpdate",
    "TemplateCategory",
    "TemplateRead",
    "TokenPayload",
    "UserCreate",
    "UserPublic",
    "UserSelfUpdate",
    "UserUpdate",
]
