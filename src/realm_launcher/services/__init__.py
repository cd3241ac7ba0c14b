"""Service layer: persistence, config synchronization, launch and probing."""

from .directives import Directive, merge_directives
from .errors import (
    AppError,
    DeserializationError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    FileSystemError,
    NotFoundError,
    UserFriendlyError,
    ValidationError,
    get_error_service,
    handle_error,
)
from .launcher import LaunchService, spawn_client
from .profile_store import ProfileStore
from .reachability import ReachabilityService, check_realm_status
from .realmlist import RealmlistSyncService, sync_realmlist

__all__ = [
    "AppError",
    "DeserializationError",
    "Directive",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "FileSystemError",
    "LaunchService",
    "NotFoundError",
    "ProfileStore",
    "ReachabilityService",
    "RealmlistSyncService",
    "UserFriendlyError",
    "ValidationError",
    "check_realm_status",
    "get_error_service",
    "handle_error",
    "merge_directives",
    "spawn_client",
    "sync_realmlist",
]
