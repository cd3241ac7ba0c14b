"""Data models for the realm launcher."""

from .launch import LaunchPlan
from .profile import DEFAULT_EXECUTABLE, DEFAULT_PORT, ProfileCollection, ServerProfile
from .settings import DEFAULT_LOCALE, AppSettings
from .status import RealmStatus

__all__ = [
    "AppSettings",
    "DEFAULT_EXECUTABLE",
    "DEFAULT_LOCALE",
    "DEFAULT_PORT",
    "LaunchPlan",
    "ProfileCollection",
    "RealmStatus",
    "ServerProfile",
]
