"""Resolve a server profile and launch the game client against it."""

import subprocess
from collections.abc import Callable
from pathlib import Path

import structlog

from ..models import LaunchPlan
from ..models.profile import DEFAULT_EXECUTABLE
from .errors import FileSystemError, ValidationError
from .profile_store import ProfileStore
from .realmlist import RealmlistSyncService

log = structlog.stdlib.get_logger()

Spawner = Callable[[LaunchPlan], object]


def spawn_client(plan: LaunchPlan) -> subprocess.Popen[bytes]:
    """Start the client detached from our stdio, inside its install folder."""
    return subprocess.Popen(
        [str(plan.executable)],
        cwd=str(plan.install_path),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


class LaunchService:
    """Resolve, synchronize, then start the client for a saved server."""

    def __init__(
        self,
        store: ProfileStore,
        sync_service: RealmlistSyncService | None = None,
        spawner: Spawner = spawn_client,
    ) -> None:
        self.store = store
        self.sync_service = sync_service or RealmlistSyncService()
        self.spawner = spawner

    def resolve(self, profile_id: str) -> LaunchPlan:
        """Work out where and what to launch for a profile.

        Raises:
            NotFoundError: If the profile does not exist
            ValidationError: If no install path is set or the executable is missing
        """
        profile = self.store.get_profile(profile_id)
        settings = self.store.load_settings()

        install = _first_set(profile.install_path, settings.default_install_path)
        if install is None:
            raise ValidationError(
                "No game path set. Configure it in Settings or for this server.",
                field="installPath",
            )
        install_path = Path(install)

        exe_name = profile.executable_name.strip() or DEFAULT_EXECUTABLE
        executable = install_path / exe_name
        if not executable.exists():
            raise ValidationError(
                f"{exe_name} not found at {executable}",
                field="executableName",
                value=str(executable),
            )

        return LaunchPlan(
            profile=profile,
            install_path=install_path,
            executable=executable,
            locale=settings.locale,
        )

    def launch(self, profile_id: str) -> LaunchPlan:
        """Synchronize the client config and start the client.

        Nothing is started if resolution or synchronization fails.

        Raises:
            NotFoundError: If the profile does not exist
            ValidationError: If the installation cannot be used
            FileSystemError: If config files cannot be written or the
                process cannot be started
        """
        plan = self.resolve(profile_id)
        self.sync_service.sync(
            plan.install_path,
            plan.profile.realmlist_host,
            plan.locale,
            plan.profile.account_name,
        )

        try:
            self.spawner(plan)
        except OSError as e:
            raise FileSystemError(
                f"Could not start {plan.executable.name}",
                original_error=e,
                path=str(plan.executable),
                operation="spawn",
            ) from e

        log.info(
            "Client launched",
            profile_id=profile_id,
            executable=str(plan.executable),
            host=plan.profile.realmlist_host,
        )
        return plan


def _first_set(*values: str | None) -> str | None:
    """First value that is not None or blank, stripped."""
    for value in values:
        if value is not None and value.strip():
            return value.strip()
    return None
