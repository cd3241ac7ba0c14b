"""Tests for resolving and launching a server profile."""

import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from realm_launcher.models import AppSettings, LaunchPlan, ServerProfile
from realm_launcher.services import (
    FileSystemError,
    LaunchService,
    NotFoundError,
    ProfileStore,
    RealmlistSyncService,
    ValidationError,
)


class LauncherFixture:
    """A data directory, a game folder and a launcher with a fake spawner."""

    def __init__(self, root: Path) -> None:
        self.store = ProfileStore(root / "data")
        self.game = root / "game"
        self.game.mkdir()
        self.spawner = Mock()
        self.launcher = LaunchService(self.store, spawner=self.spawner)

    def add(self, **overrides: object) -> ServerProfile:
        fields: dict[str, object] = {"id": "srv", "name": "Test", "realmlist_host": "logon.test"}
        fields.update(overrides)
        return self.store.add_profile(ServerProfile(**fields)).servers[-1]  # type: ignore[arg-type]


def test_launch_syncs_then_spawns() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        fx = LauncherFixture(Path(temp_dir))
        (fx.game / "Wow.exe").touch()
        fx.add(install_path=str(fx.game), account_name="hero")

        plan = fx.launcher.launch("srv")

        assert plan.executable == fx.game / "Wow.exe"
        assert plan.locale == "enUS"
        fx.spawner.assert_called_once_with(plan)
        config = (fx.game / "WTF" / "Config.wtf").read_bytes().decode("utf-8")
        assert config == 'set realmlist logon.test\r\nSET accountName "hero"'
        assert (fx.game / "Data" / "enUS" / "realmlist.wtf").exists()


def test_resolve_falls_back_to_default_path_and_locale() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        fx = LauncherFixture(Path(temp_dir))
        (fx.game / "WowClassic.exe").touch()
        fx.store.save_settings(AppSettings(default_install_path=str(fx.game), realmlist_locale="ruRU"))
        fx.add(executable_name="WowClassic.exe")

        plan = fx.launcher.resolve("srv")

        assert plan == LaunchPlan(
            profile=fx.store.get_profile("srv"),
            install_path=fx.game,
            executable=fx.game / "WowClassic.exe",
            locale="ruRU",
        )


def test_profile_path_overrides_default() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        fx = LauncherFixture(Path(temp_dir))
        other = Path(temp_dir) / "other"
        other.mkdir()
        (fx.game / "Wow.exe").touch()
        fx.store.save_settings(AppSettings(default_install_path=str(other)))
        fx.add(install_path=str(fx.game))

        assert fx.launcher.resolve("srv").install_path == fx.game


def test_blank_profile_path_falls_back_to_default() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        fx = LauncherFixture(Path(temp_dir))
        (fx.game / "Wow.exe").touch()
        fx.store.save_settings(AppSettings(default_install_path=f"  {fx.game}  "))
        fx.add(install_path="   ")

        assert fx.launcher.resolve("srv").install_path == fx.game


def test_unknown_profile_is_not_found() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        fx = LauncherFixture(Path(temp_dir))

        with pytest.raises(NotFoundError):
            fx.launcher.launch("missing")
        fx.spawner.assert_not_called()


def test_no_install_path_is_a_validation_error() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        fx = LauncherFixture(Path(temp_dir))
        fx.add()

        with pytest.raises(ValidationError) as exc_info:
            fx.launcher.launch("srv")

        assert "path" in exc_info.value.message.lower()
        fx.spawner.assert_not_called()


def test_missing_executable_names_file_and_path() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        fx = LauncherFixture(Path(temp_dir))
        fx.add(install_path=str(fx.game), executable_name="Missing.exe")

        with pytest.raises(ValidationError) as exc_info:
            fx.launcher.launch("srv")

        assert "Missing.exe" in exc_info.value.message
        assert str(fx.game) in exc_info.value.message
        assert not (fx.game / "realmlist.wtf").exists()
        fx.spawner.assert_not_called()


def test_sync_failure_aborts_launch() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        fx = LauncherFixture(Path(temp_dir))
        (fx.game / "Wow.exe").touch()
        fx.add(install_path=str(fx.game))
        failing_sync = Mock(spec=RealmlistSyncService)
        failing_sync.sync.side_effect = FileSystemError("Could not write Config.wtf")
        launcher = LaunchService(fx.store, sync_service=failing_sync, spawner=fx.spawner)

        with pytest.raises(FileSystemError):
            launcher.launch("srv")

        fx.spawner.assert_not_called()


def test_spawn_failure_is_wrapped() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        fx = LauncherFixture(Path(temp_dir))
        (fx.game / "Wow.exe").touch()
        fx.add(install_path=str(fx.game))
        fx.spawner.side_effect = PermissionError("Exec format error")

        with pytest.raises(FileSystemError) as exc_info:
            fx.launcher.launch("srv")

        assert exc_info.value.operation == "spawn"
        assert isinstance(exc_info.value.original_error, PermissionError)
        # Config was already synchronized before the spawn attempt
        assert (fx.game / "realmlist.wtf").exists()
