"""Profile store for server profiles and launcher settings.

Both documents live as pretty-printed JSON in the launcher's data directory.
Nothing is cached: every call re-reads the file, so callers always get fresh
objects and persist changes by calling back into the store.
"""

import json
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Any

import structlog

from ..models import AppSettings, ProfileCollection, ServerProfile
from ..models.profile import DEFAULT_EXECUTABLE, DEFAULT_PORT
from ..models.settings import DEFAULT_LOCALE
from .errors import DeserializationError, FileSystemError, NotFoundError, ValidationError

log = structlog.stdlib.get_logger()

SERVERS_FILE = "servers.json"
SETTINGS_FILE = "settings.json"


class ProfileStore:
    """Load and save server profiles and settings in a data directory."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir: Path = data_dir

    @property
    def servers_path(self) -> Path:
        return self.data_dir / SERVERS_FILE

    @property
    def settings_path(self) -> Path:
        return self.data_dir / SETTINGS_FILE

    # Profiles

    def load_profiles(self) -> ProfileCollection:
        """Load the profile collection, empty if the file does not exist.

        Raises:
            DeserializationError: If the file is not a valid servers document
            FileSystemError: If the file exists but cannot be read
        """
        data = self._read_json(self.servers_path)
        if data is None:
            log.debug("Servers file not found, starting empty", path=str(self.servers_path))
            return ProfileCollection()

        if not isinstance(data, dict) or not isinstance(data.get("servers"), list):
            raise DeserializationError(
                "Servers file must be an object with a 'servers' list",
                path=str(self.servers_path),
            )

        servers: list[ServerProfile] = []
        seen: set[str] = set()
        for index, raw in enumerate(data["servers"]):
            profile = self._dict_to_profile(raw, index)
            if profile.id in seen:
                raise self._shape_error(f"servers[{index}].id '{profile.id}' is a duplicate")
            seen.add(profile.id)
            servers.append(profile)

        log.debug("Profiles loaded", count=len(servers))
        return ProfileCollection(servers=servers)

    def save_profiles(self, collection: ProfileCollection) -> None:
        """Persist the full collection, replacing the file.

        Raises:
            ValidationError: If two profiles share an id
            FileSystemError: If the file cannot be written
        """
        ids = collection.ids()
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValidationError(
                "Profile ids must be unique",
                field="id",
                value=", ".join(duplicates),
            )

        data = {"servers": [self._profile_to_dict(p) for p in collection.servers]}
        self._write_json(self.servers_path, data)
        log.info("Profiles saved", count=len(collection.servers), path=str(self.servers_path))

    def get_profile(self, profile_id: str) -> ServerProfile:
        """Look up one profile by id.

        Raises:
            NotFoundError: If no profile has this id
        """
        profile = self.load_profiles().find(profile_id)
        if profile is None:
            raise NotFoundError("Server not found", profile_id=profile_id)
        return profile

    def add_profile(self, profile: ServerProfile) -> ProfileCollection:
        """Append a new profile with defaults applied and persist.

        An empty id is replaced by a fresh one. A supplied id that already
        exists is rejected.
        """
        profile = self._normalize(profile)
        collection = self.load_profiles()

        if not profile.id:
            profile = _replace_id(profile, self._new_id(collection))
        elif collection.find(profile.id) is not None:
            raise ValidationError(
                "A server with this id already exists",
                field="id",
                value=profile.id,
            )

        updated = ProfileCollection(servers=[*collection.servers, profile])
        self.save_profiles(updated)
        log.info("Profile added", profile_id=profile.id, host=profile.realmlist_host)
        return updated

    def update_profile(self, profile_id: str, patch: ServerProfile) -> ProfileCollection:
        """Replace the mutable fields of a profile, keeping its id.

        An unknown id changes nothing and the patch is not validated; the
        collection is still persisted.
        """
        collection = self.load_profiles()
        if collection.find(profile_id) is None:
            log.debug("Profile to update not found", profile_id=profile_id)
            self.save_profiles(collection)
            return collection

        patch = self._normalize(patch)
        servers = []
        for server in collection.servers:
            if server.id == profile_id:
                server = _replace_id(patch, profile_id)
                log.info("Profile updated", profile_id=profile_id)
            servers.append(server)

        updated = ProfileCollection(servers=servers)
        self.save_profiles(updated)
        return updated

    def remove_profile(self, profile_id: str) -> ProfileCollection:
        """Drop the profile with this id, if any, and persist."""
        collection = self.load_profiles()
        updated = ProfileCollection(
            servers=[s for s in collection.servers if s.id != profile_id]
        )
        self.save_profiles(updated)
        log.info(
            "Profile removed",
            profile_id=profile_id,
            found=len(updated.servers) != len(collection.servers),
        )
        return updated

    # Settings

    def load_settings(self) -> AppSettings:
        """Load settings, defaults if the file does not exist."""
        data = self._read_json(self.settings_path)
        if data is None:
            log.debug("Settings file not found, using defaults", path=str(self.settings_path))
            return AppSettings()

        if not isinstance(data, dict):
            raise DeserializationError(
                "Settings file must contain a JSON object",
                path=str(self.settings_path),
            )
        return self._dict_to_settings(data)

    def save_settings(self, settings: AppSettings) -> None:
        """Persist the settings object wholesale."""
        self._write_json(self.settings_path, self._settings_to_dict(settings))
        log.info("Settings saved", path=str(self.settings_path))

    # Helpers

    @staticmethod
    def _normalize(profile: ServerProfile) -> ServerProfile:
        profile = profile.with_defaults()
        if not profile.realmlist_host:
            raise ValidationError(
                "Realmlist host cannot be empty",
                field="realmlistHost",
                constraints=["a hostname or IP address"],
            )
        if not 0 < profile.port <= 65535:
            raise ValidationError(
                "Port is out of range",
                field="port",
                value=profile.port,
                constraints=["1-65535, or 0 for the default"],
            )
        return profile

    @staticmethod
    def _new_id(collection: ProfileCollection) -> str:
        taken = set(collection.ids())
        new_id = str(uuid.uuid4())
        while new_id in taken:
            new_id = str(uuid.uuid4())
        return new_id

    def _read_json(self, path: Path) -> Any:
        """Return the parsed document, or None when the file is absent."""
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise DeserializationError(
                f"Invalid JSON in {path.name}",
                path=str(path),
                original_error=e,
            ) from e
        except UnicodeDecodeError as e:
            raise DeserializationError(
                f"{path.name} is not valid UTF-8",
                path=str(path),
                original_error=e,
            ) from e
        except OSError as e:
            raise FileSystemError(
                f"Could not read {path.name}",
                original_error=e,
                path=str(path),
                operation="read",
            ) from e

    def _write_json(self, path: Path, data: dict[str, Any]) -> None:
        """Write JSON through a temporary file, then move it into place."""
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(path)
        except OSError as e:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    log.debug("Could not remove temporary file", path=str(temp_path))
            raise FileSystemError(
                f"Could not write {path.name}",
                original_error=e,
                path=str(path),
                operation="write",
            ) from e

    def _profile_to_dict(self, profile: ServerProfile) -> dict[str, Any]:
        """Convert a profile to its JSON shape, omitting unset optionals."""
        data: dict[str, Any] = {
            "id": profile.id,
            "name": profile.name,
            "realmlistHost": profile.realmlist_host,
            "port": profile.port,
        }
        if profile.install_path is not None:
            data["installPath"] = profile.install_path
        data["executableName"] = profile.executable_name
        if profile.account_name is not None:
            data["accountName"] = profile.account_name
        return data

    def _dict_to_profile(self, raw: Any, index: int) -> ServerProfile:
        """Convert one JSON entry to a profile, applying field defaults."""
        if not isinstance(raw, dict):
            raise self._shape_error(f"servers[{index}] must be an object")

        fields = _FieldReader(raw, f"servers[{index}]", self.servers_path)
        port = fields.optional("port", int)
        if port is not None and not 0 <= port <= 65535:
            raise self._shape_error(f"servers[{index}].port is out of range")

        return ServerProfile(
            id=fields.required("id"),
            name=fields.required("name"),
            realmlist_host=fields.required("realmlistHost"),
            port=port or DEFAULT_PORT,
            install_path=fields.optional("installPath", str),
            executable_name=fields.optional("executableName", str) or DEFAULT_EXECUTABLE,
            account_name=fields.optional("accountName", str),
        )

    def _settings_to_dict(self, settings: AppSettings) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if settings.default_install_path is not None:
            data["defaultInstallPath"] = settings.default_install_path
        data["realmlistLocale"] = settings.realmlist_locale
        return data

    def _dict_to_settings(self, data: dict[str, Any]) -> AppSettings:
        fields = _FieldReader(data, "settings", self.settings_path)
        return AppSettings(
            default_install_path=fields.optional("defaultInstallPath", str),
            realmlist_locale=fields.optional("realmlistLocale", str) or DEFAULT_LOCALE,
        )

    def _shape_error(self, message: str) -> DeserializationError:
        return DeserializationError(message, path=str(self.servers_path))


class _FieldReader:
    """Typed access to the fields of one JSON object."""

    def __init__(self, data: dict[str, Any], where: str, path: Path) -> None:
        self._data = data
        self._where = where
        self._path = path

    def required(self, key: str) -> str:
        value = self._data.get(key)
        if not isinstance(value, str):
            raise DeserializationError(
                f"{self._where}.{key} must be a string",
                path=str(self._path),
            )
        return value

    def optional(self, key: str, kind: type) -> Any:
        value = self._data.get(key)
        # bool is an int subclass but never a valid port
        if value is None or (isinstance(value, kind) and not isinstance(value, bool)):
            return value
        raise DeserializationError(
            f"{self._where}.{key} must be a {kind.__name__} or null",
            path=str(self._path),
        )


def _replace_id(profile: ServerProfile, profile_id: str) -> ServerProfile:
    return replace(profile, id=profile_id)
