"""Write the realmlist directive everywhere a client may read it."""

from pathlib import Path

import structlog

from ..models.settings import DEFAULT_LOCALE
from .directives import merge_directives, realmlist_line, require_single_line
from .errors import FileSystemError, ValidationError

log = structlog.stdlib.get_logger()

REALMLIST_FILE = "realmlist.wtf"
CONFIG_FILE = "Config.wtf"

# Keep undecodable bytes intact and never translate line endings
_TEXT_OPTIONS = {"encoding": "utf-8", "errors": "surrogateescape", "newline": ""}


class RealmlistSyncService:
    """Synchronize client config files with a target realmlist host."""

    def sync(
        self,
        install_path: Path | str,
        host: str,
        locale: str,
        account_name: str | None = None,
    ) -> list[Path]:
        """Point a client installation at ``host``.

        Writes, in order:
        1. ``<install>/realmlist.wtf``
        2. ``<install>/Data/<locale>/realmlist.wtf``
        3. ``<install>/WTF/Config.wtf``, merged with its existing content

        The first failure is raised immediately; files written before it are
        left in place. Running again after fixing the cause converges.

        Returns:
            The files written, in order

        Raises:
            ValidationError: If the host is empty
            FileSystemError: If a file or directory cannot be read or written
        """
        base = Path(install_path)
        host = host.strip()
        if not host:
            raise ValidationError("Realmlist host cannot be empty", field="host")
        require_single_line("host", host)
        if account_name:
            require_single_line("accountName", account_name)
        locale = locale.strip() or DEFAULT_LOCALE
        content = realmlist_line(host)

        root_file = base / REALMLIST_FILE
        self._write(root_file, content)

        data_dir = base / "Data" / locale
        self._mkdir(data_dir)
        locale_file = data_dir / REALMLIST_FILE
        self._write(locale_file, content)

        config_file = base / "WTF" / CONFIG_FILE
        merged = merge_directives(self._read(config_file), host, account_name)
        self._mkdir(config_file.parent)
        self._write(config_file, merged)

        log.info(
            "Realmlist synchronized",
            install_path=str(base),
            host=host,
            locale=locale,
            account=bool(account_name),
        )
        return [root_file, locale_file, config_file]

    @staticmethod
    def _read(path: Path) -> str | None:
        if not path.exists():
            return None
        try:
            with open(path, "r", **_TEXT_OPTIONS) as f:
                return f.read()
        except OSError as e:
            raise FileSystemError(
                f"Could not read {path.name}",
                original_error=e,
                path=str(path),
                operation="read",
            ) from e

    @staticmethod
    def _write(path: Path, content: str) -> None:
        try:
            with open(path, "w", **_TEXT_OPTIONS) as f:
                f.write(content)
        except OSError as e:
            raise FileSystemError(
                f"Could not write {path.name}",
                original_error=e,
                path=str(path),
                operation="write",
            ) from e
        log.debug("Client file written", path=str(path))

    @staticmethod
    def _mkdir(path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(
                f"Could not create directory {path.name}",
                original_error=e,
                path=str(path),
                operation="mkdir",
            ) from e


def sync_realmlist(
    install_path: Path | str,
    host: str,
    locale: str,
    account_name: str | None = None,
) -> list[Path]:
    """Convenience wrapper around ``RealmlistSyncService.sync``."""
    return RealmlistSyncService().sync(install_path, host, locale, account_name)
