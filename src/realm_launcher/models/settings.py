"""Application settings data models."""

from dataclasses import dataclass

DEFAULT_LOCALE = "enUS"


@dataclass(frozen=True)
class AppSettings:
    """Process-wide launcher settings."""
    default_install_path: str | None = None
    realmlist_locale: str = DEFAULT_LOCALE

    @property
    def locale(self) -> str:
        """Locale used for the Data/<locale> directory, never empty."""
        return self.realmlist_locale.strip() or DEFAULT_LOCALE
