"""Server profile data models."""

from dataclasses import dataclass, field, replace

DEFAULT_PORT = 3724
DEFAULT_EXECUTABLE = "Wow.exe"


@dataclass(frozen=True)
class ServerProfile:
    """A saved connection target."""
    name: str
    realmlist_host: str
    id: str = ""  # Assigned by the store when empty
    port: int = DEFAULT_PORT
    install_path: str | None = None  # None = use the global default
    executable_name: str = DEFAULT_EXECUTABLE
    account_name: str | None = None

    def with_defaults(self) -> "ServerProfile":
        """Return a copy with the port and executable defaults applied."""
        return replace(
            self,
            realmlist_host=self.realmlist_host.strip(),
            port=self.port or DEFAULT_PORT,
            executable_name=self.executable_name or DEFAULT_EXECUTABLE,
        )


@dataclass(frozen=True)
class ProfileCollection:
    """Ordered list of server profiles, persisted as one unit."""
    servers: list[ServerProfile] = field(default_factory=list)

    def find(self, profile_id: str) -> ServerProfile | None:
        for server in self.servers:
            if server.id == profile_id:
                return server
        return None

    def ids(self) -> list[str]:
        return [server.id for server in self.servers]
