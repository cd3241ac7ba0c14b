"""TCP reachability check for realm servers."""

import asyncio
import socket
import time

import structlog

from ..models import RealmStatus
from ..models.profile import DEFAULT_PORT
from .errors import ValidationError

log = structlog.stdlib.get_logger()

DEFAULT_TIMEOUT = 3.0


class ReachabilityService:
    """Check whether a realm host accepts TCP connections."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize the service.

        Args:
            timeout: Connect timeout in seconds, applied per resolved address
        """
        self.timeout = timeout

    async def check(
        self,
        host: str,
        port: int | None = None,
        timeout: float | None = None,
    ) -> RealmStatus:
        """Check ``host:port`` without blocking the event loop.

        The blocking resolve-and-connect runs in a worker thread. Resolution
        failures and refused or timed out connections all report offline;
        nothing is raised to the caller for an unreachable realm.

        Raises:
            ValidationError: If the timeout is not a positive number
        """
        if timeout is None:
            timeout = self.timeout
        if not timeout > 0:
            raise ValidationError(
                "Timeout must be positive",
                field="timeout",
                value=timeout,
                constraints=["seconds, greater than 0"],
            )
        return await asyncio.to_thread(self.check_blocking, host, port or DEFAULT_PORT, timeout)

    def check_blocking(self, host: str, port: int, timeout: float) -> RealmStatus:
        """Resolve the host and try each address until one connects."""
        host = host.strip()
        if not host:
            return RealmStatus(online=False)
        start = time.monotonic()

        try:
            addresses = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        except (socket.gaierror, UnicodeError) as e:
            log.info("Could not resolve realm host", host=host, port=port, error=str(e))
            return RealmStatus(online=False)

        for family, sock_type, proto, _, address in addresses:
            try:
                with socket.socket(family, sock_type, proto) as sock:
                    sock.settimeout(timeout)
                    sock.connect(address)
            except OSError as e:
                log.debug("Connect attempt failed", address=str(address), error=str(e))
                continue

            latency_ms = int((time.monotonic() - start) * 1000)
            log.info("Realm online", host=host, port=port, latency_ms=latency_ms)
            return RealmStatus(online=True, latency_ms=latency_ms)

        log.info("Realm offline", host=host, port=port)
        return RealmStatus(online=False)


async def check_realm_status(
    host: str,
    port: int | None = None,
    timeout: float | None = None,
) -> RealmStatus:
    """Convenience wrapper around ``ReachabilityService.check``."""
    return await ReachabilityService().check(host, port, timeout)
