"""Merge realmlist and account directives into a client config file.

Config.wtf is a free-form list of ``SET key "value"`` lines. The merge keeps
every line it does not recognize exactly where it was, rewrites recognized
directive lines in place, and appends the directives that were missing.
"""

from enum import Enum

import structlog

from .errors import ValidationError

log = structlog.stdlib.get_logger()

LINE_SEPARATOR = "\r\n"
REALMLIST_PREFIX = "set realmlist "


class Directive(Enum):
    """Directive keys the merge knows how to rewrite."""
    REALMLIST = "realmlist"
    ACCOUNT_NAME = "accountName"


# Upper-cased line prefixes, matched against the stripped line
_PREFIXES: tuple[tuple[str, Directive], ...] = (
    ("SET REALMLIST ", Directive.REALMLIST),
    ("SET PORTAL ", Directive.REALMLIST),
    ("SET ACCOUNTNAME ", Directive.ACCOUNT_NAME),
)


def realmlist_line(host: str) -> str:
    """Canonical realmlist directive for a host."""
    return f"{REALMLIST_PREFIX}{host}"


def account_line(account_name: str) -> str:
    """Canonical accountName directive."""
    return f'SET accountName "{account_name}"'


def classify(line: str) -> Directive | None:
    """Return the directive a line sets, or None for unrelated lines."""
    upper = line.strip().upper()
    for prefix, directive in _PREFIXES:
        if upper.startswith(prefix):
            return directive
    return None


def split_lines(text: str) -> list[str]:
    """Split on LF or CRLF line endings.

    A lone CR is not a line ending, so an unterminated last line keeps it.
    """
    *terminated, last = text.split("\n")
    lines = [line.removesuffix("\r") for line in terminated]
    if last:
        lines.append(last)
    return lines


def merge_directives(
    existing_text: str | None,
    host: str,
    account_name: str | None = None,
) -> str:
    """Merge the realmlist and account directives into config text.

    Every existing ``SET realmlist`` / ``SET portal`` line becomes
    ``set realmlist <host>``; every ``SET accountName`` line becomes the new
    account line, or is removed when no account is given. Missing directives
    are appended. Empty lines are dropped and the result is joined with CRLF.

    Args:
        existing_text: Current file content, or None if the file is absent
        host: Realmlist host, surrounding whitespace is ignored
        account_name: Account to pre-fill, None or "" to leave it out

    Returns:
        The merged file content

    Raises:
        ValidationError: If the host is empty or either value spans lines
    """
    host = host.strip()
    if not host:
        raise ValidationError("Realmlist host cannot be empty", field="host")
    require_single_line("host", host)
    if account_name:
        require_single_line("accountName", account_name)

    replacements: dict[Directive, str] = {
        Directive.REALMLIST: realmlist_line(host),
        # Empty replacement lines are dropped below
        Directive.ACCOUNT_NAME: account_line(account_name) if account_name else "",
    }

    parsed = [(line, classify(line)) for line in split_lines(existing_text or "")]
    seen = {directive for _, directive in parsed if directive is not None}

    lines = [
        replacements[directive] if directive is not None else line
        for line, directive in parsed
    ]
    if Directive.REALMLIST not in seen:
        lines.append(replacements[Directive.REALMLIST])
    if Directive.ACCOUNT_NAME not in seen and account_name:
        lines.append(replacements[Directive.ACCOUNT_NAME])

    merged = [line for line in lines if line]
    log.debug(
        "Directives merged",
        host=host,
        rewritten=sum(1 for _, directive in parsed if directive is not None),
        lines=len(merged),
    )
    return LINE_SEPARATOR.join(merged)


def require_single_line(field: str, value: str) -> None:
    if "\n" in value or "\r" in value:
        raise ValidationError(
            f"{field} must be a single line",
            field=field,
            value=value,
        )
