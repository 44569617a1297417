"""Reading and writing the hosts SSH Manager keeps in the OpenSSH client config.

``parse_ssh_config`` turns config text into :class:`HostEntry` records and
``generate_ssh_config`` merges a desired host set back into existing config
text. Both are pure functions over text; file access lives in
:mod:`sshmanager.host_store`.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set

from .platform_utils import collapse_home, expand_home

logger = logging.getLogger(__name__)

DEFAULT_USER = "root"
DEFAULT_PORT = 22

MANAGED_BANNER = (
    "# SSH Manager - Managed Hosts",
    "# Do not edit this section manually",
)
_BANNER_MARKERS = ("ssh manager", "managed hosts")

# Attribute lines of a replaced stanza starting with one of these are dropped
_MANAGED_PREFIXES = ("hostname", "user", "port", "identityfile")
_GLOB_CHARS = ("*", "?")

INDENT = "    "


@dataclass
class HostEntry:
    """One named SSH destination."""

    name: str
    hostname: str
    user: str = DEFAULT_USER
    port: int = DEFAULT_PORT
    identity_file: Optional[str] = None

    @property
    def id(self) -> str:
        return self.name

    @property
    def target(self) -> str:
        """``user@hostname:port`` summary used in listings."""
        return f"{self.user}@{self.hostname}:{self.port}"


def is_literal_host(pattern: str) -> bool:
    """Return True when *pattern* names a single host rather than a glob."""
    return not any(ch in pattern for ch in _GLOB_CHARS)


def _tokenize(line: str):
    parts = line.split()
    if len(parts) < 2:
        return None, None
    return parts[0].lower(), " ".join(parts[1:])


def _parse_port(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        logger.debug("Ignoring invalid port %r", value)
        return DEFAULT_PORT


def parse_ssh_config(content: str, home: Optional[str] = None) -> List[HostEntry]:
    """Parse *content* into host entries in file order.

    Only ``Host`` blocks with a literal pattern and a ``HostName`` become
    entries. Comments, blank lines, malformed lines and unknown keys are
    skipped; parsing never fails.
    """
    hosts: List[HostEntry] = []
    current: Optional[dict] = None

    def flush(pending: Optional[dict]) -> None:
        if not pending or not pending.get("name") or not pending.get("hostname"):
            return
        hosts.append(
            HostEntry(
                name=pending["name"],
                hostname=pending["hostname"],
                user=pending.get("user") or DEFAULT_USER,
                port=pending.get("port", DEFAULT_PORT),
                identity_file=pending.get("identity_file"),
            )
        )

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        key, value = _tokenize(line)
        if key is None:
            continue

        if key == "host":
            flush(current)
            current = {"name": value} if is_literal_host(value) else None
            continue

        if current is None:
            continue
        if key == "hostname":
            current["hostname"] = value
        elif key == "user":
            current["user"] = value
        elif key == "port":
            current["port"] = _parse_port(value)
        elif key == "identityfile":
            current["identity_file"] = expand_home(value, home)

    flush(current)
    return hosts


class LineKind(enum.Enum):
    """Classification of one existing config line during generation."""

    MANAGED = "managed"
    MANAGED_BANNER = "managed-banner"
    HOST = "host"
    SECTION = "section"
    SKIPPED_ATTRIBUTE = "skipped-attribute"
    PRESERVE = "preserve"


def _host_line_name(stripped: str) -> Optional[str]:
    parts = stripped.split(None, 1)
    if len(parts) == 2 and parts[0].lower() == "host":
        return parts[1].strip()
    return None


def classify_line(line: str, in_managed_section: bool, skipping_host: bool) -> LineKind:
    """Return the kind of *line* given the current scan state.

    Checks run in a fixed order: managed section, banner, ``Host`` line,
    new top-level line, attribute of a replaced stanza, everything else.
    """
    if in_managed_section:
        return LineKind.MANAGED

    stripped = line.strip()
    lowered = stripped.lower()
    if all(marker in lowered for marker in _BANNER_MARKERS):
        return LineKind.MANAGED_BANNER

    if _host_line_name(stripped) is not None:
        return LineKind.HOST

    if stripped and not line.startswith((" ", "\t")):
        return LineKind.SECTION

    if skipping_host and lowered.startswith(_MANAGED_PREFIXES):
        return LineKind.SKIPPED_ATTRIBUTE

    return LineKind.PRESERVE


def strip_managed_content(existing_content: str, host_names: Iterable[str]) -> List[str]:
    """Return the lines of *existing_content* that SSH Manager does not own.

    The managed section is removed entirely, as are stanzas whose ``Host``
    name equals one of *host_names*. Trailing blank lines are dropped.
    """
    names: Set[str] = set(host_names)
    preserved: List[str] = []
    in_managed = False
    skipping = False

    for line in existing_content.split("\n"):
        kind = classify_line(line, in_managed, skipping)
        if kind is LineKind.MANAGED:
            continue
        if kind is LineKind.MANAGED_BANNER:
            in_managed = True
            continue
        if kind is LineKind.HOST:
            skipping = _host_line_name(line.strip()) in names
            if not skipping:
                preserved.append(line)
            continue
        if kind is LineKind.SECTION:
            skipping = False
            preserved.append(line)
            continue
        if kind is LineKind.SKIPPED_ATTRIBUTE:
            continue
        preserved.append(line)

    while preserved and not preserved[-1].strip():
        preserved.pop()
    return preserved


def format_host_entry(host: HostEntry, home: Optional[str] = None) -> List[str]:
    """Render one host as config lines, followed by a blank line."""
    lines = [
        f"Host {host.name}",
        f"{INDENT}HostName {host.hostname}",
        f"{INDENT}User {host.user}",
    ]
    if host.port != DEFAULT_PORT:
        lines.append(f"{INDENT}Port {host.port}")
    if host.identity_file:
        lines.append(f"{INDENT}IdentityFile {collapse_home(host.identity_file, home)}")
    lines.append("")
    return lines


def generate_ssh_config(
    hosts: Sequence[HostEntry],
    existing_content: str,
    home: Optional[str] = None,
) -> str:
    """Merge *hosts* into *existing_content* and return the new file body.

    Content outside the managed section is kept verbatim except for stanzas
    whose ``Host`` name collides with one of *hosts*. The managed section is
    regenerated after it, in the order of *hosts*, and omitted entirely when
    *hosts* is empty.
    """
    output = strip_managed_content(existing_content, (host.name for host in hosts))
    if output:
        output.append("")

    if hosts:
        output.extend(MANAGED_BANNER)
        output.append("")
        for host in hosts:
            output.extend(format_host_entry(host, home))

    return "\n".join(output)


__all__ = [
    "DEFAULT_PORT",
    "DEFAULT_USER",
    "HostEntry",
    "LineKind",
    "MANAGED_BANNER",
    "classify_line",
    "format_host_entry",
    "generate_ssh_config",
    "is_literal_host",
    "parse_ssh_config",
    "strip_managed_content",
]
