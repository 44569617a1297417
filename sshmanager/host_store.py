"""Host Config Store: loads and saves SSH Manager hosts in the SSH client config."""

import logging
import os
import stat
import tempfile
from typing import List, Optional, Sequence

from .exceptions import HostValidationError
from .platform_utils import expand_home, get_ssh_dir
from .results import OperationResult
from .ssh_config_utils import HostEntry, generate_ssh_config, is_literal_host, parse_ssh_config

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config"


def validate_host_input(name: str, hostname: str, user: str, port, identity_file: Optional[str] = None) -> HostEntry:
    """Validate connection form values and return a :class:`HostEntry`.

    ``port`` may be an int or a string from a text field. Raises
    :class:`HostValidationError` describing the first problem found.
    """
    name = (name or "").strip()
    hostname = (hostname or "").strip()
    user = (user or "").strip()
    if not name or not hostname or not user:
        raise HostValidationError("Name, host and user are required.")
    if not is_literal_host(name) or len(name.split()) != 1:
        raise HostValidationError("Name must be a single host alias without '*' or '?'.")
    if len(hostname.split()) != 1 or len(user.split()) != 1:
        raise HostValidationError("Host and user must not contain spaces.")
    try:
        port_number = int(str(port).strip())
    except (TypeError, ValueError):
        raise HostValidationError("Port must be a number between 1 and 65535.")
    if not 1 <= port_number <= 65535:
        raise HostValidationError("Port must be a number between 1 and 65535.")
    identity_file = (identity_file or "").strip() or None
    if identity_file:
        identity_file = expand_home(identity_file)
    return HostEntry(
        name=name,
        hostname=hostname,
        user=user,
        port=port_number,
        identity_file=identity_file,
    )


class HostConfigStore:
    """File boundary around :func:`parse_ssh_config` and :func:`generate_ssh_config`.

    The store keeps no hosts in memory; every load parses the file from
    scratch and every save writes the complete desired host set.
    """

    def __init__(self, config_path: Optional[str] = None, home: Optional[str] = None):
        self.config_path = config_path or os.path.join(get_ssh_dir(), CONFIG_FILENAME)
        self.home = home

    def read_config_text(self) -> str:
        """Return the config text, or ``""`` when the file does not exist."""
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            logger.debug("SSH config %s does not exist yet", self.config_path)
            return ""

    def load_hosts(self) -> OperationResult:
        """Parse the config file into host entries.

        A read failure yields a failed result with an empty host list.
        """
        try:
            content = self.read_config_text()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read SSH config {self.config_path}: {e}")
            return OperationResult.fail(str(e), data=[])

        hosts = parse_ssh_config(content, self.home)
        logger.debug("Loaded %d hosts from %s", len(hosts), self.config_path)
        return OperationResult.ok(hosts)

    def save_hosts(self, hosts: Sequence[HostEntry]) -> OperationResult:
        """Rewrite the managed section of the config file with *hosts*.

        The file is re-read right before generating so manual edits made
        since the last load are preserved.
        """
        try:
            existing = self.read_config_text()
            content = generate_ssh_config(list(hosts), existing, self.home)
            self._write_config_text(content)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to save SSH config {self.config_path}: {e}")
            return OperationResult.fail(str(e))

        logger.info("Saved %d managed hosts to %s", len(hosts), self.config_path)
        return OperationResult.ok(list(hosts))

    def add_host(self, hosts: Sequence[HostEntry], entry: HostEntry) -> OperationResult:
        """Save *hosts* with *entry* added, replacing a host of the same name."""
        updated: List[HostEntry] = []
        replaced = False
        for host in hosts:
            if host.name == entry.name:
                updated.append(entry)
                replaced = True
            else:
                updated.append(host)
        if not replaced:
            updated.append(entry)
        return self.save_hosts(updated)

    def remove_host(self, hosts: Sequence[HostEntry], name: str) -> OperationResult:
        """Save *hosts* without the host called *name*."""
        return self.save_hosts([host for host in hosts if host.name != name])

    def _write_config_text(self, content: str) -> None:
        directory = os.path.dirname(os.path.abspath(self.config_path))
        if not os.path.isdir(directory):
            os.makedirs(directory, exist_ok=True)
            _ensure_secure_permissions(directory, 0o700)

        fd, tmp_path = tempfile.mkstemp(prefix=".config-", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.config_path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise


def _ensure_secure_permissions(path: str, mode: int) -> None:
    """Best effort at applying restrictive permissions to files/directories."""
    try:
        current_mode = stat.S_IMODE(os.stat(path).st_mode)
    except OSError as exc:
        logger.debug("Unable to stat %s for permission fix: %s", path, exc)
        return

    if current_mode == mode:
        return

    try:
        os.chmod(path, mode)
    except OSError as exc:
        logger.debug("Unable to set permissions on %s: %s", path, exc)
