import os
import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from .exceptions import KnownHostsError
from .platform_utils import get_ssh_dir


logger = logging.getLogger(__name__)


@dataclass
class KnownHostEntry:
    """One line of known_hosts."""

    index: int
    line: str
    host: str

    @property
    def key_preview(self) -> str:
        """Key type and truncated key data for display."""
        parts = self.line.split()
        if len(parts) < 3:
            return self.line
        key_data = parts[2]
        return f"{parts[1]} • {key_data[:50]}{'...' if len(key_data) > 50 else ''}"


class KnownHostsManager:
    """Reads known_hosts and removes host keys with ``ssh-keygen -R``."""

    def __init__(self, known_hosts_path: Optional[str] = None):
        self.known_hosts_path = known_hosts_path or os.path.join(get_ssh_dir(), 'known_hosts')

    def list_entries(self) -> List[KnownHostEntry]:
        """Return the non-blank, non-comment lines of known_hosts."""
        try:
            with open(self.known_hosts_path, 'r', encoding='utf-8') as f:
                lines = [line.rstrip('\n') for line in f]
        except FileNotFoundError:
            return []

        entries = []
        for line in lines:
            if not line.strip() or line.startswith('#'):
                continue
            stripped = line.strip()
            entries.append(KnownHostEntry(index=len(entries), line=stripped, host=stripped.split(' ')[0]))
        return entries

    def remove_host(self, host_pattern: str) -> None:
        """Remove every key belonging to *host_pattern*."""
        host_pattern = (host_pattern or '').strip()
        if not host_pattern:
            raise KnownHostsError("A host is required.")

        cmd = ['ssh-keygen', '-R', host_pattern, '-f', self.known_hosts_path]
        logger.debug("Running: %s", ' '.join(cmd))
        try:
            completed = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            logger.error(f"Failed to run ssh-keygen: {e}")
            raise KnownHostsError("ssh-keygen was not found on this system.") from e

        if completed.returncode != 0:
            message = completed.stderr.strip() or f"ssh-keygen exited with {completed.returncode}"
            logger.error(f"Failed to remove {host_pattern} from known_hosts: {message}")
            raise KnownHostsError(message)
        logger.info("Removed %s from %s", host_pattern, self.known_hosts_path)
