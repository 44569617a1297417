# key_manager.py
from __future__ import annotations

import os
import subprocess
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, List

from .exceptions import KeyManagerError
from .platform_utils import get_ssh_dir

logger = logging.getLogger(__name__)

KEY_TYPES = ("rsa", "ed25519", "ecdsa")


def _pair_path(key_path: str) -> str:
    """Path of the other half of a key pair."""
    if key_path.endswith(".pub"):
        return key_path[: -len(".pub")]
    return f"{key_path}.pub"


@dataclass
class SSHKey:
    """
    One key file found in the SSH directory.
    """
    name: str
    path: str
    is_public: bool
    size: int
    modified: datetime

    def __str__(self) -> str:
        return self.name


class KeyManager:
    """
    Key pair listing, generation and deletion inside the SSH directory.
    Uses system `ssh-keygen` for portability and OpenSSH-compatible output.
    """
    _SKIPPED_PREFIXES = ("known_hosts", "config")

    def __init__(self, ssh_dir: Optional[Path] = None):
        self.ssh_dir = Path(ssh_dir or get_ssh_dir())
        if not self.ssh_dir.exists():
            self.ssh_dir.mkdir(parents=True, exist_ok=True)
            try:
                os.chmod(self.ssh_dir, 0o700)
            except OSError as e:
                logger.debug("Unable to set permissions on %s: %s", self.ssh_dir, e)

    def _is_key_file(self, file_path: Path) -> bool:
        name = file_path.name
        if not file_path.is_file():
            return False
        if name.startswith(self._SKIPPED_PREFIXES):
            return False
        return "." not in name or name.endswith(".pub")

    # ---------------- Public API ----------------

    def list_keys(self) -> List[SSHKey]:
        """List private and public key files in the SSH directory, sorted by name."""
        keys: List[SSHKey] = []
        if not self.ssh_dir.exists():
            return keys
        for file_path in sorted(self.ssh_dir.iterdir(), key=lambda p: p.name):
            if not self._is_key_file(file_path):
                continue
            stats = file_path.stat()
            keys.append(
                SSHKey(
                    name=file_path.name,
                    path=str(file_path),
                    is_public=file_path.name.endswith(".pub"),
                    size=stats.st_size,
                    modified=datetime.fromtimestamp(stats.st_mtime),
                )
            )
        return keys

    def generate_key(
        self,
        key_name: str,
        key_type: str = "ed25519",
        comment: Optional[str] = None,
    ) -> str:
        """
        Generate an unencrypted key pair with `ssh-keygen`.
        - key_type: "ed25519" (default), "rsa" or "ecdsa"
        - comment: defaults to "<type>-key-<unix time>"
        Returns the private key path.
        """
        # validate filename
        key_name = (key_name or "").strip()
        if not key_name:
            raise ValueError("Key file name is required.")
        if "/" in key_name or key_name.startswith("."):
            raise ValueError("Key file name must not contain '/' or start with '.'.")

        key_path = self.ssh_dir / key_name
        if key_path.exists():
            # Suggest alternative names
            counter = 1
            while (self.ssh_dir / f"{key_name}_{counter}").exists():
                counter += 1
            suggestion = f"{key_name}_{counter}"
            raise FileExistsError(f"A key named '{key_name}' already exists. Try '{suggestion}' instead.")

        kt = (key_type or "").lower().strip()
        if kt not in KEY_TYPES:
            raise ValueError(f"Unsupported key type: {key_type}")

        comment = (comment or "").strip() or f"{kt}-key-{int(time.time())}"
        cmd = ["ssh-keygen", "-t", kt, "-f", str(key_path), "-C", comment, "-N", ""]

        logger.debug("Running ssh-keygen: %s", " ".join(cmd))
        try:
            completed = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            logger.error("ssh-keygen is not installed: %s", e)
            raise KeyManagerError("ssh-keygen was not found on this system.") from e

        if completed.returncode != 0:
            # Surface stderr as the UI message
            stderr = completed.stderr.strip() or "ssh-keygen failed"
            logger.error("Key generation failed: %s", stderr)
            raise KeyManagerError(stderr)

        # Ensure sane permissions (best effort)
        try:
            os.chmod(key_path, 0o600)
            pub_path = f"{key_path}.pub"
            if os.path.exists(pub_path):
                os.chmod(pub_path, 0o644)
        except OSError as perm_err:
            logger.warning("Failed setting permissions on key files: %s", perm_err)

        logger.info("Generated SSH key at %s", key_path)
        return str(key_path)

    def delete_key(self, key_path: str) -> None:
        """Delete *key_path* and, when present, the other half of its pair."""
        os.unlink(key_path)
        pair = _pair_path(key_path)
        try:
            os.unlink(pair)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not delete %s: %s", pair, e)
        logger.info("Deleted SSH key %s", key_path)

    def read_key_text(self, key_path: str) -> str:
        """Return the text content of a key file."""
        with open(key_path, "r", encoding="utf-8") as f:
            return f.read()
