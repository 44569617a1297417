"""Platform-related utility functions."""

import logging
import os
import platform
from pathlib import Path
from typing import Optional

from . import APP_NAME

logger = logging.getLogger(__name__)


def _normalize_path(path: str) -> str:
    """Expand user references and return an absolute path."""
    return os.path.abspath(os.path.expanduser(path))


def is_macos() -> bool:
    """Return True if running on macOS."""
    return platform.system() == "Darwin"


def get_home_dir() -> str:
    """Return the current user's home directory.

    Falls back to ``Path.home()`` when ``~`` cannot be expanded and to the
    current working directory as a last resort.
    """
    home_dir = os.path.expanduser("~")
    if not home_dir or home_dir == "~":
        try:
            home_dir = str(Path.home())
        except RuntimeError:
            home_dir = ""

    if not home_dir or not str(home_dir).strip():
        logger.warning(
            "Unable to determine the user's home directory; "
            "falling back to the current working directory."
        )
        home_dir = os.getcwd()
    return home_dir


def _xdg_dir(env_var: str, fallback: str) -> str:
    base = os.environ.get(env_var)
    if not base or not os.path.isabs(base):
        base = os.path.join(get_home_dir(), fallback)
    return os.path.join(base, APP_NAME)


def get_config_dir() -> str:
    """Return the per-user configuration directory for SSH Manager."""
    return _xdg_dir("XDG_CONFIG_HOME", ".config")


def get_data_dir() -> str:
    """Return the per-user data directory for SSH Manager."""
    return _xdg_dir("XDG_DATA_HOME", os.path.join(".local", "share"))


def get_ssh_dir() -> str:
    """Return the user's SSH directory.

    Defaults to ``~/.ssh``. The location can be overridden by setting the
    ``SSHMANAGER_SSH_DIR`` environment variable.
    """
    override = os.environ.get("SSHMANAGER_SSH_DIR")
    if override:
        return _normalize_path(override)
    return _normalize_path(os.path.join(get_home_dir(), ".ssh"))


def expand_home(path: str, home: Optional[str] = None) -> str:
    """Replace a leading ``~`` in *path* with the home directory.

    Only ``~`` on its own or followed by a separator is expanded; other
    user references such as ``~alice/key`` are returned unchanged.
    """
    if path != "~" and not path.startswith("~/"):
        return path
    home = (home or get_home_dir()).rstrip("/") or "/"
    if path == "~":
        return home
    return os.path.join(home, path[2:])


def collapse_home(path: str, home: Optional[str] = None) -> str:
    """Rewrite *path* with a leading ``~`` when it lies inside the home directory."""
    home = (home or get_home_dir()).rstrip("/")
    if not home:
        return path
    if path == home:
        return "~"
    if path.startswith(home + "/"):
        return "~" + path[len(home):]
    return path
