import os
import sys

import pytest

# Ensure project root is on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


HOME = '/home/tester'


@pytest.fixture
def home():
    """A fixed home directory for path expansion tests."""
    return HOME


@pytest.fixture
def isolated_dirs(tmp_path, monkeypatch):
    """Point HOME, XDG dirs and the SSH directory at a temporary tree."""
    home_dir = tmp_path / 'home'
    ssh_dir = home_dir / '.ssh'
    ssh_dir.mkdir(parents=True)
    monkeypatch.setenv('HOME', str(home_dir))
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'config'))
    monkeypatch.setenv('XDG_DATA_HOME', str(tmp_path / 'data'))
    monkeypatch.setenv('SSHMANAGER_SSH_DIR', str(ssh_dir))
    return home_dir
