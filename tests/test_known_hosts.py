import subprocess
from unittest.mock import patch

import pytest

from sshmanager.exceptions import KnownHostsError
from sshmanager.known_hosts import KnownHostEntry, KnownHostsManager

LONG_KEY = 'A' * 60


def test_missing_file_lists_nothing(tmp_path):
    assert KnownHostsManager(str(tmp_path / 'known_hosts')).list_entries() == []


def test_default_path(isolated_dirs):
    assert KnownHostsManager().known_hosts_path == str(isolated_dirs / '.ssh' / 'known_hosts')


def test_list_entries_skips_blank_and_comment_lines(tmp_path):
    path = tmp_path / 'known_hosts'
    path.write_text('\n'.join([
        '# managed by hand',
        'github.com ssh-ed25519 AAAAC3Nza',
        '',
        '   ',
        '[db.local]:2222,10.0.0.5 ecdsa-sha2-nistp256 AAAAE2Vj  ',
        '|1|salt|hash ssh-rsa ' + LONG_KEY,
    ]) + '\n')

    entries = KnownHostsManager(str(path)).list_entries()

    assert entries == [
        KnownHostEntry(index=0, line='github.com ssh-ed25519 AAAAC3Nza', host='github.com'),
        KnownHostEntry(index=1, line='[db.local]:2222,10.0.0.5 ecdsa-sha2-nistp256 AAAAE2Vj',
                       host='[db.local]:2222,10.0.0.5'),
        KnownHostEntry(index=2, line='|1|salt|hash ssh-rsa ' + LONG_KEY, host='|1|salt|hash'),
    ]


def test_key_preview():
    entry = KnownHostEntry(index=0, line='h ssh-rsa ' + LONG_KEY, host='h')
    assert entry.key_preview == 'ssh-rsa • ' + 'A' * 50 + '...'
    short = KnownHostEntry(index=0, line='h ssh-ed25519 AAAA', host='h')
    assert short.key_preview == 'ssh-ed25519 • AAAA'
    malformed = KnownHostEntry(index=0, line='garbage', host='garbage')
    assert malformed.key_preview == 'garbage'


@patch('sshmanager.known_hosts.subprocess.run')
def test_remove_host_runs_ssh_keygen(mock_run, tmp_path):
    mock_run.return_value = subprocess.CompletedProcess([], 0, '', '')
    path = str(tmp_path / 'known_hosts')
    KnownHostsManager(path).remove_host(' github.com ')
    assert mock_run.call_args[0][0] == ['ssh-keygen', '-R', 'github.com', '-f', path]


@patch('sshmanager.known_hosts.subprocess.run')
def test_remove_host_failure(mock_run, tmp_path):
    mock_run.return_value = subprocess.CompletedProcess([], 255, '', 'mkstemp: Permission denied\n')
    with pytest.raises(KnownHostsError, match='Permission denied'):
        KnownHostsManager(str(tmp_path / 'known_hosts')).remove_host('example.com')


@patch('sshmanager.known_hosts.subprocess.run', side_effect=FileNotFoundError)
def test_remove_host_without_ssh_keygen(_mock_run, tmp_path):
    with pytest.raises(KnownHostsError, match='not found'):
        KnownHostsManager(str(tmp_path / 'known_hosts')).remove_host('example.com')


def test_remove_host_requires_pattern(tmp_path):
    with pytest.raises(KnownHostsError):
        KnownHostsManager(str(tmp_path / 'known_hosts')).remove_host('  ')
