from unittest.mock import patch

import pytest

from sshmanager.exceptions import TerminalLaunchError
from sshmanager.terminal_launcher import (
    build_linux_command,
    build_macos_command,
    build_ssh_command,
    find_linux_terminal,
    open_in_terminal,
)


def test_build_ssh_command():
    assert build_ssh_command('example.com', 'root') == ['ssh', 'root@example.com']
    assert build_ssh_command('example.com', 'deploy', '/k/id', 2222) == [
        'ssh', '-i', '/k/id', '-p', '2222', 'deploy@example.com',
    ]


def test_terminal_app_script_escapes_quotes():
    cmd = build_macos_command('ssh "odd"@host')
    assert cmd[:2] == ['osascript', '-e']
    assert cmd[2] == (
        'tell application "Terminal" to do script "ssh \\"odd\\"@host"\n'
        'tell application "Terminal" to activate'
    )


def test_iterm_script():
    script = build_macos_command('ssh root@host', 'iTerm')[2]
    assert script.startswith('tell application "iTerm"')
    assert 'write text "ssh root@host"' in script


@pytest.mark.parametrize('terminal, expected', [
    ('/usr/bin/gnome-terminal', ['/usr/bin/gnome-terminal', '--', 'bash', '-c', 'ssh h; exec bash']),
    ('/usr/bin/xterm', ['/usr/bin/xterm', '-e', "bash -c 'ssh h; exec bash'"]),
    ('/usr/bin/kitty', ['/usr/bin/kitty', '-e', 'bash', '-c', 'ssh h; exec bash']),
    ('/opt/bin/myterm', ['/opt/bin/myterm', '-e', 'ssh h']),
])
def test_build_linux_command(terminal, expected):
    assert build_linux_command(terminal, 'ssh h') == expected


@patch('sshmanager.terminal_launcher.shutil.which')
def test_find_linux_terminal_prefers_configured(mock_which):
    mock_which.side_effect = lambda name: f'/usr/bin/{name}' if name in ('xterm', 'konsole') else None
    assert find_linux_terminal() == '/usr/bin/konsole'
    assert find_linux_terminal('xterm') == '/usr/bin/xterm'
    assert find_linux_terminal('tilix') is None


@patch('sshmanager.terminal_launcher.subprocess.Popen')
@patch('sshmanager.terminal_launcher.is_macos', return_value=True)
def test_open_in_terminal_macos(_mac, mock_popen):
    open_in_terminal(['ssh', '-i', '/k/my key', 'root@h'])
    cmd = mock_popen.call_args[0][0]
    assert cmd[0] == 'osascript'
    assert "ssh -i '/k/my key' root@h" in cmd[2]


@patch('sshmanager.terminal_launcher.subprocess.Popen')
@patch('sshmanager.terminal_launcher.shutil.which', return_value='/usr/bin/gnome-terminal')
@patch('sshmanager.terminal_launcher.is_macos', return_value=False)
def test_open_in_terminal_linux(_mac, _which, mock_popen):
    open_in_terminal(['ssh', 'root@h'])
    mock_popen.assert_called_once_with(
        ['/usr/bin/gnome-terminal', '--', 'bash', '-c', 'ssh root@h; exec bash'],
        start_new_session=True,
    )


@patch('sshmanager.terminal_launcher.shutil.which', return_value=None)
@patch('sshmanager.terminal_launcher.is_macos', return_value=False)
def test_open_in_terminal_without_terminal(_mac, _which):
    with pytest.raises(TerminalLaunchError, match='No supported terminal'):
        open_in_terminal(['ssh', 'root@h'])
    with pytest.raises(TerminalLaunchError, match="'wezterm' was not found"):
        open_in_terminal(['ssh', 'root@h'], 'wezterm')


@patch('sshmanager.terminal_launcher.subprocess.Popen', side_effect=PermissionError('denied'))
@patch('sshmanager.terminal_launcher.is_macos', return_value=True)
def test_open_in_terminal_launch_failure(_mac, _popen):
    with pytest.raises(TerminalLaunchError, match='denied'):
        open_in_terminal(['ssh', 'root@h'])
