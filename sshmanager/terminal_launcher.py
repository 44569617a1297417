"""Open an SSH session for a stored connection in the system terminal."""

import logging
import os
import shlex
import shutil
import subprocess
from typing import List, Optional

from .exceptions import TerminalLaunchError
from .platform_utils import is_macos

logger = logging.getLogger(__name__)

# Tried in order when no terminal is configured on Linux
LINUX_TERMINALS = [
    'gnome-terminal',
    'kgx',
    'konsole',
    'xfce4-terminal',
    'tilix',
    'terminator',
    'alacritty',
    'kitty',
    'xterm',
    'x-terminal-emulator',
]


def build_ssh_command(host: str, username: str, key_path: Optional[str] = None, port: int = 22) -> List[str]:
    """Return the ``ssh`` argv for connecting to *host* as *username*."""
    cmd = ['ssh']
    if key_path:
        cmd += ['-i', key_path]
    if port and int(port) != 22:
        cmd += ['-p', str(port)]
    cmd.append(f"{username}@{host}")
    return cmd


def _applescript_string(text: str) -> str:
    return '"' + text.replace('\\', '\\\\').replace('"', '\\"') + '"'


def build_macos_command(ssh_command: str, app: Optional[str] = None) -> List[str]:
    """Return the ``osascript`` argv that runs *ssh_command* in Terminal.app or iTerm."""
    app_lower = (app or 'Terminal').lower()
    if app_lower in ('iterm', 'iterm2', 'iterm.app'):
        script = (
            'tell application "iTerm"\n'
            '    if (count of windows) = 0 then\n'
            '        create window with default profile\n'
            '    end if\n'
            '    tell current window\n'
            '        create tab with default profile\n'
            f'        tell current session to write text {_applescript_string(ssh_command)}\n'
            '    end tell\n'
            '    activate\n'
            'end tell'
        )
    else:
        script = (
            f'tell application "Terminal" to do script {_applescript_string(ssh_command)}\n'
            'tell application "Terminal" to activate'
        )
    return ['osascript', '-e', script]


def find_linux_terminal(preferred: Optional[str] = None) -> Optional[str]:
    """Return the path of *preferred* or of the first installed known terminal."""
    candidates = [preferred] if preferred else LINUX_TERMINALS
    for name in candidates:
        path = shutil.which(name)
        if path:
            return path
    return None


def build_linux_command(terminal: str, ssh_command: str) -> List[str]:
    """Return the argv that opens *terminal* running *ssh_command*."""
    shell_cmd = f'{ssh_command}; exec bash'
    terminal_basename = os.path.basename(terminal)
    if terminal_basename in ('gnome-terminal', 'kgx', 'tilix', 'xfce4-terminal'):
        return [terminal, '--', 'bash', '-c', shell_cmd]
    if terminal_basename in ('konsole', 'terminator', 'xterm', 'x-terminal-emulator'):
        return [terminal, '-e', f'bash -c {shlex.quote(shell_cmd)}']
    if terminal_basename in ('alacritty', 'kitty'):
        return [terminal, '-e', 'bash', '-c', shell_cmd]
    return [terminal, '-e', ssh_command]


def open_in_terminal(ssh_argv: List[str], terminal_app: Optional[str] = None) -> None:
    """Launch *ssh_argv* in a new terminal window.

    Raises :class:`TerminalLaunchError` when no terminal is available or the
    launcher cannot be started.
    """
    ssh_command = ' '.join(shlex.quote(arg) for arg in ssh_argv)
    if is_macos():
        cmd = build_macos_command(ssh_command, terminal_app)
    else:
        terminal = find_linux_terminal(terminal_app)
        if not terminal:
            raise TerminalLaunchError(
                f"Terminal '{terminal_app}' was not found." if terminal_app
                else "No supported terminal emulator was found."
            )
        cmd = build_linux_command(terminal, ssh_command)

    logger.info(f"Launching system terminal: {' '.join(cmd)}")
    try:
        subprocess.Popen(cmd, start_new_session=True)
    except OSError as e:
        logger.error(f"Failed to open system terminal: {e}")
        raise TerminalLaunchError(str(e)) from e
