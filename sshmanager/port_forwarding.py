"""Local port forwarding rules backed by ``ssh -N -L`` child processes."""

import logging
import os
import signal
import subprocess
import tempfile
import uuid
from dataclasses import dataclass, field
from typing import IO, Any, Dict, List, Optional

from .exceptions import ForwardingValidationError, PortForwardingError
from .platform_utils import expand_home
from .port_utils import find_port_owner, is_port_available

logger = logging.getLogger(__name__)

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"

RULES_SETTING = "port_forwarding.rules"


@dataclass
class ForwardingRule:
    """A local forward ``local_port -> remote_host:remote_port`` through ``ssh_host``."""

    local_port: int
    remote_host: str
    remote_port: int
    ssh_host: str
    username: str
    key_path: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: str = STATUS_INACTIVE
    pid: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    @property
    def description(self) -> str:
        return f"localhost:{self.local_port} → {self.remote_host}:{self.remote_port}"

    @property
    def via(self) -> str:
        return f"{self.username}@{self.ssh_host}"

    def to_dict(self) -> Dict[str, Any]:
        """Persistable form; runtime state (status, pid) is not stored."""
        return {
            'id': self.id,
            'local_port': self.local_port,
            'remote_host': self.remote_host,
            'remote_port': self.remote_port,
            'ssh_host': self.ssh_host,
            'username': self.username,
            'key_path': self.key_path,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ForwardingRule":
        rule = validate_rule_input(
            data.get('local_port'),
            data.get('remote_host'),
            data.get('remote_port'),
            data.get('ssh_host'),
            data.get('username'),
            data.get('key_path'),
        )
        if data.get('id'):
            rule.id = str(data['id'])
        return rule


def _parse_port(value, label: str) -> int:
    try:
        port = int(str(value).strip())
    except (TypeError, ValueError):
        raise ForwardingValidationError(f"{label} must be a number between 1 and 65535.")
    if not 1 <= port <= 65535:
        raise ForwardingValidationError(f"{label} must be a number between 1 and 65535.")
    return port


def validate_rule_input(local_port, remote_host, remote_port, ssh_host, username,
                        key_path=None) -> ForwardingRule:
    """Validate form values and build an inactive :class:`ForwardingRule`."""
    remote_host = (remote_host or "").strip()
    ssh_host = (ssh_host or "").strip()
    username = (username or "").strip()
    if local_port in (None, "") or remote_port in (None, "") or not remote_host or not ssh_host or not username:
        raise ForwardingValidationError(
            "Local port, remote host, remote port, SSH host and user are required."
        )
    key_path = (key_path or "").strip() or None
    return ForwardingRule(
        local_port=_parse_port(local_port, "Local port"),
        remote_host=remote_host,
        remote_port=_parse_port(remote_port, "Remote port"),
        ssh_host=ssh_host,
        username=username,
        key_path=expand_home(key_path) if key_path else None,
    )


def build_forward_command(rule: ForwardingRule) -> List[str]:
    """Return the ``ssh`` argv that keeps *rule*'s tunnel open."""
    cmd = ['ssh']
    if rule.key_path:
        cmd += ['-i', rule.key_path]
    cmd += [
        '-N',  # No remote command
        '-L', f"{rule.local_port}:{rule.remote_host}:{rule.remote_port}",
        rule.via,
    ]
    return cmd


class PortForwardManager:
    """Owns the forwarding rules and their ``ssh`` processes.

    Rules are persisted through *config* (a :class:`sshmanager.config.Config`)
    when one is given; processes only live as long as this manager.
    """

    def __init__(self, config=None):
        self.config = config
        self.rules: List[ForwardingRule] = []
        self._processes: Dict[str, subprocess.Popen] = {}
        self._stderr_files: Dict[str, IO[bytes]] = {}
        self._load_rules()

    def _load_rules(self):
        if self.config is None:
            return
        for data in self.config.get_setting(RULES_SETTING, []) or []:
            try:
                self.rules.append(ForwardingRule.from_dict(data))
            except (ForwardingValidationError, AttributeError) as e:
                logger.warning(f"Skipping invalid stored forwarding rule {data!r}: {e}")

    def _save_rules(self):
        if self.config is not None:
            self.config.set_setting(RULES_SETTING, [rule.to_dict() for rule in self.rules])

    def get_rule(self, rule_id: str) -> ForwardingRule:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        raise PortForwardingError(f"Unknown forwarding rule: {rule_id}")

    def add_rule(self, rule: ForwardingRule) -> ForwardingRule:
        self.rules.append(rule)
        self._save_rules()
        logger.info("Added forwarding rule %s (%s)", rule.id, rule.description)
        return rule

    def remove_rule(self, rule_id: str):
        rule = self.get_rule(rule_id)
        if rule.is_active:
            self.stop(rule_id)
        self.rules.remove(rule)
        self._save_rules()
        logger.info("Removed forwarding rule %s", rule_id)

    def start(self, rule_id: str) -> ForwardingRule:
        """Spawn the tunnel for *rule_id* and mark the rule active."""
        rule = self.get_rule(rule_id)
        if rule.is_active:
            return rule

        if not is_port_available(rule.local_port):
            owner = find_port_owner(rule.local_port)
            detail = f" by {owner.process_name} (PID: {owner.pid})" if owner and owner.pid else ""
            raise PortForwardingError(f"Local port {rule.local_port} is already in use{detail}.")

        cmd = build_forward_command(rule)
        logger.info(f"Starting port forward: {' '.join(cmd)}")
        # Not a pipe: nothing drains stderr while the tunnel runs
        stderr_file = tempfile.TemporaryFile()
        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=stderr_file,
                start_new_session=True,
            )
        except OSError as e:
            stderr_file.close()
            logger.error(f"Local forwarding failed: {e}")
            raise PortForwardingError(str(e)) from e

        if process.poll() is not None:
            stderr_file.seek(0)
            stderr = stderr_file.read().decode(errors='replace').strip()
            stderr_file.close()
            raise PortForwardingError(stderr or f"ssh exited with {process.returncode}")

        self._processes[rule.id] = process
        self._stderr_files[rule.id] = stderr_file
        rule.status = STATUS_ACTIVE
        rule.pid = process.pid
        return rule

    def stop(self, rule_id: str) -> ForwardingRule:
        """Terminate the tunnel for *rule_id* and mark the rule inactive.

        If the process cannot be signalled the rule stays active and tracked.
        """
        rule = self.get_rule(rule_id)
        if rule.pid is not None:
            self._terminate(rule.pid, self._processes.get(rule.id))
        self._release(rule.id)
        rule.status = STATUS_INACTIVE
        rule.pid = None
        logger.info("Stopped port forward %s", rule.description)
        return rule

    def _release(self, rule_id: str):
        self._processes.pop(rule_id, None)
        stderr_file = self._stderr_files.pop(rule_id, None)
        if stderr_file is not None:
            stderr_file.close()

    def refresh(self) -> List[ForwardingRule]:
        """Mark rules whose ``ssh`` process has exited as inactive.

        Returns the rules that changed.
        """
        changed = []
        for rule in self.rules:
            process = self._processes.get(rule.id)
            if not rule.is_active or process is None:
                continue
            if process.poll() is not None:
                logger.warning("Port forward %s exited with %s", rule.description, process.returncode)
                self._release(rule.id)
                rule.status = STATUS_INACTIVE
                rule.pid = None
                changed.append(rule)
        return changed

    def stop_all(self):
        for rule in self.rules:
            if rule.is_active:
                self.stop(rule.id)

    @staticmethod
    def _terminate(pid: int, process: Optional[subprocess.Popen]):
        try:
            os.killpg(os.getpgid(pid), signal.SIGTERM)
        except ProcessLookupError:
            logger.debug(f"Process {pid} already gone")
            return
        except PermissionError as e:
            raise PortForwardingError(f"Cannot stop process {pid}: {e}") from e

        if process is None:
            return
        try:
            process.wait(timeout=2)
        except subprocess.TimeoutExpired:
            # Force kill if still alive
            try:
                os.killpg(os.getpgid(pid), signal.SIGKILL)
            except ProcessLookupError:
                pass
            process.wait()
