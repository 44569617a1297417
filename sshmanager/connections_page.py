import logging
from typing import List

from gettext import gettext as _

from .dialogs import ConnectionDialog, confirm, show_error
from .exceptions import TerminalLaunchError
from .host_store import HostConfigStore
from .list_page import ListPage
from .ssh_config_utils import HostEntry
from .terminal_launcher import build_ssh_command, open_in_terminal

logger = logging.getLogger(__name__)


class ConnectionsPage(ListPage):
    """Stored connections: the managed ``Host`` entries of the SSH config."""

    def __init__(self, store: HostConfigStore, config):
        super().__init__(
            _("SSH Connections"),
            _("No SSH connections yet"),
            "network-server-symbolic",
            action_label=_("Add Connection"),
            on_action=self._on_add_clicked,
        )
        self.empty_page.set_description(_("Add a connection to store it in your SSH config."))
        self.store = store
        self.config = config
        self.hosts: List[HostEntry] = []
        self.reload()

    def reload(self):
        result = self.store.load_hosts()
        self.hosts = list(result.data or [])
        self.show_load_error(
            None if result.success else _("Could not read SSH config: {}").format(result.error)
        )
        self._render()

    def _render(self):
        self.clear_rows()
        for host in self.hosts:
            subtitle = host.target
            if host.identity_file:
                subtitle += _(" (key: {})").format(host.identity_file.rsplit('/', 1)[-1])
            self.add_row(host.name, subtitle, [
                (_("Connect"), "suggested-action", lambda h=host: self._connect(h)),
                (_("Delete"), "destructive-action", lambda h=host: self._confirm_delete(h)),
            ])
        self.update_empty_state()

    def _apply(self, result) -> bool:
        if not result.success:
            show_error(self.get_root(), _("Failed to save connections"), result.error)
            return False
        self.hosts = list(result.data)
        self._render()
        return True

    def _on_add_clicked(self):
        ConnectionDialog(self.get_root(), self._add_host).present()

    def _add_host(self, entry: HostEntry):
        if any(host.name == entry.name for host in self.hosts):
            show_error(
                self.get_root(),
                _("Connection already exists"),
                _("A connection named '{}' already exists.").format(entry.name),
            )
            return
        self._apply(self.store.add_host(self.hosts, entry))

    def _confirm_delete(self, host: HostEntry):
        confirm(
            self.get_root(),
            _("Delete connection?"),
            _("'{}' will be removed from your SSH config.").format(host.name),
            lambda: self._apply(self.store.remove_host(self.hosts, host.name)),
        )

    def _connect(self, host: HostEntry):
        argv = build_ssh_command(host.hostname, host.user, host.identity_file, host.port)
        try:
            open_in_terminal(argv, self.config.get_setting('terminal.app') or None)
        except TerminalLaunchError as e:
            self.report_error(_("Connection failed"), e)
