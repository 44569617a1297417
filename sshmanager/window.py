"""
Main Window for SSH Manager
One tab per feature: connections, keys, known hosts and port forwarding
"""

import logging

from gettext import gettext as _
from gi.repository import Gtk, Adw

from .config import Config
from .connections_page import ConnectionsPage
from .host_store import HostConfigStore
from .key_manager import KeyManager
from .keys_page import KeysPage
from .known_hosts import KnownHostsManager
from .known_hosts_page import KnownHostsPage
from .port_forwarding import PortForwardManager
from .port_forwarding_page import PortForwardingPage

logger = logging.getLogger(__name__)


class MainWindow(Adw.ApplicationWindow):
    """Main application window"""

    def __init__(self, config: Config, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.config = config
        self.forward_manager = PortForwardManager(config)

        geometry = config.get_window_geometry()
        self.set_default_size(geometry['width'], geometry['height'])
        self.set_title(_("SSH Manager"))

        self.view_stack = Adw.ViewStack()
        self.view_stack.add_titled_with_icon(
            ConnectionsPage(HostConfigStore(), config),
            "connections", _("Connections"), "network-server-symbolic",
        )
        self.view_stack.add_titled_with_icon(
            KeysPage(KeyManager(), config),
            "keys", _("SSH Keys"), "dialog-password-symbolic",
        )
        self.view_stack.add_titled_with_icon(
            KnownHostsPage(KnownHostsManager()),
            "known-hosts", _("Known Hosts"), "security-high-symbolic",
        )
        self.view_stack.add_titled_with_icon(
            PortForwardingPage(self.forward_manager),
            "port-forwarding", _("Port Forwarding"), "network-transmit-receive-symbolic",
        )

        switcher = Adw.ViewSwitcher()
        switcher.set_stack(self.view_stack)
        switcher.set_policy(Adw.ViewSwitcherPolicy.WIDE)

        header = Adw.HeaderBar()
        header.set_title_widget(switcher)

        toolbar_view = Adw.ToolbarView()
        toolbar_view.add_top_bar(header)
        toolbar_view.set_content(self.view_stack)
        self.set_content(toolbar_view)

        self.connect("close-request", self.on_close_request)

    def on_close_request(self, _window):
        """Persist geometry and stop running tunnels before closing"""
        width, height = self.get_default_size()
        self.config.save_window_geometry(width, height)
        self.forward_manager.stop_all()
        return False
