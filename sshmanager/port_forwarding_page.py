"""
Port Forwarding page
Lists local forwarding rules and starts/stops their tunnels
"""

import logging

from gettext import gettext as _
from gi.repository import GLib

from .dialogs import ForwardingRuleDialog, confirm
from .exceptions import PortForwardingError
from .list_page import ListPage
from .port_forwarding import ForwardingRule, PortForwardManager

logger = logging.getLogger(__name__)

REFRESH_INTERVAL_SECONDS = 2


class PortForwardingPage(ListPage):
    """Rules managed by a :class:`PortForwardManager`."""

    def __init__(self, manager: PortForwardManager):
        super().__init__(
            _("Port Forwarding"),
            _("No forwarding rules"),
            "network-transmit-receive-symbolic",
            action_label=_("Add Rule"),
            on_action=self._on_add_clicked,
        )
        self.empty_page.set_description(_("Forward a local port to a host reachable from an SSH server."))
        self.manager = manager
        self._timer_id = GLib.timeout_add_seconds(REFRESH_INTERVAL_SECONDS, self._on_refresh_timer)
        self.connect("destroy", self._on_destroy)
        self.reload()

    def reload(self):
        self.clear_rows()
        for rule in self.manager.rules:
            if rule.is_active:
                state = _("Active (PID: {})").format(rule.pid)
                toggle = (_("Stop"), None, lambda r=rule: self._stop(r))
            else:
                state = _("Inactive")
                toggle = (_("Start"), "suggested-action", lambda r=rule: self._start(r))
            subtitle = _("via {} • {}").format(rule.via, state)
            self.add_row(rule.description, subtitle, [
                toggle,
                (_("Delete"), "destructive-action", lambda r=rule: self._confirm_delete(r)),
            ])
        self.update_empty_state()

    def _on_refresh_timer(self):
        if self.manager.refresh():
            self.reload()
        return True

    def _on_destroy(self, *_args):
        if self._timer_id:
            GLib.source_remove(self._timer_id)
            self._timer_id = None

    def _on_add_clicked(self):
        ForwardingRuleDialog(self.get_root(), self._add_rule).present()

    def _add_rule(self, rule: ForwardingRule):
        self.manager.add_rule(rule)
        self.reload()

    def _start(self, rule: ForwardingRule):
        try:
            self.manager.start(rule.id)
        except PortForwardingError as e:
            self.report_error(_("Failed to start port forwarding"), e)
        self.reload()

    def _stop(self, rule: ForwardingRule):
        try:
            self.manager.stop(rule.id)
        except PortForwardingError as e:
            self.report_error(_("Failed to stop port forwarding"), e)
        self.reload()

    def _confirm_delete(self, rule: ForwardingRule):
        confirm(
            self.get_root(),
            _("Delete forwarding rule?"),
            _("{} will be stopped and removed.").format(rule.description),
            lambda: self._delete(rule),
        )

    def _delete(self, rule: ForwardingRule):
        try:
            self.manager.remove_rule(rule.id)
        except PortForwardingError as e:
            self.report_error(_("Failed to delete forwarding rule"), e)
        self.reload()
