"""Message and form dialogs shared by the window's pages."""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from gettext import gettext as _
from gi.repository import Gtk, Adw

from .exceptions import SSHManagerError
from .host_store import validate_host_input
from .key_manager import KEY_TYPES
from .port_forwarding import validate_rule_input

logger = logging.getLogger(__name__)


def show_error(parent, heading: str, body: str):
    dialog = Adw.MessageDialog(transient_for=parent, modal=True, heading=heading, body=body)
    dialog.add_response("ok", _("OK"))
    dialog.present()


def show_text(parent, heading: str, text: str):
    """Show read-only, selectable *text* such as a key file."""
    dialog = Adw.MessageDialog(transient_for=parent, modal=True, heading=heading)
    view = Gtk.TextView()
    view.set_editable(False)
    view.set_monospace(True)
    view.set_wrap_mode(Gtk.WrapMode.CHAR)
    view.get_buffer().set_text(text)
    scrolled = Gtk.ScrolledWindow()
    scrolled.set_min_content_height(200)
    scrolled.set_min_content_width(480)
    scrolled.set_child(view)
    dialog.set_extra_child(scrolled)
    dialog.add_response("close", _("Close"))
    dialog.present()


def confirm(parent, heading: str, body: str, on_confirm: Callable[[], None],
            action_label: Optional[str] = None):
    """Ask before a destructive action; *on_confirm* runs only on approval."""
    dialog = Adw.MessageDialog(transient_for=parent, modal=True, heading=heading, body=body)
    dialog.add_response("cancel", _("Cancel"))
    dialog.add_response("confirm", action_label or _("Delete"))
    dialog.set_response_appearance("confirm", Adw.ResponseAppearance.DESTRUCTIVE)
    dialog.set_default_response("cancel")

    def on_response(_dialog, response):
        if response == "confirm":
            on_confirm()

    dialog.connect("response", on_response)
    dialog.present()


class FormDialog(Adw.Window):
    """Modal form with entry rows, an error label and Cancel/Save buttons.

    Subclasses list their fields as ``(key, title, default)`` and implement
    :meth:`build_result`, which raises :class:`SSHManagerError` (or
    ``ValueError``) for invalid input.
    """

    fields: List[Tuple[str, str, str]] = []
    save_label = _("Add")

    def __init__(self, parent, title: str, on_save: Callable):
        super().__init__()
        self.set_transient_for(parent)
        self.set_modal(True)
        self.set_default_size(480, -1)
        self.set_title(title)
        self._on_save = on_save
        self.entries: Dict[str, Adw.EntryRow] = {}

        tv = Adw.ToolbarView()
        self.set_content(tv)

        header = Adw.HeaderBar()
        header.set_show_end_title_buttons(False)
        header.set_show_start_title_buttons(False)
        tv.add_top_bar(header)

        cancel_btn = Gtk.Button(label=_("Cancel"))
        cancel_btn.connect("clicked", lambda *_: self.close())
        header.pack_start(cancel_btn)

        save_btn = Gtk.Button(label=self.save_label)
        save_btn.add_css_class("suggested-action")
        save_btn.connect("clicked", self._on_save_clicked)
        header.pack_end(save_btn)

        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=12)
        box.set_margin_top(12)
        box.set_margin_bottom(12)
        box.set_margin_start(12)
        box.set_margin_end(12)

        group = Adw.PreferencesGroup()
        for key, field_title, default in self.fields:
            row = Adw.EntryRow(title=field_title)
            row.set_text(default)
            group.add(row)
            self.entries[key] = row
        self.add_extra_rows(group)
        box.append(group)

        self.error_label = Gtk.Label()
        self.error_label.add_css_class("error")
        self.error_label.set_wrap(True)
        self.error_label.set_visible(False)
        box.append(self.error_label)

        tv.set_content(box)

    def add_extra_rows(self, group: Adw.PreferencesGroup):
        """Hook for fields that are not plain text entries."""

    def value(self, key: str) -> str:
        return self.entries[key].get_text()

    def build_result(self):
        raise NotImplementedError

    def _on_save_clicked(self, _btn):
        try:
            result = self.build_result()
        except (SSHManagerError, ValueError) as e:
            self.error_label.set_text(str(e))
            self.error_label.set_visible(True)
            return
        self.close()
        self._on_save(result)


class ConnectionDialog(FormDialog):
    """Collects a new SSH connection (a managed ``Host`` entry)."""

    fields = [
        ("name", _("Connection name"), ""),
        ("hostname", _("Host address"), ""),
        ("user", _("User"), ""),
        ("port", _("Port"), "22"),
        ("identity_file", _("SSH key path (optional)"), ""),
    ]

    def __init__(self, parent, on_save: Callable):
        super().__init__(parent, _("Add SSH Connection"), on_save)

    def build_result(self):
        return validate_host_input(
            self.value("name"),
            self.value("hostname"),
            self.value("user"),
            self.value("port"),
            self.value("identity_file"),
        )


class GenerateKeyDialog(FormDialog):
    """Collects the name, type and comment of a key pair to generate."""

    fields = [
        ("name", _("Key file name"), ""),
        ("comment", _("Comment (optional)"), ""),
    ]
    save_label = _("Generate")

    def __init__(self, parent, on_save: Callable, default_type: str = "ed25519"):
        self._default_type = default_type if default_type in KEY_TYPES else "ed25519"
        super().__init__(parent, _("Generate SSH Key"), on_save)

    def add_extra_rows(self, group):
        self.type_row = Adw.ComboRow(title=_("Key type"))
        self.type_row.set_model(Gtk.StringList.new(list(KEY_TYPES)))
        self.type_row.set_selected(KEY_TYPES.index(self._default_type))
        group.add(self.type_row)

    def build_result(self):
        name = self.value("name").strip()
        if not name:
            raise ValueError(_("Key file name is required."))
        return name, KEY_TYPES[self.type_row.get_selected()], self.value("comment")


class ForwardingRuleDialog(FormDialog):
    """Collects a local port forwarding rule."""

    fields = [
        ("local_port", _("Local port"), ""),
        ("remote_host", _("Remote host"), "localhost"),
        ("remote_port", _("Remote port"), ""),
        ("ssh_host", _("SSH server"), ""),
        ("username", _("User"), ""),
        ("key_path", _("SSH key path (optional)"), ""),
    ]

    def __init__(self, parent, on_save: Callable):
        super().__init__(parent, _("Add Forwarding Rule"), on_save)

    def build_result(self):
        return validate_rule_input(
            self.value("local_port"),
            self.value("remote_host"),
            self.value("remote_port"),
            self.value("ssh_host"),
            self.value("username"),
            self.value("key_path"),
        )
