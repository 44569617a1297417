import logging

from gettext import gettext as _
from gi.repository import Gtk

from .dialogs import confirm
from .exceptions import KnownHostsError
from .known_hosts import KnownHostEntry, KnownHostsManager
from .list_page import ListPage


logger = logging.getLogger(__name__)


class KnownHostsPage(ListPage):
    """Viewing and removing entries from known_hosts."""

    def __init__(self, manager: KnownHostsManager):
        super().__init__(
            _("Known Hosts"),
            _("No known hosts"),
            "security-high-symbolic",
            action_label=_("Refresh"),
            on_action=self.reload,
        )
        self.manager = manager
        self._all_entries = []  # Store all entries for filtering

        self.search_entry = Gtk.SearchEntry()
        self.search_entry.set_placeholder_text(_("Search known hosts..."))
        self.search_entry.connect('search-changed', self._on_search_changed)
        self.insert_child_after(self.search_entry, self.header_box)

        self.reload()

    def reload(self):
        """Load known_hosts entries into the listbox."""
        try:
            self._all_entries = self.manager.list_entries()
            self.show_load_error(None)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to load known_hosts: {e}")
            self._all_entries = []
            self.show_load_error(_("Could not read known_hosts: {}").format(e))
        self._display_entries(self._filtered(self.search_entry.get_text()))

    def _filtered(self, search_text: str):
        search_text = search_text.lower().strip()
        if not search_text:
            return self._all_entries
        return [entry for entry in self._all_entries if search_text in entry.line.lower()]

    def _display_entries(self, entries):
        self.clear_rows()
        for entry in entries:
            self.add_row(entry.host, entry.key_preview, [
                (_("Remove"), "destructive-action", lambda e=entry: self._confirm_remove(e)),
            ])
        self.update_empty_state()

    def _on_search_changed(self, search_entry):
        self._display_entries(self._filtered(search_entry.get_text()))

    def _confirm_remove(self, entry: KnownHostEntry):
        confirm(
            self.get_root(),
            _("Remove known host?"),
            _("All keys stored for '{}' will be removed.").format(entry.host),
            lambda: self._remove(entry),
            action_label=_("Remove"),
        )

    def _remove(self, entry: KnownHostEntry):
        try:
            self.manager.remove_host(entry.host)
        except KnownHostsError as e:
            self.report_error(_("Failed to remove known host"), e)
        self.reload()
