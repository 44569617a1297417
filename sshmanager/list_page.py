import logging
from typing import Callable, Iterable, Optional

from gi.repository import Gtk, Adw

from .dialogs import show_error

logger = logging.getLogger(__name__)


class ListPage(Gtk.Box):
    """Base for the window's tabs: a header, a boxed list and an empty state.

    Subclasses implement :meth:`reload` and build rows with :meth:`add_row`.
    """

    def __init__(self, title: str, empty_title: str, empty_icon: str,
                 action_label: Optional[str] = None, on_action: Optional[Callable] = None):
        super().__init__(orientation=Gtk.Orientation.VERTICAL, spacing=12)
        self.set_margin_top(18)
        self.set_margin_bottom(18)
        self.set_margin_start(18)
        self.set_margin_end(18)

        header = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=12)
        title_label = Gtk.Label(label=title)
        title_label.add_css_class("title-2")
        title_label.set_xalign(0)
        title_label.set_hexpand(True)
        header.append(title_label)

        self.header_box = header
        if action_label and on_action:
            action_btn = Gtk.Button(label=action_label)
            action_btn.add_css_class("suggested-action")
            action_btn.connect("clicked", lambda *_: on_action())
            header.append(action_btn)
        self.append(header)

        self.banner = Adw.Banner()
        self.append(self.banner)

        self.listbox = Gtk.ListBox()
        self.listbox.set_selection_mode(Gtk.SelectionMode.NONE)
        self.listbox.add_css_class("boxed-list")

        self.empty_page = Adw.StatusPage()
        self.empty_page.set_icon_name(empty_icon)
        self.empty_page.set_title(empty_title)

        self.stack = Gtk.Stack()
        scrolled = Gtk.ScrolledWindow()
        scrolled.set_policy(Gtk.PolicyType.NEVER, Gtk.PolicyType.AUTOMATIC)
        scrolled.set_child(self.listbox)
        self.stack.add_named(scrolled, "list")
        self.stack.add_named(self.empty_page, "empty")
        self.stack.set_vexpand(True)
        self.append(self.stack)

    def reload(self):
        raise NotImplementedError

    def show_load_error(self, message: Optional[str]):
        """Show *message* in the banner, or hide the banner when ``None``."""
        if message:
            self.banner.set_title(message)
            self.banner.set_revealed(True)
        else:
            self.banner.set_revealed(False)

    def clear_rows(self):
        while True:
            child = self.listbox.get_first_child()
            if child is None:
                break
            self.listbox.remove(child)

    def add_row(self, title: str, subtitle: str = "",
                buttons: Iterable = ()) -> Adw.ActionRow:
        """Append a row with suffix buttons given as ``(label, css_class, callback)``."""
        row = Adw.ActionRow()
        row.set_title(title)
        row.set_subtitle(subtitle)
        row.set_title_selectable(True)
        for label, css_class, callback in buttons:
            btn = Gtk.Button(label=label)
            btn.set_valign(Gtk.Align.CENTER)
            if css_class:
                btn.add_css_class(css_class)
            btn.connect("clicked", lambda _btn, cb=callback: cb())
            row.add_suffix(btn)
        self.listbox.append(row)
        return row

    def update_empty_state(self):
        has_rows = self.listbox.get_first_child() is not None
        self.stack.set_visible_child_name("list" if has_rows else "empty")

    def report_error(self, heading: str, error: Exception):
        logger.error(f"{heading}: {error}")
        show_error(self.get_root(), heading, str(error))
