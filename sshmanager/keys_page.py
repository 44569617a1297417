import logging

from gettext import gettext as _

from .dialogs import GenerateKeyDialog, confirm, show_text
from .exceptions import KeyManagerError
from .key_manager import KeyManager, SSHKey
from .list_page import ListPage

logger = logging.getLogger(__name__)


def _format_size(size: int) -> str:
    if size < 1024:
        return _("{} B").format(size)
    return _("{:.1f} KB").format(size / 1024)


class KeysPage(ListPage):
    """Key pairs in the SSH directory."""

    def __init__(self, key_manager: KeyManager, config):
        super().__init__(
            _("SSH Keys"),
            _("No SSH keys found"),
            "dialog-password-symbolic",
            action_label=_("Generate Key"),
            on_action=self._on_generate_clicked,
        )
        self.key_manager = key_manager
        self.config = config
        self.reload()

    def reload(self):
        self.clear_rows()
        try:
            keys = self.key_manager.list_keys()
        except OSError as e:
            logger.error(f"Failed to list SSH keys: {e}")
            self.show_load_error(_("Could not list SSH keys: {}").format(e))
            keys = []
        else:
            self.show_load_error(None)

        for key in keys:
            kind = _("Public key") if key.is_public else _("Private key")
            subtitle = " • ".join([
                kind,
                _format_size(key.size),
                key.modified.strftime("%Y-%m-%d %H:%M"),
            ])
            self.add_row(key.name, subtitle, [
                (_("View"), None, lambda k=key: self._view(k)),
                (_("Delete"), "destructive-action", lambda k=key: self._confirm_delete(k)),
            ])
        self.update_empty_state()

    def _on_generate_clicked(self):
        GenerateKeyDialog(
            self.get_root(),
            self._generate,
            default_type=self.config.get_setting('keys.default_type', 'ed25519'),
        ).present()

    def _generate(self, values):
        name, key_type, comment = values
        try:
            self.key_manager.generate_key(name, key_type, comment)
        except (KeyManagerError, ValueError, OSError) as e:
            self.report_error(_("Key generation failed"), e)
        self.reload()

    def _view(self, key: SSHKey):
        try:
            text = self.key_manager.read_key_text(key.path)
        except (OSError, UnicodeDecodeError) as e:
            self.report_error(_("Failed to read key"), e)
            return
        show_text(self.get_root(), key.name, text)

    def _confirm_delete(self, key: SSHKey):
        confirm(
            self.get_root(),
            _("Delete SSH key?"),
            _("'{}' and its matching key file will be deleted.").format(key.name),
            lambda: self._delete(key),
        )

    def _delete(self, key: SSHKey):
        try:
            self.key_manager.delete_key(key.path)
        except OSError as e:
            self.report_error(_("Failed to delete key"), e)
        self.reload()
