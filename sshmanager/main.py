#!/usr/bin/env python3
"""
SSH Manager - desktop front end for SSH keys, known hosts, tunnels and connections
Main application entry point
"""

import sys
import os
import logging
import argparse
from logging.handlers import RotatingFileHandler

import gi
gi.require_version('Adw', '1')
gi.require_version('Gtk', '4.0')

from gi.repository import Adw, Gio

from . import APP_ID, __version__
from .config import Config
from .platform_utils import get_data_dir, is_macos


class SSHManagerApplication(Adw.Application):
    """Main application class for SSH Manager"""

    def __init__(self, verbose: bool = False):
        super().__init__(
            application_id=APP_ID,
            flags=Gio.ApplicationFlags.FLAGS_NONE
        )

        # Command line verbosity override
        self.verbose_override = verbose
        self.config = Config()

        # Set up logging
        self.setup_logging()

        primary = '<Meta>' if is_macos() else '<primary>'
        self.create_action('quit', self.on_quit_action, [f'{primary}q'])
        self.create_action('about', self.on_about)

        self.connect('activate', self.on_activate)

        # Initialize window reference
        self.window = None

        logging.info("SSH Manager application initialized")

    def on_activate(self, app):
        """Handle application activation"""
        # Create a new window if one doesn't exist
        if not self.window or not self.window.get_visible():
            from .window import MainWindow
            self.window = MainWindow(self.config, application=app)
            self.window.present()

    def setup_logging(self):
        """Set up logging configuration"""
        # Create log directory if it doesn't exist
        log_dir = get_data_dir()
        os.makedirs(log_dir, exist_ok=True)

        verbose = bool(self.config.get_setting('debug_enabled', False)) or self.verbose_override
        log_level = logging.DEBUG if verbose else logging.INFO

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Clear any existing handlers
        logging.getLogger().handlers.clear()

        # File handler with rotation
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'sshmanager.log'),
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)

        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)

        # Add handlers to root logger
        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)

        logging.getLogger('gi').setLevel(logging.INFO if verbose else logging.WARNING)

    def create_action(self, name, callback, shortcuts=None):
        """Create a GAction with optional keyboard shortcuts"""
        action = Gio.SimpleAction.new(name, None)
        action.connect("activate", callback)
        self.add_action(action)
        if shortcuts:
            self.set_accels_for_action(f"app.{name}", shortcuts)

    def on_quit_action(self, action=None, param=None):
        """Handle quit action"""
        if self.window:
            self.window.close()
        self.quit()

    def on_about(self, action, param):
        """Show about dialog"""
        about = Adw.AboutWindow(
            transient_for=self.window,
            application_name='SSH Manager',
            application_icon='utilities-terminal',
            version=__version__,
            comments='Manage SSH keys, known hosts, port forwarding and connections',
        )
        about.present()


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description='SSH Manager')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    args, remaining = parser.parse_known_args()

    app = SSHManagerApplication(verbose=args.verbose)
    return app.run([sys.argv[0]] + remaining)


if __name__ == '__main__':
    sys.exit(main())
