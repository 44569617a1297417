"""
Configuration Manager for SSH Manager
Handles application settings persisted as JSON
"""

import copy
import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

from .platform_utils import get_config_dir

logger = logging.getLogger(__name__)

# Increment this whenever the configuration format changes
CONFIG_VERSION = 1


class Config:
    """Configuration manager for SSH Manager"""

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or os.path.join(get_config_dir(), 'settings.json')
        self.config_data = self.load_json_config()

    def load_json_config(self) -> Dict[str, Any]:
        """Load configuration from JSON file"""
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    config = json.load(f)
                if not isinstance(config, dict):
                    raise ValueError("settings file does not contain an object")

                # Purge outdated configurations
                try:
                    stored_version = int(config.get('config_version', 0))
                except (TypeError, ValueError):
                    stored_version = 0
                if stored_version < CONFIG_VERSION:
                    backup_file = f"{self.config_file}.bak"
                    try:
                        os.replace(self.config_file, backup_file)
                        logger.warning(
                            "Outdated config version %s detected; backing up to %s and regenerating defaults",
                            stored_version,
                            backup_file,
                        )
                    except OSError:
                        os.remove(self.config_file)
                        logger.warning(
                            "Outdated config version %s detected; old config removed and new defaults generated",
                            stored_version,
                        )

                    config = self.get_default_config()
                    self.save_json_config(config)
                else:
                    config, updated = self._ensure_config_defaults(config)
                    if updated:
                        self.save_json_config(config)

                return config
            else:
                # Create default config
                default_config = self.get_default_config()
                self.save_json_config(default_config)
                return default_config
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load JSON config: {e}")
            return self.get_default_config()

    def save_json_config(self, config_data: Dict[str, Any] = None):
        """Save configuration to JSON file"""
        try:
            if config_data is None:
                config_data = self.config_data

            os.makedirs(os.path.dirname(self.config_file), exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(config_data, f, indent=2)

            logger.debug("Configuration saved to JSON file")
        except (OSError, TypeError) as e:
            logger.error(f"Failed to save JSON config: {e}")

    def get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values"""
        return {
            'config_version': CONFIG_VERSION,
            'debug_enabled': False,
            'terminal': {
                # Empty means Terminal.app on macOS, first detected emulator elsewhere
                'app': '',
            },
            'keys': {
                'default_type': 'ed25519',
            },
            'window': {
                'width': 1200,
                'height': 800,
            },
            'port_forwarding': {
                'rules': [],
            },
        }

    def _ensure_config_defaults(self, config: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
        """Fill in keys missing from *config*; return it and whether it changed."""
        updated = False

        def merge(target: Dict[str, Any], defaults: Dict[str, Any]):
            nonlocal updated
            for key, value in defaults.items():
                if key not in target:
                    target[key] = copy.deepcopy(value)
                    updated = True
                elif isinstance(value, dict) and isinstance(target[key], dict):
                    merge(target[key], value)

        merge(config, self.get_default_config())
        return config, updated

    def get_setting(self, key: str, default=None):
        """Get a setting value"""
        # Navigate nested dictionary
        value = self.config_data
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set_setting(self, key: str, value: Any):
        """Set a setting value"""
        keys = key.split('.')
        current = self.config_data
        for k in keys[:-1]:
            if k not in current or not isinstance(current[k], dict):
                current[k] = {}
            current = current[k]
        current[keys[-1]] = value
        self.save_json_config()

        logger.debug(f"Setting {key} = {value}")

    def get_window_geometry(self) -> Dict[str, int]:
        """Get saved window geometry"""
        return {
            'width': int(self.get_setting('window.width', 1200)),
            'height': int(self.get_setting('window.height', 800)),
        }

    def save_window_geometry(self, width: int, height: int):
        """Save window geometry"""
        self.set_setting('window.width', width)
        self.set_setting('window.height', height)

    def reset_to_defaults(self):
        """Reset all settings to defaults"""
        self.config_data = self.get_default_config()
        self.save_json_config()
        logger.info("Configuration reset to defaults")
