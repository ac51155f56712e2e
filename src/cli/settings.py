"""Settings file loading and validation.

This module loads and saves CLI settings from a YAML file. A missing or empty
file means defaults; anything present is validated field by field.

Settings file structure:
    cache_dir: .gm-vault/cache
    html_cache_size: 20
    cache_max_age_days: 30      # null disables expiry
    cache_max_entries: 200
"""

import os
from typing import Any, Dict

import yaml

from .errors import SettingsError, SettingsFilesystemError
from .models import VaultSettings


class SettingsLoader:
    """Handles settings file loading, validation, and saving."""

    DEFAULT_SETTINGS_PATH = '.gm-vault/settings.yaml'

    KNOWN_FIELDS = {
        'cache_dir',
        'html_cache_size',
        'cache_max_age_days',
        'cache_max_entries',
    }

    @classmethod
    def load(cls, settings_path: str = DEFAULT_SETTINGS_PATH) -> VaultSettings:
        """Load settings from a YAML file.

        Args:
            settings_path: Path to the YAML settings file

        Returns:
            VaultSettings (defaults if the file is missing or empty)

        Raises:
            SettingsFilesystemError: If the file exists but cannot be read
            SettingsError: If the YAML is invalid or a field has a bad value
        """
        try:
            with open(settings_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return VaultSettings()
        except PermissionError:
            raise SettingsFilesystemError(settings_path, 'read', 'Permission denied')
        except OSError as e:
            raise SettingsFilesystemError(settings_path, 'read', str(e))

        if not content.strip():
            return VaultSettings()

        try:
            settings_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid YAML syntax: {str(e)}")

        if settings_dict is None:
            return VaultSettings()

        if not isinstance(settings_dict, dict):
            raise SettingsError(
                f"Settings must be a YAML dictionary, got {type(settings_dict).__name__}"
            )

        return cls._parse_settings(settings_dict)

    @classmethod
    def save(cls, settings_path: str, settings: VaultSettings) -> None:
        """Save settings to a YAML file.

        Raises:
            SettingsFilesystemError: If the file cannot be written
        """
        settings_dict = {
            'cache_dir': settings.cache_dir,
            'html_cache_size': settings.html_cache_size,
            'cache_max_age_days': settings.cache_max_age_days,
            'cache_max_entries': settings.cache_max_entries,
        }

        yaml_str = yaml.safe_dump(
            settings_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        settings_dir = os.path.dirname(settings_path)
        if settings_dir:
            try:
                os.makedirs(settings_dir, exist_ok=True)
            except OSError as e:
                raise SettingsFilesystemError(settings_dir, 'create_directory', str(e))

        try:
            with open(settings_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise SettingsFilesystemError(settings_path, 'write', 'Permission denied')
        except OSError as e:
            raise SettingsFilesystemError(settings_path, 'write', str(e))

    @classmethod
    def _parse_settings(cls, settings_dict: Dict[str, Any]) -> VaultSettings:
        """Validate a raw settings dictionary.

        Raises:
            SettingsError: If a field is unknown or has an invalid value
        """
        unknown = set(settings_dict.keys()) - cls.KNOWN_FIELDS
        if unknown:
            raise SettingsError(f"Unknown fields: {', '.join(sorted(unknown))}")

        defaults = VaultSettings()

        cache_dir = settings_dict.get('cache_dir', defaults.cache_dir)
        if not isinstance(cache_dir, str) or not cache_dir.strip():
            raise SettingsError("Field 'cache_dir' must be a non-empty string", 'cache_dir')

        html_cache_size = cls._positive_int(
            settings_dict.get('html_cache_size', defaults.html_cache_size),
            'html_cache_size'
        )
        cache_max_entries = cls._positive_int(
            settings_dict.get('cache_max_entries', defaults.cache_max_entries),
            'cache_max_entries'
        )

        cache_max_age_days = settings_dict.get('cache_max_age_days', defaults.cache_max_age_days)
        if cache_max_age_days is not None:
            cache_max_age_days = cls._positive_int(cache_max_age_days, 'cache_max_age_days')

        return VaultSettings(
            cache_dir=cache_dir.strip(),
            html_cache_size=html_cache_size,
            cache_max_age_days=cache_max_age_days,
            cache_max_entries=cache_max_entries,
        )

    @staticmethod
    def _positive_int(value: Any, field_name: str) -> int:
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int):
            raise SettingsError(
                f"Field '{field_name}' must be an integer, got {type(value).__name__}",
                field_name
            )
        if value < 1:
            raise SettingsError(
                f"Field '{field_name}' must be at least 1, got {value}",
                field_name
            )
        return value
