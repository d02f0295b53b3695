"""
Persistent settings for the importer.

Stored as JSON in the user config directory. Unknown keys are ignored and
bad values are clamped or normalised, so a hand-edited file never stops an
import from starting.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from mediaimport.core.copier import CopyOptions
from mediaimport.core.file_types import NORMAL_IMAGES, normalize_extensions


@dataclass
class ImportSettings:
    """Settings for the copy engine."""
    buffer_size: int = 65536
    cancel_check_interval: int = 50
    extensions: list[str] = field(default_factory=lambda: list(NORMAL_IMAGES.extensions))

    def to_copy_options(self) -> CopyOptions:
        return CopyOptions(
            buffer_size=self.buffer_size,
            cancel_check_interval=self.cancel_check_interval,
        )


@dataclass
class LoggingSettings:
    """Settings for log output."""
    level: str = "INFO"
    log_file: str = ""


@dataclass
class ApplicationSettings:
    """Everything stored in settings.json."""
    importer: ImportSettings = field(default_factory=ImportSettings)
    log: LoggingSettings = field(default_factory=LoggingSettings)


class SettingsManager:
    """Loads, caches and saves ApplicationSettings; notifies observers on save."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = settings_path or self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None
        self._observers: list[Callable[[ApplicationSettings], None]] = []

    @staticmethod
    def _get_default_path() -> Path:
        if os.name == 'nt':
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'MediaImport' / 'settings.json'
        else:
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'mediaimport' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Settings, read from disk on first access."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """Load settings from disk, falling back to defaults."""
        if not self.settings_path.exists():
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return self._from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logging.warning(f"SettingsManager - Could not load {self.settings_path}, using defaults: {e}")
            return ApplicationSettings()

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        """Write `settings` (or the cached settings) to disk. Returns False on failure."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(asdict(settings), f, indent=2)

            self._settings = settings
            self._notify_observers()
            return True

        except OSError as e:
            logging.error(f"SettingsManager - Could not save {self.settings_path}: {e}")
            return False

    def reset(self) -> ApplicationSettings:
        """Replace the stored settings with the defaults."""
        self._settings = ApplicationSettings()
        self.save()
        return self._settings

    def add_observer(self, callback: Callable[[ApplicationSettings], None]) -> None:
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[ApplicationSettings], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self) -> None:
        for callback in self._observers:
            try:
                callback(self._settings)
            except Exception:
                logging.exception("SettingsManager - Settings observer failed")

    def _from_dict(self, data: dict[str, Any]) -> ApplicationSettings:
        """Build settings from parsed JSON, normalising extensions and clamping sizes."""
        defaults = ImportSettings()
        importer_data = data.get('importer', {})
        logging_data = data.get('log', {})

        extensions = importer_data.get('extensions', defaults.extensions)

        importer = ImportSettings(
            buffer_size=max(1, int(importer_data.get('buffer_size', defaults.buffer_size))),
            cancel_check_interval=max(
                1, int(importer_data.get('cancel_check_interval', defaults.cancel_check_interval))
            ),
            extensions=sorted(normalize_extensions(extensions)),
        )

        log_settings = LoggingSettings(
            level=str(logging_data.get('level', 'INFO')).upper(),
            log_file=str(logging_data.get('log_file', '')),
        )

        return ApplicationSettings(importer=importer, log=log_settings)
