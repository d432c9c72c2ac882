"""
Einfacher Key-Value-Speicher fuer Server- und App-Einstellungen.
"""
import json
import logging
from pathlib import Path
from typing import Optional

from platform_utils import get_config_dir

logger = logging.getLogger(__name__)

DEFAULTS = {
    "host": "127.0.0.1",
    "port": 8866,
    "pin": "0000",
    "reconcile_timeout": 60.0,
}


class AppSettings:

    def __init__(self, settings_file: Optional[Path] = None):
        if settings_file is None:
            settings_file = get_config_dir() / "settings.json"
        self._settings_file = settings_file
        self._data: dict = {}
        self._load()

    def _load(self):
        try:
            if self._settings_file.exists():
                with open(self._settings_file, "r", encoding="utf-8") as f:
                    self._data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Einstellungen nicht lesbar, verwende Standardwerte: %s", e)
            self._data = {}

    def _save(self):
        self._settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._settings_file, "w", encoding="utf-8") as f:
            json.dump(self._data, f, ensure_ascii=False, indent=2)

    def get(self, key: str, default=None):
        if default is None:
            default = DEFAULTS.get(key)
        return self._data.get(key, default)

    def set(self, key: str, value):
        self._data[key] = value
        self._save()
