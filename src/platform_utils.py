"""
Plattformabhaengiger Pfad fuer die Konfiguration
"""
import os
import sys
from pathlib import Path

APP_DIR_NAME = "nextpvr-timers"


def get_config_dir() -> Path:
    """Gibt das Config-Verzeichnis zurueck und erstellt es bei Bedarf.
    Windows: %APPDATA%/nextpvr-timers
    Linux:   ~/.config/nextpvr-timers
    """
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    config_dir = base / APP_DIR_NAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir
