# burnz/utils/config.py
# Rev 0.2.0
from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
from .paths import DB_PATH, config_dir

_log = logging.getLogger("burnz.config")

_DEFAULTS: Dict[str, Any] = {
    "db_path": str(DB_PATH),
    "log_level": "INFO",
    # False mirrors a store with no composite index for filtered+ordered queries
    "ordered_queries": True,
}


def settings_file() -> Path:
    override = os.environ.get("BURNZ_CONFIG")
    if override:
        return Path(override).expanduser()
    return config_dir() / "settings.json"


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """Defaults, overlaid by settings.json, overlaid by BURNZ_* env vars."""
    path = path or settings_file()
    data = dict(_DEFAULTS)
    if path.exists():
        try:
            data.update(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError):
            _log.warning("Ignoring unreadable settings file %s", path, exc_info=True)

    if os.environ.get("BURNZ_DB"):
        data["db_path"] = os.environ["BURNZ_DB"]
    if os.environ.get("BURNZ_LOG_LEVEL"):
        data["log_level"] = os.environ["BURNZ_LOG_LEVEL"].upper()
    return data


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
