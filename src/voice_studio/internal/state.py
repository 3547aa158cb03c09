"""JSON persistence for studio state.

Holds what a browser front end would keep in local storage: the user's API
key, the selected voice and prosody settings, usage counters and history
metadata. Audio never reaches this file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .config import get_data_dir

logger = logging.getLogger(__name__)

STATE_FILENAME = "state.json"
STATE_KEYS = ("api_key", "voice", "settings", "usage", "history")


class StateStore:
    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path else get_data_dir() / STATE_FILENAME

    def load(self) -> Dict[str, Any]:
        """Read the state file. Unreadable sections are dropped individually."""
        if not self.path.exists():
            logger.debug(f"No state file at {self.path}, starting fresh")
            return {}

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read state from {self.path}: {e}. Starting fresh.")
            return {}

        if not isinstance(raw, dict):
            logger.warning(f"Ignoring malformed state file {self.path}")
            return {}
        return {key: raw[key] for key in STATE_KEYS if key in raw}

    def save(self, state: Dict[str, Any]) -> bool:
        """Write state atomically."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix(".tmp")
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump({key: state[key] for key in STATE_KEYS if key in state}, f, ensure_ascii=False, indent=2)
            temp_path.replace(self.path)
            logger.debug(f"State saved to {self.path}")
            return True
        except (IOError, OSError) as e:
            logger.error(f"Failed to save state to {self.path}: {e}")
            return False
