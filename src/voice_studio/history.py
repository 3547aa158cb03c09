"""Clip history.

Metadata is persisted between sessions; audio is held in memory only and is
released as soon as an item falls off the end of the history or the history
is cleared.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from .internal.config import get_config_value
from .voices import Language, VoiceName, parse_language, parse_voice_name

logger = logging.getLogger(__name__)


@dataclass
class HistoryItem:
    id: str
    text: str
    timestamp: int
    voice: VoiceName
    language: Language
    audio: Optional[bytes] = None

    @property
    def has_audio(self) -> bool:
        return self.audio is not None

    def release_audio(self) -> None:
        self.audio = None

    def to_dict(self, include_audio_flag: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "timestamp": self.timestamp,
            "voice": self.voice.value,
            "language": self.language.value,
        }
        if include_audio_flag:
            data["has_audio"] = self.has_audio
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        return cls(
            id=str(data["id"]),
            text=str(data.get("text", "")),
            timestamp=int(data.get("timestamp", 0)),
            voice=parse_voice_name(data.get("voice", VoiceName.KORE)),
            language=parse_language(data.get("language", Language.VIETNAMESE)),
        )


def now_ms() -> int:
    return int(time.time() * 1000)


def make_snippet(chunk: str, index: int, total: int, snippet_length: Optional[int] = None) -> str:
    """Short label for a history entry: optional part prefix plus the chunk head."""
    if snippet_length is None:
        snippet_length = int(get_config_value("history_snippet_length", 100))
    prefix = f"[PART {index + 1}] " if total > 1 else ""
    ellipsis = "..." if len(chunk) > snippet_length else ""
    return f"{prefix}{chunk[:snippet_length]}{ellipsis}"


def make_item_id(batch_timestamp: int, index: int) -> str:
    return f"{batch_timestamp}-{index}"


class History:
    def __init__(self, items: Optional[List[HistoryItem]] = None, limit: Optional[int] = None) -> None:
        self.limit = int(limit if limit is not None else get_config_value("history_limit"))
        self._items: List[HistoryItem] = list(items or [])
        self._trim()

    def __iter__(self) -> Iterator[HistoryItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add_batch(self, items: List[HistoryItem]) -> None:
        """Prepend a generation batch given in chunk order; the last chunk ends up first."""
        self._items = list(reversed(items)) + self._items
        self._trim()

    def latest(self) -> Optional[HistoryItem]:
        return self._items[0] if self._items else None

    def get(self, item_id: str) -> Optional[HistoryItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def clear(self) -> int:
        count = len(self._items)
        for item in self._items:
            item.release_audio()
        self._items = []
        return count

    def _trim(self) -> None:
        if len(self._items) <= self.limit:
            return
        dropped = self._items[self.limit :]
        for item in dropped:
            item.release_audio()
        self._items = self._items[: self.limit]
        logger.debug(f"History trimmed, dropped {len(dropped)} item(s)")

    def to_records(self) -> List[Dict[str, Any]]:
        return [item.to_dict(include_audio_flag=False) for item in self._items]

    @classmethod
    def from_records(cls, records: List[Dict[str, Any]], limit: Optional[int] = None) -> "History":
        items = []
        for record in records:
            try:
                items.append(HistoryItem.from_dict(record))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping unreadable history record: {e}")
        return cls(items, limit=limit)
