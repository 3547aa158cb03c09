"""Studio engine: the state container behind the CLI and the HTTP API.

Holds the selected voice, prosody settings, usage counters and clip
history, and runs the generate/preview/download flows against a
``TTSProvider``. Chunks are synthesized one after another; any failure
aborts the whole request without touching history or usage.
"""

import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .base import TTSProvider
from .exceptions import AudioUnavailableError, BusyError, ValidationError
from .history import History, HistoryItem, make_item_id, make_snippet, now_ms
from .internal.audio_utils import decode_base64_audio, pcm_to_wav
from .internal.config import get_api_key, get_config_value, validate_api_key
from .internal.state import StateStore
from .internal.types import GenerationProgress
from .prosody import ProsodySettings
from .text_splitter import split_text
from .usage import UsageStats, UsageTracker
from .voices import DEFAULT_VOICE, VoiceName, parse_voice_name

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[GenerationProgress], None]


@dataclass
class GenerationResult:
    items: List[HistoryItem]
    estimated_seconds: int
    characters: int

    @property
    def current(self) -> HistoryItem:
        return self.items[-1]


def estimate_seconds(characters: int, chunk_count: int) -> int:
    """Rough wall-clock estimate shown before a generation starts."""
    base = float(get_config_value("estimate_base_seconds"))
    per_char = float(get_config_value("estimate_chars_per_second"))
    per_part = float(get_config_value("estimate_seconds_per_part"))
    return int(math.ceil(base + characters / per_char + chunk_count * per_part))


def download_filename(item: HistoryItem) -> str:
    return f"voice-studio-{item.id}.wav"


class VoiceStudio:
    def __init__(
        self,
        provider: Optional[TTSProvider] = None,
        store: Optional[StateStore] = None,
        autoload: bool = True,
    ) -> None:
        self.store = store or StateStore()
        self.api_key: Optional[str] = None
        self.voice: VoiceName = parse_voice_name(get_config_value("default_voice", DEFAULT_VOICE.value))
        self.settings = ProsodySettings(language=get_config_value("default_language"))
        self.usage = UsageTracker()
        self.history = History()
        self.current_item_id: Optional[str] = None
        self.previewing: Optional[VoiceName] = None
        self._busy = threading.Lock()
        self._preview_lock = threading.Lock()
        self._last_batch_ts = 0

        if provider is None:
            from .providers.gemini import GeminiTTSProvider

            provider = GeminiTTSProvider(api_key_getter=self.resolve_api_key)
        self.provider = provider

        if autoload:
            self.load()

    # State persistence

    def load(self) -> None:
        state = self.store.load()

        self.api_key = state.get("api_key") or None

        if "voice" in state:
            try:
                self.voice = parse_voice_name(state["voice"])
            except ValueError as e:
                logger.warning(f"Ignoring saved voice: {e}")

        if isinstance(state.get("settings"), dict):
            try:
                self.settings = ProsodySettings.from_dict(state["settings"])
            except ValidationError as e:
                logger.warning(f"Ignoring saved prosody settings: {e}")

        if isinstance(state.get("usage"), dict):
            try:
                self.usage = UsageTracker(UsageStats.from_dict(state["usage"]))
            except (TypeError, ValueError) as e:
                logger.warning(f"Ignoring saved usage counters: {e}")

        if isinstance(state.get("history"), list):
            self.history = History.from_records(state["history"])

    def save(self) -> bool:
        return self.store.save(
            {
                "api_key": self.api_key,
                "voice": self.voice.value,
                "settings": self.settings.to_dict(),
                "usage": self.usage.stats.to_dict(),
                "history": self.history.to_records(),
            }
        )

    # Settings

    def resolve_api_key(self) -> Optional[str]:
        return get_api_key(self.api_key)

    def set_api_key(self, api_key: str) -> None:
        api_key = (api_key or "").strip()
        if not validate_api_key(api_key):
            raise ValidationError("That does not look like a Gemini API key", i18n_key="errors.invalid_api_key")
        self.api_key = api_key
        self.save()
        logger.info("API key updated")

    def set_voice(self, voice: "VoiceName | str") -> VoiceName:
        try:
            self.voice = parse_voice_name(voice)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        self.save()
        return self.voice

    def update_settings(self, **changes: Any) -> ProsodySettings:
        self.settings = self.settings.update(**changes)
        self.save()
        return self.settings

    @property
    def is_generating(self) -> bool:
        return self._busy.locked()

    # Flows

    def generate(
        self,
        text: str,
        voice: "VoiceName | str | None" = None,
        on_progress: Optional[ProgressCallback] = None,
        on_estimate: Optional[Callable[[int], None]] = None,
        settings: Optional[ProsodySettings] = None,
    ) -> GenerationResult:
        """Synthesize ``text``, chunk by chunk, and add the clips to history.

        ``settings`` overrides the saved prosody for this request only. The
        prosody in effect when the request starts is used for every chunk.
        """
        if not text or not text.strip():
            raise ValidationError("Enter some text to convert", i18n_key="errors.empty_text")

        settings = settings or self.settings

        try:
            selected = self.voice if voice is None else parse_voice_name(voice)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        if not self._busy.acquire(blocking=False):
            raise BusyError("A generation is already in progress")

        try:
            characters = len(text)
            self.usage.check(characters)

            chunks = split_text(text, int(get_config_value("max_chars_per_part")))
            estimate = estimate_seconds(characters, len(chunks))
            if on_estimate:
                on_estimate(estimate)
            logger.info(f"Generating {characters} chars in {len(chunks)} part(s) with {selected.value}")

            # ids are "<batch-ms>-<index>"; keep batch stamps strictly increasing
            batch_ts = max(now_ms(), self._last_batch_ts + 1)
            self._last_batch_ts = batch_ts

            items: List[HistoryItem] = []
            synthesized_chars = 0
            for index, chunk in enumerate(chunks):
                if on_progress:
                    on_progress({"current": index + 1, "total": len(chunks), "percent": int(index * 100 / len(chunks))})

                audio_b64 = self.provider.synthesize(chunk, selected, settings)
                wav = pcm_to_wav(decode_base64_audio(audio_b64))

                items.append(
                    HistoryItem(
                        id=make_item_id(batch_ts, index),
                        text=make_snippet(chunk, index, len(chunks)),
                        timestamp=now_ms(),
                        voice=selected,
                        language=settings.language,
                        audio=wav,
                    )
                )
                synthesized_chars += len(chunk)

            if on_progress:
                on_progress({"current": len(chunks), "total": len(chunks), "percent": 100})

            self.history.add_batch(items)
            self.usage.record(synthesized_chars)
            self.current_item_id = items[-1].id
            self.save()
            return GenerationResult(items=items, estimated_seconds=estimate, characters=synthesized_chars)
        finally:
            self._busy.release()

    def preview(self, voice: "VoiceName | str") -> bytes:
        """Speak the preview phrase with ``voice``; not counted, not kept."""
        try:
            selected = parse_voice_name(voice)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        if not self._preview_lock.acquire(blocking=False):
            raise BusyError("A preview is already playing")
        self.previewing = selected
        try:
            audio_b64 = self.provider.synthesize(
                str(get_config_value("preview_text")), selected, self.settings.for_preview()
            )
            return pcm_to_wav(decode_base64_audio(audio_b64))
        finally:
            self.previewing = None
            self._preview_lock.release()

    def get_item(self, item_id: str) -> HistoryItem:
        item = self.history.get(item_id)
        if item is None:
            raise KeyError(item_id)
        return item

    def download(self, item_id: str) -> Tuple[str, bytes]:
        item = self.get_item(item_id)
        if item.audio is None:
            raise AudioUnavailableError("Audio for this clip is not available in this session")
        return download_filename(item), item.audio

    def latest(self) -> Optional[HistoryItem]:
        return self.history.latest()

    def clear_history(self) -> int:
        count = self.history.clear()
        self.current_item_id = None
        self.save()
        logger.info(f"Cleared {count} history item(s)")
        return count

    def snapshot(self) -> Dict[str, Any]:
        return {
            "voice": self.voice.value,
            "settings": self.settings.to_dict(),
            "api_key_set": bool(self.resolve_api_key()),
            "is_generating": self.is_generating,
            "current_item_id": self.current_item_id,
        }

    def close(self) -> None:
        self.provider.close()


_studio: Optional[VoiceStudio] = None


def initialize_studio(provider: Optional[TTSProvider] = None, store: Optional[StateStore] = None) -> VoiceStudio:
    global _studio
    _studio = VoiceStudio(provider=provider, store=store)
    return _studio


def get_studio() -> VoiceStudio:
    if _studio is None:
        raise RuntimeError("Voice studio has not been initialized")
    return _studio
