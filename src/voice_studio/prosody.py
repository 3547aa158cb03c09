"""Prosody settings and the instruction prompt sent with every request.

The Gemini TTS models take no numeric prosody parameters; speed, pitch,
volume and emotion are described in natural language ahead of the text.
"""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict

from .exceptions import ValidationError
from .voices import DEFAULT_EMOTION, DEFAULT_PITCH, EMOTIONS, PITCH_OPTIONS, Language, parse_language

MIN_SPEED = 0.5
MAX_SPEED = 2.0
MIN_VOLUME = 0.0
MAX_VOLUME = 1.0


@dataclass(frozen=True)
class ProsodySettings:
    speed: float = 1.0
    pitch: str = DEFAULT_PITCH
    volume: float = 1.0
    emotion: str = DEFAULT_EMOTION
    language: Language = Language.VIETNAMESE

    def __post_init__(self) -> None:
        try:
            speed = round(float(self.speed), 1)
            volume = float(self.volume)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Speed and volume must be numbers: {e}") from e
        if not MIN_SPEED <= speed <= MAX_SPEED:
            raise ValidationError(f"Speed must be between {MIN_SPEED} and {MAX_SPEED}, got {self.speed}")
        if not MIN_VOLUME <= volume <= MAX_VOLUME:
            raise ValidationError(f"Volume must be between {MIN_VOLUME} and {MAX_VOLUME}, got {self.volume}")
        if self.pitch not in PITCH_OPTIONS:
            raise ValidationError(f"Unknown pitch '{self.pitch}'. Options: {', '.join(PITCH_OPTIONS)}")
        if self.emotion not in EMOTIONS:
            raise ValidationError(f"Unknown emotion '{self.emotion}'. Options: {', '.join(EMOTIONS)}")
        try:
            language = parse_language(self.language)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        # frozen dataclass: normalized values go through object.__setattr__
        object.__setattr__(self, "speed", speed)
        object.__setattr__(self, "volume", volume)
        object.__setattr__(self, "language", language)

    def update(self, **changes: Any) -> "ProsodySettings":
        unknown = set(changes) - set(self.to_dict())
        if unknown:
            raise ValidationError(f"Unknown prosody setting(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    def for_preview(self) -> "ProsodySettings":
        return replace(self, speed=1.0, emotion=DEFAULT_EMOTION)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["language"] = self.language.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProsodySettings":
        fields = {key: data[key] for key in ("speed", "pitch", "volume", "emotion", "language") if key in data}
        return cls(**fields)


def _describe_volume(volume: float) -> str:
    if volume <= 0.3:
        return "quiet"
    if volume < 0.8:
        return "moderate"
    return "full"


def build_prompt(text: str, settings: ProsodySettings) -> str:
    return (
        "INSTRUCTIONS:\n"
        "1. Automatically detect the language of the text below.\n"
        "2. Read the text as naturally as possible in that language.\n"
        "3. Apply the following voice characteristics:\n"
        f"   - Emotion/Style: {settings.emotion}\n"
        f"   - Speaking rate: {settings.speed}x (default 1.0)\n"
        f"   - Pitch: {settings.pitch}\n"
        f"   - Volume: {_describe_volume(settings.volume)} ({settings.volume:.1f})\n"
        "\n"
        "TEXT TO CONVERT:\n"
        f"{text}"
    )
