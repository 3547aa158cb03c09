from dataclasses import dataclass
from enum import Enum


class VoiceName(str, Enum):
    KORE = "Kore"
    PUCK = "Puck"
    CHARON = "Charon"
    FENRIR = "Fenrir"
    ZEPHYR = "Zephyr"


class Language(str, Enum):
    VIETNAMESE = "vi-VN"
    ENGLISH = "en-US"


@dataclass(frozen=True)
class VoiceOption:
    id: VoiceName
    name: str
    gender: str
    description: str


VOICES = [
    VoiceOption(VoiceName.KORE, "Kore", "Female", "Clear, professional and balanced"),
    VoiceOption(VoiceName.PUCK, "Puck", "Male", "Friendly, energetic and youthful"),
    VoiceOption(VoiceName.ZEPHYR, "Zephyr", "Female", "Soft, airy and calm"),
    VoiceOption(VoiceName.CHARON, "Charon", "Male", "Deep, warm, authoritative and cinematic"),
    VoiceOption(VoiceName.FENRIR, "Fenrir", "Male", "Strong, husky and expressive"),
]

EMOTIONS = [
    "Natural",
    "Cheerful",
    "Serious/News",
    "Sad",
    "Angry",
    "Whisper",
    "Excited",
]

PITCH_OPTIONS = [
    "Very low",
    "Low",
    "Medium",
    "High",
    "Very high",
]

DEFAULT_VOICE = VoiceName.KORE
DEFAULT_EMOTION = "Natural"
DEFAULT_PITCH = "Medium"


def parse_voice_name(voice: "VoiceName | str") -> VoiceName:
    """Accept enum members or case-insensitive names like 'kore'."""
    if isinstance(voice, VoiceName):
        return voice
    for member in VoiceName:
        if member.value.lower() == str(voice).strip().lower():
            return member
    raise ValueError(f"Unknown voice '{voice}'. Available: {', '.join(v.value for v in VoiceName)}")


def parse_language(language: "Language | str") -> Language:
    """Accept a full tag like 'vi-VN' or a bare code like 'vi' (case-insensitive)."""
    if isinstance(language, Language):
        return language
    value = str(language).strip().lower()
    for member in Language:
        tag = member.value.lower()
        if value in (tag, tag.split("-")[0]):
            return member
    raise ValueError(f"Unsupported language '{language}'")


def get_voice_descriptions() -> dict[str, str]:
    return {option.name: option.description for option in VOICES}
