from pathlib import Path
from typing import Any, List, Optional

from .core import VoiceStudio, get_studio, initialize_studio


def get_engine() -> VoiceStudio:
    try:
        return get_studio()
    except RuntimeError:
        return initialize_studio()


def part_paths(output: str, count: int) -> List[Path]:
    path = Path(output)
    if count == 1:
        return [path]
    return [path.with_name(f"{path.stem}-{index + 1}{path.suffix or '.wav'}") for index in range(count)]


def synthesize(text: str, *, voice: Optional[str] = None, **prosody: Any) -> List[bytes]:
    """Generate WAV clips for ``text``, one per chunk, and record them in history.

    ``prosody`` keywords (speed, pitch, volume, emotion, language) apply to
    this call only.
    """
    studio = get_engine()
    settings = studio.settings.update(**prosody) if prosody else None
    result = studio.generate(text, voice=voice, settings=settings)
    return [item.audio or b"" for item in result.items]


def save_audio(text: str, output_path: str, *, voice: Optional[str] = None, **prosody: Any) -> List[str]:
    """Generate ``text`` and write the clips; multi-part results get -1, -2... suffixes."""
    clips = synthesize(text, voice=voice, **prosody)
    paths = part_paths(output_path, len(clips))
    for clip, clip_path in zip(clips, paths):
        clip_path.write_bytes(clip)
    return [str(p) for p in paths]
