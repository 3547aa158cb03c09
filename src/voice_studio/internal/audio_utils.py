"""Audio helpers for the raw PCM returned by the Gemini TTS models."""

import base64
import binascii
import io
import wave
from typing import Optional

from ..exceptions import ProviderError
from .config import get_config_value


def decode_base64_audio(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ProviderError(f"Audio payload is not valid base64: {e}") from e


def encode_base64_audio(audio: bytes) -> str:
    return base64.b64encode(audio).decode("utf-8")


def pcm_to_wav(
    pcm: bytes,
    sample_rate: Optional[int] = None,
    channels: Optional[int] = None,
    sample_width: Optional[int] = None,
) -> bytes:
    """Wrap little-endian PCM frames in a RIFF/WAV container."""
    sample_rate = int(sample_rate or get_config_value("sample_rate"))
    channels = int(channels or get_config_value("audio_channels"))
    sample_width = int(sample_width or get_config_value("audio_sample_width"))

    frame_size = channels * sample_width
    if len(pcm) % frame_size:
        # drop a trailing partial frame rather than emit a corrupt file
        pcm = pcm[: len(pcm) - len(pcm) % frame_size]

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(sample_width)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()


def get_wav_duration(wav_bytes: bytes) -> float:
    """Duration in seconds of an in-memory WAV file."""
    with wave.open(io.BytesIO(wav_bytes), "rb") as wav_file:
        frames = wav_file.getnframes()
        rate = wav_file.getframerate()
    if not rate:
        return 0.0
    return frames / float(rate)


def format_time(seconds: float) -> str:
    """m:ss, as shown next to the player."""
    total = int(max(seconds, 0))
    return f"{total // 60}:{total % 60:02d}"
