from .api import save_audio, synthesize
from .base import TTSProvider
from .core import VoiceStudio

__all__ = ["VoiceStudio", "TTSProvider", "synthesize", "save_audio"]
