from abc import ABC, abstractmethod
from typing import Optional

from .internal.types import ProviderInfo
from .prosody import ProsodySettings
from .voices import VoiceName


class TTSProvider(ABC):
    """A speech backend: text plus voice and prosody in, base64 audio out."""

    @abstractmethod
    def synthesize(self, text: str, voice: VoiceName, settings: ProsodySettings) -> str:
        """Return the base64-encoded audio payload for ``text``."""

    def get_info(self) -> Optional[ProviderInfo]:
        return None

    def close(self) -> None:
        """Release network resources, if any."""
