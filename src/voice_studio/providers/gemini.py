"""Google Gemini TTS provider (generateContent REST endpoint)."""

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from ..base import TTSProvider
from ..exceptions import AuthenticationError, NetworkError, ProviderError, map_http_error
from ..internal.config import get_api_key, get_config_value
from ..internal.types import ProviderInfo
from ..prosody import ProsodySettings, build_prompt
from ..voices import EMOTIONS, PITCH_OPTIONS, VoiceName, get_voice_descriptions

PROVIDER_NAME = "Gemini TTS"


class GeminiTTSProvider(TTSProvider):
    """Calls Gemini's native audio output and returns its base64 PCM payload."""

    def __init__(
        self,
        api_key_getter: Optional[Callable[[], Optional[str]]] = None,
        client: Optional[httpx.Client] = None,
        model: Optional[str] = None,
    ) -> None:
        self.logger = logging.getLogger(__name__)
        self._api_key_getter = api_key_getter or get_api_key
        self._client = client
        self._owns_client = client is None
        self.model = model or str(get_config_value("gemini_model"))

    def _get_api_key(self) -> str:
        api_key = self._api_key_getter()
        if not api_key:
            raise AuthenticationError(
                "Gemini API key not found. Set it with: voice-studio set-key YOUR_KEY or GEMINI_API_KEY"
            )
        return api_key

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=float(get_config_value("request_timeout")))
        return self._client

    def _build_url(self) -> str:
        base = str(get_config_value("gemini_api_base")).rstrip("/")
        return f"{base}/models/{self.model}:generateContent"

    def _build_payload(self, text: str, voice: VoiceName, settings: ProsodySettings) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": build_prompt(text, settings)}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {
                        "prebuiltVoiceConfig": {"voiceName": voice.value},
                    },
                },
            },
        }

    def _extract_audio(self, data: Dict[str, Any]) -> str:
        try:
            audio = data["candidates"][0]["content"]["parts"][0]["inlineData"]["data"]
        except (KeyError, IndexError, TypeError):
            audio = None
        if not audio:
            finish_reason = None
            candidates = data.get("candidates") if isinstance(data, dict) else None
            if candidates and isinstance(candidates[0], dict):
                finish_reason = candidates[0].get("finishReason")
            self.logger.warning(f"Gemini response had no audio (finishReason={finish_reason})")
            raise ProviderError("No audio data returned by the API")
        return str(audio)

    def synthesize(self, text: str, voice: VoiceName, settings: ProsodySettings) -> str:
        api_key = self._get_api_key()
        headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}
        payload = self._build_payload(text, voice, settings)

        self.logger.debug(f"Requesting {len(text)} chars from {self.model} with voice {voice.value}")
        try:
            response = self._get_client().post(self._build_url(), headers=headers, json=payload)
        except httpx.TimeoutException as e:
            raise NetworkError(f"{PROVIDER_NAME} request timed out: {e}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"{PROVIDER_NAME} request failed: {e}") from e

        if response.status_code != 200:
            raise map_http_error(response.status_code, response.text, PROVIDER_NAME)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(f"{PROVIDER_NAME} returned invalid JSON: {e}") from e

        return self._extract_audio(data)

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def get_info(self) -> ProviderInfo:
        api_status = "✅ Configured" if self._api_key_getter() else "❌ API key not set"
        return {
            "name": "Google Gemini TTS",
            "description": "Generative speech with prompt-controlled style, speed and pitch",
            "api_status": api_status,
            "model": self.model,
            "sample_voices": [voice.value for voice in VoiceName],
            "voice_descriptions": get_voice_descriptions(),
            "options": {
                "emotion": f"One of: {', '.join(EMOTIONS)}",
                "pitch": f"One of: {', '.join(PITCH_OPTIONS)}",
                "speed": "0.5 to 2.0 (default 1.0)",
                "volume": "0.0 to 1.0 (default 1.0)",
            },
            "features": {
                "ssml_support": False,
                "languages": "Detected automatically from the text",
                "quality": "Generative",
            },
            "output_format": "WAV (24 kHz, 16-bit, mono)",
        }
