"""Tests for the GeminiTTSProvider class."""

import json

import httpx
import pytest

from voice_studio.exceptions import AuthenticationError, NetworkError, ProviderError, RateLimitError
from voice_studio.prosody import ProsodySettings
from voice_studio.providers.gemini import GeminiTTSProvider
from voice_studio.voices import VoiceName

VALID_KEY = "AIza" + "g" * 35


def audio_response(data="AAAA"):
    return {"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "audio/L16;rate=24000", "data": data}}]}}]}


def make_provider(handler, api_key=VALID_KEY):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return GeminiTTSProvider(api_key_getter=lambda: api_key, client=client)


class TestGeminiTTSProviderRequest:
    def test_posts_prompt_voice_and_audio_modality(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=audio_response("UENN"))

        provider = make_provider(handler)

        audio = provider.synthesize("Xin chào", VoiceName.PUCK, ProsodySettings(emotion="Cheerful"))

        assert audio == "UENN"
        assert seen["url"].endswith("/v1beta/models/gemini-2.5-flash-preview-tts:generateContent")
        assert seen["key"] == VALID_KEY
        body = seen["body"]
        assert body["generationConfig"]["responseModalities"] == ["AUDIO"]
        voice_config = body["generationConfig"]["speechConfig"]["voiceConfig"]
        assert voice_config["prebuiltVoiceConfig"]["voiceName"] == "Puck"
        prompt = body["contents"][0]["parts"][0]["text"]
        assert "Cheerful" in prompt
        assert prompt.endswith("Xin chào")

    def test_model_from_config(self, set_config):
        set_config(gemini_model="gemini-2.5-pro-preview-tts")
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            return httpx.Response(200, json=audio_response())

        make_provider(handler).synthesize("hi", VoiceName.KORE, ProsodySettings())

        assert seen["path"].endswith("gemini-2.5-pro-preview-tts:generateContent")

    def test_missing_key_fails_before_request(self):
        handler_calls = []

        def handler(request):
            handler_calls.append(request)
            return httpx.Response(200, json=audio_response())

        provider = make_provider(handler, api_key=None)

        with pytest.raises(AuthenticationError, match="API key not found"):
            provider.synthesize("hi", VoiceName.KORE, ProsodySettings())
        assert handler_calls == []


class TestGeminiTTSProviderErrors:
    def test_response_without_audio(self):
        provider = make_provider(
            lambda request: httpx.Response(200, json={"candidates": [{"finishReason": "SAFETY"}]})
        )

        with pytest.raises(ProviderError, match="No audio data"):
            provider.synthesize("hi", VoiceName.KORE, ProsodySettings())

    def test_response_not_json(self):
        provider = make_provider(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(ProviderError, match="invalid JSON"):
            provider.synthesize("hi", VoiceName.KORE, ProsodySettings())

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_statuses(self, status):
        provider = make_provider(lambda request: httpx.Response(status, text="denied"))

        with pytest.raises(AuthenticationError):
            provider.synthesize("hi", VoiceName.KORE, ProsodySettings())

    def test_invalid_key_reported_as_bad_request(self):
        body = {"error": {"code": 400, "message": "API key not valid. Please pass a valid API key."}}
        provider = make_provider(lambda request: httpx.Response(400, json=body))

        with pytest.raises(AuthenticationError):
            provider.synthesize("hi", VoiceName.KORE, ProsodySettings())

    def test_other_bad_request_is_provider_error(self):
        provider = make_provider(lambda request: httpx.Response(400, text="text too long"))

        with pytest.raises(ProviderError) as exc_info:
            provider.synthesize("hi", VoiceName.KORE, ProsodySettings())
        assert not isinstance(exc_info.value, AuthenticationError)
        assert exc_info.value.detail == "text too long"

    def test_rate_limit(self):
        provider = make_provider(lambda request: httpx.Response(429, text="slow down"))

        with pytest.raises(RateLimitError):
            provider.synthesize("hi", VoiceName.KORE, ProsodySettings())

    def test_server_error_is_marked_retryable(self):
        provider = make_provider(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(ProviderError) as exc_info:
            provider.synthesize("hi", VoiceName.KORE, ProsodySettings())
        assert exc_info.value.retryable is True

    def test_connection_failure_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(handler)

        with pytest.raises(NetworkError, match="connection refused"):
            provider.synthesize("hi", VoiceName.KORE, ProsodySettings())

    def test_timeout_is_network_error(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        provider = make_provider(handler)

        with pytest.raises(NetworkError, match="timed out"):
            provider.synthesize("hi", VoiceName.KORE, ProsodySettings())


class TestGeminiTTSProviderInfo:
    def test_info_reports_key_status(self):
        provider = GeminiTTSProvider(api_key_getter=lambda: None)

        info = provider.get_info()

        assert info["api_status"] == "❌ API key not set"
        assert info["sample_voices"] == ["Kore", "Puck", "Charon", "Fenrir", "Zephyr"]

    def test_close_only_closes_owned_client(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        provider = GeminiTTSProvider(api_key_getter=lambda: VALID_KEY, client=client)

        provider.close()

        assert client.is_closed is False
        client.close()
