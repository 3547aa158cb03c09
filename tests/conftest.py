import base64

import pytest

from voice_studio.base import TTSProvider
from voice_studio.core import VoiceStudio
from voice_studio.exceptions import ProviderError
from voice_studio.internal import config
from voice_studio.internal.state import StateStore

# 0.1s of 24 kHz 16-bit mono silence
SILENCE_PCM = b"\x00\x00" * 2400

VALID_KEY = "AIza" + "x" * 35


class FakeProvider(TTSProvider):
    def __init__(self, pcm: bytes = SILENCE_PCM) -> None:
        self.pcm = pcm
        self.calls = []
        self.fail_on_call = None
        self.closed = False

    def synthesize(self, text, voice, settings):
        self.calls.append((text, voice, settings))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise ProviderError("synthesis exploded")
        return base64.b64encode(self.pcm).decode("ascii")

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("VOICE_STUDIO_CONFIG", str(tmp_path / "config.toml"))
    monkeypatch.setenv("STUDIO_DATA_DIR", str(tmp_path / "data"))
    for var in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY", "VOICE_STUDIO_LANG", "VOICE_STUDIO_SCHEMA_VALIDATE"):
        monkeypatch.delenv(var, raising=False)
    config.reload_config()
    yield
    config.reload_config()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def state_store(tmp_path):
    return StateStore(tmp_path / "data" / "state.json")


@pytest.fixture
def studio(fake_provider, state_store):
    return VoiceStudio(provider=fake_provider, store=state_store)


@pytest.fixture
def set_config(monkeypatch):
    """Override config keys through STUDIO_<KEY> env vars."""

    def _set(**values):
        for key, value in values.items():
            monkeypatch.setenv(f"STUDIO_{key.upper()}", str(value))
        config.reload_config()

    return _set
