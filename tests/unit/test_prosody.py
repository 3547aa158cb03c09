"""Tests for prosody settings validation and prompt construction."""

import pytest

from voice_studio.exceptions import ValidationError
from voice_studio.prosody import ProsodySettings, build_prompt
from voice_studio.voices import Language


class TestProsodySettings:
    def test_defaults(self):
        settings = ProsodySettings()

        assert settings.speed == 1.0
        assert settings.pitch == "Medium"
        assert settings.volume == 1.0
        assert settings.emotion == "Natural"
        assert settings.language is Language.VIETNAMESE

    def test_speed_rounded_to_one_decimal(self):
        assert ProsodySettings(speed=1.04).speed == 1.0
        assert ProsodySettings(speed="1.5").speed == 1.5

    @pytest.mark.parametrize("speed", [0.4, 2.1, "fast"])
    def test_invalid_speed_rejected(self, speed):
        with pytest.raises(ValidationError):
            ProsodySettings(speed=speed)

    @pytest.mark.parametrize("volume", [-0.1, 1.5])
    def test_invalid_volume_rejected(self, volume):
        with pytest.raises(ValidationError, match="Volume"):
            ProsodySettings(volume=volume)

    def test_unknown_pitch_and_emotion_rejected(self):
        with pytest.raises(ValidationError, match="pitch"):
            ProsodySettings(pitch="Squeaky")
        with pytest.raises(ValidationError, match="emotion"):
            ProsodySettings(emotion="Bored")

    def test_language_accepts_short_codes(self):
        assert ProsodySettings(language="en").language is Language.ENGLISH
        assert ProsodySettings(language="vi-VN").language is Language.VIETNAMESE

    @pytest.mark.parametrize("value", ["video", "english", "en-GB", "v", ""])
    def test_language_rejects_lookalikes(self, value):
        with pytest.raises(ValidationError, match="language"):
            ProsodySettings(language=value)

    def test_update_returns_new_validated_settings(self):
        settings = ProsodySettings()

        updated = settings.update(speed=1.5, emotion="Whisper")

        assert updated.speed == 1.5
        assert updated.emotion == "Whisper"
        assert settings.speed == 1.0

    def test_update_rejects_unknown_keys(self):
        with pytest.raises(ValidationError, match="tempo"):
            ProsodySettings().update(tempo=2)

    def test_for_preview_resets_speed_and_emotion_only(self):
        settings = ProsodySettings(speed=1.8, emotion="Angry", pitch="High", volume=0.5)

        preview = settings.for_preview()

        assert preview.speed == 1.0
        assert preview.emotion == "Natural"
        assert preview.pitch == "High"
        assert preview.volume == 0.5

    def test_dict_round_trip(self):
        settings = ProsodySettings(speed=0.8, pitch="Low", volume=0.3, emotion="Sad", language="en-US")

        data = settings.to_dict()

        assert data["language"] == "en-US"
        assert ProsodySettings.from_dict(data) == settings


class TestBuildPrompt:
    def test_prompt_carries_descriptors_and_text(self):
        settings = ProsodySettings(speed=1.2, pitch="High", emotion="Cheerful", volume=0.2)

        prompt = build_prompt("Xin chào các bạn", settings)

        assert "detect the language" in prompt
        assert "Emotion/Style: Cheerful" in prompt
        assert "Speaking rate: 1.2x (default 1.0)" in prompt
        assert "Pitch: High" in prompt
        assert "Volume: quiet" in prompt
        assert prompt.endswith("Xin chào các bạn")
