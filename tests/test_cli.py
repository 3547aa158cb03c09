"""Tests for the voice-studio command line."""

import io

import pytest

from voice_studio import cli
from voice_studio.core import VoiceStudio
from voice_studio.internal import config


@pytest.fixture
def run_cli(monkeypatch, fake_provider, state_store):
    def _run(*argv):
        monkeypatch.setattr(cli, "VoiceStudio", lambda: VoiceStudio(provider=fake_provider, store=state_store))
        return cli.main(list(argv))

    return _run


def test_voices_lists_catalog(run_cli, capsys):
    assert run_cli("voices") == 0

    out = capsys.readouterr().out
    assert "* Kore" in out
    assert "Fenrir" in out
    assert "Whisper" in out


def test_speak_writes_wav(run_cli, tmp_path, capsys):
    output = tmp_path / "out" / "hello.wav"

    assert run_cli("speak", "Xin chào", "-o", str(output), "--voice", "Puck", "--speed", "1.3") == 0

    assert output.read_bytes()[:4] == b"RIFF"
    assert str(output) in capsys.readouterr().out


def test_speak_multi_part_numbers_files(run_cli, tmp_path, set_config):
    set_config(max_chars_per_part=20)
    output = tmp_path / "story.wav"

    assert run_cli("speak", "Hello world. This is a test. Another sentence here.", "-o", str(output)) == 0

    assert sorted(path.name for path in tmp_path.glob("story-*.wav")) == [
        "story-1.wav",
        "story-2.wav",
        "story-3.wav",
        "story-4.wav",
    ]


def test_speak_reads_stdin(run_cli, tmp_path, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("from stdin"))
    output = tmp_path / "stdin.wav"

    assert run_cli("speak", "-", "-o", str(output)) == 0
    assert output.exists()


def test_set_key_rejects_bad_key(run_cli, capsys):
    assert run_cli("set-key", "not-a-key") == 1

    assert capsys.readouterr().err.strip()


def test_set_key_saves_key(run_cli, state_store):
    assert run_cli("set-key", "AIza" + "c" * 35) == 0

    assert state_store.load()["api_key"] == "AIza" + "c" * 35


def test_history_and_clear(run_cli, tmp_path, capsys):
    run_cli("speak", "first clip", "-o", str(tmp_path / "a.wav"))
    capsys.readouterr()

    assert run_cli("history") == 0
    assert "first clip" in capsys.readouterr().out

    assert run_cli("history", "--clear") == 0
    capsys.readouterr()
    run_cli("history")
    assert "first clip" not in capsys.readouterr().out


def test_usage_reports_counts(run_cli, tmp_path, capsys):
    run_cli("speak", "hello", "-o", str(tmp_path / "a.wav"))
    capsys.readouterr()

    assert run_cli("usage") == 0
    assert "5/50000" in capsys.readouterr().out


def test_provider_failure_returns_error(run_cli, fake_provider, tmp_path, capsys):
    fake_provider.fail_on_call = 1

    assert run_cli("speak", "hello", "-o", str(tmp_path / "a.wav")) == 1
    assert capsys.readouterr().err.strip()


def test_speak_prosody_flags_are_not_saved(run_cli, tmp_path, fake_provider, state_store):
    assert run_cli("speak", "hello", "-o", str(tmp_path / "a.wav"), "--speed", "1.5", "--emotion", "Sad") == 0

    assert fake_provider.calls[0][2].speed == 1.5
    assert fake_provider.calls[0][2].emotion == "Sad"
    assert state_store.load()["settings"]["speed"] == 1.0
    assert state_store.load()["settings"]["emotion"] == "Natural"


def test_config_set_writes_toml(run_cli, capsys):
    assert run_cli("config", "set", "daily_char_limit", "1234") == 0

    assert "daily_char_limit = 1234" in capsys.readouterr().out
    assert config.get_setting("daily_char_limit") == 1234
    assert config.get_config_value("daily_char_limit") == 1234


def test_config_set_list_value(run_cli):
    assert run_cli("config", "set", "allowed_origins", "http://a.test, http://b.test") == 0

    assert config.get_config_value("allowed_origins") == ["http://a.test", "http://b.test"]


def test_config_set_unknown_key(run_cli, capsys):
    assert run_cli("config", "set", "nonsense", "1") == 1

    assert "nonsense" in capsys.readouterr().err
    assert not config.get_config_path().exists()


def test_config_show(run_cli, capsys):
    assert run_cli("config", "show") == 0

    assert "history_limit = 30" in capsys.readouterr().out
