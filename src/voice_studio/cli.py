"""Command-line entry point for Voice Studio.

    voice-studio speak "Xin chào" -o hello.wav --voice Puck --emotion Cheerful
    voice-studio preview Charon -o charon.wav
    voice-studio voices
    voice-studio usage
    voice-studio history [--clear]
    voice-studio set-key AIza...
    voice-studio config set daily_char_limit 100000
    voice-studio serve --port 8772
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .__version__ import __version__
from .api import part_paths
from .core import VoiceStudio
from .exceptions import ConfigurationError, VoiceStudioError
from .i18n import describe_error, set_language, t
from .internal.audio_utils import format_time, get_wav_duration
from .internal.config import (
    CONFIG_DEFAULTS,
    coerce_setting,
    get_config_path,
    get_config_value,
    set_setting,
)
from .voices import EMOTIONS, PITCH_OPTIONS, VOICES

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    level_name = "debug" if debug else str(get_config_value("log_level", "info"))
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not debug:
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)


def cmd_speak(studio: VoiceStudio, args: argparse.Namespace) -> int:
    text = args.text
    if text == "-" or text is None:
        text = sys.stdin.read()

    changes = {
        key: getattr(args, key)
        for key in ("speed", "pitch", "volume", "emotion")
        if getattr(args, key) is not None
    }
    # one-off prosody for this call; saved settings stay as they are
    settings = studio.settings.update(**changes) if changes else None

    def show_progress(progress: dict) -> None:
        if progress["percent"] < 100:
            print(t("status.generating", current=progress["current"], total=progress["total"]), file=sys.stderr)

    def show_estimate(seconds: int) -> None:
        print(t("status.estimate", seconds=seconds), file=sys.stderr)

    result = studio.generate(
        text, voice=args.voice, on_progress=show_progress, on_estimate=show_estimate, settings=settings
    )

    for item, path in zip(result.items, part_paths(args.output, len(result.items))):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(item.audio or b"")
        print(f"{path}  ({format_time(get_wav_duration(item.audio or b''))})")
    print(t("status.done", count=len(result.items)))
    return 0


def cmd_preview(studio: VoiceStudio, args: argparse.Namespace) -> int:
    wav = studio.preview(args.voice)
    path = Path(args.output)
    path.write_bytes(wav)
    print(f"{path}  ({format_time(get_wav_duration(wav))})")
    return 0


def cmd_voices(studio: VoiceStudio, args: argparse.Namespace) -> int:
    for option in VOICES:
        marker = "*" if option.id is studio.voice else " "
        print(f"{marker} {option.name:<8} {option.gender:<7} {option.description}")
    print()
    print(f"Emotions: {', '.join(EMOTIONS)}")
    print(f"Pitch:    {', '.join(PITCH_OPTIONS)}")
    return 0


def cmd_usage(studio: VoiceStudio, args: argparse.Namespace) -> int:
    summary = studio.usage.summary()
    limits = summary["limits"]
    print(f"Today ({summary['daily']['date']}): {summary['daily']['count']}/{limits['daily']} characters")
    monthly_limit = limits["monthly"] or "unlimited"
    print(f"Month ({summary['monthly']['month']}): {summary['monthly']['count']}/{monthly_limit} characters")
    return 0


def cmd_history(studio: VoiceStudio, args: argparse.Namespace) -> int:
    if args.clear:
        print(t("status.history_cleared", count=studio.clear_history()))
        return 0
    if not len(studio.history):
        print(t("status.history_empty"))
        return 0
    for item in studio.history:
        print(f"{item.id:<16} {item.voice.value:<7} {item.text}")
    return 0


def cmd_set_key(studio: VoiceStudio, args: argparse.Namespace) -> int:
    studio.set_api_key(args.api_key)
    print(t("status.key_saved"))
    return 0


def cmd_config(studio: VoiceStudio, args: argparse.Namespace) -> int:
    if args.action == "show":
        for key in sorted(CONFIG_DEFAULTS):
            print(f"{key} = {get_config_value(key)!r}")
        return 0

    try:
        value = coerce_setting(args.key, args.value)
    except KeyError:
        raise ConfigurationError(f"Unknown setting '{args.key}'") from None
    if not set_setting(args.key, value):
        raise ConfigurationError(f"Could not write {get_config_path()}")
    print(f"{args.key} = {get_config_value(args.key)!r}")
    return 0


def cmd_serve(studio: VoiceStudio, args: argparse.Namespace) -> int:
    from .server import run_server

    studio.close()
    run_server(host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="voice-studio", description="Gemini text-to-speech studio")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    speak = subparsers.add_parser("speak", help="Convert text to speech")
    speak.add_argument("text", nargs="?", help="Text to speak ('-' or omitted reads stdin)")
    speak.add_argument("-o", "--output", default="voice-studio.wav", help="Output WAV path")
    speak.add_argument("--voice", help="Voice name (defaults to the saved selection)")
    speak.add_argument("--speed", type=float, help="0.5 to 2.0")
    speak.add_argument("--pitch", choices=PITCH_OPTIONS)
    speak.add_argument("--volume", type=float, help="0.0 to 1.0")
    speak.add_argument("--emotion", choices=EMOTIONS)
    speak.set_defaults(func=cmd_speak)

    preview = subparsers.add_parser("preview", help="Preview a voice")
    preview.add_argument("voice")
    preview.add_argument("-o", "--output", default="preview.wav")
    preview.set_defaults(func=cmd_preview)

    voices = subparsers.add_parser("voices", help="List voices and prosody options")
    voices.set_defaults(func=cmd_voices)

    usage = subparsers.add_parser("usage", help="Show character usage")
    usage.set_defaults(func=cmd_usage)

    history = subparsers.add_parser("history", help="List or clear clip history")
    history.add_argument("--clear", action="store_true")
    history.set_defaults(func=cmd_history)

    set_key = subparsers.add_parser("set-key", help="Save your Gemini API key")
    set_key.add_argument("api_key")
    set_key.set_defaults(func=cmd_set_key)

    config = subparsers.add_parser("config", help="Show or change settings in config.toml")
    config_actions = config.add_subparsers(dest="action", required=True)
    config_actions.add_parser("show", help="Print effective settings")
    config_set = config_actions.add_parser("set", help="Write a setting to config.toml")
    config_set.add_argument("key")
    config_set.add_argument("value")
    config.set_defaults(func=cmd_config)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", "-p", type=int, default=None)
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    studio = VoiceStudio()
    set_language(studio.settings.language.value)
    try:
        return int(args.func(studio, args))
    except VoiceStudioError as e:
        logger.debug("Command failed", exc_info=True)
        print(describe_error(e), file=sys.stderr)
        return 1
    finally:
        studio.close()


if __name__ == "__main__":
    sys.exit(main())
