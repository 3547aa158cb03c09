"""Configuration for Voice Studio.

Values come from three layers, later ones winning:

1. ``CONFIG_DEFAULTS`` below
2. the ``[studio]`` table of ``~/.voice_studio/config.toml`` (or the file
   named by ``VOICE_STUDIO_CONFIG``); nested tables are flattened, so
   ``[studio.gemini] model = ...`` sets ``gemini_model``
3. ``STUDIO_<KEY>`` environment variables, coerced to the default's type

    from .config import get_config_value
    limit = get_config_value("daily_char_limit")
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import toml

logger = logging.getLogger(__name__)

CONFIG_SECTION = "studio"

# All configuration defaults in one flat dictionary
CONFIG_DEFAULTS = {
    # Gemini API
    "gemini_model": "gemini-2.5-flash-preview-tts",
    "gemini_api_base": "https://generativelanguage.googleapis.com/v1beta",
    "gemini_api_key_length": 39,
    "request_timeout": 120.0,
    # Quotas (characters)
    "daily_char_limit": 50000,
    "monthly_char_limit": 0,
    # Text chunking
    "max_chars_per_part": 5000,
    # History
    "history_limit": 30,
    "history_snippet_length": 100,
    # Audio returned by the API: raw 16-bit mono PCM
    "sample_rate": 24000,
    "audio_channels": 1,
    "audio_sample_width": 2,
    # Time estimate heuristics (seconds)
    "estimate_base_seconds": 1,
    "estimate_chars_per_second": 500,
    "estimate_seconds_per_part": 2,
    # Preview
    "preview_text": "Hello, AI Voice Studio.",
    # HTTP server
    "server_host": "127.0.0.1",
    "server_port": 8772,
    "allowed_origins": ["http://localhost:5173", "http://127.0.0.1:5173"],
    # HTTP Status Codes
    "http_bad_request": 400,
    "http_unauthorized": 401,
    "http_forbidden": 403,
    "http_rate_limit": 429,
    "http_server_error_range_start": 500,
    "http_server_error_range_end": 600,
    "error_message_max_length": 200,
    # Studio defaults
    "default_voice": "Kore",
    "default_language": "vi-VN",
    "log_level": "info",
    "data_dir": "~/.voice_studio",
}

_config_cache: Optional[Dict[str, Any]] = None


def _read_toml(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _flatten(table: Dict[str, Any]) -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for name, value in table.items():
        if isinstance(value, dict):
            flat.update({f"{name}_{key}": inner for key, inner in value.items()})
        else:
            flat[name] = value
    return flat


def _to_number(cast: Callable[[str], Any]) -> Callable[[str], Any]:
    def parse(value: str) -> Any:
        try:
            return cast(value)
        except ValueError:
            return value

    return parse


_ENV_PARSERS: Dict[type, Callable[[str], Any]] = {
    bool: lambda value: value.lower() in ("true", "1", "yes", "on"),
    int: _to_number(int),
    float: _to_number(float),
    list: lambda value: [item.strip() for item in value.split(",") if item.strip()],
}


def _parse_env_value(value: str, expected_type: type) -> Any:
    """Coerce an environment string to the type of the matching default."""
    parser = _ENV_PARSERS.get(expected_type)
    return parser(value) if parser else value


def load_toml_config() -> Dict[str, Any]:
    """Merged defaults, TOML file and environment overrides (cached)."""
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    merged = dict(CONFIG_DEFAULTS)

    file_values = _flatten(load_config())
    merged.update({key: value for key, value in file_values.items() if key in CONFIG_DEFAULTS})

    for key, default in CONFIG_DEFAULTS.items():
        raw = os.environ.get(f"STUDIO_{key.upper()}")
        if raw is None:
            continue
        merged[key] = _parse_env_value(raw, type(default))
        logger.debug(f"{key} overridden from environment: {merged[key]}")

    _config_cache = merged
    return merged


def get_config_value(key: str, default: Any = None) -> Any:
    return load_toml_config().get(key, default)


def coerce_setting(key: str, raw: str) -> Any:
    """Parse a command-line string for ``key`` the same way env overrides are parsed."""
    if key not in CONFIG_DEFAULTS:
        raise KeyError(key)
    return _parse_env_value(raw, type(CONFIG_DEFAULTS[key]))


def reload_config() -> None:
    """Drop the cached config so the next lookup re-reads file and env."""
    global _config_cache
    _config_cache = None


def get_config_path() -> Path:
    override = os.environ.get("VOICE_STUDIO_CONFIG")
    return Path(override) if override else Path.home() / ".voice_studio" / "config.toml"


def get_data_dir() -> Path:
    """Directory holding the persisted studio state."""
    return Path(str(get_config_value("data_dir"))).expanduser()


def load_config() -> Dict[str, Any]:
    """The raw ``[studio]`` table, or {} when the file or table is missing."""
    path = get_config_path()
    if not path.exists():
        return {}

    try:
        table = _read_toml(path).get(CONFIG_SECTION)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Could not read {path}: {e}. Using defaults.")
        return {}

    if not isinstance(table, dict):
        logger.warning(f"{path} has no [{CONFIG_SECTION}] table, using defaults")
        return {}
    return dict(table)


def save_config(config: Dict[str, Any]) -> bool:
    """Replace the ``[studio]`` table, keeping other tables in the file."""
    path = get_config_path()
    try:
        document = _read_toml(path) if path.exists() else {}
        document[CONFIG_SECTION] = config

        path.parent.mkdir(parents=True, exist_ok=True)
        staging = path.with_suffix(".tmp")
        staging.write_text(toml.dumps(document), encoding="utf-8")
        staging.replace(path)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.error(f"Could not write {path}: {e}")
        return False

    logger.info(f"Configuration saved to {path}")
    return True


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = dict(config)
    if "log_level" in cleaned and cleaned["log_level"] not in ("debug", "info", "warning", "error"):
        cleaned["log_level"] = "info"
    if "data_dir" in cleaned:
        cleaned["data_dir"] = str(Path(cleaned["data_dir"]).expanduser())
    return cleaned


def get_setting(key: str, default: Any = None) -> Any:
    """A single value straight from the TOML file (no env overrides)."""
    return load_config().get(key, default)


def set_setting(key: str, value: Any) -> bool:
    config = load_config()
    config[key] = value
    saved = save_config(validate_config(config))
    reload_config()
    return saved


def validate_api_key(api_key: Optional[str]) -> bool:
    """Gemini API keys are 39 chars and start with AIza."""
    if not api_key or not isinstance(api_key, str):
        return False
    key_length = int(get_config_value("gemini_api_key_length", 39))
    return api_key.startswith("AIza") and len(api_key) == key_length


def get_api_key(stored_key: Optional[str] = None) -> Optional[str]:
    """Get the Gemini API key.

    Search order:
    1. Key the user entered in the studio (persisted in the state file)
    2. TOML configuration (gemini_api_key)
    3. Environment variables (GEMINI_API_KEY, GOOGLE_API_KEY, API_KEY)

    Args:
        stored_key: Key saved through the studio, if any

    Returns:
        API key string if found, None otherwise. Format is not checked here so
        that the vendor gets to reject unusual but valid keys.
    """
    if stored_key:
        return stored_key

    toml_key = get_setting("gemini_api_key")
    if toml_key:
        return str(toml_key)

    for env_key in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"):
        value = os.environ.get(env_key)
        if value:
            return value

    return None
