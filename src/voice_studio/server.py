"""
HTTP server for Voice Studio.

Exposes the studio over a small JSON API so a browser front end can drive
it: pick a voice and prosody, generate clips, preview voices, and list or
download the session's clip history.

Usage:
    voice-studio serve --port 8772

    # Or directly:
    python -m voice_studio.server --port 8772
"""

import argparse
import asyncio
import logging
import os
import uuid
from typing import Any, Optional

import pydantic
from aiohttp import web
from aiohttp.web import Request, Response

from .core import VoiceStudio, download_filename
from .exceptions import (
    AudioUnavailableError,
    AuthenticationError,
    BusyError,
    ConfigurationError,
    NetworkError,
    ProviderError,
    QuotaExceededError,
    RateLimitError,
    ValidationError,
    VoiceStudioError,
)
from .history import HistoryItem
from .i18n import describe_error
from .internal.audio_utils import encode_base64_audio
from .internal.config import get_config_value
from .schemas.requests import ApiKeyRequest, GenerateRequest, PreviewRequest, SettingsRequest
from .schemas.responses import (
    ErrorEnvelope,
    GenerateEnvelope,
    HistoryEnvelope,
    PreviewEnvelope,
    SettingsEnvelope,
    UsageEnvelope,
    VoicesEnvelope,
)
from .voices import EMOTIONS, PITCH_OPTIONS, VOICES, Language

logger = logging.getLogger(__name__)

SERVICE_NAME = "voice-studio"

STUDIO_KEY = web.AppKey("studio", VoiceStudio)

# Most specific classes first
ERROR_STATUS = [
    (RateLimitError, 429),
    (QuotaExceededError, 429),
    (AuthenticationError, 401),
    (ValidationError, 400),
    (AudioUnavailableError, 404),
    (BusyError, 409),
    (NetworkError, 502),
    (ProviderError, 502),
    (ConfigurationError, 500),
]


def get_allowed_origins() -> list[str]:
    origins = get_config_value("allowed_origins") or []
    if isinstance(origins, str):
        origins = [origin.strip() for origin in origins.split(",")]
    return [str(origin) for origin in origins if origin]


def add_cors_headers(response: Response, request: Optional[Request] = None) -> Response:
    """Add CORS headers to response.

    Only sets Access-Control-Allow-Origin when the request carries an Origin
    header that is in the allowed list; otherwise the browser blocks it.
    """
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, DELETE, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Expose-Headers"] = "Content-Disposition"

    if request:
        req_origin = request.headers.get("Origin")
        allowed = get_allowed_origins()
        if req_origin and allowed and req_origin in allowed:
            response.headers["Access-Control-Allow-Origin"] = req_origin

    return response


def should_validate() -> bool:
    return os.getenv("VOICE_STUDIO_SCHEMA_VALIDATE", "").lower() in {"1", "true", "yes", "on"}


def validate_response(model: Any, payload: dict[str, Any]) -> None:
    if not should_validate():
        return
    model.model_validate(payload)


def ok_response(task: str, payload: dict[str, Any], request: Request, model: Any = None) -> Response:
    response_payload = {
        "request_id": str(uuid.uuid4()),
        "service": SERVICE_NAME,
        "task": task,
        "result": payload,
    }
    if model is not None:
        validate_response(model, response_payload)
    return add_cors_headers(web.json_response(response_payload), request)


def error_response(
    message: str,
    request: Request,
    status: int = 400,
    code: str = "bad_request",
    task: str = "unknown",
    retryable: Optional[bool] = None,
) -> Response:
    response_payload = {
        "request_id": str(uuid.uuid4()),
        "service": SERVICE_NAME,
        "task": task,
        "error": {
            "message": message,
            "code": code,
            "retryable": status >= 500 if retryable is None else retryable,
        },
    }
    validate_response(ErrorEnvelope, response_payload)
    return add_cors_headers(web.json_response(response_payload, status=status), request)


def studio_error_response(error: VoiceStudioError, request: Request, task: str) -> Response:
    status = next((code for cls, code in ERROR_STATUS if isinstance(error, cls)), 500)
    studio = request.app[STUDIO_KEY]
    message = describe_error(error, lang=studio.settings.language.value)
    if status >= 500 or isinstance(error, (AuthenticationError, RateLimitError)):
        logger.warning(f"{task} failed: {error.message} ({error.detail or 'no detail'})")
    return error_response(message, request, status=status, code=error.code, task=task, retryable=error.retryable)


async def read_model(request: Request, model: Any, task: str) -> Any:
    """Parse and validate a JSON body; returns a model or an error Response."""
    try:
        data = await request.json()
    except ValueError:
        return error_response("Invalid JSON", request, task=task)
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "body"
        return error_response(f"Invalid '{field}': {first.get('msg')}", request, task=task)


def item_payload(item: HistoryItem) -> dict[str, Any]:
    return item.to_dict()


async def run_blocking(func: Any, *args: Any) -> Any:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


async def handle_options(request: Request) -> Response:
    """Handle CORS preflight requests."""
    return add_cors_headers(Response(status=200), request)


async def handle_health(request: Request) -> Response:
    """Health check endpoint."""
    return ok_response("health", {"status": "ok", "service": SERVICE_NAME}, request)


async def handle_voices(request: Request) -> Response:
    """
    Voice catalog and prosody options.

    GET /voices
    """
    result = {
        "voices": [
            {"id": option.id.value, "name": option.name, "gender": option.gender, "description": option.description}
            for option in VOICES
        ],
        "emotions": list(EMOTIONS),
        "pitch_options": list(PITCH_OPTIONS),
        "languages": [language.value for language in Language],
    }
    return ok_response("voices", result, request, VoicesEnvelope)


async def handle_get_settings(request: Request) -> Response:
    studio = request.app[STUDIO_KEY]
    return ok_response("settings", studio.snapshot(), request, SettingsEnvelope)


async def handle_update_settings(request: Request) -> Response:
    """
    Update the selected voice and prosody settings.

    POST /settings
    {
        "voice": "Puck",          // optional
        "speed": 1.2,             // optional, 0.5 - 2.0
        "pitch": "High",          // optional
        "volume": 0.8,            // optional, 0.0 - 1.0
        "emotion": "Cheerful",    // optional
        "language": "en-US"       // optional
    }
    """
    body = await read_model(request, SettingsRequest, "settings")
    if isinstance(body, Response):
        return body

    studio = request.app[STUDIO_KEY]
    changes = body.model_dump(exclude_none=True)
    voice = changes.pop("voice", None)
    try:
        if voice is not None:
            studio.set_voice(voice)
        if changes:
            studio.update_settings(**changes)
    except VoiceStudioError as e:
        return studio_error_response(e, request, "settings")

    return ok_response("settings", studio.snapshot(), request, SettingsEnvelope)


async def handle_generate(request: Request) -> Response:
    """
    Convert text to speech and add the clips to history.

    POST /generate
    {
        "text": "Xin chào...",
        "voice": "Kore"           // optional, defaults to the selected voice
    }

    Response:
    {
        "request_id": "...",
        "service": "voice-studio",
        "task": "generate",
        "result": {
            "items": [{"id": "...", "text": "[PART 1] ...", "has_audio": true, ...}],
            "current_item_id": "...",
            "estimated_seconds": 5,
            "characters": 1234,
            "parts": 1
        }
    }
    """
    body = await read_model(request, GenerateRequest, "generate")
    if isinstance(body, Response):
        return body

    studio = request.app[STUDIO_KEY]
    try:
        result = await run_blocking(studio.generate, body.text, body.voice)
    except VoiceStudioError as e:
        return studio_error_response(e, request, "generate")
    except Exception as e:
        logger.exception("Failed to handle generate request")
        return error_response(str(e), request, status=500, code="internal_error", task="generate")

    payload = {
        "items": [item_payload(item) for item in reversed(result.items)],
        "current_item_id": result.current.id,
        "estimated_seconds": result.estimated_seconds,
        "characters": result.characters,
        "parts": len(result.items),
    }
    return ok_response("generate", payload, request, GenerateEnvelope)


async def handle_preview(request: Request) -> Response:
    """
    Speak a short sample with the given voice.

    POST /preview
    {"voice": "Charon"}
    """
    body = await read_model(request, PreviewRequest, "preview")
    if isinstance(body, Response):
        return body

    studio = request.app[STUDIO_KEY]
    try:
        wav = await run_blocking(studio.preview, body.voice)
    except VoiceStudioError as e:
        return studio_error_response(e, request, "preview")
    except Exception as e:
        logger.exception("Failed to handle preview request")
        return error_response(str(e), request, status=500, code="internal_error", task="preview")

    result = {
        "audio": encode_base64_audio(wav),
        "format": "wav",
        "voice": body.voice,
        "size_bytes": len(wav),
    }
    return ok_response("preview", result, request, PreviewEnvelope)


async def handle_history(request: Request) -> Response:
    studio = request.app[STUDIO_KEY]
    result = {
        "items": [item_payload(item) for item in studio.history],
        "limit": studio.history.limit,
    }
    return ok_response("history", result, request, HistoryEnvelope)


async def handle_clear_history(request: Request) -> Response:
    studio = request.app[STUDIO_KEY]
    count = await run_blocking(studio.clear_history)
    return ok_response("history", {"cleared": count}, request)


async def handle_audio(request: Request) -> Response:
    """
    Download a clip from this session as WAV.

    GET /history/{item_id}/audio
    """
    studio = request.app[STUDIO_KEY]
    item_id = request.match_info["item_id"]
    try:
        filename, audio = studio.download(item_id)
    except KeyError:
        return error_response(f"No history item '{item_id}'", request, status=404, code="not_found", task="audio")
    except VoiceStudioError as e:
        return studio_error_response(e, request, "audio")

    response = Response(
        body=audio,
        content_type="audio/wav",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
    return add_cors_headers(response, request)


async def handle_latest_audio(request: Request) -> Response:
    """Download the most recent clip."""
    studio = request.app[STUDIO_KEY]
    item = studio.latest()
    if item is None:
        return error_response("History is empty", request, status=404, code="not_found", task="audio")
    if item.audio is None:
        return studio_error_response(
            AudioUnavailableError("Audio for this clip is not available in this session"), request, "audio"
        )
    response = Response(
        body=item.audio,
        content_type="audio/wav",
        headers={"Content-Disposition": f'attachment; filename="{download_filename(item)}"'},
    )
    return add_cors_headers(response, request)


async def handle_usage(request: Request) -> Response:
    studio = request.app[STUDIO_KEY]
    return ok_response("usage", studio.usage.summary(), request, UsageEnvelope)


async def handle_api_key(request: Request) -> Response:
    """
    Store the user's Gemini API key.

    POST /api-key
    {"api_key": "AIza..."}
    """
    body = await read_model(request, ApiKeyRequest, "api-key")
    if isinstance(body, Response):
        return body

    studio = request.app[STUDIO_KEY]
    try:
        await run_blocking(studio.set_api_key, body.api_key)
    except VoiceStudioError as e:
        return studio_error_response(e, request, "api-key")
    return ok_response("api-key", {"api_key_set": True}, request)


async def _close_studio(app: web.Application) -> None:
    app[STUDIO_KEY].close()


def create_app(studio: Optional[VoiceStudio] = None) -> web.Application:
    """Create the aiohttp application."""
    app = web.Application()
    app[STUDIO_KEY] = studio or VoiceStudio()
    app.on_cleanup.append(_close_studio)

    # Routes
    app.router.add_route("OPTIONS", "/{path:.*}", handle_options)
    app.router.add_get("/health", handle_health)
    app.router.add_get("/", handle_health)
    app.router.add_get("/voices", handle_voices)
    app.router.add_get("/settings", handle_get_settings)
    app.router.add_post("/settings", handle_update_settings)
    app.router.add_post("/generate", handle_generate)
    app.router.add_post("/preview", handle_preview)
    app.router.add_get("/history", handle_history)
    app.router.add_delete("/history", handle_clear_history)
    app.router.add_get("/history/latest/audio", handle_latest_audio)
    app.router.add_get("/history/{item_id}/audio", handle_audio)
    app.router.add_get("/usage", handle_usage)
    app.router.add_post("/api-key", handle_api_key)

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the HTTP server."""
    host = host or str(get_config_value("server_host"))
    port = port or int(get_config_value("server_port"))
    app = create_app()

    print(f"Starting Voice Studio server on http://{host}:{port}")
    print("  POST /generate            - Convert text to speech")
    print("  POST /preview             - Preview a voice")
    print("  GET  /history             - Clip history")
    print("  GET  /history/{id}/audio  - Download a clip")
    print("  GET  /usage               - Character usage")
    print()

    web.run_app(app, host=host, port=port, print=None)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Voice Studio HTTP Server")
    parser.add_argument("--host", default=None, help="Host to bind to")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port to listen on")
    args = parser.parse_args()

    run_server(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
