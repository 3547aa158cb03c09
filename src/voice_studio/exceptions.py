"""Exception hierarchy for Voice Studio.

Every error carries a stable ``code`` used for i18n lookups and for the
HTTP error envelope, plus a ``retryable`` hint. Nothing in the studio
retries on its own; the hint is only reported to the caller.
"""

from typing import Optional

from .internal.config import get_config_value


class VoiceStudioError(Exception):
    """Base class for all Voice Studio errors."""

    code = "studio_error"
    retryable = False

    def __init__(self, message: str, *, detail: Optional[str] = None, i18n_key: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail
        # more specific than errors.<code> when set
        self.i18n_key = i18n_key


class ConfigurationError(VoiceStudioError):
    code = "configuration_error"


class AuthenticationError(VoiceStudioError):
    code = "authentication_error"


class ValidationError(VoiceStudioError):
    code = "validation_error"


class QuotaExceededError(VoiceStudioError):
    code = "quota_exceeded"

    def __init__(self, message: str, *, limit: int, used: int, requested: int, period: str = "daily") -> None:
        i18n_key = "errors.quota_exceeded_monthly" if period == "monthly" else None
        super().__init__(message, i18n_key=i18n_key)
        self.period = period
        self.limit = limit
        self.used = used
        self.requested = requested


class BusyError(VoiceStudioError):
    code = "busy"


class AudioUnavailableError(VoiceStudioError):
    code = "audio_unavailable"


class ProviderError(VoiceStudioError):
    code = "provider_error"


class RateLimitError(ProviderError):
    code = "rate_limited"


class NetworkError(VoiceStudioError):
    code = "network_error"
    retryable = True


def _truncate(body: str) -> str:
    max_length = int(get_config_value("error_message_max_length", 200))
    body = (body or "").strip()
    if len(body) > max_length:
        return body[:max_length] + "..."
    return body


def map_http_error(status_code: int, body: str, provider_name: str) -> VoiceStudioError:
    """Map a vendor HTTP status to the matching studio exception."""
    detail = _truncate(body)

    if status_code in (get_config_value("http_unauthorized"), get_config_value("http_forbidden")):
        return AuthenticationError(f"{provider_name} rejected the API key (HTTP {status_code})", detail=detail)

    if status_code == get_config_value("http_bad_request"):
        # Gemini reports malformed or invalid keys as 400 INVALID_ARGUMENT
        if "api key" in detail.lower() or "api_key" in detail.lower():
            return AuthenticationError(f"{provider_name} rejected the API key (HTTP {status_code})", detail=detail)
        return ProviderError(f"{provider_name} rejected the request (HTTP {status_code})", detail=detail)

    if status_code == get_config_value("http_rate_limit"):
        return RateLimitError(f"{provider_name} rate limit reached (HTTP {status_code})", detail=detail)

    start = int(get_config_value("http_server_error_range_start"))
    end = int(get_config_value("http_server_error_range_end"))
    if start <= status_code < end:
        error = ProviderError(f"{provider_name} server error (HTTP {status_code})", detail=detail)
        error.retryable = True
        return error

    return ProviderError(f"{provider_name} request failed (HTTP {status_code})", detail=detail)
