from .requests import ApiKeyRequest, GenerateRequest, PreviewRequest, SettingsRequest
from .responses import (
    ErrorEnvelope,
    GenerateEnvelope,
    HistoryEnvelope,
    PreviewEnvelope,
    SettingsEnvelope,
    UsageEnvelope,
    VoicesEnvelope,
)

__all__ = [
    "ApiKeyRequest",
    "GenerateRequest",
    "PreviewRequest",
    "SettingsRequest",
    "ErrorEnvelope",
    "GenerateEnvelope",
    "HistoryEnvelope",
    "PreviewEnvelope",
    "SettingsEnvelope",
    "UsageEnvelope",
    "VoicesEnvelope",
]
