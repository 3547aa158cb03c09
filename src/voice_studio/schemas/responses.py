from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ErrorDetail(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str
    code: str
    retryable: bool


class EnvelopeBase(BaseModel):
    model_config = ConfigDict(extra="allow")

    request_id: str
    service: str
    task: str
    result: Optional[object] = None
    error: Optional[ErrorDetail] = None


class HistoryItemResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    text: str
    timestamp: int
    voice: str
    language: str
    has_audio: bool


class GenerateResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    items: List[HistoryItemResult]
    current_item_id: str
    estimated_seconds: int
    characters: int
    parts: int


class PreviewResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    audio: str
    format: str
    voice: str
    size_bytes: int


class HistoryResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    items: List[HistoryItemResult]
    limit: int


class UsageResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    daily: Dict[str, object]
    monthly: Dict[str, object]
    limits: Dict[str, int]
    daily_remaining: int


class SettingsResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    voice: str
    settings: Dict[str, object]
    api_key_set: bool


class VoicesResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    voices: List[Dict[str, str]]
    emotions: List[str]
    pitch_options: List[str]
    languages: List[str]


class GenerateEnvelope(EnvelopeBase):
    result: GenerateResult


class PreviewEnvelope(EnvelopeBase):
    result: PreviewResult


class HistoryEnvelope(EnvelopeBase):
    result: HistoryResult


class UsageEnvelope(EnvelopeBase):
    result: UsageResult


class SettingsEnvelope(EnvelopeBase):
    result: SettingsResult


class VoicesEnvelope(EnvelopeBase):
    result: VoicesResult


class ErrorEnvelope(EnvelopeBase):
    error: ErrorDetail
