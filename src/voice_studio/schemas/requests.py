from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str
    voice: Optional[str] = None


class PreviewRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    voice: str


class SettingsRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    voice: Optional[str] = None
    speed: Optional[float] = None
    pitch: Optional[str] = None
    volume: Optional[float] = None
    emotion: Optional[str] = None
    language: Optional[str] = None


class ApiKeyRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    api_key: str = Field(min_length=1)
