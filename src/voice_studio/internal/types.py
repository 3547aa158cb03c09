from typing import Any, Dict, List, TypedDict


class ProviderInfo(TypedDict, total=False):
    name: str
    description: str
    api_status: str
    model: str
    sample_voices: List[str]
    voice_descriptions: Dict[str, str]
    options: Dict[str, str]
    features: Dict[str, Any]
    output_format: str


class GenerationProgress(TypedDict):
    current: int
    total: int
    percent: int
