"""Generation providers, prompts, response parsing and tracing."""

from .json_parser import JsonExtraction, extract_json_object
from .prompts import build_enrichment_prompt
from .providers import (
    GeminiProvider,
    GenerationError,
    GenerationErrorKind,
    GenerationProvider,
    available_providers,
    create_provider,
)
from .tracing import flush, set_span_output, setup_langfuse, start_span

__all__ = [
    "JsonExtraction",
    "extract_json_object",
    "build_enrichment_prompt",
    "GenerationProvider",
    "GenerationError",
    "GenerationErrorKind",
    "GeminiProvider",
    "create_provider",
    "available_providers",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
]
