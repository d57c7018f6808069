"""Generation provider implementations."""

from .base import GenerationError, GenerationErrorKind, GenerationProvider
from .factory import available_providers, create_provider
from .gemini import GeminiProvider

__all__ = [
    "GenerationProvider",
    "GenerationError",
    "GenerationErrorKind",
    "GeminiProvider",
    "create_provider",
    "available_providers",
]
