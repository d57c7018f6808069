"""Abstract interfaces for text generation providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
import enum


class GenerationErrorKind(str, enum.Enum):
    """Typed classification of a failed generation call.

    Adapters map raw transport failures into one of these kinds once, so
    callers never inspect error messages.
    """

    OVERLOADED = "overloaded"
    AUTH = "auth"
    INVALID_REQUEST = "invalid_request"
    BAD_RESPONSE = "bad_response"
    OTHER = "other"


class GenerationError(Exception):
    """A generation call failed."""

    def __init__(self, kind: GenerationErrorKind, message: str, status_code: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.kind is GenerationErrorKind.OVERLOADED

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"[{self.kind.value}] HTTP {self.status_code}: {self.message}"
        return f"[{self.kind.value}] {self.message}"


class GenerationProvider(ABC):
    """Provider interface: one prompt in, free-form text out."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the model's text response.

        Raises:
            GenerationError: If the call fails
        """
        raise NotImplementedError
