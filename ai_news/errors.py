"""
Error taxonomy for the news pipeline.

Every fatal condition of a request is raised as a NewsPipelineError
subclass. The HTTP layer converts them into JSON bodies using
``status_code`` and ``to_payload``.
"""

from __future__ import annotations

from typing import Any


class NewsPipelineError(Exception):
    """Base class for request-fatal pipeline failures."""

    status_code = 500

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ConfigurationError(NewsPipelineError):
    """Required configuration (the provider API key) is missing."""


class NoCandidatesError(NewsPipelineError):
    """No feed item survived fetching and recency filtering."""


class AugmentationParseError(NewsPipelineError):
    """The generation response held no usable JSON payload."""


class GenerationFailedError(NewsPipelineError):
    """The generation call failed for a reason that retrying will not fix."""


class UpstreamOverloadedError(NewsPipelineError):
    """The generation service stayed overloaded through every attempt."""

    status_code = 503

    def __init__(self, message: str, details: str | None = None, attempts: int = 0):
        super().__init__(message, details)
        self.attempts = attempts

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.details or "", "retryable": True}
