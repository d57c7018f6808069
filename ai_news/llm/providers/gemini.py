"""Google Gemini provider using the REST generateContent API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import LoggingConfig, ProviderConfig
from ...logging_utils import log_event, redact_text, truncate_text
from ..tracing import set_span_output, start_span
from .base import GenerationError, GenerationErrorKind, GenerationProvider


_OVERLOAD_STATUSES = {"UNAVAILABLE", "RESOURCE_EXHAUSTED"}
_AUTH_STATUSES = {"UNAUTHENTICATED", "PERMISSION_DENIED"}


class GeminiProvider(GenerationProvider):
    """Gemini-backed text generation."""

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError("Missing Gemini API key")
        self.cfg = cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger
        self._transport = transport

    async def generate(self, prompt: str) -> str:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.cfg.temperature,
                "maxOutputTokens": self.cfg.max_output_tokens,
            },
        }
        with start_span(
            "gemini.generate",
            kind="generation",
            input_value=prompt,
            attributes={"llm.provider": "gemini", "llm.temperature": self.cfg.temperature},
            model=self.cfg.model,
        ) as span:
            try:
                data = await self._post(payload)
            except GenerationError as exc:
                self._log_llm_response("provider_error", str(exc), prompt, kind=exc.kind.value)
                raise
            content = _extract_text(data)
            set_span_output(span, content)
            self._log_llm_response("ok", content, prompt)
            return content

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url}/v1beta/models/{self.cfg.model}:generateContent"
        params = {"key": self.api_key}
        try:
            async with httpx.AsyncClient(
                timeout=self.cfg.timeout_seconds,
                trust_env=self.cfg.trust_env,
                transport=self._transport,
            ) as client:
                resp = await client.post(url, params=params, json=payload)
        except httpx.TimeoutException as exc:
            raise GenerationError(GenerationErrorKind.OVERLOADED, f"Request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise GenerationError(GenerationErrorKind.OTHER, f"{type(exc).__name__}: {exc}") from exc

        if resp.status_code >= 400:
            raise classify_http_error(resp.status_code, _error_body(resp))
        try:
            return resp.json()
        except ValueError as exc:
            raise GenerationError(
                GenerationErrorKind.BAD_RESPONSE,
                "Response body is not JSON",
                resp.status_code,
            ) from exc

    def _log_llm_response(self, status: str, content: str, prompt: str, **fields: Any) -> None:
        if self.llm_logger is None:
            return
        redaction = self.log_cfg.llm_log_redaction
        payload: dict[str, Any] = {
            "event": "llm_generate",
            "status": status,
            "model": self.cfg.model,
            "raw_response": truncate_text(redact_text(content, redaction)),
            **fields,
        }
        if self.log_cfg.llm_log_detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(prompt, redaction))
        log_event(self.llm_logger, "LLM response", **payload)


def classify_http_error(status_code: int, body: dict[str, Any]) -> GenerationError:
    """Map an HTTP error response from the API to a typed GenerationError.

    The API reports errors as ``{"error": {"code", "message", "status"}}``.
    """
    error = body.get("error") if isinstance(body.get("error"), dict) else {}
    message = str(error.get("message") or f"HTTP {status_code}")
    status = str(error.get("status") or "").upper()

    if status_code in (429, 503) or status in _OVERLOAD_STATUSES or "overloaded" in message.lower():
        kind = GenerationErrorKind.OVERLOADED
    elif status_code in (401, 403) or status in _AUTH_STATUSES or _is_api_key_error(error):
        kind = GenerationErrorKind.AUTH
    elif 400 <= status_code < 500:
        kind = GenerationErrorKind.INVALID_REQUEST
    else:
        kind = GenerationErrorKind.OTHER
    return GenerationError(kind, message, status_code)


def _is_api_key_error(error: dict[str, Any]) -> bool:
    for detail in error.get("details") or []:
        if isinstance(detail, dict) and detail.get("reason") == "API_KEY_INVALID":
            return True
    return "api key" in str(error.get("message") or "").lower()


def _error_body(resp: httpx.Response) -> dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {"error": {"message": resp.text[:500]}}
    return body if isinstance(body, dict) else {}


def _extract_text(data: dict[str, Any]) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""

    if not isinstance(parts, list):
        return ""

    non_thought_chunks: list[str] = []
    all_chunks: list[str] = []
    for part in parts:
        if not isinstance(part, dict):
            continue
        text = part.get("text")
        if text is None:
            continue
        chunk = str(text)
        if not chunk:
            continue
        all_chunks.append(chunk)
        if not bool(part.get("thought")):
            non_thought_chunks.append(chunk)

    if non_thought_chunks:
        return "".join(non_thought_chunks)
    return "".join(all_chunks)
