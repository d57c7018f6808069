"""
HTTP fetching of feed documents.

Feeds are fetched with an async httpx client so that all configured
sources can be requested concurrently. A fetch never raises: network
errors and non-2xx statuses are reported on the FetchResult.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
        content: Raw response bytes, kept so feed parsers can honour the declared encoding
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None
    content: bytes | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


async def fetch_feed(
    url: str,
    timeout: float,
    user_agent: str,
    trust_env: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FetchResult:
    """Fetch a feed document.

    Args:
        url: The feed URL to fetch
        timeout: Request timeout in seconds
        user_agent: User-Agent header string
        trust_env: Whether to respect system proxy settings from environment
        transport: Optional transport override (used by tests)

    Returns:
        FetchResult with text on success or error message on failure
    """
    headers = {
        "User-Agent": user_agent,
        "Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8",
    }
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            headers=headers,
            follow_redirects=True,
            trust_env=trust_env,
            transport=transport,
        ) as client:
            resp = await client.get(url)
    except httpx.HTTPError as exc:
        return FetchResult(url=url, status_code=None, text=None, error=f"{type(exc).__name__}: {exc}")

    if resp.status_code >= 400:
        return FetchResult(
            url=url,
            status_code=resp.status_code,
            text=None,
            error=f"HTTP {resp.status_code}",
        )
    return FetchResult(
        url=url,
        status_code=resp.status_code,
        text=resp.text,
        error=None,
        content=resp.content,
    )
