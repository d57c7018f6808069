"""
FastAPI application serving the news API and the browser page.

Routes:
- GET /api/news: run the pipeline and return {"news": [...]}
- GET /: the page that renders the news cards
- GET /healthz: liveness check
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
import logging
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse

from .analyzers.augmenter import Sleeper
from .config import AppConfig
from .errors import NewsPipelineError
from .feeds.aggregator import FeedFetcher
from .llm.tracing import flush, setup_langfuse
from .logging_utils import log_event, request_context, setup_llm_logger, setup_logging
from .renderer import render_page
from .runner import ProviderFactory, build_news


def create_app(
    cfg: AppConfig | None = None,
    provider_factory: ProviderFactory | None = None,
    fetcher: FeedFetcher | None = None,
    sleep: Sleeper = asyncio.sleep,
) -> FastAPI:
    """Build the application.

    The optional overrides are handed to ``build_news`` on every request,
    which lets tests substitute fake feeds, providers and backoff waits.
    """
    cfg = cfg or AppConfig()
    logger = setup_logging(cfg.logging)
    llm_logger = setup_llm_logger(cfg.logging)
    setup_langfuse(cfg.langfuse)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        log_event(logger, "AI news server started", event="server_started", model=cfg.provider.model)
        yield
        flush()

    app = FastAPI(
        title="AI News Visualizer",
        description="Recent AI news with generated summaries and infographics",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/api/news")
    async def get_news() -> JSONResponse:
        with request_context() as request_id:
            headers = {"X-Request-ID": request_id}
            try:
                items = await build_news(
                    cfg,
                    provider_factory=provider_factory,
                    fetcher=fetcher,
                    sleep=sleep,
                    logger=logger,
                    llm_logger=llm_logger,
                )
            except NewsPipelineError as exc:
                log_event(
                    logger,
                    f"News request failed: {exc.message}",
                    level=logging.ERROR,
                    event="news_request_failed",
                    error_type=type(exc).__name__,
                    status_code=exc.status_code,
                )
                return JSONResponse(exc.to_payload(), status_code=exc.status_code, headers=headers)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unexpected error while building news")
                return JSONResponse(
                    {"error": "Failed to generate news", "details": f"{type(exc).__name__}: {exc}"},
                    status_code=500,
                    headers=headers,
                )
            return JSONResponse({"news": [item.to_dict() for item in items]}, headers=headers)

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        return HTMLResponse(render_page(cfg.render.page_title))

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
