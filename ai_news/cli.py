"""
Command-line interface for the AI news server.

Uses Typer to provide two commands:
- serve: run the web application with uvicorn
- fetch: run the pipeline once and print or save the result

Supports loading .env files for API key configuration.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
import typer
import uvicorn

from .app import create_app
from .config import AppConfig, load_config
from .errors import NewsPipelineError
from .llm.tracing import flush, setup_langfuse
from .logging_utils import setup_llm_logger, setup_logging
from .renderer import render_report
from .runner import build_news

app = typer.Typer(add_completion=False)
console = Console()


def _load(config: Path | None, log_level: str | None, api_key: str | None) -> AppConfig:
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    if api_key:
        cfg.provider.api_key = api_key
    return cfg


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Run the web server (GET /api/news and the browser page)."""
    cfg = _load(config, log_level, api_key=None)
    uvicorn.run(create_app(cfg), host=host, port=port, log_level=cfg.logging.level.lower())


@app.command()
def fetch(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the result to this file (.html renders a report, anything else writes JSON).",
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        help="Override the provider API key (or set GEMINI_API_KEY / .env).",
    ),
):
    """Run the pipeline once and print the news items as JSON."""
    cfg = _load(config, log_level, api_key)
    logger = setup_logging(cfg.logging)
    llm_logger = setup_llm_logger(cfg.logging)
    setup_langfuse(cfg.langfuse)

    try:
        items = asyncio.run(build_news(cfg, logger=logger, llm_logger=llm_logger))
    except NewsPipelineError as exc:
        console.print(f"[red]{exc.message}[/red]")
        if exc.details:
            console.print(exc.details)
        raise typer.Exit(code=1) from exc
    finally:
        flush()

    if output is not None and output.suffix.lower() == ".html":
        render_report(items, output, cfg.render.page_title)
        console.print(f"Report generated: {output}")
        return

    body = json.dumps({"news": [item.to_dict() for item in items]}, ensure_ascii=False, indent=2)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(body, encoding="utf-8")
        console.print(f"News written: {output}")
    else:
        console.print_json(body)


if __name__ == "__main__":
    app()
