"""Typer CLI entrypoint for provider matching."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer
import yaml

from .container import create_container
from .errors import MatchingError
from .llm import HTTPTextCompletionClient
from .logging import configure_logging

app = typer.Typer(help="Care provider matching CLI.")


def _load_settings(config: Optional[Path]) -> dict[str, Any]:
    if not config:
        return {}
    with config.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise typer.BadParameter("Config file must be a YAML object", param_hint="'--config'")
    return loaded


@app.command()
def match(
    dataset: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Dataset JSON path."),
    criteria: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Criteria JSON path."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    completion_endpoint: Optional[str] = typer.Option(None, help="Text-completion API endpoint."),
    completion_api_key: Optional[str] = typer.Option(None, help="Text-completion API key."),
) -> None:
    """Rank providers for a client request."""
    settings = _load_settings(config)
    if completion_endpoint:
        enhancement = dict(settings.get("enhancement") or {})
        enhancement.update(enabled=True, endpoint=completion_endpoint)
        if completion_api_key:
            enhancement["api_key"] = completion_api_key
        settings["enhancement"] = enhancement

    configure_logging(log_level)
    container = create_container(settings=settings)
    pipeline = container.pipeline()

    async def _run() -> list[dict[str, Any]]:
        client = container.completion_client()
        try:
            return await pipeline.run(
                dataset_path=dataset,
                criteria_path=criteria,
                output_path=output,
            )
        finally:
            if isinstance(client, HTTPTextCompletionClient):
                await client.close()

    try:
        results = asyncio.run(_run())
    except MatchingError as exc:
        typer.echo(f"Matching failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Matched {len(results)} providers. Results saved to {output}.")


@app.command()
def factors(
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
) -> None:
    """Print the match factor catalog as JSON."""
    container = create_container(settings=_load_settings(config))
    typer.echo(json.dumps(container.scorer().catalog(), indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
