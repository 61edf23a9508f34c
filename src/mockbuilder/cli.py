"""Command-line interface for mockbuilder."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from mockbuilder.config import load_config
from mockbuilder.models import RequestContext
from mockbuilder.routing import extract_path_params, path_matches
from mockbuilder.templating import resolve
from mockbuilder.variables import AVAILABLE_VARIABLES

console = Console()


def _setup_logging(level: str) -> None:
    """Send log records to stderr so rendered JSON on stdout stays clean.

    Unknown level names fall back to INFO.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _parse_pairs(values: tuple[str, ...], option: str) -> dict[str, str]:
    """Parse repeated ``key=value`` options into a dict."""
    pairs: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got '{item}'", param_hint=option)
        pairs[key] = value
    return pairs


def _load_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{path} is not valid JSON: {exc}") from exc


@click.group()
@click.option("--config", "-c", default=None, help="Path to mockbuilder.yaml config file")
@click.pass_context
def main(ctx: click.Context, config: str | None) -> None:
    """mockbuilder: render dynamic mock API responses."""
    ctx.ensure_object(dict)
    cfg = load_config(config)
    ctx.obj["config"] = cfg
    _setup_logging(cfg.logging.level)


@main.command()
@click.argument("template_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--query", "-q", multiple=True, help="Query parameter as key=value")
@click.option("--header", "-H", multiple=True, help="Request header as key=value")
@click.option(
    "--body",
    "-b",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file used as the request body",
)
@click.option("--pattern", default=None, help="Route pattern, e.g. /api/users/:id")
@click.option("--path", "request_path", default=None, help="Request path matched against --pattern")
@click.option("--seed", "-s", default=None, type=int, help="Seed for reproducible random values")
@click.pass_context
def render(
    ctx: click.Context,
    template_file: str,
    query: tuple[str, ...],
    header: tuple[str, ...],
    body: str | None,
    pattern: str | None,
    request_path: str | None,
    seed: int | None,
) -> None:
    """Resolve the placeholders in a JSON response template."""
    cfg = ctx.obj["config"]
    settings = cfg.templates
    if seed is not None:
        settings = settings.model_copy(update={"seed": seed})

    if (pattern is None) != (request_path is None):
        raise click.UsageError("--pattern and --path must be given together")

    path_params = extract_path_params(pattern, request_path) if pattern and request_path else {}
    request = RequestContext(
        query=_parse_pairs(query, "--query"),
        headers=_parse_pairs(header, "--header"),
        body=_load_json(body) if body else None,
    )

    result = resolve(_load_json(template_file), request, path_params, settings=settings)
    click.echo(json.dumps(result, indent=2, ensure_ascii=False))


@main.command()
@click.argument("pattern")
@click.argument("request_path")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def params(pattern: str, request_path: str, json_output: bool) -> None:
    """Extract path parameters from REQUEST_PATH using PATTERN."""
    extracted = extract_path_params(pattern, request_path)

    if json_output:
        click.echo(json.dumps(extracted, indent=2))
        return

    if not path_matches(pattern, request_path):
        console.print(f"[yellow]Warning: {request_path} does not match {pattern}[/yellow]")

    table = Table(title=f"Path Parameters: {pattern}")
    table.add_column("Name", style="cyan")
    table.add_column("Value", style="white")
    for name, value in extracted.items():
        table.add_row(name, value)
    console.print(table)


@main.command()
@click.option("--json-output", is_flag=True, help="Output as JSON")
def variables(json_output: bool) -> None:
    """List the supported template variables."""
    if json_output:
        click.echo(json.dumps([v.model_dump() for v in AVAILABLE_VARIABLES], indent=2))
        return

    table = Table(title="Template Variables")
    table.add_column("Variable", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Example", style="green")
    for variable in AVAILABLE_VARIABLES:
        table.add_row(variable.name, variable.description, variable.example)
    console.print(table)


if __name__ == "__main__":
    main()
