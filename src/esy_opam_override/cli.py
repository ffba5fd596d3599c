"""Typer CLI for inspecting and applying opam overrides."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .config import OverrideConfig, load_config
from .errors import OverrideError
from .manifest import dump_manifest, load_manifest
from .overrides import OverrideRepository, apply_override, init

app = typer.Typer(help="esy opam override CLI")

_state: dict = {}


@app.callback()
def main(
    config: Optional[Path] = typer.Option(None, "--config", help="YAML config file"),
    offline: Optional[bool] = typer.Option(None, "--offline", help="Never touch the network"),
    prefer_offline: Optional[bool] = typer.Option(
        None, "--prefer-offline", help="Reuse an existing checkout without updating it"
    ),
    checkout_path: Optional[Path] = typer.Option(None, help="Use this override checkout as is"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    _state["config"] = load_config(
        config,
        offline=offline,
        prefer_offline=prefer_offline,
        checkout_path=checkout_path,
    )


def _config() -> OverrideConfig:
    return _state.get("config") or load_config()


def _repository() -> OverrideRepository:
    try:
        return init(_config())
    except OverrideError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)


@app.command()
def checkout() -> None:
    """Clone or update the override repository and print its path."""
    repository = _repository()
    typer.echo(str(repository.checkout_path))


@app.command()
def packages(name: Optional[str] = typer.Argument(None, help="Only this package")) -> None:
    """List overridden packages with their version ranges."""
    repository = _repository()
    names = [name] if name else repository.package_names()
    for package_name in names:
        ranges = ", ".join(version_range for version_range, _ in repository.get(package_name))
        rprint(f"[cyan]{package_name}[/cyan]: {escape(ranges) or '-'}")


@app.command()
def show(name: str = typer.Argument(..., help="opam package name")) -> None:
    """Print the override records of one package."""
    repository = _repository()
    entries = repository.get(name)
    if not entries:
        rprint(f"[yellow]No overrides for {name}[/yellow]")
        raise typer.Exit(code=1)
    payload = {
        version_range: override.model_dump(mode="json", by_alias=True, exclude_none=True)
        for version_range, override in entries
    }
    typer.echo(yaml.safe_dump(payload, sort_keys=False))


@app.command()
def apply(
    manifest_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Manifest JSON file"),
    output: Optional[Path] = typer.Option(None, help="Write the merged manifest here"),
) -> None:
    """Apply overrides to a manifest and print the result."""
    config = _config()
    repository = _repository()
    try:
        manifest = load_manifest(manifest_path)
    except (json.JSONDecodeError, ValidationError) as exc:
        rprint(f"[red]Invalid manifest {escape(str(manifest_path))}: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    result = apply_override(repository, manifest, scope=config.scope)
    if result is None:
        rprint(f"[yellow]No override applies to {manifest.name}@{manifest.version}[/yellow]")
        return
    text = json.dumps(dump_manifest(result), indent=2)
    if output:
        output.write_text(text + "\n", encoding="utf-8")
        rprint(f"[green]Merged manifest written to {output}[/green]")
    else:
        typer.echo(text)


@app.command()
def version() -> None:
    """Print the installed version."""
    typer.echo(__version__)


if __name__ == "__main__":
    app()
