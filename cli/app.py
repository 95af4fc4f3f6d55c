from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_day, render_sample, render_samples, render_stats


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the temperature log service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _validate_day(value: str) -> str:
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise typer.BadParameter("Dates must use the YYYY-MM-DD format.") from exc
    return value


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("day")
def day_command(
    ctx: typer.Context,
    day: str = typer.Argument(..., callback=_validate_day, help="Calendar date, YYYY-MM-DD."),
) -> None:
    """List every sample recorded on a date."""
    state = _get_state(ctx)
    render_day(state.client.get_day(day))


@app.command("stats")
def stats_command(
    ctx: typer.Context,
    day: str = typer.Argument(..., callback=_validate_day, help="Calendar date, YYYY-MM-DD."),
) -> None:
    """Show count, average and extrema for a date."""
    state = _get_state(ctx)
    render_stats(state.client.get_stats(day))


@app.command("recent")
def recent_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Number of samples to show (server default when omitted).",
    ),
) -> None:
    """Show the most recent samples, oldest first."""
    state = _get_state(ctx)
    render_samples(state.client.get_recent(limit))


@app.command("add")
def add_command(
    ctx: typer.Context,
    value: float = typer.Argument(..., help="Temperature reading to record."),
) -> None:
    """Record a new sample stamped with the server's current time."""
    state = _get_state(ctx)
    payload = state.client.add_sample(value)
    typer.secho(f"Recorded sample id={payload.get('id')}", fg=typer.colors.GREEN)
    render_sample(payload)
