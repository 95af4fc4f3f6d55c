from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_sample(sample: Optional[Dict[str, Any]]) -> str:
    if not sample:
        return "-"
    return f"#{sample.get('id')} {sample.get('timestamp')} {sample.get('value')}"


def render_samples(samples: Iterable[Dict[str, Any]]) -> None:
    rows = list(samples)
    if not rows:
        typer.echo("No samples recorded.")
        return
    for sample in rows:
        typer.echo(f"  - {_format_sample(sample)}")


def render_day(payload: Dict[str, Any]) -> None:
    echo_heading(f"Samples for {payload.get('date')}")
    echo_key_values([("count", payload.get("count"))])
    render_samples(payload.get("data") or [])


def render_stats(payload: Dict[str, Any]) -> None:
    echo_heading(f"Statistics for {payload.get('date')}")
    echo_key_values(
        [
            ("count", payload.get("count")),
            ("average", payload.get("average")),
            ("min", payload.get("min")),
            ("max", payload.get("max")),
            ("first", _format_sample(payload.get("firstRecord"))),
            ("last", _format_sample(payload.get("lastRecord"))),
        ]
    )


def render_sample(payload: Dict[str, Any]) -> None:
    echo_heading("Sample recorded")
    echo_key_values(
        [
            ("id", payload.get("id")),
            ("value", payload.get("value")),
            ("timestamp", payload.get("timestamp")),
        ]
    )
