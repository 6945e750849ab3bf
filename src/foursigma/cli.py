"""CLI for foursigma interval scoring."""

from __future__ import annotations

import io
import json
import math
import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from foursigma import __version__
from foursigma.export import judgement_to_csv_row, judgements_to_csv, session_to_jsonl_lines
from foursigma.scoring import judge, total_score
from foursigma.session import (
    IntervalError,
    SessionError,
    SessionResult,
    check_interval,
    finalize_session,
    load_session,
)

# Force UTF-8 output on Windows to avoid cp1252 encoding errors
if sys.platform == "win32":
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding="utf-8", errors="replace")

console = Console()

EVEREST_METERS = 8849

# (label, lower, upper, true value)
DEMO_EXAMPLES = [
    ("Very wide range", 2000, 15000, EVEREST_METERS),
    ("Medium range", 5000, 12000, EVEREST_METERS),
    ("Narrow range", 8700, 9000, EVEREST_METERS),
    ("Miss (too high)", 9500, 12000, EVEREST_METERS),
    ("Absurdly wide", 1, 100_000_000, 30),
    ("Exact guess", EVEREST_METERS, EVEREST_METERS, EVEREST_METERS),
]


def _format_score(score: float) -> Text:
    """Render a score with hit/miss coloring."""
    text = Text()
    if score == 0:
        text.append("0", style="red")
    elif not math.isfinite(score):
        text.append(str(score), style="yellow")
    else:
        text.append(f"{score:,.2f}", style="bold green")
    return text


def _hit_label(hit: bool) -> Text:
    return Text("HIT", style="bold green") if hit else Text("MISS", style="bold red")


def _display_session(result: SessionResult, source: str = "") -> None:
    """Rich display of a finalized session."""
    title = "Session Results"
    if source:
        title += f" - {source[:60]}"

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Question", style="cyan", max_width=40)
    table.add_column("Interval", justify="right")
    table.add_column("Answer", justify="right")
    table.add_column("Result", justify="center")
    table.add_column("Score", justify="right")

    for qj in result.judgements:
        unit = f" {qj.question.unit}" if qj.question.unit else ""
        table.add_row(
            qj.question.prompt or qj.question.id,
            f"{qj.answer.lower:,g} - {qj.answer.upper:,g}",
            f"{qj.question.true_value:,g}{unit}",
            _hit_label(qj.hit),
            _format_score(qj.score),
        )

    summary = Text()
    summary.append("\n  Total: ", style="bold")
    summary.append_text(_format_score(result.score))
    summary.append(
        f"\n  Captured: {result.questions_captured}/{result.total_questions}\n", style="dim",
    )

    console.print(Panel(summary, title=title, border_style="blue"))
    console.print(table)
    console.print()


@click.group()
@click.version_option(version=__version__)
def main():
    """foursigma - Calibration game scoring.

    Scores 95% confidence intervals for numeric trivia: misses score
    nothing, narrow hits score the most. Use -- before negative numbers.
    """
    pass


@main.command()
@click.argument("lower", type=float)
@click.argument("upper", type=float)
@click.argument("true_value", type=float)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def score(lower: float, upper: float, true_value: float, as_json: bool):
    """Score one interval [LOWER, UPPER] against TRUE_VALUE."""
    try:
        check_interval(lower, upper)
    except IntervalError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    judgement = judge(lower, upper, true_value)

    if as_json:
        click.echo(json.dumps(judgement.to_dict(), indent=2))
    else:
        line = Text()
        line.append_text(_hit_label(judgement.hit))
        line.append(f"  [{lower:,g}, {upper:,g}] vs {true_value:,g}  ")
        line.append_text(_format_score(judgement.score))
        console.print(line)


@main.command()
@click.argument("scores", nargs=-1, type=float)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def total(scores: tuple[float, ...], as_json: bool):
    """Add per-question SCORES into a session total."""
    result = total_score(scores)
    if as_json:
        click.echo(json.dumps({"score": result}))
    else:
        console.print(Text("Total: ", style="bold") + _format_score(result))


@main.command()
@click.argument("session_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--csv", "as_csv", is_flag=True, help="Output one CSV row per question")
@click.option("--jsonl", "as_jsonl", is_flag=True, help="Output one JSON line per question")
def finalize(session_file: str, as_json: bool, as_csv: bool, as_jsonl: bool):
    """Score a session file of questions and answers (YAML or JSON)."""
    if sum((as_json, as_csv, as_jsonl)) > 1:
        console.print("[red]Choose at most one of --json, --csv, --jsonl.[/red]")
        raise SystemExit(1)

    try:
        questions, answers = load_session(session_file)
        result = finalize_session(questions, answers)
    except (IntervalError, SessionError) as e:
        console.print(f"[red]Invalid session: {e}[/red]")
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif as_csv:
        rows = [judgement_to_csv_row(qj, session=session_file) for qj in result.judgements]
        click.echo(judgements_to_csv(rows), nl=False)
    elif as_jsonl:
        for line in session_to_jsonl_lines(result, session=session_file):
            click.echo(line)
    else:
        _display_session(result, source=session_file)


@main.command()
def demo():
    """Show how different intervals score (Mount Everest is 8849 m tall)."""
    console.print("\n[bold]foursigma demo[/bold] - how intervals score\n")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Example", style="cyan")
    table.add_column("Interval", justify="right")
    table.add_column("Answer", justify="right")
    table.add_column("Result", justify="center")
    table.add_column("Score", justify="right")

    for label, lower, upper, true_value in DEMO_EXAMPLES:
        judgement = judge(lower, upper, true_value)
        table.add_row(
            label,
            f"{lower:,} - {upper:,}",
            f"{true_value:,}",
            _hit_label(judgement.hit),
            _format_score(judgement.score),
        )

    console.print(table)
    console.print()


@main.command()
@click.option("--host", default=None, help="Interface to bind (default: FOURSIGMA_HOST)")
@click.option("--port", type=int, default=None, help="Port to listen on (default: FOURSIGMA_PORT)")
def serve(host: str | None, port: int | None):
    """Run the scoring HTTP server."""
    try:
        from foursigma.server import create_app
    except ImportError:
        console.print("[red]Flask is not installed (pip install foursigma-score[server]).[/red]")
        raise SystemExit(1)
    from foursigma.config import settings

    app = create_app(settings)
    app.run(host=host or settings.host, port=port or settings.port)


if __name__ == "__main__":
    main()
