"""
Root Typer application for the fallible CLI.

Commands:
    fallible strategies            list registered sequencing strategies
    fallible compare --size N      run every strategy on the same workload
    fallible bench --size N        time every strategy against the plain baseline
"""

from __future__ import annotations

import typer
from typer import Typer

from fallible.cli.utils import console, fail, output_json, output_table, to_dict
from fallible.core.errors import ConfigError
from fallible.core.logging import configure_logging

app = Typer(
    name="fallible",
    help="fallible: fail-fast, stack-safe sequencing of fallible computations.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from fallible import __version__

        typer.echo(f"fallible {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override FALLIBLE_LOG_LEVEL."),
) -> None:
    """fallible CLI: compare and benchmark sequencing strategies."""
    from fallible.core.settings import get_settings, normalize_log_level

    try:
        settings = get_settings()
    except ConfigError as exc:
        fail(exc.message, code=2)
    level = settings.log_level
    if log_level is not None:
        try:
            level = normalize_log_level(log_level)
        except ValueError as exc:
            fail(str(exc), code=2)
    configure_logging(level=level, json_format=settings.log_json)


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("strategies")
def strategies(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List registered sequencing strategies."""
    from fallible.strategies import list_strategies

    rows = [
        {"name": s.name, "stack_safe": s.stack_safe, "description": s.description}
        for s in list_strategies()
    ]
    if json_out:
        output_json(rows)
        return
    output_table(rows, title="Strategies")


@app.command("compare")
def compare(
    size: int = typer.Option(200, "--size", "-n", min=1, help="Workload size (ids 1..size-1)."),
    fail_at: int | None = typer.Option(None, "--fail-at", help="Item id whose lookup fails."),
    strategy: list[str] | None = typer.Option(None, "--strategy", "-s", help="Restrict to these strategies."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run every strategy on the same workload and check they agree."""
    from fallible.bench import Workload
    from fallible.core.settings import get_settings
    from fallible.strategies import compare_strategies

    workload = Workload(size=size, bad_every=get_settings().bad_every, fail_at=fail_at)
    try:
        comparison = compare_strategies(workload.units, names=strategy or None)
    except KeyError as exc:
        fail(str(exc.args[0]))

    rows = [
        {
            "strategy": o.strategy,
            "status": o.status,
            "invocations": o.invocations,
            "duration_ms": round(o.duration_ms, 3),
        }
        for o in comparison.outcomes
    ]
    if json_out:
        output_json({"agree": comparison.agree, "overruns": comparison.overruns, "outcomes": rows})
    else:
        output_table(rows, title=f"Strategies on {size - 1} units")
        if comparison.overruns:
            console.print(f"[yellow]Stack overrun:[/yellow] {', '.join(comparison.overruns)}")
    if not comparison.agree:
        fail("strategies disagree")
    if not json_out:
        console.print("[green]All completed strategies agree.[/green]")


@app.command("bench")
def bench(
    size: int | None = typer.Option(None, "--size", "-n", min=2, help="Workload size (default: FALLIBLE_BENCH_SIZE)."),
    rounds: int | None = typer.Option(None, "--rounds", "-r", min=1, help="Measured rounds."),
    warmup: int | None = typer.Option(None, "--warmup", "-w", min=0, help="Warm-up rounds."),
    fail_at: int | None = typer.Option(None, "--fail-at", help="Item id whose lookup fails."),
    strategy: list[str] | None = typer.Option(None, "--strategy", "-s", help="Restrict to these strategies."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Time each strategy against the plain baseline."""
    from fallible.bench import run_bench
    from fallible.core.settings import get_settings

    settings = get_settings()
    try:
        report = run_bench(
            size=size or settings.bench_size,
            rounds=rounds or settings.bench_rounds,
            warmup=settings.warmup_rounds if warmup is None else warmup,
            bad_every=settings.bad_every,
            fail_at=fail_at,
            names=strategy or None,
        )
    except KeyError as exc:
        fail(str(exc.args[0]))

    if json_out:
        output_json(report.to_dict())
    else:
        output_table([to_dict(row) for row in report.rows], title=f"Bench on {report.size - 1} items")
    if not report.agree:
        fail("strategies disagree with the plain baseline")
