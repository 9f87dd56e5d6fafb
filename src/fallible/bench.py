"""
Item-lookup workload for comparing sequencing strategies.

The workload asks for the ids of "bad" items: item ids ``1..size-1``, each
looked up individually, every ``bad_every``-th item being bad. The plain
baseline does it without Results; each strategy does it by sequencing one
lookup unit per id and filtering the aggregate. Setting ``fail_at`` makes the
lookup of that id return ``Err``, which every strategy must surface.

Examples:
    >>> report = run_bench(size=100, rounds=1, warmup=0, names=["loop", "fold"])
    >>> [row.status for row in report.rows]
    ['ok', 'ok', 'ok']
    >>> all(row.agrees for row in report.rows)
    True
"""

from __future__ import annotations

import statistics
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from fallible.core.errors import StackOverrun
from fallible.core.logging import LogContext, get_logger, log_step, timed_block
from fallible.core.result import Err, Ok, Result
from fallible.core.sequence import FallibleUnit
from fallible.strategies import get_strategy, list_strategies

logger = get_logger(__name__)

PLAIN = "plain"


@dataclass(frozen=True)
class Workload:
    """Deterministic item-lookup workload."""

    size: int
    bad_every: int = 17
    fail_at: int | None = None

    def item_ids(self) -> list[int]:
        return list(range(1, self.size))

    def plain_item(self, item_id: int) -> str:
        if item_id % self.bad_every == 0:
            return f"{item_id} is bad"
        return f"{item_id} is good"

    def get_item(self, item_id: int) -> Result[str, str]:
        if item_id == self.fail_at:
            return Err(f"item {item_id} unavailable")
        return Ok(self.plain_item(item_id))

    def units(self) -> list[FallibleUnit[tuple[int, str], str]]:
        """One lookup unit per id, producing ``(id, item)``."""
        return [self._lookup(item_id) for item_id in self.item_ids()]

    def _lookup(self, item_id: int) -> FallibleUnit[tuple[int, str], str]:
        return lambda: self.get_item(item_id).map(lambda item: (item_id, item))

    def plain(self) -> list[int]:
        """Baseline without Results."""
        return [i for i in self.item_ids() if "bad" in self.plain_item(i)]

    def expected(self) -> Result[list[int], str]:
        if self.fail_at is not None and 1 <= self.fail_at < self.size:
            return Err(f"item {self.fail_at} unavailable")
        return Ok(self.plain())


def bad_ids(pairs: list[tuple[int, str]]) -> list[int]:
    return [item_id for item_id, item in pairs if "bad" in item]


@dataclass
class BenchRow:
    """Timing and outcome of one strategy."""

    strategy: str
    status: str
    rounds: int
    best_ms: float | None
    mean_ms: float | None
    agrees: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class BenchReport:
    size: int
    bad_every: int
    fail_at: int | None
    rows: list[BenchRow] = field(default_factory=list)

    @property
    def agree(self) -> bool:
        return all(row.agrees for row in self.rows if row.status != "stack_overrun")

    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "bad_every": self.bad_every,
            "fail_at": self.fail_at,
            "agree": self.agree,
            "rows": [row.to_dict() for row in self.rows],
        }


def _summarize(name: str, status: str, timings: list[float], agrees: bool) -> BenchRow:
    return BenchRow(
        strategy=name,
        status=status,
        rounds=len(timings),
        best_ms=round(min(timings), 3) if timings else None,
        mean_ms=round(statistics.fmean(timings), 3) if timings else None,
        agrees=agrees,
    )


def _bench_plain(workload: Workload, rounds: int, warmup: int) -> BenchRow:
    for _ in range(warmup):
        workload.plain()
    timings = []
    for _ in range(rounds):
        with timed_block(PLAIN) as timer:
            workload.plain()
        timings.append(timer.duration_ms)
    return _summarize(PLAIN, "ok", timings, agrees=True)


def _bench_strategy(name: str, workload: Workload, rounds: int, warmup: int) -> BenchRow:
    strategy = get_strategy(name)
    expected = workload.expected()

    def once() -> Result[list[int], str]:
        return strategy.run(workload.units()).map(bad_ids)

    try:
        for _ in range(warmup):
            once()
        timings = []
        result: Result[list[int], str] | None = None
        with log_step("bench.strategy", level="debug", strategy=name, rounds=rounds) as step:
            for _ in range(rounds):
                with timed_block(name) as timer:
                    result = once()
                timings.append(timer.duration_ms)
            step.add_metric("status", "ok" if result is not None and result.is_ok() else "err")
    except StackOverrun as exc:
        logger.info("bench_stack_overrun", strategy=name, units=exc.context.units)
        return _summarize(name, "stack_overrun", [], agrees=False)

    status = "ok" if result is not None and result.is_ok() else "err"
    return _summarize(name, status, timings, agrees=result == expected)


def run_bench(
    size: int,
    rounds: int = 10,
    warmup: int = 5,
    bad_every: int = 17,
    fail_at: int | None = None,
    names: Sequence[str] | None = None,
) -> BenchReport:
    """
    Time the plain baseline and each strategy on the same workload.

    Strategies that overrun the stack get a ``stack_overrun`` row instead of
    timings. ``rounds`` must be at least 1.
    """
    if rounds < 1:
        raise ValueError("rounds must be >= 1")
    workload = Workload(size=size, bad_every=bad_every, fail_at=fail_at)
    selected = list(names) if names is not None else [s.name for s in list_strategies()]

    report = BenchReport(size=size, bad_every=bad_every, fail_at=fail_at)
    with LogContext(bench_size=size):
        report.rows.append(_bench_plain(workload, rounds, warmup))
        for name in selected:
            report.rows.append(_bench_strategy(name, workload, rounds, warmup))

    logger.info("bench_completed", strategies=len(selected), agree=report.agree)
    return report


__all__ = ["BenchReport", "BenchRow", "Workload", "bad_ids", "run_bench"]
