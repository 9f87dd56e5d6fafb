"""Tests for fallible.core.binding module."""

import asyncio

import pytest

from fallible.core.binding import (
    async_binding,
    binding,
    run_binding,
    sequence_async,
    sequence_binding,
    traverse_async,
)
from fallible.core.errors import ContractViolation
from fallible.core.result import Err, Ok
from tests._support.units import Probe, with_failure_at


class TestBinding:
    def test_binds_values_in_order(self):
        @binding
        def total(a, b):
            x = yield a
            y = yield b
            return x + y

        assert total(Ok(1), Ok(2)) == Ok(3)

    def test_err_short_circuits_and_closes_block(self):
        reached = []
        closed = []

        @binding
        def block():
            try:
                yield Ok(1)
                yield Err("stop")
                reached.append("after")
                yield Ok(3)
            finally:
                closed.append(True)

        assert block() == Err("stop")
        assert reached == []
        assert closed == [True]

    def test_plain_return_is_ok(self):
        def block():
            return "done"
            yield  # pragma: no cover

        assert run_binding(block()) == Ok("done")

    def test_non_result_yield_is_contract_violation(self):
        def block():
            yield 42

        with pytest.raises(ContractViolation, match="yielded int"):
            run_binding(block())

    def test_exception_inside_block_propagates(self):
        def block():
            yield Ok(1)
            raise LookupError("missing")

        with pytest.raises(LookupError):
            run_binding(block())


class TestSequenceBinding:
    def test_scenarios(self):
        assert sequence_binding([lambda: Ok(1), lambda: Ok(2), lambda: Ok(3)]) == Ok([1, 2, 3])
        assert sequence_binding([]) == Ok([])

    def test_fail_fast(self):
        probe = Probe()
        assert sequence_binding(probe.units([Ok(1), Err("bad"), Ok(3)])) == Err("bad")
        assert probe.calls == [0, 1]

    def test_pulls_units_lazily(self):
        probe = Probe()
        sequence_binding(probe.stream([Ok(0), Err("x"), Ok(2)]))
        assert probe.produced == 2

    @pytest.mark.slow
    def test_failure_at_50000(self):
        probe = Probe()
        assert sequence_binding(probe.units(with_failure_at(99_999, 50_000))) == Err("boom")
        assert probe.count == 50_001


class TestSequenceAsync:
    @pytest.mark.asyncio
    async def test_awaits_units_strictly_in_order(self):
        events = []

        def unit(i):
            async def run():
                events.append(("start", i))
                await asyncio.sleep(0)
                events.append(("end", i))
                return Ok(i)

            return run

        result = await sequence_async([unit(0), unit(1), unit(2)])
        assert result == Ok([0, 1, 2])
        assert events == [
            ("start", 0), ("end", 0),
            ("start", 1), ("end", 1),
            ("start", 2), ("end", 2),
        ]

    @pytest.mark.asyncio
    async def test_fail_fast(self):
        started = []

        def unit(i, result):
            async def run():
                started.append(i)
                return result

            return run

        result = await sequence_async([unit(0, Ok(0)), unit(1, Err("bad")), unit(2, Ok(2))])
        assert result == Err("bad")
        assert started == [0, 1]

    @pytest.mark.asyncio
    async def test_accepts_plain_units(self):
        async def remote():
            return Ok("remote")

        assert await sequence_async([lambda: Ok("local"), remote]) == Ok(["local", "remote"])

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await sequence_async([]) == Ok([])

    @pytest.mark.asyncio
    async def test_cancellation_starts_no_new_units(self):
        started = []
        gate = asyncio.Event()

        async def quick():
            started.append("quick")
            return Ok(0)

        async def blocked():
            started.append("blocked")
            await gate.wait()
            return Ok(1)

        async def never():
            started.append("never")
            return Ok(2)

        task = asyncio.create_task(sequence_async([quick, blocked, never]))
        for _ in range(5):
            await asyncio.sleep(0)
        assert started == ["quick", "blocked"]

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        gate.set()
        await asyncio.sleep(0)
        assert started == ["quick", "blocked"]

    @pytest.mark.asyncio
    async def test_traverse_async(self):
        async def fetch(item_id):
            return Ok(f"item-{item_id}") if item_id != 3 else Err(f"{item_id} not found")

        assert await traverse_async([1, 2], fetch) == Ok(["item-1", "item-2"])
        assert await traverse_async([1, 3, 4], fetch) == Err("3 not found")

    @pytest.mark.asyncio
    async def test_async_binding_decorator(self):
        async def lookup(key):
            return Ok({"a": 1, "b": 2}[key])

        @async_binding
        def block():
            a = yield lookup("a")
            b = yield lookup("b")
            return a + b

        assert await block() == Ok(3)
