from __future__ import annotations

import asyncio
import logging

import pytest

from extjwt.cache import CacheLoader


def run_async(coro):
    return asyncio.run(coro)


class GatedLoader:
    """Load function that blocks until released and counts invocations."""

    def __init__(self, *, fail: bool = False) -> None:
        self.calls: list[str] = []
        self.gate = asyncio.Event()
        self.fail = fail

    async def __call__(self, key: str) -> str:
        self.calls.append(key)
        await self.gate.wait()
        if self.fail:
            raise RuntimeError(f"load failed for {key}")
        return f"{key}-{len(self.calls)}"


def _always_valid(value: str) -> None:
    return None


def test_concurrent_gets_share_one_load():
    async def scenario() -> None:
        load = GatedLoader()
        loader: CacheLoader[str, str] = CacheLoader(load, _always_valid)

        futures = [loader.get("k") for _ in range(5)]
        assert all(future is futures[0] for future in futures)
        assert loader.is_loading("k")

        load.gate.set()
        values = [await future for future in futures]

        assert values == ["k-1"] * 5
        assert load.calls == ["k"]
        assert not loader.is_loading("k")

    run_async(scenario())


def test_settled_value_is_returned_synchronously():
    async def scenario() -> None:
        load = GatedLoader()
        load.gate.set()
        loader: CacheLoader[str, str] = CacheLoader(load, _always_valid)

        assert await loader.get("k") == "k-1"
        assert loader.get("k") == "k-1"
        assert "k" in loader
        assert len(loader) == 1
        assert load.calls == ["k"]

    run_async(scenario())


def test_invalid_cached_value_triggers_reload():
    async def scenario() -> None:
        stale: set[str] = set()

        def assert_valid(value: str) -> None:
            if value in stale:
                raise ValueError("stale")

        load = GatedLoader()
        load.gate.set()
        loader: CacheLoader[str, str] = CacheLoader(load, assert_valid)

        assert await loader.get("k") == "k-1"
        stale.add("k-1")

        reloaded = loader.get("k")
        assert isinstance(reloaded, asyncio.Future)
        assert await reloaded == "k-2"
        assert loader.peek("k") == "k-2"

    run_async(scenario())


def test_failure_reaches_every_waiter_and_is_not_cached():
    async def scenario() -> None:
        load = GatedLoader(fail=True)
        loader: CacheLoader[str, str] = CacheLoader(load, _always_valid)

        futures = [loader.get("k") for _ in range(3)]
        load.gate.set()
        results = await asyncio.gather(*futures, return_exceptions=True)

        assert all(isinstance(result, RuntimeError) for result in results)
        assert "k" not in loader
        assert not loader.is_loading("k")

        load.fail = False
        assert await loader.get("k") == "k-2"
        assert load.calls == ["k", "k"]

    run_async(scenario())


def test_pending_entry_is_cleared_before_waiters_resume():
    async def scenario() -> None:
        load = GatedLoader()
        loader: CacheLoader[str, str] = CacheLoader(load, _always_valid)

        async def waiter() -> bool:
            await loader.get("k")
            return loader.is_loading("k")

        task = asyncio.ensure_future(waiter())
        await asyncio.sleep(0)
        load.gate.set()
        assert await task is False

    run_async(scenario())


def test_freshly_loaded_invalid_value_is_rejected():
    def assert_valid(value: str) -> None:
        raise ValueError(f"never valid: {value}")

    async def scenario() -> None:
        load = GatedLoader()
        load.gate.set()
        loader: CacheLoader[str, str] = CacheLoader(load, assert_valid)

        with pytest.raises(ValueError):
            await loader.get("k")
        assert loader.peek("k") is None

    run_async(scenario())


def test_keys_load_independently_and_invalidate_clears():
    async def scenario() -> None:
        load = GatedLoader()
        load.gate.set()
        loader: CacheLoader[str, str] = CacheLoader(load, _always_valid)

        first, second = loader.get("a"), loader.get("b")
        assert first is not second
        assert await first == "a-1"
        assert await second == "b-2"

        loader.invalidate("a")
        assert "a" not in loader
        loader.clear()
        assert len(loader) == 0

    run_async(scenario())


def test_expected_errors_are_not_reported_as_failures(caplog: pytest.LogCaptureFixture):
    class Expected(Exception):
        pass

    async def failing(key: str) -> str:
        raise Expected(key)

    async def scenario() -> None:
        loader: CacheLoader[str, str] = CacheLoader(
            failing, _always_valid, expected_errors=(Expected,)
        )
        with pytest.raises(Expected):
            await loader.get("k")
        assert "k" not in loader

    with caplog.at_level(logging.DEBUG, logger="extjwt.cache"):
        run_async(scenario())

    assert [r for r in caplog.records if r.levelno >= logging.WARNING] == []
