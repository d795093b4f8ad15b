"""Tests for the generation cache and pre-fetch controller."""

import asyncio

import pytest

from conftest import make_request
from sharecards.errors import GenerationError
from sharecards.services.prefetch import GenerationCache, PrefetchController, PrefetchState


class FakeGenerator:
    """Records calls; each call waits on a gate unless the gate is open."""

    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail
        self.gate = asyncio.Event()
        self.gate.set()

    async def __call__(self, request):
        self.calls.append(request.cache_key())
        await self.gate.wait()
        if self.fail:
            raise RuntimeError("renderer exploded")
        return f"png:{request.cache_key()[:8]}".encode()


async def _settle():
    for _ in range(20):
        await asyncio.sleep(0)


class TestGenerationCache:
    def test_put_get(self):
        cache = GenerationCache()
        assert cache.get("k") is None
        cache.put("k", b"png")
        assert cache.get("k") == b"png"
        assert "k" in cache
        assert "other" not in cache


class TestPrefetchLifecycle:
    @pytest.mark.asyncio
    async def test_open_pre_generates_into_cache(self):
        generate = FakeGenerator()
        controller = PrefetchController(generate, timeout=5)
        request = make_request("dashboard")

        controller.open(request)
        assert controller.state == PrefetchState.PRE_GENERATING
        await _settle()

        assert controller.state == PrefetchState.READY
        assert request.cache_key() in controller.cache
        assert len(generate.calls) == 1

    @pytest.mark.asyncio
    async def test_ready_when_already_cached(self):
        generate = FakeGenerator()
        cache = GenerationCache()
        request = make_request("dashboard")
        cache.put(request.cache_key(), b"cached")
        controller = PrefetchController(generate, cache, timeout=5)

        controller.open(request)
        assert controller.state == PrefetchState.READY
        assert await controller.get_image() == b"cached"
        assert generate.calls == []

    @pytest.mark.asyncio
    async def test_update_with_same_key_is_noop(self):
        generate = FakeGenerator()
        controller = PrefetchController(generate, timeout=5)
        controller.open(make_request("dashboard"))
        controller.update(make_request("dashboard"))
        await _settle()
        assert len(generate.calls) == 1

    @pytest.mark.asyncio
    async def test_update_with_new_key_restarts(self):
        generate = FakeGenerator()
        controller = PrefetchController(generate, timeout=5)
        controller.open(make_request("dashboard"))
        await _settle()

        themed = make_request("dashboard", theme="purple")
        controller.update(themed)
        assert controller.state == PrefetchState.PRE_GENERATING
        await _settle()

        assert controller.state == PrefetchState.READY
        assert controller.current_key == themed.cache_key()
        assert len(generate.calls) == 2

    @pytest.mark.asyncio
    async def test_close_resets_to_idle(self):
        controller = PrefetchController(FakeGenerator(), timeout=5)
        controller.open(make_request("dashboard"))
        controller.close()
        assert controller.state == PrefetchState.IDLE
        assert controller.current_key is None
        await _settle()

    @pytest.mark.asyncio
    async def test_cache_survives_close(self):
        generate = FakeGenerator()
        controller = PrefetchController(generate, timeout=5)
        request = make_request("dashboard")
        controller.open(request)
        await _settle()

        controller.close()
        assert request.cache_key() in controller.cache

        controller.open(make_request("dashboard"))
        assert controller.state == PrefetchState.READY
        assert await controller.get_image() == f"png:{request.cache_key()[:8]}".encode()
        assert len(generate.calls) == 1

    @pytest.mark.asyncio
    async def test_get_image_without_request(self):
        controller = PrefetchController(FakeGenerator(), timeout=5)
        with pytest.raises(RuntimeError):
            await controller.get_image()


class TestInFlightDedupe:
    @pytest.mark.asyncio
    async def test_get_image_joins_pre_generation(self):
        generate = FakeGenerator()
        generate.gate.clear()
        controller = PrefetchController(generate, timeout=5)
        request = make_request("podcasts")

        controller.open(request)
        waiter = asyncio.create_task(controller.get_image())
        await _settle()
        assert controller.in_flight(request.cache_key())

        generate.gate.set()
        image = await waiter
        assert image.startswith(b"png:")
        assert len(generate.calls) == 1

    @pytest.mark.asyncio
    async def test_concurrent_get_image_single_generation(self):
        generate = FakeGenerator()
        generate.gate.clear()
        controller = PrefetchController(generate, timeout=5)
        controller.open(make_request("history"))

        waiters = [asyncio.create_task(controller.get_image()) for _ in range(3)]
        await _settle()
        generate.gate.set()
        images = await asyncio.gather(*waiters)

        assert len(set(images)) == 1
        assert len(generate.calls) == 1


class TestStaleGuard:
    @pytest.mark.asyncio
    async def test_stale_result_not_committed(self):
        generate = FakeGenerator()
        generate.gate.clear()
        controller = PrefetchController(generate, timeout=5)
        first = make_request("concerts")
        second = make_request("concerts", locale="pt-BR")

        controller.open(first)
        await _settle()
        controller.update(second)
        await _settle()
        generate.gate.set()
        await _settle()

        assert first.cache_key() not in controller.cache
        assert second.cache_key() in controller.cache
        assert controller.current_key == second.cache_key()
        assert controller.state == PrefetchState.READY

    @pytest.mark.asyncio
    async def test_stale_result_after_close(self):
        generate = FakeGenerator()
        generate.gate.clear()
        controller = PrefetchController(generate, timeout=5)
        request = make_request("concerts")

        controller.open(request)
        await _settle()
        controller.close()
        generate.gate.set()
        await _settle()

        assert request.cache_key() not in controller.cache
        assert controller.state == PrefetchState.IDLE


class TestFailures:
    @pytest.mark.asyncio
    async def test_pre_generation_failure_is_silent(self):
        controller = PrefetchController(FakeGenerator(fail=True), timeout=5)
        controller.open(make_request("sonic-aura"))
        await _settle()
        assert controller.state == PrefetchState.IDLE
        assert make_request("sonic-aura").cache_key() not in controller.cache

    @pytest.mark.asyncio
    async def test_on_demand_failure_propagates(self):
        generate = FakeGenerator(fail=True)
        controller = PrefetchController(generate, timeout=5)
        controller.open(make_request("sonic-aura"))
        await _settle()

        with pytest.raises(GenerationError):
            await controller.get_image()
        assert len(generate.calls) == 2

    @pytest.mark.asyncio
    async def test_on_demand_after_failed_pre_generation(self):
        generate = FakeGenerator(fail=True)
        controller = PrefetchController(generate, timeout=5)
        controller.open(make_request("sonic-aura"))
        await _settle()

        generate.fail = False
        image = await controller.get_image()
        assert image.startswith(b"png:")
        assert controller.state == PrefetchState.READY

    @pytest.mark.asyncio
    async def test_timeout_is_a_failure(self):
        generate = FakeGenerator()
        generate.gate.clear()
        controller = PrefetchController(generate, timeout=0.01)
        controller.open(make_request("podcasts"))

        with pytest.raises(GenerationError, match="timed out"):
            await controller.get_image()
        assert controller.state == PrefetchState.IDLE
