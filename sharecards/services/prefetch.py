"""Generation cache and the pre-fetch controller behind the share panel.

Opening the panel starts generating the card in the background so the
bitmap is usually ready by the time the user taps Share. The controller
moves through `idle -> pre_generating -> ready | idle` and keeps at most
one generation in flight per cache key.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from loguru import logger

from sharecards.config import settings
from sharecards.errors import GenerationError
from sharecards.models.share import GenerationRequest

GenerateFn = Callable[[GenerationRequest], Awaitable[bytes]]


class PrefetchState(str, Enum):
    IDLE = "idle"
    PRE_GENERATING = "pre_generating"
    READY = "ready"


class GenerationCache:
    """Process-local `cache_key -> PNG bytes`. Entries live as long as the process."""

    def __init__(self):
        self._entries: Dict[str, bytes] = {}

    def get(self, key: str) -> Optional[bytes]:
        image = self._entries.get(key)
        if image is not None:
            logger.debug(f"Cache hit for {key[:12]}")
        return image

    def put(self, key: str, image: bytes) -> None:
        self._entries[key] = image

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class PrefetchController:
    """Pre-generates the current request and serves it from the cache."""

    def __init__(
        self,
        generate: GenerateFn,
        cache: Optional[GenerationCache] = None,
        timeout: Optional[float] = None,
    ):
        self._generate = generate
        self.cache = cache if cache is not None else GenerationCache()
        self.timeout = timeout if timeout is not None else settings.generation_timeout
        self._state = PrefetchState.IDLE
        self._request: Optional[GenerationRequest] = None
        self._key: Optional[str] = None
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def state(self) -> PrefetchState:
        return self._state

    @property
    def current_key(self) -> Optional[str]:
        return self._key

    def in_flight(self, key: str) -> bool:
        return key in self._tasks

    # ============ Panel lifecycle ============

    def open(self, request: GenerationRequest) -> None:
        """Panel opened: start pre-generating `request` (best effort)."""
        self._activate(request)

    def update(self, request: GenerationRequest) -> None:
        """Inputs changed. An unchanged cache key is a no-op."""
        if request.cache_key() == self._key:
            return
        self._activate(request)

    def close(self) -> None:
        """Panel closed. Generations still running finish but are not committed.

        The cache is kept: it lives for the whole process, so reopening the
        panel for the same card is served without generating again.
        """
        self._request = None
        self._key = None
        self._state = PrefetchState.IDLE

    def _activate(self, request: GenerationRequest) -> None:
        key = request.cache_key()
        self._request = request
        self._key = key
        if key in self.cache:
            self._state = PrefetchState.READY
            return
        self._state = PrefetchState.PRE_GENERATING
        if key in self._tasks:
            return  # Already generating this exact card
        task = self._start(key, request)
        task.add_done_callback(self._log_prefetch_failure)

    # ============ Generation ============

    def _start(self, key: str, request: GenerationRequest) -> asyncio.Task:
        task = asyncio.create_task(self._run(key, request))
        self._tasks[key] = task
        return task

    async def _run(self, key: str, request: GenerationRequest) -> bytes:
        try:
            image = await asyncio.wait_for(self._generate(request), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            self._settle_failure(key)
            raise GenerationError(f"Generation timed out after {self.timeout:g}s") from e
        except GenerationError:
            self._settle_failure(key)
            raise
        except Exception as e:
            self._settle_failure(key)
            raise GenerationError(f"Generation failed: {e}") from e
        finally:
            self._tasks.pop(key, None)

        if key != self._key:
            # Inputs moved on while this was running
            logger.debug(f"Discarding stale generation for {key[:12]}")
            return image
        self.cache.put(key, image)
        self._state = PrefetchState.READY
        return image

    def _settle_failure(self, key: str) -> None:
        if key == self._key:
            self._state = PrefetchState.IDLE

    @staticmethod
    def _log_prefetch_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Pre-generation failed: {error}")

    async def get_image(self) -> bytes:
        """Bitmap for the current request.

        Served from the cache when ready, otherwise by joining the in-flight
        generation for the same key, otherwise generated on demand.

        Raises:
            GenerationError: On-demand generation failed or timed out
            RuntimeError: No request is active
        """
        request, key = self._request, self._key
        if request is None or key is None:
            raise RuntimeError("No active share request; call open() first")

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        task = self._tasks.get(key)
        if task is not None:
            try:
                return await asyncio.shield(task)
            except GenerationError:
                logger.info("Pre-generation failed, generating on demand")

        task = self._tasks.get(key) or self._start(key, request)
        if key == self._key:
            self._state = PrefetchState.PRE_GENERATING
        return await asyncio.shield(task)
