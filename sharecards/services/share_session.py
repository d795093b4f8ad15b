"""Share-panel flow: pre-generate on open, deliver on Share."""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from sharecards.errors import GenerationError
from sharecards.models.delivery import DeliveryResult
from sharecards.models.share import GenerationRequest
from sharecards.services.delivery import DeliverySelector
from sharecards.services.locale import strings_for
from sharecards.services.prefetch import PrefetchController, PrefetchState


@dataclass
class ShareOutcome:
    """What the panel shows after the user pressed Share."""
    result: Optional[DeliveryResult] = None
    message: Optional[str] = None  # Retryable error text

    @property
    def ok(self) -> bool:
        return self.result is not None


class ShareSession:
    """One open share panel."""

    def __init__(self, controller: PrefetchController, selector: DeliverySelector):
        self.controller = controller
        self.selector = selector
        self._request: Optional[GenerationRequest] = None

    @property
    def is_generating(self) -> bool:
        return self.controller.state == PrefetchState.PRE_GENERATING

    def open(self, request: GenerationRequest) -> None:
        self._request = request
        self.controller.open(request)

    def update(self, request: GenerationRequest) -> None:
        self._request = request
        self.controller.update(request)

    def close(self) -> None:
        self._request = None
        self.controller.close()

    async def share(self) -> ShareOutcome:
        """Get the bitmap (cached, in flight or on demand) and deliver it.

        Generation failures become a retry message. Download failures
        propagate as DeliveryError.
        """
        if self._request is None:
            raise RuntimeError("Share panel is not open")
        request = self._request

        try:
            image = await self.controller.get_image()
        except GenerationError as e:
            logger.error(f"Share card generation failed: {e}")
            return ShareOutcome(message=strings_for(request.locale).generation_failed)

        result = await self.selector.deliver(image, request.type)
        return ShareOutcome(result=result)
