"""Share-card services: themes, labels, caching, delivery.

`generation` is imported directly (it pulls in the rendering workers).
"""

from .delivery import DeliverySelector, DevicePolicy, FileDownloader, plan_delivery
from .prefetch import GenerationCache, PrefetchController, PrefetchState
from .share_client import GenerationClient
from .share_session import ShareOutcome, ShareSession

__all__ = [
    "DeliverySelector",
    "DevicePolicy",
    "FileDownloader",
    "plan_delivery",
    "GenerationCache",
    "PrefetchController",
    "PrefetchState",
    "GenerationClient",
    "ShareOutcome",
    "ShareSession",
]
