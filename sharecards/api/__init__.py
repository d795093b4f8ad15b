"""API routers for the share-card service."""

from .share import (
    router as share_router,
    set_capture_engine,
    set_device_policy,
    set_generation_service,
)

__all__ = [
    "share_router",
    "set_capture_engine",
    "set_device_policy",
    "set_generation_service",
]
