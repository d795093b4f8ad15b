"""Delivery strategy: native share sheet on capable mobile devices, download otherwise."""

import re
import time
from pathlib import Path
from typing import Callable, Optional, Protocol

from loguru import logger

from sharecards.config import settings
from sharecards.errors import DeliveryError, ShareCancelled
from sharecards.models.delivery import DeliveryMethod, DeliveryPlan, DeliveryResult, DeviceProfile
from sharecards.models.share import ShareCardType

MOBILE_USER_AGENT = re.compile(r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE)


def build_filename(card_type: ShareCardType, now_ms: Optional[int] = None) -> str:
    """`myscrobble-<cardType>-<epoch-ms>.png`."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{settings.product_slug}-{card_type.value}-{now_ms}.png"


class DevicePolicy:
    """Decides whether a device gets the native share sheet."""

    def is_mobile_user_agent(self, user_agent: str) -> bool:
        return bool(MOBILE_USER_AGENT.search(user_agent or ""))

    def can_native_share(self, profile: DeviceProfile) -> bool:
        """Touch AND mobile UA AND share API AND file sharing.

        `can_share_files` is the result of the client's dummy-file probe.
        """
        return (
            profile.is_touch_device
            and self.is_mobile_user_agent(profile.user_agent)
            and profile.has_share_api
            and profile.can_share_files
        )

    def method_for(self, profile: DeviceProfile) -> DeliveryMethod:
        return DeliveryMethod.NATIVE_SHARE if self.can_native_share(profile) else DeliveryMethod.DOWNLOAD


def plan_delivery(
    profile: DeviceProfile,
    card_type: ShareCardType,
    policy: Optional[DevicePolicy] = None,
) -> DeliveryPlan:
    """Method, file name and caption for a client that will deliver itself."""
    method = (policy or DevicePolicy()).method_for(profile)
    return DeliveryPlan(
        method=method,
        filename=build_filename(card_type),
        caption=settings.share_caption if method == DeliveryMethod.NATIVE_SHARE else None,
    )


# ============ Delivery channels ============

class ShareSheet(Protocol):
    async def share(self, image: bytes, filename: str, caption: str) -> None:
        """Present the share sheet. Raises ShareCancelled if the user dismisses it."""
        ...


class Downloader(Protocol):
    async def download(self, image: bytes, filename: str) -> None:
        ...


class FileDownloader:
    """Downloader that writes the bitmap into a directory."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = directory or settings.downloads_dir

    async def download(self, image: bytes, filename: str) -> None:
        path = self.directory / filename
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(image)
        except OSError as e:
            raise DeliveryError(f"Could not save {filename}: {e}") from e
        logger.info(f"Saved share card to {path}")


class DeliverySelector:
    """Hands a finished bitmap to the user."""

    def __init__(
        self,
        profile: DeviceProfile,
        downloader: Downloader,
        share_sheet: Optional[ShareSheet] = None,
        policy: Optional[DevicePolicy] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.profile = profile
        self.downloader = downloader
        self.share_sheet = share_sheet
        self.policy = policy or DevicePolicy()
        self._clock = clock

    @property
    def method(self) -> DeliveryMethod:
        if self.share_sheet is None:
            return DeliveryMethod.DOWNLOAD
        return self.policy.method_for(self.profile)

    async def deliver(self, image: bytes, card_type: ShareCardType) -> DeliveryResult:
        """Share or download `image`.

        A native-share failure other than cancellation falls back to download.

        Raises:
            DeliveryError: The download itself failed
        """
        filename = build_filename(card_type, int(self._clock() * 1000))

        if self.method == DeliveryMethod.NATIVE_SHARE:
            try:
                await self.share_sheet.share(image, filename, settings.share_caption)
                logger.info(f"Shared {filename} via share sheet")
                return DeliveryResult(method=DeliveryMethod.NATIVE_SHARE, filename=filename)
            except ShareCancelled:
                logger.debug("Share sheet dismissed")
                return DeliveryResult(method=DeliveryMethod.NATIVE_SHARE, filename=filename, cancelled=True)
            except Exception as e:
                logger.warning(f"Native share failed, downloading instead: {e}")
                await self.downloader.download(image, filename)
                return DeliveryResult(method=DeliveryMethod.DOWNLOAD, filename=filename, fell_back=True)

        await self.downloader.download(image, filename)
        return DeliveryResult(method=DeliveryMethod.DOWNLOAD, filename=filename)
