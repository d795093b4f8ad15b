"""Device capability and delivery models."""

from enum import Enum
from typing import Optional
from pydantic import Field

from sharecards.models.share import ShareCardType, ShareModel


class DeliveryMethod(str, Enum):
    """How a generated card reaches the user."""
    NATIVE_SHARE = "native-share"
    DOWNLOAD = "download"


class DeviceProfile(ShareModel):
    """What the browser reported about itself when the share panel opened."""
    user_agent: str = ""
    max_touch_points: int = Field(default=0, ge=0)
    has_touch_events: bool = False  # 'ontouchstart' in window
    has_share_api: bool = False  # navigator.share
    can_share_files: bool = False  # navigator.canShare({files: [dummy]})

    @property
    def is_touch_device(self) -> bool:
        return self.has_touch_events or self.max_touch_points > 0


class DeliveryRequest(DeviceProfile):
    """Body of POST /share/delivery."""
    card_type: ShareCardType


class DeliveryPlan(ShareModel):
    """Delivery decision returned to the client."""
    method: DeliveryMethod
    filename: str
    caption: Optional[str] = None


class DeliveryResult(ShareModel):
    """Outcome of handing a bitmap to the user."""
    method: DeliveryMethod
    filename: str
    cancelled: bool = False
    fell_back: bool = False  # Native share failed, downloaded instead
