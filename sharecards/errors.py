"""Exception types raised across the share-card pipeline."""


class ShareCardError(Exception):
    """Base class for share-card failures."""


class GenerationError(ShareCardError):
    """Headless generation or the generation endpoint failed."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class CaptureError(ShareCardError):
    """DOM capture could not produce a bitmap."""


class CrossOriginImageError(CaptureError):
    """An embedded image is served from an origin capture may not read."""

    def __init__(self, urls: list[str]):
        super().__init__(f"Cross-origin images block capture: {', '.join(urls)}")
        self.urls = urls


class DeliveryError(ShareCardError):
    """Neither the share sheet nor the download path could deliver the image."""


class ShareCancelled(ShareCardError):
    """The user dismissed the native share sheet."""
