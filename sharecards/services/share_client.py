"""HTTP client for the generation endpoint."""

from typing import Optional

import httpx
from loguru import logger

from sharecards.config import settings
from sharecards.errors import GenerationError
from sharecards.models.share import GenerationRequest

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class GenerationClient:
    """POSTs generation requests and returns the PNG body."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint or settings.generation_endpoint
        self.timeout = timeout if timeout is not None else settings.generation_timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None and self._client.is_closed:
            self._client = None
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def generate(self, request: GenerationRequest) -> bytes:
        """Request a card bitmap.

        Args:
            request: Card type, payload, theme and locale

        Returns:
            PNG bytes

        Raises:
            GenerationError: Transport failure, non-2xx status or a body that is not a PNG
        """
        payload = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        client = await self._get_client()

        try:
            response = await client.post(self.endpoint, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"Generation endpoint unreachable: {e}")
            raise GenerationError(f"Generation request failed: {e}", status_code=502) from e

        if not response.is_success:
            detail = _error_detail(response)
            logger.warning(f"Generation endpoint returned {response.status_code}: {detail}")
            raise GenerationError(f"Generation failed ({response.status_code}): {detail}", status_code=response.status_code)

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if content_type != "image/png" or not response.content.startswith(PNG_SIGNATURE):
            raise GenerationError(f"Expected image/png from generation endpoint, got {content_type or 'no content type'}")

        logger.debug(f"Received {request.type.value} card ({len(response.content)} bytes)")
        return response.content

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)[:200]
