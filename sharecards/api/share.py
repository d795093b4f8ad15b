"""Share card API routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import HTMLResponse, Response
from loguru import logger

from sharecards.errors import CaptureError, CrossOriginImageError, GenerationError
from sharecards.models.delivery import DeliveryPlan, DeliveryRequest
from sharecards.models.share import GenerationRequest
from sharecards.services.delivery import DevicePolicy, plan_delivery
from sharecards.services.generation import GenerationService
from sharecards.workers.capture import CaptureEngine
from sharecards.workers.dom import capture_document, render_markup

router = APIRouter(prefix="/share", tags=["share"])

# Module-level instances (set at startup)
_generation_service: Optional[GenerationService] = None
_capture_engine: Optional[CaptureEngine] = None
_device_policy: Optional[DevicePolicy] = None


def set_generation_service(service: GenerationService) -> None:
    """Set the generation service instance."""
    global _generation_service
    _generation_service = service


def set_capture_engine(engine: CaptureEngine) -> None:
    """Set the capture engine instance."""
    global _capture_engine
    _capture_engine = engine


def set_device_policy(policy: DevicePolicy) -> None:
    """Set the device policy used for delivery plans."""
    global _device_policy
    _device_policy = policy


def _get_generation_service() -> GenerationService:
    """Get the generation service instance."""
    if _generation_service is None:
        raise RuntimeError("GenerationService not initialized")
    return _generation_service


def _get_capture_engine() -> CaptureEngine:
    """Get the capture engine instance."""
    if _capture_engine is None:
        raise RuntimeError("CaptureEngine not initialized")
    return _capture_engine


def _get_device_policy() -> DevicePolicy:
    return _device_policy or DevicePolicy()


# ============ Generation Endpoints ============

@router.post(
    "/generate",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def generate_card(request: GenerationRequest):
    """Render a card server-side to a 1080x1920 PNG.

    Theme and labels are resolved here, so the client only sends the
    card type, its payload and optionally a theme and locale.
    """
    service = _get_generation_service()

    try:
        png = await service.generate(request)
    except GenerationError as e:
        logger.error(f"Error generating {request.type.value} card: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return Response(content=png, media_type="image/png", headers={"Cache-Control": "no-store"})


@router.post("/layout")
async def describe_layout(request: GenerationRequest):
    """Headless element tree and its constraint violations (debug aid)."""
    service = _get_generation_service()
    return service.describe(request)


# ============ DOM Endpoints ============

@router.post("/preview", response_class=HTMLResponse)
async def preview_card(request: GenerationRequest, animated: bool = Query(default=True)):
    """The DOM variant of a card at 360x640, animated for the live preview."""
    service = _get_generation_service()
    root, _, _ = service.build_tree(request)
    return HTMLResponse(render_markup(root, animated=animated, lang=request.locale))


@router.post(
    "/capture",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def capture_card(request: GenerationRequest):
    """Capture the static DOM variant through the browser (desktop fallback)."""
    service = _get_generation_service()
    engine = _get_capture_engine()

    # Drawn backdrop: a detached page cannot resolve relative image paths
    root, _, _ = service.build_tree(request, use_background_image=False)
    document = capture_document(root, lang=request.locale)

    try:
        png = await engine.capture(document)
    except CrossOriginImageError as e:
        logger.warning(f"Capture refused: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except CaptureError as e:
        logger.error(f"Error capturing {request.type.value} card: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return Response(content=png, media_type="image/png", headers={"Cache-Control": "no-store"})


# ============ Delivery Endpoints ============

@router.post("/delivery", response_model=DeliveryPlan)
async def delivery_plan(request: DeliveryRequest):
    """Native share sheet or download for the reporting device."""
    return plan_delivery(request, request.card_type, _get_device_policy())
