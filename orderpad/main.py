"""
FastAPI Application Entry Point

OrderPad Voice Orders - Hybrid Architecture
Supports both Mock services (development) and Real services (production).

Endpoints:
    - GET  /api/orders: List or search orders
    - POST /api/orders: Confirm a new order
    - GET/PATCH/DELETE /api/orders/{id}: Read, edit, delete one order
    - GET  /api/orders/{id}/share: Plain-text summary for sharing
    - POST /api/orders/{id}/close | /reopen | /items: Status changes, add items
    - POST /api/recording/start | /stop: Shared recording session
    - POST /api/transcriptions: Recording -> cleaned order text
    - GET/PUT/DELETE /api/credentials: API key management
    - GET /health: System health check

Run with:
    uvicorn orderpad.main:app --port 8081

Author: OrderPad Team
Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from orderpad.core.config import get_settings, setup_logging
from orderpad.core.exceptions import (
    AlreadyRecording,
    ConstraintViolation,
    ExtractionFailed,
    InvalidCredential,
    MissingCredential,
    NoActiveSession,
    NotFound,
    OrderPadError,
    PermissionDenied,
    RemoteServiceError,
    StorageError,
    TranscriptionFailed,
)
from orderpad.database import engine
from orderpad.models import OrderStatus
from orderpad.schemas import (
    AppendItemsRequest,
    AudioHandleResponse,
    CredentialStatusResponse,
    CredentialUpdate,
    ErrorResponse,
    HealthResponse,
    OrderCreate,
    OrderListResponse,
    OrderPatch,
    OrderRecord,
    RecordingStatusResponse,
    ShareMessageResponse,
    TranscriptionRequest,
    TranscriptionResponse,
    new_order_id,
    now_iso,
)
from orderpad.services.credentials import (
    BaseCredentialStore,
    get_credential_store,
    resolve_credential,
)
from orderpad.services.recording import RecordingSession, get_recording_session
from orderpad.services.transcription import (
    BaseTranscriptionPipeline,
    deduplicate_lines,
    get_transcription_pipeline,
    mask_credential,
    validate_credential,
)
from orderpad.storage import OrderStore, get_order_store

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    store = get_order_store()
    await store.init()
    logger.info("✅ Order store initialized")

    logger.info(f"✅ Transcription: {get_transcription_pipeline().provider_name}")
    logger.info(f"✅ Recording: {get_recording_session().recorder.provider_name}")
    logger.info(f"✅ Credentials: {get_credential_store().provider_name}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    session = get_recording_session()
    if session.is_recording:
        try:
            handle = await session.stop()
            logger.info(f"Stopped dangling recording: {handle.uri}")
        except OrderPadError as e:
            logger.warning(f"Could not stop dangling recording: {e}")
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Voice order taking for restaurant staff: record, transcribe, "
        "extract meal and drink items, and track orders per table."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Pre-built web client, when one has been deployed next to the API
static_dir = Path(settings.static_directory)
if static_dir.is_dir():
    app.mount("/app", StaticFiles(directory=static_dir, html=True), name="static")


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

async def credential_status(store: BaseCredentialStore) -> CredentialStatusResponse:
    value = await store.get_credential()
    return CredentialStatusResponse(
        configured=value is not None,
        masked_key=mask_credential(value) if value else None,
        provider=store.provider_name,
    )


def recording_status(session: RecordingSession) -> RecordingStatusResponse:
    return RecordingStatusResponse(
        state=session.state.value,
        elapsed_seconds=session.elapsed_seconds,
        provider=session.recorder.provider_name,
    )


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🍽️ Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    store: OrderStore = Depends(get_order_store),
    pipeline: BaseTranscriptionPipeline = Depends(get_transcription_pipeline),
    session: RecordingSession = Depends(get_recording_session),
    credentials: BaseCredentialStore = Depends(get_credential_store),
) -> HealthResponse:
    """Verify all system components are operational."""
    db_status = "healthy" if await store.table.ping() else "unhealthy"
    pipeline_status = "healthy" if await pipeline.health_check() else "unhealthy"

    overall = "operational" if db_status == pipeline_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        transcription_service=f"{pipeline.provider_name}: {pipeline_status}",
        recording_service=f"{session.recorder.provider_name}: {session.state.value}",
        credential_service=credentials.provider_name,
        timestamp=datetime.now(),
    )


# =============================================================================
# ORDER API ENDPOINTS
# =============================================================================

@app.get(
    "/api/orders",
    response_model=OrderListResponse,
    tags=["Orders"],
    summary="List or Search Orders",
)
async def list_orders(
    q: str = Query("", description="Case-insensitive text or staff name filter"),
    status: Optional[OrderStatus] = Query(None),
    store: OrderStore = Depends(get_order_store),
) -> OrderListResponse:
    """Orders newest first, optionally filtered."""
    orders = await store.search(q) if q else await store.get_all()
    if status is not None:
        orders = [order for order in orders if order.status == status]

    return OrderListResponse(total=len(orders), orders=orders)


@app.post(
    "/api/orders",
    response_model=OrderRecord,
    status_code=201,
    responses={409: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Confirm Order",
)
async def create_order(
    order_data: OrderCreate,
    store: OrderStore = Depends(get_order_store),
) -> OrderRecord:
    """Persist a confirmed order. Duplicate lines in the text are dropped."""
    record = OrderRecord(
        id=new_order_id(),
        audio_uri=order_data.audio_uri,
        transcribed_text=deduplicate_lines(order_data.transcribed_text),
        timestamp=now_iso(),
        staff_name=order_data.staff_name or settings.default_staff_name,
        duration=order_data.duration,
        table_number=order_data.table_number,
        guest_count=order_data.guest_count,
    )
    return await store.add(record)


@app.get(
    "/api/orders/{order_id}",
    response_model=OrderRecord,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def get_order(
    order_id: str,
    store: OrderStore = Depends(get_order_store),
) -> OrderRecord:
    """Get a specific order by ID."""
    order = await store.get_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return order


@app.get(
    "/api/orders/{order_id}/share",
    response_model=ShareMessageResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Share Order",
)
async def share_order(
    order_id: str,
    store: OrderStore = Depends(get_order_store),
) -> ShareMessageResponse:
    """Plain-text summary to hand to the kitchen or a messaging app."""
    order = await store.get_by_id(order_id)
    if order is None:
        raise NotFound(order_id)
    return ShareMessageResponse(order_id=order.id, message=order.share_message())


@app.patch(
    "/api/orders/{order_id}",
    response_model=OrderRecord,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Edit Order",
)
async def edit_order(
    order_id: str,
    patch: OrderPatch,
    store: OrderStore = Depends(get_order_store),
) -> OrderRecord:
    """Explicit edit of text, table number, guest count or status."""
    return await store.edit(order_id, patch)


@app.delete(
    "/api/orders/{order_id}",
    status_code=204,
    tags=["Orders"],
)
async def delete_order(
    order_id: str,
    store: OrderStore = Depends(get_order_store),
) -> Response:
    """Delete an order. Deleting a missing order succeeds."""
    await store.delete(order_id)
    return Response(status_code=204)


@app.post(
    "/api/orders/{order_id}/close",
    response_model=OrderRecord,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def close_order(
    order_id: str,
    store: OrderStore = Depends(get_order_store),
) -> OrderRecord:
    return await store.close_order(order_id)


@app.post(
    "/api/orders/{order_id}/reopen",
    response_model=OrderRecord,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def reopen_order(
    order_id: str,
    store: OrderStore = Depends(get_order_store),
) -> OrderRecord:
    return await store.reopen_order(order_id)


@app.post(
    "/api/orders/{order_id}/items",
    response_model=OrderRecord,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Add Items",
)
async def append_items(
    order_id: str,
    request: AppendItemsRequest,
    store: OrderStore = Depends(get_order_store),
) -> OrderRecord:
    """Append items recorded later to an existing order."""
    return await store.append_items(order_id, deduplicate_lines(request.text))


# =============================================================================
# RECORDING ENDPOINTS
# =============================================================================

@app.get(
    "/api/recording",
    response_model=RecordingStatusResponse,
    tags=["Recording"],
)
async def get_recording(
    session: RecordingSession = Depends(get_recording_session),
) -> RecordingStatusResponse:
    return recording_status(session)


@app.post(
    "/api/recording/start",
    response_model=RecordingStatusResponse,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["Recording"],
)
async def start_recording(
    session: RecordingSession = Depends(get_recording_session),
) -> RecordingStatusResponse:
    await session.start()
    return recording_status(session)


@app.post(
    "/api/recording/stop",
    response_model=AudioHandleResponse,
    responses={409: {"model": ErrorResponse}},
    tags=["Recording"],
)
async def stop_recording(
    session: RecordingSession = Depends(get_recording_session),
) -> AudioHandleResponse:
    handle = await session.stop()
    return AudioHandleResponse(
        uri=handle.uri,
        duration_seconds=handle.duration_seconds,
        duration=handle.duration,
    )


# =============================================================================
# TRANSCRIPTION ENDPOINTS
# =============================================================================

@app.post(
    "/api/transcriptions",
    response_model=TranscriptionResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    tags=["Transcription"],
    summary="Transcribe Recording",
)
async def transcribe_recording(
    request: TranscriptionRequest,
    pipeline: BaseTranscriptionPipeline = Depends(get_transcription_pipeline),
    credentials: BaseCredentialStore = Depends(get_credential_store),
) -> TranscriptionResponse:
    """
    Run speech-to-text and order extraction on a finished recording.

    Single attempt: on failure the staff member records again or retries.
    """
    credential = await resolve_credential(credentials)
    order_text = await pipeline.process(request.audio_uri, credential)
    return TranscriptionResponse(
        audio_uri=request.audio_uri,
        order_text=order_text,
        provider=pipeline.provider_name,
    )


# =============================================================================
# CREDENTIAL ENDPOINTS
# =============================================================================

@app.get(
    "/api/credentials",
    response_model=CredentialStatusResponse,
    tags=["Credentials"],
)
async def get_credentials(
    credentials: BaseCredentialStore = Depends(get_credential_store),
) -> CredentialStatusResponse:
    return await credential_status(credentials)


@app.put(
    "/api/credentials",
    response_model=CredentialStatusResponse,
    responses={422: {"model": ErrorResponse}},
    tags=["Credentials"],
)
async def save_credentials(
    update: CredentialUpdate,
    credentials: BaseCredentialStore = Depends(get_credential_store),
) -> CredentialStatusResponse:
    api_key = update.api_key.strip()
    if not validate_credential(api_key):
        raise InvalidCredential()
    await credentials.save_credential(api_key)
    logger.info(f"API key saved ({mask_credential(api_key)})")
    return await credential_status(credentials)


@app.delete(
    "/api/credentials",
    status_code=204,
    tags=["Credentials"],
)
async def delete_credentials(
    credentials: BaseCredentialStore = Depends(get_credential_store),
) -> Response:
    await credentials.delete_credential()
    logger.info("API key deleted")
    return Response(status_code=204)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

ERROR_STATUS_CODES: dict[type[OrderPadError], int] = {
    NotFound: 404,
    ConstraintViolation: 409,
    AlreadyRecording: 409,
    NoActiveSession: 409,
    PermissionDenied: 403,
    MissingCredential: 400,
    InvalidCredential: 422,
    TranscriptionFailed: 502,
    ExtractionFailed: 502,
    StorageError: 503,
}


@app.exception_handler(OrderPadError)
async def order_pad_exception_handler(request: Request, exc: OrderPadError) -> JSONResponse:
    """Typed application errors become a readable JSON body."""
    status_code = next(
        (code for cls, code in ERROR_STATUS_CODES.items() if isinstance(exc, cls)),
        500,
    )
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}")
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc}")

    body = ErrorResponse(
        error=type(exc).__name__,
        detail=exc.message,
        upstream_status=exc.status_code if isinstance(exc, RemoteServiceError) else None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("orderpad.main:app", host=settings.api_host, port=settings.api_port)
