"""FastAPI application setup for the Rally Notifier bridge."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rally_notifier.api.dependencies import get_app_settings, get_credential_store
from rally_notifier.api.routes_admin import router as admin_router
from rally_notifier.api.routes_credentials import router as credentials_router
from rally_notifier.api.routes_relay import router as relay_router
from rally_notifier.core.config import get_settings
from rally_notifier.core.errors import BridgeError
from rally_notifier.core.logging import configure_logging, get_logger
from rally_notifier.core.metrics import REQUEST_COUNT

configure_logging()
logger = get_logger(__name__)

ERROR_STATUS: dict[str, int] = {
    "InvalidMethod": 400,
    "TargetNotAllowed": 403,
    "StoreUnavailable": 503,
    "StoreReadFailed": 500,
    "StoreWriteFailed": 500,
    "TransportError": 502,
    "BodyReadError": 502,
}

app = FastAPI(
    title="Rally Notifier Bridge",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.include_router(credentials_router, prefix="/api-key", tags=["credentials"])
app.include_router(relay_router, prefix="", tags=["relay"])
app.include_router(admin_router, prefix="", tags=["admin"])


@app.exception_handler(BridgeError)
async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    status_code = ERROR_STATUS.get(exc.kind, 500)
    logger.warning("%s on %s: %s", exc.kind, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


@app.middleware("http")
async def count_requests(request: Request, call_next):
    response = await call_next(request)
    REQUEST_COUNT.labels(
        endpoint=request.url.path,
        method=request.method,
        status=str(response.status_code),
    ).inc()
    return response


@app.on_event("startup")
async def startup() -> None:
    """Apply configured logging and warm up singletons."""
    settings = get_app_settings()
    configure_logging(settings.log_level, use_json=settings.log_json)
    get_credential_store()
    logger.info("Rally Notifier bridge ready on %s:%s", settings.host, settings.port)
