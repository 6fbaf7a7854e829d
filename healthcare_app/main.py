import time

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from fastapi.exceptions import RequestValidationError
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from healthcare_app.config import get_settings
from healthcare_app.database import close_db, init_db, ping_db
from healthcare_app.metrics import observe_request, render_metrics
from healthcare_app.utils.logger import get_logger

logger = get_logger("main")
settings = get_settings()

# Routers
from healthcare_app.routers import appointments as appointments_router
from healthcare_app.routers import gdpr as gdpr_router

app = FastAPI(
    title="Healthcare Appointment API",
    debug=settings.APP_DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(appointments_router.router)
app.include_router(gdpr_router.router)


def validation_message(request: Request, errors: list) -> str:
    """Flatten pydantic errors into one line, e.g.
    ``Appointment validation failed: title: Path `title` is required.``
    """
    prefix = "Appointment validation failed" if request.url.path.startswith("/api/appointments") else "Validation failed"
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(loc) or "body"
        if err.get("type") == "missing":
            msg = f"Path `{field}` is required."
        else:
            msg = str(err.get("msg", "")).removeprefix("Value error, ")
        parts.append(f"{field}: {msg}")
    return f"{prefix}: {', '.join(parts)}"


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP {exc.status_code}: {exc.detail} - Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = validation_message(request, exc.errors())
    logger.warning(f"{message} - Path: {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": message},
    )


@app.exception_handler(PyMongoError)
async def storage_exception_handler(request: Request, exc: PyMongoError):
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        # The outer error middleware turns this into the 500 response
        process_time = time.perf_counter() - start_time
        observe_request(request.method, request.url.path, 500, process_time)
        logger.info(f"{request.method} {request.url.path} - Status: 500 - Time: {process_time:.3f}s")
        raise
    process_time = time.perf_counter() - start_time

    observe_request(request.method, request.url.path, response.status_code, process_time)
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.3f}s"
    )
    return response


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Healthcare Appointment API is running"


@app.get("/health")
async def health():
    """Store connectivity probe."""
    if await ping_db():
        return {"status": "ok", "mongodb": "connected"}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "error", "mongodb": "disconnected"},
    )


@app.get("/metrics")
async def metrics():
    body, content_type = render_metrics()
    return Response(content=body, media_type=content_type)


@app.on_event("startup")
async def on_startup():
    logger.info(f"Starting application (env={settings.NODE_ENV})...")
    if settings.DD_TRACE_ENABLED:
        logger.info("DD_TRACE_ENABLED is set; tracing is left to the ddtrace-run launcher")
    # The API keeps serving even when Mongo is down; /health reports it
    try:
        await init_db()
        logger.info("Database initialized")
    except PyMongoError as e:
        logger.error(f"Failed to connect to MongoDB: {e}")


@app.on_event("shutdown")
async def on_shutdown():
    close_db()
    logger.info("Shutting down application...")
