"""
Ward Watch - FastAPI Application Entry Point

Residents report civic problems in their ward; administrators triage,
assign and resolve them; everyone following a ward sees changes live.

DESIGN PRINCIPLES:
- Ward number partitions both data visibility and live notification topics
- Store writes commit before the matching live event is published
- Live events are best-effort: a failed publish never fails a request
- Services raise domain errors; this module turns them into HTTP responses
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wardwatch.config.firebase import initialize_firestore
from wardwatch.core.errors import WardWatchError
from wardwatch.core.settings import settings
from wardwatch.routes import auth, health, problems, realtime, wards
from wardwatch.services.bootstrap import initialize_default_data

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Ward-scoped civic problem tracking with live updates",
    debug=settings.DEBUG,
)


@app.exception_handler(WardWatchError)
async def domain_exception_handler(request: Request, exc: WardWatchError):
    """ValidationFailed / AccessDenied / NotFound / Conflict / AuthenticationFailed."""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request bodies and query parameters that fail their schema: 400 with every bad field."""
    errors = []
    for error in exc.errors():
        # loc is ("body", "title") / ("query", "page") / ("body",) for a missing body
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(location) or "body", "message": error.get("msg", "Invalid value")})

    logger.info(f"{request.method} {request.url.path} -> 400: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation failed", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = "Route not found"
    return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything unexpected: full traceback in the log, generic message to the client."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "message": "Internal server error",
            "error": "Something went wrong" if settings.is_production else str(exc),
        },
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Connect to the store, then seed default wards and the admin account if
    they are missing. Seeding is idempotent and runs once per process start.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")

    try:
        db = initialize_firestore()
    except Exception as e:
        logger.warning(f"Firestore initialization failed: {e}")
        logger.warning("The app will start but database operations may fail.")
        return

    if not settings.SEED_ON_STARTUP:
        return

    try:
        created = await initialize_default_data(db)
        logger.info(f"[STARTUP] Default data check done: {created}")
    except Exception as e:
        logger.error(f"Error initializing default data: {e}", exc_info=True)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(problems.router, prefix=settings.API_PREFIX)
app.include_router(wards.router, prefix=settings.API_PREFIX)
app.include_router(realtime.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": f"{settings.API_PREFIX}/health",
        "live_updates": "/ws",
    }
