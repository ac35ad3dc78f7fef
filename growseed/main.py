"""
FastAPI app for the growth tracker: runtime lifecycle, routers and
mapping of typed failures to inline status responses.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from growseed.config import settings
from growseed.infrastructure.observability.logging import get_logger, setup_logging
from growseed.routes import health, leaderboard, session, suggestions, sync, tracker
from growseed.runtime import TrackerRuntime
from growseed.services.errors import (
    AuthFailure,
    FormatFailure,
    GrowseedError,
    TransportFailure,
    ValidationFailure,
)

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)

ERROR_STATUS_CODES = {
    ValidationFailure: 400,
    AuthFailure: 401,
    TransportFailure: 502,
    FormatFailure: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the tracker runtime and stop it on shutdown."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    runtime = getattr(app.state, "runtime", None) or TrackerRuntime.build()
    app.state.runtime = runtime

    try:
        await runtime.start()
    except Exception as e:
        logger.error("Failed to start tracker runtime", error=str(e))
        await runtime.stop()
        raise

    yield

    logger.info("Application shutting down")
    await runtime.stop()


app = FastAPI(
    title="Growseed",
    description="Productivity growth tracker with backend sync and leaderboard",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(tracker.router)
app.include_router(session.router)
app.include_router(sync.router)
app.include_router(leaderboard.router)
app.include_router(suggestions.router)


@app.exception_handler(GrowseedError)
async def growseed_error_handler(request: Request, exc: GrowseedError):
    """Render failures as inline status text."""
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "status": exc.message, "error_type": type(exc).__name__},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    logger.info(
        "HTTP request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
