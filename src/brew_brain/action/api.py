"""FastAPI application exposing brew analysis endpoints."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from brew_brain.action.routers.analysis import router as analysis_router
from config.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(title="Brew Brain API", version=API_VERSION)

app.include_router(analysis_router)


@app.exception_handler(Exception)
async def _global_error_handler(request: Request, exc: Exception):
    """Catch-all: ensure every unhandled error returns JSON, not raw HTML."""
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={
            "detail": f"Server error: {exc}",
            "error": str(exc),
            "status": "failed",
        },
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "version": API_VERSION}
