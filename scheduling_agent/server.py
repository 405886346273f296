"""FastAPI server hosting the mock scheduling backend.

Run with:
    uvicorn scheduling_agent.server:app --reload --host 0.0.0.0 --port 8000

Point the CLI at it with ``SCHEDULING_BACKEND=http``.
"""

from __future__ import annotations

import logging
import uuid

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scheduling_agent.api.routes import router
from scheduling_agent.config import CORS_ORIGINS, SERVER_HOST, SERVER_PORT
from scheduling_agent.errors import BackendValidationError

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


# ── FastAPI application ──────────────────────────────────────────────
app = FastAPI(
    title="Scheduling Backend (mock)",
    description=(
        "Mock appointment backend for the scheduling assistant: availability, "
        "booking, rescheduling and cancellation."
    ),
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request-ID middleware ────────────────────────────────────────────
@app.middleware("http")
async def add_request_id(request: Request, call_next) -> Response:
    """Attach a unique request ID to every request for log correlation.

    The ID is echoed in the ``X-Request-ID`` response header.
    """
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    logger.info(
        "[%s] %s %s", request_id, request.method, request.url.path,
    )
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ── Error mapping: every backend failure is 400 {"error": ...} ───────
@app.exception_handler(BackendValidationError)
async def backend_validation_error(request: Request, exc: BackendValidationError):
    logger.info("[%s] Rejected: %s", getattr(request.state, "request_id", "?"), exc)
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        return JSONResponse(status_code=400, content={"error": "Invalid JSON in request body."})

    fields = sorted(
        {".".join(str(p) for p in err["loc"][1:]) or err["loc"][0] for err in errors}
    )
    return JSONResponse(
        status_code=400,
        content={"error": f"Missing or invalid fields: {', '.join(fields)}."},
    )


# ── Register routes ──────────────────────────────────────────────────
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "Scheduling Backend (mock)",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }


# ── CLI entry point ──────────────────────────────────────────────────

if __name__ == "__main__":
    logger.info("Starting scheduling backend on %s:%d", SERVER_HOST, SERVER_PORT)
    uvicorn.run(
        "scheduling_agent.server:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True,
    )
