"""FastAPI application for the DEX aggregator.

Note: Rate limiting is intentionally not implemented at the application level.
It should be handled at the infrastructure layer (reverse proxy / load balancer).
"""

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from aggregator.api.endpoints import router
from aggregator.config import Settings
from aggregator.errors import (
    AggregatorError,
    SlippageExceeded,
    TransferFailed,
    Unauthenticated,
    Unauthorized,
    UnsupportedPool,
    VenueCallFailed,
)
from aggregator.log import configure_logging

logger = structlog.get_logger()

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

# Check web3 availability at startup (RPC venues are an optional extra)
try:
    import web3  # noqa: F401

    RPC_AVAILABLE = True
except ImportError:
    RPC_AVAILABLE = False

# HTTP status per domain error; anything unlisted is a 400
ERROR_STATUS: dict[type[AggregatorError], int] = {
    Unauthenticated: 401,
    Unauthorized: 403,
    UnsupportedPool: 404,
    SlippageExceeded: 409,
    TransferFailed: 402,
    VenueCallFailed: 502,
}

app = FastAPI(
    title="DEX Aggregator",
    description="Best-rate quoting and native-to-token swaps across V2 and V3 venues",
    version="0.1.0",
)


def status_for(error: AggregatorError) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 400


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(AggregatorError)
async def aggregator_error_handler(request: Request, exc: AggregatorError) -> JSONResponse:
    """Map domain errors to 4xx/5xx with a stable error code."""
    status = status_for(exc)
    logger.warning(
        "request_failed",
        path=request.url.path,
        error=exc.code,
        status=status,
        detail=str(exc),
    )
    return JSONResponse(status_code=status, content={"error": exc.code, "detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "rpc_available": RPC_AVAILABLE}


def run() -> None:
    """Run the aggregator API server.

    Configuration via environment variables, see aggregator.config.Settings.
    """
    settings = Settings.from_env()
    configure_logging(verbose=settings.debug, json=settings.log_json)
    uvicorn.run(
        "aggregator.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
