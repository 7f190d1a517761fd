"""
Stand-in for the packaged backend during launcher development.

Serves the same health contract as the real sidecar: `/api/health` answers
503 while the (simulated) migrations run and 200 afterwards. It reads PORT
from the environment like the real binary, so `tswio-desktop dev-backend`
can be started by hand or through TSWIO_SIDECAR_PATH.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse

logger = logging.getLogger(__name__)

DEFAULT_WARMUP_SECONDS = 3.0


def create_app(warmup_seconds: float = DEFAULT_WARMUP_SECONDS, clock: Callable[[], float] = time.monotonic) -> FastAPI:
    app = FastAPI(title="TSW IO development backend", version="0.1.0")
    started_at = clock()

    def migrations_pending() -> bool:
        return clock() - started_at < warmup_seconds

    @app.get("/api/health")
    def health():
        if migrations_pending():
            return JSONResponse(
                status_code=503,
                content={"status": "unavailable", "reason": "migrations_pending"},
            )
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def read_root():
        return "<html><body><h1>TSW IO</h1><p>Development backend is running.</p></body></html>"

    return app


def run_dev_backend(port: Optional[int] = None, warmup_seconds: float = DEFAULT_WARMUP_SECONDS) -> int:
    """Run the development backend in the foreground until interrupted."""
    import uvicorn

    if port is None:
        port = int(os.environ.get("PORT", "4000"))
    logger.info("Development backend on port %d (warm-up %.1fs)", port, warmup_seconds)
    uvicorn.run(create_app(warmup_seconds), host="127.0.0.1", port=port, log_level="warning")
    return 0
