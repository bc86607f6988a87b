"""MoodShift server entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from moodshift.config import settings
from moodshift.routers.audio import router as audio_router
from moodshift.routers.conversations import router as conversations_router
from moodshift.routers.process import router as process_router
from moodshift.runtime import Runtime, build_runtime

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the runtime unless one was injected, and close it on shutdown."""
    runtime: Runtime | None = getattr(app.state, "runtime", None)
    owned = runtime is None
    if runtime is None:
        runtime = build_runtime(settings.data_dir)
        app.state.runtime = runtime
    await runtime.start()
    if not settings.groq_api_key:
        log.warning("GROQ_API_KEY not set; every reply will use a fallback phrase")
    if not (settings.aws_access_key and settings.aws_secret_key):
        log.warning("AWS credentials not set; audio synthesis will fail")

    yield

    await runtime.close()
    if owned:
        app.state.runtime = None


app = FastAPI(
    title="MoodShift Server",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(process_router)
app.include_router(audio_router)
app.include_router(conversations_router)


@app.get("/health")
async def health():
    """Liveness / readiness check."""
    runtime: Runtime | None = getattr(app.state, "runtime", None)
    if runtime is None:
        return JSONResponse({"status": "starting"}, status_code=503)
    store_ok = await runtime.documents.ping()
    return JSONResponse(
        {
            "status": "ok" if store_ok else "degraded",
            "document_store": store_ok,
            "cache_hits": await runtime.cache.hit_count(),
            **runtime.debug_snapshot(),
        },
        status_code=200 if store_ok else 503,
    )


def main() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    )
    uvicorn.run(
        "moodshift.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
