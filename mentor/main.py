import logging
import os
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from mentor.core.config import get_settings
from mentor.db.supabase import get_supabase
from mentor.features.challenges.endpoints import router as challenges_router
from mentor.features.challenges.service import challenge_service
from mentor.features.progress.endpoints import router as progress_router
from mentor.features.reviews.endpoints import router as reviews_router
from mentor.features.reviews.service import review_service
from mentor.features.reviews.worker import review_queue
from mentor.features.submissions.endpoints import router as submissions_router

logging.basicConfig(
    level=logging.DEBUG if get_settings().debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

_settings = get_settings()
app = FastAPI(title=_settings.app_name)
_START_TIME = datetime.now(timezone.utc)


# ------------------------
# CORS Setup
# ------------------------
def _split_csv(raw: str):
    return [o.strip().rstrip("/") for o in raw.split(",") if o.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_split_csv(_settings.allow_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    incoming = request.headers.get("X-Request-Id") or request.headers.get("X-Request-ID")
    req_id = incoming or str(uuid.uuid4())
    request.state.request_id = req_id
    logger = logging.getLogger("request")
    logger.info("request.start request_id=%s method=%s path=%s", req_id, request.method, request.url.path)
    t0 = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Request-Id"] = req_id
    logger.info(
        "request.end request_id=%s path=%s status_code=%s duration_ms=%s",
        req_id,
        request.url.path,
        response.status_code,
        int((time.perf_counter() - t0) * 1000),
    )
    return response


# ------------------------
# Routers
# ------------------------
app.include_router(challenges_router)
app.include_router(submissions_router)
app.include_router(reviews_router)
app.include_router(progress_router)


# ------------------------
# Meta endpoints
# ------------------------
@app.get("/", tags=["meta"], summary="API Root")
async def root():
    return {
        "name": _settings.app_name,
        "status": "ok",
        "docs": "/docs",
        "health": "/healthz",
    }


@app.get("/healthz", tags=["meta"], summary="Liveness / readiness probe")
async def healthz() -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    store_status = "unknown"
    store_latency_ms = None
    try:
        start = time.perf_counter()
        client = await get_supabase()
        await client.table("challenges").select("id").limit(1).execute()
        store_latency_ms = round((time.perf_counter() - start) * 1000, 2)
        store_status = "ok"
    except Exception as exc:
        store_status = f"error:{type(exc).__name__}"

    return {
        "status": "ok" if store_status == "ok" else "degraded",
        "time_utc": now.isoformat(),
        "uptime_seconds": round((now - _START_TIME).total_seconds(), 2),
        "version": os.getenv("APP_VERSION", "dev"),
        "environment": "debug" if _settings.debug else "prod",
        "components": {
            "store": (
                {"status": store_status, "latency_ms": store_latency_ms}
                if store_status == "ok"
                else {"status": store_status}
            ),
            "challenge_provider": challenge_service.generator.name,
            "review_provider": review_service.generator.name,
            "review_queue": {
                "running": review_queue.running,
                "depth": review_queue.depth(),
                "dead_letters": len(review_queue.dead_letters),
            },
        },
    }


@app.on_event("startup")
async def _start_background_tasks():
    review_queue.start()


@app.on_event("shutdown")
async def _stop_background_tasks():
    await review_queue.stop()


__all__ = ["app"]
