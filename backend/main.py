"""
Elmadrasa exam API entry point.

    uvicorn main:app --reload

The app starts the in-process task worker on startup and stops it (and the
Mongo client) on shutdown.
"""

import time
import asyncio

from fastapi import FastAPI, APIRouter, Request
from fastapi.middleware.cors import CORSMiddleware

from elmadrasa.config import logger, get_version_info, get_cors_origins
from elmadrasa.database import client
from elmadrasa.services.background import run_background_worker
from elmadrasa.services.metrics import log_api_metric
from elmadrasa.routes import register_all_routes

SERVICE_NAME = "Elmadrasa API"


async def lifespan(app: FastAPI):
    worker = asyncio.create_task(run_background_worker())
    logger.info(f"{SERVICE_NAME} started with {len(app.routes)} routes")

    yield

    worker.cancel()
    try:
        await worker
    except asyncio.CancelledError:
        pass
    client.close()
    logger.info(f"{SERVICE_NAME} stopped")


async def track_request(request: Request, call_next):
    """Record path, status and latency of every request in api_metrics"""
    started = time.perf_counter()
    status_code, error_type = 500, None
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    except Exception as e:
        error_type = type(e).__name__
        logger.error(f"{request.method} {request.url.path} failed: {e}")
        raise
    finally:
        asyncio.create_task(log_api_metric(
            endpoint=request.url.path,
            method=request.method,
            response_time_ms=int((time.perf_counter() - started) * 1000),
            status_code=status_code,
            error_type=error_type,
            user_id=request.headers.get("x-user-id"),
        ))


def create_app() -> FastAPI:
    app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)

    api_router = APIRouter(prefix="/api")
    api_router.add_api_route("/version", get_version_info, methods=["GET"])
    register_all_routes(api_router)
    app.include_router(api_router)

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": SERVICE_NAME}

    app.middleware("http")(track_request)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
