import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pathlib import Path

from envpinn.config import settings
from envpinn.routers import algorithms, demo, predictions, videos
from envpinn.services.pipeline import VideoPipeline
from envpinn.storage import Storage

logger = logging.getLogger(__name__)


# ── Security headers middleware (pure ASGI, does not buffer bodies) ──
class SecurityHeadersMiddleware:
    """Pure ASGI middleware that adds security headers to every HTTP response."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.extend([
                    (b"x-content-type-options", b"nosniff"),
                    (b"x-frame-options", b"DENY"),
                    (b"referrer-policy", b"strict-origin-when-cross-origin"),
                    (b"permissions-policy", b"camera=(), microphone=(), geolocation=()"),
                ])
                message = {**message, "headers": headers}
            await send(message)

        await self.app(scope, receive, send_wrapper)


# ── Lifespan: startup / shutdown ─────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    storage: Storage = app.state.storage
    logger.info(f"Storage ready ({len(storage.get_algorithms())} algorithm(s) in catalogue)")
    yield
    storage.engine.dispose()


def _configure_logging():
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(storage: Storage = None, pipeline: VideoPipeline = None) -> FastAPI:
    app = FastAPI(title="Environmental PINN Predictor", version="1.0.0", lifespan=lifespan)

    app.state.storage = storage or Storage()
    app.state.pipeline = pipeline or VideoPipeline(app.state.storage)

    # Security headers (added first so it wraps everything)
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(videos.router, prefix="/api")
    app.include_router(predictions.router, prefix="/api")
    app.include_router(algorithms.router, prefix="/api")
    app.include_router(demo.router, prefix="/api")

    @app.get("/api/health")
    def health_check(request: Request):
        status = request.app.state.pipeline.get_status()
        return {
            "status": "ok",
            "active_jobs": status["active_jobs"],
        }

    return app


_configure_logging()
app = create_app()
