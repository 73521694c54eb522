import asyncio
import contextlib
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from eventboard.api.router import api_router
from eventboard.core.config import Settings, get_settings
from eventboard.core.db import close_engine, init_engine
from eventboard.core.logging import setup_logging
from eventboard.infra.discord import DiscordWebhookAnnouncer, NoopAnnouncer
from eventboard.services.admission import AdmissionPolicies, build_admission_policies

logger = structlog.get_logger()


async def sweep_rate_limits(
    admission: AdmissionPolicies,
    interval_seconds: float,
    grace_seconds: int,
) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        removed = admission.sweep(grace_ms=grace_seconds * 1000)
        if removed:
            logger.info("rate_limit_sweep", removed=removed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    # Initialize infrastructure
    engine = init_engine()
    app.state.db_engine = engine

    http_client: httpx.AsyncClient | None = None
    if settings.discord_webhook_url:
        http_client = httpx.AsyncClient(timeout=settings.discord_timeout_seconds)
        app.state.announcer = DiscordWebhookAnnouncer(
            client=http_client,
            webhook_url=settings.discord_webhook_url,
            app_url=settings.public_app_url,
        )

    sweep_task: asyncio.Task | None = None
    if settings.rate_limit_sweep_interval_seconds > 0:
        sweep_task = asyncio.create_task(
            sweep_rate_limits(
                app.state.admission,
                settings.rate_limit_sweep_interval_seconds,
                settings.rate_limit_sweep_grace_seconds,
            )
        )
    app.state.sweep_task = sweep_task

    logger.info("app_started", app_env=settings.app_env)
    yield

    # Graceful shutdown
    if sweep_task is not None:
        sweep_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweep_task
    if http_client is not None:
        await http_client.aclose()
    await close_engine(engine)


def create_app(
    settings: Settings | None = None,
    admission: AdmissionPolicies | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    settings.validate_security_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Campus Event Board API",
        version="0.1.0",
        docs_url="/docs" if settings.app_env != "production" else None,
        redoc_url="/redoc" if settings.app_env != "production" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.admission = admission or build_admission_policies(settings)
    app.state.announcer = NoopAnnouncer()

    if settings.trusted_hosts:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.trusted_hosts,
        )

    if settings.force_https:
        app.add_middleware(HTTPSRedirectMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-User-Id", "X-User-Name", "X-User-Email"],
        expose_headers=["Retry-After"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy",
            "strict-origin-when-cross-origin",
        )
        if settings.force_https:
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains",
            )
        return response

    app.include_router(api_router, prefix="/api")

    @app.get("/", tags=["meta"])
    async def root() -> dict[str, str]:
        return {"service": "event-board-backend", "status": "ok"}

    return app


app = create_app()
