import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import api_v1_router
from app.core.config import settings, validate_settings_for_production
from app.core.exceptions import register_exception_handlers
from app.core.logging import setup_logging
from app.core.middleware import RequestLoggingMiddleware
from app.core.sentry import init_sentry
from app.gateway.gateway import ChatGateway
from app.gateway.upstream import create_http_client
from app.web.router import web_router

# Configure logging before anything else
setup_logging()
init_sentry()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    validate_settings_for_production()

    # One outbound client for the whole process, shared by all requests
    http = create_http_client(timeout=settings.upstream_timeout_seconds)
    app.state.gateway = ChatGateway.from_settings(http, settings)

    logger.info("Server is running at http://localhost:%d", settings.app_port)
    logger.info("Local Base URL: %s", settings.local_base_url)
    logger.info("Completion mode: %s", settings.completion_mode)

    yield

    # Shutdown
    await http.aclose()
    logger.info("Gateway shut down")


app = FastAPI(
    title="OpenAI Session Gateway",
    description="Session-then-completion gateway in front of a chat-completion provider",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/v1/docs" if settings.app_debug else None,
    redoc_url=None,
    openapi_url="/v1/openapi.json" if settings.app_debug else None,
)

register_exception_handlers(app)

# Request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# CORS: parse allowed_origins from settings (comma-separated)
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# API routes
app.include_router(api_v1_router)

# Root banner
app.include_router(web_router)


def run() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host=settings.app_host, port=settings.app_port, log_config=None)
