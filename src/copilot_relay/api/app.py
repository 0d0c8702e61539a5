# src/copilot_relay/api/app.py
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from copilot_relay.config.settings import Settings, get_settings
from copilot_relay.api.middleware.cors import get_cors_middleware_config
from copilot_relay.api.middleware.request_id import RequestIDMiddleware
from copilot_relay.api.middleware.errors import register_error_handlers
from copilot_relay.api.routes import conversations, health
from copilot_relay.infrastructure.observability.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    settings = get_settings()
    configure_logging()
    logger.info(
        "Relay starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("Relay stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Application settings (defaults to get_settings())
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
# Copilot Relay

HTTP front door for multi-turn conversations with a Copilot Studio agent.

- `POST /start` starts a conversation with the service-managed token
- `POST /continue` asks a follow-up question
- `POST /invoke` starts a conversation with the caller's own token:
  ```
  Authorization: Bearer <token>
  ```
        """,
        docs_url="/docs" if settings.debug else None,
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "Health",
                "description": "Liveness endpoint for monitoring.",
            },
            {
                "name": "Conversations",
                "description": "Start and continue conversations with the Copilot Studio agent.",
            },
        ],
    )

    # Middleware (added in reverse order of execution)
    app.add_middleware(RequestIDMiddleware)

    cors_config = get_cors_middleware_config(settings)
    app.add_middleware(CORSMiddleware, **cors_config)

    # Error handlers
    register_error_handlers(app, settings)

    # ============================================================================
    # Routes
    # ============================================================================

    app.include_router(health.router, tags=["Health"])
    app.include_router(conversations.router, tags=["Conversations"])

    return app


app = create_app()
