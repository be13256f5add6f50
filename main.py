"""
Application wiring.

Run with: uvicorn main:create_app --factory

Secrets come from Vault, so nothing is built at import time; create_app()
assembles the components (or takes prebuilt ones) and the lifespan tears
them down on shutdown.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, Request

from api.base import success_response
from api.errors import register_error_handlers
from api.issues import create_admin_router, create_issues_router
from api.middleware import RequestIDMiddleware, request_id_of
from auth.api import create_auth_router
from auth.config import AuthConfig
from auth.security_middleware import AuthMiddleware
from auth.session import SessionManager
from clients.email_client import EmailGatewayClient
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import get_database_url, get_email_config, get_valkey_url
from core.audit import AuditLogger
from core.config import SupportConfig
from core.event_bus import EventBus
from core.handlers.issue_created_handler import handle_issue_created
from core.schema import ensure_schema
from core.services.issue_service import IssueService
from core.services.message_service import MessageService

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@dataclass
class AppComponents:
    """Everything the HTTP layer needs, plus what must be closed on shutdown."""

    config: SupportConfig
    auth_config: AuthConfig
    session_manager: SessionManager
    issue_service: IssueService
    message_service: MessageService
    postgres: PostgresClient | None = None
    valkey: ValkeyClient | None = None
    executor: ThreadPoolExecutor | None = None

    def close(self) -> None:
        if self.executor is not None:
            # Let queued notifications finish before the pool goes away
            self.executor.shutdown(wait=True)
        if self.valkey is not None:
            self.valkey.close()
        if self.postgres is not None:
            self.postgres.close()


def subscribe_notifications(event_bus: EventBus, config: SupportConfig) -> bool:
    """
    Subscribe the issue receipt email to IssueCreated.

    Returns:
        False if the email gateway is not configured; issues are then
        created without receipts.
    """
    try:
        email_client = EmailGatewayClient(**get_email_config())
    except (PermissionError, KeyError, ValueError) as e:
        logger.warning("Email gateway not configured, issue receipts disabled: %s", e)
        return False

    event_bus.subscribe("IssueCreated", handle_issue_created(email_client, config))
    return True


def build_components(config: SupportConfig) -> AppComponents:
    """Connect to Postgres and Valkey via Vault secrets and build services."""
    postgres = PostgresClient(get_database_url())
    ensure_schema(postgres)

    valkey = ValkeyClient(get_valkey_url())
    auth_config = AuthConfig()

    executor = ThreadPoolExecutor(
        max_workers=config.notification_workers,
        thread_name_prefix="notify",
    )
    event_bus = EventBus(executor=executor)
    subscribe_notifications(event_bus, config)

    audit = AuditLogger(postgres)

    return AppComponents(
        config=config,
        auth_config=auth_config,
        session_manager=SessionManager(valkey, auth_config),
        issue_service=IssueService(postgres, audit, event_bus),
        message_service=MessageService(postgres, audit),
        postgres=postgres,
        valkey=valkey,
        executor=executor,
    )


def create_app(components: AppComponents | None = None) -> FastAPI:
    """Build the FastAPI app. Without components, connects using Vault secrets."""
    if components is None:
        config = SupportConfig.from_env()
        configure_logging(config.log_level)
        components = build_components(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            logger.info("Shutting down")
            components.close()

    app = FastAPI(title=components.config.app_name, lifespan=lifespan)

    # Last added runs first, so every response (401s included) gets a request id
    app.add_middleware(
        AuthMiddleware,
        session_manager=components.session_manager,
        config=components.auth_config,
    )
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(
        create_issues_router(components.issue_service, components.message_service),
        prefix="/api",
    )
    app.include_router(create_admin_router(components.issue_service), prefix="/api")
    app.include_router(
        create_auth_router(components.session_manager, components.auth_config),
        prefix="/auth",
    )

    @app.get("/health", tags=["health"])
    def health(request: Request):
        return success_response({"status": "ok"}, request_id_of(request))

    app.state.components = components
    return app
