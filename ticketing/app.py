from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .database import SupabaseTicketStore, TicketStore
from .logging_config import get_logger
from .routes.auth import router as auth_router
from .routes.events import router as events_router
from .routes.tickets import router as tickets_router
from .services.email_service import SMTPNotifier
from .services.oauth_service import GoogleOAuthClient
from .services.qr_service import QRCodeGenerator
from .services.ticket_service import TicketIssuer, TicketLookup


def create_app(
    *,
    settings: Settings = None,
    store: TicketStore = None,
    code_generator=None,
    notifier=None,
    oauth_client: GoogleOAuthClient = None,
) -> FastAPI:
    """Build the API with its collaborators constructed once and shared per request."""
    settings = settings or Settings.from_env()
    logger = get_logger("ticketing.app", settings.log_level)

    store = store or SupabaseTicketStore.from_settings(settings)
    if notifier is None:
        notifier = SMTPNotifier.from_settings(settings)
        if not notifier.configured:
            logger.warning("EMAIL_USER/EMAIL_PASS not set, tickets will not be emailed")

    app = FastAPI(title="Tech Event Ticketing")

    # ---------------- CORS ----------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.issuer = TicketIssuer(
        store,
        code_generator or QRCodeGenerator(),
        notifier,
        event_id=settings.event_id,
        event_name=settings.event_name,
    )
    app.state.lookup = TicketLookup(store)
    app.state.oauth_client = oauth_client or GoogleOAuthClient.from_settings(settings)

    app.include_router(auth_router)
    app.include_router(tickets_router)
    app.include_router(events_router)

    @app.get("/")
    def root():
        return {"ok": True, "service": "ticketing"}

    @app.get("/health")
    def health():
        return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}

    logger.info("Application configured", extra={"event_id": settings.event_id})
    return app
