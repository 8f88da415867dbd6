from typing import Optional, Set
from urllib.parse import urlparse

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from ..config import Settings
from ..dependencies import get_issuer, get_oauth_client, get_settings
from ..errors import IdentityConflict, TicketingError, UpstreamAuthFailed
from ..logging_config import get_logger
from ..models import RegistrationRequest, RegistrationResponse, TicketSummary
from ..services.identity_service import ManualIdentity, OAuthIdentity
from ..services.oauth_service import GoogleOAuthClient
from ..services.ticket_service import TicketIssuer

logger = get_logger("ticketing.routes.auth")

router = APIRouter(tags=["auth"])


def _origin_of(url: str) -> Optional[str]:
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}".lower()


def allowed_origins(settings: Settings) -> Set[str]:
    """FRONTEND_URL plus every explicit CORS origin; the ``*`` wildcard grants nothing."""
    candidates = [settings.frontend_url] + [o for o in settings.cors_origins if o != "*"]
    return {origin for origin in map(_origin_of, candidates) if origin}


def resolve_origin(candidate: Optional[str], settings: Settings) -> str:
    """Use the caller's origin hint if it is an allowed frontend, else the configured one."""
    if candidate:
        origin = _origin_of(candidate)
        if origin in allowed_origins(settings):
            return origin
        logger.warning("Ignoring origin not in allow-list", extra={"origin": candidate})
    return settings.frontend_url.rstrip("/")


# ---------------- Google OAuth ----------------
@router.get("/google")
def google_login(
    origin: Optional[str] = Query(None),
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
    settings: Settings = Depends(get_settings),
):
    url = oauth.authorization_url(state=resolve_origin(origin, settings) if origin else None)
    logger.info("Redirecting to Google OAuth URL")
    return RedirectResponse(url, status_code=302)


@router.get("/google/callback")
def google_callback(
    background_tasks: BackgroundTasks,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
    issuer: TicketIssuer = Depends(get_issuer),
    settings: Settings = Depends(get_settings),
):
    if not code:
        logger.error("No code provided in query parameters")
        return PlainTextResponse("No code provided", status_code=400)

    origin = resolve_origin(state, settings)
    try:
        profile = oauth.fetch_profile(code)
        issued = issuer.issue(OAuthIdentity(profile), origin)
    except UpstreamAuthFailed as e:
        logger.error("Google OAuth callback error", extra={"error": str(e)})
        return PlainTextResponse(e.message, status_code=e.status_code)
    except TicketingError as e:
        logger.error("Google OAuth callback error", extra={"error": str(e)})
        return PlainTextResponse("Authentication failed", status_code=500)

    background_tasks.add_task(issuer.deliver, issued)
    return RedirectResponse(issued.redirect_url, status_code=302)


# ---------------- Manual Registration ----------------
@router.post("/api/auth/register", status_code=201, response_model=RegistrationResponse)
def register(
    data: RegistrationRequest,
    background_tasks: BackgroundTasks,
    origin: Optional[str] = Query(None),
    issuer: TicketIssuer = Depends(get_issuer),
    settings: Settings = Depends(get_settings),
):
    try:
        issued = issuer.issue(ManualIdentity(data.name, data.email), resolve_origin(origin, settings))
    except IdentityConflict as e:
        return JSONResponse({"msg": e.message}, status_code=e.status_code)
    except TicketingError as e:
        logger.error("Manual registration error", extra={"error": str(e)})
        return JSONResponse({"msg": "Server error"}, status_code=500)

    background_tasks.add_task(issuer.deliver, issued)
    return RegistrationResponse(
        ticket=TicketSummary(
            id=issued.ticket.id,
            name=issued.user.name,
            email=issued.user.email,
            code=issued.ticket.qr_code_data,
        ),
        redirect=issued.redirect_url,
    )
