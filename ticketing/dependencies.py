from fastapi import Request

from .config import Settings
from .services.oauth_service import GoogleOAuthClient
from .services.ticket_service import TicketIssuer, TicketLookup


# Collaborators are built once in create_app and kept on app.state
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_issuer(request: Request) -> TicketIssuer:
    return request.app.state.issuer


def get_lookup(request: Request) -> TicketLookup:
    return request.app.state.lookup


def get_oauth_client(request: Request) -> GoogleOAuthClient:
    return request.app.state.oauth_client
