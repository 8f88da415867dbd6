"""Shared fixtures: in-memory collaborators and a wired TestClient."""

import base64
import re
import sys
import uuid
from pathlib import Path
from typing import Optional

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ticketing.app import create_app
from ticketing.config import Settings
from ticketing.database import TicketStore
from ticketing.errors import (
    CodeGenerationFailed,
    DuplicateUser,
    NotificationFailed,
    PersistenceFailed,
    StoreUnavailable,
)
from ticketing.models import OAuthProfile, User

FRONTEND = "http://localhost:5173"
CANONICAL_UUID = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")


class InMemoryStore(TicketStore):
    def __init__(self):
        self.users = {}
        self.tickets = {}
        self.fail_reads = False
        self.fail_ticket_writes = False
        self.ticket_lookups = []

    def find_user_by_email(self, email):
        if self.fail_reads:
            raise StoreUnavailable()
        return self.users.get(email)

    def create_user(self, name, email, google_id):
        if email in self.users:
            raise DuplicateUser(email)
        user = User(id=str(uuid.uuid4()), name=name, email=email, google_id=google_id)
        self.users[email] = user
        return user

    def create_ticket(self, ticket):
        if self.fail_ticket_writes:
            raise PersistenceFailed()
        self.tickets[ticket.id] = ticket
        return ticket

    def find_ticket_by_id(self, ticket_id):
        self.ticket_lookups.append(ticket_id)
        if self.fail_reads:
            raise StoreUnavailable()
        # postgres rejects non-canonical uuid text (22P02)
        if not CANONICAL_UUID.match(ticket_id):
            raise StoreUnavailable()
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            return None
        owner = next(u for u in self.users.values() if u.id == ticket.user_id)
        return ticket, owner


class FakeCodeGenerator:
    """Reversible stand-in for the QR encoder."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.encoded = []

    def encode(self, text: str) -> str:
        if self.fail:
            raise CodeGenerationFailed()
        self.encoded.append(text)
        return "data:image/png;base64," + base64.b64encode(text.encode()).decode()

    @staticmethod
    def decode(data_uri: str) -> str:
        return base64.b64decode(data_uri.split(",", 1)[1]).decode()


class FakeNotifier:
    def __init__(self, fail: bool = False, configured: bool = True):
        self.fail = fail
        self.configured = configured
        self.sent = []

    def send(self, to_email, subject, html, inline_image: Optional[str] = None):
        if self.fail:
            raise NotificationFailed("SMTP connection refused")
        self.sent.append({"to": to_email, "subject": subject, "html": html, "inline_image": inline_image})
        return f"<msg-{len(self.sent)}@test>"


class FakeOAuthClient:
    def __init__(self, profile: Optional[OAuthProfile] = None, error=None):
        self.profile = profile or OAuthProfile(email="grace@example.com", name="Grace", id="g-123")
        self.error = error
        self.codes = []

    def authorization_url(self, state=None):
        return f"https://accounts.example/auth?state={state or ''}"

    def fetch_profile(self, code):
        self.codes.append(code)
        if self.error:
            raise self.error
        return self.profile


@pytest.fixture
def settings():
    return Settings(
        frontend_url=FRONTEND,
        cors_origins=[FRONTEND, "https://app.example", "https://tickets.example.org"],
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def code_generator():
    return FakeCodeGenerator()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def oauth_client():
    return FakeOAuthClient()


@pytest.fixture
def app(settings, store, code_generator, notifier, oauth_client):
    return create_app(
        settings=settings,
        store=store,
        code_generator=code_generator,
        notifier=notifier,
        oauth_client=oauth_client,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
