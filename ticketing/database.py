"""Supabase-backed document store for users and tickets.

The ``users.email`` column carries a unique constraint (see
``supabase/schema.sql``); ``create_user`` reports violations as
:class:`DuplicateUser` so callers can re-read the winning row.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from postgrest.exceptions import APIError
from supabase import Client, create_client

from .errors import DuplicateUser, PersistenceFailed, StoreUnavailable
from .logging_config import get_logger
from .models import Ticket, User

logger = get_logger("ticketing.database")

USERS_TABLE = "users"
TICKETS_TABLE = "tickets"
UNIQUE_VIOLATION = "23505"


class TicketStore(ABC):
    """Persistence operations the issuance and lookup services depend on."""

    @abstractmethod
    def find_user_by_email(self, email: str) -> Optional[User]:
        """Return the user owning ``email``, or None."""

    @abstractmethod
    def create_user(self, name: str, email: str, google_id: Optional[str]) -> User:
        """Insert a user. Raises DuplicateUser if the email is taken."""

    @abstractmethod
    def create_ticket(self, ticket: Ticket) -> Ticket:
        """Insert a ticket whose id was assigned by the caller."""

    @abstractmethod
    def find_ticket_by_id(self, ticket_id: str) -> Optional[Tuple[Ticket, User]]:
        """Return the ticket with its owning user expanded, or None."""


def _user_from_row(row: dict) -> User:
    return User(
        id=str(row["id"]),
        name=row.get("name") or "",
        email=row["email"],
        google_id=row.get("google_id"),
    )


def _ticket_from_row(row: dict) -> Ticket:
    return Ticket(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        event_id=row["event_id"],
        qr_code_data=row.get("qr_code_data"),
    )


class SupabaseTicketStore(TicketStore):
    def __init__(self, client: Client):
        self._client = client

    @classmethod
    def from_settings(cls, settings) -> "SupabaseTicketStore":
        return cls(create_client(settings.supabase_url, settings.supabase_key))

    def find_user_by_email(self, email: str) -> Optional[User]:
        try:
            res = self._client.table(USERS_TABLE).select("*").eq("email", email).limit(1).execute()
        except Exception as e:
            logger.error("User lookup failed", extra={"error": str(e)})
            raise StoreUnavailable() from e
        rows = res.data or []
        return _user_from_row(rows[0]) if rows else None

    def create_user(self, name: str, email: str, google_id: Optional[str]) -> User:
        try:
            res = self._client.table(USERS_TABLE).insert({
                "name": name,
                "email": email,
                "google_id": google_id,
            }).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateUser(email) from e
            logger.error("User insert failed", extra={"error": str(e)})
            raise StoreUnavailable() from e
        except Exception as e:
            logger.error("User insert failed", extra={"error": str(e)})
            raise StoreUnavailable() from e
        if not res.data:
            raise StoreUnavailable("User insert returned no row")
        return _user_from_row(res.data[0])

    def create_ticket(self, ticket: Ticket) -> Ticket:
        try:
            res = self._client.table(TICKETS_TABLE).insert({
                "id": ticket.id,
                "user_id": ticket.user_id,
                "event_id": ticket.event_id,
                "qr_code_data": ticket.qr_code_data,
            }).execute()
        except Exception as e:
            logger.error("Ticket insert failed", extra={"ticket_id": ticket.id, "error": str(e)})
            raise PersistenceFailed() from e
        return _ticket_from_row(res.data[0]) if res.data else ticket

    def find_ticket_by_id(self, ticket_id: str) -> Optional[Tuple[Ticket, User]]:
        try:
            res = (
                self._client.table(TICKETS_TABLE)
                .select(f"*, user:{USERS_TABLE}(*)")
                .eq("id", ticket_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("Ticket lookup failed", extra={"ticket_id": ticket_id, "error": str(e)})
            raise StoreUnavailable() from e
        rows = res.data or []
        if not rows:
            return None
        row = rows[0]
        owner = row.get("user")
        if not owner:
            logger.error("Ticket has no owning user", extra={"ticket_id": ticket_id})
            raise StoreUnavailable("Ticket owner missing")
        return _ticket_from_row(row), _user_from_row(owner)
