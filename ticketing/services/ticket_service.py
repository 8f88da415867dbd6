"""Ticket issuance workflow and ticket lookup.

Issuance order is fixed: identity, ticket id, verification URL, QR code,
persist. Delivery by email happens afterwards and can only change the
reported NotificationOutcome, never the issuance result.
"""

import html
import uuid
from typing import Optional

from ..database import TicketStore
from ..errors import NotificationFailed, TicketNotFound
from ..logging_config import get_logger
from ..models import (
    IssuedTicket,
    NotificationOutcome,
    NotificationStatus,
    Ticket,
    TicketDetail,
    TicketOwner,
)
from .identity_service import IdentityResolver, IdentityStrategy

logger = get_logger("ticketing.tickets")

EMAIL_SUBJECT = "Your Tech Event Ticket"


def verification_url(base_url: str, ticket_id: str) -> str:
    return f"{base_url.rstrip('/')}/ticket/{ticket_id}"


def redirect_url(base_url: str, ticket_id: str) -> str:
    return f"{verification_url(base_url, ticket_id)}?showQR=true"


def render_ticket_email(issued: IssuedTicket, event_name: str) -> str:
    user, ticket = issued.user, issued.ticket
    link = html.escape(issued.verification_url)
    return f"""
        <h2>Hello {html.escape(user.name)}</h2>
        <p>Your Tech Event ticket is ready.</p>
        <p><strong>Event:</strong> {html.escape(event_name)}</p>
        <p><strong>Ticket ID:</strong> {ticket.id}</p>
        <p><strong>Email:</strong> {html.escape(user.email)}</p>
        <img src="{ticket.qr_code_data}" alt="QR Code" style="width:250px"/>
        <p>Or view your ticket online: <a href="{link}">{link}</a></p>
    """


class TicketIssuer:
    def __init__(
        self,
        store: TicketStore,
        code_generator,
        notifier,
        event_id: str,
        event_name: str = "Tech 2025",
    ):
        self.store = store
        self.resolver = IdentityResolver(store)
        self.code_generator = code_generator
        self.notifier = notifier
        self.event_id = event_id
        self.event_name = event_name

    def issue(self, strategy: IdentityStrategy, base_url: str) -> IssuedTicket:
        """Resolve the user, encode and persist a new ticket.

        Raises IdentityConflict, StoreUnavailable, CodeGenerationFailed or
        PersistenceFailed; nothing is written if encoding fails.
        """
        user = strategy.acquire(self.resolver)

        ticket_id = str(uuid.uuid4())
        url = verification_url(base_url, ticket_id)

        logger.info("Generating ticket URL and QR code", extra={"ticket_id": ticket_id, "user_id": user.id})
        code = self.code_generator.encode(url)

        ticket = self.store.create_ticket(Ticket(
            id=ticket_id,
            user_id=user.id,
            event_id=self.event_id,
            qr_code_data=code,
        ))
        logger.info("Ticket created with QR code", extra={"ticket_id": ticket.id, "user_id": user.id})

        return IssuedTicket(
            ticket=ticket,
            user=user,
            verification_url=url,
            redirect_url=redirect_url(base_url, ticket_id),
        )

    def deliver(self, issued: IssuedTicket) -> NotificationOutcome:
        """Email the ticket; failures are logged and returned, never raised."""
        ticket_id = issued.ticket.id
        if not getattr(self.notifier, "configured", True):
            outcome = NotificationOutcome(ticket_id, NotificationStatus.SKIPPED)
            logger.warning("Email not configured, ticket not sent", extra=_outcome_fields(outcome))
            return outcome

        body = render_ticket_email(issued, self.event_name)
        try:
            message_id = self.notifier.send(
                issued.user.email,
                EMAIL_SUBJECT,
                body,
                inline_image=issued.ticket.qr_code_data,
            )
        except NotificationFailed as e:
            outcome = NotificationOutcome(ticket_id, NotificationStatus.FAILED, error=e.message)
            logger.error("Failed to send ticket email", extra=_outcome_fields(outcome))
            return outcome
        except Exception as e:
            outcome = NotificationOutcome(ticket_id, NotificationStatus.FAILED, error=type(e).__name__)
            logger.exception("Failed to send ticket email", extra=_outcome_fields(outcome))
            return outcome

        outcome = NotificationOutcome(ticket_id, NotificationStatus.SENT, message_id=message_id)
        logger.info("Ticket email sent", extra=_outcome_fields(outcome))
        return outcome


def _outcome_fields(outcome: NotificationOutcome) -> dict:
    fields = {"ticket_id": outcome.ticket_id, "notification": outcome.status.value}
    if outcome.message_id:
        fields["message_id"] = outcome.message_id
    if outcome.error:
        fields["error"] = outcome.error
    return fields


class TicketLookup:
    def __init__(self, store: TicketStore):
        self.store = store

    def get_ticket(self, ticket_id: str) -> TicketDetail:
        """Return the ticket with its owner.

        Raises TicketNotFound for unknown or malformed ids and
        StoreUnavailable for store faults.
        """
        canonical = canonical_ticket_id(ticket_id)
        if canonical is None:
            raise TicketNotFound()

        found = self.store.find_ticket_by_id(canonical)
        if found is None:
            raise TicketNotFound()

        ticket, user = found
        return TicketDetail(
            id=ticket.id,
            event_id=ticket.event_id,
            code=ticket.qr_code_data or "",
            user=TicketOwner(id=user.id, name=user.name, email=user.email),
        )


def canonical_ticket_id(value: Optional[str]) -> Optional[str]:
    """Hyphenated lowercase form of a UUID ticket id, or None if it is not one."""
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        return None
