from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr


# ---------------- Domain ----------------
@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    google_id: Optional[str] = None


@dataclass(frozen=True)
class Ticket:
    id: str
    user_id: str
    event_id: str
    qr_code_data: Optional[str] = None


@dataclass(frozen=True)
class IssuedTicket:
    """A persisted ticket plus the URLs the entry points hand back."""

    ticket: Ticket
    user: User
    verification_url: str
    redirect_url: str


class NotificationStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class NotificationOutcome:
    ticket_id: str
    status: NotificationStatus
    message_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.status is NotificationStatus.SENT


@dataclass(frozen=True)
class OAuthProfile:
    email: Optional[str]
    name: Optional[str]
    id: Optional[str] = None


# ---------------- API ----------------
class RegistrationRequest(BaseModel):
    name: str
    email: EmailStr


class TicketSummary(BaseModel):
    id: str
    name: str
    email: str
    code: str


class RegistrationResponse(BaseModel):
    ticket: TicketSummary
    redirect: str


class TicketOwner(BaseModel):
    id: str
    name: str
    email: str


class TicketDetail(BaseModel):
    id: str
    event_id: str
    code: str
    user: TicketOwner


class EventInfo(BaseModel):
    id: str
    title: str
    description: str
