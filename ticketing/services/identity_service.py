"""Find-or-create users keyed by email, and the strategies that feed issuance."""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from ..config import MANUAL_REGISTRATION
from ..database import TicketStore
from ..errors import DuplicateUser, IdentityConflict, StoreUnavailable
from ..logging_config import get_logger
from ..models import OAuthProfile, User

logger = get_logger("ticketing.identity")


class IdentityResolver:
    def __init__(self, store: TicketStore):
        self._store = store

    def resolve(self, email: str, name: str, external_id: Optional[str] = None) -> Tuple[User, bool]:
        """Return ``(user, is_new)`` for ``email``, creating the user if needed.

        An existing user is returned unchanged; ``name`` and ``external_id``
        only apply on creation. Emails are matched case-insensitively.
        """
        email = normalize_email(email)
        user = self._store.find_user_by_email(email)
        if user:
            logger.info("User exists", extra={"user_id": user.id})
            return user, False

        logger.info("User not found, creating new user")
        try:
            user = self._store.create_user(name, email, external_id or MANUAL_REGISTRATION)
        except DuplicateUser:
            # lost a concurrent insert for the same email
            user = self._store.find_user_by_email(email)
            if user is None:
                raise StoreUnavailable("User vanished after duplicate insert")
            return user, False
        return user, True


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityStrategy(ABC):
    """How an entry point obtains the user a ticket is issued to."""

    @abstractmethod
    def acquire(self, resolver: IdentityResolver) -> User:
        ...


class OAuthIdentity(IdentityStrategy):
    """Repeat OAuth users are accepted and get a fresh ticket each time."""

    def __init__(self, profile: OAuthProfile):
        self.profile = profile

    def acquire(self, resolver: IdentityResolver) -> User:
        user, _ = resolver.resolve(self.profile.email, self.profile.name, self.profile.id)
        return user


class ManualIdentity(IdentityStrategy):
    """Manual registration is single-use per email."""

    def __init__(self, name: str, email: str):
        self.name = name
        self.email = email

    def acquire(self, resolver: IdentityResolver) -> User:
        user, is_new = resolver.resolve(self.email, self.name, MANUAL_REGISTRATION)
        if not is_new:
            raise IdentityConflict()
        return user
