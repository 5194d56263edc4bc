# jobhub/session.py
"""
The acting user of one request or websocket connection, and the lookups that tie
that identity to a business or worker record.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Optional

from jobhub.errors import AuthorizationError

log = logging.getLogger(__name__)

ROLES = ("admin", "business", "worker")


@dataclass(frozen=True)
class SessionUser:
    id: int
    email: str
    phone: Optional[str]
    user_type: str

    def to_claims(self) -> dict:
        return {"uid": self.id, "sub": self.email, "phone": self.phone, "user_type": self.user_type}

    @classmethod
    def from_claims(cls, claims: dict) -> "SessionUser":
        return cls(
            id=int(claims["uid"]),
            email=claims["sub"],
            phone=claims.get("phone"),
            user_type=claims["user_type"],
        )

    def as_dict(self) -> dict:
        return asdict(self)


class SessionContext:
    """
    Holds the authenticated identity for one request. Loaded on login (or from a
    bearer token) and cleared on logout.
    """

    def __init__(self, user: Optional[SessionUser] = None, token: Optional[str] = None):
        self._user = user
        self.token = token

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def user(self) -> Optional[SessionUser]:
        return self._user

    def load(self, user: SessionUser, token: Optional[str] = None):
        self._user = user
        self.token = token
        log.debug(f"Session loaded for user ID {user.id} ({user.user_type}).")

    def clear(self):
        if self._user is not None:
            log.debug(f"Session cleared for user ID {self._user.id}.")
        self._user = None
        self.token = None

    def require(self, *roles: str) -> SessionUser:
        if self._user is None:
            raise AuthorizationError("Authentication required.")
        if roles and self._user.user_type not in roles:
            log.warning(f"User {self._user.id} ({self._user.user_type}) denied; needs one of {roles}.")
            raise AuthorizationError(
                f"You are not authorized to perform this action ({' or '.join(r.capitalize() for r in roles)} required)."
            )
        return self._user


def resolve_business(gateway, user: SessionUser) -> Optional[dict]:
    """ The business whose email is the session email. """
    return gateway.fetch_one("businesses", {"email": user.email.strip()})


def resolve_worker(gateway, user: SessionUser) -> Optional[dict]:
    """ The worker record for the session: phone match first, then email. """
    worker = None
    if user.phone:
        worker = gateway.fetch_one("workers", {"phone": str(user.phone).strip()})
    if worker is None and user.email:
        worker = gateway.fetch_one("workers", {"email": user.email.strip()})
    if worker is None:
        log.info(f"No worker record matches session user {user.id}.")
    return worker
