"""Session token lifecycle for the place search API.

Mapbox groups a user's suggest keystrokes and the retrieve call that follows
them under one session token. The manager is a two-state machine:

    IDLE --issue()/begin()--> ACTIVE --end()--> IDLE

"Closing" actions (place selected, search submitted, city cleared) call
``rotate()`` so the next interaction starts with a fresh token.
"""

import uuid
from enum import Enum
from threading import Lock

from concertfindr.errors import MissingSessionTokenError
from concertfindr.observability import increment


class TokenState(Enum):
    IDLE = "idle"
    ACTIVE = "active"


class SessionTokenManager:
    """Issues and invalidates opaque per-interaction tokens."""

    def __init__(self, token_factory=None):
        self._token_factory = token_factory or (lambda: str(uuid.uuid4()))
        self._token: str | None = None
        self._lock = Lock()

    @property
    def state(self) -> TokenState:
        return TokenState.ACTIVE if self._token else TokenState.IDLE

    @property
    def token(self) -> str | None:
        return self._token

    def issue(self) -> str:
        """Start a new session, replacing any current token."""
        token = self._token_factory()
        with self._lock:
            self._token = token
        increment("session_token.issued")
        return token

    def begin(self) -> str:
        """Return the active token, issuing one if idle."""
        if self._token:
            return self._token
        return self.issue()

    def end(self) -> None:
        """Close the current session. The token must not be reused."""
        with self._lock:
            self._token = None

    def rotate(self) -> str:
        self.end()
        return self.issue()

    def require(self, operation: str = "request") -> str:
        token = self._token
        if not token:
            raise MissingSessionTokenError(operation)
        return token
