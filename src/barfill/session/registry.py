"""Process-wide registry of active capture sessions.

At most one capture session may run per document. The registry maps a
document's identity to its live session; entries are inserted when a
session starts and removed on every terminal transition.
"""

from collections.abc import Hashable
from typing import TYPE_CHECKING

from barfill.exceptions import SessionAlreadyActiveError

if TYPE_CHECKING:
    from barfill.session.capture import CaptureSession


class SessionRegistry:
    """Maps document identity to its active CaptureSession."""

    def __init__(self) -> None:
        self._sessions: dict[Hashable, "CaptureSession"] = {}

    def register(self, key: Hashable, session: "CaptureSession", name: str = "") -> None:
        """Insert ``session`` for ``key`` if no session is active there.

        Raises:
            SessionAlreadyActiveError: If the document already has a session
        """
        if key in self._sessions:
            raise SessionAlreadyActiveError(name or str(key))
        self._sessions[key] = session

    def release(self, key: Hashable, session: "CaptureSession") -> bool:
        """Remove ``session`` if it is the one registered for ``key``.

        Returns:
            True if an entry was removed
        """
        if self._sessions.get(key) is session:
            del self._sessions[key]
            return True
        return False

    def get(self, key: Hashable) -> "CaptureSession | None":
        return self._sessions.get(key)

    def is_active(self, key: Hashable) -> bool:
        return key in self._sessions

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, key: object) -> bool:
        return key in self._sessions


default_registry = SessionRegistry()
