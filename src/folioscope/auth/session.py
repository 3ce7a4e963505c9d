"""Explicit session state shared by the HTTP client and the auth provider."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel

from folioscope.utils.logging import get_logger

logger = get_logger(__name__)


class SessionState(BaseModel):
    """
    Credentials and login status for one dashboard user.

    When ``path`` is set, the token and user info are persisted to that JSON
    file so that separate CLI invocations share a login.
    """

    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    login_in_progress: bool = False
    redirect_to: Optional[str] = None
    path: Optional[Path] = None

    @classmethod
    def load(cls, path: Optional[Path]) -> "SessionState":
        """Load persisted credentials, or return an empty session."""
        state = cls(path=path)
        if path is None or not path.exists():
            return state
        try:
            stored = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {path}: {e}")
            return state
        if isinstance(stored, dict):
            state.token = stored.get("token")
            user = stored.get("user")
            state.user = user if isinstance(user, dict) else None
        return state

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"token": self.token, "user": self.user}
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def set_credentials(self, token: str, user: Dict[str, Any]) -> None:
        self.token = token
        self.user = user
        self.save()

    def clear(self) -> None:
        """Drop stored token and user info."""
        self.token = None
        self.user = None
        if self.path is not None and self.path.exists():
            self.path.unlink()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)
