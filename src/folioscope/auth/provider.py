"""JWT login/logout and session checks against the dashboard backend."""

import base64
import json
import time
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel

from folioscope.auth.session import SessionState
from folioscope.utils.logging import get_logger

logger = get_logger(__name__)

LOGIN_PATH = "/login-proxy"


class AuthError(BaseModel):
    name: str
    message: str


class AuthResult(BaseModel):
    success: bool
    redirect_to: Optional[str] = None
    error: Optional[AuthError] = None


class CheckResult(BaseModel):
    authenticated: bool
    redirect_to: Optional[str] = None
    error: Optional[AuthError] = None


class OnErrorResult(BaseModel):
    logout: bool = False
    redirect_to: Optional[str] = None
    error: Optional[AuthError] = None


class Identity(BaseModel):
    id: Any
    name: str
    email: Optional[str] = None


def decode_jwt(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode the payload segment of a JWT without verifying its signature.

    Returns:
        Payload dict, or None if the token is malformed
    """
    try:
        payload = token.split(".")[1]
        padded = payload + "=" * (-len(payload) % 4)
        decoded = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (IndexError, ValueError, UnicodeError, AttributeError) as e:
        logger.error(f"Error decoding JWT: {e}")
        return None
    return decoded if isinstance(decoded, dict) else None


def display_name_from_email(email: Optional[str], default: Optional[str] = None) -> Optional[str]:
    """"jane@example.com" -> "Jane"."""
    if email and "@" in email:
        local_part = email.split("@")[0]
        return local_part[:1].upper() + local_part[1:]
    return email if default is None else default


def _is_expired(payload: Dict[str, Any], now: float) -> bool:
    exp = payload.get("exp")
    return isinstance(exp, (int, float)) and exp < now


def _login_error(message: str) -> AuthResult:
    return AuthResult(success=False, error=AuthError(name="LoginError", message=message))


class AuthProvider:
    """Login state machine over an explicit ``SessionState``."""

    def __init__(
        self,
        base_url: str,
        session_state: SessionState,
        *,
        login_route: str = "/login",
        timeout: float = 20,
        http_session: Optional[requests.Session] = None,
        clock=time.time,
    ):
        self.base_url = base_url.rstrip("/")
        self.session_state = session_state
        self.login_route = login_route
        self.timeout = timeout
        self._http = http_session or requests.Session()
        self._clock = clock

    def login(self, username: str, password: str) -> AuthResult:
        """
        Exchange credentials for a JWT and store it on the session.

        Every failure is reported through ``AuthResult.error``; nothing is
        raised.
        """
        self.session_state.login_in_progress = True
        try:
            return self._login(username, password)
        finally:
            self.session_state.login_in_progress = False

    def _login(self, username: str, password: str) -> AuthResult:
        try:
            response = self._http.post(
                f"{self.base_url}{LOGIN_PATH}",
                json={"username": username, "password": password},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Login error: {e}")
            return _login_error("Network error. Please try again.")

        logger.debug(f"Login response received: {response.status_code}")

        if not response.ok:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            if not isinstance(error_data, dict):
                error_data = {}
            return _login_error(error_data.get("message") or error_data.get("error") or "Invalid credentials")

        try:
            data = response.json()
        except ValueError:
            return _login_error("No token received from server")

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            return _login_error("No token received from server")

        payload = decode_jwt(token)
        if not payload:
            return _login_error("Invalid token received")

        if _is_expired(payload, self._clock()):
            return _login_error("Token is already expired")

        user_email = payload.get("email") or payload.get("username") or username
        user_info = {
            "id": payload.get("sub") or payload.get("user_id") or 1,
            "name": display_name_from_email(user_email),
            "email": user_email,
            "roles": payload.get("roles") or [],
        }
        self.session_state.set_credentials(token, user_info)
        logger.info(f"Logged in as {user_email}")

        return AuthResult(success=True, redirect_to="/")

    def logout(self) -> AuthResult:
        self.session_state.clear()
        logger.info("Logged out")
        return AuthResult(success=True, redirect_to=self.login_route)

    def check(self) -> CheckResult:
        """Report whether the stored token is present and unexpired."""
        token = self.session_state.token
        if not token:
            return CheckResult(authenticated=False, redirect_to=self.login_route)

        payload = decode_jwt(token)
        if payload and _is_expired(payload, self._clock()):
            self.session_state.clear()
            return CheckResult(
                authenticated=False,
                redirect_to=self.login_route,
                error=AuthError(name="SessionExpired", message="Your session has expired. Please login again."),
            )
        return CheckResult(authenticated=True)

    def get_permissions(self) -> List[str]:
        token = self.session_state.token
        if not token:
            return []
        user = self.session_state.user
        if user is not None:
            return list(user.get("roles") or [])
        payload = decode_jwt(token) or {}
        return list(payload.get("roles") or [])

    def get_identity(self) -> Optional[Identity]:
        token = self.session_state.token
        if not token:
            return None
        user = self.session_state.user
        if user is None:
            payload = decode_jwt(token) or {}
            email = payload.get("email") or payload.get("username")
            return Identity(id=payload.get("sub") or 1, name=display_name_from_email(email, "User"), email=email)
        return Identity(
            id=user.get("id") or 1,
            name=user.get("name") or user.get("username") or "User",
            email=user.get("email"),
        )

    def on_error(self, error: Exception) -> OnErrorResult:
        """Force a logout when an API call reported an expired session."""
        logger.error(f"API error: {error}")
        if getattr(error, "status_code", None) == 401:
            self.session_state.clear()
            return OnErrorResult(
                logout=True,
                redirect_to=self.login_route,
                error=AuthError(
                    name="AuthenticationError",
                    message="Your session has expired. Please login again.",
                ),
            )
        return OnErrorResult(error=AuthError(name=type(error).__name__, message=str(error)))
