"""HTTP transport for the Hydra API: bearer auth, JSON-LD parsing, error mapping."""

import json
from typing import Any, Callable, Dict, List, Optional

import requests
from pydantic import BaseModel

from folioscope.auth.session import SessionState
from folioscope.utils.logging import get_logger

logger = get_logger(__name__)

JSON_CONTENT_TYPES = ("application/json", "application/ld+json")
UNAUTHORIZED_MESSAGE = "Authentication expired. Please login again."


class HydraHttpError(Exception):
    """Non-2xx response (or transport failure) from the Hydra API."""

    def __init__(self, message: str, status_code: Optional[int] = None, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors


class HttpResponse(BaseModel):
    data: Any = None
    headers: Dict[str, str] = {}
    status: int

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


def parse_body(content_type: str, body_text: str) -> Any:
    """Decode JSON/JSON-LD bodies; anything else is returned as text."""
    if body_text and any(ct in (content_type or "") for ct in JSON_CONTENT_TYPES):
        return json.loads(body_text)
    return body_text


def _field(data: Any, name: str) -> Optional[str]:
    if isinstance(data, dict):
        value = data.get(name)
        if value:
            return str(value)
    return None


def error_description(data: Any) -> Optional[str]:
    return _field(data, "description")


def error_detail(data: Any) -> Optional[str]:
    return _field(data, "detail")


def error_title(data: Any) -> Optional[str]:
    return _field(data, "title")


def error_message(data: Any, status_text: str) -> str:
    """
    Pick the error message from a Hydra error body.

    Precedence: ``description``, ``detail``, ``title``, then the HTTP
    reason phrase.
    """
    for step in (error_description, error_detail, error_title):
        message = step(data)
        if message:
            return message
    return status_text


def error_violations(data: Any) -> Optional[List[Any]]:
    if isinstance(data, dict):
        return data.get("violations")
    return None


class HydraHttpClient:
    """Single entry point for every call to the Hydra API."""

    def __init__(
        self,
        base_url: str,
        session_state: Optional[SessionState] = None,
        *,
        timeout: float = 20,
        login_route: str = "/login",
        on_unauthorized: Optional[Callable[[str], None]] = None,
        http_session: Optional[requests.Session] = None,
    ):
        """
        Initialize client.

        Args:
            base_url: API base URL, e.g. "https://host/api"
            session_state: Holder of the bearer token
            timeout: Per-request timeout in seconds
            login_route: Route recorded on the session after a 401
            on_unauthorized: Called with ``login_route`` after a 401
            http_session: Optional requests session (tests inject fakes)
        """
        self.base_url = base_url.rstrip("/")
        self.session_state = session_state if session_state is not None else SessionState()
        self.timeout = timeout
        self.login_route = login_route
        self.on_unauthorized = on_unauthorized
        self._http = http_session or requests.Session()

    def _build_headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        merged = {
            "Accept": "application/ld+json",
            "Content-Type": "application/json",
            **(headers or {}),
        }
        if self.session_state.token:
            merged["Authorization"] = f"Bearer {self.session_state.token}"
        return merged

    def url_for(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}{path}"

    def _handle_unauthorized(self, data: Any) -> None:
        logger.warning("Received 401 from API, clearing stored credentials")
        self.session_state.clear()
        self.session_state.redirect_to = self.login_route
        if self.on_unauthorized is not None:
            self.on_unauthorized(self.login_route)
        raise HydraHttpError(UNAUTHORIZED_MESSAGE, status_code=401, errors=error_violations(data))

    def http(
        self,
        path: str,
        method: str = "GET",
        *,
        json_body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        """
        Perform a request against the API.

        Args:
            path: Path relative to the base URL (absolute URLs are used as-is)
            method: HTTP method
            json_body: Body serialized as JSON when not None
            headers: Extra headers, overriding the defaults

        Returns:
            HttpResponse with decoded data, headers and status

        Raises:
            HydraHttpError: On non-2xx responses or transport failures
        """
        url = self.url_for(path)
        body = json.dumps(json_body) if json_body is not None else None
        logger.debug(f"{method} {url}")

        try:
            res = self._http.request(
                method,
                url,
                data=body,
                headers=self._build_headers(headers),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise HydraHttpError(f"Request to {url} failed: {e}") from e

        content_type = res.headers.get("content-type", "")
        try:
            data = parse_body(content_type, res.text)
        except json.JSONDecodeError as e:
            raise HydraHttpError(f"Invalid JSON from {url}: {e}", status_code=res.status_code) from e

        if not res.ok:
            if res.status_code == 401:
                self._handle_unauthorized(data)
            message = error_message(data, res.reason or "")
            logger.debug(f"{method} {url} -> {res.status_code}: {message}")
            raise HydraHttpError(message, status_code=res.status_code, errors=error_violations(data))

        return HttpResponse(data=data, headers=dict(res.headers), status=res.status_code)
