"""Pytest configuration and fixtures."""

import base64
import json
from http import HTTPStatus
from types import SimpleNamespace

import pytest
import requests

from folioscope.auth.session import SessionState
from folioscope.hydra.http_client import HydraHttpClient

API_URL = "https://api.test/api"


def make_response(status=200, body=None, content_type="application/ld+json", headers=None, reason=None):
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status
    response.reason = reason if reason is not None else HTTPStatus(status).phrase
    if body is None:
        content = b""
    elif isinstance(body, (dict, list)):
        content = json.dumps(body).encode("utf-8")
    else:
        content = str(body).encode("utf-8")
    response._content = content
    response.encoding = "utf-8"
    if content_type:
        response.headers["Content-Type"] = content_type
    for key, value in (headers or {}).items():
        response.headers[key] = value
    return response


def make_jwt(payload):
    def _segment(data):
        raw = json.dumps(data).encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    return f"{_segment({'alg': 'HS256', 'typ': 'JWT'})}.{_segment(payload)}.signature"


class FakeHttpSession:
    """Stand-in for requests.Session that replays queued responses."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append(SimpleNamespace(method=method, url=url, **kwargs))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)


@pytest.fixture
def session_state():
    return SessionState()


@pytest.fixture
def fake_http():
    return FakeHttpSession()


@pytest.fixture
def client(session_state, fake_http):
    return HydraHttpClient(API_URL, session_state, http_session=fake_http)
