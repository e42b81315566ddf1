"""Shared fixtures: a fake Salesforce upstream and a recording relay logger."""

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config


class RecordingLogger:
    """Collect relay events instead of printing them."""

    def __init__(self):
        self.events = []

    def log_request(self, params, in_flight):
        self.events.append(("request", params.url, in_flight))

    def log_response(self, url, status, in_flight):
        self.events.append(("response", url, status, in_flight))

    def log_redirect(self, url, status, replayed):
        self.events.append(("redirect", url, status, replayed))

    def log_rejected(self, endpoint):
        self.events.append(("rejected", endpoint))

    def log_error(self, url, message, in_flight):
        self.events.append(("error", url, in_flight))

    def kinds(self):
        return [event[0] for event in self.events]


class FakeSalesforce:
    """httpx.MockTransport handler that records requests and answers per URL."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes = {}

    def route(self, url, handler):
        """Answer ``url`` with ``handler(request) -> httpx.Response``."""
        self.routes[url] = handler

    def redirect(self, url, location, status_code=302):
        self.route(url, lambda request: httpx.Response(status_code, headers={"Location": location}))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(str(request.url))
        if handler is None:
            return httpx.Response(200, json={"ok": True})
        return handler(request)


@pytest.fixture
def salesforce():
    return FakeSalesforce()


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def make_client(salesforce, recording_logger):
    """Build a TestClient around the app with the fake upstream plugged in."""
    clients = []

    def _make(config=None, overrides=None):
        app = create_app(
            config or Config(),
            recording_logger,
            overrides=overrides,
            transport=httpx.MockTransport(salesforce),
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)
