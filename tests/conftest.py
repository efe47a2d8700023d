"""Shared test fixtures."""

import pytest

from roadserver_core.http.message import IncomingMessage, OutgoingMessage
from roadserver_core.http.request import Request
from roadserver_core.http.response import Response


def build_context(method="GET", url="/", headers=None, body=b"", secret=""):
    """Build a Request/Response pair over in-memory messages."""
    incoming = IncomingMessage(
        method=method,
        url=url,
        headers={k.lower(): v for k, v in (headers or {}).items()},
        body=body,
    )
    outgoing = OutgoingMessage(method)
    request = Request(incoming, secret=secret)
    return request, Response(outgoing, request)


@pytest.fixture
def make_context():
    return build_context


@pytest.fixture
def run_app():
    """Run an app against a single in-memory request and return the outgoing message."""

    def run(app, method="GET", url="/", headers=None, body=b""):
        incoming = IncomingMessage(
            method=method,
            url=url,
            headers={k.lower(): v for k, v in (headers or {}).items()},
            body=body,
        )
        outgoing = OutgoingMessage(method)
        app.handle(incoming, outgoing)
        return outgoing

    return run
