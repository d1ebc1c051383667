"""Test helper functions."""

import hmac
import hashlib
import json
import time
from dataclasses import dataclass, field
from http.client import HTTPMessage
from io import BytesIO
from types import SimpleNamespace
from typing import Any, Dict, Optional, Union
from urllib.parse import urlencode

TEST_SECRET = "test-secret"
TEST_CHANNEL = "C123456"
OTHER_CHANNEL = "C999999"
JIRA_BASE_URL = "https://example.atlassian.net"


def generate_slack_signature(secret: str, timestamp: str, body: Union[str, bytes]) -> str:
    """Generate a valid Slack signature for testing."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    sig_basestring = f"v0:{timestamp}:".encode("utf-8") + body
    signature = hmac.new(
        secret.encode('utf-8'),
        sig_basestring,
        hashlib.sha256
    ).hexdigest()
    return f"v0={signature}"


def signed_headers(secret: str, body: bytes, timestamp: Optional[str] = None, **extra: str) -> Dict[str, str]:
    """Slack auth headers for body, signed now unless a timestamp is given."""
    if timestamp is None:
        timestamp = str(int(time.time()))
    headers = {
        "X-Slack-Request-Timestamp": timestamp,
        "X-Slack-Signature": generate_slack_signature(secret, timestamp, body),
    }
    headers.update(extra)
    return headers


def json_body(payload: Dict[str, Any]) -> bytes:
    return json.dumps(payload).encode("utf-8")


def form_body(fields: Dict[str, str]) -> bytes:
    return urlencode(fields).encode("utf-8")


@dataclass
class HandlerResponse:
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    raw: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.body)


def parse_handler_output(raw: bytes) -> HandlerResponse:
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    status = int(lines[0].split()[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return HandlerResponse(status=status, headers=headers, body=body, raw=raw)


def invoke_handler(
    dispatcher: Any,
    method: str,
    path: str,
    body: bytes = b"",
    headers: Optional[Dict[str, str]] = None
) -> HandlerResponse:
    """
    Drive the relay's request handler in-process.

    The handler runs synchronously, so everything it does after the ACK
    has finished by the time this returns.
    """
    from jira_relay.server import SlackRelayHandler

    handler = SlackRelayHandler.__new__(SlackRelayHandler)
    handler.server = SimpleNamespace(dispatcher=dispatcher)
    handler.client_address = ("127.0.0.1", 54321)
    handler.command = method
    handler.path = path
    handler.request_version = "HTTP/1.1"
    handler.requestline = f"{method} {path} HTTP/1.1"

    message = HTTPMessage()
    for name, value in (headers or {}).items():
        message[name] = value
    if "Content-Length" not in message:
        message["Content-Length"] = str(len(body))
    handler.headers = message
    handler.rfile = BytesIO(body)
    handler.wfile = BytesIO()

    getattr(handler, f"do_{method}")()
    return parse_handler_output(handler.wfile.getvalue())
