"""Base HTTP request handler shared by the relay's endpoints."""

import asyncio
import json
from http.server import BaseHTTPRequestHandler
from typing import Any, Callable, Coroutine, Dict, Optional, TypeVar
from urllib.parse import parse_qs, urlsplit

from jira_relay import __version__
from jira_relay.utils.errors import MalformedRequestError, PayloadTooLargeError
from jira_relay.utils.logging import correlation_context, get_structured_logger

logger = get_structured_logger(__name__)

MAX_BODY_BYTES = 1024 * 1024

T = TypeVar("T")
Route = Callable[["RelayRequestHandler"], None]


def decode_json_body(raw_body: bytes) -> dict[str, Any]:
    """Decode a JSON object body; anything else is malformed."""
    try:
        body = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedRequestError(f"Body is not valid JSON: {e}") from e
    if not isinstance(body, dict):
        raise MalformedRequestError("Body is not a JSON object")
    return body


def decode_form_body(raw_body: bytes) -> dict[str, str]:
    """Decode an application/x-www-form-urlencoded body (first value wins)."""
    try:
        fields = parse_qs(raw_body.decode("utf-8"), keep_blank_values=True)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedRequestError(f"Body is not valid form data: {e}") from e
    return {name: values[0] for name, values in fields.items()}


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion on a fresh event loop for this thread."""
    return asyncio.run(coro)


class RelayRequestHandler(BaseHTTPRequestHandler):
    """
    Routes requests by path to endpoint functions.

    Endpoints receive the handler itself and use its helpers to read the
    raw body and write responses. The dispatcher is provided by the server.
    """

    server_version = f"jira-relay/{__version__}"
    get_routes: Dict[str, Route] = {}
    post_routes: Dict[str, Route] = {}

    responded = False

    @property
    def dispatcher(self):
        return self.server.dispatcher

    @property
    def route_path(self) -> str:
        return urlsplit(self.path).path

    def do_GET(self):
        self._route(self.get_routes)

    def do_POST(self):
        self._route(self.post_routes)

    def _route(self, routes: Dict[str, Route]) -> None:
        with correlation_context():
            route = routes.get(self.route_path)
            if route is None:
                self.send_json(404, {"error": "not found"})
                return

            try:
                route(self)
            except PayloadTooLargeError as e:
                logger.warning("Rejecting oversized request body", path=self.route_path, error=str(e))
                if not self.responded:
                    self.send_json(413, {"error": "payload too large"})
            except MalformedRequestError as e:
                logger.warning("Rejecting malformed request", path=self.route_path, error=str(e))
                if not self.responded:
                    self.send_json(400, {"error": "malformed request"})
            except Exception:
                logger.exception("Error processing request", path=self.route_path, responded=self.responded)
                if not self.responded:
                    self.send_json(500, {"error": "internal server error"})

    def read_raw_body(self) -> bytes:
        """
        Read the exact request body bytes.

        Raises MalformedRequestError for a non-numeric Content-Length and
        PayloadTooLargeError above MAX_BODY_BYTES, before anything is read.
        """
        try:
            content_length = int(self.headers.get("Content-Length") or 0)
        except ValueError as e:
            raise MalformedRequestError("Content-Length is not a number") from e
        if content_length > MAX_BODY_BYTES:
            raise PayloadTooLargeError(f"Content-Length {content_length} exceeds {MAX_BODY_BYTES} bytes")
        return self.rfile.read(content_length) if content_length > 0 else b""

    def send_body(self, status: int, body: bytes, content_type: str) -> None:
        """Write a complete response and flush it so the caller is released."""
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)
        self.wfile.flush()
        self.responded = True

    def send_text(self, status: int, text: str) -> None:
        self.send_body(status, text.encode("utf-8"), "text/plain; charset=utf-8")

    def send_json(self, status: int, payload: dict) -> None:
        self.send_body(status, json.dumps(payload).encode("utf-8"), "application/json")

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(format % args, client=self.address_string())
