"""Test helper functions."""

import json
from io import BytesIO
from typing import Any, Dict, Optional
from unittest.mock import Mock


class MockSocket:
    """Minimal socket feeding a raw HTTP request to a BaseHTTPRequestHandler."""

    def __init__(self, raw_request: bytes):
        self.raw_request = raw_request

    def makefile(self, *args, **kwargs):
        return BytesIO(self.raw_request)

    def sendall(self, data):
        pass

    def close(self):
        pass


def build_raw_request(
    method: str = "POST",
    path: str = "/api/tasks/create",
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> bytes:
    """Build raw HTTP/1.1 request bytes."""
    if body is None:
        raw_body = b""
    elif isinstance(body, (bytes, str)):
        raw_body = body.encode("utf-8") if isinstance(body, str) else body
    else:
        raw_body = json.dumps(body).encode("utf-8")

    lines = [f"{method} {path} HTTP/1.1"]
    all_headers = {"Content-Type": "application/json", "Content-Length": str(len(raw_body))}
    all_headers.update(headers or {})
    lines.extend(f"{name}: {value}" for name, value in all_headers.items())
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8") + raw_body


def call_handler(handler_cls, method: str = "POST", body: Any = None, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Run a Vercel BaseHTTPRequestHandler against an in-memory request.

    Returns status, headers (dict) and raw body text.
    """
    raw = build_raw_request(method=method, body=body, headers=headers)
    response_headers: Dict[str, str] = {}
    status = {}

    original_handle = handler_cls.handle
    handler_cls.handle = lambda self: None
    try:
        h = handler_cls(MockSocket(raw), ("127.0.0.1", 8000), None)
    finally:
        handler_cls.handle = original_handle

    h.rfile = BytesIO(raw)
    h.wfile = BytesIO()
    h.send_response = Mock(side_effect=lambda code, message=None: status.update(code=code))
    h.send_header = Mock(side_effect=lambda name, value: response_headers.__setitem__(name, value))
    h.end_headers = Mock()

    h.raw_requestline = h.rfile.readline()
    assert h.parse_request()
    getattr(h, f"do_{method}")()

    h.wfile.seek(0)
    return {
        "status": status.get("code"),
        "headers": response_headers,
        "body": h.wfile.read().decode("utf-8"),
    }


def json_body(response: Dict[str, Any]) -> Dict[str, Any]:
    return json.loads(response["body"])
