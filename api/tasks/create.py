"""Task creation endpoint for Vercel."""

from http.server import BaseHTTPRequestHandler
import json
import asyncio

from src.services.task_creator import handle_create_task, INVALID_BODY_MESSAGE
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
}


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler for task creation."""

    def _send(self, status: int, body: str, content_type: str = None):
        self.send_response(status)
        for name, value in CORS_HEADERS.items():
            self.send_header(name, value)
        if content_type:
            self.send_header('Content-Type', content_type)
        self.end_headers()
        self.wfile.write(body.encode('utf-8'))

    def _send_json(self, status: int, payload: dict):
        self._send(status, json.dumps(payload), 'application/json')

    def _read_json(self):
        content_length = int(self.headers.get('Content-Length', 0) or 0)
        raw_body = self.rfile.read(content_length).decode('utf-8') if content_length > 0 else ""
        return json.loads(raw_body)

    def do_OPTIONS(self):
        """Handle CORS preflight."""
        self._send(200, 'ok')

    def do_POST(self):
        """Create a task for an application."""
        correlation_id = self.headers.get(LoggingConfig.LOG_CORRELATION_ID_HEADER)

        with correlation_context(correlation_id):
            try:
                body = self._read_json()
            except (ValueError, UnicodeDecodeError) as e:
                logger.info("Rejected unparseable request body", error=str(e))
                self._send_json(400, {"error": INVALID_BODY_MESSAGE})
                return

            try:
                status, payload = asyncio.run(handle_create_task(body))
            except Exception as e:
                logger.exception(f"Error processing task creation: {e}")
                status, payload = 500, {"error": str(e)}

            self._send_json(status, payload)

    def _method_not_allowed(self):
        self._send_json(405, {"error": "Method not allowed"})

    do_GET = _method_not_allowed
    do_PUT = _method_not_allowed
    do_PATCH = _method_not_allowed
    do_DELETE = _method_not_allowed
