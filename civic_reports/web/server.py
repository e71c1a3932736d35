"""HTTP server for the issue page, the report form and the JSON listing.

HTTPServer handles one request at a time, so the store is never touched
concurrently.
"""

import logging
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Dict
from urllib.parse import parse_qs, urlsplit

from civic_reports.config import ServerConfig
from civic_reports.issue_store import IssueStore
from civic_reports.web.handlers import (
    Response,
    handle_api_issues,
    handle_health,
    handle_index,
    handle_submit,
)

LOG = logging.getLogger("civic_reports.web.server")


def parse_params(raw: str) -> Dict[str, str]:
    """Query string or urlencoded body to a dict of first values."""
    return {k: v[0] for k, v in parse_qs(raw, keep_blank_values=True).items()}


def parse_content_length(value: str | None) -> int | None:
    """Body length from the header; None if it is not a non-negative integer."""
    if value is None or value.strip() == "":
        return 0
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length >= 0 else None


class CivicRequestHandler(BaseHTTPRequestHandler):
    """GET /, /api/issues, /health and POST /issues."""

    store: IssueStore

    def do_GET(self) -> None:
        url = urlsplit(self.path)
        params = parse_params(url.query)
        if url.path == "/":
            self._send(handle_index(self.store, params))
        elif url.path == "/api/issues":
            self._send(handle_api_issues(self.store, params))
        elif url.path == "/health":
            self._send(handle_health())
        else:
            self._send(Response(404, "Not found", content_type="text/plain; charset=utf-8"))

    def do_POST(self) -> None:
        if urlsplit(self.path).path != "/issues":
            self._send(Response(404, "Not found", content_type="text/plain; charset=utf-8"))
            return
        length = parse_content_length(self.headers.get("Content-Length"))
        if length is None:
            self._send(Response(400, "Invalid Content-Length", content_type="text/plain; charset=utf-8"))
            return
        body = self.rfile.read(length) if length else b""
        form = parse_params(body.decode("utf-8", errors="replace"))
        self._send(handle_submit(self.store, form))

    def _send(self, response: Response) -> None:
        data = response.body.encode("utf-8")
        self.send_response(response.status)
        self.send_header("Content-Type", response.content_type)
        self.send_header("Content-Length", str(len(data)))
        for name, value in response.headers.items():
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format: str, *args: Any) -> None:
        LOG.debug(format, *args)


def make_server(config: ServerConfig, store: IssueStore) -> HTTPServer:
    """Bind an HTTPServer whose handler serves the given store."""
    handler = type("BoundCivicRequestHandler", (CivicRequestHandler,), {"store": store})
    return HTTPServer((config.host, config.port), handler)


def run_server(config: ServerConfig, store: IssueStore) -> None:
    """Serve until interrupted."""
    server = make_server(config, store)
    LOG.info("Civic reports listening on http://%s:%s", config.host, server.server_port)
    try:
        server.serve_forever()
    finally:
        server.server_close()
