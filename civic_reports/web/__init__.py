"""Web adapter: HTTP server and request handlers."""

from civic_reports.web.handlers import (
    Response,
    handle_api_issues,
    handle_health,
    handle_index,
    handle_submit,
)
from civic_reports.web.server import CivicRequestHandler, make_server, run_server

__all__ = [
    "Response",
    "handle_api_issues",
    "handle_health",
    "handle_index",
    "handle_submit",
    "CivicRequestHandler",
    "make_server",
    "run_server",
]
