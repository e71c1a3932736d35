"""Request handlers: submission, search and filter events against the issue store.

Handlers are plain functions of (store, request data) returning a Response,
so they can be exercised without a running server.
"""

import json
import logging
from typing import Dict, Mapping
from urllib.parse import urlencode

from civic_reports.issue_store import FILTER_ALL, IssueStore, format_status
from civic_reports.render import render_page
from civic_reports.schemas import IssueInput
from civic_reports.storage import PersistenceWriteError

SUCCESS_NOTICE = "Issue reported successfully!"

LOG = logging.getLogger("civic_reports.web.handlers")


class Response:
    """Status, content type, body and extra headers of an HTTP reply."""

    def __init__(
        self,
        status: int,
        body: str = "",
        content_type: str = "text/html; charset=utf-8",
        headers: Dict[str, str] | None = None,
    ) -> None:
        self.status = status
        self.body = body
        self.content_type = content_type
        self.headers = headers or {}


def _query_args(params: Mapping[str, str]) -> tuple[str, str]:
    return params.get("search", ""), params.get("status") or FILTER_ALL


def handle_index(store: IssueStore, params: Mapping[str, str]) -> Response:
    """Render the page for the current search term and status filter.

    reported=1 shows the success notification after a submission redirect.
    """
    search, status = _query_args(params)
    issues = store.query(search, status)
    notice = SUCCESS_NOTICE if params.get("reported") == "1" else None
    return Response(200, render_page(issues, search, status, notice=notice))


def handle_submit(store: IssueStore, form: Mapping[str, str]) -> Response:
    """Create an issue from form fields; redirect back with a notice on success."""
    data = IssueInput(
        type=form.get("type", ""),
        description=form.get("description", ""),
        location=form.get("location", ""),
        priority=form.get("priority", ""),
        photo=form.get("photo") or None,
    )
    try:
        store.create(data)
    except PersistenceWriteError as e:
        notice = f"Issue saved for this session but could not be stored: {e}"
        return Response(507, render_page(store.query(), notice=notice))
    return Response(303, headers={"Location": "/?" + urlencode({"reported": "1"})})


def handle_api_issues(store: IssueStore, params: Mapping[str, str]) -> Response:
    """JSON array of matching issues, each with its display statusLabel."""
    search, status = _query_args(params)
    payload = [
        {**issue.model_dump(mode="json"), "statusLabel": format_status(issue.status)}
        for issue in store.query(search, status)
    ]
    return Response(200, json.dumps(payload, ensure_ascii=False), content_type="application/json")


def handle_health() -> Response:
    return Response(200, json.dumps({"status": "ok", "service": "civic-reports"}), content_type="application/json")
