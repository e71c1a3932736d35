"""HTML rendering of issues: cards, the list, and the full page."""

from datetime import datetime
from html import escape
from typing import Iterable, Sequence

from civic_reports.issue_store import FILTER_ALL, format_status
from civic_reports.schemas import ISSUE_TYPES, PRIORITIES, STATUSES, Issue

NO_ISSUES_HTML = '<div class="no-issues">No issues found</div>'

NOTIFICATION_MS = 3000

PAGE_STYLE = """
body { font-family: sans-serif; margin: 0 auto; max-width: 960px; padding: 1rem; }
.issue-card { border: 1px solid #ddd; border-left-width: 4px; padding: 1rem; margin: 1rem 0; }
.priority-high { border-left-color: #c0392b; }
.priority-medium { border-left-color: #e67e22; }
.priority-low { border-left-color: #27ae60; }
.issue-header { display: flex; justify-content: space-between; }
.issue-photo { max-width: 100%; }
.no-issues { color: #777; padding: 2rem; text-align: center; }
.notification { position: fixed; top: 20px; right: 20px; background: #2c2c2c; color: white;
  padding: 1rem 2rem; border-radius: 4px; z-index: 1000; animation: slideIn 0.3s ease; }
@keyframes slideIn { from { transform: translateX(100%); opacity: 0; } to { transform: translateX(0); opacity: 1; } }
"""


def format_date(value: str) -> str:
    """Short US date (M/D/YYYY) of an ISO timestamp; unparseable input is returned as-is."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def render_issue_card(issue: Issue) -> str:
    photo_html = ""
    if issue.photo:
        photo_html = f'<img src="{escape(issue.photo)}" alt="Issue photo" class="issue-photo">'
    return f"""
<div class="issue-card priority-{escape(issue.priority)}">
  <div class="issue-header">
    <span class="issue-type">{escape(issue.type)}</span>
    <span class="issue-status status-{escape(issue.status)}">{escape(format_status(issue.status))}</span>
  </div>
  {photo_html}
  <div class="issue-description">{escape(issue.description)}</div>
  <div class="issue-location">📍 {escape(issue.location)}</div>
  <div class="issue-date">Reported: {escape(format_date(issue.date))}</div>
</div>"""


def render_issue_list(issues: Sequence[Issue]) -> str:
    """Cards for every issue, or the "No issues found" placeholder."""
    if not issues:
        return NO_ISSUES_HTML
    return "".join(render_issue_card(issue) for issue in issues)


def _options(values: Iterable[str], selected: str, label=lambda v: v) -> str:
    out = []
    for value in values:
        attr = " selected" if value == selected else ""
        out.append(f'<option value="{escape(value)}"{attr}>{escape(label(value))}</option>')
    return "".join(out)


def _notification(notice: str) -> str:
    return (
        f'<div class="notification" id="notification">{escape(notice)}</div>'
        f"<script>setTimeout(function () {{ var n = document.getElementById('notification');"
        f" if (n) {{ n.remove(); }} }}, {NOTIFICATION_MS});</script>"
    )


def render_page(
    issues: Sequence[Issue],
    search_term: str = "",
    status_filter: str = FILTER_ALL,
    notice: str | None = None,
) -> str:
    """Full page: report form, search and status filter, the issue list."""
    type_options = _options(ISSUE_TYPES, "", label=str.capitalize)
    priority_options = _options(PRIORITIES, "medium", label=str.capitalize)
    filter_options = _options((FILTER_ALL, *STATUSES), status_filter or FILTER_ALL, label=format_status)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Civic Issue Reporting</title>
<style>{PAGE_STYLE}</style>
</head>
<body>
{_notification(notice) if notice else ""}
<h1>Civic Issue Reporting</h1>
<section>
  <h2>Report an Issue</h2>
  <form id="reportForm" method="post" action="/issues">
    <label>Issue type <select id="issueType" name="type" required>{type_options}</select></label>
    <label>Description <textarea id="description" name="description" required></textarea></label>
    <label>Location <input id="location" name="location" required></label>
    <label>Priority <select id="priority" name="priority">{priority_options}</select></label>
    <label>Photo URL <input id="photo" name="photo" type="url"></label>
    <button type="submit">Submit Report</button>
  </form>
</section>
<section>
  <h2>Reported Issues</h2>
  <form method="get" action="/">
    <input id="searchInput" name="search" placeholder="Search issues..." value="{escape(search_term or "")}">
    <select id="filterStatus" name="status">{filter_options}</select>
    <button type="submit">Apply</button>
  </form>
  <div id="issuesList">{render_issue_list(issues)}</div>
</section>
</body>
</html>
"""
