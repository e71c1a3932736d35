"""In-memory issue collection persisted whole to a single key-value slot.

The collection is newest-first: create() prepends. Every mutation rewrites
the full snapshot under the storage key; there are no partial updates.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Callable, Iterator, List

from civic_reports.sample_data import sample_issues
from civic_reports.schemas import STATUS_PENDING, Issue, IssueInput, iso_timestamp
from civic_reports.storage import KeyValueStorage, PersistenceReadError, PersistenceWriteError

STORAGE_KEY = "civicIssues"
FILTER_ALL = "all"

LOG = logging.getLogger("civic_reports.issue_store")


def format_status(status: str) -> str:
    """Turn a status token into a label: "in-progress" -> "In Progress"."""
    return " ".join(word[:1].upper() + word[1:] for word in status.split("-"))


def _utc_now() -> datetime:
    return datetime.now(UTC)


class IssueStore:
    """Owns the issue list and mediates every read and write of the slot."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = STORAGE_KEY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self._clock = clock or _utc_now
        self._last_id_ms = 0
        self.issues: List[Issue] = []

    def __len__(self) -> int:
        return len(self.issues)

    def __iter__(self) -> Iterator[Issue]:
        return iter(self.issues)

    def load(self) -> List[Issue]:
        """Replace the collection with the persisted one.

        Missing, unreadable or malformed data yields an empty collection;
        nothing is raised.
        """
        self.issues = []
        try:
            raw = self.storage.get_item(self.key)
        except PersistenceReadError as e:
            LOG.warning("Failed to read %s, starting empty: %s", self.key, e)
            return self.issues
        if not raw:
            return self.issues
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            self.issues = [Issue.model_validate(item) for item in data]
        except (ValueError, RecursionError) as e:
            LOG.warning("Stored %s is malformed, starting empty: %s", self.key, e)
            self.issues = []
        LOG.debug("Loaded %s issue(s) from %s", len(self.issues), self.key)
        return self.issues

    def persist(self) -> None:
        """Write the whole collection to the slot in one call.

        Raises PersistenceWriteError if the store rejects the write.
        """
        payload = json.dumps(
            [issue.model_dump(mode="json") for issue in self.issues],
            ensure_ascii=False,
            separators=(",", ":"),
        )
        try:
            self.storage.set_item(self.key, payload)
        except PersistenceWriteError as e:
            LOG.error("Failed to persist %s issue(s): %s", len(self.issues), e)
            raise
        LOG.debug("Persisted %s issue(s) to %s", len(self.issues), self.key)

    def seed_if_empty(self) -> bool:
        """Fill an empty collection with the sample issues. Returns True if seeded."""
        if self.issues:
            return False
        self.issues = sample_issues(self._clock())
        self.persist()
        LOG.info("Seeded %s sample issues", len(self.issues))
        return True

    def _next_id(self, now: datetime) -> str:
        ms = max(int(now.timestamp() * 1000), self._last_id_ms + 1)
        taken = {issue.id for issue in self.issues}
        while str(ms) in taken:
            ms += 1
        self._last_id_ms = ms
        return str(ms)

    def create(self, data: IssueInput) -> Issue:
        """Prepend a new pending issue and persist the collection.

        Fields are taken verbatim. If persisting fails the issue stays in
        memory and PersistenceWriteError propagates.
        """
        now = self._clock()
        issue = Issue(
            id=self._next_id(now),
            type=data.type,
            description=data.description,
            location=data.location,
            priority=data.priority,
            status=STATUS_PENDING,
            date=iso_timestamp(now),
            photo=data.photo or None,
        )
        self.issues.insert(0, issue)
        LOG.info("Created issue %s (%s, %s)", issue.id, issue.type, issue.priority)
        self.persist()
        return issue

    def query(self, search_term: str | None = None, status_filter: str = FILTER_ALL) -> List[Issue]:
        """Issues matching the search term and status, in collection order.

        The term matches description, location or type, case-insensitively;
        an empty term matches everything. "all" disables the status filter.
        """
        result = list(self.issues)
        if search_term:
            term = search_term.lower()
            result = [
                issue
                for issue in result
                if term in issue.description.lower() or term in issue.location.lower() or term in issue.type.lower()
            ]
        if status_filter and status_filter != FILTER_ALL:
            result = [issue for issue in result if issue.status == status_filter]
        LOG.debug("Query %r / %s matched %s issue(s)", search_term, status_filter, len(result))
        return result
