"""Tests for IssueStore (load, seed_if_empty, create, query, persist) and format_status."""

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import patch

import pytest

from civic_reports.issue_store import FILTER_ALL, IssueStore, format_status
from civic_reports.schemas import IssueInput
from civic_reports.storage import FileStorage, MemoryStorage, PersistenceWriteError, QuotaExceededError

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


def _store(storage=None, now: datetime = NOW) -> IssueStore:
    return IssueStore(storage if storage is not None else MemoryStorage(), clock=lambda: now)


def _input(**overrides) -> IssueInput:
    fields = {
        "type": "pothole",
        "description": "Deep hole in the road",
        "location": "Elm Street",
        "priority": "high",
        "photo": None,
    }
    fields.update(overrides)
    return IssueInput(**fields)


class TestFormatStatus:
    """format_status turns hyphenated tokens into title-cased labels."""

    def test_known_statuses(self) -> None:
        """The three statuses map to their display labels."""
        assert format_status("in-progress") == "In Progress"
        assert format_status("pending") == "Pending"
        assert format_status("resolved") == "Resolved"

    def test_only_first_letter_changes(self) -> None:
        """Rest of each word is left untouched."""
        assert format_status("on-HOLD-soon") == "On HOLD Soon"

    def test_empty_string(self) -> None:
        """Empty status gives an empty label."""
        assert format_status("") == ""


class TestLoad:
    """load() reads the slot and falls back to empty on bad data."""

    def test_missing_slot_gives_empty(self) -> None:
        """Nothing stored yields an empty collection."""
        store = _store()
        assert store.load() == []
        assert len(store) == 0

    def test_malformed_json_gives_empty(self) -> None:
        """Invalid JSON is not raised."""
        storage = MemoryStorage()
        storage.set_item("civicIssues", "{not json")
        assert _store(storage).load() == []

    @pytest.mark.parametrize("raw", ["[" * 200000, "[" * 200000 + "]" * 200000])
    def test_deeply_nested_json_gives_empty(self, raw: str) -> None:
        """Nesting deep enough to exhaust the JSON decoder is treated as malformed."""
        storage = MemoryStorage()
        storage.set_item("civicIssues", raw)
        assert _store(storage).load() == []

    def test_non_list_gives_empty(self) -> None:
        """A JSON object instead of an array is treated as malformed."""
        storage = MemoryStorage()
        storage.set_item("civicIssues", json.dumps({"id": "1"}))
        assert _store(storage).load() == []

    def test_record_missing_fields_gives_empty(self) -> None:
        """A record without required fields makes the whole value malformed."""
        storage = MemoryStorage()
        storage.set_item("civicIssues", json.dumps([{"id": "1", "type": "water"}]))
        assert _store(storage).load() == []

    def test_corrupt_storage_file_gives_empty(self, tmp_path: Path) -> None:
        """An unreadable backing file is recovered as empty."""
        path = tmp_path / "storage.json"
        path.write_text("garbage", encoding="utf-8")
        store = _store(FileStorage(path))
        assert store.load() == []

    def test_inaccessible_storage_file_gives_empty(self, tmp_path: Path) -> None:
        """A permission error on the storage path is recovered as empty."""
        store = _store(FileStorage(tmp_path / "storage.json"))
        with patch.object(Path, "is_file", side_effect=PermissionError("denied")):
            assert store.load() == []

    def test_extra_keys_are_ignored(self) -> None:
        """Unknown keys in stored records do not break loading."""
        record = {
            "id": "5",
            "type": "water",
            "description": "Leak",
            "location": "Pier",
            "priority": "low",
            "status": "pending",
            "date": "2024-01-01T00:00:00.000Z",
            "photo": None,
            "votes": 3,
        }
        storage = MemoryStorage()
        storage.set_item("civicIssues", json.dumps([record]))
        issues = _store(storage).load()
        assert len(issues) == 1
        assert issues[0].id == "5"

    def test_load_replaces_in_memory_collection(self) -> None:
        """load() discards anything created but never persisted elsewhere."""
        storage = MemoryStorage()
        first = _store(storage)
        first.create(_input())
        second = _store(storage)
        second.load()
        assert [i.id for i in second] == [i.id for i in first]


class TestCreate:
    """create() prepends a pending issue and persists everything."""

    def test_fields_match_input(self) -> None:
        """New issue carries the input fields, pending status and now as date."""
        store = _store()
        issue = store.create(_input(photo="blob:session/abc"))
        assert store.issues[0] is issue
        assert issue.type == "pothole"
        assert issue.description == "Deep hole in the road"
        assert issue.location == "Elm Street"
        assert issue.priority == "high"
        assert issue.status == "pending"
        assert issue.photo == "blob:session/abc"
        assert issue.date == "2024-05-01T12:00:00.000Z"
        assert issue.id == str(int(NOW.timestamp() * 1000))

    def test_empty_photo_becomes_none(self) -> None:
        """An empty photo reference is stored as null."""
        issue = _store().create(_input(photo=""))
        assert issue.photo is None

    def test_empty_fields_are_accepted(self) -> None:
        """No validation: blank fields are kept verbatim."""
        issue = _store().create(IssueInput())
        assert issue.description == ""
        assert issue.type == ""

    def test_prepends_and_keeps_existing(self) -> None:
        """Each call adds exactly one issue at index 0."""
        store = _store()
        store.seed_if_empty()
        before = [i.model_dump() for i in store]
        store.create(_input(description="first"))
        store.create(_input(description="second"))
        assert len(store) == len(before) + 2
        assert store.issues[0].description == "second"
        assert store.issues[1].description == "first"
        assert [i.model_dump() for i in store.issues[2:]] == before

    def test_ids_unique_within_same_millisecond(self) -> None:
        """Two creations at the same instant still get distinct ids."""
        store = _store()
        a = store.create(_input())
        b = store.create(_input())
        assert a.id != b.id
        assert int(b.id) > int(a.id)

    def test_persists_full_collection(self) -> None:
        """The slot holds the whole collection after create."""
        storage = MemoryStorage()
        store = _store(storage)
        store.create(_input())
        stored = json.loads(storage.get_item("civicIssues"))
        assert len(stored) == 1
        assert set(stored[0]) == {"id", "type", "description", "location", "priority", "status", "date", "photo"}
        assert stored[0]["photo"] is None

    def test_write_failure_raises_and_keeps_issue(self) -> None:
        """A failed write propagates but the issue stays in memory."""
        storage = MemoryStorage()
        store = _store(storage)
        with patch.object(storage, "set_item", side_effect=PersistenceWriteError("disk full")):
            with pytest.raises(PersistenceWriteError, match="disk full"):
                store.create(_input(description="unsaved"))
        assert store.issues[0].description == "unsaved"

    def test_quota_exceeded_surfaces(self) -> None:
        """Exceeding the storage quota is reported as a write error."""
        store = _store(MemoryStorage(quota_bytes=50))
        with pytest.raises(QuotaExceededError):
            store.create(_input())
        assert len(store) == 1


class TestSeedIfEmpty:
    """seed_if_empty() inserts the four sample issues once."""

    def test_seeds_four_samples(self) -> None:
        """Empty collection receives the literal sample records."""
        store = _store()
        assert store.seed_if_empty() is True
        summary = [(i.type, i.priority, i.status, i.location) for i in store]
        assert summary == [
            ("pothole", "high", "in-progress", "Main Street near City Park"),
            ("streetlight", "medium", "pending", "5th Avenue and Oak Street intersection"),
            ("garbage", "medium", "resolved", "Residential area on Elm Street"),
            ("water", "high", "in-progress", "Downtown Commercial District"),
        ]
        assert [i.id for i in store] == ["1", "2", "3", "4"]

    def test_sample_dates_relative_to_now(self) -> None:
        """Sample dates are one day, two days, three days and twelve hours ago."""
        store = _store()
        store.seed_if_empty()
        dates = [datetime.fromisoformat(i.date.replace("Z", "+00:00")) for i in store]
        assert dates == [
            NOW - timedelta(days=1),
            NOW - timedelta(days=2),
            NOW - timedelta(days=3),
            NOW - timedelta(hours=12),
        ]

    def test_seeding_persists(self) -> None:
        """Seeded issues are written to the slot."""
        storage = MemoryStorage()
        _store(storage).seed_if_empty()
        assert len(json.loads(storage.get_item("civicIssues"))) == 4

    def test_noop_when_not_empty(self) -> None:
        """Second call, or a non-empty collection, changes nothing."""
        store = _store()
        store.create(_input())
        snapshot = [i.model_dump() for i in store]
        assert store.seed_if_empty() is False
        assert [i.model_dump() for i in store] == snapshot


class TestQuery:
    """query() filters by search term and status, preserving order."""

    @pytest.fixture
    def store(self) -> IssueStore:
        store = _store()
        store.seed_if_empty()
        return store

    def test_empty_term_all_returns_everything(self, store: IssueStore) -> None:
        """No term and "all" returns the full collection in order."""
        assert store.query("", FILTER_ALL) == store.issues
        assert store.query() == store.issues

    def test_result_is_a_new_list(self, store: IssueStore) -> None:
        """Mutating the result does not touch the collection."""
        result = store.query()
        result.clear()
        assert len(store) == 4

    def test_status_filter(self, store: IssueStore) -> None:
        """Only issues with the given status, in order."""
        result = store.query("", "in-progress")
        assert [i.id for i in result] == ["1", "4"]
        assert [i.id for i in store.query("", "resolved")] == ["3"]

    def test_search_is_case_insensitive_on_type(self, store: IssueStore) -> None:
        """Upper-case term matches a lower-case type."""
        assert [i.id for i in store.query("POTHOLE")] == ["1"]

    def test_search_matches_location_and_description(self, store: IssueStore) -> None:
        """Term is looked up in location and description too."""
        assert [i.id for i in store.query("elm street")] == ["3"]
        assert [i.id for i in store.query("Flickering")] == ["2"]

    def test_search_and_status_are_combined(self, store: IssueStore) -> None:
        """Both predicates must hold."""
        assert [i.id for i in store.query("street", "pending")] == ["2"]
        assert store.query("pothole", "resolved") == []

    def test_no_match_is_empty_list(self, store: IssueStore) -> None:
        """No matches gives an empty list."""
        assert store.query("volcano") == []


class TestPersistRoundTrip:
    """persist() then load() reproduces the collection."""

    def test_round_trip_through_file(self, tmp_path: Path) -> None:
        """Same ids, fields and order after reloading from disk."""
        path = tmp_path / "storage.json"
        store = _store(FileStorage(path))
        store.seed_if_empty()
        store.create(_input(photo="https://example.org/p.jpg"))
        store.persist()

        reloaded = _store(FileStorage(path))
        reloaded.load()
        assert [i.model_dump() for i in reloaded] == [i.model_dump() for i in store]

    def test_custom_key(self) -> None:
        """Store writes under its configured key."""
        storage = MemoryStorage()
        store = IssueStore(storage, key="otherKey", clock=lambda: NOW)
        store.create(_input())
        assert storage.get_item("civicIssues") is None
        assert storage.get_item("otherKey") is not None
