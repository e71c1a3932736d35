"""Application bootstrap: storage backend and issue store from config."""

import logging

from civic_reports.config import AppConfig, StorageConfig
from civic_reports.issue_store import IssueStore
from civic_reports.storage import FileStorage, KeyValueStorage, MemoryStorage, PersistenceWriteError

LOG = logging.getLogger("civic_reports.app")


def build_storage(config: StorageConfig) -> KeyValueStorage:
    """Create the key-value backend named by config.backend."""
    if config.backend == "memory":
        return MemoryStorage(quota_bytes=config.quota_bytes)
    if config.backend == "file":
        return FileStorage(config.path, quota_bytes=config.quota_bytes)
    raise ValueError(f"Unknown storage backend: {config.backend!r} (expected file or memory)")


def build_store(config: AppConfig) -> IssueStore:
    """Load the collection, then seed it if empty and seeding is enabled."""
    store = IssueStore(build_storage(config.storage), key=config.storage.key)
    store.load()
    if config.storage.seed_sample_data:
        try:
            store.seed_if_empty()
        except PersistenceWriteError:
            LOG.error("Sample issues are shown for this session only; storage rejected them")
    LOG.info("Issue store ready | backend=%s | issues=%s", config.storage.backend, len(store))
    return store
