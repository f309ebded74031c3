"""Shared fixtures: file-backed stores in tmp_path and a test configuration."""

from typing import Any

import pytest

from hirepath.core.config.loader import ConfigLoader
from hirepath.core.storage.blob_store import BlobStore
from hirepath.core.storage.object_store import ObjectStore
from hirepath.integrations.notifier import Notifier


class CollectingNotifier(Notifier):
    """Keeps delivered payloads in memory instead of sending them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, dict[str, Any]]] = []

    def _deliver(self, candidate_id: str, payload: dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("mail server unreachable")
        self.sent.append((candidate_id, payload))


@pytest.fixture
def config(tmp_path, monkeypatch) -> dict[str, Any]:
    monkeypatch.setenv("HIREPATH_ENV", "test")
    return ConfigLoader().load(
        overrides={
            "storage": {
                "object_store_dir": str(tmp_path / "store"),
                "blob_dir": str(tmp_path / "blobs"),
            }
        }
    )


@pytest.fixture
def store(tmp_path) -> ObjectStore:
    return ObjectStore(tmp_path / "store", retry_wait_min=0, retry_wait_max=0)


@pytest.fixture
def blobs(tmp_path) -> BlobStore:
    return BlobStore(tmp_path / "blobs")


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def failing_notifier() -> CollectingNotifier:
    return CollectingNotifier(fail=True)
