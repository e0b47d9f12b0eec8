"""
Unit tests for the pending tasting stores.

Run: pytest tests/unit/test_pending_tasting_store.py -v
"""

import json
import pytest
from datetime import datetime, timezone

from services.pending_tasting_store import (
    InMemoryPendingTastingStore,
    JsonFilePendingTastingStore,
)
from exceptions import PendingStoreCorruptError
from tests.factories import PendingTastingEditFactory


class TestInMemoryPendingTastingStore:

    def test_starts_empty(self):
        assert InMemoryPendingTastingStore().load() == []

    def test_load_returns_copies(self):
        """Changing a loaded edit should not change the stored one."""
        store = InMemoryPendingTastingStore([PendingTastingEditFactory.create(job_id="job-1", notes="a")])

        loaded = store.load()
        loaded[0].notes = "changed"

        assert store.load()[0].notes == "a"


class TestJsonFilePendingTastingStore:
    """Tests for JsonFilePendingTastingStore"""

    def test_missing_file_loads_empty(self, tmp_path):
        store = JsonFilePendingTastingStore(tmp_path / "missing.json")

        assert store.load() == []

    def test_save_then_load_keeps_fields(self, tmp_path):
        """Should persist every field, including retry bookkeeping."""
        store = JsonFilePendingTastingStore(tmp_path / "store.json")
        retry_at = datetime(2025, 10, 1, 12, 5, tzinfo=timezone.utc)
        edit = PendingTastingEditFactory.create(
            job_id="job-1",
            rating=5,
            notes="Peppery",
            attempts=2,
            next_attempt_at=retry_at
        )

        store.save([edit])
        loaded = store.load()

        assert len(loaded) == 1
        assert loaded[0].job_id == "job-1"
        assert loaded[0].rating == 5
        assert loaded[0].notes == "Peppery"
        assert loaded[0].location_city == "Lisboa"
        assert loaded[0].attempts == 2
        assert loaded[0].next_attempt_at == retry_at

    def test_save_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "store.json"
        store = JsonFilePendingTastingStore(path)

        store.save([PendingTastingEditFactory.create()])

        assert path.exists()

    def test_save_preserves_other_slots(self, tmp_path):
        """Should only rewrite its own key."""
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"pendingInviteCode": "ABC123"}))
        store = JsonFilePendingTastingStore(path)

        store.save([PendingTastingEditFactory.create(job_id="job-1")])

        document = json.loads(path.read_text())
        assert document["pendingInviteCode"] == "ABC123"
        assert [row["job_id"] for row in document["pendingTastings"]] == ["job-1"]

    def test_saving_empty_list_clears_slot(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"pendingInviteCode": "ABC123"}))
        store = JsonFilePendingTastingStore(path)
        store.save([PendingTastingEditFactory.create()])

        store.save([])

        document = json.loads(path.read_text())
        assert "pendingTastings" not in document
        assert document["pendingInviteCode"] == "ABC123"
        assert store.load() == []

    def test_custom_slot_key(self, tmp_path):
        path = tmp_path / "store.json"
        store = JsonFilePendingTastingStore(path, key="edits")

        store.save([PendingTastingEditFactory.create(job_id="job-1")])

        assert "edits" in json.loads(path.read_text())

    def test_decodes_wines_added_id_key(self, tmp_path):
        """Rows written by mobile clients use wines_added_id."""
        path = tmp_path / "store.json"
        path.write_text(json.dumps({
            "pendingTastings": [
                {"wines_added_id": "job-9", "rating": 3, "notes": "From the phone"}
            ]
        }))

        loaded = JsonFilePendingTastingStore(path).load()

        assert loaded[0].job_id == "job-9"
        assert loaded[0].notes == "From the phone"

    def test_invalid_rows_are_skipped(self, tmp_path):
        """A row without a job id should not block the rest."""
        path = tmp_path / "store.json"
        path.write_text(json.dumps({
            "pendingTastings": [
                {"notes": "no job id"},
                {"job_id": "job-2", "notes": "ok"},
            ]
        }))

        loaded = JsonFilePendingTastingStore(path).load()

        assert [e.job_id for e in loaded] == ["job-2"]

    def test_unparseable_file_raises(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")

        with pytest.raises(PendingStoreCorruptError):
            JsonFilePendingTastingStore(path).load()

    def test_non_object_document_raises(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(PendingStoreCorruptError):
            JsonFilePendingTastingStore(path).load()

    def test_non_list_slot_raises(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"pendingTastings": "oops"}))

        with pytest.raises(PendingStoreCorruptError):
            JsonFilePendingTastingStore(path).load()

    def test_corrupt_file_is_not_overwritten_on_save(self, tmp_path):
        """Saving over a file we cannot read should fail, not wipe it."""
        path = tmp_path / "store.json"
        path.write_text("{not json")

        with pytest.raises(PendingStoreCorruptError):
            JsonFilePendingTastingStore(path).save([PendingTastingEditFactory.create()])

        assert path.read_text() == "{not json"

    def test_bad_field_does_not_drop_the_edit(self, tmp_path):
        """A rating that is not a whole number reads as unset; the notes survive."""
        path = tmp_path / "store.json"
        path.write_text(json.dumps({
            "pendingTastings": [
                {"wines_added_id": "job-1", "rating": 4.5, "notes": "keep me"},
                {"wines_added_id": "job-2", "rating": "", "notes": "keep me too"},
                {"wines_added_id": "job-3", "attempts": "lots", "next_attempt_at": "soon"},
            ]
        }))
        store = JsonFilePendingTastingStore(path)

        loaded = store.load()

        assert [e.job_id for e in loaded] == ["job-1", "job-2", "job-3"]
        assert [e.rating for e in loaded] == [None, None, None]
        assert [e.notes for e in loaded[:2]] == ["keep me", "keep me too"]
        assert loaded[2].attempts == 0
        assert loaded[2].next_attempt_at is None

        store.save(loaded)

        rows = json.loads(path.read_text())["pendingTastings"]
        assert [row["notes"] for row in rows] == ["keep me", "keep me too", None]

    def test_user_id_is_persisted(self, tmp_path):
        store = JsonFilePendingTastingStore(tmp_path / "store.json")

        store.save([PendingTastingEditFactory.create(job_id="job-1", user_id="user-1")])

        assert store.load()[0].user_id == "user-1"
