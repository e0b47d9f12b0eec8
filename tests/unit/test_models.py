"""
Unit tests for schema helpers.

Run: pytest tests/unit/test_models.py -v
"""

import pytest
from pydantic import ValidationError

from models.tasting import PendingTastingEdit, PendingTastingCreate, TastingEditPatch
from models.wine_queue import JobStatus, QueuedWineJob
from models.sync import ReconcileReport, ReconcileEntry, ReconcileOutcome
from models.sharing import InvitationRequest


class TestJobStatus:

    @pytest.mark.parametrize("raw, expected", [
        ("pending", JobStatus.PENDING),
        ("working", JobStatus.WORKING),
        ("completed", JobStatus.COMPLETED),
        ("failed", JobStatus.FAILED),
        (" Completed ", JobStatus.COMPLETED),
        ("processing", JobStatus.UNKNOWN),
        ("", JobStatus.UNKNOWN),
        (None, JobStatus.UNKNOWN),
    ])
    def test_parse(self, raw, expected):
        assert JobStatus.parse(raw) == expected

    def test_in_flight(self):
        assert JobStatus.PENDING.is_in_flight
        assert JobStatus.WORKING.is_in_flight
        assert not JobStatus.COMPLETED.is_in_flight
        assert JobStatus.UNKNOWN.is_terminal

    def test_job_from_row(self):
        job = QueuedWineJob.from_row({"id": "job-1", "status": "weird", "scan_id": "scan-1"})

        assert job.status == JobStatus.UNKNOWN
        assert job.scan_id == "scan-1"


class TestTastingEditPatch:

    def test_drops_empty_values(self):
        edit = PendingTastingEdit(
            job_id="job-1",
            rating=0,
            notes="  ",
            detailed_notes="",
            location_name="Bar",
            location_city=None
        )

        assert edit.to_patch().to_update() == {"location_name": "Bar"}

    def test_empty_patch(self):
        assert TastingEditPatch(verdict=-1, notes="").is_empty

    def test_rating_becomes_verdict(self):
        patch = PendingTastingEdit(job_id="job-1", rating=5).to_patch()

        assert patch.to_update() == {"verdict": 5}


class TestPendingTastingEdit:

    def test_accepts_wines_added_id(self):
        assert PendingTastingEdit.model_validate({"wines_added_id": "job-3"}).job_id == "job-3"

    def test_requires_job_id(self):
        with pytest.raises(ValidationError):
            PendingTastingEdit.model_validate({"notes": "orphan"})

    def test_create_request_to_edit(self):
        request = PendingTastingCreate(wines_added_id="job-4", rating=3, notes="Jammy")

        edit = request.to_edit()

        assert edit.job_id == "job-4"
        assert edit.rating == 3
        assert edit.attempts == 0

    def test_create_request_rejects_out_of_range_rating(self):
        with pytest.raises(ValidationError):
            PendingTastingCreate(job_id="job-4", rating=6)

    @pytest.mark.parametrize("raw, expected", [
        (4, 4),
        (4.0, 4),
        ("3", 3),
        (4.5, None),
        ("", None),
        ("four", None),
        (True, None),
        ([4], None),
    ])
    def test_stored_rating_is_lenient(self, raw, expected):
        edit = PendingTastingEdit.model_validate({"job_id": "job-1", "rating": raw, "notes": "kept"})

        assert edit.rating == expected
        assert edit.notes == "kept"

    def test_non_text_fields_read_as_unset(self):
        edit = PendingTastingEdit.model_validate({"job_id": "job-1", "notes": 12, "location_city": "Porto"})

        assert edit.notes is None
        assert edit.location_city == "Porto"


class TestReconcileReport:

    def test_lost_collects_dropped_entries(self):
        report = ReconcileReport(entries=[
            ReconcileEntry(job_id="a", outcome=ReconcileOutcome.MERGED, tasting_id="t-1"),
            ReconcileEntry(job_id="b", outcome=ReconcileOutcome.DISCARDED),
            ReconcileEntry(job_id="c", outcome=ReconcileOutcome.RETAINED),
            ReconcileEntry(job_id="d", outcome=ReconcileOutcome.UNMATCHED),
            ReconcileEntry(job_id="e", outcome=ReconcileOutcome.ABANDONED),
            ReconcileEntry(job_id="f", outcome=ReconcileOutcome.ERRORED),
        ], remaining=2)

        assert [e.job_id for e in report.lost] == ["b", "d", "e"]
        assert report.merged == ["a"]
        assert report.retained == ["c"]
        assert report.errored == ["f"]


class TestInvitationRequest:

    def test_valid_email(self):
        assert InvitationRequest(viewer_email="a@b.co").viewer_email == "a@b.co"

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            InvitationRequest(viewer_email="not-an-email")
