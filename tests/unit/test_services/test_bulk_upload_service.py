"""Tests for the bulk upload service module."""

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from results_api.lib.bulk_upload import ReconcileOutcome
from results_api.services.bulk_upload_service import (
    _check_election_year,
    build_error_report,
    build_status_response,
    create_bulk_upload,
    new_upload_id,
    summarize_errors,
)
from results_api.services.reconcile_service import reconcile_record


def _mock_bulk_upload(**overrides: object) -> MagicMock:
    """Create a mock BulkUpload."""
    job = MagicMock()
    job.id = uuid.uuid4()
    job.upload_id = "bulk_upload_test"
    job.record_type = "constituency"
    job.election_year = 1996
    job.status = "processing"
    job.total_rows = 0
    job.processed = 0
    job.successful = 0
    job.updated = 0
    job.duplicates = 0
    job.failed = 0
    job.validation_errors = []
    job.processing_time = None
    job.completed_at = None
    for key, value in overrides.items():
        setattr(job, key, value)
    return job


class TestCreateBulkUpload:
    """Tests for create_bulk_upload."""

    @pytest.mark.asyncio
    async def test_creates_upload_in_uploaded_state(self) -> None:
        session = AsyncMock()
        session.add = MagicMock()
        user_id = uuid.uuid4()

        await create_bulk_upload(
            session,
            record_type="center",
            election_year=2018,
            file_name="centers.xlsx",
            file_size=2048,
            user_id=user_id,
            overwrite_existing=True,
        )

        session.add.assert_called_once()
        session.commit.assert_awaited_once()
        added = session.add.call_args[0][0]
        assert added.upload_id.startswith("bulk_upload_")
        assert added.record_type == "center"
        assert added.status == "uploaded"
        assert added.user_id == user_id
        assert added.overwrite_existing is True
        assert added.validate_only is False

    @pytest.mark.asyncio
    async def test_unknown_record_type_rejected(self) -> None:
        with pytest.raises(ValueError):
            await create_bulk_upload(
                AsyncMock(), record_type="ward", election_year=1996, file_name="x.csv", file_size=1
            )


def test_upload_ids_are_unique() -> None:
    assert new_upload_id() != new_upload_id()


class TestCheckElectionYear:
    def test_matching_year_passes(self) -> None:
        assert _check_election_year({"election_year": "1996.0"}, 1996) is None

    def test_mismatched_year_flagged(self) -> None:
        error = _check_election_year({"election_year": "2001"}, 1996)

        assert error is not None
        assert error.field == "election_year"
        assert "does not match" in error.message

    def test_non_numeric_left_to_validator(self) -> None:
        assert _check_election_year({"election_year": "abc"}, 1996) is None


class TestBuildStatusResponse:
    """Tests for build_status_response."""

    def test_percentage_rounded(self) -> None:
        job = _mock_bulk_upload(total_rows=3, processed=2, successful=1, failed=1)

        response = build_status_response(job)

        assert response.progress.percentage == 67
        assert response.summary.successful_inserts == 1
        assert response.summary.validation_errors == 1

    def test_zero_total_is_zero_percent(self) -> None:
        assert build_status_response(_mock_bulk_upload()).progress.percentage == 0

    def test_timing_only_when_completed(self) -> None:
        finished = datetime(2026, 1, 1, tzinfo=UTC)
        processing = _mock_bulk_upload(processing_time=4, completed_at=finished)
        completed = _mock_bulk_upload(status="completed", processing_time=4, completed_at=finished)

        assert build_status_response(processing).processing_time is None
        assert build_status_response(completed).processing_time == 4
        assert build_status_response(completed).completed_at == finished


class TestErrorSummary:
    """Tests for summarize_errors and build_error_report."""

    def test_duplicate_and_validation_counts(self) -> None:
        entries = [
            {"row_number": 1, "errors": [{"field": "general", "message": "Record already exists (constituency_number=1)"}]},
            {"row_number": 2, "errors": [{"field": "total_voters", "message": "total_voters is required"}]},
            {
                "row_number": 3,
                "errors": [
                    {"field": "general", "message": "Record already exists"},
                    {"field": "gender", "message": "Gender must be one of: male, female, both"},
                ],
            },
        ]

        summary = summarize_errors(entries)

        assert summary.total_errors == 3
        assert summary.duplicate_errors == 2
        assert summary.validation_errors == 2

    def test_report_carries_entries(self) -> None:
        entries = [{"row_number": 0, "errors": [{"field": "general", "message": "boom"}]}]

        report = build_error_report(_mock_bulk_upload(validation_errors=entries))

        assert report.upload_id == "bulk_upload_test"
        assert report.validation_errors == entries
        assert report.error_summary.total_errors == 1


class TestReconcileRecord:
    """Tests for reconcile_record against a mocked session."""

    @pytest.fixture
    def record(self, make_constituency_row):
        from results_api.lib.bulk_upload.transformer import transform_constituency_row

        return transform_constituency_row(make_constituency_row())

    @pytest.mark.asyncio
    async def test_inserts_when_absent(self, record) -> None:
        session = AsyncMock()
        session.add = MagicMock()
        with patch("results_api.services.reconcile_service.find_existing", AsyncMock(return_value=None)):
            outcome = await reconcile_record(session, record, overwrite_existing=False)

        assert outcome is ReconcileOutcome.INSERTED
        session.add.assert_called_once()
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_skips_existing_without_overwrite(self, record) -> None:
        session = AsyncMock()
        with patch("results_api.services.reconcile_service.find_existing", AsyncMock(return_value=MagicMock())):
            outcome = await reconcile_record(session, record, overwrite_existing=False)

        assert outcome is ReconcileOutcome.SKIPPED
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_updates_existing_with_overwrite(self, record) -> None:
        session = AsyncMock()
        existing = MagicMock()
        with patch("results_api.services.reconcile_service.find_existing", AsyncMock(return_value=existing)):
            outcome = await reconcile_record(session, record, overwrite_existing=True)

        assert outcome is ReconcileOutcome.UPDATED
        assert existing.total_voters == record.total_voters
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_dry_run_writes_nothing(self, record) -> None:
        session = AsyncMock()
        session.add = MagicMock()
        with patch("results_api.services.reconcile_service.find_existing", AsyncMock(return_value=None)):
            outcome = await reconcile_record(session, record, overwrite_existing=True, dry_run=True)

        assert outcome is ReconcileOutcome.INSERTED
        session.add.assert_not_called()
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("overwrite", "expected"),
        [(False, ReconcileOutcome.SKIPPED), (True, ReconcileOutcome.UPDATED)],
    )
    async def test_dry_run_repeated_key_resolves_as_stored(self, record, overwrite, expected) -> None:
        session = AsyncMock()
        session.add = MagicMock()
        seen: set = set()
        with patch("results_api.services.reconcile_service.find_existing", AsyncMock(return_value=None)):
            first = await reconcile_record(session, record, overwrite_existing=overwrite, dry_run=True, seen_keys=seen)
            second = await reconcile_record(session, record, overwrite_existing=overwrite, dry_run=True, seen_keys=seen)

        assert first is ReconcileOutcome.INSERTED
        assert second is expected
        assert seen == {("constituency", (("constituency_number", 1), ("election_year", 1996)))}
        session.add.assert_not_called()
        session.commit.assert_not_awaited()
