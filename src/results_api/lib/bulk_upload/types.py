"""Data types for the bulk upload library.

Defines the record-type and status vocabularies, per-row error structures,
progress counters, and the typed domain records produced from raw rows.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any

# One parsed data row: header name -> cell text, in file column order
RawRow = dict[str, str]

# Participant columns are numbered 1..MAX_PARTICIPANT_SLOTS (candidate_1, participant_1_name, ...)
MAX_PARTICIPANT_SLOTS = 10


class RecordType(StrEnum):
    """Which result schema an upload's rows follow."""

    CONSTITUENCY = "constituency"
    CENTER = "center"


class UploadStatus(StrEnum):
    """Lifecycle state of a bulk upload.

    ``CANCELLED`` is reserved: no code path moves an upload into it.
    """

    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class FileFormat(StrEnum):
    """Tabular file formats accepted for upload and offered as templates."""

    CSV = "csv"
    EXCEL = "excel"


class ReconcileOutcome(StrEnum):
    """What happened to a valid row when matched against stored results."""

    INSERTED = "inserted"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class FieldError:
    """A single violated rule on one field of a row."""

    field: str
    message: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"field": self.field}
        if self.value is not None:
            data["value"] = self.value
        data["message"] = self.message
        return data


@dataclass
class RowError:
    """All errors recorded for one data row.

    Attributes:
        row_number: 1-based data row number (header excluded); 0 for job-level failures.
        business_key: Identifying fields present on the raw row, e.g. constituency_number.
        errors: The individual field errors.
    """

    row_number: int
    errors: list[FieldError]
    business_key: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored/wire shape with business-key fields inlined."""
        return {
            "row_number": self.row_number,
            **self.business_key,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass
class UploadProgress:
    """Running counters for one upload, owned by the task processing it."""

    processed: int = 0
    successful: int = 0
    updated: int = 0
    duplicates: int = 0
    failed: int = 0

    def record(self, outcome: ReconcileOutcome) -> None:
        """Count a row that made it through reconciliation."""
        if outcome is ReconcileOutcome.INSERTED:
            self.successful += 1
        elif outcome is ReconcileOutcome.UPDATED:
            self.updated += 1
        else:
            self.duplicates += 1

    def as_columns(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class CandidateResult:
    """One candidate's line in a constituency result."""

    candidate: str
    party: str
    symbol: str
    vote: int
    percent: float


@dataclass(frozen=True)
class CenterParticipant:
    """One participant's vote count at a polling center."""

    name: str
    symbol: str
    vote: int


@dataclass(frozen=True)
class ConstituencyRecord:
    """Typed constituency result built from a validated row."""

    election: int
    election_year: int
    constituency_number: int
    constituency_name: str
    total_voters: int
    total_centers: int
    reported_centers: int | None
    suspended_centers: int
    total_valid_votes: int
    cancelled_votes: int
    total_turnout: int
    percent_turnout: float
    participant_details: list[CandidateResult]

    record_type = RecordType.CONSTITUENCY

    @property
    def natural_key(self) -> dict[str, int]:
        return {"election_year": self.election_year, "constituency_number": self.constituency_number}

    def to_columns(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CenterRecord:
    """Typed polling-center result built from a validated row."""

    election: int
    election_year: int
    constituency_id: int
    constituency_name: str
    center_no: int
    center: str
    gender: str
    lat: float | None
    lon: float | None
    map_link: str | None
    total_voters: int
    total_valid_votes: int
    total_invalid_votes: int
    total_votes_cast: int
    turnout_percentage: float
    participant_info: list[CenterParticipant]

    record_type = RecordType.CENTER

    @property
    def natural_key(self) -> dict[str, int]:
        return {
            "election_year": self.election_year,
            "constituency_id": self.constituency_id,
            "center_no": self.center_no,
        }

    def to_columns(self) -> dict[str, Any]:
        return asdict(self)


ResultRecord = ConstituencyRecord | CenterRecord
