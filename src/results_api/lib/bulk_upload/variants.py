"""Row variants: one implementation per record type.

A variant bundles everything the pipeline needs to know about a record
type's rows: which fields are required, which identify a row in error
reports, how rows validate and transform, and what a template looks like.
The pipeline selects a variant once per upload with ``get_row_variant``.
"""

from abc import ABC, abstractmethod
from typing import Any

from results_api.lib.bulk_upload.cells import cell
from results_api.lib.bulk_upload.transformer import transform_center_row, transform_constituency_row
from results_api.lib.bulk_upload.types import CenterRecord, ConstituencyRecord, FieldError, RawRow, RecordType
from results_api.lib.bulk_upload.validator import (
    CENTER_REQUIRED_FIELDS,
    CONSTITUENCY_REQUIRED_FIELDS,
    validate_center_row,
    validate_constituency_row,
)


class RowVariant(ABC):
    """Record-type specific row handling."""

    @property
    @abstractmethod
    def record_type(self) -> RecordType:
        """The record type this variant handles."""

    @property
    @abstractmethod
    def required_fields(self) -> tuple[str, ...]:
        """Columns every row must populate."""

    @property
    @abstractmethod
    def business_key_fields(self) -> tuple[str, ...]:
        """Columns copied into row error reports to identify the row."""

    @property
    @abstractmethod
    def template_file_stem(self) -> str:
        """Base file name for downloadable templates."""

    @abstractmethod
    def validate(self, row: RawRow, row_number: int) -> list[FieldError]:
        """Return the row's validation errors."""

    @abstractmethod
    def transform(self, row: RawRow) -> ConstituencyRecord | CenterRecord:
        """Build the typed record from a validated row."""

    @abstractmethod
    def template_row(self) -> dict[str, Any]:
        """A sample row that passes ``validate``, in template column order."""

    def business_key(self, row: RawRow) -> dict[str, str]:
        """Identifying fields present on the row, even if the row is invalid."""
        key: dict[str, str] = {}
        for name in self.business_key_fields:
            value = cell(row, name)
            if value:
                key[name] = value
        return key


class ConstituencyVariant(RowVariant):
    """Constituency result rows keyed by (election_year, constituency_number)."""

    @property
    def record_type(self) -> RecordType:
        return RecordType.CONSTITUENCY

    @property
    def required_fields(self) -> tuple[str, ...]:
        return CONSTITUENCY_REQUIRED_FIELDS

    @property
    def business_key_fields(self) -> tuple[str, ...]:
        return ("constituency_number", "constituency_name")

    @property
    def template_file_stem(self) -> str:
        return "constituency_results_template"

    def validate(self, row: RawRow, row_number: int) -> list[FieldError]:
        return validate_constituency_row(row, row_number)

    def transform(self, row: RawRow) -> ConstituencyRecord:
        return transform_constituency_row(row)

    def template_row(self) -> dict[str, Any]:
        return {
            "election": 7,
            "election_year": 1996,
            "constituency_number": 201,
            "constituency_name": "example-constituency",
            "total_voters": 100000,
            "total_centers": 50,
            "reported_centers": 50,
            "suspended_centers": 0,
            "total_valid_votes": 75000,
            "cancelled_votes": 1000,
            "total_turnout": 76000,
            "percent_turnout": 76.0,
            "candidate_1": "Example Candidate 1",
            "party_1": "Example Party 1",
            "symbol_1": "Example Symbol 1",
            "vote_1": 45000,
            "percent_1": 60.0,
            "candidate_2": "Example Candidate 2",
            "party_2": "Example Party 2",
            "symbol_2": "Example Symbol 2",
            "vote_2": 30000,
            "percent_2": 40.0,
        }


class CenterVariant(RowVariant):
    """Polling-center rows keyed by (election_year, constituency_id, center_no)."""

    @property
    def record_type(self) -> RecordType:
        return RecordType.CENTER

    @property
    def required_fields(self) -> tuple[str, ...]:
        return CENTER_REQUIRED_FIELDS

    @property
    def business_key_fields(self) -> tuple[str, ...]:
        return ("constituency_id", "constituency_name", "center_no", "center")

    @property
    def template_file_stem(self) -> str:
        return "center_results_template"

    def validate(self, row: RawRow, row_number: int) -> list[FieldError]:
        return validate_center_row(row, row_number)

    def transform(self, row: RawRow) -> CenterRecord:
        return transform_center_row(row)

    def template_row(self) -> dict[str, Any]:
        return {
            "election": 11,
            "election_year": 2018,
            "constituency_id": 1,
            "constituency_name": "example-constituency",
            "center_no": 1,
            "center": "Example Primary School",
            "gender": "both",
            "lat": 23.8103,
            "lon": 90.4125,
            "map_link": "https://maps.example.com/?q=23.8103,90.4125",
            "total_voters": 3000,
            "total_valid_votes": 2100,
            "total_invalid_votes": 50,
            "total_votes_cast": 2150,
            "turnout_percentage": 71.67,
            "participant_1_name": "Example Participant 1",
            "participant_1_symbol": "Example Symbol 1",
            "participant_1_vote": 1200,
            "participant_2_name": "Example Participant 2",
            "participant_2_symbol": "Example Symbol 2",
            "participant_2_vote": 900,
        }


_VARIANTS: dict[RecordType, RowVariant] = {
    RecordType.CONSTITUENCY: ConstituencyVariant(),
    RecordType.CENTER: CenterVariant(),
}


def get_row_variant(record_type: RecordType | str) -> RowVariant:
    """Return the variant for a record type.

    Raises:
        ValueError: If the record type is unknown.
    """
    try:
        return _VARIANTS[RecordType(record_type)]
    except ValueError:
        msg = f"Unknown record type: {record_type!r}. Available: {[t.value for t in RecordType]}"
        raise ValueError(msg) from None
