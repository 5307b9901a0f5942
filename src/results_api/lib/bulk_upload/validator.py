"""Row validation rules for constituency and center result uploads.

Each validator is a pure function of ``(row, row_number)`` returning the
list of violated rules.  Validators never raise: text where a number is
expected is reported as an error on that field.
"""

from results_api.lib.bulk_upload.cells import cell, is_blank, participant_slots, to_float
from results_api.lib.bulk_upload.types import FieldError, RawRow

CONSTITUENCY_REQUIRED_FIELDS: tuple[str, ...] = (
    "election",
    "election_year",
    "constituency_number",
    "constituency_name",
    "total_voters",
    "total_centers",
    "total_valid_votes",
    "cancelled_votes",
    "total_turnout",
    "percent_turnout",
)

CENTER_REQUIRED_FIELDS: tuple[str, ...] = (
    "election",
    "election_year",
    "constituency_id",
    "constituency_name",
    "center_no",
    "center",
    "gender",
    "total_voters",
    "total_valid_votes",
    "total_invalid_votes",
    "total_votes_cast",
    "turnout_percentage",
)

VALID_GENDERS = ("male", "female", "both")

MIN_CANDIDATES = 2
MIN_PARTICIPANTS = 1


def _required(row: RawRow, fields: tuple[str, ...]) -> list[FieldError]:
    return [FieldError(field=name, message=f"{name} is required") for name in fields if is_blank(row, name)]


def _number(
    row: RawRow,
    name: str,
    message: str,
    *,
    low: float | None = None,
    high: float | None = None,
    low_exclusive: bool = False,
) -> FieldError | None:
    """Check a populated numeric field against optional bounds.

    Blank fields pass; presence is the required-field check's job.
    """
    text = cell(row, name)
    if not text:
        return None
    number = to_float(text)
    if number is None:
        return FieldError(field=name, message=message, value=text)
    if low is not None and (number <= low if low_exclusive else number < low):
        return FieldError(field=name, message=message, value=text)
    if high is not None and number > high:
        return FieldError(field=name, message=message, value=text)
    return None


def _collect(*checks: FieldError | None) -> list[FieldError]:
    return [c for c in checks if c is not None]


def validate_constituency_row(row: RawRow, row_number: int) -> list[FieldError]:
    """Validate one constituency result row.

    Args:
        row: Raw row from the parser.
        row_number: 1-based data row number, used only for diagnostics.

    Returns:
        Field errors, empty when the row is valid.
    """
    errors = _required(row, CONSTITUENCY_REQUIRED_FIELDS)

    errors += _collect(
        _number(row, "election", "Election must be a number"),
        _number(row, "election_year", "Election year must be a number"),
        _number(row, "constituency_number", "Constituency number must be a positive number", low=0, low_exclusive=True),
        _number(row, "total_voters", "Total voters must be a positive number", low=0, low_exclusive=True),
        _number(row, "total_centers", "Total centers must be a non-negative number", low=0),
        _number(row, "total_valid_votes", "Total valid votes must be a non-negative number", low=0),
        _number(row, "cancelled_votes", "Cancelled votes must be a non-negative number", low=0),
        _number(row, "total_turnout", "Total turnout must be a non-negative number", low=0),
        _number(row, "percent_turnout", "Percent turnout must be between 0 and 100", low=0, high=100),
    )

    # Slots are independent: an empty candidate_3 does not end the scan
    candidates = 0
    for i in participant_slots():
        if is_blank(row, f"candidate_{i}"):
            continue
        candidates += 1
        vote_error = _number(row, f"vote_{i}", f"Candidate {i} vote must be a non-negative number", low=0)
        if vote_error is None and is_blank(row, f"vote_{i}"):
            vote_error = FieldError(field=f"vote_{i}", message=f"Candidate {i} vote must be a non-negative number")
        if vote_error is not None:
            errors.append(vote_error)

    if candidates < MIN_CANDIDATES:
        errors.append(
            FieldError(field="participant_details", message=f"At least {MIN_CANDIDATES} candidates are required")
        )

    return errors


def validate_center_row(row: RawRow, row_number: int) -> list[FieldError]:
    """Validate one polling-center result row.

    Args:
        row: Raw row from the parser.
        row_number: 1-based data row number, used only for diagnostics.

    Returns:
        Field errors, empty when the row is valid.
    """
    errors = _required(row, CENTER_REQUIRED_FIELDS)

    errors += _collect(
        _number(row, "election", "Election must be a number"),
        _number(row, "election_year", "Election year must be a number"),
        _number(row, "constituency_id", "Constituency ID must be a number"),
        _number(row, "center_no", "Center number must be a positive number", low=0, low_exclusive=True),
        _number(row, "total_voters", "Total voters must be a positive number", low=0, low_exclusive=True),
        _number(row, "total_valid_votes", "Total valid votes must be a non-negative number", low=0),
        _number(row, "total_invalid_votes", "Total invalid votes must be a non-negative number", low=0),
        _number(row, "total_votes_cast", "Total votes cast must be a non-negative number", low=0),
        _number(row, "turnout_percentage", "Turnout percentage must be between 0 and 100", low=0, high=100),
        _number(row, "lat", "Latitude must be between -90 and 90", low=-90, high=90),
        _number(row, "lon", "Longitude must be between -180 and 180", low=-180, high=180),
    )

    gender = cell(row, "gender")
    if gender and gender.lower() not in VALID_GENDERS:
        errors.append(
            FieldError(field="gender", message=f"Gender must be one of: {', '.join(VALID_GENDERS)}", value=gender)
        )

    participants = 0
    for i in participant_slots():
        if is_blank(row, f"participant_{i}_name"):
            continue
        participants += 1
        vote_field = f"participant_{i}_vote"
        vote_error = _number(row, vote_field, f"Participant {i} vote must be a non-negative number", low=0)
        if vote_error is None and is_blank(row, vote_field):
            vote_error = FieldError(field=vote_field, message=f"Participant {i} vote must be a non-negative number")
        if vote_error is not None:
            errors.append(vote_error)

    if participants < MIN_PARTICIPANTS:
        errors.append(
            FieldError(field="participant_info", message=f"At least {MIN_PARTICIPANTS} participant is required")
        )

    return errors
