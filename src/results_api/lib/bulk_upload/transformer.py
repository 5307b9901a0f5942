"""Build typed result records from validated raw rows.

Transformers assume the row already passed the matching validator; optional
columns fall back to defaults and participant lists are rebuilt from the
indexed ``candidate_i`` / ``participant_i_*`` columns.
"""

from results_api.lib.bulk_upload.cells import cell, is_blank, participant_slots, to_float, to_int
from results_api.lib.bulk_upload.types import (
    CandidateResult,
    CenterParticipant,
    CenterRecord,
    ConstituencyRecord,
    RawRow,
)


def _int(row: RawRow, name: str, default: int = 0) -> int:
    value = to_int(cell(row, name), default)
    return default if value is None else value


def _float(row: RawRow, name: str, default: float = 0.0) -> float:
    value = to_float(cell(row, name))
    return default if value is None else value


def _optional_float(row: RawRow, name: str) -> float | None:
    return to_float(cell(row, name))


def build_candidates(row: RawRow) -> list[CandidateResult]:
    """Collect candidate lines from ``candidate_i``/``party_i``/``symbol_i``/``vote_i``/``percent_i``.

    Every slot is checked; blank slots are skipped rather than ending the scan.
    """
    candidates: list[CandidateResult] = []
    for i in participant_slots():
        if is_blank(row, f"candidate_{i}"):
            continue
        candidates.append(
            CandidateResult(
                candidate=cell(row, f"candidate_{i}"),
                party=cell(row, f"party_{i}"),
                symbol=cell(row, f"symbol_{i}"),
                vote=_int(row, f"vote_{i}"),
                percent=_float(row, f"percent_{i}"),
            )
        )
    return candidates


def build_center_participants(row: RawRow) -> list[CenterParticipant]:
    """Collect participants from ``participant_i_name``/``participant_i_symbol``/``participant_i_vote``."""
    participants: list[CenterParticipant] = []
    for i in participant_slots():
        if is_blank(row, f"participant_{i}_name"):
            continue
        participants.append(
            CenterParticipant(
                name=cell(row, f"participant_{i}_name"),
                symbol=cell(row, f"participant_{i}_symbol"),
                vote=_int(row, f"participant_{i}_vote"),
            )
        )
    return participants


def transform_constituency_row(row: RawRow) -> ConstituencyRecord:
    """Map a validated constituency row to a ConstituencyRecord."""
    return ConstituencyRecord(
        election=_int(row, "election"),
        election_year=_int(row, "election_year"),
        constituency_number=_int(row, "constituency_number"),
        constituency_name=cell(row, "constituency_name"),
        total_voters=_int(row, "total_voters"),
        total_centers=_int(row, "total_centers"),
        reported_centers=to_int(cell(row, "reported_centers")),
        suspended_centers=_int(row, "suspended_centers"),
        total_valid_votes=_int(row, "total_valid_votes"),
        cancelled_votes=_int(row, "cancelled_votes"),
        total_turnout=_int(row, "total_turnout"),
        percent_turnout=_float(row, "percent_turnout"),
        participant_details=build_candidates(row),
    )


def transform_center_row(row: RawRow) -> CenterRecord:
    """Map a validated center row to a CenterRecord."""
    return CenterRecord(
        election=_int(row, "election"),
        election_year=_int(row, "election_year"),
        constituency_id=_int(row, "constituency_id"),
        constituency_name=cell(row, "constituency_name"),
        center_no=_int(row, "center_no"),
        center=cell(row, "center"),
        gender=cell(row, "gender").lower(),
        lat=_optional_float(row, "lat"),
        lon=_optional_float(row, "lon"),
        map_link=cell(row, "map_link") or None,
        total_voters=_int(row, "total_voters"),
        total_valid_votes=_int(row, "total_valid_votes"),
        total_invalid_votes=_int(row, "total_invalid_votes"),
        total_votes_cast=_int(row, "total_votes_cast"),
        turnout_percentage=_float(row, "turnout_percentage"),
        participant_info=build_center_participants(row),
    )
