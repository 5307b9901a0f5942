"""Election result ORM models.

ConstituencyResult holds one constituency's totals and candidate list for an
election year; CenterResult holds one polling center's totals.  Both carry a
unique constraint on their natural key, which bulk uploads use for duplicate
detection.
"""

from sqlalchemy import Float, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from results_api.models.base import Base, JSONType, TimestampMixin, UUIDMixin


class ConstituencyResult(Base, UUIDMixin, TimestampMixin):
    """Constituency-level result with per-candidate vote details."""

    __tablename__ = "constituency_results"

    election: Mapped[int] = mapped_column(Integer, nullable=False)
    election_year: Mapped[int] = mapped_column(Integer, nullable=False)
    constituency_number: Mapped[int] = mapped_column(Integer, nullable=False)
    constituency_name: Mapped[str] = mapped_column(String(200), nullable=False)
    total_voters: Mapped[int] = mapped_column(Integer, nullable=False)
    total_centers: Mapped[int] = mapped_column(Integer, nullable=False)
    reported_centers: Mapped[int | None] = mapped_column(Integer, nullable=True)
    suspended_centers: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_valid_votes: Mapped[int] = mapped_column(Integer, nullable=False)
    cancelled_votes: Mapped[int] = mapped_column(Integer, nullable=False)
    total_turnout: Mapped[int] = mapped_column(Integer, nullable=False)
    percent_turnout: Mapped[float] = mapped_column(Float, nullable=False)
    participant_details: Mapped[list[dict]] = mapped_column(JSONType, nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint("election_year", "constituency_number", name="uq_constituency_results_year_number"),
        Index("ix_constituency_results_election_year", "election_year"),
    )


class CenterResult(Base, UUIDMixin, TimestampMixin):
    """Polling-center result with per-participant vote counts."""

    __tablename__ = "center_results"

    election: Mapped[int] = mapped_column(Integer, nullable=False)
    election_year: Mapped[int] = mapped_column(Integer, nullable=False)
    constituency_id: Mapped[int] = mapped_column(Integer, nullable=False)
    constituency_name: Mapped[str] = mapped_column(String(200), nullable=False)
    center_no: Mapped[int] = mapped_column(Integer, nullable=False)
    center: Mapped[str] = mapped_column(String(300), nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lon: Mapped[float | None] = mapped_column(Float, nullable=True)
    map_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    total_voters: Mapped[int] = mapped_column(Integer, nullable=False)
    total_valid_votes: Mapped[int] = mapped_column(Integer, nullable=False)
    total_invalid_votes: Mapped[int] = mapped_column(Integer, nullable=False)
    total_votes_cast: Mapped[int] = mapped_column(Integer, nullable=False)
    turnout_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    participant_info: Mapped[list[dict]] = mapped_column(JSONType, nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint(
            "election_year", "constituency_id", "center_no", name="uq_center_results_year_constituency_center"
        ),
        Index("ix_center_results_election_year", "election_year"),
        Index("ix_center_results_constituency_id", "constituency_id"),
    )
