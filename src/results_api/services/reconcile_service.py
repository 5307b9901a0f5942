"""Reconcile typed result records against stored results.

A record is matched on its natural key: (election_year, constituency_number)
for constituency results, (election_year, constituency_id, center_no) for
center results.  Lookup and write are separate statements, so two uploads
racing on the same key are only kept apart by the tables' unique
constraints; the losing write raises IntegrityError to the caller.
"""

from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from results_api.lib.bulk_upload import ReconcileOutcome, RecordType, ResultRecord
from results_api.models.results import CenterResult, ConstituencyResult

# (record type, natural key column values)
NaturalKey = tuple[str, tuple[tuple[str, int], ...]]

_MODELS: dict[RecordType, type[ConstituencyResult] | type[CenterResult]] = {
    RecordType.CONSTITUENCY: ConstituencyResult,
    RecordType.CENTER: CenterResult,
}


def model_for(record_type: RecordType | str) -> type[ConstituencyResult] | type[CenterResult]:
    """Return the ORM model storing a record type."""
    return _MODELS[RecordType(record_type)]


def natural_key_of(record: ResultRecord) -> NaturalKey:
    """Hashable form of a record's natural key."""
    return (RecordType(record.record_type).value, tuple(sorted(record.natural_key.items())))


async def find_existing(session: AsyncSession, record: ResultRecord) -> ConstituencyResult | CenterResult | None:
    """Load the stored result sharing the record's natural key, if any."""
    model = model_for(record.record_type)
    result = await session.execute(select(model).filter_by(**record.natural_key))
    return result.scalar_one_or_none()


async def reconcile_record(
    session: AsyncSession,
    record: ResultRecord,
    *,
    overwrite_existing: bool,
    dry_run: bool = False,
    seen_keys: set[NaturalKey] | None = None,
) -> ReconcileOutcome:
    """Insert, update or skip one record.

    Args:
        session: Database session; each write is committed immediately.
        record: The typed record to store.
        overwrite_existing: Replace the stored row's fields when the key exists.
        dry_run: Perform the lookup only and report the would-be outcome.
        seen_keys: Keys a dry run has already counted.  A key in this set
            is treated as stored, since a real run would have inserted it
            by now.  Updated in place.

    Returns:
        ``INSERTED`` when no row had the key, ``UPDATED`` when one did and
        overwriting is enabled, ``SKIPPED`` otherwise.

    Raises:
        sqlalchemy.exc.IntegrityError: If a concurrent writer stored the key first.
    """
    columns: dict[str, Any] = record.to_columns()
    existing = await find_existing(session, record)

    if dry_run:
        key = natural_key_of(record)
        stored = existing is not None or (seen_keys is not None and key in seen_keys)
        if seen_keys is not None:
            seen_keys.add(key)
        if not stored:
            return ReconcileOutcome.INSERTED
        return ReconcileOutcome.UPDATED if overwrite_existing else ReconcileOutcome.SKIPPED

    if existing is None:
        session.add(model_for(record.record_type)(**columns))
        await session.commit()
        return ReconcileOutcome.INSERTED

    if not overwrite_existing:
        logger.debug(f"Skipping existing {record.record_type} result {record.natural_key}")
        return ReconcileOutcome.SKIPPED

    for name, value in columns.items():
        setattr(existing, name, value)
    await session.commit()
    return ReconcileOutcome.UPDATED
