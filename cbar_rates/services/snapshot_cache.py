"""Durable per-date snapshot storage for normalized CBAR rates."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cbar_rates.database import get_session
from cbar_rates.feed.schemas import CurrencyRecord
from cbar_rates.models import CachedCurrency

logger = logging.getLogger(__name__)


class SnapshotCache:
    """Maps a calendar date to the records fetched for it.

    One row per (date, code); a snapshot is written in a single transaction
    so readers see either none of a date's rows or all of them.
    """

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory or get_session()

    def has(self, snapshot_date: date) -> bool:
        session = self._session_factory()
        stmt = select(CachedCurrency.id).where(CachedCurrency.currency_date == snapshot_date).limit(1)
        return session.execute(stmt).first() is not None

    def count(self, snapshot_date: date) -> int:
        session = self._session_factory()
        stmt = select(func.count(CachedCurrency.id)).where(
            CachedCurrency.currency_date == snapshot_date
        )
        return int(session.execute(stmt).scalar_one())

    def get(self, snapshot_date: date) -> list[CurrencyRecord]:
        """Return the stored records in insertion order; empty when nothing is cached."""

        session = self._session_factory()
        stmt = (
            select(CachedCurrency)
            .where(CachedCurrency.currency_date == snapshot_date)
            .order_by(CachedCurrency.id)
        )
        rows = session.execute(stmt).scalars().all()
        logger.debug("Retrieved %s cached currencies for %s", len(rows), snapshot_date)
        return [_to_record(row) for row in rows]

    def get_one(self, snapshot_date: date, code: str) -> CurrencyRecord | None:
        """Return the record for `code` (case-insensitive) or None."""

        session = self._session_factory()
        stmt = select(CachedCurrency).where(
            CachedCurrency.currency_date == snapshot_date,
            func.upper(CachedCurrency.currency_code) == code.strip().upper(),
        )
        row = session.execute(stmt).scalars().first()
        return _to_record(row) if row is not None else None

    def put(self, snapshot_date: date, records: Iterable[CurrencyRecord]) -> None:
        """Upsert the full record set for a date.

        Existing (date, code) rows are updated in place. If a concurrent writer
        inserts the same rows first, the unique constraint fires and the write
        is replayed once as an update.
        """

        unique: dict[str, CurrencyRecord] = {}
        for record in records:
            unique.setdefault(record.code, record)

        session = self._session_factory()
        for attempt in (1, 2):
            try:
                for record in unique.values():
                    _upsert_row(session, snapshot_date, record)
                session.commit()
                break
            except IntegrityError:
                session.rollback()
                if attempt == 2:
                    raise
                logger.info("Snapshot for %s written concurrently; retrying as update", snapshot_date)
            except SQLAlchemyError:
                session.rollback()
                raise

        logger.info("Saved %s currencies to cache for %s", len(unique), snapshot_date)

    def evict_older_than(self, cutoff: date) -> int:
        """Delete every snapshot dated strictly before `cutoff`; return the deleted row count.

        Storage errors are logged and absorbed.
        """

        session = self._session_factory()
        try:
            result = session.execute(
                delete(CachedCurrency).where(CachedCurrency.currency_date < cutoff)
            )
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error cleaning up cached currencies before %s: %s", cutoff, exc)
            return 0

        deleted = result.rowcount or 0
        logger.info("Deleted %s cached currencies dated before %s", deleted, cutoff)
        return deleted


def _upsert_row(session: Session, snapshot_date: date, record: CurrencyRecord) -> None:
    existing = session.execute(
        select(CachedCurrency).where(
            CachedCurrency.currency_date == snapshot_date,
            CachedCurrency.currency_code == record.code,
        )
    ).scalar_one_or_none()
    if existing is not None:
        existing.currency_name = record.name
        existing.exchange_rate = record.rate
        return

    session.add(
        CachedCurrency(
            currency_date=snapshot_date,
            currency_code=record.code,
            currency_name=record.name,
            exchange_rate=record.rate,
        )
    )
    session.flush()


def _to_record(row: CachedCurrency) -> CurrencyRecord:
    rate = Decimal(row.exchange_rate)
    return CurrencyRecord(
        code=row.currency_code,
        name=row.currency_name,
        rate=rate,
        degraded=rate == 0,
    )
