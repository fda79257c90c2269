"""SQLAlchemy ORM models for cached CBAR rates."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Index, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from cbar_rates.database import Base


class CachedCurrency(Base):
    """One currency rate inside the snapshot stored for a calendar date."""

    __tablename__ = "cached_currencies"
    __table_args__ = (
        UniqueConstraint(
            "currency_date",
            "currency_code",
            name="uq_cached_currencies_date_code",
        ),
        Index("ix_cached_currencies_currency_date", "currency_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    currency_date: Mapped[date] = mapped_column(Date, nullable=False)
    currency_code: Mapped[str] = mapped_column(String(10), nullable=False)
    currency_name: Mapped[str] = mapped_column(String(255), nullable=False)
    exchange_rate: Mapped[Decimal] = mapped_column(Numeric(19, 6), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            f"<CachedCurrency {self.currency_date.isoformat()} {self.currency_code} "
            f"rate={self.exchange_rate}>"
        )
