"""Dataclasses describing raw feed entries and normalized currency records."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

RATE_QUANTUM = Decimal("0.000001")
UNKNOWN_CODE = "UNKNOWN"


@dataclass(frozen=True)
class RawFeedEntry:
    """One `Valute` element exactly as read from the feed; all fields are raw strings."""

    code: str
    name: str
    nominal: str
    value: str


@dataclass(frozen=True)
class CurrencyRecord:
    """Normalized rate of one unit of `code` expressed in manat.

    `degraded` marks entries whose rate could not be computed; their rate is zero.
    """

    code: str
    name: str
    rate: Decimal
    degraded: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", self.code.strip().upper())
        rate = Decimal(str(self.rate)).quantize(RATE_QUANTUM)
        if rate < 0:
            raise ValueError(f"rate must not be negative: {rate}")
        object.__setattr__(self, "rate", rate)

    def to_dict(self) -> dict[str, object]:
        return {"code": self.code, "name": self.name, "rate": self.rate}
