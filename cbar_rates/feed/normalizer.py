"""Turn raw CBAR feed entries into normalized currency records."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, Overflow

from .schemas import RATE_QUANTUM, UNKNOWN_CODE, CurrencyRecord, RawFeedEntry
from .text_repair import repair

logger = logging.getLogger(__name__)

DEFAULT_NOMINAL = Decimal("1")
# Numeric(19, 6) leaves 13 integer digits.
MAX_RATE = Decimal(10) ** 13

# First match wins. Every keyword of a row must appear in the folded name, so
# rows naming a country come before the bare currency word they refine.
CODE_SIGNATURES: list[tuple[tuple[str, ...], str]] = [
    (("ABŞ", "DOLLAR"), "USD"),
    (("AVSTRALİYA",), "AUD"),
    (("KANADA",), "CAD"),
    (("SİNQAPUR",), "SGD"),
    (("HONQ KONQ",), "HKD"),
    (("YENİ ZELANDİYA",), "NZD"),
    (("AVRO",), "EUR"),
    (("EURO",), "EUR"),
    (("MİSİR",), "EGP"),
    (("İNGİLİS",), "GBP"),
    (("FUNT",), "GBP"),
    (("STERLİN",), "GBP"),
    (("BELARUS",), "BYN"),
    (("RUBLU",), "RUB"),
    (("RUSİYA",), "RUB"),
    (("İSVEÇRƏ",), "CHF"),
    (("FRANK",), "CHF"),
    (("KRONU", "İSVEÇ"), "SEK"),
    (("KRONU", "NORVEÇ"), "NOK"),
    (("KRONU", "DANİMARKA"), "DKK"),
    (("KRONU", "ÇEX"), "CZK"),
    (("YUAN",), "CNY"),
    (("YAPON",), "JPY"),
    (("YENİ",), "JPY"),
    (("DİRHƏM",), "AED"),
    (("DİNAR", "SERBİYA"), "RSD"),
    (("DİNAR", "KÜVEYT"), "KWD"),
    (("DİNAR",), "KWD"),
    (("RİAL", "SƏUDİYYƏ"), "SAR"),
    (("RİAL", "İRAN"), "IRR"),
    (("RİAL", "QƏTƏR"), "QAR"),
    (("RİAL",), "QAR"),
    (("LARİ",), "GEL"),
    (("LEY", "MOLDOVA"), "MDL"),
    (("LEY", "RUMINİYA"), "RON"),
    (("LEV", "BOLQARISTAN"), "BGN"),
    (("LEVİ",), "BGN"),
    (("ZLOT",), "PLN"),
    (("POLŞA",), "PLN"),
    (("FORİNT",), "HUF"),
    (("SOMU", "QIRĞIZ"), "KGS"),
    (("SOMU", "ÖZBƏK"), "UZS"),
    (("TENGƏ",), "KZT"),
    (("QRİVNA",), "UAH"),
    (("MANAT", "TÜRKMƏNİSTAN"), "TMT"),
    (("LİRƏ",), "TRY"),
    (("RUPİ", "PAKİSTAN"), "PKR"),
    (("RUPİ",), "INR"),
    (("VONU",), "KRW"),
    (("ŞEKEL",), "ILS"),
    (("SDR",), "XDR"),
    (("QIZIL",), "XAU"),
    (("GÜMÜŞ",), "XAG"),
    (("PLATİN",), "XPT"),
    (("PALLADİUM",), "XPD"),
]

_PARENTHESIZED_CODE = re.compile(r"\(\s*([A-Za-z]{3,4})\s*\)")


def fold_name(name: str) -> str:
    """Uppercase with Azerbaijani dotted/dotless i rules (i -> İ, ı -> I)."""

    return name.replace("i", "İ").replace("ı", "I").upper()


def resolve_code(code: str | None, name: str | None) -> str:
    """Return the feed code if present, else infer one from the currency name."""

    if code and code.strip():
        return code.strip().upper()

    folded = fold_name(name or "")
    for keywords, candidate in CODE_SIGNATURES:
        if all(keyword in folded for keyword in keywords):
            return candidate

    match = _PARENTHESIZED_CODE.search(name or "")
    if match:
        return match.group(1).upper()

    return UNKNOWN_CODE


def parse_nominal(nominal: str | None) -> Decimal:
    """Return the first numeric token of `nominal` (e.g. "1 t.u." -> 1), defaulting to 1."""

    cleaned = (nominal or "").strip().replace(",", ".")
    for token in cleaned.split():
        number = _to_decimal(token)
        if number is not None:
            return number
    return DEFAULT_NOMINAL


def compute_rate(value: str | None, nominal: Decimal) -> Decimal | None:
    """Return `value / nominal` rounded half-up to six places, or None if not computable.

    A rate that rounds to zero or does not fit the storage column is not computable.
    """

    amount = _to_decimal((value or "").strip().replace(",", "."))
    if amount is None or amount < 0 or nominal <= 0:
        return None
    try:
        rate = (amount / nominal).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)
    except (InvalidOperation, Overflow):
        return None
    if rate == 0 or rate >= MAX_RATE:
        return None
    return rate


def normalize(entry: RawFeedEntry) -> CurrencyRecord:
    """Convert one raw entry into a record. Never raises.

    Entries whose rate cannot be computed come back degraded with a zero rate.
    """

    name = repair(entry.name) or ""
    code = resolve_code(entry.code, name)
    nominal = parse_nominal(entry.nominal)
    rate = compute_rate(entry.value, nominal)

    if rate is None:
        logger.warning(
            "Degraded record for %s: value=%r nominal=%r",
            code,
            entry.value,
            entry.nominal,
        )
        return CurrencyRecord(code=code, name=name, rate=Decimal("0"), degraded=True)

    return CurrencyRecord(code=code, name=name, rate=rate)


def normalize_all(entries: Iterable[RawFeedEntry]) -> list[CurrencyRecord]:
    """Normalize a feed document, keeping the first record for each code."""

    records: list[CurrencyRecord] = []
    seen: set[str] = set()
    for entry in entries:
        record = normalize(entry)
        if record.code in seen:
            logger.warning("Skipping duplicate code %s in feed", record.code)
            continue
        seen.add(record.code)
        records.append(record)
    return records


def _to_decimal(text: str) -> Decimal | None:
    # Decimal() accepts digit-grouping underscores; the feed never uses them.
    if "_" in text:
        return None
    try:
        number = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None
