"""Best-effort repair of mis-decoded Azerbaijani currency names.

The CBAR feed is UTF-8, but some names reach us after being decoded as
Latin-1/cp1252 once or twice, so `ı` shows up as `Ä±`, `ə` as `É™` and so
on. Sometimes the second byte of a pair is lost entirely (C1 control
characters get dropped along the way) and only the lead character survives.

Repair is heuristic. Known broken names are looked up whole; everything
else goes through an ordered list of substring replacements. It is not a
byte-level transcoder and is not guaranteed to be correct for encodings
we have not seen.
"""

from __future__ import annotations

from functools import reduce

# Whole names seen in the feed in a state the substring rules cannot restore.
KNOWN_NAMES: dict[str, str] = {
    "QÄ±zÄ±l": "Qızıl",
    "GÃ¼mÃ¼Å": "Gümüş",
    "1 Serbiya dinarA+ (RSD)": "1 Serbiya dinarı (RSD)",
    "1 Serbiya dinarÄ± (RSD)": "1 Serbiya dinarı (RSD)",
    "1 Sinqapur dollarÄ± (SGD)": "1 Sinqapur dolları (SGD)",
    "1 SÉQudiyyÉO ÆrÉ bistanÄ± rialÄ± (SAR)": "1 Səudiyyə Ərəbistanı rialı (SAR)",
    "1 SÉudiyyÉ ÆrÉbistanÄ± rialÄ± (SAR)": "1 Səudiyyə Ərəbistanı rialı (SAR)",
    "1 TÃ¼rk lirÉOsi (TRY)": "1 Türk lirəsi (TRY)",
    "1 TÃ¼rkmÉOnistan manatÄ± (TMT)": "1 Türkmənistan manatı (TMT)",
    "1 BÆÆ dirhÉmi (AED)": "1 BƏƏ dirhəmi (AED)",
    "1 QÄ±rÄÄ±z somu (KGS)": "1 Qırğız somu (KGS)",
    "100 ÃzbÉk somu (UZS)": "100 Özbək somu (UZS)",
    "1 PolÅa zlotÄ±sÄ± (PLN)": "1 Polşa zlotısı (PLN)",
    "1 Ä°srail Åekeli (ILS)": "1 İsrail Şekeli (ILS)",
    "1 SDR (BVF-nin xÃ¼susi borcalma hÃ¼quqlarÄ±) (SDR)": (
        "1 SDR (BVF-nin xüsusi borcalma hüquqları) (SDR)"
    ),
}

# Applied in order, each on the output of the previous one. Longer patterns
# must come before the shorter patterns they contain.
REPLACEMENTS: list[tuple[str, str]] = [
    # Whole words whose damage is irregular.
    ("SÉQudiyyÉO ÆrÉ bistanÄ±", "Səudiyyə Ərəbistanı"),
    ("dinarA+", "dinarı"),
    ("Ä°srail Åekeli", "İsrail Şekeli"),
    ("QÄ±rÄÄ±z", "Qırğız"),
    ("ÃzbÉk", "Özbək"),
    # Intact two-character sequences, cp1252 and latin-1 flavours.
    ("Ã¹¼", "ü"),
    ("Ä±", "ı"),
    ("Ä°", "İ"),
    ("ÄŸ", "ğ"),
    ("Ä\x9f", "ğ"),
    ("É™", "ə"),
    ("É\x99", "ə"),
    ("ÉO", "ə"),
    ("Æ\x8f", "Ə"),
    ("ÅŸ", "ş"),
    ("Å\x9f", "ş"),
    ("Åž", "Ş"),
    ("Å\x9e", "Ş"),
    ("Ã¼", "ü"),
    ("Ãœ", "Ü"),
    ("Ã\x9c", "Ü"),
    ("Ã¶", "ö"),
    ("Ã–", "Ö"),
    ("Ã\x96", "Ö"),
    ("Ã§", "ç"),
    ("Ã‡", "Ç"),
    ("Ã\x87", "Ç"),
    ("¹¼", "ü"),
    # Lead characters whose continuation byte was dropped.
    ("Ä", "ğ"),
    ("É", "ə"),
    ("Æ", "Ə"),
    ("Å", "ş"),
    ("Ã", "Ö"),
]


def repair(text: str | None) -> str | None:
    """Return `text` with known mis-encoding artifacts replaced.

    Never raises; input that matches nothing is returned unchanged.
    """

    if not text:
        return text

    known = KNOWN_NAMES.get(text.strip())
    if known is not None:
        return known

    return reduce(lambda acc, rule: acc.replace(*rule), REPLACEMENTS, text)
