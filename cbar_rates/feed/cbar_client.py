"""Client for the Central Bank of Azerbaijan daily rates XML feed."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from datetime import date
from time import perf_counter
from typing import Any

from cbar_rates.errors import MalformedFeed, UpstreamUnavailable
from cbar_rates.logging import feed_log_extra

from .base import BaseFeedClient
from .http_client import HTTPClient, HTTPClientConfig, HTTPClientError
from .schemas import RawFeedEntry

logger = logging.getLogger(__name__)

ROOT_TAG = "ValCurs"
GROUP_TAG = "ValType"
ENTRY_TAG = "Valute"

REQUEST_HEADERS = {
    "Accept": "application/xml;charset=UTF-8",
    "Accept-Charset": "UTF-8",
}


def feed_path(feed_date: date) -> str:
    """Return the document path CBAR publishes for a date, e.g. `19.10.2026.xml`."""

    return f"{feed_date:%d.%m.%Y}.xml"


def parse_feed(xml_text: str) -> list[RawFeedEntry]:
    """Parse a `ValCurs` document into raw entries, preserving document order.

    Raises:
        MalformedFeed: The text is not XML or its root is not `ValCurs`.
    """

    if not xml_text or not xml_text.strip():
        raise MalformedFeed("Empty response from CBAR feed")

    try:
        root = ET.fromstring(xml_text.lstrip("\ufeff").strip())
    except ET.ParseError as exc:
        raise MalformedFeed(f"CBAR feed is not well-formed XML: {exc}") from exc

    if root.tag != ROOT_TAG:
        raise MalformedFeed(f"Unexpected CBAR feed root <{root.tag}>, expected <{ROOT_TAG}>")

    entries: list[RawFeedEntry] = []
    for group in root.findall(GROUP_TAG):
        for valute in group.findall(ENTRY_TAG):
            entries.append(
                RawFeedEntry(
                    code=(valute.get("Code") or _child_text(valute, "Code")).strip(),
                    name=_child_text(valute, "Name"),
                    nominal=_child_text(valute, "Nominal"),
                    value=_child_text(valute, "Value"),
                )
            )
    return entries


def _child_text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


class CbarFeedClient(BaseFeedClient):
    """Fetches `<base>/<dd>.<mm>.<yyyy>.xml` and parses it into raw entries."""

    name = "cbar"

    def __init__(self, client: HTTPClient) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> CbarFeedClient:
        client_config = HTTPClientConfig(
            base_url=str(config.get("CBAR_BASE_URL", "https://cbar.az/currencies")),
            timeout=float(config.get("REQUEST_TIMEOUT_SECONDS", 10)),
            max_retries=int(config.get("CBAR_MAX_RETRIES", 3)),
            backoff_seconds=float(config.get("CBAR_BACKOFF_SECONDS", 0.5)),
            headers=REQUEST_HEADERS,
        )
        return cls(HTTPClient(client_config))

    def fetch_and_parse(self, feed_date: date) -> list[RawFeedEntry]:
        path = feed_path(feed_date)
        start = perf_counter()
        try:
            xml_text = self._client.get_text(path, encoding="utf-8")
        except HTTPClientError as exc:
            logger.error(
                "CBAR feed fetch failed: %s",
                exc,
                extra=feed_log_extra(
                    event="feed.fetch",
                    feed_date=feed_date,
                    status="error",
                    duration_ms=(perf_counter() - start) * 1000,
                    error=str(exc),
                ),
            )
            raise UpstreamUnavailable(f"CBAR feed unavailable for {feed_date.isoformat()}") from exc

        entries = parse_feed(xml_text)
        logger.info(
            "CBAR feed fetched",
            extra=feed_log_extra(
                event="feed.fetch",
                feed_date=feed_date,
                status="success",
                duration_ms=(perf_counter() - start) * 1000,
                count=len(entries),
            ),
        )
        return entries
