"""Abstract interface for daily rate feeds."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from .schemas import RawFeedEntry


class BaseFeedClient(ABC):
    """Defines the interface the ingestion coordinator expects from a feed."""

    name: str

    @abstractmethod
    def fetch_and_parse(self, feed_date: date) -> list[RawFeedEntry]:
        """Fetch the document published for `feed_date` and return its entries in document order.

        Raises:
            UpstreamUnavailable: The feed could not be reached or answered non-2xx.
            MalformedFeed: The document is not the expected XML structure.
        """
