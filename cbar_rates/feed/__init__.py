"""CBAR feed access, parsing and normalization."""

from .base import BaseFeedClient
from .cbar_client import CbarFeedClient, feed_path, parse_feed
from .http_client import HTTPClient, HTTPClientConfig, HTTPClientError
from .normalizer import normalize, normalize_all, parse_nominal, resolve_code
from .schemas import CurrencyRecord, RawFeedEntry
from .text_repair import repair

__all__ = [
    "BaseFeedClient",
    "CbarFeedClient",
    "CurrencyRecord",
    "HTTPClient",
    "HTTPClientConfig",
    "HTTPClientError",
    "RawFeedEntry",
    "feed_path",
    "normalize",
    "normalize_all",
    "parse_feed",
    "parse_nominal",
    "repair",
    "resolve_code",
]
