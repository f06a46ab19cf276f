"""
Browser-header HTTP fetching with redirect re-fetch and challenge page detection.
"""
from .challenge import CHALLENGE_MARKERS, CHALLENGE_STATUS_CODES, ChallengeDetector, is_challenge
from .config import Config, FetcherSettings
from .errors import FetchConnectionError, FetchError, FetchTimeout, TooManyRefetches
from .fetcher import FetchResult, HTTPFetcher, create_fetcher
from .headers import DEFAULT_HEADERS, merge_headers

__all__ = [
    "CHALLENGE_MARKERS",
    "CHALLENGE_STATUS_CODES",
    "ChallengeDetector",
    "Config",
    "DEFAULT_HEADERS",
    "FetchConnectionError",
    "FetchError",
    "FetchResult",
    "FetchTimeout",
    "FetcherSettings",
    "HTTPFetcher",
    "TooManyRefetches",
    "create_fetcher",
    "is_challenge",
    "merge_headers",
]
