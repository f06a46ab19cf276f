"""
Anti-bot challenge page detection.

Detection only: a matching response is flagged and handed back untouched.
"""
from typing import Iterable, Optional

CHALLENGE_STATUS_CODES = (503, 429)
CHALLENGE_MARKERS = ('challenge-form', 'Cloudflare', 'cf-chl-bypass')


def find_marker(body: str, markers: Iterable[str] = CHALLENGE_MARKERS) -> Optional[str]:
    """Return the first marker contained in body, or None."""
    for marker in markers:
        if marker in body:
            return marker
    return None


def is_challenge(status_code: int, body: str) -> bool:
    """Check a status/body pair against the default challenge signature."""
    if status_code not in CHALLENGE_STATUS_CODES:
        return False
    return find_marker(body) is not None


class ChallengeDetector:
    def __init__(self, status_codes: Iterable[int] = CHALLENGE_STATUS_CODES, markers: Iterable[str] = CHALLENGE_MARKERS):
        self.status_codes = frozenset(status_codes)
        self.markers = tuple(markers)

    def applies_to(self, status_code: int) -> bool:
        """Only these status codes get their body inspected."""
        return status_code in self.status_codes

    def detect(self, result) -> Optional[str]:
        """Return the matched marker for a FetchResult, or None."""
        if not self.applies_to(result.status_code):
            return None
        return find_marker(result.text, self.markers)
