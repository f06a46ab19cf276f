"""
Browser-like request headers and case-insensitive merging.
"""
from typing import Dict, Mapping, Optional

# Header set a desktop Chrome sends on a top-level navigation
DEFAULT_HEADERS: Dict[str, str] = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Accept-Encoding': 'gzip, deflate, br',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1',
}


def merge_headers(
    custom: Optional[Mapping[str, str]] = None,
    defaults: Mapping[str, str] = DEFAULT_HEADERS,
) -> Dict[str, str]:
    """Overlay custom headers on the defaults.

    Names compare case-insensitively: a custom ``user-agent`` replaces the
    default ``User-Agent`` rather than being sent alongside it.
    """
    merged = dict(defaults)
    if not custom:
        return merged

    overridden = {name.lower() for name in custom}
    merged = {name: value for name, value in merged.items() if name.lower() not in overridden}
    merged.update(custom)
    return merged
