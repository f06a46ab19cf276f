"""
HTTP fetch with browser headers, redirect re-fetching and challenge detection.
"""
import time
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import httpx
import structlog

from .challenge import ChallengeDetector
from .config import FetcherSettings
from .errors import FetchConnectionError, FetchError, FetchTimeout, TooManyRefetches
from .headers import DEFAULT_HEADERS, merge_headers

logger = structlog.get_logger(__name__)


class FetchResult:
    def __init__(
        self,
        url: str,
        status_code: int,
        content: bytes = b'',
        headers: Dict[str, str] = None,
        final_url: str = None,
        redirected: bool = False,
        fetch_time: float = 0.0,
        error: str = None,
        content_type: str = None,
        encoding: str = None,
        challenge: str = None,
    ):
        """Initialize a FetchResult with HTTP response data and metadata."""
        self.url = url
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.final_url = final_url or url
        self.redirected = redirected
        self.fetch_time = fetch_time
        self.error = error
        self.content_type = content_type
        self.encoding = encoding
        self.challenge = challenge
        self.timestamp = datetime.now(timezone.utc)

    @property
    def ok(self) -> bool:
        """Check if the fetch was successful (no error and 2xx status code)."""
        return self.error is None and 200 <= self.status_code < 300

    success = ok

    @property
    def challenge_detected(self) -> bool:
        return self.challenge is not None

    @property
    def text(self) -> str:
        """Decode the response content to text using detected or fallback encoding."""
        if not self.content:
            return ""
        try:
            return self.content.decode(self.encoding or 'utf-8')
        except (UnicodeDecodeError, LookupError):
            return self.content.decode('utf-8', errors='replace')

    @property
    def size(self) -> int:
        """Get the size of the response content in bytes."""
        return len(self.content)

    def __repr__(self) -> str:
        return f"<FetchResult {self.status_code} {self.final_url}>"


def detect_encoding(headers: Mapping[str, str], content: bytes) -> str:
    """Pick a charset from the Content-Type header, then from an HTML meta tag."""
    content_type = headers.get('content-type', '').lower()
    if 'charset=' in content_type:
        charset = content_type.split('charset=', 1)[1].split(';')[0].strip(' \'"')
        if charset:
            return charset

    if content and len(content) > 100:
        head = content[:1024].decode('utf-8', errors='ignore').lower()
        start = head.find('charset=')
        if start != -1:
            start += len('charset=')
            while start < len(head) and head[start] in '"\' ':
                start += 1
            end = start
            while end < len(head) and head[end] not in '"\'>; /':
                end += 1
            charset = head[start:end].strip(' \'"')
            if charset:
                return charset

    return 'utf-8'


class HTTPFetcher:
    def __init__(self, settings: FetcherSettings = None, detector: ChallengeDetector = None):
        """Initialize the fetcher and its shared httpx client."""
        self.settings = settings or FetcherSettings()
        self.timeout = self.settings.timeout
        self.max_refetches = self.settings.max_refetches
        self.max_response_size = self.settings.max_response_size

        self.default_headers = merge_headers(
            self.settings.extra_headers,
            merge_headers({'User-Agent': self.settings.user_agent}, DEFAULT_HEADERS),
        )
        self.detector = detector or ChallengeDetector(
            self.settings.challenge_status_codes,
            self.settings.challenge_markers,
        )

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            max_redirects=self.settings.max_redirects,
            limits=httpx.Limits(
                max_connections=self.settings.max_connections,
                max_keepalive_connections=self.settings.max_keepalive_connections,
            ),
        )

    async def __aenter__(self) -> "HTTPFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(
        self,
        url: str,
        method: str = 'GET',
        headers: Mapping[str, str] = None,
        content: Optional[bytes] = None,
        data: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> FetchResult:
        """Fetch a URL, re-fetching the final URL whenever the request was redirected.

        Challenge pages (503/429 carrying a known marker) are returned as they are,
        with ``challenge`` set to the matched marker.
        """
        request_headers = merge_headers(headers, self.default_headers)
        current_url = url
        refetches = 0

        while True:
            result = await self._request(
                current_url,
                method,
                request_headers,
                content=content,
                data=data,
                json=json,
                # the final URL already carries the query string
                params=params if refetches == 0 else None,
            )

            marker = self.detector.detect(result)
            if marker is not None:
                result.challenge = marker
                logger.warning("challenge_detected", url=result.final_url, status_code=result.status_code, marker=marker)
                return result

            if not result.redirected:
                return result

            if refetches >= self.max_refetches:
                raise TooManyRefetches(url, self.max_refetches)
            refetches += 1

            logger.info("following_redirect", url=current_url, location=result.final_url, refetch=refetches)
            current_url = result.final_url

    async def _request(self, url: str, method: str, headers: Dict[str, str], **kwargs) -> FetchResult:
        """Issue one request and read its body up to max_response_size."""
        start_time = time.time()

        try:
            async with self._client.stream(method, url, headers=headers, **kwargs) as response:
                common = dict(
                    url=url,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    final_url=str(response.url),
                    redirected=bool(response.history),
                    content_type=response.headers.get('content-type', '').lower(),
                )

                content_length = response.headers.get('content-length', '')
                if content_length.isdigit() and int(content_length) > self.max_response_size:
                    return FetchResult(
                        fetch_time=time.time() - start_time,
                        error=f"Content too large: {content_length} bytes > {self.max_response_size} bytes",
                        **common,
                    )

                body = bytearray()
                error = None
                async for chunk in response.aiter_bytes(chunk_size=8192):
                    body.extend(chunk)
                    if len(body) > self.max_response_size:
                        logger.warning("response_truncated", url=url, limit=self.max_response_size)
                        del body[self.max_response_size:]
                        error = f"Content too large: truncated at {self.max_response_size} bytes"
                        break

                body = bytes(body)
                return FetchResult(
                    content=body,
                    fetch_time=time.time() - start_time,
                    error=error,
                    encoding=detect_encoding(response.headers, body),
                    **common,
                )

        except httpx.TimeoutException as e:
            logger.warning("fetch_timeout", url=url, timeout=self.timeout, error=str(e))
            raise FetchTimeout(url, f"Timeout after {self.timeout}s: {e}") from e

        except httpx.ConnectError as e:
            logger.warning("fetch_connection_error", url=url, error=str(e))
            raise FetchConnectionError(url, f"Connection error: {e}") from e

        except httpx.TooManyRedirects as e:
            logger.warning("fetch_too_many_redirects", url=url, error=str(e))
            raise FetchError(url, f"Too many redirects: {e}") from e

        except httpx.HTTPError as e:
            logger.error("fetch_http_error", url=url, error=str(e))
            raise FetchError(url, f"HTTP error: {e}") from e

        except httpx.InvalidURL as e:
            logger.warning("fetch_invalid_url", url=url, error=str(e))
            raise FetchError(url, f"Invalid URL: {e}") from e


async def create_fetcher(settings: FetcherSettings = None) -> HTTPFetcher:
    """Create and initialize an HTTPFetcher instance."""
    return HTTPFetcher(settings)
