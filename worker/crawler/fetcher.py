"""HTTP fetcher with failure classification."""

import socket
import ssl
import time
from dataclasses import dataclass

import httpx
import structlog

from api.metrics import record_page_fetch

logger = structlog.get_logger(__name__)

# Error codes reported on FetchedPage.error_code
DNS_FAIL = "DNS_FAIL"
CONNECTION_REFUSED = "CONNECTION_REFUSED"
TLS_ERROR = "TLS_ERROR"
TIMEOUT = "TIMEOUT"
TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
FETCH_ERROR = "FETCH_ERROR"
NOT_HTML = "NOT_HTML"
EMPTY_BODY = "EMPTY_BODY"

# Failures after which the host is considered gone
FATAL_ERRORS = frozenset([DNS_FAIL, CONNECTION_REFUSED])

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
    "name resolution",
)
_REFUSED_MARKERS = ("connection refused", "errno 111", "actively refused")
_TLS_MARKERS = ("certificate", "ssl", "tls")


@dataclass
class FetchedPage:
    """Raw result of fetching one URL."""

    url: str
    html: str
    status_code: int
    error_code: str | None = None
    content_type: str | None = None
    final_url: str | None = None
    fetch_time_ms: int = 0

    @property
    def success(self) -> bool:
        """Check if the fetch produced usable HTML."""
        return self.error_code is None and self.status_code < 400 and bool(self.html)

    @property
    def responded(self) -> bool:
        """Check if the server answered at all (any HTTP status)."""
        return self.status_code > 0


def http_error_code(status_code: int) -> str:
    """Error code for an HTTP error status."""
    return f"HTTP_{status_code}"


def _exception_chain(exc: BaseException) -> list[BaseException]:
    """Return an exception followed by its causes/contexts."""
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def classify_transport_error(exc: BaseException) -> str:
    """
    Map a transport exception to a fetch error code.

    Inspects the wrapped OS/SSL errors first and falls back to
    well-known message fragments.
    """
    chain = _exception_chain(exc)

    for err in chain:
        if isinstance(err, httpx.TimeoutException):
            return TIMEOUT
        if isinstance(err, httpx.TooManyRedirects):
            return TOO_MANY_REDIRECTS
        if isinstance(err, socket.gaierror):
            return DNS_FAIL
        if isinstance(err, ConnectionRefusedError):
            return CONNECTION_REFUSED
        if isinstance(err, ssl.SSLError):
            return TLS_ERROR

    message = " ".join(str(err) for err in chain).lower()
    if any(marker in message for marker in _DNS_MARKERS):
        return DNS_FAIL
    if any(marker in message for marker in _REFUSED_MARKERS):
        return CONNECTION_REFUSED
    if any(marker in message for marker in _TLS_MARKERS):
        return TLS_ERROR
    return FETCH_ERROR


class Fetcher:
    """Single-attempt HTML fetcher with a per-request timeout."""

    def __init__(
        self,
        user_agent: str,
        timeout: float = 5.0,
        max_redirects: int = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_redirects = max_redirects
        self._transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml",
            "Accept-Language": "en-US,en;q=0.9",
        }

    async def fetch(self, url: str) -> FetchedPage:
        """
        Fetch a URL.

        Never raises for network or HTTP problems; the outcome is
        reported through FetchedPage.error_code.

        Args:
            url: The URL to fetch

        Returns:
            FetchedPage with the markup or an error code
        """
        start = time.perf_counter()

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                max_redirects=self.max_redirects,
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers=self.headers)

        except httpx.HTTPError as e:
            error_code = classify_transport_error(e)
            logger.debug("fetch_failed", url=url, error_code=error_code, error=str(e))
            record_page_fetch(error_code)
            return FetchedPage(
                url=url,
                html="",
                status_code=0,
                error_code=error_code,
                fetch_time_ms=int((time.perf_counter() - start) * 1000),
            )

        fetch_time_ms = int((time.perf_counter() - start) * 1000)
        content_type = response.headers.get("content-type", "")
        page = FetchedPage(
            url=url,
            html="",
            status_code=response.status_code,
            content_type=content_type,
            final_url=str(response.url),
            fetch_time_ms=fetch_time_ms,
        )

        if response.status_code >= 400:
            page.error_code = http_error_code(response.status_code)
        elif "html" not in content_type.lower():
            page.error_code = NOT_HTML
        elif not response.text.strip():
            page.error_code = EMPTY_BODY
        else:
            page.html = response.text

        record_page_fetch(page.error_code)

        logger.debug(
            "page_fetched",
            url=url,
            status=response.status_code,
            error_code=page.error_code,
            fetch_time_ms=fetch_time_ms,
        )
        return page
