"""Bounded site crawler: robots check, homepage, and a few candidate pages."""

import asyncio
from dataclasses import dataclass, field

import structlog
from bs4 import BeautifulSoup

from worker.crawler.fetcher import FATAL_ERRORS, FetchedPage, Fetcher
from worker.crawler.robots import RobotsChecker
from worker.crawler.url import normalize_base_url, resolve_internal_link, to_http_url

logger = structlog.get_logger(__name__)

# Crawl-level errors reported on CrawlResult.error
ROBOTS_BLOCKED = "ROBOTS_BLOCKED"
UNREACHABLE = "UNREACHABLE"
NO_CONTENT = "NO_CONTENT"

# Conventional paths tried before discovered links
CANDIDATE_PATHS = ["/about", "/services", "/faq", "/contact", "/about-us"]


@dataclass
class CrawlConfig:
    """Configuration for a crawl."""

    user_agent: str = "Mozilla/5.0 (compatible; CitableBot/1.0; +https://citable.app/bot)"
    agent_token: str = "citablebot"
    timeout: float = 5.0
    robots_timeout: float = 3.0
    max_redirects: int = 5
    max_candidates: int = 4


@dataclass
class CrawlResult:
    """Result of a bounded crawl."""

    base_url: str
    homepage: FetchedPage | None = None
    pages: list[FetchedPage] = field(default_factory=list)
    blocked_by_robots: bool = False
    error: str | None = None
    homepage_error: str | None = None

    @property
    def all_pages(self) -> list[FetchedPage]:
        """Homepage followed by the successfully fetched candidates."""
        if self.homepage is None:
            return list(self.pages)
        return [self.homepage, *self.pages]


def extract_internal_links(html: str, base_url: str) -> list[str]:
    """Extract deduplicated same-origin document links in document order."""
    soup = BeautifulSoup(html, "html.parser")
    links: list[str] = []
    seen: set[str] = set()

    for a_tag in soup.find_all("a", href=True):
        resolved = resolve_internal_link(str(a_tag["href"]), base_url)
        if resolved and resolved not in seen:
            seen.add(resolved)
            links.append(resolved)

    return links


def select_candidates(base_url: str, links: list[str], limit: int) -> list[str]:
    """
    Build the ordered candidate list.

    Conventional paths come first, then discovered links. The homepage
    itself is never a candidate.
    """
    candidates: list[str] = []
    seen = {base_url}

    for url in [base_url + path for path in CANDIDATE_PATHS] + links:
        if url in seen:
            continue
        seen.add(url)
        candidates.append(url)
        if len(candidates) >= limit:
            break

    return candidates


class SiteCrawler:
    """Crawls a homepage plus a small, fixed number of candidate pages."""

    def __init__(
        self,
        config: CrawlConfig | None = None,
        transport=None,
    ):
        self.config = config or CrawlConfig()
        self.fetcher = Fetcher(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout,
            max_redirects=self.config.max_redirects,
            transport=transport,
        )
        self.robots = RobotsChecker(
            user_agent=self.config.user_agent,
            agent_token=self.config.agent_token,
            timeout=self.config.robots_timeout,
            transport=transport,
        )

    async def crawl(self, domain: str) -> CrawlResult:
        """
        Crawl a domain.

        Args:
            domain: Bare domain or URL

        Returns:
            CrawlResult; failures are reported through ``error``
        """
        base_url = normalize_base_url(domain)
        result = CrawlResult(base_url=base_url)

        logger.info("crawl_started", base_url=base_url)

        policy = await self.robots.fetch(base_url)
        if policy.blocks_all:
            logger.info("robots_blocked", base_url=base_url)
            result.blocked_by_robots = True
            result.error = ROBOTS_BLOCKED
            return result

        homepage = await self._fetch_homepage(base_url, result)
        if homepage is None:
            logger.info(
                "crawl_failed",
                base_url=base_url,
                error=result.error,
                homepage_error=result.homepage_error,
            )
            return result

        result.homepage = homepage
        links = extract_internal_links(homepage.html, base_url)
        candidates = [
            url
            for url in select_candidates(base_url, links, self.config.max_candidates)
            if policy.is_allowed(url)
        ]
        result.pages = await self.fetch_many(candidates)

        logger.info(
            "crawl_completed",
            base_url=base_url,
            links_found=len(links),
            candidates=len(candidates),
            pages_fetched=len(result.pages),
        )
        return result

    async def _fetch_homepage(self, base_url: str, result: CrawlResult) -> FetchedPage | None:
        """Fetch the homepage, falling back to plain HTTP once."""
        page = await self.fetcher.fetch(base_url)
        if page.success:
            return page

        result.homepage_error = page.error_code
        if page.error_code in FATAL_ERRORS:
            result.error = UNREACHABLE
            return None

        fallback_url = to_http_url(base_url)
        logger.info(
            "homepage_http_fallback",
            url=fallback_url,
            error_code=page.error_code,
        )
        fallback = await self.fetcher.fetch(fallback_url)
        if fallback.success:
            return fallback

        result.homepage_error = fallback.error_code
        if fallback.responded or page.responded:
            # The server answered, but not with usable markup
            result.error = NO_CONTENT
        else:
            result.error = UNREACHABLE
        return None

    async def fetch_many(self, urls: list[str]) -> list[FetchedPage]:
        """
        Fetch URLs concurrently and keep the usable pages.

        Each fetch is isolated; an exception in one does not cancel the
        others. Results are returned in input order.
        """
        if not urls:
            return []

        outcomes = await asyncio.gather(
            *(self.fetcher.fetch(url) for url in urls),
            return_exceptions=True,
        )

        pages: list[FetchedPage] = []
        for url, outcome in zip(urls, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning("candidate_fetch_error", url=url, error=str(outcome))
                continue
            if outcome.success:
                pages.append(outcome)
            else:
                logger.debug("candidate_skipped", url=url, error_code=outcome.error_code)
        return pages


def build_crawler(settings=None, transport=None) -> SiteCrawler:
    """Create a SiteCrawler from application settings."""
    if settings is None:
        from api.config import get_settings

        settings = get_settings()

    config = CrawlConfig(
        user_agent=settings.crawler_user_agent,
        agent_token=settings.crawler_agent_token,
        timeout=settings.crawler_timeout,
        robots_timeout=settings.crawler_robots_timeout,
        max_redirects=settings.crawler_max_redirects,
        max_candidates=settings.crawler_max_candidates,
    )
    return SiteCrawler(config, transport=transport)


__all__ = [
    "CANDIDATE_PATHS",
    "NO_CONTENT",
    "ROBOTS_BLOCKED",
    "UNREACHABLE",
    "CrawlConfig",
    "CrawlResult",
    "SiteCrawler",
    "build_crawler",
    "extract_internal_links",
    "select_candidates",
]
