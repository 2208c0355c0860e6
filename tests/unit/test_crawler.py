"""Tests for the bounded site crawler."""

import httpx

from tests.fixtures.sites import html_page, site_transport, unreachable_transport
from worker.crawler.crawler import (
    NO_CONTENT,
    ROBOTS_BLOCKED,
    UNREACHABLE,
    CrawlConfig,
    SiteCrawler,
    build_crawler,
    extract_internal_links,
    select_candidates,
)
from worker.crawler.demo import build_demo_pages
from worker.crawler.fetcher import DNS_FAIL, FetchedPage


class TestExtractInternalLinks:
    """Tests for link extraction."""

    def test_same_origin_links_in_order(self) -> None:
        html = """
        <a href="/pricing">Pricing</a>
        <a href="https://example.com/blog/">Blog</a>
        <a href="https://other.com/x">External</a>
        <a href="/pricing#plans">Pricing again</a>
        <a href="mailto:hi@example.com">Mail</a>
        """
        links = extract_internal_links(html, "https://example.com")
        assert links == ["https://example.com/pricing", "https://example.com/blog"]


class TestSelectCandidates:
    """Tests for candidate ordering."""

    BASE = "https://example.com"

    def test_conventional_paths_first(self) -> None:
        candidates = select_candidates(self.BASE, [f"{self.BASE}/pricing"], limit=4)
        assert candidates == [
            f"{self.BASE}/about",
            f"{self.BASE}/services",
            f"{self.BASE}/faq",
            f"{self.BASE}/contact",
        ]

    def test_links_after_paths_and_deduplicated(self) -> None:
        links = [self.BASE, f"{self.BASE}/faq", f"{self.BASE}/pricing"]
        candidates = select_candidates(self.BASE, links, limit=7)
        assert candidates == [
            f"{self.BASE}/about",
            f"{self.BASE}/services",
            f"{self.BASE}/faq",
            f"{self.BASE}/contact",
            f"{self.BASE}/about-us",
            f"{self.BASE}/pricing",
        ]


class TestSiteCrawler:
    """Tests for SiteCrawler.crawl."""

    async def test_crawls_homepage_and_candidates(self, example_site) -> None:
        crawler = SiteCrawler(transport=site_transport(example_site))
        result = await crawler.crawl("example.com")

        assert result.error is None
        assert result.homepage is not None
        assert [page.url for page in result.pages] == ["https://example.com/faq"]
        assert len(result.all_pages) == 2

    async def test_www_only_host(self) -> None:
        site = {
            "https://www.example.com": (200, "text/html", html_page(h1="Home", links=["/faq"])),
            "https://www.example.com/faq": (200, "text/html", html_page(h1="FAQ")),
        }
        transport = site_transport(site)

        result = await SiteCrawler(transport=transport).crawl("www.example.com")

        assert result.error is None
        assert result.homepage is not None
        assert result.homepage.url == "https://www.example.com"
        assert [page.url for page in result.pages] == ["https://www.example.com/faq"]
        assert "https://example.com" not in transport.seen

    async def test_candidate_limit(self) -> None:
        pages = {
            "https://example.com": (200, "text/html", html_page(h1="Home")),
        }
        for path in ("/about", "/services", "/faq", "/contact", "/about-us"):
            pages[f"https://example.com{path}"] = (200, "text/html", html_page(h1=path))

        transport = site_transport(pages)
        crawler = SiteCrawler(CrawlConfig(max_candidates=4), transport=transport)
        result = await crawler.crawl("example.com")

        assert len(result.pages) == 4
        assert "https://example.com/about-us" not in transport.seen

    async def test_robots_blocked(self) -> None:
        transport = site_transport(
            {
                "https://example.com/robots.txt": (200, "text/plain", "User-agent: *\nDisallow: /"),
                "https://example.com": (200, "text/html", html_page(h1="Home")),
            }
        )
        result = await SiteCrawler(transport=transport).crawl("example.com")

        assert result.blocked_by_robots is True
        assert result.error == ROBOTS_BLOCKED
        assert result.homepage is None
        assert transport.seen == ["https://example.com/robots.txt"]

    async def test_robots_path_rules_filter_candidates(self, example_site) -> None:
        example_site["https://example.com/robots.txt"] = (
            200,
            "text/plain",
            "User-agent: *\nDisallow: /faq",
        )
        transport = site_transport(example_site)
        result = await SiteCrawler(transport=transport).crawl("example.com")

        assert result.error is None
        assert result.pages == []
        assert "https://example.com/faq" not in transport.seen

    async def test_unreachable_domain(self) -> None:
        result = await SiteCrawler(transport=unreachable_transport()).crawl("missing.invalid")

        assert result.error == UNREACHABLE
        assert result.homepage_error == DNS_FAIL
        assert result.homepage is None

    async def test_non_html_homepage_is_no_content(self) -> None:
        transport = site_transport(
            {
                "https://example.com": (200, "application/pdf", "%PDF"),
                "http://example.com": (200, "application/pdf", "%PDF"),
            }
        )
        result = await SiteCrawler(transport=transport).crawl("example.com")

        assert result.error == NO_CONTENT
        assert result.homepage is None

    async def test_http_fallback(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/robots.txt":
                return httpx.Response(404)
            if request.url.scheme == "https":
                raise httpx.ConnectError("[SSL] certificate verify failed", request=request)
            return httpx.Response(200, headers={"content-type": "text/html"}, text=html_page(h1="Plain"))

        result = await SiteCrawler(transport=httpx.MockTransport(handler)).crawl("example.com")

        assert result.error is None
        assert result.homepage is not None
        assert result.homepage.url == "http://example.com"

    async def test_candidate_failures_are_isolated(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if path == "/about":
                raise httpx.ReadTimeout("slow", request=request)
            if path in ("/", "/services"):
                return httpx.Response(200, headers={"content-type": "text/html"}, text=html_page(h1=path))
            return httpx.Response(404)

        result = await SiteCrawler(transport=httpx.MockTransport(handler)).crawl("example.com")

        assert [page.url for page in result.pages] == ["https://example.com/services"]

    async def test_fetch_many_skips_raised_exceptions(self) -> None:
        crawler = SiteCrawler(transport=site_transport({}))

        async def fake_fetch(url: str) -> FetchedPage:
            if url.endswith("/bad"):
                raise RuntimeError("boom")
            return FetchedPage(url=url, html="<p>ok</p>", status_code=200)

        crawler.fetcher.fetch = fake_fetch  # type: ignore[method-assign]
        pages = await crawler.fetch_many(["https://example.com/bad", "https://example.com/good"])

        assert [page.url for page in pages] == ["https://example.com/good"]

    def test_build_crawler_uses_settings(self, settings) -> None:
        crawler = build_crawler(settings)
        assert crawler.config.max_candidates == settings.crawler_max_candidates
        assert crawler.config.user_agent == settings.crawler_user_agent
        assert crawler.fetcher.timeout == settings.crawler_timeout


class TestDemoPages:
    """Tests for synthetic demo pages."""

    def test_two_pages_named_after_domain(self) -> None:
        pages = build_demo_pages("https://www.acme-widgets.com/")

        assert [page.url for page in pages] == [
            "https://www.acme-widgets.com",
            "https://www.acme-widgets.com/services",
        ]
        assert "<title>Acme widgets - Professional Services</title>" in pages[0].html
        assert "<h1>Our Services</h1>" in pages[1].html
        assert all(page.success for page in pages)

    def test_deterministic(self) -> None:
        first = build_demo_pages("example.com")
        second = build_demo_pages("example.com")
        assert [page.html for page in first] == [page.html for page in second]
