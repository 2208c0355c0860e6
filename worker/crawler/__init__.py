"""Crawler package: robots policy, page fetching, and bounded site crawls."""

# Use explicit imports when needed:
# from worker.crawler.crawler import SiteCrawler, CrawlResult, build_crawler
# from worker.crawler.fetcher import Fetcher, FetchedPage
# from worker.crawler.robots import RobotsChecker, RobotsParser
# from worker.crawler.demo import build_demo_pages

__all__ = [
    # Crawler
    "SiteCrawler",
    "CrawlConfig",
    "CrawlResult",
    "build_crawler",
    # Fetcher
    "Fetcher",
    "FetchedPage",
    # Robots
    "RobotsChecker",
    "RobotsParser",
    # Demo content
    "build_demo_pages",
    # URL utilities
    "clean_domain",
    "normalize_base_url",
    "resolve_internal_link",
]
