"""Per-page structural parsing."""

import re
from dataclasses import asdict, dataclass, field

from bs4 import BeautifulSoup

from worker.crawler.fetcher import FetchedPage
from worker.extraction.cleaner import normalize_whitespace, strip_non_content, visible_text

# Lead words that make a heading read like a buyer question
QUESTION_WORDS = [
    "what",
    "how",
    "why",
    "when",
    "which",
    "who",
    "best",
    "compare",
    "top",
    "vs",
    "versus",
    "guide",
    "tips",
]

SERVICE_KEYWORDS = [
    "service",
    "solution",
    "platform",
    "tool",
    "software",
    "product",
    "consulting",
    "agency",
    "management",
    "support",
    "help",
    "pricing",
    "plan",
    "feature",
    "benefit",
    "integration",
    "automation",
    "analytics",
    "dashboard",
    "report",
    "insight",
    "strategy",
    "marketing",
    "sales",
    "crm",
    "erp",
    "api",
    "saas",
    "b2b",
    "enterprise",
    "startup",
    "team",
    "workflow",
    "decision",
    "ai",
    "data",
    "cloud",
    "security",
    "compliance",
    "roi",
    "growth",
]

MAX_HEADINGS = 20
MAX_KEYWORD_HITS = 15
MAX_BODY_CHARS = 8000

_SCHEMA_TYPE_RE = re.compile(r'"@type"\s*:\s*"([^"]+)"')


@dataclass
class PageRecord:
    """Normalized structural view of one page."""

    url: str
    title: str
    h1: str
    headings: list[str] = field(default_factory=list)
    structured_data_types: list[str] = field(default_factory=list)
    word_count: int = 0
    question_heading_count: int = 0
    service_keyword_hits: list[str] = field(default_factory=list)
    body_text_sample: str = ""

    @property
    def has_question_headings(self) -> bool:
        return self.question_heading_count > 0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PageRecord":
        return cls(
            url=data["url"],
            title=data.get("title", ""),
            h1=data.get("h1", ""),
            headings=list(data.get("headings", [])),
            structured_data_types=list(data.get("structured_data_types", [])),
            word_count=data.get("word_count", 0),
            question_heading_count=data.get("question_heading_count", 0),
            service_keyword_hits=list(data.get("service_keyword_hits", [])),
            body_text_sample=data.get("body_text_sample", ""),
        )


def is_question_heading(text: str) -> bool:
    """Check if a heading starts with a lead word or has one as a spaced word."""
    lower = text.lower()
    return any(lower.startswith(word) or f" {word} " in lower for word in QUESTION_WORDS)


def find_service_keywords(text: str) -> list[str]:
    """Return vocabulary terms found in text (substring, case-insensitive)."""
    lower = text.lower()
    return [keyword for keyword in SERVICE_KEYWORDS if keyword in lower]


def extract_schema_types(html: str) -> list[str]:
    """Scan raw markup for JSON-LD @type values, first-seen order."""
    types: list[str] = []
    for match in _SCHEMA_TYPE_RE.finditer(html):
        value = match.group(1)
        if value not in types:
            types.append(value)
    return types


def analyze_page(page: FetchedPage) -> PageRecord | None:
    """
    Convert a fetched page into a PageRecord.

    Args:
        page: Fetched page with raw markup

    Returns:
        PageRecord, or None when the page has no markup
    """
    if not page.html or not page.html.strip():
        return None

    soup = BeautifulSoup(page.html, "html.parser")

    title_tag = soup.find("title")
    h1_tag = soup.find("h1")
    h1 = normalize_whitespace(h1_tag.get_text(" ")) if h1_tag else ""
    title = normalize_whitespace(title_tag.get_text(" ")) if title_tag else ""
    title = title or h1

    headings = []
    for tag in soup.find_all(["h2", "h3"]):
        text = normalize_whitespace(tag.get_text(" "))
        if text:
            headings.append(text)

    body = visible_text(strip_non_content(soup))
    question_count = sum(1 for heading in headings if is_question_heading(heading))
    keywords = find_service_keywords(" ".join([body, title, *headings]))

    return PageRecord(
        url=page.url,
        title=title,
        h1=h1,
        headings=headings[:MAX_HEADINGS],
        structured_data_types=extract_schema_types(page.html),
        word_count=len(body.split()),
        question_heading_count=question_count,
        service_keyword_hits=keywords[:MAX_KEYWORD_HITS],
        body_text_sample=body[:MAX_BODY_CHARS],
    )
