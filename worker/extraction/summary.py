"""Site-level aggregation of page records."""

import re
from dataclasses import asdict, dataclass, field

import structlog

from worker.crawler.fetcher import FetchedPage
from worker.extraction.parser import PageRecord, analyze_page

logger = structlog.get_logger(__name__)

MAX_CITY_MENTIONS = 5

# Major cities recognised as locale signals
CITY_GAZETTEER = [
    "new york",
    "los angeles",
    "chicago",
    "houston",
    "phoenix",
    "philadelphia",
    "san antonio",
    "san diego",
    "dallas",
    "san jose",
    "austin",
    "jacksonville",
    "fort worth",
    "columbus",
    "charlotte",
    "san francisco",
    "indianapolis",
    "seattle",
    "denver",
    "washington",
    "nashville",
    "oklahoma city",
    "el paso",
    "boston",
    "portland",
    "las vegas",
    "memphis",
    "louisville",
    "baltimore",
    "milwaukee",
    "albuquerque",
    "tucson",
    "fresno",
    "sacramento",
    "mesa",
    "atlanta",
    "kansas city",
    "omaha",
    "colorado springs",
    "raleigh",
    "long beach",
    "virginia beach",
    "minneapolis",
    "tampa",
    "new orleans",
    "honolulu",
    "anaheim",
    "lexington",
    "st. louis",
    "pittsburgh",
    "cincinnati",
    "miami",
    "riverside",
    "bakersfield",
    "aurora",
    "corpus christi",
    "plano",
    "cleveland",
    "wichita",
    "lincoln",
    "orlando",
    "st. paul",
    "henderson",
    "jersey city",
    "chandler",
    "laredo",
    "madison",
    "lubbock",
    "stockton",
    "scottsdale",
    "reno",
    "buffalo",
    "gilbert",
    "glendale",
    "north las vegas",
    "winston-salem",
    "chesapeake",
    "norfolk",
    "fremont",
    "garland",
    "irving",
    "hialeah",
    "richmond",
    "baton rouge",
    "boise",
    "spokane",
    "tacoma",
    "san bernardino",
    "modesto",
    "fontana",
    "moreno valley",
    "shreveport",
    "akron",
    "des moines",
    "tempe",
    "huntington beach",
    "fayetteville",
    "worcester",
    "ontario",
    "oxnard",
    "montreal",
    "toronto",
    "london",
    "sydney",
    "melbourne",
    "dubai",
    "singapore",
    "berlin",
    "amsterdam",
    "paris",
    "tel aviv",
]

_CITY_RE = re.compile(
    r"\b(" + "|".join(re.escape(city) for city in CITY_GAZETTEER) + r")\b",
    re.IGNORECASE,
)
_LOCAL_PHRASES = ("near me", "local")


@dataclass(frozen=True)
class SiteSummary:
    """Aggregate structural signals for a scanned site."""

    h1_page_count: int
    faq_detected: bool
    schema_detected: bool
    total_word_count: int
    city_mentions: tuple[str, ...] = ()
    has_local_signals: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["city_mentions"] = list(self.city_mentions)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SiteSummary":
        return cls(
            h1_page_count=data["h1_page_count"],
            faq_detected=data["faq_detected"],
            schema_detected=data["schema_detected"],
            total_word_count=data["total_word_count"],
            city_mentions=tuple(data.get("city_mentions", [])),
            has_local_signals=data.get("has_local_signals", False),
        )


@dataclass
class StructuralAnalysis:
    """Parsed pages plus the site summary derived from them."""

    pages: list[PageRecord] = field(default_factory=list)
    site_summary: SiteSummary | None = None

    def to_dict(self) -> dict:
        return {
            "pages": [page.to_dict() for page in self.pages],
            "site_summary": self.site_summary.to_dict() if self.site_summary else None,
        }


def city_token(city: str | None) -> str | None:
    """Return the part of a city input before the first comma."""
    if not city:
        return None
    token = city.split(",")[0].strip()
    return token or None


def _title_case(name: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in name.split(" "))


def find_city_mentions(text: str) -> list[str]:
    """Find gazetteer cities in text, title-cased, first-seen order."""
    mentions: list[str] = []
    for match in _CITY_RE.finditer(text):
        city = _title_case(match.group(1).lower())
        if city not in mentions:
            mentions.append(city)
    return mentions


def _page_text(page: PageRecord) -> str:
    return " ".join([page.body_text_sample, page.title, *page.headings])


def _has_faq(page: PageRecord) -> bool:
    url = page.url.lower()
    return (
        any("faq" in schema_type.lower() for schema_type in page.structured_data_types)
        or page.question_heading_count >= 2
        or "faq" in url
        or "question" in url
    )


def build_site_summary(pages: list[PageRecord], city: str | None = None) -> SiteSummary:
    """
    Aggregate page records into a SiteSummary.

    Args:
        pages: Parsed page records
        city: Optional city supplied with the scan request

    Returns:
        Frozen SiteSummary
    """
    all_text = " ".join(_page_text(page) for page in pages)
    lower_text = all_text.lower()
    token = city_token(city)

    found = find_city_mentions(all_text)
    mentions: list[str] = []
    for name in ([token] if token else []) + found:
        if name.lower() not in {m.lower() for m in mentions}:
            mentions.append(name)

    has_local_signals = (
        bool(found)
        or (token is not None and token.lower() in lower_text)
        or any(phrase in lower_text for phrase in _LOCAL_PHRASES)
    )

    return SiteSummary(
        h1_page_count=sum(1 for page in pages if page.h1),
        faq_detected=any(_has_faq(page) for page in pages),
        schema_detected=any(page.structured_data_types for page in pages),
        total_word_count=sum(page.word_count for page in pages),
        city_mentions=tuple(mentions[:MAX_CITY_MENTIONS]),
        has_local_signals=has_local_signals,
    )


def analyze_structure(
    homepage: FetchedPage | None,
    candidates: list[FetchedPage],
    city: str | None = None,
) -> StructuralAnalysis:
    """Parse the homepage and candidates and summarise the site."""
    fetched = ([homepage] if homepage is not None else []) + list(candidates)
    pages = [record for record in (analyze_page(page) for page in fetched) if record is not None]
    summary = build_site_summary(pages, city)

    logger.debug(
        "structure_analyzed",
        pages=len(pages),
        total_word_count=summary.total_word_count,
        faq_detected=summary.faq_detected,
        schema_detected=summary.schema_detected,
    )
    return StructuralAnalysis(pages=pages, site_summary=summary)
