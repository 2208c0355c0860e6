"""HTML cleaning and visible text extraction."""

import re

from bs4 import BeautifulSoup, Comment

# Tags removed (with their content) before reading visible text
NON_CONTENT_TAGS = frozenset(
    [
        "script",
        "style",
        "noscript",
        "nav",
        "header",
        "footer",
    ]
)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_non_content(soup: BeautifulSoup) -> BeautifulSoup:
    """Remove non-content elements and comments in place."""
    for tag in soup.find_all(list(NON_CONTENT_TAGS)):
        tag.decompose()

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    return soup


def visible_text(soup: BeautifulSoup) -> str:
    """Read the visible text of an already stripped document."""
    return normalize_whitespace(soup.get_text(separator=" ", strip=True))


def extract_visible_text(html: str) -> str:
    """
    Extract only visible text from HTML.

    Scripts, styles, navigation, headers and footers are dropped.
    """
    soup = BeautifulSoup(html, "html.parser")
    return visible_text(strip_non_content(soup))
