"""URL normalization and utilities for the crawler."""

import re
from urllib.parse import urljoin, urlparse, urlunparse

# File extensions that never hold an HTML document
SKIP_EXTENSIONS = frozenset(
    [
        # Images
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".svg",
        ".ico",
        ".webp",
        # Documents
        ".pdf",
        ".doc",
        ".docx",
        ".xls",
        ".xlsx",
        ".ppt",
        ".pptx",
        # Media
        ".mp3",
        ".mp4",
        ".mov",
        ".webm",
        ".wav",
        # Archives
        ".zip",
        ".rar",
        ".gz",
        # Code/Data
        ".css",
        ".js",
        ".json",
        ".xml",
        ".csv",
        ".txt",
    ]
)

# URL patterns to skip
SKIP_PATTERNS = [
    re.compile(r"/feed/?$", re.IGNORECASE),
    re.compile(r"/rss/?$", re.IGNORECASE),
    re.compile(r"/wp-admin/", re.IGNORECASE),
    re.compile(r"/wp-includes/", re.IGNORECASE),
    re.compile(r"/wp-content/uploads/", re.IGNORECASE),
    re.compile(r"/cdn-cgi/", re.IGNORECASE),
]

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def clean_domain(value: str) -> str:
    """
    Reduce user input to a host name.

    "https://www.Example.com/about/" -> "www.example.com". A leading
    www. label is kept.
    """
    domain = _SCHEME_RE.sub("", value.strip())
    domain = domain.split("/", 1)[0].split("?", 1)[0].split("#", 1)[0]
    return domain.lower().rstrip(".")


def normalize_base_url(domain: str) -> str:
    """
    Turn a domain string into an absolute base URL.

    Adds https:// when no scheme is present and strips a trailing slash.
    """
    url = domain.strip()
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url.rstrip("/")


def to_http_url(url: str) -> str:
    """Rewrite an https:// URL to plain http:// on the same host."""
    if url.startswith("https://"):
        return "http://" + url[len("https://") :]
    return url


def extract_domain(url: str) -> str | None:
    """Extract the domain from a URL."""
    try:
        parsed = urlparse(url)
        host = parsed.netloc.lower()
        if host.startswith("www."):
            host = host[4:]
        # Remove port
        if ":" in host:
            host = host.split(":")[0]
        return host if host else None
    except ValueError:
        return None


def is_same_domain(url1: str, url2: str) -> bool:
    """Check if two URLs have the same domain."""
    domain1 = extract_domain(url1)
    domain2 = extract_domain(url2)
    return domain1 is not None and domain1 == domain2


def resolve_internal_link(href: str, base_url: str) -> str | None:
    """
    Resolve an anchor href to an absolute same-origin document URL.

    Returns None for fragment-only, non-http, external, and
    non-document links. Query strings and fragments are dropped.
    """
    if not href or not href.strip():
        return None

    href = href.strip()
    if href.startswith(("javascript:", "mailto:", "tel:", "#")):
        return None

    try:
        parsed = urlparse(urljoin(base_url + "/", href))
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None

    absolute = urlunparse((parsed.scheme, parsed.netloc, parsed.path or "/", "", "", ""))
    if not is_same_domain(absolute, base_url):
        return None

    path_lower = parsed.path.lower()
    for ext in SKIP_EXTENSIONS:
        if path_lower.endswith(ext):
            return None

    for pattern in SKIP_PATTERNS:
        if pattern.search(parsed.path):
            return None

    # No trailing slash, including the root, so links compare equal to base URLs
    return absolute.rstrip("/")
