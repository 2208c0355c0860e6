"""Lexical similarity primitives: tokenization, overlap and TF cosine."""

import math
import re
from collections import Counter

STOP_WORDS = frozenset(
    [
        "the",
        "and",
        "for",
        "with",
        "that",
        "this",
        "are",
        "was",
        "were",
        "have",
        "has",
        "had",
        "not",
        "but",
        "from",
        "they",
        "your",
        "their",
        "will",
        "can",
        "been",
        "our",
        "all",
        "also",
        "when",
        "which",
        "how",
        "what",
        "why",
        "who",
        "where",
        "more",
        "most",
        "some",
        "any",
        "its",
        "you",
        "about",
        "into",
        "than",
        "other",
        "then",
        "there",
        "these",
    ]
)

MIN_TOKEN_LENGTH = 3

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, not to even."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def tokenize(text: str) -> list[str]:
    """
    Tokenize text for lexical matching.

    Lowercases, replaces non-alphanumerics with spaces, and drops short
    tokens and stop words.
    """
    cleaned = _NON_ALNUM_RE.sub(" ", text.lower())
    return [
        token
        for token in cleaned.split()
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def overlap_ratio(a: list[str], b: list[str]) -> float:
    """|A n B| / max(|A|, |B|) over token sets; 0 when either is empty."""
    set_a, set_b = set(a), set(b)
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / max(len(set_a), len(set_b))


def term_frequencies(tokens: list[str]) -> dict[str, float]:
    """Length-normalized term frequencies."""
    if not tokens:
        return {}
    total = len(tokens)
    return {term: count / total for term, count in Counter(tokens).items()}


def cosine_similarity(a: dict[str, float], b: dict[str, float]) -> float:
    """Cosine of two sparse vectors; 0 when either norm is 0."""
    norm_a = math.sqrt(sum(v * v for v in a.values()))
    norm_b = math.sqrt(sum(v * v for v in b.values()))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    dot = sum(weight * b.get(term, 0.0) for term, weight in a.items())
    return dot / (norm_a * norm_b)


def text_similarity(query_tokens: list[str], text: str) -> float:
    """0.5 * overlap + 0.5 * TF cosine between query tokens and a text."""
    tokens = tokenize(text)
    overlap = overlap_ratio(query_tokens, tokens)
    cosine = cosine_similarity(term_frequencies(query_tokens), term_frequencies(tokens))
    return 0.5 * overlap + 0.5 * cosine
