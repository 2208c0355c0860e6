"""Lexical coverage matching package."""

# Use explicit imports when needed:
# from worker.retrieval.coverage import match_query_coverage, score_query_against_page
# from worker.retrieval.similarity import tokenize, overlap_ratio, cosine_similarity

__all__ = [
    # Similarity
    "tokenize",
    "overlap_ratio",
    "term_frequencies",
    "cosine_similarity",
    "round_half_up",
    # Coverage
    "score_query_against_page",
    "match_query",
    "match_query_coverage",
]
