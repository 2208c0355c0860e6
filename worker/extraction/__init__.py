"""Structural extraction package."""

# Use explicit imports when needed:
# from worker.extraction.parser import analyze_page, PageRecord
# from worker.extraction.summary import analyze_structure, build_site_summary, SiteSummary
# from worker.extraction.cleaner import extract_visible_text

__all__ = [
    # Cleaner
    "extract_visible_text",
    "normalize_whitespace",
    # Parser
    "PageRecord",
    "analyze_page",
    "is_question_heading",
    # Summary
    "SiteSummary",
    "StructuralAnalysis",
    "analyze_structure",
    "build_site_summary",
]
