"""Buyer-intent query synthesis package."""

# Use explicit imports when needed:
# from worker.questions.generator import generate_queries, Query
# from worker.questions.templates import TEMPLATE_SETS, select_template_set

__all__ = [
    # Templates
    "Scope",
    "Audience",
    "TemplateSet",
    "QueryTemplate",
    "TEMPLATE_SETS",
    "select_template_set",
    # Generator
    "Query",
    "QueryScores",
    "generate_queries",
]
