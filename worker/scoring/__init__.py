"""Readiness scoring package."""

# Use explicit imports when needed:
# from worker.scoring.calculator import compute_score, compute_confidence, ScoreBreakdown
# from worker.scoring.gaps import detect_gaps

__all__ = [
    # Calculator
    "ScoreBreakdown",
    "StatusLabel",
    "Confidence",
    "compute_score",
    "compute_confidence",
    "status_label_for",
    # Gaps
    "detect_gaps",
]
