"""Background task definitions."""

from worker.tasks.scan import (
    PipelineOutcome,
    ScanOrchestrator,
    run_pipeline,
    run_scan_job,
)

__all__ = [
    "PipelineOutcome",
    "ScanOrchestrator",
    "run_pipeline",
    "run_scan_job",
]
