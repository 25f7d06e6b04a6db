"""Extraction-and-validation pipeline stages."""

from .commit import CommitResult, CommitState, CommitSummary, commit
from .context import ExtractionContext, build_context
from .normalize import RECOVERY_STRATEGIES, normalize, validate_batch
from .reconcile import PersistenceRecord, reconcile
from .runner import PipelineOutcome, run_pipeline

__all__ = [
    "CommitResult",
    "CommitState",
    "CommitSummary",
    "commit",
    "ExtractionContext",
    "build_context",
    "RECOVERY_STRATEGIES",
    "normalize",
    "validate_batch",
    "PersistenceRecord",
    "reconcile",
    "PipelineOutcome",
    "run_pipeline",
]
