"""Completion client, prompts and output schemas for task extraction."""

from .prompts import get_task_extraction_prompt
from .schemas import ExtractionBatch, ExtractionCandidate, Priority
from .service import CompletionClient, get_completion_client

__all__ = [
    "CompletionClient",
    "get_completion_client",
    "get_task_extraction_prompt",
    "ExtractionBatch",
    "ExtractionCandidate",
    "Priority",
]
