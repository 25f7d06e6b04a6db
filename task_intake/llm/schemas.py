"""
Pydantic Output Schemas for the task extraction completion

These schemas define the object the LLM is asked to return:

    {"tasks": [{"title": ..., "description": ..., "project_id": ...,
                "label_ids": [...], "due_date": ..., "priority": ...}]}

Property names are matched case-insensitively. Identifiers are not checked
against the task store here; that is the reconciler's job.
"""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _lowercase_keys(data: Any) -> Any:
    if isinstance(data, dict):
        return {key.lower() if isinstance(key, str) else key: value for key, value in data.items()}
    return data


# =============================================================================
# Priority
# =============================================================================


class Priority(IntEnum):
    """Vikunja priority scale."""

    UNSET = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    URGENT = 4
    DO_NOW = 5


def _coerce_priority(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return None
        value = int(value)
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, int) and Priority.UNSET <= value <= Priority.DO_NOW:
        return value
    return None


# =============================================================================
# Task Extraction Schema
# =============================================================================


class ExtractionCandidate(BaseModel):
    """A single task as described by the LLM, before reconciliation."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(default=None, description="Concise task title")
    description: str | None = Field(default=None, description="Extra details")
    project_id: int | None = Field(
        default=None,
        description="Id from the available projects list",
    )
    label_ids: list[int] | None = Field(
        default=None,
        description="Ids from the available labels list",
    )
    due_date: str | None = Field(
        default=None,
        description="ISO 8601 datetime, e.g. 2026-03-01T00:00:00Z",
    )
    priority: Priority | None = Field(
        default=None,
        description="0=unset, 1=low, 2=medium, 3=high, 4=urgent, 5=DO NOW",
    )

    @model_validator(mode="before")
    @classmethod
    def _match_keys_case_insensitively(cls, data: Any) -> Any:
        return _lowercase_keys(data)

    @field_validator("priority", mode="before")
    @classmethod
    def _out_of_range_priority_is_unset(cls, value: Any) -> int | None:
        return _coerce_priority(value)

    @property
    def has_title(self) -> bool:
        return bool(self.title and self.title.strip())


class ExtractionBatch(BaseModel):
    """Output schema for task extraction."""

    model_config = ConfigDict(extra="ignore")

    tasks: list[ExtractionCandidate] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _match_keys_case_insensitively(cls, data: Any) -> Any:
        return _lowercase_keys(data)
