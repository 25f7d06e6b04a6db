"""
Vikunja API DTOs

Wire models for the subset of the Vikunja v1 API the intake pipeline uses.
Unknown fields returned by the server are ignored.
"""

from pydantic import BaseModel, ConfigDict, Field


class Project(BaseModel):
    """A project as returned by `GET /projects`."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str = ""


class Label(BaseModel):
    """A label as returned by `GET /labels`."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str = ""


class Task(BaseModel):
    """A task, both as sent to `PUT /projects/{id}/tasks` and as returned."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    title: str = ""
    description: str | None = None
    project_id: int | None = None
    due_date: str | None = None
    priority: int | None = None
    labels: list[Label] | None = None


class LabelId(BaseModel):
    id: int


class LabelBulkRequest(BaseModel):
    """Body of `POST /tasks/{id}/labels/bulk`."""

    labels: list[LabelId] = Field(default_factory=list)

    @classmethod
    def from_ids(cls, label_ids: list[int]) -> "LabelBulkRequest":
        return cls(labels=[LabelId(id=label_id) for label_id in label_ids])
