"""Vikunja task store client and wire models."""

from .client import VikunjaClient, close_vikunja_client, get_vikunja_client
from .models import Label, LabelBulkRequest, Project, Task

__all__ = [
    "VikunjaClient",
    "close_vikunja_client",
    "get_vikunja_client",
    "Label",
    "LabelBulkRequest",
    "Project",
    "Task",
]
