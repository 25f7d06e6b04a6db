"""
Prompt templates for task extraction.

The system message carries the output schema, the extraction rules and the
reference data (projects, labels, a sample of existing tasks) so the model can
pick ids instead of inventing them. The user message is the raw free text.
"""

from datetime import date
from typing import Sequence

from task_intake.vikunja.models import Label, Project, Task

TASK_EXTRACTION_SYSTEM_PROMPT = """You are a task extraction assistant. Given free text from a user, extract one or more actionable tasks.

Output ONLY valid JSON matching this exact schema (no markdown, no explanation):
{{
  "tasks": [
    {{
      "title": "string (required, concise task title)",
      "description": "string or null (optional, extra details)",
      "project_id": number or null (optional, must be an id from the projects list below),
      "label_ids": [number] or null (optional, must be ids from the labels list below),
      "due_date": "ISO 8601 datetime string" or null (optional, e.g. "2026-03-01T00:00:00Z"),
      "priority": number or null (optional, 0=unset, 1=low, 2=medium, 3=high, 4=urgent, 5=DO NOW)
    }}
  ]
}}

Rules:
- Extract ALL tasks mentioned in the text.
- If the user mentions a project by name, match it to the closest project_id from the list.
- If the user mentions labels/tags, match them to label_ids from the list.
- If you cannot confidently match a project or label, omit that field (set to null).
- For relative dates like "tomorrow", "next Monday", calculate from today's date.
- Today's date is: {today}

{context}"""


def render_reference_context(
    projects: Sequence[Project],
    labels: Sequence[Label],
    existing_tasks: Sequence[Task],
    sample_size: int = 10,
) -> str:
    """Render the reference data block appended to the system prompt."""
    lines = ["## Available Projects"]
    lines.extend(f'- id: {p.id}, title: "{p.title}"' for p in projects)

    lines.append("")
    lines.append("## Available Labels")
    if labels:
        lines.extend(f'- id: {l.id}, title: "{l.title}"' for l in labels)
    else:
        lines.append("(no labels exist yet)")

    lines.append("")
    lines.append("## Sample Existing Tasks (for reference)")
    lines.extend(
        f'- "{t.title}" (project_id: {t.project_id})' for t in list(existing_tasks)[:sample_size]
    )

    return "\n".join(lines)


def get_task_extraction_prompt(
    freetext: str,
    projects: Sequence[Project],
    labels: Sequence[Label],
    existing_tasks: Sequence[Task],
    *,
    today: date,
    sample_size: int = 10,
) -> list[dict[str, str]]:
    """Build the task extraction messages (system instruction, then user text)."""
    context = render_reference_context(projects, labels, existing_tasks, sample_size)
    system_prompt = TASK_EXTRACTION_SYSTEM_PROMPT.format(
        today=today.isoformat(),
        context=context,
    )
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": freetext},
    ]
