from __future__ import annotations

from typing import Any

from libs.core.models import Document


def is_missing_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def all_skills(document: Document) -> list[str]:
    return [skill for group in document.skill_groups for skill in group.skills]


def experience_context(document: Document) -> list[str]:
    return [f"{entry.title} at {entry.company}" for entry in document.experience_entries]


def document_to_text(document: Document) -> str:
    """Flatten a document into the plain text rendering the scoring oracle reads."""
    experience = " ".join(
        f"{entry.title} at {entry.company}: {'. '.join(entry.achievements)}"
        for entry in document.experience_entries
    )
    return (
        f"Summary: {document.summary}\n"
        f"Experience: {experience}\n"
        f"Skills: {', '.join(all_skills(document))}"
    )
