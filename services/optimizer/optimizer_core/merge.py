from __future__ import annotations

from typing import Sequence

from libs.core.models import Document, Improvement, SkillGroup, Strategy

from .skills import filter_new_skills


def _merge_first_group_skills(groups: list[SkillGroup], new_skills: Sequence[str]) -> list[SkillGroup]:
    if not groups or not new_skills:
        return groups
    first = groups[0]
    additions = filter_new_skills(first.skills, new_skills)
    if not additions:
        return groups
    updated = first.model_copy(update={"skills": [*first.skills, *additions]})
    return [updated, *groups[1:]]


def merge(document: Document, improvement: Improvement, strategy: Strategy) -> Document:
    """Return a new document with the improvement applied; the input is left untouched.

    A major rewrite replaces the summary and the achievement lists it names. Every other
    strategy only appends achievements. Skills always go through the duplicate filter into the
    first skill group.
    """
    merged = document.model_copy(deep=True)
    if improvement.summary is not None:
        merged.summary = improvement.summary

    by_entry = {item.entry_id: item.new_achievements for item in improvement.experience_improvements}
    for entry in merged.experience_entries:
        additions = by_entry.get(entry.id)
        if additions is None:
            continue
        if strategy == Strategy.major_rewrite:
            entry.achievements = list(additions)
        else:
            entry.achievements = [*entry.achievements, *additions]

    merged.skill_groups = _merge_first_group_skills(merged.skill_groups, improvement.new_skills)
    return merged


def append_to_first_entry(
    document: Document, achievements: Sequence[str], skills: Sequence[str] = ()
) -> Document:
    if not document.experience_entries:
        improvement = Improvement(new_skills=list(skills))
    else:
        improvement = Improvement.model_validate(
            {
                "experience_improvements": [
                    {
                        "entry_id": document.experience_entries[0].id,
                        "new_achievements": list(achievements),
                    }
                ],
                "new_skills": list(skills),
            }
        )
    return merge(document, improvement, Strategy.option_applied)
