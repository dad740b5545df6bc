from __future__ import annotations

import json
from typing import Sequence


def _numbered(items: Sequence[str]) -> str:
    return "\n".join(f"{idx}. {item}" for idx, item in enumerate(items, start=1))


def _gaps_section(gaps: Sequence[str] | None, heading: str = "Critical gaps to address") -> str:
    if not gaps:
        return ""
    return f"{heading}:\n{_numbered(gaps)}\n"


def match_score_prompt(document_text: str, target_description: str) -> str:
    return (
        "You are an ATS (Applicant Tracking System) scoring engine. Calculate a precise match score "
        "between the resume and the job description below.\n"
        "Scoring rubric (use these exact weights):\n"
        "1. Keyword match (max 40 points):\n"
        "   - Technical terms from the job description present in the resume (max 20)\n"
        "   - Job-specific domain terminology (max 10)\n"
        "   - Industry buzzwords (max 10)\n"
        "2. Skills overlap between required and present skills (max 30 points)\n"
        "3. Relevance of the stated experience to the role's responsibilities (max 20 points)\n"
        "4. Completeness of coverage of all stated requirements (max 10 points)\n"
        "Rules:\n"
        "- Be mathematically precise; do not default to a middling score.\n"
        "- A resume that covers 90% or more of the job keywords must score 90 or higher.\n"
        "- Each gap must name one specific, addressable deficiency (a missing skill, tool, "
        "practice or kind of evidence), never a vague category like 'needs more detail'.\n"
        "Return ONLY one JSON object with keys:\n"
        '- "matchScore": integer from 0 to 100\n'
        '- "strengths": array of short strings\n'
        '- "gaps": array of short strings\n'
        f"Resume:\n{document_text}\n\n"
        f"Job description:\n{target_description}\n"
        "Return ONLY the JSON object."
    )


def summary_rewrite_prompt(
    current_summary: str,
    target_description: str,
    gaps: Sequence[str] | None = None,
) -> str:
    return (
        "You are an ATS optimization specialist rewriting a professional summary.\n"
        "Requirements:\n"
        "- 6 to 9 concise bullet points, 80 to 120 words in total, one line each.\n"
        "- Start every bullet with a different power word; never repeat sentence structures.\n"
        "- The first 2 to 3 bullets state scale or scope (team size, budget, users, projects).\n"
        "- Use exact keywords from the job description and directly address every listed gap.\n"
        'Return ONLY one JSON object: {"summary": "<bullets separated by newlines, each starting with •>"}\n'
        f"{_gaps_section(gaps)}"
        f"Current summary:\n{current_summary}\n\n"
        f"Job description:\n{target_description}\n"
        "Return ONLY the JSON object."
    )


def achievements_rewrite_prompt(
    entry_title: str,
    company: str,
    current_achievements: Sequence[str],
    target_description: str,
    gaps: Sequence[str] | None = None,
) -> str:
    achievements_json = json.dumps(list(current_achievements), ensure_ascii=False, indent=2)
    return (
        "You are an elite resume writer balancing ATS optimization with human readability.\n"
        "Rewrite the achievements of one role from scratch.\n"
        "Requirements:\n"
        "- Produce 6 to 8 achievements; each is one sentence of 15 to 20 words.\n"
        "- Use a different action verb for each achievement.\n"
        "- The first 2 to 3 achievements include scale context (team size, budget, users, systems).\n"
        "- Include a concrete metric in every achievement; structure as scope, action, outcome.\n"
        "- Use 3 to 4 exact keywords from the job description per achievement.\n"
        "- Address the listed gaps where they plausibly fit this role.\n"
        'Return ONLY one JSON object: {"achievements": ["...", "..."]}\n'
        f"Role title: {entry_title}\n"
        f"Company: {company}\n"
        f"Current achievements (JSON): {achievements_json}\n"
        f"{_gaps_section(gaps)}"
        f"Job description:\n{target_description}\n"
        "Return ONLY the JSON object."
    )


def skill_suggestion_prompt(
    current_skills: Sequence[str],
    target_description: str,
    gaps: Sequence[str] | None = None,
) -> str:
    return (
        "You are an ATS keyword extraction expert.\n"
        "Extract 15 to 20 high-impact skills that appear in the job description but are missing "
        "from the current skills. Include technologies, tools, methodologies and soft skills. "
        "Prioritize skills named in the gaps. Do not repeat any current skill.\n"
        'Return ONLY one JSON object: {"skills": ["skill", "..."]}\n'
        f"Current skills: {', '.join(current_skills) if current_skills else '(none)'}\n"
        f"{_gaps_section(gaps, heading='Critical gaps')}"
        f"Job description:\n{target_description}\n"
        "Return ONLY the JSON object."
    )


def gap_bullets_prompt(
    gaps: Sequence[str],
    target_description: str,
    experience_context: Sequence[str],
) -> str:
    context = "\n".join(experience_context) if experience_context else "(no roles listed)"
    return (
        "You are an elite resume writer. Create impactful, quantifiable achievements that "
        "directly fill resume gaps.\n"
        f"Generate exactly {len(gaps)} achievements, one for each gap listed below, in the same order.\n"
        "Each achievement must:\n"
        "- directly address its gap with a concrete accomplishment\n"
        "- include a quantifiable metric (numbers, %, time, scale)\n"
        "- start with a strong action verb and read as realistic for the roles listed\n"
        "- use keywords from the job description\n"
        f'Return ONLY one JSON object: {{"bullets": [exactly {len(gaps)} strings]}}\n'
        f"Current experience:\n{context}\n\n"
        f"{_gaps_section(gaps)}"
        f"Job description:\n{target_description}\n"
        "Return ONLY the JSON object."
    )


def bullet_options_prompt(
    document_text: str,
    target_description: str,
    gaps: Sequence[str],
    current_score: int,
    target_score: int,
    option_count: int,
) -> str:
    return (
        "You are an elite resume strategist closing the remaining ATS gaps of a resume.\n"
        f"Current match score: {current_score}. Target: {target_score}.\n"
        f"Generate exactly {option_count} independent options. Each option uses a different "
        "strategic theme (for example Leadership, Technical Excellence, Business Impact, Scale, "
        "Innovation) and contains a set of achievements that TOGETHER address EVERY gap listed "
        "below. No option may leave a gap unaddressed.\n"
        "Each achievement is one sentence with a concrete metric and uses the exact wording of "
        "the gap it addresses. Keep achievements realistic for the roles in the resume.\n"
        "Optionally list skills the option introduces.\n"
        "Return ONLY one JSON object:\n"
        '{"options": [{"theme": "...", "achievements": ["..."], "skills": ["..."]}]}\n'
        f"{_gaps_section(gaps, heading='Areas to improve')}"
        f"Resume:\n{document_text}\n\n"
        f"Job description:\n{target_description}\n"
        "Return ONLY the JSON object."
    )
