from __future__ import annotations

import sys
from itertools import combinations
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
OPTIMIZER_SERVICE_ROOT = ROOT / "services" / "optimizer"
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(OPTIMIZER_SERVICE_ROOT))
from optimizer_core.skills import (  # type: ignore  # noqa: E402
    filter_new_skills,
    gap_keywords,
    skills_overlap,
)


def test_skills_overlap_is_bidirectional_and_case_insensitive() -> None:
    assert skills_overlap("Python", "python scripting")
    assert skills_overlap("PYTHON SCRIPTING", "python")
    assert not skills_overlap("Go", "Rust")
    assert not skills_overlap("", "Python")


def test_filter_new_skills_drops_contained_and_containing_candidates() -> None:
    existing = ["Python", "Cloud Infrastructure"]
    candidates = ["python", "Python 3", "Cloud", "Terraform", "AWS"]
    assert filter_new_skills(existing, candidates) == ["Terraform", "AWS"]


def test_filter_new_skills_preserves_candidate_order() -> None:
    assert filter_new_skills([], ["Kafka", "Airflow", "dbt"]) == ["Kafka", "Airflow", "dbt"]


def test_filter_new_skills_never_keeps_overlapping_pairs() -> None:
    existing = ["SQL", "Docker"]
    candidates = ["PostgreSQL", "Kubernetes", "kube", "Docker Compose", "Helm", "helm charts", "  "]
    merged = existing + filter_new_skills(existing, candidates)
    for left, right in combinations(merged, 2):
        assert not skills_overlap(left, right), (left, right)


def test_gap_keywords_keeps_tokens_longer_than_three_characters() -> None:
    gaps = ["Docker experience", "Kubernetes", "Agile delivery, CI/CD and AWS"]
    assert gap_keywords(gaps) == [
        "Docker",
        "experience",
        "Kubernetes",
        "Agile",
        "delivery",
        "CI/CD",
    ]


def test_gap_keywords_honors_custom_minimum() -> None:
    assert gap_keywords(["Go and Rust tooling"], min_length=4) == ["tooling"]
