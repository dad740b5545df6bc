from __future__ import annotations

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

ROOT = Path(__file__).resolve().parents[2]
OPTIMIZER_SERVICE_ROOT = ROOT / "services" / "optimizer"
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(OPTIMIZER_SERVICE_ROOT))
from libs.core.models import IterationRecord  # noqa: E402
from optimizer_core.history import HistoryLog  # type: ignore  # noqa: E402


def test_history_appends_in_order_and_reports_deltas() -> None:
    history = HistoryLog()
    assert history.latest is None
    assert history.next_iteration_number() == 1

    first = history.append(IterationRecord(iteration_number=1, score=62))
    second = history.append(IterationRecord(iteration_number=2, score=81))

    assert len(history) == 2
    assert history.scores == [62, 81]
    assert history.latest is second
    assert history.next_iteration_number() == 3
    assert history.score_delta(first) is None
    assert history.score_delta(second) == 19
    assert [record.iteration_number for record in history] == [1, 2]


def test_history_records_are_read_only_views() -> None:
    history = HistoryLog()
    history.append(IterationRecord(iteration_number=1, score=70))
    records = history.records
    assert isinstance(records, tuple)
    with pytest.raises(PydanticValidationError):
        records[0].score = 99  # type: ignore[misc]
    assert history.scores == [70]


def test_score_delta_rejects_foreign_records() -> None:
    history = HistoryLog()
    with pytest.raises(ValueError):
        history.score_delta(IterationRecord(iteration_number=1, score=50))


def test_as_dicts_is_json_ready() -> None:
    history = HistoryLog()
    history.append(IterationRecord(iteration_number=1, score=91))
    (entry,) = history.as_dicts()
    assert entry["iteration_number"] == 1
    assert entry["score"] == 91
    assert isinstance(entry["timestamp"], str)
