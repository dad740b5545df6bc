from __future__ import annotations

from typing import Any, Dict, Iterator, Optional

from libs.core.models import IterationRecord


class HistoryLog:
    """Append-only score history for one document's optimization session."""

    def __init__(self) -> None:
        self._records: list[IterationRecord] = []

    def append(self, record: IterationRecord) -> IterationRecord:
        self._records.append(record)
        return record

    @property
    def records(self) -> tuple[IterationRecord, ...]:
        return tuple(self._records)

    @property
    def latest(self) -> Optional[IterationRecord]:
        return self._records[-1] if self._records else None

    @property
    def scores(self) -> list[int]:
        return [record.score for record in self._records]

    def next_iteration_number(self) -> int:
        if not self._records:
            return 1
        return self._records[-1].iteration_number + 1

    def score_delta(self, record: IterationRecord) -> Optional[int]:
        """Score change against the record appended just before ``record``."""
        for idx, candidate in enumerate(self._records):
            if candidate is record:
                if idx == 0:
                    return None
                return record.score - self._records[idx - 1].score
        raise ValueError("record is not part of this history")

    def as_dicts(self) -> list[Dict[str, Any]]:
        return [record.model_dump(mode="json") for record in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[IterationRecord]:
        return iter(tuple(self._records))
