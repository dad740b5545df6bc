from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Type

from pydantic import BaseModel

from . import models

SCHEMA_TARGETS: Dict[str, Type[BaseModel]] = {
    "Document": models.Document,
    "MatchAssessment": models.MatchAssessment,
    "IterationRecord": models.IterationRecord,
    "Improvement": models.Improvement,
    "BulletOption": models.BulletOption,
    "CycleResult": models.CycleResult,
    "AssessmentResult": models.AssessmentResult,
    "OptimizationState": models.OptimizationState,
}


def export_schemas(target_dir: Path) -> list[Path]:
    target_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for name, model in SCHEMA_TARGETS.items():
        schema_path = target_dir / f"{name}.json"
        schema_path.write_text(json.dumps(model.model_json_schema(), indent=2))
        written.append(schema_path)
    return written
