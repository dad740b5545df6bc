from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
OPTIMIZER_SERVICE_ROOT = ROOT / "services" / "optimizer"
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(OPTIMIZER_SERVICE_ROOT))
from optimizer_core.errors import OracleError, ValidationError  # type: ignore  # noqa: E402
from optimizer_core.validation import (  # type: ignore  # noqa: E402
    clean_item,
    extract_json,
    parse_json_object,
    require_score,
    require_string_list,
    require_text,
)


def test_extract_json_strips_fences_and_prose() -> None:
    raw = '```json\n{"matchScore": 80}\n```'
    assert extract_json(raw) == '{"matchScore": 80}'
    assert extract_json('Sure! {"a": 1} hope that helps') == '{"a": 1}'
    assert extract_json("no json here") == ""


def test_parse_json_object_raises_oracle_error() -> None:
    with pytest.raises(OracleError) as excinfo:
        parse_json_object('{"matchScore": 80,')
    assert excinfo.value.status_code == 502
    assert excinfo.value.detail.startswith("invalid_json")
    with pytest.raises(OracleError, match="invalid_json"):
        parse_json_object("")


def test_require_score_rounds_floats_and_rejects_other_types() -> None:
    assert require_score({"matchScore": 87.6}) == 88
    assert require_score({"matchScore": 0}) == 0
    for bad in (True, "90", None):
        with pytest.raises(ValidationError):
            require_score({"matchScore": bad})
    with pytest.raises(ValidationError, match="out of range"):
        require_score({"matchScore": 140})


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_require_score_rejects_non_finite_numbers(value: float) -> None:
    with pytest.raises(ValidationError, match="matchScore must be finite"):
        require_score({"matchScore": value})


def test_require_string_list_cleans_markers() -> None:
    payload = {"bullets": ["- Led migration", "• Cut costs 20%", "2. Hired 4 engineers", "3.5 years of Go"]}
    assert require_string_list(payload, "bullets") == [
        "Led migration",
        "Cut costs 20%",
        "Hired 4 engineers",
        "3.5 years of Go",
    ]


def test_require_string_list_rejects_wrong_shapes() -> None:
    with pytest.raises(ValidationError, match="must be an array"):
        require_string_list({"gaps": "Docker"}, "gaps")
    with pytest.raises(ValidationError, match=r"gaps\[1\] must be a string"):
        require_string_list({"gaps": ["Docker", 3]}, "gaps")
    with pytest.raises(ValidationError, match="must not be blank"):
        require_string_list({"gaps": ["Docker", " - "]}, "gaps")
    with pytest.raises(ValidationError, match="must not be empty"):
        require_string_list({"achievements": []}, "achievements", non_empty=True)
    assert require_string_list({"gaps": []}, "gaps") == []


def test_require_text_rejects_blank_summary() -> None:
    assert require_text({"summary": "  • Led teams\n• Shipped  "}, "summary") == "• Led teams\n• Shipped"
    with pytest.raises(ValidationError):
        require_text({"summary": "   "}, "summary")
    with pytest.raises(ValidationError):
        require_text({}, "summary")


def test_clean_item_keeps_leading_words() -> None:
    assert clean_item("*nix administration") == "*nix administration"
