from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from contentspec.grades import is_canonical_grade_token, parse_grade  # noqa: E402
from contentspec.vocabulary import Grade  # noqa: E402


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("3", Grade.G3),
        ("03", Grade.G3),
        ("  7 ", Grade.G7),
        ("12", Grade.G12),
        ("0", Grade.KINDERGARTEN),
        ("K", Grade.KINDERGARTEN),
        ("kg", Grade.KINDERGARTEN),
        ("HS", Grade.G11),
        ("G5", Grade.G5),
        ("g10", Grade.G10),
    ],
)
def test_parse_grade_recognized_tokens(token: str, expected: Grade) -> None:
    assert parse_grade(token) is expected


@pytest.mark.parametrize("token", ["", "   ", "13", "-1", "abc", "G", "3a", "٣"])
def test_parse_grade_unrecognized_is_unspecified(token: str) -> None:
    assert parse_grade(token) is Grade.UNSPECIFIED


def test_grade_text_is_numeric_and_comparable() -> None:
    assert Grade.G11.text == "11"
    assert Grade.KINDERGARTEN.text == "0"
    assert Grade.UNSPECIFIED.text == ""
    assert Grade.G3 < Grade.G4
    assert parse_grade(Grade.G9.text) is Grade.G9


def test_canonical_grade_token() -> None:
    assert is_canonical_grade_token("3", Grade.G3)
    assert not is_canonical_grade_token("03", Grade.G3)
    assert not is_canonical_grade_token("HS", Grade.G11)
    assert not is_canonical_grade_token("", Grade.UNSPECIFIED)
