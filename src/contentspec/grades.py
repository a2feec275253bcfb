"""Grade token normalization."""

from __future__ import annotations

from .vocabulary import Grade

_BANDS: dict[str, Grade] = {
    "K": Grade.KINDERGARTEN,
    "KG": Grade.KINDERGARTEN,
    "HS": Grade.G11,
}


def parse_grade(token: str) -> Grade:
    """Map a free-form grade token to a ``Grade``.

    Empty or unrecognized tokens yield ``Grade.UNSPECIFIED``; many dialects
    omit the grade and expect the caller to supply it from context, so this
    is never an error on its own.
    """
    if not isinstance(token, str):
        return Grade.UNSPECIFIED
    cleaned = token.strip().upper()
    if len(cleaned) > 1 and cleaned.startswith("G"):
        cleaned = cleaned[1:]
    if cleaned in _BANDS:
        return _BANDS[cleaned]
    if not cleaned.isascii() or not cleaned.isdigit():
        return Grade.UNSPECIFIED
    value = int(cleaned)
    if Grade.KINDERGARTEN <= value <= Grade.G12:
        return Grade(value)
    return Grade.UNSPECIFIED


def is_canonical_grade_token(token: str, grade: Grade) -> bool:
    return grade.is_specified and token == grade.text
