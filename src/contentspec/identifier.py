"""Canonical, dialect-independent identifier model and result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .grammars import grammar_for
from .vocabulary import Claim, Dialect, Grade, Severity, Subject

_FIELD_ORDER = ("subject", "grade", "claim", "domain", "target", "target_set", "emphasis", "standard")
_TEXT_FIELDS = ("domain", "target", "emphasis", "standard")


@dataclass(frozen=True, eq=False)
class ContentSpecId:
    """One content specification identifier.

    ``grade`` holds only what was written. ``default_grade`` is context the
    caller supplied (a fixture grade, a conversion default) and is never
    merged into ``grade``; formatting, validation and comparison look at
    ``effective_grade``.
    """

    subject: Subject = Subject.UNSPECIFIED
    grade: Grade = Grade.UNSPECIFIED
    claim: Claim = Claim.UNSPECIFIED
    domain: str | None = None
    target: str | None = None
    target_set: int | None = None
    emphasis: str | None = None
    standard: str | None = None
    dialect: Dialect = Dialect.UNKNOWN
    default_grade: Grade = field(default=Grade.UNSPECIFIED)

    @property
    def effective_grade(self) -> Grade:
        return self.grade if self.grade.is_specified else self.default_grade

    def populated(self, name: str) -> bool:
        if name == "grade":
            return self.effective_grade.is_specified
        value = getattr(self, name)
        if value is Subject.UNSPECIFIED or value is Claim.UNSPECIFIED:
            return False
        if isinstance(value, str):
            return value != ""
        return value is not None

    def comparison_value(self, name: str) -> Any:
        if name == "grade":
            return self.effective_grade
        value = getattr(self, name)
        if name in _TEXT_FIELDS:
            return (value or "").casefold()
        return value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentSpecId):
            return NotImplemented
        return equals(self, other)

    def __hash__(self) -> int:
        return hash(tuple(self.comparison_value(name) for name in _FIELD_ORDER))

    def to_dict(self) -> dict[str, Any]:
        return {
            "dialect": self.dialect.value,
            "subject": self.subject.name,
            "grade": self.effective_grade.text,
            "claim": self.claim.text,
            "domain": self.domain,
            "target": self.target,
            "targetSet": self.target_set,
            "emphasis": self.emphasis,
            "standard": self.standard,
        }


def equals(a: ContentSpecId, b: ContentSpecId, dialect: Dialect | None = None) -> bool:
    """Field-wise semantic equality, case-insensitive on textual sub-fields.

    With ``dialect``, fields that dialect cannot express are ignored, so an
    identifier converted out to ``dialect`` and back compares equal to its
    source as long as nothing expressible was lost.
    """
    names = _FIELD_ORDER
    if dialect is not None and dialect is not Dialect.UNKNOWN:
        expressible = grammar_for(dialect).expressible
        names = tuple(name for name in _FIELD_ORDER if name in expressible)
    return all(a.comparison_value(name) == b.comparison_value(name) for name in names)


@dataclass(frozen=True)
class ParseOutcome:
    severity: Severity
    description: str
    matched_dialect: Dialect = Dialect.UNKNOWN
    identifier: ContentSpecId | None = None

    @property
    def ok(self) -> bool:
        return self.severity is not Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.label,
            "description": self.description,
            "dialect": self.matched_dialect.value,
            "identifier": self.identifier.to_dict() if self.identifier is not None else None,
        }


@dataclass(frozen=True)
class ValidationOutcome:
    severity: Severity
    description: str = ""

    @property
    def ok(self) -> bool:
        return self.severity is Severity.NO_ERROR


@dataclass(frozen=True)
class ConversionOutcome:
    severity: Severity
    description: str = ""
    identifier: ContentSpecId | None = None
    text: str | None = None

    @property
    def ok(self) -> bool:
        return self.severity is Severity.NO_ERROR
