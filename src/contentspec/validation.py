"""Validation layer: does an identifier fit a given dialect."""

from __future__ import annotations

from .grammars import (
    ALL_FIELDS,
    ENHANCED_SEP,
    LEGACY_INNER_SEP,
    TARGET_RE,
    ContractError,
    DialectGrammar,
    grammar_for,
)
from .identifier import ContentSpecId, ValidationOutcome
from .vocabulary import Claim, Dialect, Grade, Severity, Subject

_FREE_TEXT = ("domain", "emphasis", "standard")


class ValidationError(ValueError):
    """Raised when an identifier cannot be written in a dialect."""


def _ensure(condition: bool, message: str) -> None:
    if not condition:
        raise ValidationError(message)


def _validate_subject(identifier: ContentSpecId, grammar: DialectGrammar) -> None:
    _ensure(isinstance(identifier.subject, Subject), "subject must be a Subject")
    if grammar.subject is None:
        _ensure(identifier.populated("subject"), "subject is required")
    else:
        _ensure(
            identifier.subject is grammar.subject,
            f"subject {identifier.subject.name} cannot be written as {grammar.subject.name}",
        )


def _validate_required(identifier: ContentSpecId, grammar: DialectGrammar) -> None:
    for name in sorted(grammar.required - {"grade"}):
        _ensure(identifier.populated(name), f"{name} is required")


def _validate_expressible(identifier: ContentSpecId, grammar: DialectGrammar) -> None:
    for name in sorted(ALL_FIELDS - grammar.expressible):
        _ensure(not identifier.populated(name), f"{name} cannot be expressed in this dialect")


def _forbidden_separators(grammar: DialectGrammar, name: str) -> tuple[str, ...]:
    if grammar.is_legacy:
        return (LEGACY_INNER_SEP,)
    if name == "standard":
        return ()
    return (ENHANCED_SEP,)


def _validate_values(identifier: ContentSpecId, grammar: DialectGrammar) -> None:
    _ensure(isinstance(identifier.claim, Claim), "claim must be a Claim")
    _ensure(isinstance(identifier.grade, Grade), "grade must be a Grade")
    _ensure(isinstance(identifier.default_grade, Grade), "default grade must be a Grade")
    if identifier.populated("target"):
        _ensure(
            isinstance(identifier.target, str) and TARGET_RE.match(identifier.target) is not None,
            f"target '{identifier.target}' is not a valid target",
        )
    if identifier.target_set is not None:
        _ensure(
            isinstance(identifier.target_set, int) and 0 <= identifier.target_set <= 999,
            f"target set {identifier.target_set!r} is out of range",
        )
    for name in _FREE_TEXT:
        value = getattr(identifier, name)
        if value is None:
            continue
        _ensure(isinstance(value, str), f"{name} must be text")
        _ensure(value == value.strip(), f"{name} '{value}' has surrounding whitespace")
        for sep in _forbidden_separators(grammar, name):
            _ensure(sep not in value, f"{name} '{value}' contains separator '{sep}'")


def _validate_grade(identifier: ContentSpecId, grammar: DialectGrammar) -> None:
    if "grade" in grammar.required:
        _ensure(identifier.populated("grade"), "grade is required and no default grade was supplied")


def validate_for(identifier: ContentSpecId, dialect: Dialect) -> ValidationOutcome:
    """Check that ``identifier`` can be written in ``dialect`` without loss."""
    try:
        grammar = grammar_for(dialect)
    except ContractError:
        return ValidationOutcome(Severity.ERROR, f"unsupported dialect: {getattr(dialect, 'value', dialect)}")

    try:
        _validate_subject(identifier, grammar)
        _validate_required(identifier, grammar)
        _validate_expressible(identifier, grammar)
        _validate_values(identifier, grammar)
        _validate_grade(identifier, grammar)
    except ValidationError as exc:
        return ValidationOutcome(Severity.ERROR, f"{grammar.dialect.value}: {exc}")
    return ValidationOutcome(Severity.NO_ERROR, "")
