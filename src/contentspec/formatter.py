"""Write identifiers in a dialect, convert between dialects, remedy legacy grades."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable

from .grammars import (
    ENHANCED_SEP,
    ENHANCED_TAGS,
    GRADE_SUFFIX_SEP,
    LEGACY_INNER_SEP,
    LEGACY_OUTER_SEP,
    ContractError,
    DialectGrammar,
    Slot,
    format_target_set,
    grammar_for,
    legacy_grammar_for_prefix,
)
from .identifier import ContentSpecId, ConversionOutcome
from .validation import validate_for
from .vocabulary import Dialect, Grade, Severity

logger = logging.getLogger(__name__)


def _target_text(identifier: ContentSpecId, fused_grade: bool) -> str:
    target = identifier.target or ""
    grade = identifier.effective_grade
    if fused_grade and grade.is_specified:
        return f"{target}{GRADE_SUFFIX_SEP}{grade.text}"
    return target


def _claim_domain_text(identifier: ContentSpecId) -> str:
    if identifier.domain:
        return f"{identifier.claim.text}{GRADE_SUFFIX_SEP}{identifier.domain}"
    return identifier.claim.text


_SLOT_WRITERS: dict[Slot, Callable[[ContentSpecId, DialectGrammar], str]] = {
    Slot.CLAIM: lambda ident, grammar: ident.claim.text,
    Slot.CLAIM_DOMAIN: lambda ident, grammar: _claim_domain_text(ident),
    Slot.DOMAIN: lambda ident, grammar: ident.domain or "",
    Slot.TARGET: lambda ident, grammar: _target_text(ident, grammar.fused_grade),
    Slot.EMPHASIS: lambda ident, grammar: ident.emphasis or "",
    Slot.TARGET_SET: lambda ident, grammar: (
        format_target_set(ident.target_set) if ident.target_set is not None else ""
    ),
    Slot.STANDARD: lambda ident, grammar: ident.standard or "",
}


def _format_legacy(identifier: ContentSpecId, grammar: DialectGrammar) -> str:
    fields = [_SLOT_WRITERS[slot](identifier, grammar) for slot in grammar.slots]
    return f"{grammar.discriminator}{LEGACY_OUTER_SEP}{LEGACY_INNER_SEP.join(fields)}"


def _enhanced_segment(identifier: ContentSpecId, name: str) -> str:
    if name == "grade":
        return identifier.effective_grade.text
    if name == "claim":
        return identifier.claim.text
    if name == "target_set":
        return f"{identifier.target_set:02d}" if identifier.target_set is not None else ""
    return getattr(identifier, name) or ""


def _format_enhanced(identifier: ContentSpecId) -> str:
    segments = [identifier.subject.code]
    for tag, name in ENHANCED_TAGS:
        body = _enhanced_segment(identifier, name)
        if body:
            segments.append(f"{tag}{body}")
    return ENHANCED_SEP.join(segments)


def format_id(identifier: ContentSpecId, dialect: Dialect | None = None) -> str:
    """Write ``identifier`` in ``dialect`` (its own dialect by default).

    The identifier must already validate for ``dialect``; anything else is a
    caller bug and raises ``ContractError``.
    """
    dialect = identifier.dialect if dialect is None else dialect
    grammar = grammar_for(dialect)
    outcome = validate_for(identifier, dialect)
    if outcome.severity is not Severity.NO_ERROR:
        raise ContractError(f"cannot format an identifier that does not validate: {outcome.description}")
    if grammar.is_legacy:
        return _format_legacy(identifier, grammar)
    return _format_enhanced(identifier)


def convert(
    identifier: ContentSpecId,
    dialect: Dialect,
    default_grade: Grade = Grade.UNSPECIFIED,
) -> ConversionOutcome:
    """Re-express ``identifier`` in ``dialect`` or explain why it cannot be."""
    if identifier.dialect is Dialect.UNKNOWN or dialect is Dialect.UNKNOWN:
        return ConversionOutcome(
            Severity.ERROR,
            f"unsupported dialect pair: {identifier.dialect.value} -> {getattr(dialect, 'value', dialect)}",
        )

    candidate = identifier
    if not identifier.effective_grade.is_specified and default_grade.is_specified:
        candidate = dataclasses.replace(identifier, default_grade=default_grade)

    outcome = validate_for(candidate, dialect)
    if outcome.severity is not Severity.NO_ERROR:
        logger.debug("conversion %s -> %s refused: %s", identifier.dialect.value, dialect.value, outcome.description)
        return ConversionOutcome(Severity.ERROR, outcome.description)

    converted = dataclasses.replace(candidate, dialect=dialect)
    return ConversionOutcome(Severity.NO_ERROR, "", converted, format_id(converted))


def remedy_missing_grade(raw: str, grade: Grade) -> str:
    """Insert ``grade`` as a target suffix into legacy text that omitted it.

    Only used to build an expected value for round-trip comparison. Text in
    an unknown or non-legacy dialect, or whose target already has a suffix,
    comes back unchanged.
    """
    if not grade.is_specified:
        return raw
    head, sep, _ = raw.partition(LEGACY_OUTER_SEP)
    if not sep or head == "":
        return raw
    grammar = legacy_grammar_for_prefix(head)
    if grammar is None or Slot.TARGET not in grammar.slots:
        return raw

    # The discriminator shares the first '|' part with the first field.
    parts = raw.split(LEGACY_INNER_SEP)
    index = grammar.slot_index(Slot.TARGET)
    if index >= len(parts) or GRADE_SUFFIX_SEP in parts[index]:
        return raw
    parts[index] = f"{parts[index]}{GRADE_SUFFIX_SEP}{grade.text}"
    return LEGACY_INNER_SEP.join(parts)
