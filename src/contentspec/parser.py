"""Parse identifier text in any dialect into a ``ContentSpecId``."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .grades import is_canonical_grade_token, parse_grade
from .grammars import (
    ENHANCED_HEAD_RE,
    ENHANCED_SEP,
    ENHANCED_TAGS,
    GRADE_SUFFIX_SEP,
    GRAMMARS,
    LEGACY_INNER_SEP,
    LEGACY_OUTER_SEP,
    TARGET_RE,
    TARGET_SET_RE,
    ContractError,
    DialectGrammar,
    Slot,
    format_target_set,
    legacy_grammar_for_prefix,
)
from .identifier import ContentSpecId, ParseOutcome
from .vocabulary import Claim, Dialect, Grade, Severity, Subject

logger = logging.getLogger(__name__)


class FieldError(ValueError):
    """A field is present but cannot be read or unambiguously repaired."""


def _error(description: str) -> ParseOutcome:
    logger.debug("parse rejected: %s", description)
    return ParseOutcome(Severity.ERROR, description, Dialect.UNKNOWN, None)


def _identify(text: str) -> DialectGrammar | None:
    head, sep, _ = text.partition(LEGACY_OUTER_SEP)
    if sep:
        grammar = legacy_grammar_for_prefix(head)
        if grammar is not None:
            return grammar
    if ENHANCED_HEAD_RE.match(text):
        return GRAMMARS[Dialect.ENHANCED]
    return None


def _parse_claim(token: str) -> Claim:
    if token == "":
        return Claim.UNSPECIFIED
    if not (token.isascii() and token.isdigit()):
        raise FieldError(f"claim '{token}' is not a number")
    value = int(token)
    if value == Claim.UNSPECIFIED or value not in {int(c) for c in Claim}:
        raise FieldError(f"claim {value} is out of range")
    return Claim(value)


def _parse_target(token: str, notes: list[str]) -> str | None:
    if token == "":
        return None
    upper = token.upper()
    if not TARGET_RE.match(upper):
        raise FieldError(f"target '{token}' is not a valid target")
    if upper != token:
        notes.append(f"target '{token}' normalized to '{upper}'")
    return upper


def _parse_grade_token(token: str, notes: list[str]) -> Grade:
    grade = parse_grade(token)
    if not grade.is_specified:
        raise FieldError(f"grade '{token}' is not recognized")
    if not is_canonical_grade_token(token, grade):
        notes.append(f"grade '{token}' normalized to '{grade.text}'")
    return grade


def _parse_target_set(token: str, notes: list[str]) -> int | None:
    if token == "":
        return None
    match = TARGET_SET_RE.match(token)
    if match is None:
        raise FieldError(f"target set '{token}' is not TS followed by digits")
    value = int(match.group(1))
    canonical = format_target_set(value)
    if token != canonical:
        notes.append(f"target set '{token}' normalized to '{canonical}'")
    return value


def _text(token: str) -> str | None:
    return token or None


def _claim_slot(token: str, notes: list[str]) -> dict[str, Any]:
    claim = _parse_claim(token)
    if claim.is_specified and token != claim.text:
        notes.append(f"claim '{token}' normalized to '{claim.text}'")
    return {"claim": claim}


def _stripped(token: str, label: str, notes: list[str]) -> str:
    cleaned = token.strip()
    if cleaned != token:
        notes.append(f"whitespace removed from {label} '{cleaned}'")
    return cleaned


def _claim_domain_slot(token: str, notes: list[str]) -> dict[str, Any]:
    claim_token, sep, domain = token.partition(GRADE_SUFFIX_SEP)
    values = _claim_slot(_stripped(claim_token, "claim", notes), notes)
    domain = _stripped(domain, "domain", notes)
    if sep and domain == "":
        notes.append(f"empty domain dropped from claim '{token}'")
    values["domain"] = _text(domain)
    return values


def _target_slot(token: str, notes: list[str]) -> dict[str, Any]:
    target_token, sep, grade_token = token.partition(GRADE_SUFFIX_SEP)
    target = _parse_target(_stripped(target_token, "target", notes), notes)
    grade = Grade.UNSPECIFIED
    grade_token = _stripped(grade_token, "grade suffix", notes)
    if sep and grade_token == "":
        notes.append(f"empty grade suffix dropped from target '{token}'")
    elif sep:
        grade = _parse_grade_token(grade_token, notes)
    return {"target": target, "grade": grade}


_SLOT_PARSERS: dict[Slot, Callable[[str, list[str]], dict[str, Any]]] = {
    Slot.CLAIM: _claim_slot,
    Slot.CLAIM_DOMAIN: _claim_domain_slot,
    Slot.DOMAIN: lambda token, notes: {"domain": _text(token)},
    Slot.TARGET: _target_slot,
    Slot.EMPHASIS: lambda token, notes: {"emphasis": _text(token)},
    Slot.TARGET_SET: lambda token, notes: {"target_set": _parse_target_set(token, notes)},
    Slot.STANDARD: lambda token, notes: {"standard": _text(token)},
}


def _parse_legacy(text: str, grammar: DialectGrammar, notes: list[str]) -> dict[str, Any]:
    head, _, body = text.partition(LEGACY_OUTER_SEP)
    if head != grammar.discriminator:
        notes.append(f"discriminator '{head}' normalized to '{grammar.discriminator}'")

    raw_fields = body.split(LEGACY_INNER_SEP)
    expected = len(grammar.slots)
    if len(raw_fields) > expected and all(f.strip() == "" for f in raw_fields[expected:]):
        notes.append(f"{len(raw_fields) - expected} trailing empty field(s) dropped")
        raw_fields = raw_fields[:expected]
    if len(raw_fields) != expected:
        raise FieldError(f"expected {expected} fields, found {len(raw_fields)}")

    values: dict[str, Any] = {"subject": grammar.subject}
    for slot, raw in zip(grammar.slots, raw_fields):
        token = raw.strip()
        if token != raw:
            notes.append(f"whitespace removed from {slot.value} field")
        values.update(_SLOT_PARSERS[slot](token, notes))
    return values


_TAG_RANK = {tag: rank for rank, (tag, _) in enumerate(ENHANCED_TAGS)}
_TAG_FIELD = dict(ENHANCED_TAGS)


def _segment_tag(segment: str) -> str:
    upper = segment.upper()
    if upper.startswith("TS"):
        return "TS"
    if upper[:1] in _TAG_RANK:
        return upper[:1]
    raise FieldError(f"segment '{segment}' has no recognized tag")


def _enhanced_field(name: str, body: str, notes: list[str]) -> dict[str, Any]:
    if name == "grade":
        return {"grade": _parse_grade_token(body, notes)}
    if name == "claim":
        return {"claim": _claim_slot(body, notes)["claim"]}
    if name == "target":
        return {"target": _parse_target(body, notes)}
    if name == "target_set":
        return {"target_set": _parse_target_set(f"TS{body}", notes)}
    return {name: body}


def _parse_enhanced(text: str, notes: list[str]) -> dict[str, Any]:
    segments = text.split(ENHANCED_SEP)
    subject = Subject(segments[0].upper())
    if segments[0] != subject.code:
        notes.append(f"subject '{segments[0]}' normalized to '{subject.code}'")
    values: dict[str, Any] = {"subject": subject}

    last_rank = -1
    rest = segments[1:]
    index = 0
    while index < len(rest):
        raw = rest[index]
        index += 1
        segment = raw.strip()
        if segment != raw:
            notes.append(f"whitespace removed from segment '{segment}'")
        if segment == "":
            notes.append("empty segment dropped")
            continue
        tag = _segment_tag(segment)
        if _TAG_RANK[tag] <= last_rank:
            raise FieldError(f"segment '{segment}' is duplicated or out of order")
        last_rank = _TAG_RANK[tag]
        if segment[: len(tag)] != tag:
            notes.append(f"tag '{segment[: len(tag)]}' normalized to '{tag}'")

        body = segment[len(tag):]
        name = _TAG_FIELD[tag]
        if name == "standard":
            body = ENHANCED_SEP.join([body, *rest[index:]])
            index = len(rest)
        if body == "":
            notes.append(f"empty '{tag}' segment dropped")
            continue
        values.update(_enhanced_field(name, body, notes))
    return values


def parse(text: str, default_grade: Grade = Grade.UNSPECIFIED) -> ParseOutcome:
    """Parse ``text`` in whichever dialect it is written.

    Never raises for malformed input. ``default_grade`` is kept on the
    identifier as context only; it does not change what was written.
    """
    if not isinstance(text, str):
        raise ContractError(f"parse expects text, got {type(text).__name__}")

    notes: list[str] = []
    stripped = text.strip()
    if stripped != text:
        notes.append("surrounding whitespace removed")
    if stripped == "":
        return _error("empty identifier")

    grammar = _identify(stripped)
    if grammar is None:
        # Fixture form: "<grade> <identifier>".
        parts = stripped.split(None, 1)
        if len(parts) == 2 and parse_grade(parts[0]).is_specified and _identify(parts[1]) is not None:
            if not default_grade.is_specified:
                default_grade = parse_grade(parts[0])
            notes.append(f"leading grade token '{parts[0]}' taken as default grade")
            stripped = parts[1].strip()
            grammar = _identify(stripped)
    if grammar is None:
        return _error(f"unrecognized dialect: '{stripped}'")

    try:
        if grammar.is_legacy:
            values = _parse_legacy(stripped, grammar, notes)
        else:
            values = _parse_enhanced(stripped, notes)
    except FieldError as exc:
        return _error(f"{grammar.dialect.value}: {exc}")

    identifier = ContentSpecId(dialect=grammar.dialect, default_grade=default_grade, **values)
    if notes:
        logger.debug("parsed %s as %s with corrections: %s", stripped, grammar.dialect.value, notes)
        return ParseOutcome(Severity.CORRECTED, "; ".join(notes), grammar.dialect, identifier)
    return ParseOutcome(Severity.NO_ERROR, "", grammar.dialect, identifier)
