"""Fixture checking (split -> parse -> validate -> format -> compare)."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from .formatter import convert, format_id, remedy_missing_grade
from .grades import parse_grade
from .identifier import ContentSpecId, equals
from .parser import parse
from .validation import validate_for
from .vocabulary import Dialect, Grade, Severity

logger = logging.getLogger(__name__)


def split_fixture_line(line: str) -> tuple[Grade, str] | None:
    """Split a ``"<grade> <identifier>"`` fixture record; ``None`` to skip it."""
    line = line.rstrip("\r\n")
    space = line.find(" ")
    if space < 0:
        return None
    return parse_grade(line[:space]), line[space + 1:]


def _result(raw_id: str, grade: Grade, severity: Severity, stage: str, reason: str, **extra: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": raw_id,
        "grade": grade.text,
        "severity": severity.label,
        "stage": stage,
        "reason": reason,
    }
    payload.update(extra)
    return payload


def _check_via(raw_id: str, grade: Grade, identifier: ContentSpecId, via: Dialect) -> dict[str, Any] | None:
    out = convert(identifier, via, default_grade=grade)
    if out.severity is not Severity.NO_ERROR:
        return _result(raw_id, grade, Severity.ERROR, "convert", out.description, via=via.value)
    reparsed = parse(out.text or "")
    if reparsed.identifier is None:
        return _result(raw_id, grade, Severity.ERROR, "convert", reparsed.description, via=via.value)
    back = convert(reparsed.identifier, identifier.dialect)
    if back.identifier is None or not equals(back.identifier, identifier):
        reason = back.description or f"round trip through {via.value} changed the identifier: {back.text}"
        return _result(raw_id, grade, Severity.ERROR, "convert", reason, via=via.value, text=out.text)
    return None


def check_record(raw_id: str, grade: Grade = Grade.UNSPECIFIED, via: Dialect | None = None) -> dict[str, Any]:
    """Check one identifier in the order parse, validate, round-trip."""
    outcome = parse(raw_id, grade)
    if outcome.severity is not Severity.NO_ERROR:
        return _result(raw_id, grade, outcome.severity, "parse", outcome.description)

    identifier = outcome.identifier
    if identifier is None:
        return _result(raw_id, grade, Severity.ERROR, "parse", outcome.description or "no identifier")
    validation = validate_for(identifier, outcome.matched_dialect)
    if validation.severity is not Severity.NO_ERROR:
        return _result(raw_id, grade, validation.severity, "validate", validation.description)

    round_trip = format_id(identifier)
    expected = remedy_missing_grade(raw_id, grade)
    if round_trip.casefold() != expected.casefold():
        return _result(raw_id, grade, Severity.ERROR, "round-trip", f"ID doesn't match: {round_trip}")

    if via is not None and via is not outcome.matched_dialect:
        failure = _check_via(raw_id, grade, identifier, via)
        if failure is not None:
            return failure
    return _result(raw_id, grade, Severity.NO_ERROR, "done", "")


def check_fixture(lines: Iterable[str], via: Dialect | None = None) -> dict[str, Any]:
    """Run every fixture record and tally the severities."""
    results: list[dict[str, Any]] = []
    counts = {severity.label: 0 for severity in Severity}
    skipped = 0
    for line in lines:
        record = split_fixture_line(line)
        if record is None:
            skipped += 1
            continue
        grade, raw_id = record
        result = check_record(raw_id, grade, via=via)
        counts[result["severity"]] += 1
        results.append(result)
    logger.debug("checked %d records (%d skipped): %s", len(results), skipped, counts)
    return {"results": results, "counts": counts, "skipped": skipped}
