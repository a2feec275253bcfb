"""Corpus statistics over parsed fixture records."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import Any

from .grammars import format_target_set
from .identifier import ContentSpecId
from .orchestrator import split_fixture_line
from .parser import parse
from .vocabulary import Claim, Dialect, Grade

TARGET_LETTERS = "ABCDEFGHIJKLMNOP"
_MATH_V4_FAMILY = (Dialect.MATH_V4, Dialect.MATH_V5)
_LEGACY = (Dialect.ELA_V1, *_MATH_V4_FAMILY, Dialect.MATH_V6)


def parsed_records(lines: Iterable[str]) -> list[ContentSpecId]:
    """Parse fixture lines, keeping only identifiers that parsed."""
    records: list[ContentSpecId] = []
    for line in lines:
        record = split_fixture_line(line)
        if record is None:
            continue
        grade, raw_id = record
        outcome = parse(raw_id, grade)
        if outcome.identifier is not None:
            records.append(outcome.identifier)
    return records


def _target_letter(identifier: ContentSpecId) -> str | None:
    target = identifier.target or ""
    if len(target) == 1 and target in TARGET_LETTERS:
        return target
    return None


def target_set_table(records: Iterable[ContentSpecId]) -> dict[str, Any]:
    """Grade x target letter -> target set number, from MATH_V6 records."""
    table: dict[int, dict[str, int]] = {}
    conflicts: list[dict[str, Any]] = []
    for ident in records:
        letter = _target_letter(ident)
        grade = ident.effective_grade
        if ident.dialect is not Dialect.MATH_V6 or letter is None or ident.target_set is None:
            continue
        if not grade.is_specified:
            continue
        row = table.setdefault(int(grade), {})
        known = row.get(letter)
        if known is not None and known != ident.target_set:
            conflicts.append({"grade": grade.text, "target": letter, "targetSets": [known, ident.target_set]})
        row[letter] = ident.target_set
    return {"table": table, "conflicts": conflicts}


def emphasis_table(records: Iterable[ContentSpecId]) -> dict[int, dict[str, int]]:
    """Percentage of major-emphasis ("m") records per grade and target letter.

    Only MATH_V4/MATH_V5 records whose emphasis is ``m`` or ``a/s`` count.
    """
    primary: dict[tuple[int, str], int] = {}
    total: dict[tuple[int, str], int] = {}
    for ident in records:
        if ident.dialect not in _MATH_V4_FAMILY:
            continue
        emphasis = (ident.emphasis or "").casefold()
        letter = _target_letter(ident)
        grade = ident.effective_grade
        if emphasis not in ("m", "a/s") or letter is None or not grade.is_specified:
            continue
        key = (int(grade), letter)
        total[key] = total.get(key, 0) + 1
        if emphasis == "m":
            primary[key] = primary.get(key, 0) + 1

    table: dict[int, dict[str, int]] = {}
    for (grade, letter), count in sorted(total.items()):
        table.setdefault(grade, {})[letter] = (primary.get((grade, letter), 0) * 100) // count
    return table


def high_school_domains(records: Iterable[ContentSpecId]) -> dict[str, Any]:
    """Claim 1 domain per target letter for grade 11 math, keeping the longest."""
    domains: dict[str, str] = {}
    conflicts: list[str] = []
    for ident in records:
        if ident.dialect not in _MATH_V4_FAMILY or ident.claim is not Claim.C1:
            continue
        if ident.effective_grade is not Grade.G11:
            continue
        letter = _target_letter(ident)
        domain = ident.domain or ""
        if letter is None or domain == "":
            continue
        known = domains.get(letter)
        if known is not None and known != domain:
            conflicts.append(f"Domain conflict: {known} != {domain}")
        if known is None or len(known) < len(domain):
            domains[letter] = domain
    return {"domains": {letter: domains[letter] for letter in sorted(domains)}, "conflicts": conflicts}


def render_grade_table(
    table: dict[int, dict[str, int]],
    grades: Iterable[int] = range(3, 12),
    empty: str = "---",
) -> list[str]:
    lines = []
    for grade in grades:
        row = table.get(grade, {})
        cells = [f"{row[letter]:>3}" if letter in row else empty for letter in TARGET_LETTERS]
        lines.append(f"/* Grade {grade:>2} */ {{ {', '.join(cells)} }},")
    return lines


def _sorted_counts(counts: Counter[str]) -> dict[str, int]:
    return {key: counts[key] for key in sorted(counts, key=lambda k: (k.casefold(), -counts[k]))}


def target_counts(records: Iterable[ContentSpecId]) -> dict[str, dict[str, int]]:
    """Occurrence counts over legacy records.

    ``targets`` counts each target, ``targetSets`` counts
    ``G<grade>.C<claim>.T<target> = TS<nn>`` assignments from MATH_V6, and
    ``standards`` counts the standards of claim 1 MATH_V4/MATH_V5 records.
    """
    targets: Counter[str] = Counter()
    target_sets: Counter[str] = Counter()
    standards: Counter[str] = Counter()
    for ident in records:
        if ident.dialect not in _LEGACY or ident.target is None:
            continue
        targets[ident.target] += 1
        grade = ident.effective_grade
        if ident.dialect is Dialect.MATH_V6 and ident.target_set is not None and grade.is_specified:
            key = f"G{grade.text}.C{ident.claim.text}.T{ident.target} = {format_target_set(ident.target_set)}"
            target_sets[key] += 1
        if ident.dialect in _MATH_V4_FAMILY and ident.claim is Claim.C1 and ident.standard:
            standards[ident.standard] += 1
    return {
        "targets": _sorted_counts(targets),
        "targetSets": _sorted_counts(target_sets),
        "standards": _sorted_counts(standards),
    }
