from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from contentspec.formatter import format_id, remedy_missing_grade  # noqa: E402
from contentspec.orchestrator import split_fixture_line  # noqa: E402
from contentspec.parser import parse  # noqa: E402
from contentspec.vocabulary import Claim, Dialect, Grade, Severity, Subject  # noqa: E402


def test_fixture_record_with_external_grade_round_trips() -> None:
    record = split_fixture_line("3 SBAC-MA-v4:3|1|2|A|m")
    assert record is not None
    grade, raw_id = record
    assert grade is Grade.G3

    outcome = parse(raw_id, grade)
    assert outcome.severity in (Severity.NO_ERROR, Severity.CORRECTED)
    assert outcome.matched_dialect is Dialect.MATH_V4
    ident = outcome.identifier
    assert ident is not None
    assert ident.grade is Grade.UNSPECIFIED
    assert ident.effective_grade is Grade.G3
    assert format_id(ident, Dialect.MATH_V4).casefold() == remedy_missing_grade(raw_id, grade).casefold()


def test_leading_grade_token_is_taken_as_default_grade() -> None:
    outcome = parse("3 SBAC-MA-v4:3|1|2|A|m")
    assert outcome.severity is Severity.CORRECTED
    assert "leading grade token" in outcome.description
    assert outcome.identifier is not None
    assert outcome.identifier.default_grade is Grade.G3
    assert format_id(outcome.identifier) == "SBAC-MA-v4:3|1|2-3|A|m"


def test_unknown_discriminator_is_error() -> None:
    outcome = parse("SBAC-XX-v9:garbage")
    assert outcome.severity is Severity.ERROR
    assert outcome.matched_dialect is Dialect.UNKNOWN
    assert outcome.identifier is None
    assert not outcome.ok


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        ":",
        "|||",
        "SBAC-MA-v4:",
        "SBAC-MA-v7:1|2|3",
        "M.",
        "M.G99",
        "M.GX",
        "M.G3.X1",
        "M.G3.T-",
        "3 ",
        "SBAC-MA-v6:1|P|TS|A",
        "SBAC-MA-v4:1|NBT|E-3-4|m|x",
        "SBAC-MA-v4:1|NBT|E|m|x|y",
        "\x00",
    ],
)
def test_parse_is_total_and_errors_report_unknown(text: str) -> None:
    outcome = parse(text)
    assert outcome.severity is Severity.ERROR
    assert outcome.matched_dialect is Dialect.UNKNOWN
    assert outcome.identifier is None
    assert outcome.description != ""


@pytest.mark.parametrize("text", ["E.G", "SBAC-MA-v4:||||||||", "M.G3.TS", "M.G3.S", "m.g3.."])
def test_parse_repairs_cosmetic_defects(text: str) -> None:
    outcome = parse(text)
    assert outcome.severity is Severity.CORRECTED
    assert outcome.identifier is not None


def test_field_count_mismatch_names_counts() -> None:
    outcome = parse("SBAC-MA-v6:1|P|TS01")
    assert outcome.severity is Severity.ERROR
    assert "expected 4 fields, found 3" in outcome.description
    assert "math-v6" in outcome.description


def test_trailing_empty_field_is_corrected() -> None:
    outcome = parse("SBAC-MA-v6:1|P|TS01|A-3|")
    assert outcome.severity is Severity.CORRECTED
    ident = outcome.identifier
    assert ident is not None
    assert ident.target == "A"
    assert ident.grade is Grade.G3
    assert format_id(ident) == "SBAC-MA-v6:1|P|TS01|A-3"


def test_case_and_target_set_padding_are_corrected() -> None:
    outcome = parse("sbac-ma-v6:1|P|ts1|a-3")
    assert outcome.severity is Severity.CORRECTED
    assert outcome.matched_dialect is Dialect.MATH_V6
    ident = outcome.identifier
    assert ident is not None
    assert ident.target == "A"
    assert ident.target_set == 1
    assert format_id(ident) == "SBAC-MA-v6:1|P|TS01|A-3"


def test_target_set_missing_marker_is_corrected() -> None:
    outcome = parse("SBAC-MA-v6:2|S|04|B")
    assert outcome.severity is Severity.CORRECTED
    assert outcome.identifier is not None
    assert outcome.identifier.target_set == 4


def test_non_canonical_grade_suffix_is_corrected() -> None:
    outcome = parse("SBAC-MA-v4:1|NBT|E-03|m|3.NBT.2")
    assert outcome.severity is Severity.CORRECTED
    assert outcome.identifier is not None
    assert outcome.identifier.grade is Grade.G3


@pytest.mark.parametrize(
    ("text", "formatted", "fragment"),
    [
        ("SBAC-MA-v4:1|NBT|E -3|m|x", "SBAC-MA-v4:1|NBT|E-3|m|x", "whitespace removed from target"),
        ("SBAC-ELA-v1:1 - LT|4-3|x", "SBAC-ELA-v1:1-LT|4-3|x", "whitespace removed from domain"),
        ("SBAC-ELA-v1:1-|4-3|x", "SBAC-ELA-v1:1|4-3|x", "empty domain dropped"),
    ],
)
def test_repairs_inside_fused_fields_are_corrected(text: str, formatted: str, fragment: str) -> None:
    outcome = parse(text)
    assert outcome.severity is Severity.CORRECTED
    assert fragment in outcome.description
    assert outcome.identifier is not None
    assert format_id(outcome.identifier) == formatted


@pytest.mark.parametrize(
    ("text", "fragment"),
    [
        ("SBAC-MA-v4:1|NBT|Q-3|m|3.NBT.2", "target 'Q'"),
        ("SBAC-MA-v4:9|NBT|E-3|m|3.NBT.2", "claim 9 is out of range"),
        ("SBAC-MA-v4:x|NBT|E-3|m|3.NBT.2", "claim 'x'"),
        ("SBAC-MA-v4:1|NBT|E-x|m|3.NBT.2", "grade 'x'"),
        ("SBAC-MA-v6:1|P|XY|D-6", "target set 'XY'"),
        ("M.G3.TA.C1", "out of order"),
    ],
)
def test_unrepairable_fields_are_errors(text: str, fragment: str) -> None:
    outcome = parse(text)
    assert outcome.severity is Severity.ERROR
    assert fragment in outcome.description


def test_default_grade_is_not_written_into_identifier() -> None:
    outcome = parse("SBAC-MA-v4:1|NBT|E|m|3.NBT.2", Grade.G3)
    assert outcome.severity is Severity.NO_ERROR
    ident = outcome.identifier
    assert ident is not None
    assert ident.grade is Grade.UNSPECIFIED
    assert ident.default_grade is Grade.G3
    assert ident.effective_grade is Grade.G3


def test_ela_claim_domain_and_fused_grade() -> None:
    outcome = parse("SBAC-ELA-v1:1-LT|4-3|3.RL.1")
    assert outcome.severity is Severity.NO_ERROR
    ident = outcome.identifier
    assert ident is not None
    assert ident.subject is Subject.ELA
    assert ident.claim is Claim.C1
    assert ident.domain == "LT"
    assert ident.target == "4"
    assert ident.grade is Grade.G3
    assert ident.standard == "3.RL.1"


def test_math_v4_fields() -> None:
    outcome = parse("SBAC-MA-v4:1|NBT|E-3|a/s|3.NBT.2")
    ident = outcome.identifier
    assert ident is not None
    assert (ident.claim, ident.domain, ident.target, ident.emphasis, ident.standard) == (
        Claim.C1,
        "NBT",
        "E",
        "a/s",
        "3.NBT.2",
    )
    assert ident.target_set is None


def test_enhanced_fields() -> None:
    outcome = parse("M.G3.C1.DNBT.TE.TS02.Em.S3.NBT.2")
    assert outcome.severity is Severity.NO_ERROR
    assert outcome.matched_dialect is Dialect.ENHANCED
    ident = outcome.identifier
    assert ident is not None
    assert ident.subject is Subject.MATH
    assert ident.grade is Grade.G3
    assert ident.claim is Claim.C1
    assert ident.domain == "NBT"
    assert ident.target == "E"
    assert ident.target_set == 2
    assert ident.emphasis == "m"
    assert ident.standard == "3.NBT.2"


def test_enhanced_without_claim_or_target() -> None:
    outcome = parse("M.G3")
    assert outcome.severity is Severity.NO_ERROR
    ident = outcome.identifier
    assert ident is not None
    assert ident.claim is Claim.UNSPECIFIED
    assert ident.target is None

    padded = parse("M.G3.C.T")
    assert padded.severity is Severity.CORRECTED
    assert padded.identifier == ident


def test_enhanced_lower_case_is_corrected() -> None:
    outcome = parse("m.g3.c1.ta")
    assert outcome.severity is Severity.CORRECTED
    ident = outcome.identifier
    assert ident is not None
    assert (ident.subject, ident.grade, ident.claim, ident.target) == (Subject.MATH, Grade.G3, Claim.C1, "A")
    assert format_id(ident) == "M.G3.C1.TA"


@pytest.mark.parametrize(
    "text",
    [
        "SBAC-ELA-v1:1-LT|4-3|3.RL.1",
        "SBAC-ELA-v1:2|1|",
        "SBAC-MA-v4:1|NBT|E-3|m|3.NBT.2",
        "SBAC-MA-v5:2|P|A|a/s|",
        "SBAC-MA-v6:1|P|TS04|D-6",
        "M.G3.C1.DNBT.TE.Em.S3.NBT.2",
        "E.G11.C4.T2.SW.11-12.7",
        "M.G5",
    ],
)
def test_round_trip_on_reparse(text: str) -> None:
    outcome = parse(text)
    assert outcome.severity is Severity.NO_ERROR
    ident = outcome.identifier
    assert ident is not None
    written = format_id(ident)
    assert written == text
    again = parse(written)
    assert again.identifier == ident
    assert again.matched_dialect is outcome.matched_dialect
