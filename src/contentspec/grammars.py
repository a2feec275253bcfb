"""Dialect grammar descriptors.

Every dialect is one ``DialectGrammar`` row in ``GRAMMARS``. The parser,
validator and formatter read these rows; none of them branch on a specific
dialect, so a new dialect is a new row.

Legacy dialects share ``<discriminator>:<field>|<field>|...``; the slot
tuple names what each positional field holds. The Enhanced dialect is a
dot separated list of tagged segments in ``ENHANCED_TAGS`` order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .vocabulary import Dialect, Subject


class ContractError(RuntimeError):
    """Raised on programming defects, never on malformed input."""


class Slot(Enum):
    CLAIM = "claim"
    CLAIM_DOMAIN = "claim-domain"
    DOMAIN = "domain"
    TARGET = "target"
    EMPHASIS = "emphasis"
    TARGET_SET = "target-set"
    STANDARD = "standard"


# Canonical ContentSpecId field names that a slot carries.
SLOT_FIELDS: dict[Slot, tuple[str, ...]] = {
    Slot.CLAIM: ("claim",),
    Slot.CLAIM_DOMAIN: ("claim", "domain"),
    Slot.DOMAIN: ("domain",),
    Slot.TARGET: ("target", "grade"),
    Slot.EMPHASIS: ("emphasis",),
    Slot.TARGET_SET: ("target_set",),
    Slot.STANDARD: ("standard",),
}

ALL_FIELDS: frozenset[str] = frozenset(
    ("subject", "grade", "claim", "domain", "target", "target_set", "emphasis", "standard")
)

TARGET_RE = re.compile(r"^(?:[A-P]\d{0,2}|\d{1,2})$")
TARGET_SET_RE = re.compile(r"^(?:TS)?(\d{1,3})$", re.IGNORECASE)

LEGACY_OUTER_SEP = ":"
LEGACY_INNER_SEP = "|"
GRADE_SUFFIX_SEP = "-"
ENHANCED_SEP = "."

# Enhanced segment tags in the order they must appear. "S" swallows the rest
# of the text because standard codes contain dots.
ENHANCED_TAGS: tuple[tuple[str, str], ...] = (
    ("G", "grade"),
    ("C", "claim"),
    ("D", "domain"),
    ("T", "target"),
    ("TS", "target_set"),
    ("E", "emphasis"),
    ("S", "standard"),
)
ENHANCED_HEAD_RE = re.compile(r"^[EM]\.G", re.IGNORECASE)


@dataclass(frozen=True)
class DialectGrammar:
    dialect: Dialect
    subject: Subject | None
    discriminator: str
    slots: tuple[Slot, ...] = ()
    fused_grade: bool = False
    required: frozenset[str] = frozenset()

    @property
    def is_legacy(self) -> bool:
        return bool(self.slots)

    @property
    def expressible(self) -> frozenset[str]:
        if not self.is_legacy:
            return ALL_FIELDS
        fields = {"subject"}
        for slot in self.slots:
            fields.update(SLOT_FIELDS[slot])
        return frozenset(fields)

    @property
    def separators(self) -> frozenset[str]:
        if self.is_legacy:
            return frozenset((LEGACY_OUTER_SEP, LEGACY_INNER_SEP))
        return frozenset((ENHANCED_SEP,))

    def slot_index(self, slot: Slot) -> int:
        if slot not in self.slots:
            raise ContractError(f"{self.dialect.value} has no {slot.value} field")
        return self.slots.index(slot)


_MATH_V4_SLOTS = (Slot.CLAIM, Slot.DOMAIN, Slot.TARGET, Slot.EMPHASIS, Slot.STANDARD)
_LEGACY_REQUIRED = frozenset(("claim", "target"))

GRAMMARS: dict[Dialect, DialectGrammar] = {
    Dialect.ELA_V1: DialectGrammar(
        dialect=Dialect.ELA_V1,
        subject=Subject.ELA,
        discriminator="SBAC-ELA-v1",
        slots=(Slot.CLAIM_DOMAIN, Slot.TARGET, Slot.STANDARD),
        fused_grade=True,
        required=_LEGACY_REQUIRED,
    ),
    Dialect.MATH_V4: DialectGrammar(
        dialect=Dialect.MATH_V4,
        subject=Subject.MATH,
        discriminator="SBAC-MA-v4",
        slots=_MATH_V4_SLOTS,
        fused_grade=True,
        required=_LEGACY_REQUIRED,
    ),
    Dialect.MATH_V5: DialectGrammar(
        dialect=Dialect.MATH_V5,
        subject=Subject.MATH,
        discriminator="SBAC-MA-v5",
        slots=_MATH_V4_SLOTS,
        fused_grade=True,
        required=_LEGACY_REQUIRED,
    ),
    Dialect.MATH_V6: DialectGrammar(
        dialect=Dialect.MATH_V6,
        subject=Subject.MATH,
        discriminator="SBAC-MA-v6",
        slots=(Slot.CLAIM, Slot.EMPHASIS, Slot.TARGET_SET, Slot.TARGET),
        fused_grade=True,
        required=_LEGACY_REQUIRED | {"target_set"},
    ),
    Dialect.ENHANCED: DialectGrammar(
        dialect=Dialect.ENHANCED,
        subject=None,
        discriminator="<subject>.G",
        required=frozenset(("grade",)),
    ),
}

DIALECT_PRIORITY: tuple[Dialect, ...] = (
    Dialect.ELA_V1,
    Dialect.MATH_V4,
    Dialect.MATH_V5,
    Dialect.MATH_V6,
    Dialect.ENHANCED,
)


def grammar_for(dialect: Dialect) -> DialectGrammar:
    try:
        return GRAMMARS[dialect]
    except KeyError as exc:
        raise ContractError(f"no grammar registered for dialect {dialect!r}") from exc


def legacy_grammar_for_prefix(prefix: str) -> DialectGrammar | None:
    """Case-insensitive lookup of a legacy discriminator."""
    folded = prefix.strip().casefold()
    for dialect in DIALECT_PRIORITY:
        grammar = GRAMMARS[dialect]
        if grammar.is_legacy and grammar.discriminator.casefold() == folded:
            return grammar
    return None


def format_target_set(value: int) -> str:
    return f"TS{value:02d}"
