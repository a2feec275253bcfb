"""Closed value sets shared by every dialect."""

from __future__ import annotations

from enum import Enum, IntEnum


class Subject(Enum):
    UNSPECIFIED = ""
    ELA = "E"
    MATH = "M"

    @property
    def code(self) -> str:
        return self.value


class Grade(IntEnum):
    """Kindergarten through grade 12, plus a sentinel for "not written"."""

    UNSPECIFIED = -1
    KINDERGARTEN = 0
    G1 = 1
    G2 = 2
    G3 = 3
    G4 = 4
    G5 = 5
    G6 = 6
    G7 = 7
    G8 = 8
    G9 = 9
    G10 = 10
    G11 = 11
    G12 = 12

    @property
    def is_specified(self) -> bool:
        return self is not Grade.UNSPECIFIED

    @property
    def text(self) -> str:
        return str(int(self)) if self.is_specified else ""


class Claim(IntEnum):
    UNSPECIFIED = 0
    C1 = 1
    C2 = 2
    C3 = 3
    C4 = 4

    @property
    def is_specified(self) -> bool:
        return self is not Claim.UNSPECIFIED

    @property
    def text(self) -> str:
        return str(int(self)) if self.is_specified else ""


class Dialect(Enum):
    ELA_V1 = "ela-v1"
    MATH_V4 = "math-v4"
    MATH_V5 = "math-v5"
    MATH_V6 = "math-v6"
    ENHANCED = "enhanced"
    UNKNOWN = "unknown"


class Severity(IntEnum):
    """Ordered so ``max()`` yields the worse of two severities."""

    NO_ERROR = 0
    CORRECTED = 1
    ERROR = 2

    @property
    def label(self) -> str:
        return {
            Severity.NO_ERROR: "NoError",
            Severity.CORRECTED: "Corrected",
            Severity.ERROR: "Error",
        }[self]
