"""Data models for version constraints and candidates."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from errors import ParseError


class FieldKind(Enum):
    """Constraint kind applied to one version component."""
    EXACT = "exact"
    GREATER = "greater"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS = "less"
    LESS_OR_EQUAL = "less_or_equal"
    ANY = "any"


@dataclass(frozen=True)
class VersionField:
    """One constraint on one numeric component (major, minor or patch)."""
    kind: FieldKind
    value: int = 0

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"version component must be >= 0, got {self.value}")

    @classmethod
    def any(cls) -> "VersionField":
        return cls(FieldKind.ANY)

    def __str__(self) -> str:
        symbols = {
            FieldKind.EXACT: "",
            FieldKind.GREATER: ">",
            FieldKind.GREATER_OR_EQUAL: ">=",
            FieldKind.LESS: "<",
            FieldKind.LESS_OR_EQUAL: "<=",
        }
        if self.kind == FieldKind.ANY:
            return "x"
        return f"{symbols[self.kind]}{self.value}"


ANY = VersionField.any()


@dataclass(frozen=True)
class Constraint:
    """Parsed specifier: a (major, minor, patch) triple of field constraints."""
    major: VersionField = ANY
    minor: VersionField = ANY
    patch: VersionField = ANY
    raw: str = field(default="", compare=False)

    @property
    def fields(self) -> Tuple[VersionField, VersionField, VersionField]:
        return self.major, self.minor, self.patch

    def __str__(self) -> str:
        return self.raw or ".".join(str(f) for f in self.fields)


@dataclass(frozen=True, order=True)
class ConcreteVersion:
    """A concrete version triple such as the one named by ``v18.16.0``."""
    major: int
    minor: int
    patch: int

    @classmethod
    def from_parts(cls, parts: List[str]) -> "ConcreteVersion":
        """Build a version from already split numeric strings.

        Raises:
            ParseError: unless exactly three non-negative integers are given.
        """
        joined = ".".join(parts)
        if len(parts) != 3:
            raise ParseError(joined, f"expected 3 numeric fields, got {len(parts)}")
        numbers = []
        for part in parts:
            if not (part.isascii() and part.isdigit()):
                raise ParseError(joined, f"{part!r} is not a non-negative integer")
            numbers.append(int(part))
        return cls(*numbers)

    @classmethod
    def parse(cls, name: str) -> "ConcreteVersion":
        """Parse a directory or tag name like ``v18.16.0`` or ``v18.16.0/``."""
        text = name.strip().rstrip("/")
        if text.startswith("v"):
            text = text[1:]
        return cls.from_parts(text.split("."))

    @property
    def priority(self) -> int:
        return priority(self)

    def __str__(self) -> str:
        return f"v{self.major}.{self.minor}.{self.patch}"


def priority(version: ConcreteVersion) -> int:
    """Scalar sort key: ``major*10000 + minor*100 + patch``.

    Ordering is only monotonic while minor and patch stay below 100.
    """
    return version.major * 10000 + version.minor * 100 + version.patch


@dataclass(frozen=True)
class Candidate:
    """A matching installed directory or remote listing entry."""
    name: str
    priority: int

    @classmethod
    def from_version(cls, name: str, version: ConcreteVersion) -> "Candidate":
        return cls(name=name, priority=priority(version))
