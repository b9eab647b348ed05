"""Version specifier parsing.

Turns user supplied specifiers such as ``18``, ``v18.16.0``, ``^1.2.3``,
``~2.x`` or ``>=4.0.0`` into a :class:`Constraint`.
"""

from enum import Enum
from typing import List, Optional

from errors import ParseError, UnsupportedFormatError
from .models import ANY, Constraint, FieldKind, VersionField

OPERATOR_CHARS = "^~<>="
WILDCARDS = ("x", "X", "*")


class RangeKind(Enum):
    """Range operator found at the start of a specifier."""
    EXACT = ""
    EQUAL = "="
    TILDE = "~"
    HAT = "^"
    LESS = "<"
    LESS_OR_EQUAL = "<="
    GREATER = ">"
    GREATER_OR_EQUAL = ">="


_RANGE_KINDS = {kind.value: kind for kind in RangeKind}


def _split_operator(spec: str, first: str) -> tuple:
    """Return (range kind, remainder) for the first field."""
    end = 0
    while end < len(first) and first[end] in OPERATOR_CHARS:
        end += 1
    operator = first[:end]
    kind = _RANGE_KINDS.get(operator)
    if kind is None:
        raise UnsupportedFormatError(spec, f"unsupported operator {operator!r}")
    return kind, first[end:]


def _parse_number(spec: str, text: str) -> Optional[int]:
    """Parse one numeric field; None for a wildcard."""
    if text in WILDCARDS:
        return None
    if not text:
        raise ParseError(spec, "empty version field")
    if not (text.isascii() and text.isdigit()):
        raise ParseError(spec, f"{text!r} is not a non-negative integer")
    return int(text)


def _field_kind(kind: RangeKind, index: int, numbers: List[Optional[int]]) -> FieldKind:
    """Pick the constraint kind for the field at ``index``.

    A strict comparison only applies to the last supplied field; earlier
    fields accept equality so the later fields can still decide.
    """
    is_last = index == len(numbers) - 1
    if kind == RangeKind.GREATER:
        return FieldKind.GREATER if is_last else FieldKind.GREATER_OR_EQUAL
    if kind == RangeKind.GREATER_OR_EQUAL:
        return FieldKind.GREATER_OR_EQUAL
    if kind == RangeKind.LESS:
        return FieldKind.LESS if is_last else FieldKind.LESS_OR_EQUAL
    if kind == RangeKind.LESS_OR_EQUAL:
        return FieldKind.LESS_OR_EQUAL
    if kind == RangeKind.TILDE:
        return FieldKind.GREATER_OR_EQUAL if index == 2 else FieldKind.EXACT
    if kind == RangeKind.HAT:
        # A zero major pins the minor; a zero major and minor also pin the patch.
        if index == 0:
            return FieldKind.EXACT
        if all(number == 0 for number in numbers[:index]):
            return FieldKind.EXACT
        return FieldKind.GREATER_OR_EQUAL
    return FieldKind.EXACT


def parse_version_spec(spec: str) -> Constraint:
    """Parse a version specifier into a Constraint.

    Args:
        spec: Specifier text, e.g. "v18", "^1.2.3", ">=4.0.0" or "16.x".

    Returns:
        Constraint with one field per version component; omitted trailing
        fields are unconstrained.

    Raises:
        ParseError: On empty input or non-numeric fields.
        UnsupportedFormatError: On syntax outside the grammar, such as
            compound ranges ("1.0 - 2.0", ">=1 <2") or mixed operators.
    """
    raw = (spec or "").strip()
    if any(ch.isspace() for ch in raw):
        raise UnsupportedFormatError(raw, "whitespace is not allowed; compound ranges are unsupported")

    text = raw.strip("v/")
    if not text:
        raise ParseError(raw, "empty version")
    if text.lower() == "latest":
        return Constraint(raw=raw)

    parts = text.split(".")
    if len(parts) > 3:
        raise UnsupportedFormatError(raw, f"expected at most 3 fields, got {len(parts)}")
    if not parts[0]:
        raise ParseError(raw, "first field is empty")

    kind, parts[0] = _split_operator(raw, parts[0])
    for part in parts[1:]:
        if any(ch in OPERATOR_CHARS for ch in part):
            raise UnsupportedFormatError(raw, f"operator inside field {part!r}")

    numbers = [_parse_number(raw, part) for part in parts]
    fields = [ANY, ANY, ANY]
    for index, number in enumerate(numbers):
        if number is None:
            continue
        fields[index] = VersionField(_field_kind(kind, index, numbers), number)

    return Constraint(major=fields[0], minor=fields[1], patch=fields[2], raw=raw)
