"""Constraint matching and candidate ranking."""

import logging
from typing import Iterable, List, Optional, Tuple

from errors import NoMatchError, ParseError
from .models import Candidate, ConcreteVersion, Constraint, FieldKind, VersionField

logger = logging.getLogger(__name__)


def compare_field(value: int, field: VersionField) -> Tuple[bool, bool]:
    """Compare one version component against one field constraint.

    Args:
        value: Concrete component of the candidate version.
        field: Constraint for that component.

    Returns:
        Tuple of (is_match, decisive). A decisive result settles the whole
        comparison without looking at less significant components.
    """
    kind = field.kind
    if kind == FieldKind.EXACT:
        return value == field.value, False
    if kind == FieldKind.GREATER:
        return value > field.value, True
    if kind == FieldKind.LESS:
        return value < field.value, True
    if kind == FieldKind.GREATER_OR_EQUAL:
        if value == field.value:
            return True, False
        return value > field.value, True
    if kind == FieldKind.LESS_OR_EQUAL:
        if value == field.value:
            return True, False
        return value < field.value, True
    if kind == FieldKind.ANY:
        return True, False
    raise AssertionError(f"unknown field kind {kind!r}")


def matches(version: ConcreteVersion, constraint: Constraint) -> bool:
    """Return True when ``version`` satisfies ``constraint``.

    Components are checked from most to least significant. The first
    decisive comparison wins; a non-decisive mismatch rejects.
    """
    values = (version.major, version.minor, version.patch)
    for value, field in zip(values, constraint.fields):
        is_match, decisive = compare_field(value, field)
        if decisive:
            return is_match
        if not is_match:
            return False
    return True


def pick_best(candidates: Iterable[Candidate], spec: str = "") -> Candidate:
    """Pick the highest priority candidate.

    Raises:
        NoMatchError: If there are no candidates.
    """
    best: Optional[Candidate] = None
    for candidate in candidates:
        if best is None or candidate.priority > best.priority:
            best = candidate
    if best is None:
        raise NoMatchError(spec)
    return best


def filter_candidates(names: Iterable[str], constraint: Constraint) -> List[Candidate]:
    """Match a list of version names, skipping names that do not parse.

    Args:
        names: Names such as "v18.16.0" or "v18.16.0/".
        constraint: Parsed specifier.

    Returns:
        Candidates for every name whose version satisfies the constraint.
    """
    found: List[Candidate] = []
    for name in names:
        try:
            version = ConcreteVersion.parse(name)
        except ParseError as exc:
            logger.debug("%s is skipped: %s", name, exc)
            continue
        if matches(version, constraint):
            found.append(Candidate.from_version(name.strip().rstrip("/"), version))
    return found
