"""Version specifier parsing, matching and ranking."""

from .matcher import compare_field, filter_candidates, matches, pick_best
from .models import Candidate, ConcreteVersion, Constraint, FieldKind, VersionField, priority
from .parser import parse_version_spec

__all__ = [
    "Candidate",
    "ConcreteVersion",
    "Constraint",
    "FieldKind",
    "VersionField",
    "compare_field",
    "filter_candidates",
    "matches",
    "parse_version_spec",
    "pick_best",
    "priority",
]
