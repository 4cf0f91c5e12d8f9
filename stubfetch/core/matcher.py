"""Constraint matching for release ids.

A constraint is a comma-separated list of clauses such as ``>=1.20,<1.27``.
Every clause must hold (there is no OR). Candidates are tried from the
greatest to the smallest and the first one that satisfies all clauses is
returned.

Two orderings are available:

``literal`` (default)
    Release ids are ordered and compared as plain strings, exactly like the
    tool always has. This means ``"1.9.0" > "1.10.0"``.

``semantic``
    Release ids and clause literals are parsed with
    :class:`packaging.version.Version`. Anything that is not a valid PEP
    440 version never matches.

Typical usage::

    >>> match({"1.9.0", "1.10.0"}, ">=1.0")
    '1.9.0'
    >>> match({"1.9.0", "1.10.0"}, ">=1.0", ordering="semantic")
    '1.10.0'
"""

from __future__ import annotations

import re
import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from packaging.version import InvalidVersion, Version

from stubfetch.utils.logger import get_logger
from stubfetch.constants import CONSTRAINT_OPERATORS, DEFAULT_VERSION_ORDERING

logger = get_logger("matcher")

__all__ = ["Clause", "parse_clause", "parse_constraint", "match"]

_CLAUSE_RE = re.compile(
    r"^\s*(" + "|".join(re.escape(op) for op in CONSTRAINT_OPERATORS) + r")\s*(.*?)\s*$"
)

_COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    "==": operator.eq,
    ">": operator.gt,
    "<": operator.lt,
}


@dataclass(frozen=True)
class Clause:
    """One ``operator literal`` comparison of a constraint."""

    operator: str
    literal: str

    def holds(self, candidate: Any, literal: Any) -> bool:
        return _COMPARATORS[self.operator](candidate, literal)


def parse_clause(text: str) -> Optional[Clause]:
    """Parse ``text`` into a :class:`Clause`, or ``None`` if it is not one."""
    found = _CLAUSE_RE.match(text)
    if found is None:
        return None
    return Clause(operator=found.group(1), literal=found.group(2))


def parse_constraint(constraint: str) -> List[Clause]:
    """Parse every comma-separated clause of ``constraint``.

    One pair of surrounding parentheses is accepted (the legacy
    ``Requires-Dist: name (>=1.0)`` form). Clauses that do not parse are
    dropped.
    """
    text = constraint.strip()
    if text.startswith("(") and text.endswith(")"):
        text = text[1:-1]

    clauses: List[Clause] = []
    for part in text.split(","):
        clause = parse_clause(part)
        if clause is None:
            if part.strip():
                logger.debug("Ignoring unparsable constraint clause %r", part)
            continue
        clauses.append(clause)
    return clauses


def _parse_version(value: str) -> Optional[Version]:
    try:
        return Version(value)
    except InvalidVersion:
        return None


def _match_literal(candidates: Iterable[str], clauses: List[Clause]) -> Optional[str]:
    for candidate in sorted(candidates, reverse=True):
        if all(clause.holds(candidate, clause.literal) for clause in clauses):
            return candidate
    return None


def _match_semantic(candidates: Iterable[str], clauses: List[Clause]) -> Optional[str]:
    literals = [_parse_version(clause.literal) for clause in clauses]
    if any(literal is None for literal in literals):
        return None

    parsed = [(raw, _parse_version(raw)) for raw in candidates]
    ordered = sorted(
        ((raw, version) for raw, version in parsed if version is not None),
        key=lambda item: item[1],
        reverse=True,
    )
    for raw, version in ordered:
        if all(c.holds(version, lit) for c, lit in zip(clauses, literals)):
            return raw
    return None


def match(
    available_releases: Iterable[str],
    constraint: str,
    *,
    ordering: str = DEFAULT_VERSION_ORDERING,
) -> Optional[str]:
    """Return the greatest release satisfying every clause of ``constraint``.

    Args:
        available_releases: Candidate release ids.
        constraint: Comma-separated clauses, e.g. ``">=1.0,<2.0"``.
        ordering: ``"literal"`` or ``"semantic"`` (see module docs).

    Returns:
        The matching release id, or ``None`` when nothing matches or the
        constraint contains no parsable clause.

    Raises:
        ValueError: ``ordering`` is not a known ordering.
    """
    clauses = parse_constraint(constraint)
    if not clauses:
        return None

    if ordering == "literal":
        return _match_literal(available_releases, clauses)
    if ordering == "semantic":
        return _match_semantic(available_releases, clauses)
    raise ValueError(f"Unknown version ordering: {ordering!r}")
