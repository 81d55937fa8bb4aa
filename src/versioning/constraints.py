"""Composer version constraint parsing and matching.

Supports the constraint grammar found in composer.json ``require`` sections:
exact versions, comparison operators, ``||``/``|`` alternatives, comma or
space separated conjunctions, hyphen ranges, ``*``/``.x`` wildcards, ``~``
tilde and ``^`` caret ranges, ``dev-<branch>`` references and ``@stability``
suffixes.
"""

import re
from typing import List, Optional, Sequence

from constants import Stability
from .parser import (
    MODIFIER_REGEX,
    UnexpectedValueError,
    compare_versions,
    is_branch,
    normalize_version,
    parse_stability,
)

_VERSION_REGEX = r"v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.(\d+))?" + MODIFIER_REGEX + r"(?:\+[^\s]+)?"

_TILDE_RE = re.compile(r"^~>?" + _VERSION_REGEX + r"$", re.IGNORECASE)
_CARET_RE = re.compile(r"^\^" + _VERSION_REGEX + r"$", re.IGNORECASE)
_WILDCARD_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.[xX*])+$")
_HYPHEN_RE = re.compile(r"^(" + _VERSION_REGEX + r") +- +(" + _VERSION_REGEX + r")$", re.IGNORECASE)
_COMPARATOR_RE = re.compile(r"^(<>|!=|>=?|<=?|==?)?\s*(.*)$")
_MATCH_ALL_RE = re.compile(r"^v?[xX*](\.[xX*])*$")
_STABILITY_FLAG_RE = re.compile(r"^([^,\s]*?)@(stable|RC|beta|alpha|dev)$", re.IGNORECASE)
_REFERENCE_RE = re.compile(r"^(dev-[^,\s@]+?|[^,\s@]+?\.x-dev)#.+$", re.IGNORECASE)
_OPERATOR_SPACE_RE = re.compile(r"(<>|!=|>=|<=|==|[<>=^~])\s+")

_OPERATOR_ALIASES = {"=": "==", "<>": "!="}


class Constraint:
    """Predicate over normalized version tokens."""

    pretty_string: Optional[str] = None

    def matches_version(self, version: str) -> bool:
        raise NotImplementedError

    def get_pretty_string(self) -> str:
        return self.pretty_string if self.pretty_string is not None else str(self)


class MatchAllConstraint(Constraint):
    """Matches every version, including dev branches."""

    def matches_version(self, version: str) -> bool:
        return True

    def __str__(self) -> str:
        return "*"


class SingleConstraint(Constraint):
    """``<operator> <normalized version>``."""

    def __init__(self, operator: str, version: str):
        self.operator = _OPERATOR_ALIASES.get(operator, operator)
        if self.operator not in ("==", "!=", "<", "<=", ">", ">="):
            raise UnexpectedValueError(f'Invalid operator "{operator}"')
        self.version = version

    def matches_version(self, version: str) -> bool:
        return version_compare(version, self.version, self.operator)

    def __str__(self) -> str:
        return f"{self.operator} {self.version}"

    def __repr__(self) -> str:
        return f"SingleConstraint({self.operator!r}, {self.version!r})"


class MultiConstraint(Constraint):
    """Conjunction (all must match) or disjunction (any must match)."""

    def __init__(self, constraints: Sequence[Constraint], conjunctive: bool = True):
        self.constraints = list(constraints)
        self.conjunctive = conjunctive

    def matches_version(self, version: str) -> bool:
        if self.conjunctive:
            return all(c.matches_version(version) for c in self.constraints)
        return any(c.matches_version(version) for c in self.constraints)

    def __str__(self) -> str:
        glue = " " if self.conjunctive else " || "
        return "[" + glue.join(str(c) for c in self.constraints) + "]"


def version_compare(a: str, b: str, operator: str) -> bool:
    """Evaluate ``a <operator> b`` on normalized versions.

    Named branches only compare equal or unequal to other branches; they never
    satisfy an ordering operator.
    """
    a_branch, b_branch = is_branch(a), is_branch(b)
    if operator == "!=" and (a_branch or b_branch):
        return a != b
    if a_branch and b_branch:
        return operator == "==" and a == b
    if a_branch or b_branch:
        return False

    cmp = compare_versions(a, b)
    return {
        "==": cmp == 0,
        "!=": cmp != 0,
        "<": cmp < 0,
        "<=": cmp <= 0,
        ">": cmp > 0,
        ">=": cmp >= 0,
    }[operator]


def _manipulate(parts: Sequence[Optional[str]], position: int, increment: int = 0) -> str:
    """Rebuild a four-segment version, zeroing segments after ``position``."""
    segments = []
    for i in range(1, 5):
        value = parts[i] or "0"
        if i > position:
            value = "0"
        elif i == position and increment:
            value = str(int(value) + increment)
        segments.append(value)
    return ".".join(segments)


def _split_conjunction(group: str) -> List[str]:
    group = _OPERATOR_SPACE_RE.sub(r"\1", group.strip())
    tokens = [t for t in re.split(r"\s*,\s*|\s+", group) if t]
    merged: List[str] = []
    i = 0
    while i < len(tokens):
        # "1.0.x-dev as 1.0.0" stays one token
        if i + 2 < len(tokens) and tokens[i + 1] == "as":
            merged.append(" ".join(tokens[i:i + 3]))
            i += 3
            continue
        merged.append(tokens[i])
        i += 1
    return merged


def split_constraint_parts(constraints: str) -> List[str]:
    """Flatten a constraint string into its individual sub-constraints."""
    parts: List[str] = []
    for group in re.split(r"\s*\|\|?\s*", (constraints or "").strip()):
        group = group.strip()
        parts.extend([group] if _HYPHEN_RE.match(group) else _split_conjunction(group))
    return parts


def _parse_single(constraint: str) -> List[Constraint]:
    stability_modifier = None
    m = _STABILITY_FLAG_RE.match(constraint)
    if m:
        constraint = m.group(1) or "*"
        if m.group(2).lower() != Stability.STABLE.value:
            stability_modifier = m.group(2)

    m = _REFERENCE_RE.match(constraint)
    if m:
        constraint = m.group(1)

    if _MATCH_ALL_RE.match(constraint):
        return [MatchAllConstraint()]

    if constraint.startswith("~>"):
        raise UnexpectedValueError(
            f'Could not parse version constraint {constraint}: invalid operator "~>", use "~"'
        )

    m = _TILDE_RE.match(constraint)
    if m:
        if m.group(4) is not None:
            position = 4
        elif m.group(3) is not None:
            position = 3
        elif m.group(2) is not None:
            position = 2
        else:
            position = 1
        suffix = "" if (m.group(5) or m.group(7)) else "-dev"
        low = normalize_version(constraint[1:] + suffix)
        high = _manipulate((None,) + m.groups(), max(1, position - 1), 1) + "-dev"
        return [SingleConstraint(">=", low), SingleConstraint("<", high)]

    m = _CARET_RE.match(constraint)
    if m:
        if m.group(1) != "0" or m.group(2) is None:
            position = 1
        elif m.group(2) != "0" or m.group(3) is None:
            position = 2
        else:
            position = 3
        suffix = "" if (m.group(5) or m.group(7)) else "-dev"
        low = normalize_version(constraint[1:] + suffix)
        high = _manipulate((None,) + m.groups(), position, 1) + "-dev"
        return [SingleConstraint(">=", low), SingleConstraint("<", high)]

    m = _WILDCARD_RE.match(constraint)
    if m:
        if m.group(3) is not None:
            position = 3
        elif m.group(2) is not None:
            position = 2
        else:
            position = 1
        parts = (None,) + m.groups() + (None,)
        low = _manipulate(parts, position) + "-dev"
        high = _manipulate(parts, position, 1) + "-dev"
        if low == "0.0.0.0-dev":
            return [SingleConstraint("<", high)]
        return [SingleConstraint(">=", low), SingleConstraint("<", high)]

    m = _HYPHEN_RE.match(constraint)
    if m:
        # groups: 1 from, 2-5 from segments, 6-8 from modifiers,
        # 9 to, 10-13 to segments, 14-16 to modifiers
        g = (None,) + m.groups()
        low_suffix = "" if (g[6] or g[8]) else "-dev"
        low = normalize_version(g[1]) + low_suffix
        if (g[11] and g[12]) or g[14] or g[16]:
            upper = SingleConstraint("<=", normalize_version(g[9]))
        else:
            normalize_version(g[9])
            high_parts = (None, g[10], g[11], g[12], g[13])
            upper = SingleConstraint("<", _manipulate(high_parts, 1 if not g[11] else 2, 1) + "-dev")
        return [SingleConstraint(">=", low), upper]

    m = _COMPARATOR_RE.match(constraint)
    if m and m.group(2):
        raw = m.group(2)
        try:
            version = normalize_version(raw)
        except UnexpectedValueError:
            # "feature-dev" is shorthand for "dev-feature"
            if raw.endswith("-dev") and re.match(r"^[0-9a-zA-Z\-./]+$", raw):
                version = normalize_version("dev-" + raw[:-4])
            else:
                raise UnexpectedValueError(f"Could not parse version constraint {constraint}") from None

        operator = m.group(1) or "="
        if operator not in ("==", "=") and stability_modifier and parse_stability(version) == Stability.STABLE.value:
            version += "-" + stability_modifier
        elif operator in ("<", ">="):
            if not re.search(r"-" + MODIFIER_REGEX + r"$", raw.lower()) and not raw.startswith("dev-"):
                version += "-dev"
        return [SingleConstraint(operator, version)]

    raise UnexpectedValueError(f"Could not parse version constraint {constraint}")


def parse_constraints(constraints: str) -> Constraint:
    """Parse a composer.json constraint string.

    Raises:
        UnexpectedValueError: if any part of the string is not a valid constraint
    """
    pretty = constraints
    text = (constraints or "").strip()
    if not text:
        raise UnexpectedValueError("Empty version constraint")

    alternatives: List[Constraint] = []
    for group in re.split(r"\s*\|\|?\s*", text):
        group = group.strip()
        parts = [group] if _HYPHEN_RE.match(group) else _split_conjunction(group)
        if not parts:
            raise UnexpectedValueError(f"Could not parse version constraint {constraints}")
        parsed: List[Constraint] = []
        for part in parts:
            parsed.extend(_parse_single(part))
        if len(parsed) == 1:
            alternatives.append(parsed[0])
        else:
            alternatives.append(MultiConstraint(parsed, conjunctive=True))

    result = alternatives[0] if len(alternatives) == 1 else MultiConstraint(alternatives, conjunctive=False)
    result.pretty_string = pretty
    return result
