"""Composer version normalization, stability detection and ordering keys.

Versions are normalized to Composer's canonical four-segment form
(``1.2`` -> ``1.2.0.0``, ``2.0-b1`` -> ``2.0.0.0-beta1``) before any
comparison. Numbered versions are then ordered through
``packaging.version.Version``, whose dev < alpha < beta < rc < final < post
sequence lines up with Composer's dev < alpha < beta < RC < stable < patch.
Named branches (``dev-main``) sort below every numbered version.
"""

import re
from typing import Optional, Tuple

from packaging import version as pep440

from constants import Stability

MODIFIER_REGEX = r"[._-]?(?:(stable|beta|b|RC|alpha|a|patch|pl|p)((?:[.-]?\d+)*))?([.-]?dev)?"

_CLASSICAL_RE = re.compile(r"^v?(\d{1,5})(\.\d+)?(\.\d+)?(\.\d+)?" + MODIFIER_REGEX + r"$", re.IGNORECASE)
_DATE_RE = re.compile(r"^v?(\d{4}(?:[.:-]?\d{2}){1,6}(?:[.:-]?\d{1,3}){0,2})" + MODIFIER_REGEX + r"$", re.IGNORECASE)
_BRANCH_RE = re.compile(r"^v?(\d+)(\.(?:\d+|[xX*]))?(\.(?:\d+|[xX*]))?(\.(?:\d+|[xX*]))?$")
_STABILITY_RE = re.compile(MODIFIER_REGEX + r"(?:\+.*)?$", re.IGNORECASE)
_NORMALIZED_RE = re.compile(
    r"^(\d+(?:\.\d+)*)(?:-(stable|RC|beta|alpha|patch)((?:[.-]?\d+)*))?(-dev)?$", re.IGNORECASE
)

_STABILITY_ALIASES = {
    "a": "alpha",
    "b": "beta",
    "p": "patch",
    "pl": "patch",
    "rc": "RC",
}
_PEP440_LABELS = {
    "alpha": "a",
    "beta": "b",
    "rc": "rc",
    "patch": ".post",
}

BRANCH_INFINITY = "9999999"


class UnexpectedValueError(ValueError):
    """Raised for version or constraint strings that cannot be parsed."""


def _expand_stability(stability: str) -> str:
    stability = stability.lower()
    return _STABILITY_ALIASES.get(stability, stability)


def normalize_branch(name: str) -> str:
    """Normalize a branch name: ``1.0.x`` -> ``1.0.9999999.9999999-dev``."""
    name = name.strip()
    m = _BRANCH_RE.match(name)
    if m:
        version = ""
        for i in range(1, 5):
            part = m.group(i)
            version += part.replace("*", "x").replace("X", "x") if part else ".x"
        return version.replace("x", BRANCH_INFINITY) + "-dev"
    return "dev-" + name


def normalize_version(version: str) -> str:
    """Normalize a version string to Composer's canonical form.

    Raises:
        UnexpectedValueError: if the string is not a recognizable version
    """
    original = version
    version = version.strip()

    # "1.0.x-dev as 1.0.0" aliases resolve to the aliased version
    m = re.match(r"^([^,\s]+) +as +([^,\s]+)$", version)
    if m:
        version = m.group(1)

    m = re.match(r"^([^,\s@]+) *@(?:stable|RC|beta|alpha|dev)$", version, re.IGNORECASE)
    if m:
        version = m.group(1)

    if version.lower() in ("master", "trunk", "default"):
        return "dev-" + version
    if version[:4].lower() == "dev-":
        return "dev-" + version[4:]

    # build metadata does not take part in comparisons
    m = re.match(r"^([^,\s+]+)\+\S+$", version)
    if m:
        version = m.group(1)

    index = None
    m = _CLASSICAL_RE.match(version)
    if m:
        version = m.group(1) + (m.group(2) or ".0") + (m.group(3) or ".0") + (m.group(4) or ".0")
        index = 5
    else:
        m = _DATE_RE.match(version)
        if m:
            version = re.sub(r"\D", ".", m.group(1))
            index = 2

    if m and index is not None:
        stability, number, dev = m.group(index), m.group(index + 1), m.group(index + 2)
        if stability:
            if stability.lower() == "stable":
                return version
            version += "-" + _expand_stability(stability) + (number or "").lstrip(".-")
        if dev:
            version += "-dev"
        return version

    m = re.match(r"^(.*?)[.-]?dev$", version, re.IGNORECASE)
    if m:
        normalized = normalize_branch(m.group(1))
        if not normalized.startswith("dev-"):
            return normalized

    raise UnexpectedValueError(f'Invalid version string "{original}"')


def parse_stability(version: str) -> str:
    """Return the stability name (stable, RC, beta, alpha, dev) of a version."""
    version = re.sub(r"#.+$", "", version or "")
    lowered = version.lower()
    if lowered.startswith("dev-") or lowered.endswith("-dev"):
        return Stability.DEV.value

    m = _STABILITY_RE.search(lowered)
    if m:
        if m.group(3):
            return Stability.DEV.value
        label = (m.group(1) or "").lower()
        if label in ("beta", "b"):
            return Stability.BETA.value
        if label in ("alpha", "a"):
            return Stability.ALPHA.value
        if label == "rc":
            return Stability.RC.value
    return Stability.STABLE.value


def is_branch(version: str) -> bool:
    """True for named dev branches such as ``dev-main``."""
    return version[:4].lower() == "dev-"


def _to_pep440(normalized: str) -> pep440.Version:
    m = _NORMALIZED_RE.match(normalized)
    if not m:
        raise UnexpectedValueError(f'Invalid normalized version "{normalized}"')
    text = m.group(1)
    if m.group(2) and m.group(2).lower() != "stable":
        digits = re.findall(r"\d+", m.group(3) or "")
        text += _PEP440_LABELS[m.group(2).lower()] + (digits[0] if digits else "0")
    if m.group(4):
        text += ".dev0"
    return pep440.Version(text)


def version_key(version: str) -> Tuple:
    """Sort key implementing the total order over version tokens.

    Accepts raw or already-normalized versions.
    """
    normalized = normalize_version(version)
    if is_branch(normalized):
        return (0, normalized[4:].lower())
    return (1, _to_pep440(normalized))


def compare_versions(a: str, b: str) -> int:
    """Three-way comparison: negative, zero or positive like ``cmp``."""
    key_a, key_b = version_key(a), version_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def try_normalize(version: Optional[str]) -> Optional[str]:
    """Normalize ``version`` or return None when it is not a version."""
    if not version:
        return None
    try:
        return normalize_version(version)
    except UnexpectedValueError:
        return None
