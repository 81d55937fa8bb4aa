"""Data models for requirements, packages and update classification."""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from constants import Constants, NotFoundTier, Stability
from .parser import parse_stability


@dataclass(frozen=True)
class Requirement:
    """A dependency declared by the root project."""
    target: str  # lowercased package name
    constraint: Optional[Any]  # versioning.constraints.Constraint, None means any version
    pretty_constraint: str = "*"
    error: Optional[str] = None  # set when the declared constraint does not parse


@dataclass(frozen=True)
class Package:
    """Snapshot of one package version as reported by a repository."""
    name: str
    version: str  # normalized comparison token, e.g. "1.2.0.0" or "dev-main"
    pretty_version: str
    dist_reference: Optional[str] = None
    source_reference: Optional[str] = None
    provides: Tuple[Tuple[str, str], ...] = field(default=())
    replaces: Tuple[Tuple[str, str], ...] = field(default=())

    @property
    def stability(self) -> str:
        """Stability derived from the normalized version."""
        return parse_stability(self.version)

    @property
    def is_dev(self) -> bool:
        """True for dev branches and ``-dev`` versions."""
        return self.stability == Stability.DEV.value

    @property
    def reference(self) -> Optional[str]:
        """VCS reference, preferring the dist archive reference."""
        return self.dist_reference or self.source_reference

    def display_reference(self) -> str:
        """Truncated VCS reference shown instead of the version for dev packages."""
        return (self.reference or "")[:Constants.REFERENCE_DISPLAY_LENGTH]

    def __str__(self) -> str:
        return f"{self.name} {self.pretty_version}"


@dataclass(frozen=True)
class VersionTriple:
    """Current, constrained-best and latest package for a requirement."""
    current: Optional[Package]
    constrained: Optional[Package]
    latest: Optional[Package]


@dataclass(frozen=True)
class Classification:
    """Relationship between the three selected versions."""
    up_to_date: bool
    update_available: bool
    upgrade_available: bool
    anomalous: bool


@dataclass(frozen=True)
class CheckPolicy:
    """Behavior switches for the update check."""
    include_platform: bool = True
    always_report_up_to_date: bool = False
    report_anomalies: bool = True


@dataclass
class CheckResult:
    """Outcome for one requirement, fed to the reporting layer."""
    requirement: Requirement
    triple: Optional[VersionTriple] = None
    classification: Optional[Classification] = None
    not_found: Optional[NotFoundTier] = None
    error: Optional[str] = None
    current_display: Optional[str] = None
    constrained_display: Optional[str] = None
    latest_display: Optional[str] = None

    @property
    def name(self) -> str:
        return self.requirement.target

    @property
    def required(self) -> str:
        return self.requirement.pretty_constraint
