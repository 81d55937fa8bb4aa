"""Best-candidate selection over package lists."""

from typing import Iterable, List, Optional

from .models import Package
from .parser import compare_versions, version_key


def sort_packages(packages: Iterable[Package]) -> List[Package]:
    """Return packages in ascending version order (stable for ties)."""
    return sorted(packages, key=lambda p: version_key(p.version))


def select_best(packages: Iterable[Package]) -> Optional[Package]:
    """Pick the highest version with a single linear scan.

    Among equal versions the last one encountered wins, which is what taking
    the last element of a stable ascending sort would give.
    """
    best = None
    for package in packages:
        if best is None or compare_versions(package.version, best.version) >= 0:
            best = package
    return best
