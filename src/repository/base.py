"""Package repository interface and the in-memory implementation.

Every package source (installed packages, Composer HTTP repositories, inline
package definitions, the platform) answers the same question:
which packages satisfy this name and constraint?
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from versioning.models import Package
from versioning.parser import try_normalize

logger = logging.getLogger(__name__)


class PackageRepository:
    """Read-only source of package metadata."""

    # Installed and platform repositories bypass minimum-stability filtering
    stability_exempt = False

    def __init__(self, name: str = "repository"):
        self.name = name

    def query(self, name: str, constraint: Any = None, exact_name_only: bool = True) -> List[Package]:
        """Return packages named ``name`` (or providing it) that satisfy ``constraint``.

        An empty list means nothing matched; it is never an error.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


def package_matches(package: Package, name: str, constraint: Any = None, exact_name_only: bool = True) -> bool:
    """True when ``package`` satisfies ``name`` and ``constraint``.

    Provide/replace links are only followed when ``exact_name_only`` is False.
    """
    name = name.lower()
    if package.name == name:
        return constraint is None or constraint.matches_version(package.version)
    if exact_name_only:
        return False

    for link_name, link_constraint in package.provides + package.replaces:
        if link_name != name:
            continue
        if constraint is None:
            return True
        pretty = link_constraint.strip()
        if pretty == "self.version":
            link_version = package.version
        else:
            link_version = try_normalize(pretty.lstrip("=").strip())
        if link_version and constraint.matches_version(link_version):
            return True
    return False


def _links(data: Any) -> Tuple[Tuple[str, str], ...]:
    if not isinstance(data, dict):
        return ()
    return tuple((str(k).lower(), str(v)) for k, v in data.items())


def package_from_metadata(data: Dict[str, Any], name: Optional[str] = None) -> Optional[Package]:
    """Build a Package from a Composer metadata entry.

    Works for installed.json entries, ``p2`` repository entries and inline
    ``package`` repository definitions. Returns None for entries without a
    usable name or version.
    """
    pkg_name = (data.get("name") or name or "").strip().lower()
    pretty_version = str(data.get("version") or "").strip()
    if not pkg_name or not pretty_version:
        logger.debug("Skipping metadata entry without name or version: %s", data)
        return None

    version = data.get("version_normalized") or try_normalize(pretty_version)
    if not version:
        logger.debug("Skipping %s: invalid version %r", pkg_name, pretty_version)
        return None

    dist = data.get("dist") if isinstance(data.get("dist"), dict) else {}
    source = data.get("source") if isinstance(data.get("source"), dict) else {}

    return Package(
        name=pkg_name,
        version=str(version),
        pretty_version=pretty_version,
        dist_reference=dist.get("reference") or None,
        source_reference=source.get("reference") or None,
        provides=_links(data.get("provide")),
        replaces=_links(data.get("replace")),
    )


class ArrayRepository(PackageRepository):
    """Repository over a fixed list of packages."""

    def __init__(self, packages: Iterable[Package] = (), name: str = "array"):
        super().__init__(name)
        self._packages: List[Package] = list(packages)

    def add_package(self, package: Package) -> None:
        self._packages.append(package)

    def get_packages(self) -> List[Package]:
        return list(self._packages)

    def query(self, name: str, constraint: Any = None, exact_name_only: bool = True) -> List[Package]:
        return [p for p in self._packages if package_matches(p, name, constraint, exact_name_only)]

    def __len__(self) -> int:
        return len(self._packages)
