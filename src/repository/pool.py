"""Package pools: ordered, stability-filtered views over repositories."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import Package
from .base import PackageRepository

logger = logging.getLogger(__name__)


def stability_rank(stability: str) -> int:
    """Numeric rank of a stability name; unknown names rank as dev."""
    for key, rank in Constants.STABILITY_RANKS.items():
        if key.lower() == (stability or "").lower():
            return rank
    return Constants.STABILITY_RANKS["dev"]


class Pool:
    """Aggregates repositories and answers "what provides" queries.

    The pool never owns packages; each query fans out to every repository in
    insertion order and concatenates the results.
    """

    def __init__(
        self,
        minimum_stability: str = Constants.DEFAULT_MINIMUM_STABILITY,
        stability_flags: Optional[Dict[str, str]] = None,
    ):
        self.minimum_stability = minimum_stability
        self.stability_flags = {k.lower(): v for k, v in (stability_flags or {}).items()}
        self._repositories: List[PackageRepository] = []

    def add_repository(self, repository: PackageRepository) -> None:
        self._repositories.append(repository)

    @property
    def repositories(self) -> List[PackageRepository]:
        return list(self._repositories)

    def is_package_acceptable(self, name: str, stability: str) -> bool:
        """True when ``stability`` is allowed for ``name``.

        A per-package stability flag replaces the minimum stability for that
        package only.
        """
        allowed = self.stability_flags.get(name.lower(), self.minimum_stability)
        return stability_rank(stability) <= stability_rank(allowed)

    def what_provides(self, name: str, constraint: Any = None, must_match_name: bool = False) -> List[Package]:
        """Packages satisfying ``name`` and ``constraint``, in no particular order."""
        results: List[Package] = []
        for repository in self._repositories:
            for package in repository.query(name, constraint, exact_name_only=must_match_name):
                if repository.stability_exempt or self.is_package_acceptable(package.name, package.stability):
                    results.append(package)
        if is_debug_enabled(logger):
            logger.debug(
                "Pool lookup",
                extra=extra_context(
                    event="lookup",
                    component="pool",
                    target=name,
                    constraint=str(constraint) if constraint is not None else None,
                    count=len(results),
                )
            )
        return results

    def __len__(self) -> int:
        return len(self._repositories)


def build_global_pool(
    repositories: Iterable[PackageRepository],
    minimum_stability: str = Constants.DEFAULT_MINIMUM_STABILITY,
    stability_flags: Optional[Dict[str, str]] = None,
    platform_repository: Optional[PackageRepository] = None,
) -> Pool:
    """Pool over every configured repository (plus the platform when given)."""
    pool = Pool(minimum_stability, stability_flags)
    if platform_repository is not None:
        pool.add_repository(platform_repository)
    for repository in repositories:
        pool.add_repository(repository)
    return pool


def build_local_pool(
    repositories: Iterable[PackageRepository],
    local_repository: Optional[PackageRepository],
    minimum_stability: str = Constants.DEFAULT_MINIMUM_STABILITY,
    stability_flags: Optional[Dict[str, str]] = None,
    platform_repository: Optional[PackageRepository] = None,
) -> Pool:
    """Pool over installed packages.

    Without a local repository nothing is installed yet, so every known
    package is a candidate for "current".
    """
    pool = Pool(minimum_stability, stability_flags)
    if platform_repository is not None:
        pool.add_repository(platform_repository)
    if local_repository is not None:
        pool.add_repository(local_repository)
    else:
        logger.info("No installed packages found; using configured repositories as the local pool.")
        for repository in repositories:
            pool.add_repository(repository)
    return pool
