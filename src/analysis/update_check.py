"""Update check: three lookups per requirement, then classification."""
from __future__ import annotations

import logging
from typing import Iterable, Iterator, List

from constants import NotFoundTier
from common.logging_utils import extra_context, is_debug_enabled
from repository.pool import Pool
from versioning.classification import classify, display_versions
from versioning.models import CheckResult, Requirement, VersionTriple
from versioning.selection import select_best

logger = logging.getLogger(__name__)


def lookup_triple(requirement: Requirement, local_pool: Pool, global_pool: Pool) -> VersionTriple:
    """Run the current, constrained and latest lookups independently."""
    target, constraint = requirement.target, requirement.constraint
    return VersionTriple(
        current=select_best(local_pool.what_provides(target, constraint, must_match_name=True)),
        constrained=select_best(global_pool.what_provides(target, constraint, must_match_name=True)),
        latest=select_best(global_pool.what_provides(target, None, must_match_name=True)),
    )


def _missing_tier(triple: VersionTriple):
    # The broadest failure explains the narrower ones: a name unknown to every
    # source is also missing under the constraint and locally.
    if triple.latest is None:
        return NotFoundTier.GLOBAL_UNCONSTRAINED
    if triple.constrained is None:
        return NotFoundTier.GLOBAL_CONSTRAINED
    if triple.current is None:
        return NotFoundTier.LOCAL
    return None


def check_requirement(requirement: Requirement, local_pool: Pool, global_pool: Pool) -> CheckResult:
    """Build the CheckResult for one requirement; never raises for missing packages."""
    if requirement.error:
        return CheckResult(requirement=requirement, error=requirement.error)

    triple = lookup_triple(requirement, local_pool, global_pool)
    tier = _missing_tier(triple)
    if tier is not None:
        logger.debug("%s not found (%s)", requirement.target, tier.value)
        return CheckResult(requirement=requirement, triple=triple, not_found=tier)

    classification = classify(triple)
    current, constrained, latest = display_versions(triple)
    if classification.anomalous:
        logger.debug(
            "Installed %s is newer than the best match %s; repository metadata may be stale",
            triple.current,
            triple.constrained.pretty_version,
        )
    return CheckResult(
        requirement=requirement,
        triple=triple,
        classification=classification,
        current_display=current,
        constrained_display=constrained,
        latest_display=latest,
    )


def iter_check_results(requirements: Iterable[Requirement], local_pool: Pool, global_pool: Pool) -> Iterator[CheckResult]:
    """Yield results in declaration order."""
    for requirement in requirements:
        result = check_requirement(requirement, local_pool, global_pool)
        if is_debug_enabled(logger):
            logger.debug(
                "Requirement checked",
                extra=extra_context(
                    event="decision",
                    component="update_check",
                    target=requirement.target,
                    outcome=result.not_found.value if result.not_found else ("error" if result.error else "classified"),
                )
            )
        yield result


def check_updates(requirements: Iterable[Requirement], local_pool: Pool, global_pool: Pool) -> List[CheckResult]:
    return list(iter_check_results(requirements, local_pool, global_pool))
