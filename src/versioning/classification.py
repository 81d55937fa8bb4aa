"""Classification of a version triple into update findings."""

from typing import Tuple

from .models import Classification, Package, VersionTriple
from .parser import compare_versions


def classify(triple: VersionTriple) -> Classification:
    """Compare current vs constrained-best and constrained-best vs latest.

    Pure function of the triple; every tier must be present.

    Raises:
        ValueError: if any tier of the triple is missing
    """
    if triple.current is None or triple.constrained is None or triple.latest is None:
        raise ValueError("Cannot classify an incomplete version triple")

    cmp_constrained = compare_versions(triple.current.version, triple.constrained.version)
    cmp_latest = compare_versions(triple.constrained.version, triple.latest.version)

    return Classification(
        up_to_date=cmp_constrained == 0 and cmp_latest == 0,
        update_available=cmp_constrained < 0,
        upgrade_available=cmp_latest < 0,
        anomalous=cmp_constrained > 0,
    )


def _display(package: Package, use_reference: bool) -> str:
    if use_reference:
        return package.display_reference() or package.pretty_version
    return package.pretty_version


def display_versions(triple: VersionTriple) -> Tuple[str, str, str]:
    """Identifiers shown for current, constrained-best and latest.

    When the installed package tracks a dev branch, version numbers carry no
    ordering information for the reader, so all three tiers show their
    truncated VCS reference instead.
    """
    use_reference = triple.current.is_dev
    return (
        _display(triple.current, use_reference),
        _display(triple.constrained, use_reference),
        _display(triple.latest, use_reference),
    )
