"""Root project loader: reads requirements and stability settings from composer.json."""
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from constants import Constants, Stability
from versioning.constraints import parse_constraints, split_constraint_parts
from versioning.models import Requirement
from versioning.parser import UnexpectedValueError, parse_stability

logger = logging.getLogger(__name__)

_FLAG_RE = re.compile(r"^[^@]*?@(stable|RC|beta|alpha|dev)$", re.IGNORECASE)


class ManifestError(Exception):
    """Raised when composer.json or installed.json cannot be used."""


@dataclass
class RootProject:
    """Everything the update check needs from the root composer.json."""
    path: str
    name: Optional[str] = None
    requires: List[Requirement] = field(default_factory=list)
    minimum_stability: str = Constants.DEFAULT_MINIMUM_STABILITY
    stability_flags: Dict[str, str] = field(default_factory=dict)
    repositories: List[Dict[str, Any]] = field(default_factory=list)
    packagist_enabled: bool = True
    platform_overrides: Dict[str, Any] = field(default_factory=dict)
    vendor_dir: str = Constants.DEFAULT_VENDOR_DIR


def _canonical_stability(value: str) -> Optional[str]:
    for stability in Stability:
        if stability.value.lower() == str(value).lower():
            return stability.value
    return None


def _rank(stability: str) -> int:
    return Constants.STABILITY_RANKS[stability]


def extract_stability_flags(requires: Dict[str, str], minimum_stability: str) -> Dict[str, str]:
    """Per-package stability overrides implied by the declared constraints.

    Explicit ``@<stability>`` suffixes win. Otherwise a constraint naming an
    unstable version (``1.0.0-beta2``, ``dev-main``) lowers the stability for
    that package when it is less stable than ``minimum_stability``.
    """
    min_rank = _rank(minimum_stability)
    ranks: Dict[str, int] = {}

    for req_name, req_version in requires.items():
        name = req_name.lower()
        parts = split_constraint_parts(str(req_version))

        explicit = False
        for part in parts:
            m = _FLAG_RE.match(part)
            if not m:
                continue
            rank = _rank(_canonical_stability(m.group(1)) or Stability.DEV.value)
            explicit = True
            if name in ranks and ranks[name] > rank:
                continue
            ranks[name] = rank
        if explicit:
            continue

        for part in parts:
            version = re.sub(r"^([^,\s@]+) as .+$", r"\1", part)
            if not re.match(r"^[^,\s@]+$", version):
                continue
            stability = parse_stability(version)
            if stability == Stability.STABLE.value:
                continue
            rank = _rank(stability)
            if (name in ranks and ranks[name] > rank) or min_rank > rank:
                continue
            ranks[name] = rank

    by_rank = {rank: name for name, rank in Constants.STABILITY_RANKS.items()}
    return {name: by_rank[rank] for name, rank in ranks.items()}


def parse_requires(requires: Dict[str, Any]) -> List[Requirement]:
    """Build requirements in declaration order; bad constraints are kept with an error."""
    result = []
    for req_name, req_version in requires.items():
        pretty = str(req_version)
        try:
            result.append(Requirement(req_name.lower(), parse_constraints(pretty), pretty))
        except UnexpectedValueError as exc:
            logger.warning("Invalid constraint for %s: %s", req_name, exc)
            result.append(Requirement(req_name.lower(), None, pretty, error=str(exc)))
    return result


def _normalize_repositories(raw: Any) -> Tuple[List[Dict[str, Any]], bool]:
    """Accept both the list and the keyed-object forms of ``repositories``."""
    packagist_enabled = True
    entries: List[Dict[str, Any]] = []
    items = raw.items() if isinstance(raw, dict) else enumerate(raw or [])
    for key, repo in items:
        if key == "packagist.org" and repo is False:
            packagist_enabled = False
            continue
        if isinstance(repo, dict) and repo.get("packagist.org") is False:
            packagist_enabled = False
            continue
        if isinstance(repo, dict) and repo.get("packagist") is False:
            packagist_enabled = False
            continue
        if not isinstance(repo, dict):
            raise ManifestError(f"Invalid repository definition: {repo!r}")
        entries.append(repo)
    return entries, packagist_enabled


def load_root_project(directory: str, include_dev: bool = False) -> RootProject:
    """Read ``composer.json`` from ``directory``.

    Raises:
        ManifestError: when the file is missing, unreadable or malformed
    """
    path = os.path.join(directory, Constants.COMPOSER_JSON_FILE)
    try:
        with open(path, encoding="utf-8") as file:
            data = json.load(file)
    except FileNotFoundError as e:
        raise ManifestError(f"{Constants.COMPOSER_JSON_FILE} not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"{path} is not valid JSON: {e}") from e
    except OSError as e:
        raise ManifestError(f"Could not read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"{path} must contain a JSON object")

    minimum_stability = _canonical_stability(data.get("minimum-stability", Constants.DEFAULT_MINIMUM_STABILITY))
    if minimum_stability is None:
        raise ManifestError(f"Invalid minimum-stability: {data.get('minimum-stability')!r}")

    raw_requires: Dict[str, Any] = dict(data.get("require") or {})
    if include_dev:
        for name, constraint in (data.get("require-dev") or {}).items():
            raw_requires.setdefault(name, constraint)

    config = data.get("config") or {}
    repositories, packagist_enabled = _normalize_repositories(data.get("repositories"))

    project = RootProject(
        path=path,
        name=data.get("name"),
        requires=parse_requires(raw_requires),
        minimum_stability=minimum_stability,
        stability_flags=extract_stability_flags({k: str(v) for k, v in raw_requires.items()}, minimum_stability),
        repositories=repositories,
        packagist_enabled=packagist_enabled,
        platform_overrides=dict(config.get("platform") or {}),
        vendor_dir=os.path.join(directory, config.get("vendor-dir", Constants.DEFAULT_VENDOR_DIR)),
    )
    logger.info("Loaded %d requirements from %s", len(project.requires), path)
    return project
