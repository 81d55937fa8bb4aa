"""Composer repository clients: Packagist-style HTTP metadata, inline packages and local paths."""
from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlsplit

from constants import Constants
from common.http_client import get_json
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from repository.base import ArrayRepository, PackageRepository, package_from_metadata, package_matches
from versioning.models import Package
from .path import PathRepository

logger = logging.getLogger(__name__)

PLATFORM_PACKAGE_RE = re.compile(
    r"^(?:php(?:-64bit|-ipv6|-zts|-debug)?|hhvm|(?:ext|lib)-[a-z0-9](?:[_.-]?[a-z0-9]+)*"
    r"|composer(?:-(?:plugin|runtime))?-api)$",
    re.IGNORECASE,
)


def is_platform_package(name: str) -> bool:
    return bool(PLATFORM_PACKAGE_RE.match(name))


def expand_minified(versions: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Expand ``composer/2.0`` minified metadata.

    Each entry only carries the keys that changed since the previous entry;
    the value ``"__unset"`` removes a key.
    """
    expanded: List[Dict[str, Any]] = []
    current: Optional[Dict[str, Any]] = None
    for version_data in versions:
        if current is None:
            current = dict(version_data)
        else:
            current = dict(current)
            for key, value in version_data.items():
                if value == "__unset":
                    current.pop(key, None)
                else:
                    current[key] = value
        expanded.append(current)
    return expanded


class ComposerRepository(PackageRepository):
    """Composer v2 metadata repository such as repo.packagist.org.

    Metadata for a package is fetched on first query (stable and ``~dev``
    files) and kept for the lifetime of the repository object.
    """

    def __init__(self, url: str = Constants.REGISTRY_URL_PACKAGIST, metadata_url: Optional[str] = None):
        super().__init__(url)
        self.url = url.rstrip("/")
        self._metadata_url = metadata_url
        self._packages: Dict[str, List[Package]] = {}

    def _resolve_metadata_template(self) -> str:
        if self._metadata_url is None:
            status, _, data = get_json(f"{self.url}/packages.json")
            template = data.get("metadata-url") if status == 200 and isinstance(data, dict) else None
            self._metadata_url = template or Constants.PACKAGIST_METADATA_PATH
        return self._metadata_url

    def metadata_url(self, name: str) -> str:
        path = self._resolve_metadata_template().replace("%package%", name)
        if path.startswith(("http://", "https://")):
            return path
        if path.startswith("/"):
            parts = urlsplit(self.url)
            return f"{parts.scheme}://{parts.netloc}{path}"
        return f"{self.url}/{path}"

    def _fetch(self, name: str) -> List[Package]:
        packages: List[Package] = []
        for suffix in ("", "~dev"):
            url = self.metadata_url(name + suffix)
            with Timer() as timer:
                status, _, data = get_json(url)
            if status == 404:
                continue
            if status != 200 or not isinstance(data, dict):
                logger.warning("Could not load metadata for %s from %s (status %s)", name, safe_url(url), status)
                continue

            entries = (data.get("packages") or {}).get(name) or []
            if data.get("minified") == "composer/2.0":
                entries = expand_minified(entries)
            for entry in entries:
                if not isinstance(entry, dict):
                    continue
                package = package_from_metadata(entry, name)
                if package is not None:
                    packages.append(package)

            if is_debug_enabled(logger):
                logger.debug(
                    "Loaded package metadata",
                    extra=extra_context(
                        event="metadata",
                        component="composer_repository",
                        target=safe_url(url),
                        count=len(entries),
                        duration_ms=timer.duration_ms(),
                    )
                )
        return packages

    def load_packages(self, name: str) -> List[Package]:
        """All known versions of ``name`` (fetched once)."""
        name = name.lower()
        if is_platform_package(name):
            return []
        if name not in self._packages:
            self._packages[name] = self._fetch(name)
        return self._packages[name]

    def query(self, name: str, constraint: Any = None, exact_name_only: bool = True) -> List[Package]:
        # Providers of other names cannot be discovered without a full index
        return [p for p in self.load_packages(name) if package_matches(p, name, constraint, exact_name_only)]


def _inline_packages(definition: Any) -> List[Package]:
    entries = definition if isinstance(definition, list) else [definition]
    packages = []
    for entry in entries:
        if isinstance(entry, dict):
            package = package_from_metadata(entry)
            if package is not None:
                packages.append(package)
    return packages


def create_repositories(
    repositories: Iterable[Dict[str, Any]],
    packagist_enabled: bool = True,
    packagist_url: Optional[str] = None,
    base_dir: str = ".",
) -> List[PackageRepository]:
    """Instantiate the configured repositories in priority order, Packagist last.

    ``path`` urls are resolved against ``base_dir``, the project directory.
    """
    result: List[PackageRepository] = []
    for config in repositories:
        repo_type = str(config.get("type", "")).lower()
        if repo_type == "composer" and config.get("url"):
            result.append(ComposerRepository(str(config["url"])))
        elif repo_type == "package":
            result.append(ArrayRepository(_inline_packages(config.get("package")), name="package"))
        elif repo_type == "path" and config.get("url"):
            result.append(PathRepository(str(config["url"]), base_dir))
        else:
            logger.warning("Repository type '%s' is not supported; skipping.", repo_type or "unknown")

    if packagist_enabled:
        url = packagist_url or os.environ.get(Constants.ENV_PACKAGIST_URL) or Constants.REGISTRY_URL_PACKAGIST
        result.append(ComposerRepository(url))
    return result
