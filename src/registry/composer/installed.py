"""Installed-packages repository backed by vendor/composer/installed.json."""
from __future__ import annotations

import json
import logging
import os
from typing import Optional

from constants import Constants
from repository.base import ArrayRepository, package_from_metadata
from .manifest import ManifestError

logger = logging.getLogger(__name__)


class InstalledRepository(ArrayRepository):
    """Packages currently installed in the vendor directory."""

    stability_exempt = True


def installed_json_path(vendor_dir: str) -> str:
    return os.path.join(vendor_dir, "composer", Constants.INSTALLED_JSON_FILE)


def load_installed_repository(vendor_dir: str) -> Optional[InstalledRepository]:
    """Load installed packages, or None when nothing has been installed yet.

    Handles both the Composer 1 format (a bare list) and the Composer 2
    format (``{"packages": [...]}``).

    Raises:
        ManifestError: when installed.json exists but cannot be parsed
    """
    path = installed_json_path(vendor_dir)
    if not os.path.isfile(path):
        logger.debug("No installed.json at %s", path)
        return None

    try:
        with open(path, encoding="utf-8") as file:
            data = json.load(file)
    except json.JSONDecodeError as e:
        raise ManifestError(f"{path} is not valid JSON: {e}") from e
    except OSError as e:
        raise ManifestError(f"Could not read {path}: {e}") from e

    entries = data.get("packages", []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ManifestError(f"{path} has an unexpected structure")

    repository = InstalledRepository(name=path)
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        package = package_from_metadata(entry)
        if package is not None:
            repository.add_package(package)
    logger.info("Found %d installed packages.", len(repository))
    return repository
