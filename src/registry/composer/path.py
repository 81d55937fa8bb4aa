"""Path repositories: packages read from local directories (monorepos)."""
from __future__ import annotations

import glob
import json
import logging
import os
from typing import Any, Dict, List

from constants import Constants
from repository.base import ArrayRepository, package_from_metadata
from versioning.models import Package

logger = logging.getLogger(__name__)


def _read_package(directory: str) -> Dict[str, Any]:
    path = os.path.join(directory, Constants.COMPOSER_JSON_FILE)
    try:
        with open(path, encoding="utf-8") as file:
            data = json.load(file)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Skipping path package %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


class PathRepository(ArrayRepository):
    """Packages found in the directories matched by a ``path`` repository url.

    The url is a glob relative to the project directory. A package without a
    ``version`` in its composer.json is published as ``dev-main``.
    """

    def __init__(self, url: str, base_dir: str = "."):
        self.url = url
        pattern = url if os.path.isabs(url) else os.path.join(base_dir, url)
        packages: List[Package] = []
        for directory in sorted(glob.glob(pattern)):
            if not os.path.isfile(os.path.join(directory, Constants.COMPOSER_JSON_FILE)):
                continue
            data = _read_package(directory)
            if not data.get("name"):
                continue
            data.setdefault("version", Constants.PATH_REPOSITORY_DEFAULT_VERSION)
            package = package_from_metadata(data)
            if package is not None:
                packages.append(package)
        if not packages:
            logger.warning("Path repository '%s' matched no packages", url)
        super().__init__(packages, name=url)
