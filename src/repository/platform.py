"""Platform repository: the PHP runtime and its extensions as pseudo-packages."""
from __future__ import annotations

import json
import logging
import re
import shutil
import subprocess
from typing import Any, Dict, Optional

from constants import Constants
from versioning.models import Package
from versioning.parser import try_normalize
from .base import ArrayRepository

logger = logging.getLogger(__name__)

PHP_DETECT_SCRIPT = (
    'echo json_encode(array("php" => PHP_VERSION, "extensions" => '
    'array_map("phpversion", array_combine(get_loaded_extensions(), get_loaded_extensions()))));'
)

_LEADING_VERSION_RE = re.compile(r"^\d+(?:\.\d+){0,3}")


def _clean_version(raw: Any) -> Optional[str]:
    """Keep the numeric prefix of runtime versions such as ``8.2.10-1ubuntu1``."""
    if raw is None or raw is False:
        return None
    m = _LEADING_VERSION_RE.match(str(raw).strip())
    return m.group(0) if m else None


def detect_php_platform(php_binary: str = Constants.PHP_BINARY) -> Dict[str, str]:
    """Ask the local PHP binary for its version and loaded extensions.

    Returns an empty mapping when PHP is unavailable or detection fails.
    """
    path = shutil.which(php_binary)
    if not path:
        logger.info("PHP binary '%s' not found; platform packages come from config.platform only.", php_binary)
        return {}

    try:
        result = subprocess.run(
            [path, "-r", PHP_DETECT_SCRIPT],
            capture_output=True,
            text=True,
            timeout=Constants.PHP_DETECT_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("Failed to run %s: %s", path, exc)
        return {}

    if result.returncode != 0 or not result.stdout:
        logger.warning("PHP platform detection failed (exit %s): %s", result.returncode, result.stderr.strip())
        return {}

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError:
        logger.warning("PHP platform detection returned invalid JSON")
        return {}

    platform: Dict[str, str] = {}
    php_version = _clean_version(data.get("php"))
    if php_version:
        platform["php"] = php_version
    extensions = data.get("extensions") or {}
    if isinstance(extensions, dict):
        for ext_name, ext_version in extensions.items():
            # Bundled extensions report no version of their own
            version = _clean_version(ext_version) or php_version
            if version:
                platform["ext-" + str(ext_name).lower().replace(" ", "-")] = version
    return platform


class PlatformRepository(ArrayRepository):
    """Pseudo-packages describing the runtime, overridable via ``config.platform``.

    Always carries ``composer-plugin-api`` and ``composer-runtime-api``, which
    no package repository serves.
    """

    stability_exempt = True

    def __init__(
        self,
        overrides: Optional[Dict[str, Any]] = None,
        php_binary: str = Constants.PHP_BINARY,
        detect: bool = True,
    ):
        versions: Dict[str, str] = dict(Constants.COMPOSER_PLATFORM_PACKAGES)
        if detect:
            versions.update(detect_php_platform(php_binary))
        for name, version in (overrides or {}).items():
            name = name.lower()
            if version is False:
                versions.pop(name, None)
                continue
            versions[name] = str(version)

        packages = []
        for name, pretty in sorted(versions.items()):
            normalized = try_normalize(pretty)
            if normalized is None:
                logger.warning("Ignoring platform package %s with invalid version %r", name, pretty)
                continue
            packages.append(Package(name=name, version=normalized, pretty_version=pretty))
        super().__init__(packages, name="platform")
