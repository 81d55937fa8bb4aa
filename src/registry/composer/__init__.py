"""Composer registry package.

This package provides the Composer collaborators of the update check:
- manifest.py: root composer.json loading (requirements, stability settings)
- installed.py: installed packages from vendor/composer/installed.json
- client.py: Packagist-style HTTP repositories and inline package repositories
- path.py: path repositories over local package directories
"""

from .manifest import ManifestError, RootProject, load_root_project  # noqa: F401
from .installed import InstalledRepository, load_installed_repository  # noqa: F401
from .client import ComposerRepository, create_repositories, expand_minified  # noqa: F401
from .path import PathRepository  # noqa: F401

__all__ = [
    "ManifestError",
    "RootProject",
    "load_root_project",
    "InstalledRepository",
    "load_installed_repository",
    "ComposerRepository",
    "create_repositories",
    "expand_minified",
    "PathRepository",
]
