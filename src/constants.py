"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    EXIT_UPDATES = 3


class Stability(Enum):
    """Composer stability levels, in decreasing order of stability.

    Args:
        Enum (string): Stability names as written in composer.json.
    """

    STABLE = "stable"
    RC = "RC"
    BETA = "beta"
    ALPHA = "alpha"
    DEV = "dev"


class NotFoundTier(Enum):
    """Lookup tier that came back empty for a requirement."""

    LOCAL = "local"
    GLOBAL_CONSTRAINED = "global-constrained"
    GLOBAL_UNCONSTRAINED = "global-unconstrained"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    # Lower rank means more stable; a package is visible when its rank is
    # at most the rank allowed by minimum-stability or its stability flag.
    STABILITY_RANKS = {
        Stability.STABLE.value: 0,
        Stability.RC.value: 5,
        Stability.BETA.value: 10,
        Stability.ALPHA.value: 15,
        Stability.DEV.value: 20,
    }
    DEFAULT_MINIMUM_STABILITY = Stability.STABLE.value

    REGISTRY_URL_PACKAGIST = "https://repo.packagist.org"
    PACKAGIST_METADATA_PATH = "/p2/%package%.json"
    ENV_PACKAGIST_URL = "COMPOSER_UPDATES_PACKAGIST_URL"
    ENV_LOG_LEVEL = "COMPOSER_UPDATES_LOG_LEVEL"

    COMPOSER_JSON_FILE = "composer.json"
    INSTALLED_JSON_FILE = "installed.json"
    DEFAULT_VENDOR_DIR = "vendor"
    PATH_REPOSITORY_DEFAULT_VERSION = "dev-main"

    COMMAND_CHECK_UPDATES = "check-updates"
    STYLES = ["table", "list"]
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    DEFAULT_LOG_LEVEL = "WARNING"

    REFERENCE_DISPLAY_LENGTH = 10
    TABLE_WIDTH = 80
    NAME_COLUMN_WIDTH = 30
    VERSION_COLUMN_WIDTH = 10

    PHP_BINARY = "php"
    PHP_DETECT_TIMEOUT = 10
    # API versions provided by Composer 2.x itself
    COMPOSER_PLATFORM_PACKAGES = {
        "composer-plugin-api": "2.6.0",
        "composer-runtime-api": "2.2.2",
    }

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_CACHE_TTL_SEC = 300
    HTTP_RETRY_BACKOFF_SEC = 0.5
    HTTP_RETRY_STATUSES = (429, 500, 502, 503, 504)
    HTTP_CACHEABLE_STATUSES = (200, 404)
