"""CLI entry point for the check-updates command.

Builds the pools from composer.json, installed.json and the configured
repositories, runs the update check and renders the results.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, List

from constants import Constants, ExitCodes
from common.logging_utils import extra_context, is_debug_enabled
from analysis.update_check import iter_check_results
from cli_config import (
    ConfigError,
    apply_http_overrides,
    load_config_file,
    resolve_packagist_url,
    resolve_policy,
    resolve_style,
)
from registry.composer import (
    ManifestError,
    create_repositories,
    load_installed_repository,
    load_root_project,
)
from reporting.console import ConsoleSink, create_reporter
from reporting.export import export_csv, export_json
from repository.platform import PlatformRepository
from repository.pool import build_global_pool, build_local_pool
from versioning.models import CheckResult

logger = logging.getLogger(__name__)


def _output_format(args: Any) -> str:
    if getattr(args, "OUTPUT_FORMAT", None):
        return args.OUTPUT_FORMAT.lower()
    if args.OUTPUT.lower().endswith(".csv"):
        return "csv"
    return "json"


def _use_color(args: Any) -> bool:
    color = getattr(args, "COLOR", None)
    if color is not None:
        return color
    return sys.stdout.isatty()


def _has_updates(results: List[CheckResult]) -> bool:
    return any(
        r.classification and (r.classification.update_available or r.classification.upgrade_available)
        for r in results
    )


def run_check_updates(args: Any) -> int:
    """Run the update check and return the process exit code."""
    try:
        config = load_config_file(getattr(args, "CONFIG", None))
        apply_http_overrides(config)
        policy = resolve_policy(args, config)
        style = resolve_style(args, config)
        packagist_url = resolve_packagist_url(args, config)
    except ConfigError as e:
        logger.error("%s", e)
        return ExitCodes.FILE_ERROR.value

    try:
        project = load_root_project(args.DIRECTORY, include_dev=getattr(args, "INCLUDE_DEV", False))
        local_repository = load_installed_repository(project.vendor_dir)
    except ManifestError as e:
        logger.error("%s, aborting", e)
        return ExitCodes.FILE_ERROR.value

    repositories = create_repositories(
        project.repositories, project.packagist_enabled, packagist_url, base_dir=args.DIRECTORY
    )
    platform = PlatformRepository(project.platform_overrides) if policy.include_platform else None

    global_pool = build_global_pool(
        repositories, project.minimum_stability, project.stability_flags, platform_repository=platform
    )
    local_pool = build_local_pool(
        repositories, local_repository, project.minimum_stability, project.stability_flags,
        platform_repository=platform,
    )

    if is_debug_enabled(logger):
        logger.debug(
            "Pools built",
            extra=extra_context(
                event="pools",
                component="cli",
                action=Constants.COMMAND_CHECK_UPDATES,
                count=len(project.requires),
                outcome="local" if local_repository is not None else "fallback",
            )
        )

    sink = ConsoleSink(verbose=getattr(args, "VERBOSE", False), quiet=getattr(args, "QUIET", False))
    reporter = create_reporter(style, sink, policy, color=_use_color(args))

    results: List[CheckResult] = []
    reporter.start()
    for result in iter_check_results(project.requires, local_pool, global_pool):
        reporter.report(result)
        results.append(result)
    reporter.finish()

    if getattr(args, "OUTPUT", None):
        if _output_format(args) == "csv":
            export_csv(results, args.OUTPUT)
        else:
            export_json(results, args.OUTPUT)

    if getattr(args, "ERROR_ON_UPDATES", False) and _has_updates(results):
        logger.warning("Updates available, exiting with non-zero status code.")
        return ExitCodes.EXIT_UPDATES.value
    return ExitCodes.SUCCESS.value
