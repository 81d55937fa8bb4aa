"""JSON and CSV export of update check results."""

import csv
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from constants import ExitCodes
from versioning.models import CheckResult, Package

HEADERS = [
    "package",
    "required",
    "current",
    "update",
    "latest",
    "up_to_date",
    "update_available",
    "upgrade_available",
    "anomalous",
    "not_found",
    "error",
]


def _version(package: Optional[Package]) -> Optional[str]:
    return package.pretty_version if package is not None else None


def result_to_dict(result: CheckResult) -> Dict[str, Any]:
    """Flat record for one result; displayed identifiers fall back to raw versions."""
    triple = result.triple
    c = result.classification
    return {
        "package": result.name,
        "required": result.required,
        "current": result.current_display or (_version(triple.current) if triple else None),
        "update": result.constrained_display or (_version(triple.constrained) if triple else None),
        "latest": result.latest_display or (_version(triple.latest) if triple else None),
        "up_to_date": c.up_to_date if c else None,
        "update_available": c.update_available if c else None,
        "upgrade_available": c.upgrade_available if c else None,
        "anomalous": c.anomalous if c else None,
        "not_found": result.not_found.value if result.not_found else None,
        "error": result.error,
    }


def export_json(results: List[CheckResult], path: str) -> None:
    """Exports the results to a JSON file.

    Args:
        results (list): Check results in declaration order.
        path (str): File path to export the JSON.
    """
    data = [result_to_dict(r) for r in results]
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(data, file, ensure_ascii=False, indent=4)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def export_csv(results: List[CheckResult], path: str) -> None:
    """Exports the results to a CSV file.

    Args:
        results (list): Check results in declaration order.
        path (str): File path to export the CSV.
    """
    def _nv(v):
        return "" if v is None else v

    rows = [HEADERS]
    for r in results:
        record = result_to_dict(r)
        rows.append([_nv(record[h]) for h in HEADERS])
    try:
        with open(path, 'w', newline='', encoding='utf-8') as file:
            export = csv.writer(file)
            export.writerows(rows)
        logging.info("CSV file has been successfully exported at: %s", path)
    except (OSError, csv.Error) as e:
        logging.error("CSV file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
