"""
Utility functions for cleanup report generation and saving.

This module provides functions to:
- Render a run summary as a table
- Save reports as JSON
- Generate timestamped report filenames
"""
import json
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from tabulate import tabulate

from ecr_pruner.logging_utils import get_logger
from ecr_pruner.models import Summary

logger = get_logger(__name__)


# ============================================================================
# Timestamp Utilities
# ============================================================================

def get_timestamp_suffix() -> str:
    """
    Generate a timestamp suffix for report filenames.

    Returns:
        String in format: YYYY-MM-DD-HH-MM-SS
    """
    return datetime.now().strftime("%Y-%m-%d-%H-%M-%S")


def add_timestamp_to_path(path: str, timestamp: Optional[str] = None) -> str:
    """
    Add a timestamp to a file path before the extension.

    Args:
        path: Original file path (e.g., 'reports/cleanup-summary.json')
        timestamp: Optional timestamp string (defaults to current time)

    Returns:
        Path with timestamp inserted (e.g., 'reports/cleanup-summary-2026-01-15-14-30-00.json')
    """
    if timestamp is None:
        timestamp = get_timestamp_suffix()

    p = Path(path)
    return str(p.parent / f"{p.stem}-{timestamp}{p.suffix}")


# ============================================================================
# Report Rendering and Saving
# ============================================================================

def format_summary_table(summary: Summary) -> str:
    """Render per-repository outcomes and run totals as a grid table."""
    headers = ["Repository", "Status", "Deleted", "Error"]
    rows = [
        [o.repository, o.status.value, o.deleted, o.error or ""]
        for o in summary.outcomes
    ]
    table = tabulate(rows, headers=headers, tablefmt="grid")

    mode = "DRY RUN: " if summary.dry_run else ""
    totals = (
        f"{mode}{summary.cleaned} cleaned, {summary.skipped} skipped, "
        f"{summary.errored} errored out of {summary.total} repositories; "
        f"{summary.deleted} images {'would be ' if summary.dry_run else ''}deleted"
    )
    return f"{table}\n{totals}"


def _to_jsonable(data: Any) -> Any:
    """Recursively convert values json.dump cannot handle."""
    if isinstance(data, (datetime, date)):
        return data.isoformat()
    elif isinstance(data, Enum):
        return data.value
    elif isinstance(data, (set, frozenset)):
        try:
            return [_to_jsonable(item) for item in sorted(data)]
        except TypeError:
            return [_to_jsonable(item) for item in data]
    elif isinstance(data, dict):
        return {k: _to_jsonable(v) for k, v in data.items()}
    elif isinstance(data, (list, tuple)):
        return [_to_jsonable(item) for item in data]
    return data


def save_json(path: str, data: Any, timestamp: bool = False) -> str:
    """
    Write JSON data to a file with indentation.

    Args:
        path: Path to save the JSON file
        data: Data to save
        timestamp: If True, add timestamp to filename (default: False)

    Returns:
        Path to the saved file
    """
    p = Path(path)

    if timestamp:
        p = Path(add_timestamp_to_path(str(p)))

    p.parent.mkdir(parents=True, exist_ok=True)

    with open(p, 'w') as f:
        json.dump(_to_jsonable(data), f, indent=2)
    logger.info(f"Saved JSON to {p}")
    return str(p)


def save_summary(path: str, summary: Summary, timestamp: bool = False) -> str:
    """Save a run summary, stamped with the time it was written."""
    data = summary.to_dict()
    data["generated_at"] = datetime.now()
    return save_json(path, data, timestamp=timestamp)
