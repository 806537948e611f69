"""Submission reports in YAML or CSV form."""

from __future__ import annotations

import csv
from collections.abc import Callable
from pathlib import Path

import yaml

from kerchief.types import SubmissionReport

CSV_HEADER = ["Key", "Course", "Assignment", "Assignment ID", "Submitted", "File", "File ID"]


def _write_yaml(report: SubmissionReport, report_path: Path) -> None:
    # Field order follows the TypedDict declaration.
    with open(report_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(dict(report), f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def _write_csv(report: SubmissionReport, report_path: Path) -> None:
    """Write one row per uploaded payload, ordered by file name.

    Skipped includes and unrecognized options only appear in the YAML report.
    """
    target = [report["key"], report["course"], report["assignment"], report["assignment_id"], report["submitted"]]
    with open(report_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        writer.writerows(
            [*target, u["file"], u["file_id"]] for u in sorted(report["uploaded"], key=lambda u: u["file"])
        )


_WRITERS: dict[str, Callable[[SubmissionReport, Path], None]] = {
    ".yaml": _write_yaml,
    ".yml": _write_yaml,
    ".csv": _write_csv,
}


def save_report(report: SubmissionReport, report_path: Path) -> None:
    """Save a submission report, picking the format from the file extension.

    Args:
        report: What was submitted, and what was left out while staging.
        report_path: Destination ending in ``.yaml``, ``.yml`` or ``.csv``.

    Raises:
        OSError: If the report cannot be written.
        ValueError: If the extension is not one of the supported ones.
    """
    suffix = report_path.suffix.lower()
    writer = _WRITERS.get(suffix)
    if writer is None:
        raise ValueError(f"Unsupported report file extension: {suffix}. Supported formats: .yaml, .yml, .csv")
    writer(report, report_path)
