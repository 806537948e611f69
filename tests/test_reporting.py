# tests/test_reporting.py
import csv
from pathlib import Path

import pytest
import yaml

from kerchief.reporting import save_report
from kerchief.types import SubmissionReport, UploadedFile


@pytest.fixture
def report() -> SubmissionReport:
    return SubmissionReport(
        key="1",
        course="Datorgrafik",
        assignment="Assignment 1",
        assignment_id=201,
        submitted=True,
        uploaded=[UploadedFile(file="group.txt", file_id=2), UploadedFile(file="assignment1.zip", file_id=1)],
        skipped=["path /x/missing.txt not found"],
        unrecognized_options=["notes.md: gzip"],
    )


@pytest.mark.parametrize("name", ["report.yaml", "report.YML"])
def test_yaml_report(tmp_path: Path, report, name):
    path = tmp_path / name
    save_report(report, path)
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert loaded["assignment_id"] == 201
    assert loaded["uploaded"][0] == {"file": "group.txt", "file_id": 2}
    assert list(loaded) == list(report)


def test_csv_report_one_row_per_upload(tmp_path: Path, report):
    path = tmp_path / "report.csv"
    save_report(report, path)
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["File"] for r in rows] == ["assignment1.zip", "group.txt"]
    assert rows[0]["File ID"] == "1"
    assert rows[0]["Assignment"] == "Assignment 1"


def test_unsupported_extension(tmp_path: Path, report):
    with pytest.raises(ValueError, match="Unsupported report file extension"):
        save_report(report, tmp_path / "report.json")
