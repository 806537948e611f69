# tests/test_cli.py
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from kerchief.cli import main
from tests.conftest import API, UPLOAD_URL


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def in_project(project: Path, monkeypatch) -> Path:
    monkeypatch.chdir(project)
    return project


def _posts(mock):
    return [r for r in mock.request_history if r.method == "POST"]


def test_init_writes_template(runner, tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(main, ["init"])
    assert result.exit_code == 0, result.output
    assert "Successfully wrote a template configuration" in result.output
    assert 'domain = "example.instructure.com"' in (tmp_path / "kerchief.toml").read_text(encoding="utf-8")


def test_init_refuses_to_overwrite(runner, in_project: Path):
    before = (in_project / "kerchief.toml").read_text(encoding="utf-8")
    result = runner.invoke(main, ["init"])
    assert result.exit_code == 1
    assert "already exists" in result.output
    assert (in_project / "kerchief.toml").read_text(encoding="utf-8") == before

    result = runner.invoke(main, ["init", "--force"])
    assert result.exit_code == 0
    assert (in_project / "kerchief.toml").read_text(encoding="utf-8") != before


def test_submit_end_to_end(runner, in_project: Path, canvas_uploads):
    result = runner.invoke(main, ["submit", "1", "--yes"])

    assert result.exit_code == 0, result.output
    assert "Warning: skipping include, path" in result.output
    assert "Warning: unrecognized option 'gzip' for notes.md" in result.output
    assert "Preparing to upload the following items" in result.output
    assert "    assignment1.zip\n    group.txt\n    notes.md\n" in result.output
    assert "Target: Datorgrafik / Assignment 1" in result.output
    assert "Submitted 3 file(s) to 'Assignment 1'" in result.output

    posts = _posts(canvas_uploads)
    assert [p.url.split("?")[0] for p in posts].count(UPLOAD_URL) == 3
    final = posts[-1]
    assert final.path == "/api/v1/courses/101/assignments/201/submissions"
    assert final.qs["submission[file_ids][]"] == ["9001", "9001", "9001"]


def test_submit_declined_uploads_nothing(runner, in_project: Path, canvas_uploads):
    result = runner.invoke(main, ["submit", "1"], input="n\n")
    assert result.exit_code == 0, result.output
    assert "Proceed?" in result.output
    assert "Aborted, nothing was uploaded." in result.output
    assert _posts(canvas_uploads) == []
    # The staged payloads stay for inspection until the next run.
    assert (in_project / ".kerchief" / "temp" / "group.txt").exists()


def test_submit_with_report(runner, in_project: Path, canvas_uploads):
    result = runner.invoke(main, ["submit", "2", "--yes", "--report", "report.yaml"])
    assert result.exit_code == 0, result.output
    report = yaml.safe_load((in_project / "report.yaml").read_text(encoding="utf-8"))
    assert report["assignment_id"] == 202
    assert report["uploaded"] == [{"file": "group.txt", "file_id": 9001}]


def test_submit_unresolvable_assignment(runner, in_project: Path, canvas_uploads):
    config = in_project / "kerchief.toml"
    config.write_text(
        config.read_text(encoding="utf-8").replace('name = "Assignment 1"', 'name = "Assignment 9"'),
        encoding="utf-8",
    )
    result = runner.invoke(main, ["submit", "1", "--yes"])
    assert result.exit_code == 1
    assert "Error: the name 'Assignment 9' is not present among possible values" in result.output
    assert "'Assignment 1' (canvas id 201)" in result.output
    assert "'Assignment 2' (canvas id 202)" in result.output
    assert _posts(canvas_uploads) == []


def test_submit_unknown_key(runner, in_project: Path):
    result = runner.invoke(main, ["submit", "9", "--yes"])
    assert result.exit_code == 1
    assert "The assignment key '9' is not present in the configuration." in result.output


def test_submit_transport_error(runner, in_project: Path, requests_mock):
    requests_mock.get(f"{API}/courses", status_code=500)
    result = runner.invoke(main, ["submit", "1", "--yes"])
    assert result.exit_code == 1
    assert "Error: listing courses failed" in result.output


def test_submit_outside_project(runner, tmp_path: Path, monkeypatch):
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.chdir(empty)
    result = runner.invoke(main, ["submit", "1"])
    assert result.exit_code == 1
    assert "No kerchief.toml found" in result.output


def test_check_reports_problems(runner, in_project: Path, canvas):
    result = runner.invoke(main, ["check"])
    assert result.exit_code == 1
    assert "Course 'Datorgrafik' (canvas id 101)" in result.output
    assert "assignment.1\n'Assignment 1' (canvas id 201)" in result.output
    assert "  group.txt\n" in result.output
    assert "  assignment1, option: zip" in result.output
    assert "  Path error: path" in result.output
    assert "  notes.md, unrecognized: gzip" in result.output
    assert "assignment.2\n'Assignment 2' (canvas id 202)" in result.output


def test_check_single_clean_assignment(runner, in_project: Path, canvas):
    result = runner.invoke(main, ["check", "2"])
    assert result.exit_code == 0, result.output
    assert "assignment.1" not in result.output


def test_check_names_the_configured_identifier(runner, in_project: Path, canvas):
    config = in_project / "kerchief.toml"
    config.write_text(
        config.read_text(encoding="utf-8").replace("id = 202", 'name = "Assignment 1"\nid = 202'),
        encoding="utf-8",
    )
    result = runner.invoke(main, ["check", "2"])
    assert result.exit_code == 1
    assert (
        "Assignment identifier error (name 'Assignment 1' and id 202): the identifier "
        "'Assignment 1' (canvas id 202) matches some canvas identifier by 'id' but not by 'name'"
    ) in result.output
    assert "  Alternatives:\n    'Assignment 2' (canvas id 202)" in result.output


def test_check_unconfigured_course(runner, in_project: Path, canvas):
    config = in_project / "kerchief.toml"
    config.write_text(
        config.read_text(encoding="utf-8").replace('name = "Datorgrafik"', ""),
        encoding="utf-8",
    )
    result = runner.invoke(main, ["check"])
    assert result.exit_code == 1
    assert "Course identifier error (no name or id): fields 'id', 'name' missing from config" in result.output
    assert "'Linjär algebra' (canvas id 102)" in result.output


def test_assignments_listing(runner, in_project: Path, canvas):
    result = runner.invoke(main, ["assignments"])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "Assignments of 'Datorgrafik' (canvas id 101)"
    assert "Assignment 1" in lines[1]
    assert "Assignment 2" in lines[2]
    assert "due -" in lines[2]
    assert "locks 2024-03-0" in lines[3]


def test_status_shows_latest_submission(runner, in_project: Path, canvas):
    canvas.get(
        f"{API}/courses/101/assignments/201/submissions/self",
        json={
            "submission_type": "online_upload",
            "submitted_at": "2024-01-30T10:00:00Z",
            "attachments": [{"display_name": "group.txt", "filename": "group.txt"}],
        },
    )
    result = runner.invoke(main, ["status", "1"])
    assert result.exit_code == 0, result.output
    assert "'Assignment 1' (canvas id 201)" in result.output
    assert "(online_upload)" in result.output
    assert "    group.txt" in result.output


def test_status_without_submission(runner, in_project: Path, canvas):
    canvas.get(f"{API}/courses/101/assignments/202/submissions/self", json={"submitted_at": None})
    result = runner.invoke(main, ["status", "2"])
    assert result.exit_code == 0, result.output
    assert "No submission yet." in result.output
