"""High-level workflow orchestration for the kerchief commands."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from kerchief.canvas_api import CanvasClient
from kerchief.configs import CONFIG_FILE_NAME, CONFIG_TEMPLATE, Identifier, load_config
from kerchief.identifiers import IdentifierError
from kerchief.include_paths import IncludeEntry, find_root
from kerchief.reporting import save_report
from kerchief.staging import StagingResult, prepare_scratch_dir, stage_includes
from kerchief.submission_handler import submit_payloads
from kerchief.types import SubmissionReport, UploadedFile
from kerchief.workspace import Workspace


def init_config(directory: Path, force: bool = False) -> Path:
    """Write the template configuration into ``directory``.

    Raises:
        FileExistsError: If a configuration exists and ``force`` is not set.
    """
    path = directory / CONFIG_FILE_NAME
    if path.exists() and not force:
        raise FileExistsError(f"{path} already exists, use --force to overwrite it")
    path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    return path


def open_workspace(start: Path | None = None, client: CanvasClient | None = None) -> tuple[Path, Workspace]:
    """Locate the project root and load its configuration.

    Returns:
        The project root and a Workspace over its configuration.

    Raises:
        RootNotFoundError: If no ``kerchief.toml`` is found.
        ConfigError: If the configuration is invalid.
    """
    root = find_root(start)
    config = load_config(root / CONFIG_FILE_NAME)
    return root, Workspace(config, client)


def stage_assignment(workspace: Workspace, key: str, root: Path) -> StagingResult:
    """Stage the include entries of an assignment into a fresh scratch directory."""
    entries = workspace.include_entries(key, root)
    scratch_dir = prepare_scratch_dir(root)
    return stage_includes(entries, scratch_dir)


def print_staging(result: StagingResult) -> None:
    for error in result.skipped:
        print(f"Warning: skipping include, {error}")
    for path, error in result.unrecognized:
        print(f"Warning: unrecognized option '{error}' for {path}")

    print(f"Preparing to upload the following items (located in {result.scratch_dir})")
    for payload in result.payloads():
        print(f"    {payload.name}")


def print_alternatives(error: IdentifierError) -> None:
    print("  Alternatives:")
    for line in error.details():
        print(f"    {line}")


def print_identifier_error(what: str, ident: Identifier, error: IdentifierError) -> None:
    print(f"{what} identifier error ({ident.describe()}): {error}")
    print_alternatives(error)


def _format_entry(entry: IncludeEntry) -> str:
    if entry.include is None:
        return f"Path error: {entry.error}"
    line = str(entry.include)
    options = sorted(str(o) for o in entry.options)
    if len(options) == 1:
        line += f", option: {options[0]}"
    elif options:
        line += f", options: {' '.join(options)}"
    if entry.option_errors:
        line += f", unrecognized: {' '.join(str(e) for e in entry.option_errors)}"
    return line


def _format_date(value: datetime | None) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M") if value else "-"


def run_submit(
    key: str,
    confirm: Callable[[], bool],
    report_path: Path | None = None,
    start: Path | None = None,
    client: CanvasClient | None = None,
) -> list[UploadedFile] | None:
    """Stage, confirm, upload and submit the assignment configured under ``key``.

    Args:
        key: Local assignment key from ``kerchief.toml``.
        confirm: Asked once before anything is uploaded.
        report_path: Optional path to save a submission report.
        start: Directory to search the project root from.
        client: Canvas client override.

    Returns:
        The uploaded files, or None if the user declined.

    Raises:
        NoSuchAssignmentKey: If ``key`` is not configured.
        IdentifierError: If the course or assignment cannot be resolved.
        StagingError: If staging fails on the filesystem.
        CanvasAPIError: If any Canvas call fails.
    """
    root, workspace = open_workspace(start, client)
    workspace.config.assignment_config(key)

    result = stage_assignment(workspace, key, root)
    print_staging(result)
    payloads = result.payloads()
    if not payloads:
        raise ValueError(f"Nothing to upload for assignment '{key}'")

    course = workspace.selected_course()
    assignment = workspace.assignment(key)
    print(f"Target: {course.name} / {assignment.name}")

    if not confirm():
        print("Aborted, nothing was uploaded.")
        return None

    uploaded = submit_payloads(workspace.client, course.id, assignment.id, payloads)

    if report_path:
        report = SubmissionReport(
            key=key,
            course=course.name,
            assignment=assignment.name,
            assignment_id=assignment.id,
            submitted=True,
            uploaded=uploaded,
            skipped=[str(e) for e in result.skipped],
            unrecognized_options=[f"{path}: {e}" for path, e in result.unrecognized],
        )
        save_report(report, report_path)
        print(f"Report saved to: {report_path}")

    print(f"✓ Submitted {len(uploaded)} file(s) to '{assignment.name}'")
    return uploaded


def run_check(key: str | None = None, start: Path | None = None, client: CanvasClient | None = None) -> bool:
    """Resolve the course and assignments and show their include entries.

    Returns:
        True if every identifier and include path resolved.
    """
    root, workspace = open_workspace(start, client)
    config = workspace.config

    try:
        course = workspace.selected_course()
    except IdentifierError as e:
        print_identifier_error("Course", config.course, e)
        return False
    print(f"Course '{course.name}' (canvas id {course.id})")

    keys = [key] if key is not None else sorted(config.assignment)
    ok = True
    for k in keys:
        config.assignment_config(k)
        print()
        print(f"assignment.{k}")
        try:
            assignment = workspace.assignment(k)
            print(f"'{assignment.name}' (canvas id {assignment.id})")
        except IdentifierError as e:
            print_identifier_error("Assignment", config.assignment_config(k).ident, e)
            ok = False
        for entry in workspace.include_entries(k, root):
            print(f"  {_format_entry(entry)}")
            ok = ok and entry.include is not None and not entry.option_errors
    return ok


def run_assignments(start: Path | None = None, client: CanvasClient | None = None) -> None:
    """List the assignments of the configured course."""
    _, workspace = open_workspace(start, client)
    course = workspace.selected_course()
    print(f"Assignments of '{course.name}' (canvas id {course.id})")
    for a in sorted(workspace.assignments(), key=lambda a: (a.due_at is None, a.due_at or datetime.min, a.id)):
        print(f"  {a.id:>8}  due {_format_date(a.due_at)}  {a.name}")
        if a.unlock_at or a.lock_at:
            print(f"            unlocks {_format_date(a.unlock_at)}, locks {_format_date(a.lock_at)}")


def run_status(key: str, start: Path | None = None, client: CanvasClient | None = None) -> None:
    """Show the latest submission to the assignment configured under ``key``."""
    _, workspace = open_workspace(start, client)
    assignment = workspace.assignment(key)
    submission = workspace.latest_submission(assignment.id)
    print(f"'{assignment.name}' (canvas id {assignment.id}), due {_format_date(assignment.due_at)}")
    if submission is None:
        print("  No submission yet.")
        return
    print(f"  Submitted {_format_date(submission.submitted_at)} ({submission.submission_type or 'unknown type'})")
    for attachment in submission.attachments:
        print(f"    {attachment.display_name}")
    if submission.url:
        print(f"    {submission.url}")
