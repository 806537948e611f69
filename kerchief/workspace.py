"""Configuration joined with live Canvas data for a single run."""

from __future__ import annotations

import logging
from pathlib import Path

from kerchief.canvas_api import Assignment, CanvasClient, Course, Submission
from kerchief.configs import Config
from kerchief.identifiers import resolve
from kerchief.include_paths import IncludeEntry, resolve_entries

log = logging.getLogger(__name__)


class Workspace:
    """Resolves configured identifiers against Canvas entity lists.

    Entity lists are fetched on first use and kept for the rest of the run.

    Args:
        config: Parsed ``kerchief.toml``.
        client: Canvas client; built from the config when omitted.
    """

    def __init__(self, config: Config, client: CanvasClient | None = None) -> None:
        self.config = config
        self.client = client or CanvasClient(config.domain, config.token)
        self._courses: list[Course] | None = None
        self._assignments: list[Assignment] | None = None
        self._latest_submissions: dict[int, Submission | None] = {}

    def courses(self) -> list[Course]:
        if self._courses is None:
            self._courses = self.client.get_courses()
            log.info("Fetched %d course(s)", len(self._courses))
        return self._courses

    def selected_course(self) -> Course:
        """Return the configured course.

        Raises:
            IdentifierError: If the course identifier does not resolve.
            CanvasAPIError: If the course list cannot be fetched.
        """
        return resolve(self.courses(), self.config.course)

    def course_id(self) -> int:
        return self.selected_course().id

    def assignments(self) -> list[Assignment]:
        if self._assignments is None:
            self._assignments = self.client.get_assignments(self.course_id())
            log.info("Fetched %d assignment(s)", len(self._assignments))
        return self._assignments

    def assignment(self, key: str) -> Assignment:
        """Return the Canvas assignment configured under ``key``.

        Raises:
            NoSuchAssignmentKey: If ``key`` is not configured.
            IdentifierError: If the assignment identifier does not resolve.
        """
        ident = self.config.assignment_config(key).ident
        return resolve(self.assignments(), ident)

    def assignment_id(self, key: str) -> int:
        return self.assignment(key).id

    def assignment_name(self, key: str) -> str:
        return self.assignment(key).name

    def latest_submission(self, assignment_id: int) -> Submission | None:
        if assignment_id not in self._latest_submissions:
            self._latest_submissions[assignment_id] = self.client.get_latest_submission(
                self.course_id(), assignment_id
            )
        return self._latest_submissions[assignment_id]

    def include_entries(self, key: str, root: Path) -> list[IncludeEntry]:
        """Resolve the include paths of an assignment relative to ``root``."""
        return resolve_entries(root, self.config.assignment_config(key).include)
