"""Type definitions for kerchief."""

from __future__ import annotations

from typing import TypedDict


class UploadedFile(TypedDict):
    """A staged payload and the Canvas file id it was uploaded as."""

    file: str
    file_id: int


class SubmissionReport(TypedDict):
    """Type definition for the report written after a submission."""

    key: str
    course: str
    assignment: str
    assignment_id: int
    submitted: bool
    uploaded: list[UploadedFile]
    skipped: list[str]
    unrecognized_options: list[str]
