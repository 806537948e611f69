"""Uploading staged payloads and finalizing the submission."""

from __future__ import annotations

from pathlib import Path

from tqdm import tqdm

from kerchief.canvas_api import CanvasClient
from kerchief.types import UploadedFile


def upload_payloads(
    client: CanvasClient,
    course_id: int,
    assignment_id: int,
    payloads: list[Path],
) -> list[UploadedFile]:
    """Upload each payload in order.

    Args:
        client: Canvas client.
        course_id: Resolved course id.
        assignment_id: Resolved assignment id.
        payloads: Staged files to upload.

    Returns:
        The uploaded files with their Canvas file ids, in upload order.

    Raises:
        CanvasAPIError: On the first failing upload; no later payload is sent.
    """
    uploaded: list[UploadedFile] = []
    for payload in tqdm(payloads, desc="Uploading", unit="file"):
        file_id = client.upload_file(course_id, assignment_id, payload)
        uploaded.append(UploadedFile(file=payload.name, file_id=file_id))
    return uploaded


def submit_payloads(
    client: CanvasClient,
    course_id: int,
    assignment_id: int,
    payloads: list[Path],
) -> list[UploadedFile]:
    """Upload all payloads and bundle them into one ``online_upload`` submission.

    Raises:
        ValueError: If there is nothing to submit.
        CanvasAPIError: If an upload or the final submission fails.
    """
    if not payloads:
        raise ValueError("Nothing was staged, refusing to submit an empty submission")

    uploaded = upload_payloads(client, course_id, assignment_id, payloads)
    client.finalize_submission(course_id, assignment_id, [u["file_id"] for u in uploaded])
    return uploaded
