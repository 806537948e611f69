"""Canvas REST API client.

Only the handful of endpoints needed for submitting files to an assignment
are covered:
- listing courses and the assignments of a course,
- fetching the caller's latest submission to an assignment,
- the three step file upload (negotiate, upload, confirm by redirect),
- creating an ``online_upload`` submission from uploaded file ids.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import urljoin

import requests
from pydantic import BaseModel, ValidationError

API_PREFIX = "/api/v1/"
DEFAULT_PER_PAGE = 100
USER_AGENT = "kerchief/0.1"

log = logging.getLogger(__name__)


class CanvasAPIError(RuntimeError):
    """Raised for transport failures, error statuses and malformed responses."""


class Course(BaseModel):
    id: int
    name: str


class Attachment(BaseModel):
    display_name: str
    filename: str


class Submission(BaseModel):
    """A submission made by the token owner.

    Attributes:
        submission_type: e.g. ``online_upload``, ``online_text_entry``, ``online_url``.
        submitted_at: When the submission was made.
        attachments: Uploaded files (``online_upload`` only).
        body: Text of an ``online_text_entry`` submission.
        url: Link of an ``online_url`` submission.
        workflow_state: Canvas state, e.g. ``submitted`` or ``graded``.
    """

    submission_type: str | None = None
    submitted_at: datetime
    attachments: list[Attachment] = []
    body: str | None = None
    url: str | None = None
    workflow_state: str | None = None


class Assignment(BaseModel):
    id: int
    name: str
    due_at: datetime | None = None
    lock_at: datetime | None = None
    unlock_at: datetime | None = None
    submission: Submission | None = None


class UploadTarget(BaseModel):
    """Where and how to post a file, as negotiated with Canvas."""

    upload_url: str
    upload_params: dict[str, Any] = {}


def _next_link(headers: Any) -> str | None:
    """Extract the ``rel="next"`` URL from an RFC 5988 Link header, if any."""
    link_hdr = headers.get("Link") or headers.get("link")
    if not link_hdr:
        return None
    for raw in link_hdr.split(","):
        parts = [p.strip() for p in raw.split(";")]
        if not parts or not (parts[0].startswith("<") and ">" in parts[0]):
            continue
        rel_parts = [p.lower() for p in parts[1:]]
        if any(r in ("rel=next", 'rel="next"') for r in rel_parts):
            return parts[0][1 : parts[0].find(">")]
    return None


def _parse[M: BaseModel](model: type[M], data: Any, operation: str) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise CanvasAPIError(f"{operation} failed: unexpected response: {e}") from e


class CanvasClient:
    """Blocking client bound to one Canvas host and bearer token.

    Args:
        domain: Canvas host such as ``uppsala.instructure.com``; a full
            ``https://`` URL is accepted as well.
        token: Bearer token used on every API call.
    """

    def __init__(self, domain: str, token: str) -> None:
        if not domain or not token:
            raise ValueError("Canvas domain and token are required")

        base = domain.rstrip("/")
        if not base.startswith(("http://", "https://")):
            base = f"https://{base}"
        self.api_root = base + API_PREFIX
        self.token = token

        self.session = requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}", "User-Agent": USER_AGENT})
        # Upload hosts are not Canvas; they get no token.
        self.upload_session = requests.Session()
        self.upload_session.headers.update({"User-Agent": USER_AGENT})

    def _url(self, endpoint: str) -> str:
        return urljoin(self.api_root, endpoint.lstrip("/"))

    def _send(
        self, operation: str, session: requests.Session, method: str, url: str, **kwargs: Any
    ) -> requests.Response:
        log.debug("%s: %s %s", operation, method, url)
        try:
            resp = session.request(method, url, **kwargs)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise CanvasAPIError(f"{operation} failed: {e}") from e
        return resp

    @staticmethod
    def _json(resp: requests.Response, operation: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise CanvasAPIError(f"{operation} failed: response is not JSON") from e

    def _get_list(self, endpoint: str, operation: str, params: dict[str, Any] | None = None) -> list[Any]:
        """GET a list endpoint, following pagination links."""
        url: str | None = self._url(endpoint)
        first_params = {"per_page": DEFAULT_PER_PAGE, **(params or {})}
        results: list[Any] = []
        first = True
        while url:
            # Follow-up URLs already carry their query string.
            resp = self._send(operation, self.session, "GET", url, params=first_params if first else None)
            data = self._json(resp, operation)
            if not isinstance(data, list):
                raise CanvasAPIError(f"{operation} failed: expected a list, got {type(data).__name__}")
            results.extend(data)
            url = _next_link(resp.headers)
            first = False
        return results

    def get_courses(self) -> list[Course]:
        """Return the courses visible to the token owner."""
        operation = "listing courses"
        return [_parse(Course, c, operation) for c in self._get_list("courses", operation)]

    def get_assignments(self, course_id: int) -> list[Assignment]:
        """Return the assignments of a course."""
        operation = f"listing assignments of course {course_id}"
        data = self._get_list(f"courses/{course_id}/assignments", operation)
        return [_parse(Assignment, a, operation) for a in data]

    def get_latest_submission(self, course_id: int, assignment_id: int) -> Submission | None:
        """Return the token owner's latest submission, or None if nothing was submitted."""
        operation = f"fetching submission for assignment {assignment_id}"
        resp = self._send(
            operation,
            self.session,
            "GET",
            self._url(f"courses/{course_id}/assignments/{assignment_id}/submissions/self"),
            params={"include[]": "submission_comments"},
        )
        data = self._json(resp, operation)
        if not isinstance(data, dict) or data.get("submitted_at") is None:
            return None
        return _parse(Submission, data, operation)

    def negotiate_upload(self, course_id: int, assignment_id: int, file_name: str, file_size: int) -> UploadTarget:
        """Ask Canvas where to upload a submission file (step 1 of the upload)."""
        operation = f"negotiating upload of {file_name}"
        resp = self._send(
            operation,
            self.session,
            "POST",
            self._url(f"courses/{course_id}/assignments/{assignment_id}/submissions/self/files"),
            params={"name": file_name, "size": file_size},
        )
        return _parse(UploadTarget, self._json(resp, operation), operation)

    def perform_upload(self, target: UploadTarget, payload_path: Path) -> int:
        """Post the file to the negotiated URL and return the Canvas file id.

        A redirect answer is followed once, with the bearer token, to confirm
        the upload.

        Raises:
            CanvasAPIError: On HTTP errors, a redirect without ``Location`` or
                a malformed confirmation.
        """
        operation = f"uploading {payload_path.name}"
        try:
            with open(payload_path, "rb") as f:
                resp = self._send(
                    operation,
                    self.upload_session,
                    "POST",
                    target.upload_url,
                    data=target.upload_params,
                    files={"file": (payload_path.name, f)},
                    allow_redirects=False,
                )
        except OSError as e:
            raise CanvasAPIError(f"{operation} failed: {e}") from e

        if 300 <= resp.status_code < 400:
            location = resp.headers.get("Location")
            if not location:
                raise CanvasAPIError(f"{operation} failed: location header missing in redirect response")
            resp = self._send(operation, self.session, "GET", location, allow_redirects=False)

        data = self._json(resp, operation)
        if not isinstance(data, dict) or not isinstance(data.get("id"), int):
            raise CanvasAPIError(f"{operation} failed: no file id in response")
        return data["id"]

    def upload_file(self, course_id: int, assignment_id: int, payload_path: Path) -> int:
        """Upload one payload for a submission and return its file id."""
        try:
            size = payload_path.stat().st_size
        except OSError as e:
            raise CanvasAPIError(f"uploading {payload_path.name} failed: {e}") from e
        target = self.negotiate_upload(course_id, assignment_id, payload_path.name, size)
        return self.perform_upload(target, payload_path)

    def finalize_submission(self, course_id: int, assignment_id: int, file_ids: list[int]) -> None:
        """Create an ``online_upload`` submission out of uploaded files."""
        params: list[tuple[str, str | int]] = [("submission[submission_type]", "online_upload")]
        params.extend(("submission[file_ids][]", file_id) for file_id in file_ids)
        self._send(
            f"submitting to assignment {assignment_id}",
            self.session,
            "POST",
            self._url(f"courses/{course_id}/assignments/{assignment_id}/submissions"),
            params=params,
        )
