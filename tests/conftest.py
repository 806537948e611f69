# tests/conftest.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from kerchief.canvas_api import CanvasClient

DOMAIN = "canvas.test"
TOKEN = "TEST"
API = f"https://{DOMAIN}/api/v1"
UPLOAD_URL = "https://uploads.test/upload"

CONFIG_TOML = f"""
token = "{TOKEN}"
domain = "{DOMAIN}"

[course]
name = "Datorgrafik"

[assignment.1]
name = "Assignment 1"
include = [ "group.txt",
            {{ path = "assignment1", options = ["zip"] }},
            {{ path = "missing.txt" }},
            {{ path = "notes.md", options = ["gzip"] }} ]

[assignment.2]
id = 202
include = "group.txt"
"""

COURSES = [
    {"id": 101, "name": "Datorgrafik"},
    {"id": 102, "name": "Linjär algebra"},
]

ASSIGNMENTS = [
    {"id": 201, "name": "Assignment 1", "due_at": "2024-02-01T22:59:00Z"},
    {"id": 202, "name": "Assignment 2", "due_at": None, "lock_at": "2024-03-01T22:59:00Z"},
]


@dataclass
class Entity:
    """Minimal candidate: anything with an id and a name."""

    id: int
    name: str


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    (root / "kerchief.toml").write_text(CONFIG_TOML, encoding="utf-8")
    (root / "group.txt").write_text("Ada, Grace\n", encoding="utf-8")
    (root / "notes.md").write_text("# notes\n", encoding="utf-8")
    (root / "assignment1").mkdir()
    (root / "assignment1" / "main.py").write_text("print('hello')\n", encoding="utf-8")
    return root


@pytest.fixture
def client() -> CanvasClient:
    return CanvasClient(DOMAIN, TOKEN)


@pytest.fixture
def canvas(requests_mock):
    """Stub the read-only Canvas endpoints used to resolve identifiers."""
    requests_mock.get(f"{API}/courses", json=COURSES)
    requests_mock.get(f"{API}/courses/101/assignments", json=ASSIGNMENTS)
    return requests_mock


@pytest.fixture
def canvas_uploads(canvas):
    """Stub the upload endpoints on top of ``canvas``; every upload gets id 9001."""
    for assignment_id in (201, 202):
        canvas.post(
            f"{API}/courses/101/assignments/{assignment_id}/submissions/self/files",
            json={"upload_url": UPLOAD_URL, "upload_params": {"key": "abc"}},
        )
        canvas.post(f"{API}/courses/101/assignments/{assignment_id}/submissions", json={"id": 1})
    canvas.post(UPLOAD_URL, json={"id": 9001}, status_code=201)
    return canvas
