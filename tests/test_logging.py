# tests/test_logging.py
import logging
from pathlib import Path

import pytest

from kerchief.configs import IncludeSpec
from kerchief.include_paths import resolve_entries
from kerchief.logging_setup import LOGGER_NAME, setup_logging
from kerchief.staging import prepare_scratch_dir, stage_includes


@pytest.mark.parametrize(
    "verbosity, level",
    [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
)
def test_verbosity_sets_level(verbosity, level):
    setup_logging(verbosity)
    logger = logging.getLogger(LOGGER_NAME)
    assert logger.level == level
    assert logger.propagate is False


def test_flatten_collision_is_logged(project: Path, caplog):
    setup_logging(0)
    (project / "assignment1" / "sub").mkdir()
    (project / "assignment1" / "sub" / "main.py").write_text("again\n")
    scratch = prepare_scratch_dir(project)

    # propagate=False keeps records away from the root logger caplog listens on.
    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(caplog.handler)
    try:
        stage_includes(resolve_entries(project, [IncludeSpec(path="assignment1")]), scratch)
    finally:
        logger.removeHandler(caplog.handler)

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Overwriting staged file main.py" in warnings[0].getMessage()


def test_file_include_overwriting_payload_is_logged(project: Path, caplog):
    setup_logging(0)
    (project / "old").mkdir()
    (project / "old" / "group.txt").write_text("stale\n")
    scratch = prepare_scratch_dir(project)

    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(caplog.handler)
    try:
        specs = [IncludeSpec(path="group.txt"), IncludeSpec(path="old/group.txt")]
        stage_includes(resolve_entries(project, specs), scratch)
    finally:
        logger.removeHandler(caplog.handler)

    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert warnings[0].startswith("Overwriting staged file group.txt with")
    assert (scratch / "group.txt").read_text() == "stale\n"
