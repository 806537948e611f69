"""Staging of include entries into the scratch directory."""

from __future__ import annotations

import logging
import os
import shutil
import zipfile
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from kerchief.configs import SCRATCH_DIR
from kerchief.include_paths import FileOption, FileOptionError, IncludeEntry, IncludeError, IncludePath

log = logging.getLogger(__name__)


class StagingError(RuntimeError):
    """Raised when writing a payload into the scratch directory fails."""


@dataclass
class StagingResult:
    """Outcome of a staging run.

    Attributes:
        scratch_dir: Directory holding the staged payloads.
        skipped: Include errors of entries that were not staged.
        unrecognized: Option errors, per configured path.
    """

    scratch_dir: Path
    skipped: list[IncludeError] = field(default_factory=list)
    unrecognized: list[tuple[str, FileOptionError]] = field(default_factory=list)

    def payloads(self) -> list[Path]:
        return sorted(p for p in self.scratch_dir.iterdir() if p.is_file())


def prepare_scratch_dir(root: Path) -> Path:
    """Remove and recreate the scratch directory under ``root``.

    Returns:
        The empty scratch directory.
    """
    scratch_dir = root / SCRATCH_DIR
    if scratch_dir.exists():
        shutil.rmtree(scratch_dir)
    scratch_dir.mkdir(parents=True)
    return scratch_dir


def _reraise(error: OSError) -> None:
    raise error


def _walk(dir_path: Path, scratch_dir: Path) -> Iterator[tuple[Path, bool]]:
    """Yield ``(path, is_dir)`` below ``dir_path``, parents first.

    Symbolic links are neither followed nor yielded. The scratch directory is
    pruned so that including the project root does not stage its own output.

    Raises:
        OSError: If any directory below ``dir_path`` cannot be listed.
    """
    for current, dirnames, filenames in os.walk(dir_path, onerror=_reraise):
        dirnames[:] = sorted(
            d
            for d in dirnames
            if not os.path.islink(os.path.join(current, d)) and Path(current) / d != scratch_dir
        )
        for d in dirnames:
            yield Path(current) / d, True
        for name in sorted(filenames):
            path = Path(current) / name
            if path.is_symlink() or not path.is_file():
                continue
            yield path, False


def _target(scratch_dir: Path, name: str, source: Path) -> Path:
    target = scratch_dir / name
    if target.exists():
        log.warning("Overwriting staged file %s with %s", name, source)
    return target


def _zip_file(file_path: Path, scratch_dir: Path) -> None:
    target = _target(scratch_dir, f"{file_path.name}.zip", file_path)
    with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.write(file_path, file_path.name)


def _zip_dir(dir_path: Path, scratch_dir: Path) -> None:
    target = _target(scratch_dir, f"{dir_path.name}.zip", dir_path)
    with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path, is_dir in _walk(dir_path, scratch_dir):
            arcname = path.relative_to(dir_path).as_posix()
            if is_dir:
                zf.mkdir(arcname)
            else:
                zf.write(path, arcname)


def _copy_dir_flat(dir_path: Path, scratch_dir: Path) -> None:
    for path, is_dir in _walk(dir_path, scratch_dir):
        if is_dir:
            continue
        shutil.copyfile(path, _target(scratch_dir, path.name, path))


def apply_include_transforms(include: IncludePath, options: set[FileOption], scratch_dir: Path) -> None:
    """Produce the payload for one include entry inside ``scratch_dir``.

    Args:
        include: Resolved file or directory.
        options: Recognized transform flags for the entry.
        scratch_dir: Directory receiving the payload.

    Raises:
        StagingError: If reading the include or writing the payload fails.
    """
    zip_requested = FileOption.ZIP in options
    log.debug("Staging %s (%s, zip=%s)", include.path, include.kind.value, zip_requested)
    try:
        if include.is_file and zip_requested:
            _zip_file(include.path, scratch_dir)
        elif include.is_file:
            shutil.copyfile(include.path, _target(scratch_dir, include.path.name, include.path))
        elif zip_requested:
            _zip_dir(include.path, scratch_dir)
        else:
            _copy_dir_flat(include.path, scratch_dir)
    except OSError as e:
        raise StagingError(f"staging '{include}' failed: {e}") from e


def stage_includes(entries: Iterable[IncludeEntry], scratch_dir: Path) -> StagingResult:
    """Stage every resolvable entry; unresolvable ones are recorded and skipped.

    Args:
        entries: Resolved include entries of one assignment.
        scratch_dir: Freshly emptied directory (see ``prepare_scratch_dir``).

    Returns:
        StagingResult describing what was staged and what was skipped.
    """
    result = StagingResult(scratch_dir=scratch_dir)
    for entry in entries:
        result.unrecognized.extend((entry.spec.path, e) for e in entry.option_errors)
        if entry.include is None:
            assert entry.error is not None
            log.info("Skipping include '%s': %s", entry.spec.path, entry.error)
            result.skipped.append(entry.error)
            continue
        apply_include_transforms(entry.include, entry.options, scratch_dir)
    return result
