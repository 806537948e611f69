"""Include path and file option resolution."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from kerchief.configs import CONFIG_FILE_NAME, IncludeSpec


class FileOption(Enum):
    """Transform applied to an include entry before upload."""

    ZIP = "zip"

    def __str__(self) -> str:
        return self.value


class FileOptionError(ValueError):
    """Base class for problems with a single option flag."""


class UnrecognizedOption(FileOptionError):
    def __init__(self, flag: str) -> None:
        super().__init__(flag)
        self.flag = flag


class IncludeError(ValueError):
    """Base class for include paths that cannot be staged."""


class NotPresent(IncludeError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"path {path} not found")
        self.path = path


class RootNotFoundError(FileNotFoundError):
    """Raised when no ancestor directory holds the configuration file."""


class IncludeKind(Enum):
    FILE = "file"
    DIR = "dir"


@dataclass(frozen=True)
class IncludePath:
    """A file or directory that existed when the include was resolved.

    Attributes:
        raw: The path as written in the configuration.
        path: The checked path (relative entries joined onto the project root).
        kind: Whether the target is a file or a directory.
    """

    raw: str
    path: Path
    kind: IncludeKind

    @property
    def is_file(self) -> bool:
        return self.kind is IncludeKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind is IncludeKind.DIR

    def __str__(self) -> str:
        return self.raw


@dataclass
class IncludeEntry:
    """A configured include after resolution of its path and options."""

    spec: IncludeSpec
    include: IncludePath | None = None
    error: IncludeError | None = None
    options: set[FileOption] = field(default_factory=set)
    option_errors: list[FileOptionError] = field(default_factory=list)


def find_root(start: Path | None = None) -> Path:
    """Find the closest directory (``start`` or an ancestor) holding the config file.

    Args:
        start: Directory to begin from, defaults to the current directory.

    Returns:
        The absolute project root.

    Raises:
        RootNotFoundError: If the filesystem root is reached without a match.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        if (directory / CONFIG_FILE_NAME).is_file():
            return directory
    raise RootNotFoundError(f"No {CONFIG_FILE_NAME} found in {current} or any parent directory")


def resolve_include(root: Path, raw_path: str) -> IncludePath:
    """Check that a configured path exists and classify it.

    Relative paths are taken relative to ``root``; absolute paths as-is.

    Raises:
        NotPresent: If the path is neither a regular file nor a directory.
    """
    path = root / raw_path  # joining an absolute path discards root
    if path.is_file():
        return IncludePath(raw=raw_path, path=path, kind=IncludeKind.FILE)
    if path.is_dir():
        return IncludePath(raw=raw_path, path=path, kind=IncludeKind.DIR)
    raise NotPresent(path)


def parse_options(flags: Iterable[str]) -> tuple[set[FileOption], list[FileOptionError]]:
    """Parse option flags one by one; a bad flag does not affect the others."""
    options: set[FileOption] = set()
    errors: list[FileOptionError] = []
    for flag in dict.fromkeys(flags):
        try:
            options.add(FileOption(flag))
        except ValueError:
            errors.append(UnrecognizedOption(flag))
    return options, errors


def resolve_entries(root: Path, specs: Iterable[IncludeSpec]) -> list[IncludeEntry]:
    """Resolve every include spec, keeping failures alongside successes."""
    entries: list[IncludeEntry] = []
    for spec in specs:
        options, option_errors = parse_options(spec.options)
        entry = IncludeEntry(spec=spec, options=options, option_errors=option_errors)
        try:
            entry.include = resolve_include(root, spec.path)
        except IncludeError as e:
            entry.error = e
        entries.append(entry)
    return entries
