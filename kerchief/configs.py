"""Configuration models for kerchief."""

from __future__ import annotations

import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

CONFIG_FILE_NAME: str = "kerchief.toml"
SCRATCH_DIR: Path = Path(".kerchief") / "temp"  # relative to the project root

CONFIG_TEMPLATE: str = """
token = "<bearer token>"
# Replace <bearer token> by an authorization token for Canvas
domain = "example.instructure.com"

[course]
name = "Canvas course name"

[assignment.1]
# The name '1' is the local name of the assignment. It is the key that you use
# for referring to the assignment when submitting.
#
# Example use:
# $ kerchief submit 1
# -- uploads the files in the include paths and bundles them as a submission
#    to the named assignment.

name = "Canvas assignment name"
include = [ "path/to/a/file.txt", "path/to/another/file.txt" ]
"""


class ConfigError(ValueError):
    """Raised when the configuration file cannot be parsed or validated."""


class NoSuchAssignmentKey(ConfigError):
    """Raised when an assignment key is absent from the configuration."""

    def __init__(self, key: str) -> None:
        super().__init__(f"The assignment key '{key}' is not present in the configuration.")
        self.key = key


class IdentifierState(Enum):
    NAME_AND_ID = "name_and_id"
    NAME_ONLY = "name_only"
    ID_ONLY = "id_only"
    NONE = "none"


class Identifier(BaseModel):
    """A partial reference to a Canvas entity: a name, an id, both or neither.

    Attributes:
        name: Exact Canvas name of the entity.
        id: Canvas id of the entity.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    id: int | None = None

    @property
    def has_name(self) -> bool:
        return self.name is not None

    @property
    def has_id(self) -> bool:
        return self.id is not None

    def is_none(self) -> bool:
        return not self.has_name and not self.has_id

    def read_state(self) -> IdentifierState:
        """Classify which fields are present."""
        if self.has_name and self.has_id:
            return IdentifierState.NAME_AND_ID
        if self.has_name:
            return IdentifierState.NAME_ONLY
        if self.has_id:
            return IdentifierState.ID_ONLY
        return IdentifierState.NONE

    def describe(self) -> str:
        parts = []
        if self.has_name:
            parts.append(f"name '{self.name}'")
        if self.has_id:
            parts.append(f"id {self.id}")
        return " and ".join(parts) if parts else "no name or id"


class IncludeSpec(BaseModel):
    """One include entry: a path plus optional transform flags.

    Accepts either a bare string or a table ``{ path = "...", options = [...] }``.
    """

    path: str
    options: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def accept_bare_path(cls, v: Any) -> Any:
        if isinstance(v, str):
            return {"path": v}
        return v

    @field_validator("options", mode="before")
    @classmethod
    def convert_missing_options(cls, v: Any) -> Any:
        return [] if v is None else v


class AssignmentConfig(BaseModel):
    """A locally keyed assignment.

    Attributes:
        name: Canvas assignment name.
        id: Canvas assignment id.
        include: Paths to stage for submission.
    """

    name: str | None = None
    id: int | None = None
    include: list[IncludeSpec]

    @field_validator("include", mode="before")
    @classmethod
    def convert_single_include(cls, v: Any) -> Any:
        if isinstance(v, (str, dict)):
            return [v]
        return v

    @property
    def ident(self) -> Identifier:
        return Identifier(name=self.name, id=self.id)


class Config(BaseModel):
    """Top-level contents of ``kerchief.toml``.

    Attributes:
        token: Canvas bearer token.
        domain: Canvas host, e.g. ``uppsala.instructure.com``.
        course: Identifier of the course to submit to.
        assignment: Assignments keyed by a user chosen local name.
    """

    token: str
    domain: str
    course: Identifier
    assignment: dict[str, AssignmentConfig] = Field(default_factory=dict)

    def assignment_config(self, key: str) -> AssignmentConfig:
        """Look up an assignment by its local key.

        Raises:
            NoSuchAssignmentKey: If the key is not configured.
        """
        try:
            return self.assignment[key]
        except KeyError:
            raise NoSuchAssignmentKey(key) from None


def parse_config(text: str) -> Config:
    """Parse TOML text into a validated Config.

    Raises:
        ConfigError: If the TOML is malformed or does not match the schema.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"parsing config failed: {e}") from e

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config: {e}") from e


def load_config(path: Path) -> Config:
    """Load a TOML configuration file and parse it into a Config model.

    Args:
        path: Path to ``kerchief.toml``.

    Returns:
        Parsed Config object with full validation.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If the file is malformed or its structure is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, encoding="utf-8") as f:
        return parse_config(f.read())
