"""Resolution of user supplied identifiers against Canvas entities."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from kerchief.configs import Identifier, IdentifierState


class Identifiable(Protocol):
    """Anything exposing a Canvas id and a name (courses, assignments)."""

    @property
    def id(self) -> int: ...

    @property
    def name(self) -> str: ...


@dataclass(frozen=True)
class OwnedIdentifier:
    """An (id, name) pair copied out of a candidate for use in diagnostics."""

    id: int
    name: str

    @classmethod
    def of(cls, entity: Identifiable) -> OwnedIdentifier:
        return cls(id=entity.id, name=entity.name)

    def __str__(self) -> str:
        return f"'{self.name}' (canvas id {self.id})"


def _owned(entities: Iterable[Identifiable]) -> list[OwnedIdentifier]:
    return [OwnedIdentifier.of(e) for e in entities]


class IdentifierError(ValueError):
    """Base class for failures to resolve an identifier.

    Attributes:
        alternatives: Candidates worth suggesting to the user.
    """

    def __init__(self, message: str, alternatives: list[OwnedIdentifier]) -> None:
        super().__init__(message)
        self.alternatives = alternatives

    def details(self) -> list[str]:
        """Render the alternatives, one line each."""
        if not self.alternatives:
            return ["(no candidates available)"]
        return [str(alt) for alt in self.alternatives]


class NotSpecified(IdentifierError):
    def __init__(self, alternatives: list[OwnedIdentifier]) -> None:
        super().__init__("fields 'id', 'name' missing from config, either should be sufficient", alternatives)


class UnderSpecified(IdentifierError):
    def __init__(self, user_provided: str, alternatives: list[OwnedIdentifier]) -> None:
        super().__init__(
            f"the name '{user_provided}' is not sufficient to distinguish among possible values",
            alternatives,
        )
        self.user_provided = user_provided


class NameConflict(IdentifierError):
    def __init__(self, user_provided: OwnedIdentifier, match_id_not_name: list[OwnedIdentifier]) -> None:
        super().__init__(
            f"the identifier {user_provided} matches some canvas identifier by 'id' but not by 'name'",
            match_id_not_name,
        )
        self.user_provided = user_provided

    @property
    def match_id_not_name(self) -> list[OwnedIdentifier]:
        return self.alternatives


class IdConflict(IdentifierError):
    def __init__(self, user_provided: OwnedIdentifier, match_name_not_id: list[OwnedIdentifier]) -> None:
        super().__init__(
            f"the identifier {user_provided} matches some canvas identifier by 'name' but not by 'id'",
            match_name_not_id,
        )
        self.user_provided = user_provided

    @property
    def match_name_not_id(self) -> list[OwnedIdentifier]:
        return self.alternatives


class NoSuchId(IdentifierError):
    def __init__(self, user_provided: int, alternatives: list[OwnedIdentifier]) -> None:
        super().__init__(f"the id '{user_provided}' is not present among possible values", alternatives)
        self.user_provided = user_provided


class NoSuchName(IdentifierError):
    def __init__(self, user_provided: str, alternatives: list[OwnedIdentifier]) -> None:
        super().__init__(f"the name '{user_provided}' is not present among possible values", alternatives)
        self.user_provided = user_provided


class NoSuchIdentifier(IdentifierError):
    def __init__(self, user_provided: OwnedIdentifier, alternatives: list[OwnedIdentifier]) -> None:
        super().__init__(
            f"the identifier {user_provided} is not present among possible values",
            alternatives,
        )
        self.user_provided = user_provided


def _resolve_by_name_and_id[T: Identifiable](candidates: list[T], name: str, id: int) -> T:
    id_matches = [c for c in candidates if c.id == id]
    name_matches = [c for c in candidates if c.name == name]
    user_provided = OwnedIdentifier(id=id, name=name)

    if id_matches:
        # The id takes priority; a differing name is reported, never overridden.
        id_match = id_matches[0]
        if id_match.name == name:
            return id_match
        raise NameConflict(user_provided, _owned(id_matches))

    if name_matches:
        raise IdConflict(user_provided, _owned(name_matches))
    raise NoSuchIdentifier(user_provided, _owned(candidates))


def resolve[T: Identifiable](candidates: Iterable[T], partial: Identifier) -> T:
    """Pick the single candidate designated by a partial identifier.

    Names are compared exactly (case-sensitive). When several candidates share
    an id the first one in iteration order is used.

    Args:
        candidates: Entities fetched from Canvas.
        partial: Identifier as read from the configuration.

    Returns:
        The matching candidate.

    Raises:
        NotSpecified: If the identifier has neither name nor id.
        UnderSpecified: If a name alone matches several candidates.
        NameConflict: If the id matches a candidate with another name.
        IdConflict: If the name matches but the id matches nothing.
        NoSuchId: If an id alone matches nothing.
        NoSuchName: If a name alone matches nothing.
        NoSuchIdentifier: If neither name nor id matches anything.
    """
    candidates = list(candidates)
    if partial.is_none():
        raise NotSpecified(_owned(candidates))

    state = partial.read_state()

    if state is IdentifierState.NAME_AND_ID:
        assert partial.name is not None and partial.id is not None
        return _resolve_by_name_and_id(candidates, partial.name, partial.id)

    if state is IdentifierState.ID_ONLY:
        for candidate in candidates:
            if candidate.id == partial.id:
                return candidate
        raise NoSuchId(partial.id, _owned(candidates))  # pyright: ignore[reportArgumentType]

    name_matches = [c for c in candidates if c.name == partial.name]
    if not name_matches:
        raise NoSuchName(partial.name, _owned(candidates))  # pyright: ignore[reportArgumentType]
    if len(name_matches) > 1:
        raise UnderSpecified(partial.name, _owned(name_matches))  # pyright: ignore[reportArgumentType]
    return name_matches[0]
