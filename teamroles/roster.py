from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from typing import Callable, Generic, Iterable, Iterator, TypeVar

from .errors import ValidationCode, ValidationError


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Participant:
    id: str
    name: str
    # Label copied from a Role at assignment time. Not kept in sync with
    # later role renames or removals.
    assigned_role: str | None = None

    def with_role(self, role_name: str | None) -> "Participant":
        return replace(self, assigned_role=role_name)

    def to_dict(self) -> dict:
        data = {"id": self.id, "name": self.name}
        if self.assigned_role is not None:
            data["assignedRole"] = self.assigned_role
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Participant":
        return cls(id=str(data["id"]), name=data["name"], assigned_role=data.get("assignedRole"))


@dataclass(frozen=True)
class Role:
    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict) -> "Role":
        return cls(id=str(data["id"]), name=data["name"])


T = TypeVar("T", Participant, Role)


class NamedCollection(Generic[T]):
    """
    Ordered entities whose names are unique case-insensitively.
    """

    def __init__(self, factory: Callable[[str, str], T], items: Iterable[T] = ()):
        self._factory = factory
        self._items: list[T] = list(items)

    @property
    def items(self) -> tuple[T, ...]:
        return tuple(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def names(self) -> list[str]:
        return [item.name for item in self._items]

    def add(self, name: str) -> T:
        name = (name or "").strip()
        if not name:
            raise ValidationError(ValidationCode.EMPTY_NAME)

        folded = name.casefold()
        if any(item.name.strip().casefold() == folded for item in self._items):
            raise ValidationError(ValidationCode.DUPLICATE, f'"{name}" already exists.')

        item = self._factory(new_id(), name)
        self._items.append(item)
        return item

    def remove(self, item_id: str) -> None:
        self._items = [item for item in self._items if item.id != item_id]

    def replace(self, items: Iterable[T]) -> None:
        self._items = list(items)


def participant_collection(items: Iterable[Participant] = ()) -> NamedCollection[Participant]:
    return NamedCollection(lambda id_, name: Participant(id=id_, name=name), items)


def role_collection(items: Iterable[Role] = ()) -> NamedCollection[Role]:
    return NamedCollection(lambda id_, name: Role(id=id_, name=name), items)


class Workspace:
    """
    The live participants and roles a user is editing, plus whether the
    current participant labels come from a shuffle.
    """

    def __init__(
        self,
        participants: Iterable[Participant] = (),
        roles: Iterable[Role] = (),
        has_shuffled: bool = False,
    ):
        self.participants = participant_collection(participants)
        self.roles = role_collection(roles)
        self.has_shuffled = has_shuffled

    def load_team(self, members: Iterable[Participant], roles: Iterable[Role]) -> None:
        # has_shuffled is left as is; results show again only if the loaded
        # members carry labels
        self.participants.replace(members)
        self.roles.replace(roles)

    def apply_assignment(self, assigned: Iterable[Participant]) -> None:
        self.participants.replace(assigned)
        self.has_shuffled = True

    @property
    def show_results(self) -> bool:
        return self.has_shuffled and any(p.assigned_role for p in self.participants)

    def to_dict(self) -> dict:
        return {
            "teamMembers": [p.to_dict() for p in self.participants],
            "roles": [r.to_dict() for r in self.roles],
            "hasShuffled": self.has_shuffled,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "Workspace":
        data = data or {}
        return cls(
            participants=[Participant.from_dict(p) for p in data.get("teamMembers", [])],
            roles=[Role.from_dict(r) for r in data.get("roles", [])],
            has_shuffled=bool(data.get("hasShuffled", False)),
        )
