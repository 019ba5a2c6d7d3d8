from __future__ import annotations

import random
from typing import Sequence, TypeVar

from ..errors import ValidationCode, ValidationError
from ..roster import Participant, Role

T = TypeVar("T")


def validate_inputs(participants: Sequence[Participant], roles: Sequence[Role]) -> None:
    if not participants:
        raise ValidationError(ValidationCode.EMPTY_PARTICIPANTS)
    if not roles:
        raise ValidationError(ValidationCode.EMPTY_ROLES)


def build_role_pool(roles: Sequence[Role], size: int) -> list[Role]:
    """
    Whole copies of ``roles`` back to back until there are at least ``size``
    entries, then cut to exactly ``size``. Extra participants get a second,
    third, ... cycle of the same role order.
    """
    if not roles:
        raise ValidationError(ValidationCode.EMPTY_ROLES)

    pool: list[Role] = list(roles)
    while len(pool) < size:
        pool.extend(roles)
    return pool[:size]


def fisher_yates(items: Sequence[T], rng=None) -> list[T]:
    """Return a uniformly shuffled copy of ``items``."""
    rng = rng or random
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def label_participants(participants: Sequence[Participant], pool: Sequence[Role]) -> list[Participant]:
    # positional: pool[k] labels participants[k]
    return [p.with_role(role.name) for p, role in zip(participants, pool)]


def assign_pool(participants: Sequence[Participant], roles: Sequence[Role], rng=None) -> list[Role]:
    """The permuted role pool that :func:`assign` zips against ``participants``."""
    validate_inputs(participants, roles)
    return fisher_yates(build_role_pool(roles, len(participants)), rng)


def assign(participants: Sequence[Participant], roles: Sequence[Role], rng=None) -> list[Participant]:
    """
    Label every participant with one role name. Raises ``ValidationError``
    when either sequence is empty. The inputs are left untouched.
    """
    return label_participants(participants, assign_pool(participants, roles, rng))
