"""Composable predicate tree understood by every product store adapter."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple, Union

# Product fields a predicate may reference.
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_DESCRIPTION = "description"
FIELD_CATEGORY_ID = "category_id"
FIELD_SUBCATEGORY_ID = "subcategory_id"
FIELD_MANUFACTURER = "manufacturer"
FIELD_CHARACTERISTICS = "characteristics"

SCALAR_FIELDS = frozenset(
    {FIELD_ID, FIELD_NAME, FIELD_DESCRIPTION, FIELD_CATEGORY_ID, FIELD_SUBCATEGORY_ID, FIELD_MANUFACTURER}
)


@dataclass(frozen=True)
class MatchAll:
    pass


@dataclass(frozen=True)
class Eq:
    field: str
    value: str


@dataclass(frozen=True)
class In:
    field: str
    values: FrozenSet[str]


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match; ``needle`` is stored lower-cased."""

    field: str
    needle: str


@dataclass(frozen=True)
class HasCharacteristic:
    name: str
    values: FrozenSet[str]


@dataclass(frozen=True)
class And:
    clauses: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    clauses: Tuple["Predicate", ...]


Predicate = Union[MatchAll, Eq, In, Contains, HasCharacteristic, And, Or]


def all_of(*clauses: Predicate) -> Predicate:
    kept = tuple(c for c in clauses if not isinstance(c, MatchAll))
    if not kept:
        return MatchAll()
    if len(kept) == 1:
        return kept[0]
    return And(kept)


def any_of(*clauses: Predicate) -> Predicate:
    if len(clauses) == 1:
        return clauses[0]
    return Or(tuple(clauses))


def one_of(field: str, values) -> Predicate:
    values = frozenset(values)
    if len(values) == 1:
        return Eq(field, next(iter(values)))
    return In(field, values)
