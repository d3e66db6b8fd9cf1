"""Column descriptors: what each list column shows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class NumberColumn:
    def as_key(self) -> str:
        return "number"


@dataclass(frozen=True)
class LabelColumn:
    def as_key(self) -> str:
        return "label"


@dataclass(frozen=True)
class LabelLangColumn:
    language: str

    def as_key(self) -> str:
        return f"label_{self.language}"


@dataclass(frozen=True)
class DescriptionColumn:
    def as_key(self) -> str:
        return "desc"


@dataclass(frozen=True)
class ItemColumn:
    def as_key(self) -> str:
        return "item"


@dataclass(frozen=True)
class PropertyColumn:
    prop: str

    def as_key(self) -> str:
        return self.prop.lower()


@dataclass(frozen=True)
class PropertyQualifierColumn:
    prop: str
    qualifier: str

    def as_key(self) -> str:
        return f"{self.prop.lower()}_{self.qualifier.lower()}"


@dataclass(frozen=True)
class PropertyQualifierValueColumn:
    prop: str
    qualifier_entity: str
    prop2: str

    def as_key(self) -> str:
        return f"{self.prop.lower()}_{self.qualifier_entity.lower()}_{self.prop2.lower()}"


@dataclass(frozen=True)
class FieldColumn:
    name: str

    def as_key(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class UnknownColumn:
    def as_key(self) -> str:
        return "unknown"


ColumnType = Union[
    NumberColumn,
    LabelColumn,
    LabelLangColumn,
    DescriptionColumn,
    ItemColumn,
    PropertyColumn,
    PropertyQualifierColumn,
    PropertyQualifierValueColumn,
    FieldColumn,
    UnknownColumn,
]


@dataclass
class Column:
    """A column type plus its display label.

    `explicit_label` is set when the label came from `key:label` syntax;
    such labels survive label re-derivation.
    """

    obj: ColumnType
    label: str
    explicit_label: bool = False
