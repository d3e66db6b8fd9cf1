"""Row / cell / part containers for a list.

Parts are pure data. Every decision about how a part looks (language,
link style, templates) is taken at render time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class NumberPart:
    pass


@dataclass(frozen=True)
class EntityPart:
    id: str
    try_localize: bool = True


@dataclass(frozen=True)
class LocalLinkPart:
    page: str
    label: str


@dataclass(frozen=True)
class TimePart:
    text: str


@dataclass(frozen=True)
class LocationPart:
    lat: float
    lon: float


@dataclass(frozen=True)
class FilePart:
    name: str


@dataclass(frozen=True)
class UriPart:
    url: str


@dataclass(frozen=True)
class ExternalIdPart:
    prop: str
    id: str


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class SnakListPart:
    """A main value and qualifier values shown together."""

    parts: tuple["ResultPart", ...]


ResultPart = Union[
    NumberPart,
    EntityPart,
    LocalLinkPart,
    TimePart,
    LocationPart,
    FilePart,
    UriPart,
    ExternalIdPart,
    TextPart,
    SnakListPart,
]


@dataclass(frozen=True)
class ResultCell:
    parts: tuple[ResultPart, ...] = ()

    def __len__(self) -> int:
        return len(self.parts)


@dataclass
class ResultRow:
    entity_id: str
    cells: list[ResultCell] = field(default_factory=list)
    section: int = 0
    sortkey: str = ""
