from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


# ------------------------
# SPARQL binding values
# ------------------------
@dataclass(frozen=True)
class EntityValue:
    id: str


@dataclass(frozen=True)
class FileValue:
    name: str


@dataclass(frozen=True)
class UriValue:
    text: str


@dataclass(frozen=True)
class TimeValue:
    text: str


@dataclass(frozen=True)
class LocationValue:
    lat: float
    lon: float


@dataclass(frozen=True)
class LiteralValue:
    text: str


SparqlValue = Union[EntityValue, FileValue, UriValue, TimeValue, LocationValue, LiteralValue]

# One binding row: variable name -> typed value
SparqlRow = dict[str, SparqlValue]


@dataclass(frozen=True)
class SparqlResults:
    first_variable: str
    rows: list[SparqlRow]


# ------------------------
# Link display modes
# ------------------------
class LinksType(str, Enum):
    ALL = "all"
    LOCAL = "local"
    RED = "red"
    RED_ONLY = "red_only"
    TEXT = "text"
    REASONATOR = "reasonator"

    @classmethod
    def from_option(cls, value: Optional[str]) -> "LinksType":
        """Unknown or missing values fall back to ALL."""
        if not value:
            return cls.ALL
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.ALL


# ------------------------
# Sort modes
# ------------------------
_PROP_RE = re.compile(r"^P\d+$")


@dataclass(frozen=True)
class SortNone:
    pass


@dataclass(frozen=True)
class SortLabel:
    pass


@dataclass(frozen=True)
class SortFamilyName:
    pass


@dataclass(frozen=True)
class SortProperty:
    prop: str


SortMode = Union[SortNone, SortLabel, SortFamilyName, SortProperty]


def parse_sort_mode(value: Optional[str]) -> SortMode:
    if value is None:
        return SortNone()
    s = value.strip().upper()
    if s == "LABEL":
        return SortLabel()
    if s == "FAMILY_NAME":
        return SortFamilyName()
    if _PROP_RE.match(s):
        return SortProperty(prop=s)
    return SortNone()


# ------------------------
# Section grouping
# ------------------------
@dataclass(frozen=True)
class SectionNone:
    pass


@dataclass(frozen=True)
class SectionProperty:
    prop: str


@dataclass(frozen=True)
class SectionSparqlVariable:
    variable: str


SectionType = Union[SectionNone, SectionProperty, SectionSparqlVariable]


def parse_section_type(value: Optional[str]) -> SectionType:
    if value is None:
        return SectionNone()
    s = value.strip()
    if re.match(r"^[Pp]\d+$", s):
        return SectionProperty(prop=s.upper())
    if s.startswith("@") and len(s) > 1:
        # SPARQL variable names are case sensitive
        return SectionSparqlVariable(variable=s[1:])
    return SectionNone()
