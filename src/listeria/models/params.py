"""List-level options taken from the list template."""

from __future__ import annotations

from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from listeria.config.settings import settings
from listeria.models.domain import (
    LinksType,
    SectionNone,
    SectionType,
    SortMode,
    SortNone,
    parse_section_type,
    parse_sort_mode,
)
from listeria.services.errors import TemplateParamError


DEFAULT_MIN_SECTION = 2


def _parse_uint(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        n = int(value.strip())
    except ValueError:
        return default
    return n if n >= 0 else default


def _opt(params: Mapping[str, str], key: str) -> Optional[str]:
    value = params.get(key)
    if value is None:
        return None
    return value.strip()


class TemplateParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    sparql: str
    columns: Optional[str] = None
    sort: SortMode = Field(default_factory=SortNone)
    sort_ascending: bool = True
    section: SectionType = Field(default_factory=SectionNone)
    min_section: int = DEFAULT_MIN_SECTION
    row_template: Optional[str] = None
    header_template: Optional[str] = None
    links: LinksType = LinksType.ALL
    one_row_per_item: bool = True
    skip_table: bool = False
    summary: Optional[str] = None
    thumb: int = settings.default_thumbnail_size
    language: Optional[str] = None

    @classmethod
    def from_template(cls, params: Mapping[str, str]) -> "TemplateParams":
        """
        Build options from raw template key/value pairs.

        Only `sparql` is required; everything else degrades to a default.
        """
        sparql = _opt(params, "sparql")
        if not sparql:
            raise TemplateParamError("No `sparql` parameter in list template")

        language = _opt(params, "language")
        summary = _opt(params, "summary")
        one_row = _opt(params, "one_row_per_item")
        sort_order = _opt(params, "sort_order")

        return cls(
            sparql=sparql,
            columns=_opt(params, "columns"),
            sort=parse_sort_mode(params.get("sort")),
            sort_ascending=(sort_order or "").upper() != "DESC",
            section=parse_section_type(params.get("section")),
            min_section=_parse_uint(params.get("min_section"), DEFAULT_MIN_SECTION),
            row_template=_opt(params, "row_template") or None,
            header_template=_opt(params, "header_template") or None,
            links=LinksType.from_option(params.get("links")),
            one_row_per_item=(one_row or "").upper() != "NO",
            skip_table="skip_table" in params,
            summary=summary.upper() if summary else None,
            thumb=_parse_uint(params.get("thumb"), settings.default_thumbnail_size),
            language=language.lower() if language else None,
        )
