"""Collects every id the patch stages and renderers will look up."""

from __future__ import annotations

from typing import Iterable, List

from listeria.models.domain import SectionProperty, SortProperty
from listeria.models.results import (
    EntityPart,
    ExternalIdPart,
    FilePart,
    LocalLinkPart,
    LocationPart,
    NumberPart,
    ResultPart,
    SnakListPart,
    TextPart,
    TimePart,
    UriPart,
)
from listeria.services.column_spec import column_entity_ids
from listeria.services.entity_store import snak_entity_id
from listeria.services.list_context import ListContext
from listeria.services.result_model import usable_statements

_ENTITY_ID_PREFIXES = ("Q", "P", "L")


def entities_in_parts(parts: Iterable[ResultPart]) -> List[str]:
    """Entity ids and external-id properties referenced by parts, recursively."""
    ids: List[str] = []
    for part in parts:
        if isinstance(part, EntityPart):
            if part.try_localize:
                ids.append(part.id)
        elif isinstance(part, ExternalIdPart):
            ids.append(part.prop)
        elif isinstance(part, SnakListPart):
            ids.extend(entities_in_parts(part.parts))
        elif isinstance(
            part,
            (NumberPart, LocalLinkPart, TimePart, LocationPart, FilePart, UriPart, TextPart),
        ):
            continue
        else:
            raise TypeError(f"Unhandled result part: {part!r}")
    return ids


def _dedup(ids: Iterable[str]) -> List[str]:
    out: List[str] = []
    seen = set()
    for entity_id in ids:
        if entity_id and entity_id not in seen:
            seen.add(entity_id)
            out.append(entity_id)
    return out


def gather_entity_ids(ctx: ListContext) -> List[str]:
    """Everything referenced by cells, columns, the sort property and sections."""
    ids: List[str] = []
    for row in ctx.rows:
        for cell in row.cells:
            ids.extend(entities_in_parts(cell.parts))

    for column in ctx.columns:
        ids.extend(column_entity_ids(column))

    sort = ctx.params.sort
    if isinstance(sort, SortProperty):
        ids.append(sort.prop)

    section = ctx.params.section
    if isinstance(section, SectionProperty):
        ids.append(section.prop)
    for name in ctx.section_names:
        if name[:1] in _ENTITY_ID_PREFIXES and name[1:].isdigit():
            ids.append(name)

    return _dedup(ids)


def gather_sort_target_ids(ctx: ListContext) -> List[str]:
    """Items that property sorting needs labels for."""
    sort = ctx.params.sort
    if not isinstance(sort, SortProperty):
        return []

    ids: List[str] = []
    for row in ctx.rows:
        entity = ctx.entities.get_entity(row.entity_id)
        if entity is None:
            continue
        for statement in usable_statements(entity, sort.prop, ctx.prefer_preferred):
            target = snak_entity_id(statement.get("mainsnak") or {})
            if target is not None:
                ids.append(target)
    return _dedup(ids)
