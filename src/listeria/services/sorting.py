"""Row ordering.

One sortkey string is computed per row and stored on it; the property's
datatype then decides how those strings compare. Descending order reverses
the ascending result block by block: rows with equal keys keep their
ascending relative order.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, List, Optional

from listeria.models.domain import SortFamilyName, SortLabel, SortNone, SortProperty
from listeria.models.results import ResultRow
from listeria.services.entity_store import snak_entity_id
from listeria.services.list_context import ListContext
from listeria.services.result_model import snak_sort_text, usable_statements

logger = logging.getLogger(__name__)


DEFAULT_DATATYPE = "string"

_TIME_RE = re.compile(r"^([+-]?)(\d+)-(\d{1,2})-(\d{1,2})(?:T(\d{1,2}):(\d{1,2}):(\d{1,2}))?")


def sortkey_label(ctx: ListContext, row: ResultRow) -> str:
    return ctx.local_entity_label(row.entity_id) or ""


def sortkey_family_name(ctx: ListContext, row: ResultRow) -> str:
    label = ctx.local_entity_label(row.entity_id) or ""
    tokens = label.split()
    return tokens[-1] if tokens else ""


def sortkey_property(ctx: ListContext, row: ResultRow, prop: str, datatype: str) -> str:
    """Sortkey from the first usable claim of `prop`."""
    entity = ctx.entities.get_entity(row.entity_id)
    if entity is None:
        return ""
    for statement in usable_statements(entity, prop, ctx.prefer_preferred):
        snak = statement.get("mainsnak") or {}
        if datatype == "wikibase-item":
            target = snak_entity_id(snak)
            if target is None:
                return ""
            return ctx.local_entity_label(target) or target
        return snak_sort_text(snak) or ""
    return ""


def _quantity_key(sortkey: str) -> tuple:
    try:
        return (1, float(sortkey))
    except ValueError:
        return (0, 0.0)


def _time_key(sortkey: str) -> tuple:
    m = _TIME_RE.match(sortkey)
    if not m:
        return (0,)
    sign, year, month, day, hour, minute, second = m.groups()
    y = int(year)
    if sign == "-":
        y = -y
    return (1, y, int(month), int(day), int(hour or 0), int(minute or 0), int(second or 0))


def _string_key(sortkey: str) -> str:
    return sortkey


def comparison_key(datatype: str) -> Callable[[str], Any]:
    """How sortkeys of a given property datatype compare."""
    if datatype == "quantity":
        return _quantity_key
    if datatype == "time":
        return _time_key
    return _string_key


def property_datatype(ctx: ListContext, prop: str) -> str:
    return ctx.entities.property_datatype(prop) or DEFAULT_DATATYPE


def compute_sortkeys(ctx: ListContext) -> Optional[List[str]]:
    """Sortkeys for the current rows, or None when no sorting is requested."""
    sort = ctx.params.sort
    if isinstance(sort, SortNone):
        return None
    if isinstance(sort, SortLabel):
        return [sortkey_label(ctx, row) for row in ctx.rows]
    if isinstance(sort, SortFamilyName):
        return [sortkey_family_name(ctx, row) for row in ctx.rows]
    if isinstance(sort, SortProperty):
        datatype = property_datatype(ctx, sort.prop)
        return [sortkey_property(ctx, row, sort.prop, datatype) for row in ctx.rows]
    raise TypeError(f"Unhandled sort mode: {sort!r}")


def sort_results(ctx: ListContext) -> None:
    sortkeys = compute_sortkeys(ctx)
    if sortkeys is None:
        return
    if len(sortkeys) != len(ctx.rows):
        raise ValueError("sortkeys length mismatch")

    for row, sortkey in zip(ctx.rows, sortkeys):
        row.sortkey = sortkey

    datatype = DEFAULT_DATATYPE
    if isinstance(ctx.params.sort, SortProperty):
        datatype = property_datatype(ctx, ctx.params.sort.prop)
    key = comparison_key(datatype)

    # reverse=True flips the order of equal-key blocks but keeps each block's
    # ascending internal order
    rows = sorted(ctx.rows, key=lambda row: key(row.sortkey), reverse=not ctx.params.sort_ascending)
    ctx.rows = rows
    logger.debug("Sorted %d rows (%s, ascending=%s)", len(rows), datatype, ctx.params.sort_ascending)
