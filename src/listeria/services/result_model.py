"""Result model: binding rows + columns + entities -> result rows."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from listeria.models.columns import (
    Column,
    DescriptionColumn,
    FieldColumn,
    ItemColumn,
    LabelColumn,
    LabelLangColumn,
    NumberColumn,
    PropertyColumn,
    PropertyQualifierColumn,
    PropertyQualifierValueColumn,
    UnknownColumn,
)
from listeria.models.domain import (
    EntityValue,
    FileValue,
    LiteralValue,
    LocationValue,
    SectionNone,
    SectionProperty,
    SectionSparqlVariable,
    SparqlRow,
    SparqlValue,
    TimeValue,
    UriValue,
    LinksType,
)
from listeria.models.results import (
    EntityPart,
    ExternalIdPart,
    FilePart,
    LocalLinkPart,
    LocationPart,
    NumberPart,
    ResultCell,
    ResultPart,
    ResultRow,
    SnakListPart,
    TextPart,
    TimePart,
    UriPart,
)
from listeria.services.entity_store import (
    Entity,
    snak_datavalue,
    snak_entity_id,
    statement_qualifiers,
)
from listeria.services.errors import SparqlParseError
from listeria.services.list_context import ListContext

logger = logging.getLogger(__name__)


NO_VALUE_TEXT = "No/unknown value"
MISC_SECTION_NAME = "Misc"

_DATE_RE = re.compile(r"^\+?(-?\d+)-(\d{1,2})-(\d{1,2})T")


# ------------------------
# Value -> part
# ------------------------
def part_from_sparql_value(value: SparqlValue) -> ResultPart:
    if isinstance(value, EntityValue):
        return EntityPart(id=value.id, try_localize=True)
    if isinstance(value, FileValue):
        return FilePart(name=value.name)
    if isinstance(value, UriValue):
        return UriPart(url=value.text)
    if isinstance(value, TimeValue):
        return TextPart(text=value.text)
    if isinstance(value, LocationValue):
        return LocationPart(lat=value.lat, lon=value.lon)
    if isinstance(value, LiteralValue):
        return TextPart(text=value.text)
    raise TypeError(f"Unhandled SPARQL value: {value!r}")


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def reduce_time(time: str, precision: Optional[int]) -> str:
    """Render a Wikibase time string at its stored precision."""
    m = _DATE_RE.match(time)
    if not m:
        return time
    year, month, day = m.group(1), m.group(2), m.group(3)
    y = int(year)
    era = " BCE" if y < 0 else ""
    y = abs(y)

    if precision == 6:
        return f"{_ordinal((y - 1) // 1000 + 1)} millennium{era}"
    if precision == 7:
        return f"{_ordinal((y - 1) // 100 + 1)} century{era}"
    if precision == 8:
        return f"{year[:-1]}0s"
    if precision == 9:
        return year
    if precision == 10:
        return f"{year}-{month}"
    if precision == 11:
        return f"{year}-{month}-{day}"
    return time


def part_from_snak(snak: dict) -> ResultPart:
    dv = snak_datavalue(snak)
    if not dv:
        return TextPart(text=NO_VALUE_TEXT)

    kind = dv.get("type")
    value = dv.get("value")
    if kind == "wikibase-entityid":
        entity_id = snak_entity_id(snak)
        if entity_id is None:
            return TextPart(text=str(value))
        return EntityPart(id=entity_id, try_localize=True)
    if kind == "string":
        datatype = snak.get("datatype")
        if datatype == "commonsMedia":
            return FilePart(name=value)
        if datatype == "external-id":
            return ExternalIdPart(prop=snak.get("property", ""), id=value)
        return TextPart(text=value)
    if kind == "quantity":
        return TextPart(text=str(value.get("amount", "")).lstrip("+"))
    if kind == "time":
        return TimePart(text=reduce_time(value.get("time", ""), value.get("precision")))
    if kind == "globecoordinate":
        return LocationPart(lat=float(value["latitude"]), lon=float(value["longitude"]))
    if kind == "monolingualtext":
        return TextPart(text=f"{value.get('language', '')}:{value.get('text', '')}")
    return TextPart(text=str(value))


def snak_sort_text(snak: dict) -> Optional[str]:
    """Raw comparable text of a snak: entity id, string, amount or time."""
    dv = snak_datavalue(snak)
    if not dv:
        return None
    kind = dv.get("type")
    value = dv.get("value")
    if kind == "wikibase-entityid":
        return snak_entity_id(snak)
    if kind == "string":
        return value
    if kind == "quantity":
        return str(value.get("amount", ""))
    if kind == "time":
        return value.get("time")
    if kind == "monolingualtext":
        return value.get("text")
    return None


def usable_statements(entity: Entity, prop: str, prefer_preferred: bool = False) -> List[dict]:
    """Statements of a property, without deprecated ones.

    With `prefer_preferred`, preferred-rank statements hide the rest.
    """
    statements = [s for s in entity.claims_with_property(prop) if s.get("rank") != "deprecated"]
    if prefer_preferred:
        preferred = [s for s in statements if s.get("rank") == "preferred"]
        if preferred:
            return preferred
    return statements


# ------------------------
# Rows
# ------------------------
class ResultBuilder:
    """Builds the initial row collection for a run."""

    def __init__(self, ctx: ListContext):
        if ctx.sparql is None:
            raise SparqlParseError("No SPARQL results to build rows from")
        self.ctx = ctx
        self.sparql = ctx.sparql
        self.varname = ctx.sparql.first_variable

    def primary_entity_ids(self) -> List[str]:
        """Entity ids of the primary variable, first appearance order, no duplicates."""
        ids: List[str] = []
        seen = set()
        for row in self.sparql.rows:
            value = row.get(self.varname)
            if isinstance(value, EntityValue) and value.id not in seen:
                seen.add(value.id)
                ids.append(value.id)
        return ids

    def build(self) -> List[ResultRow]:
        grouped: List[Tuple[str, List[SparqlRow]]] = []
        if self.ctx.params.one_row_per_item:
            by_id: Dict[str, List[SparqlRow]] = {}
            for row in self.sparql.rows:
                value = row.get(self.varname)
                if isinstance(value, EntityValue):
                    by_id.setdefault(value.id, []).append(row)
            grouped = [(entity_id, by_id[entity_id]) for entity_id in self.primary_entity_ids()]
        else:
            for row in self.sparql.rows:
                value = row.get(self.varname)
                if isinstance(value, EntityValue):
                    grouped.append((value.id, [row]))

        results: List[ResultRow] = []
        row_bindings: List[List[SparqlRow]] = []
        for entity_id, bindings in grouped:
            result_row = self.result_row(entity_id, bindings)
            if result_row is not None:
                results.append(result_row)
                row_bindings.append(bindings)

        self.assign_sections(results, row_bindings)
        logger.info("Built %d result rows from %d SPARQL rows", len(results), len(self.sparql.rows))
        return results

    def result_row(self, entity_id: str, bindings: List[SparqlRow]) -> Optional[ResultRow]:
        if self.ctx.params.links == LinksType.LOCAL and not self.ctx.entities.has_entity(entity_id):
            return None
        cells = [self.result_cell(entity_id, bindings, col) for col in self.ctx.columns]
        return ResultRow(entity_id=entity_id, cells=cells)

    def result_cell(self, entity_id: str, bindings: List[SparqlRow], col: Column) -> ResultCell:
        obj = col.obj
        entity = self.ctx.entities.get_entity(entity_id)
        language = self.ctx.language
        parts: List[ResultPart] = []

        if isinstance(obj, NumberColumn):
            parts.append(NumberPart())
        elif isinstance(obj, ItemColumn):
            parts.append(EntityPart(id=entity_id, try_localize=True))
        elif isinstance(obj, LabelColumn):
            if entity is not None:
                label = entity.label_in_locale(language) or entity_id
                page = entity.sitelink_title(self.ctx.wiki)
                if page is not None:
                    parts.append(LocalLinkPart(page=page, label=label))
                else:
                    parts.append(EntityPart(id=entity_id, try_localize=True))
        elif isinstance(obj, LabelLangColumn):
            if entity is not None:
                label = entity.label_in_locale(obj.language) or entity.label_in_locale(language)
                if label is not None:
                    parts.append(TextPart(text=label))
        elif isinstance(obj, DescriptionColumn):
            if entity is not None:
                desc = entity.description_in_locale(language)
                if desc is not None:
                    parts.append(TextPart(text=desc))
        elif isinstance(obj, PropertyColumn):
            if entity is not None:
                for statement in self._statements(entity, obj.prop):
                    parts.append(part_from_snak(statement.get("mainsnak") or {}))
        elif isinstance(obj, PropertyQualifierColumn):
            if entity is not None:
                for statement in self._statements(entity, obj.prop):
                    main = part_from_snak(statement.get("mainsnak") or {})
                    for qualifier in statement_qualifiers(statement, obj.qualifier):
                        parts.append(SnakListPart(parts=(main, part_from_snak(qualifier))))
        elif isinstance(obj, PropertyQualifierValueColumn):
            if entity is not None:
                for statement in self._statements(entity, obj.prop):
                    if snak_entity_id(statement.get("mainsnak") or {}) != obj.qualifier_entity:
                        continue
                    for qualifier in statement_qualifiers(statement, obj.prop2):
                        parts.append(part_from_snak(qualifier))
        elif isinstance(obj, FieldColumn):
            for row in bindings:
                value = row.get(obj.name)
                if value is not None:
                    parts.append(part_from_sparql_value(value))
        elif isinstance(obj, UnknownColumn):
            pass
        else:
            raise TypeError(f"Unhandled column type: {obj!r}")

        return ResultCell(parts=tuple(parts))

    def _statements(self, entity: Entity, prop: str) -> List[dict]:
        return usable_statements(entity, prop, self.ctx.prefer_preferred)

    # ------------------------
    # Sections
    # ------------------------
    def section_key(self, entity_id: str, bindings: List[SparqlRow]) -> Optional[str]:
        section = self.ctx.params.section
        if isinstance(section, SectionProperty):
            entity = self.ctx.entities.get_entity(entity_id)
            if entity is None:
                return None
            for statement in self._statements(entity, section.prop):
                key = snak_sort_text(statement.get("mainsnak") or {})
                if key:
                    return key
            return None
        if isinstance(section, SectionSparqlVariable):
            for row in bindings:
                value = row.get(section.variable)
                if isinstance(value, EntityValue):
                    return value.id
                if isinstance(value, FileValue):
                    return value.name
                if isinstance(value, (UriValue, TimeValue, LiteralValue)):
                    return value.text
            return None
        if isinstance(section, SectionNone):
            return None
        raise TypeError(f"Unhandled section type: {section!r}")

    def assign_sections(self, rows: List[ResultRow], row_bindings: List[List[SparqlRow]]) -> None:
        """Group rows into sections; small groups are merged into a misc section."""
        self.ctx.section_names = []
        self.ctx.misc_section_id = None
        if isinstance(self.ctx.params.section, SectionNone):
            return

        keys = [self.section_key(row.entity_id, b) for row, b in zip(rows, row_bindings)]
        counts: Dict[str, int] = {}
        for key in keys:
            if key is not None:
                counts[key] = counts.get(key, 0) + 1

        names = [""]
        ids: Dict[str, int] = {}
        for key in keys:
            if key is None or key in ids or counts[key] < self.ctx.params.min_section:
                continue
            ids[key] = len(names)
            names.append(key)

        for row, key in zip(rows, keys):
            section_id = ids.get(key) if key is not None else None
            if section_id is None:
                if self.ctx.misc_section_id is None:
                    self.ctx.misc_section_id = len(names)
                    names.append(MISC_SECTION_NAME)
                section_id = self.ctx.misc_section_id
            row.section = section_id

        self.ctx.section_names = names


def build_results(ctx: ListContext) -> List[ResultRow]:
    return ResultBuilder(ctx).build()
