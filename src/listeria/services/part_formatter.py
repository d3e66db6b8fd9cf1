"""Formatting of single result parts, shared by both renderers."""

from __future__ import annotations

from typing import List

from listeria.models.domain import LinksType
from listeria.models.results import (
    EntityPart,
    ExternalIdPart,
    FilePart,
    LocalLinkPart,
    LocationPart,
    NumberPart,
    ResultCell,
    ResultPart,
    SnakListPart,
    TextPart,
    TimePart,
    UriPart,
)
from listeria.services.list_context import ListContext, normalize_page_title


SNAK_LIST_SEPARATOR = " — "
CELL_PART_SEPARATOR = "<br/>"
REASONATOR_URL = "https://reasonator.toolforge.org/?q={id}"


class PartFormatter:
    """Turns parts into wikitext, consulting the run context for language and link style."""

    def __init__(self, ctx: ListContext):
        self.ctx = ctx

    def format_entity(self, part: EntityPart) -> str:
        entity_id_link = f"''[[:d:{part.id}|{part.id}]]''"
        if not part.try_localize:
            return entity_id_link
        label = self.ctx.local_entity_label(part.id)
        if label is None:
            return entity_id_link

        labeled_entity_link = f"''[[:d:{part.id}|{label}]]''"
        links = self.ctx.params.links
        if links == LinksType.TEXT:
            return label
        if links == LinksType.LOCAL:
            return f"[[:d:{part.id}|{label}]]"
        if links == LinksType.RED or links == LinksType.RED_ONLY:
            if self.ctx.local_page_exists(label):
                return labeled_entity_link
            return f"[[{label}]]"
        if links == LinksType.REASONATOR:
            return f"[{REASONATOR_URL.format(id=part.id)} {label}]"
        return labeled_entity_link

    def format_part(self, part: ResultPart, rownum: int) -> str:
        """`rownum` is the zero-based position of the row within its section."""
        if isinstance(part, NumberPart):
            return str(rownum + 1)
        if isinstance(part, EntityPart):
            return self.format_entity(part)
        if isinstance(part, LocalLinkPart):
            if normalize_page_title(part.page) == normalize_page_title(part.label):
                return f"[[{part.label}]]"
            return f"[[{part.page}|{part.label}]]"
        if isinstance(part, TimePart):
            return part.text
        if isinstance(part, LocationPart):
            return self.ctx.location_template(part.lat, part.lon)
        if isinstance(part, FilePart):
            prefix = self.ctx.local_file_namespace_prefix()
            return f"[[{prefix}:{part.name}|thumb|{self.ctx.thumbnail_size}px|]]"
        if isinstance(part, UriPart):
            return part.url
        if isinstance(part, ExternalIdPart):
            url = self.ctx.external_id_url(part.prop, part.id)
            if url is None:
                return part.id
            return f"[{url} {part.id}]"
        if isinstance(part, TextPart):
            return part.text
        if isinstance(part, SnakListPart):
            return SNAK_LIST_SEPARATOR.join(self.format_part(p, rownum) for p in part.parts)
        raise TypeError(f"Unhandled result part: {part!r}")

    def format_parts(self, cell: ResultCell, rownum: int) -> List[str]:
        return [self.format_part(part, rownum) for part in cell.parts]

    def format_cell(self, cell: ResultCell, rownum: int) -> str:
        return CELL_PART_SEPARATOR.join(self.format_parts(cell, rownum))
