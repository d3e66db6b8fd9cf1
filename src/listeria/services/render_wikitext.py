"""Wikitext rendering of a finished list."""

from __future__ import annotations

import logging

from listeria.models.domain import SectionNone
from listeria.models.results import NumberPart, ResultCell, ResultRow
from listeria.services.list_context import ListContext
from listeria.services.part_formatter import PartFormatter

logger = logging.getLogger(__name__)


TABLE_START = "{| class='wikitable sortable' style='width:100%'\n"
NUMBER_CELL_STYLE = "style='text-align:right'| "
SHADOW_FILES_DISCLAIMER = (
    "\n----\nThe following local image(s) are not shown in the above list, "
    "because they shadow a Commons image of the same name, and might be non-free:"
)


class RendererWikitext:
    """Renders the rows of a `ListContext` as one wikitable per section."""

    def render(self, ctx: ListContext) -> str:
        formatter = PartFormatter(ctx)
        section_ids = ctx.section_ids() or [0]
        sectioned = not isinstance(ctx.params.section, SectionNone)

        blocks = [self.section_block(ctx, formatter, section_id, sectioned) for section_id in section_ids]
        wt = "\n\n".join(blocks)

        if ctx.shadow_files:
            wt += SHADOW_FILES_DISCLAIMER
            prefix = ctx.local_file_namespace_prefix()
            for filename in ctx.shadow_files:
                wt += f"\n# [[:{prefix}:{filename}|]]"

        if ctx.params.summary == "ITEMNUMBER":
            wt += f"\n----\n&sum; {len(ctx.rows)} items."

        logger.debug("Rendered %d rows in %d section(s)", len(ctx.rows), len(section_ids))
        return wt

    def section_name(self, ctx: ListContext, section_id: int) -> str:
        if section_id >= len(ctx.section_names):
            return ""
        name = ctx.section_names[section_id]
        return ctx.local_entity_label(name) or name

    def table_header(self, ctx: ListContext) -> str:
        if ctx.params.header_template is not None:
            return f"{{{{{ctx.params.header_template}}}}}\n"
        if ctx.params.skip_table:
            return ""
        return TABLE_START + "".join(f"! {column.label}\n" for column in ctx.columns)

    def section_block(self, ctx: ListContext, formatter: PartFormatter, section_id: int, sectioned: bool) -> str:
        wt = ""
        name = self.section_name(ctx, section_id) if sectioned else ""
        if name:
            wt += f"== {name} ==\n"
        wt += self.table_header(ctx)

        rows = [row for row in ctx.rows if row.section == section_id]
        if ctx.params.row_template is None and not ctx.params.skip_table and rows:
            wt += "|-\n"

        lines = [self.row(ctx, formatter, row, rownum) for rownum, row in enumerate(rows)]
        if ctx.params.skip_table:
            wt += "\n".join(lines)
        else:
            if lines:
                wt += "\n|-\n".join(lines) + "\n"
            wt += "|}"
        return wt

    def row(self, ctx: ListContext, formatter: PartFormatter, row: ResultRow, rownum: int) -> str:
        if ctx.params.row_template is not None:
            params = "".join(
                f"|{column.obj.as_key()}={formatter.format_cell(cell, rownum)}"
                for column, cell in zip(ctx.columns, row.cells)
            )
            return f"{{{{{ctx.params.row_template}{params}}}}}"
        return "\n".join(f"| {self.cell(formatter, cell, rownum)}" for cell in row.cells)

    def cell(self, formatter: PartFormatter, cell: ResultCell, rownum: int) -> str:
        text = formatter.format_cell(cell, rownum)
        if cell.parts and all(isinstance(part, NumberPart) for part in cell.parts):
            return NUMBER_CELL_STYLE + text
        return text


def render_wikitext(ctx: ListContext) -> str:
    return RendererWikitext().render(ctx)
