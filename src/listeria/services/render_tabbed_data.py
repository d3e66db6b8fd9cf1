"""Tabbed-data (Commons `Data:*.tab`) rendering of a finished list."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from listeria.config.settings import settings
from listeria.models.results import ResultRow
from listeria.services.list_context import ListContext
from listeria.services.part_formatter import CELL_PART_SEPARATOR, PartFormatter

# Commons caps tabbed-data strings at 400 characters
MAX_PART_LENGTH = 380
MAX_PAGE_NAME_LENGTH = 250


def tabbed_string_safe(s: str) -> str:
    s = s.replace("\n", " ").replace("\t", " ")
    return s[:MAX_PART_LENGTH]


def tabbed_data_page_name(ctx: ListContext) -> Optional[str]:
    name = f"Data:Listeria/{ctx.wiki}/{ctx.page_title}.tab"
    if len(name) > MAX_PAGE_NAME_LENGTH:
        return None
    return name


class RendererTabbedData:
    """Renders the rows of a `ListContext` as a tabbed-data JSON document."""

    def render(self, ctx: ListContext) -> Dict[str, Any]:
        formatter = PartFormatter(ctx)
        fields: List[Dict[str, Any]] = [
            {"name": "section", "type": "number", "title": {ctx.language: "Section"}}
        ]
        for colnum, column in enumerate(ctx.columns):
            fields.append({"name": f"col_{colnum}", "type": "string", "title": {ctx.language: column.label}})

        return {
            "license": settings.tabbed_data_license,
            "description": {ctx.language: settings.tabbed_data_description},
            "sources": settings.tabbed_data_sources,
            "schema": {"fields": fields},
            "data": [self.row(formatter, row, rownum) for rownum, row in enumerate(ctx.rows)],
        }

    def row(self, formatter: PartFormatter, row: ResultRow, rownum: int) -> List[Any]:
        data: List[Any] = [row.section]
        for cell in row.cells:
            parts = [tabbed_string_safe(s) for s in formatter.format_parts(cell, rownum)]
            data.append(CELL_PART_SEPARATOR.join(parts))
        return data


def render_tabbed_data(ctx: ListContext) -> Dict[str, Any]:
    return RendererTabbedData().render(ctx)
