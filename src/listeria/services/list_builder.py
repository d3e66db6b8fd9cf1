"""End-to-end list processing: options + query results -> rendered list."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from listeria.config.settings import settings
from listeria.models.params import TemplateParams
from listeria.services.column_spec import column_entity_ids, generate_label, parse_columns
from listeria.services.entity_store import EntityContainer, EntityLoader
from listeria.services.errors import NoItemsError
from listeria.services.list_context import ListContext, WikiPageService
from listeria.services.patch_pipeline import run_patch_pipeline
from listeria.services.render_tabbed_data import render_tabbed_data
from listeria.services.render_wikitext import render_wikitext
from listeria.services.result_model import ResultBuilder
from listeria.services.sparql_results import parse_sparql_results

logger = logging.getLogger(__name__)


class ListeriaList:
    """
    One list on one wiki page.

    Flow:
    - options are validated into `TemplateParams`,
    - `process()` parses the query results, loads entities, builds the rows
      and runs the patch pipeline,
    - the finished context is rendered as wikitext or tabbed data.

    `language` is the content language of the wiki, used when the options
    name none.
    """

    def __init__(
        self,
        params: TemplateParams,
        wiki: str,
        entity_loader: Optional[EntityLoader] = None,
        wiki_api: Optional[WikiPageService] = None,
        page_title: str = "",
        language: Optional[str] = None,
    ):
        self.params = params
        self.ctx = ListContext(
            wiki=wiki,
            language=params.language or language or settings.default_language,
            params=params,
            columns=parse_columns(params.columns),
            entities=EntityContainer(loader=entity_loader),
            wiki_api=wiki_api,
            page_title=page_title,
        )

    @classmethod
    def from_template(cls, template_params: Mapping[str, str], wiki: str, **kwargs: Any) -> "ListeriaList":
        return cls(TemplateParams.from_template(template_params), wiki, **kwargs)

    def process(self, sparql_json: Any) -> ListContext:
        ctx = self.ctx
        ctx.sparql = parse_sparql_results(sparql_json)

        builder = ResultBuilder(ctx)
        primary_ids = builder.primary_entity_ids()
        if not primary_ids:
            raise NoItemsError("No items to show")

        column_ids = [entity_id for column in ctx.columns for entity_id in column_entity_ids(column)]
        ctx.entities.load_entities(primary_ids + column_ids)
        for column in ctx.columns:
            generate_label(column, ctx.entities, ctx.language)

        ctx.rows = builder.build()
        run_patch_pipeline(ctx)
        logger.info("List on %s ready: %d rows", ctx.wiki, len(ctx.rows))
        return ctx

    def as_wikitext(self) -> str:
        return render_wikitext(self.ctx)

    def as_tabbed_data(self) -> Dict[str, Any]:
        return render_tabbed_data(self.ctx)


def build_list(
    template_params: Mapping[str, str],
    sparql_json: Any,
    wiki: str,
    entity_loader: Optional[EntityLoader] = None,
    wiki_api: Optional[WikiPageService] = None,
    page_title: str = "",
) -> ListeriaList:
    listeria = ListeriaList.from_template(
        template_params,
        wiki,
        entity_loader=entity_loader,
        wiki_api=wiki_api,
        page_title=page_title,
    )
    listeria.process(sparql_json)
    return listeria
