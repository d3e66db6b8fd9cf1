"""Patch pipeline: ordered whole-collection stages run after the rows are built.

The order is fixed: entities must be loaded before link localization,
localization must happen before redlink and shadow-file checks, and sorting
runs last.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

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
from listeria.services.entity_gatherer import gather_entity_ids, gather_sort_target_ids
from listeria.services.errors import ListeriaError, PipelineError, WikiLookupError
from listeria.services.list_context import ListContext, normalize_page_title
from listeria.services.sorting import sort_results

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatchStage:
    name: str
    run: Callable[[ListContext], None]


# ------------------------
# 1. Gather & load
# ------------------------
def gather_and_load_entities(ctx: ListContext) -> None:
    ids = gather_entity_ids(ctx)
    ctx.entities.load_entities(ids)
    # Sort targets are only known once the row entities are there
    ctx.entities.load_entities(gather_sort_target_ids(ctx))
    logger.debug("Entity store holds %d entities", len(ctx.entities))


# ------------------------
# 2. Redlinks only
# ------------------------
def filter_redlinks_only(ctx: ListContext) -> None:
    if ctx.params.links != LinksType.RED_ONLY:
        return

    def keep(entity_id: str) -> bool:
        entity = ctx.entities.get_entity(entity_id)
        return entity is None or not entity.has_sitelink(ctx.wiki)

    before = len(ctx.rows)
    ctx.rows = [row for row in ctx.rows if keep(row.entity_id)]
    logger.info("red_only: kept %d of %d rows", len(ctx.rows), before)


# ------------------------
# 3. Localize item links
# ------------------------
def entity_to_local_link(ctx: ListContext, entity_id: str) -> Optional[LocalLinkPart]:
    entity = ctx.entities.get_entity(entity_id)
    if entity is None:
        return None
    page = entity.sitelink_title(ctx.wiki)
    if page is None:
        return None
    label = ctx.local_entity_label(entity_id) or page
    return LocalLinkPart(page=page, label=label)


def localize_parts(ctx: ListContext, parts: Iterable[ResultPart]) -> Tuple[ResultPart, ...]:
    out: List[ResultPart] = []
    for part in parts:
        if isinstance(part, EntityPart) and part.try_localize:
            out.append(entity_to_local_link(ctx, part.id) or part)
        elif isinstance(part, SnakListPart):
            out.append(SnakListPart(parts=localize_parts(ctx, part.parts)))
        else:
            out.append(part)
    return tuple(out)


def localize_item_links(ctx: ListContext) -> None:
    for row in ctx.rows:
        row.cells = [ResultCell(parts=localize_parts(ctx, cell.parts)) for cell in row.cells]


# ------------------------
# 4. Redlinks cache
# ------------------------
def _entity_ids_in_parts(parts: Iterable[ResultPart]) -> List[str]:
    ids: List[str] = []
    for part in parts:
        if isinstance(part, EntityPart):
            ids.append(part.id)
        elif isinstance(part, SnakListPart):
            ids.extend(_entity_ids_in_parts(part.parts))
        elif isinstance(
            part,
            (NumberPart, LocalLinkPart, TimePart, LocationPart, FilePart, UriPart, ExternalIdPart, TextPart),
        ):
            continue
        else:
            raise TypeError(f"Unhandled result part: {part!r}")
    return ids


def cache_redlinks(ctx: ListContext) -> None:
    if ctx.params.links not in (LinksType.RED, LinksType.RED_ONLY):
        return

    ids = set()
    for row in ctx.rows:
        for cell in row.cells:
            ids.update(_entity_ids_in_parts(cell.parts))

    labels = set()
    for entity_id in ids:
        label = ctx.local_entity_label(entity_id)
        if label is not None:
            labels.add(label)

    if ctx.wiki_api is None:
        logger.warning("No wiki API; %d labels treated as missing pages", len(labels))
        return

    for label in sorted(labels):
        if normalize_page_title(label) in ctx.local_page_cache:
            continue
        try:
            exists = ctx.wiki_api.page_exists(label)
        except WikiLookupError as e:
            logger.warning("Page lookup for %r failed, assuming missing: %s", label, e)
            exists = False
        ctx.cache_local_page(label, exists)


# ------------------------
# 5. Shadow files
# ------------------------
def _is_shadow_file(ctx: ListContext, filename: str) -> bool:
    title = f"{ctx.local_file_namespace_prefix()}:{filename}"
    try:
        repository = ctx.wiki_api.image_repository(title)
    except WikiLookupError as e:
        logger.warning("File lookup for %r failed, assuming not shadowed: %s", title, e)
        return False
    return repository not in (None, "", "shared")


def remove_shadow_files(ctx: ListContext) -> None:
    if ctx.wiki not in ctx.shadow_file_wikis:
        return
    if ctx.wiki_api is None:
        logger.warning("No wiki API; skipping shadow file check")
        return

    files = set()
    for row in ctx.rows:
        for cell in row.cells:
            files.update(part.name for part in cell.parts if isinstance(part, FilePart))

    shadowed = set(ctx.shadow_files)
    for filename in sorted(files - shadowed):
        if _is_shadow_file(ctx, filename):
            shadowed.add(filename)
    ctx.shadow_files = sorted(shadowed)

    if not shadowed:
        return
    for row in ctx.rows:
        row.cells = [
            ResultCell(
                parts=tuple(
                    part
                    for part in cell.parts
                    if not (isinstance(part, FilePart) and part.name in shadowed)
                )
            )
            for cell in row.cells
        ]
    logger.info("Removed %d shadow file(s)", len(shadowed))


# ------------------------
# Pipeline
# ------------------------
PATCH_STAGES: Tuple[PatchStage, ...] = (
    PatchStage("gather_and_load_entities", gather_and_load_entities),
    PatchStage("filter_redlinks_only", filter_redlinks_only),
    PatchStage("localize_item_links", localize_item_links),
    PatchStage("cache_redlinks", cache_redlinks),
    PatchStage("remove_shadow_files", remove_shadow_files),
    PatchStage("sort_results", sort_results),
)


def run_patch_pipeline(ctx: ListContext, stages: Sequence[PatchStage] = PATCH_STAGES) -> None:
    """Run every stage in order. The first failure aborts the run."""
    for stage in stages:
        logger.debug("Patch stage %s (%d rows)", stage.name, len(ctx.rows))
        try:
            stage.run(ctx)
        except (ListeriaError, ValueError) as e:
            raise PipelineError(stage.name, str(e), e) from e
