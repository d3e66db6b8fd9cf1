"""Per-run state shared by the patch stages and the renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol
from urllib.parse import unquote

from listeria.config.settings import settings
from listeria.models.columns import Column
from listeria.models.domain import SparqlResults
from listeria.models.params import TemplateParams
from listeria.models.results import ResultRow
from listeria.services.entity_store import EntityContainer, snak_datavalue

# Wikidata property holding an external id's formatter URL
FORMATTER_URL_PROPERTY = "P1630"


class WikiPageService(Protocol):
    """Lookups against the wiki the list lives on."""

    def page_exists(self, title: str) -> bool:
        """True if a page with this title exists."""
        raise NotImplementedError

    def image_repository(self, file_title: str) -> Optional[str]:
        """`imagerepository` of a file page ("local", "shared", ...), None if unknown."""
        raise NotImplementedError


def _coordinate(value: float) -> str:
    s = repr(float(value))
    return s[:-2] if s.endswith(".0") else s


def normalize_page_title(title: str) -> str:
    # TODO: honour the wiki's first-letter case setting (wiktionaries are case sensitive)
    s = title.replace("_", " ").strip()
    if len(s) < 2:
        return s
    return s[0].upper() + s[1:]


@dataclass
class ListContext:
    wiki: str
    language: str
    params: TemplateParams
    columns: List[Column]
    entities: EntityContainer
    wiki_api: Optional[WikiPageService] = None
    page_title: str = ""
    sparql: Optional[SparqlResults] = None
    rows: List[ResultRow] = field(default_factory=list)
    section_names: List[str] = field(default_factory=list)
    misc_section_id: Optional[int] = None
    local_page_cache: Dict[str, bool] = field(default_factory=dict)
    shadow_files: List[str] = field(default_factory=list)
    shadow_file_wikis: List[str] = field(default_factory=lambda: list(settings.shadow_file_wikis))
    prefer_preferred: bool = settings.prefer_preferred

    @property
    def thumbnail_size(self) -> int:
        return self.params.thumb

    def local_file_namespace_prefix(self) -> str:
        return "File"

    def local_entity_label(self, entity_id: str) -> Optional[str]:
        return self.entities.label_in_locale(entity_id, self.language)

    def local_page_exists(self, title: str) -> bool:
        return self.local_page_cache.get(normalize_page_title(title), False)

    def cache_local_page(self, title: str, exists: bool) -> None:
        # append-only: first answer for a title wins
        self.local_page_cache.setdefault(normalize_page_title(title), exists)

    def external_id_url(self, prop: str, external_id: str) -> Optional[str]:
        entity = self.entities.get_entity(prop)
        if entity is None:
            return None
        for statement in entity.claims_with_property(FORMATTER_URL_PROPERTY):
            dv = snak_datavalue(statement.get("mainsnak") or {})
            if dv and dv.get("type") == "string":
                return dv["value"].replace("$1", unquote(external_id))
        return None

    def location_template(self, lat: float, lon: float) -> str:
        lat, lon = _coordinate(lat), _coordinate(lon)
        if self.wiki == "wikidatawiki":
            return f"{lat}/{lon}"
        if self.wiki == "commonswiki":
            return f"{{{{Inline coordinates|{lat}|{lon}|display=inline}}}}"
        if self.wiki == "dewiki":
            return (
                f"{{{{Coordinate|text=DMS|NS={lat}|EW={lon}|name=|simple=y|type=landmark|region=}}}}"
            )
        return f"{{{{Coord|{lat}|{lon}|display=inline}}}}"

    def section_ids(self) -> List[int]:
        return sorted({row.section for row in self.rows})
