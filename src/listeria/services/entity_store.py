"""Entity store: loaded Wikibase entities and lookups over them.

Entities are kept as Wikibase JSON (as returned by `wbgetentities`).
Loading goes through an `EntityLoader`, so tests can hand in fixtures
instead of talking to a wiki.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)

# Legacy entity-id datavalues carry only `entity-type` and `numeric-id`.
ENTITY_TYPE_PREFIXES = {"item": "Q", "property": "P", "lexeme": "L"}


class EntityLoader(Protocol):
    """Anything that can fetch entity JSON by id."""

    def load_entities(self, ids: List[str]) -> Dict[str, dict]:
        """Return a mapping id -> entity JSON. Unknown ids are simply absent."""
        raise NotImplementedError


class Entity:
    """Read-only view of one entity's JSON."""

    def __init__(self, data: Dict[str, Any]):
        self.data = data

    @property
    def id(self) -> str:
        return self.data.get("id", "")

    @property
    def datatype(self) -> Optional[str]:
        """Value datatype; only properties carry one."""
        return self.data.get("datatype")

    def label_in_locale(self, language: str) -> Optional[str]:
        label = (self.data.get("labels") or {}).get(language)
        if not label:
            return None
        return label.get("value")

    def description_in_locale(self, language: str) -> Optional[str]:
        desc = (self.data.get("descriptions") or {}).get(language)
        if not desc:
            return None
        return desc.get("value")

    def sitelink_title(self, wiki: str) -> Optional[str]:
        sitelink = (self.data.get("sitelinks") or {}).get(wiki)
        if not sitelink:
            return None
        return sitelink.get("title")

    def has_sitelink(self, wiki: str) -> bool:
        return self.sitelink_title(wiki) is not None

    def claims_with_property(self, prop: str) -> List[dict]:
        return list((self.data.get("claims") or {}).get(prop, []))


def statement_qualifiers(statement: dict, prop: str) -> List[dict]:
    return list((statement.get("qualifiers") or {}).get(prop, []))


def snak_datavalue(snak: dict) -> Optional[dict]:
    if snak.get("snaktype", "value") != "value":
        return None
    return snak.get("datavalue")


def snak_entity_id(snak: dict) -> Optional[str]:
    """Target id of an entity-valued snak, else None."""
    dv = snak_datavalue(snak)
    if not dv or dv.get("type") != "wikibase-entityid":
        return None
    value = dv.get("value") or {}
    if "id" in value:
        return value["id"]
    prefix = ENTITY_TYPE_PREFIXES.get(value.get("entity-type", ""))
    if prefix is None or "numeric-id" not in value:
        return None
    return f"{prefix}{value['numeric-id']}"


class EntityContainer:
    """Run-scoped cache of loaded entities."""

    def __init__(self, loader: Optional[EntityLoader] = None):
        self.loader = loader
        self._entities: Dict[str, Entity] = {}

    def __len__(self) -> int:
        return len(self._entities)

    def add_entity(self, data: Dict[str, Any]) -> None:
        self._entities[data["id"]] = Entity(data)

    def load_entities(self, ids: Iterable[str]) -> None:
        """Load every id not loaded yet. Loader errors propagate."""
        to_load: List[str] = []
        seen = set()
        for entity_id in ids:
            if entity_id in seen or entity_id in self._entities:
                continue
            seen.add(entity_id)
            to_load.append(entity_id)

        if not to_load:
            return
        if self.loader is None:
            logger.debug("No entity loader; %d ids stay unresolved", len(to_load))
            return

        loaded = self.loader.load_entities(to_load)
        for data in loaded.values():
            self.add_entity(data)
        logger.debug("Loaded %d of %d requested entities", len(loaded), len(to_load))

    def get_entity(self, entity_id: str) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def has_entity(self, entity_id: str) -> bool:
        return entity_id in self._entities

    def label_in_locale(self, entity_id: str, language: str) -> Optional[str]:
        entity = self.get_entity(entity_id)
        if entity is None:
            return None
        return entity.label_in_locale(language)

    def property_datatype(self, prop: str) -> Optional[str]:
        entity = self.get_entity(prop)
        if entity is None:
            return None
        return entity.datatype
