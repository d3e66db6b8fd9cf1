"""Global test fixtures."""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from listeria.clients.mediawiki_api import StubWikiPageService  # noqa: E402
from listeria.clients.wikibase_api import StubEntityLoader  # noqa: E402
from listeria.models.params import TemplateParams  # noqa: E402
from listeria.services.column_spec import parse_columns  # noqa: E402
from listeria.services.entity_store import EntityContainer  # noqa: E402
from listeria.services.list_context import ListContext  # noqa: E402

ENTITY_PREFIX = "http://www.wikidata.org/entity/"


class Wikibase:
    """Builders for Wikibase entity JSON and SPARQL result documents."""

    @staticmethod
    def item(
        qid: str,
        label: Optional[str] = None,
        language: str = "en",
        description: Optional[str] = None,
        claims: Optional[Dict[str, List[dict]]] = None,
        sitelinks: Optional[Dict[str, str]] = None,
    ) -> dict:
        data: Dict[str, Any] = {"id": qid, "type": "item", "labels": {}, "descriptions": {}}
        if label is not None:
            data["labels"][language] = {"language": language, "value": label}
        if description is not None:
            data["descriptions"][language] = {"language": language, "value": description}
        data["claims"] = claims or {}
        data["sitelinks"] = {
            wiki: {"site": wiki, "title": title} for wiki, title in (sitelinks or {}).items()
        }
        return data

    @staticmethod
    def prop(pid: str, label: str, datatype: str = "string", claims: Optional[Dict[str, List[dict]]] = None) -> dict:
        return {
            "id": pid,
            "type": "property",
            "datatype": datatype,
            "labels": {"en": {"language": "en", "value": label}},
            "claims": claims or {},
        }

    @staticmethod
    def snak(prop: str, datavalue: Optional[dict], datatype: str = "string", snaktype: str = "value") -> dict:
        snak: Dict[str, Any] = {"snaktype": snaktype, "property": prop, "datatype": datatype}
        if datavalue is not None:
            snak["datavalue"] = datavalue
        return snak

    @classmethod
    def item_snak(cls, prop: str, qid: str) -> dict:
        return cls.snak(
            prop,
            {"type": "wikibase-entityid", "value": {"entity-type": "item", "id": qid}},
            datatype="wikibase-item",
        )

    @classmethod
    def string_snak(cls, prop: str, value: str, datatype: str = "string") -> dict:
        return cls.snak(prop, {"type": "string", "value": value}, datatype=datatype)

    @classmethod
    def time_snak(cls, prop: str, time: str, precision: int = 11) -> dict:
        return cls.snak(
            prop,
            {"type": "time", "value": {"time": time, "precision": precision, "timezone": 0}},
            datatype="time",
        )

    @classmethod
    def quantity_snak(cls, prop: str, amount: str) -> dict:
        return cls.snak(prop, {"type": "quantity", "value": {"amount": amount, "unit": "1"}}, datatype="quantity")

    @classmethod
    def coordinate_snak(cls, prop: str, lat: float, lon: float) -> dict:
        return cls.snak(
            prop,
            {"type": "globecoordinate", "value": {"latitude": lat, "longitude": lon}},
            datatype="globe-coordinate",
        )

    @classmethod
    def monolingual_snak(cls, prop: str, text: str, language: str = "en") -> dict:
        return cls.snak(
            prop,
            {"type": "monolingualtext", "value": {"text": text, "language": language}},
            datatype="monolingualtext",
        )

    @staticmethod
    def statement(mainsnak: dict, qualifiers: Optional[List[dict]] = None, rank: str = "normal") -> dict:
        statement: Dict[str, Any] = {"type": "statement", "mainsnak": mainsnak, "rank": rank}
        if qualifiers:
            grouped: Dict[str, List[dict]] = {}
            for q in qualifiers:
                grouped.setdefault(q["property"], []).append(q)
            statement["qualifiers"] = grouped
        return statement

    @staticmethod
    def uri(qid: str) -> dict:
        return {"type": "uri", "value": ENTITY_PREFIX + qid}

    @staticmethod
    def literal(value: str, datatype: Optional[str] = None) -> dict:
        j = {"type": "literal", "value": value}
        if datatype is not None:
            j["datatype"] = datatype
        return j

    @staticmethod
    def sparql(variables: List[str], bindings: List[dict]) -> dict:
        return {"head": {"vars": variables}, "results": {"bindings": bindings}}

    @classmethod
    def sparql_items(cls, *qids: str, var: str = "item") -> dict:
        return cls.sparql([var], [{var: cls.uri(qid)} for qid in qids])


@pytest.fixture
def wb():
    return Wikibase


@pytest.fixture
def make_ctx():
    """Build a `ListContext` from raw template options and entity JSON."""

    def _make(
        params: Optional[Dict[str, str]] = None,
        entities: Optional[List[dict]] = None,
        wiki: str = "enwiki",
        wiki_api: Any = None,
        **kwargs: Any,
    ) -> ListContext:
        template = {"sparql": "SELECT ?item {}"}
        template.update(params or {})
        tp = TemplateParams.from_template(template)
        loader = StubEntityLoader(entities={e["id"]: e for e in (entities or [])})
        container = EntityContainer(loader=loader)
        container.load_entities([e["id"] for e in (entities or [])])
        return ListContext(
            wiki=wiki,
            language=tp.language or "en",
            params=tp,
            columns=parse_columns(tp.columns),
            entities=container,
            wiki_api=wiki_api,
            **kwargs,
        )

    return _make


@pytest.fixture
def stub_wiki():
    def _make(existing_pages=(), repositories=None) -> StubWikiPageService:
        return StubWikiPageService(existing_pages=frozenset(existing_pages), repositories=dict(repositories or {}))

    return _make
