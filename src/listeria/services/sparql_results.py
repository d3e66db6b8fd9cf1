"""SPARQL JSON results -> typed binding rows."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

from listeria.models.domain import (
    EntityValue,
    FileValue,
    LiteralValue,
    LocationValue,
    SparqlResults,
    SparqlRow,
    SparqlValue,
    TimeValue,
    UriValue,
)
from listeria.services.errors import SparqlParseError

logger = logging.getLogger(__name__)


ENTITY_URI_RE = re.compile(r"^https?://www\.wikidata\.org/entity/([A-Z]\d+)$")
FILE_URI_RE = re.compile(r"^https?://commons\.wikimedia\.org/wiki/Special:FilePath/(.+?)$")
POINT_RE = re.compile(r"^Point\((-?\d+(?:\.\d+)?) (-?\d+(?:\.\d+)?)\)$")

WKT_LITERAL = "http://www.opengis.net/ont/geosparql#wktLiteral"
DATETIME_LITERAL = "http://www.w3.org/2001/XMLSchema#dateTime"


def parse_sparql_value(j: Any) -> Optional[SparqlValue]:
    """
    Classify one bound value by its type / value / datatype.

    Returns None when the value can't be classified.
    """
    if not isinstance(j, dict):
        return None
    value = j.get("value")
    if not isinstance(value, str):
        return None

    kind = j.get("type")
    if kind == "uri":
        m = ENTITY_URI_RE.match(value)
        if m:
            return EntityValue(id=m.group(1))
        m = FILE_URI_RE.match(value)
        if m:
            name = unquote(m.group(1)).replace("_", " ")
            return FileValue(name=name)
        return UriValue(text=value)

    if kind == "literal":
        datatype = j.get("datatype")
        if datatype is None:
            return LiteralValue(text=value)
        if datatype == WKT_LITERAL:
            m = POINT_RE.match(value)
            if not m:
                return None
            # WKT points are "lon lat"
            return LocationValue(lat=float(m.group(2)), lon=float(m.group(1)))
        if datatype == DATETIME_LITERAL:
            return TimeValue(text=value)
        return None

    return None


def _first_variable(j: Dict[str, Any]) -> str:
    head = j.get("head")
    variables = head.get("vars") if isinstance(head, dict) else None
    if not isinstance(variables, list) or not variables:
        raise SparqlParseError("Bad SPARQL head.vars")
    first = variables[0]
    if not isinstance(first, str):
        raise SparqlParseError("Can't parse first variable")
    return first


def parse_sparql_results(j: Any) -> SparqlResults:
    """
    Parse a SPARQL JSON result document.

    The first declared variable becomes the primary entity variable for the run.
    Rows keep their order; empty rows are skipped.
    """
    if not isinstance(j, dict):
        raise SparqlParseError("SPARQL result is not a JSON object")

    first_var = _first_variable(j)

    results = j.get("results")
    bindings = results.get("bindings") if isinstance(results, dict) else None
    if not isinstance(bindings, list):
        raise SparqlParseError("Broken SPARQL results.bindings")

    rows: List[SparqlRow] = []
    for b in bindings:
        if not isinstance(b, dict):
            raise SparqlParseError(f"Broken SPARQL binding: {b!r}")
        row: SparqlRow = {}
        for k, v in b.items():
            parsed = parse_sparql_value(v)
            if parsed is None:
                raise SparqlParseError(f"Can't parse SPARQL value: {k} => {v!r}")
            row[k] = parsed
        if not row:
            continue
        rows.append(row)

    logger.debug("Parsed %d SPARQL rows (primary variable ?%s)", len(rows), first_var)
    return SparqlResults(first_variable=first_var, rows=rows)
