import pytest

from listeria.models.results import (
    EntityPart,
    ExternalIdPart,
    FilePart,
    LocalLinkPart,
    LocationPart,
    NumberPart,
    SnakListPart,
    TextPart,
    TimePart,
)
from listeria.services.result_model import (
    MISC_SECTION_NAME,
    NO_VALUE_TEXT,
    build_results,
    part_from_snak,
    reduce_time,
)
from listeria.services.sparql_results import parse_sparql_results


def _rows(make_ctx, doc, params=None, entities=None, **kwargs):
    ctx = make_ctx(params=params, entities=entities, **kwargs)
    ctx.sparql = parse_sparql_results(doc)
    ctx.rows = build_results(ctx)
    return ctx


@pytest.mark.parametrize(
    "time,precision,expected",
    [
        ("+2001-05-03T00:00:00Z", 11, "2001-05-03"),
        ("+2001-05-00T00:00:00Z", 10, "2001-05"),
        ("+1999-00-00T00:00:00Z", 9, "1999"),
        ("+1995-00-00T00:00:00Z", 8, "1990s"),
        ("+1901-00-00T00:00:00Z", 7, "20th century"),
        ("+2001-00-00T00:00:00Z", 6, "3rd millennium"),
        ("-0500-00-00T00:00:00Z", 7, "5th century BCE"),
        ("+1911-00-00T00:00:00Z", 7, "20th century"),
    ],
)
def test_reduce_time(time, precision, expected):
    assert reduce_time(time, precision) == expected


def test_part_from_snak_values(wb):
    assert part_from_snak(wb.item_snak("P31", "Q5")) == EntityPart(id="Q5", try_localize=True)
    assert part_from_snak(wb.quantity_snak("P1082", "+42")) == TextPart(text="42")
    assert part_from_snak(wb.monolingual_snak("P1476", "Hello", "de")) == TextPart(text="de:Hello")
    assert part_from_snak(wb.string_snak("P18", "A.jpg", datatype="commonsMedia")) == FilePart(name="A.jpg")
    assert part_from_snak(wb.string_snak("P214", "113230702", datatype="external-id")) == ExternalIdPart(
        prop="P214", id="113230702"
    )
    assert part_from_snak(wb.coordinate_snak("P625", 52.5, 13.4)) == LocationPart(lat=52.5, lon=13.4)
    assert part_from_snak(wb.time_snak("P569", "+1952-03-11T00:00:00Z")) == TimePart(text="1952-03-11")


def test_part_from_legacy_entity_snak(wb):
    legacy = wb.snak("P31", {"type": "wikibase-entityid", "value": {"entity-type": "item", "numeric-id": 5}})
    assert part_from_snak(legacy) == EntityPart(id="Q5", try_localize=True)

    unknown = wb.snak("P31", {"type": "wikibase-entityid", "value": {"entity-type": "form", "numeric-id": 5}})
    assert isinstance(part_from_snak(unknown), TextPart)


def test_novalue_snak(wb):
    assert part_from_snak(wb.snak("P570", None, snaktype="novalue")) == TextPart(text=NO_VALUE_TEXT)


def test_one_row_per_item_groups_bindings(make_ctx, wb):
    doc = wb.sparql(
        ["item", "alias"],
        [
            {"item": wb.uri("Q1"), "alias": wb.literal("a")},
            {"item": wb.uri("Q2"), "alias": wb.literal("c")},
            {"item": wb.uri("Q1"), "alias": wb.literal("b")},
        ],
    )
    ctx = _rows(make_ctx, doc, params={"columns": "item,?alias"})
    assert [r.entity_id for r in ctx.rows] == ["Q1", "Q2"]
    assert ctx.rows[0].cells[1].parts == (TextPart("a"), TextPart("b"))


def test_one_row_per_binding(make_ctx, wb):
    doc = wb.sparql(
        ["item", "alias"],
        [
            {"item": wb.uri("Q1"), "alias": wb.literal("a")},
            {"item": wb.uri("Q1"), "alias": wb.literal("b")},
        ],
    )
    ctx = _rows(make_ctx, doc, params={"columns": "?alias", "one_row_per_item": "no"})
    assert [r.cells[0].parts for r in ctx.rows] == [(TextPart("a"),), (TextPart("b"),)]


def test_label_number_and_description_cells(make_ctx, wb):
    entities = [
        wb.item("Q1", "Berlin", description="capital", sitelinks={"enwiki": "Berlin"}),
        wb.item("Q2", "Nowhere"),
    ]
    ctx = _rows(
        make_ctx,
        wb.sparql_items("Q1", "Q2"),
        params={"columns": "number,label,description"},
        entities=entities,
    )
    first, second = ctx.rows
    assert first.cells[0].parts == (NumberPart(),)
    assert first.cells[1].parts == (LocalLinkPart(page="Berlin", label="Berlin"),)
    assert first.cells[2].parts == (TextPart("capital"),)
    assert second.cells[1].parts == (EntityPart(id="Q2"),)
    assert len(second.cells[2]) == 0


def test_property_cell_drops_deprecated(make_ctx, wb):
    item = wb.item(
        "Q1",
        "X",
        claims={
            "P31": [
                wb.statement(wb.item_snak("P31", "Q5")),
                wb.statement(wb.item_snak("P31", "Q6"), rank="deprecated"),
                wb.statement(wb.item_snak("P31", "Q7"), rank="preferred"),
            ]
        },
    )
    ctx = _rows(make_ctx, wb.sparql_items("Q1"), params={"columns": "P31"}, entities=[item])
    assert ctx.rows[0].cells[0].parts == (EntityPart("Q5"), EntityPart("Q7"))

    ctx = _rows(
        make_ctx, wb.sparql_items("Q1"), params={"columns": "P31"}, entities=[item], prefer_preferred=True
    )
    assert ctx.rows[0].cells[0].parts == (EntityPart("Q7"),)


def test_qualifier_columns(make_ctx, wb):
    item = wb.item(
        "Q1",
        "X",
        claims={
            "P39": [
                wb.statement(
                    wb.item_snak("P39", "Q30185"),
                    qualifiers=[wb.time_snak("P580", "+2001-00-00T00:00:00Z", precision=9)],
                ),
                wb.statement(
                    wb.item_snak("P39", "Q4"),
                    qualifiers=[wb.time_snak("P580", "+1990-00-00T00:00:00Z", precision=9)],
                ),
            ]
        },
    )
    ctx = _rows(
        make_ctx,
        wb.sparql_items("Q1"),
        params={"columns": "P39/P580,P39/Q30185/P580"},
        entities=[item],
    )
    pq, pqv = ctx.rows[0].cells
    assert pq.parts == (
        SnakListPart(parts=(EntityPart("Q30185"), TimePart("2001"))),
        SnakListPart(parts=(EntityPart("Q4"), TimePart("1990"))),
    )
    assert pqv.parts == (TimePart("2001"),)


def test_local_links_mode_drops_unknown_items(make_ctx, wb):
    ctx = _rows(
        make_ctx,
        wb.sparql_items("Q1", "Q2"),
        params={"links": "local"},
        entities=[wb.item("Q1", "Known")],
    )
    assert [r.entity_id for r in ctx.rows] == ["Q1"]


def test_sections_by_property(make_ctx, wb):
    def person(qid, country):
        return wb.item(qid, qid, claims={"P27": [wb.statement(wb.item_snak("P27", country))]})

    entities = [person("Q1", "Q183"), person("Q2", "Q142"), person("Q3", "Q183"), wb.item("Q4", "stateless")]
    ctx = _rows(
        make_ctx,
        wb.sparql_items("Q1", "Q2", "Q3", "Q4"),
        params={"section": "P27"},
        entities=entities,
    )
    assert ctx.section_names == ["", "Q183", MISC_SECTION_NAME]
    assert [r.section for r in ctx.rows] == [1, 2, 1, 2]
    assert ctx.misc_section_id == 2


def test_sections_by_variable_with_min_section(make_ctx, wb):
    doc = wb.sparql(
        ["item", "kind"],
        [
            {"item": wb.uri("Q1"), "kind": wb.literal("a")},
            {"item": wb.uri("Q2"), "kind": wb.literal("b")},
        ],
    )
    ctx = _rows(make_ctx, doc, params={"section": "@kind", "min_section": "1"})
    assert ctx.section_names == ["", "a", "b"]
    assert [r.section for r in ctx.rows] == [1, 2]
    assert ctx.misc_section_id is None
