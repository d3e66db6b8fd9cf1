from listeria.models.columns import (
    DescriptionColumn,
    FieldColumn,
    ItemColumn,
    LabelColumn,
    LabelLangColumn,
    NumberColumn,
    PropertyColumn,
    PropertyQualifierColumn,
    PropertyQualifierValueColumn,
    UnknownColumn,
)
from listeria.services.column_spec import (
    column_entity_ids,
    generate_label,
    parse_column,
    parse_column_type,
    parse_columns,
)
from listeria.services.entity_store import EntityContainer


def test_keywords_are_case_insensitive():
    assert parse_column_type("number") == NumberColumn()
    assert parse_column_type("Label") == LabelColumn()
    assert parse_column_type("DESCRIPTION") == DescriptionColumn()
    assert parse_column_type(" item ") == ItemColumn()


def test_label_with_language():
    assert parse_column_type("label/DE") == LabelLangColumn(language="de")


def test_property_forms_are_uppercased():
    assert parse_column_type("p31") == PropertyColumn(prop="P31")
    assert parse_column_type("P39/p580") == PropertyQualifierColumn(prop="P39", qualifier="P580")
    assert parse_column_type("p39 / q30185 / P580") == PropertyQualifierValueColumn(
        prop="P39", qualifier_entity="Q30185", prop2="P580"
    )


def test_property_resolution_is_idempotent():
    first = parse_column_type("p31")
    assert parse_column_type(first.as_key().upper()) == first


def test_sparql_field_keeps_name():
    assert parse_column_type("?birthPlace") == FieldColumn(name="birthPlace")


def test_garbage_is_unknown():
    assert parse_column_type("foo bar") == UnknownColumn()
    assert parse_column_type("Q42") == UnknownColumn()


def test_explicit_label():
    col = parse_column("P31:instance of")
    assert col.obj == PropertyColumn(prop="P31")
    assert col.label == "instance of"
    assert col.explicit_label


def test_default_label_is_the_raw_text():
    col = parse_column(" P18 ")
    assert col.label == "P18"
    assert not col.explicit_label


def test_parse_columns_defaults_to_item():
    cols = parse_columns(None)
    assert [c.obj for c in cols] == [ItemColumn()]


def test_parse_columns_splits_and_skips_empty():
    cols = parse_columns("number, label,,P31:type")
    assert [c.obj for c in cols] == [NumberColumn(), LabelColumn(), PropertyColumn(prop="P31")]
    assert cols[2].label == "type"


def test_keys():
    assert [c.obj.as_key() for c in parse_columns("number,label/fr,P39/P580,P39/Q30185/P580,?x,desc")] == [
        "number",
        "label_fr",
        "p39_p580",
        "p39_q30185_p580",
        "x",
        "unknown",
    ]


def test_generate_label_from_entities(wb):
    entities = EntityContainer()
    entities.add_entity(wb.prop("P39", "position held"))
    entities.add_entity(wb.item("Q30185", "mayor"))
    entities.add_entity(wb.prop("P580", "start time", datatype="time"))

    prop_col = parse_column("P39")
    generate_label(prop_col, entities, "en")
    assert prop_col.label == "position held"

    pqv = parse_column("P39/Q30185/P580")
    generate_label(pqv, entities, "en")
    assert pqv.label == "position held/mayor/start time"

    pq_missing = parse_column("P39/P9999")
    generate_label(pq_missing, entities, "en")
    assert pq_missing.label == "position held/P9999"


def test_generate_label_keeps_explicit_label(wb):
    entities = EntityContainer()
    entities.add_entity(wb.prop("P31", "instance of"))
    col = parse_column("P31:kind")
    generate_label(col, entities, "en")
    assert col.label == "kind"


def test_column_entity_ids():
    assert column_entity_ids(parse_column("P39/Q30185/P580")) == ["P39", "Q30185", "P580"]
    assert column_entity_ids(parse_column("label")) == []
