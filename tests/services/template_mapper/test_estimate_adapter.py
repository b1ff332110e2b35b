from __future__ import annotations

import logging

from reportflow.services.template_mapper import compile_document, tree_signature
from reportflow.services.template_mapper.adapters import get_adapter
from reportflow.services.template_mapper.models import (
    ImageElement,
    KintoneSource,
    KintoneSubtableSource,
    LabelElement,
    StaticSource,
    TableElement,
    TemplateDocument,
    TextElement,
)


def _by_id(document: TemplateDocument) -> dict:
    return {element.id: element for element in document.elements}


def _synthesize(mapping, elements=(), **doc) -> TemplateDocument:
    document = TemplateDocument(id="est", structure_type="estimate_v1", elements=list(elements), **doc)
    return get_adapter("estimate_v1").synthesize(document, mapping)


def test_default_mapping_shape():
    mapping = get_adapter("estimate_v1").create_default_mapping()
    assert mapping.slot("header", "doc_title").text == "御見積書"
    assert mapping.slot("header", "to_honorific").text == "御中"
    assert mapping.table.summary_mode == "lastPageOnly"
    assert mapping.table.columns == []
    assert mapping.card_list is None


def test_empty_document_gets_every_slot(estimate_mapping):
    result = _synthesize(estimate_mapping)
    elements = _by_id(result)

    assert result.structure_type == "estimate_v1"
    for slot_id in ("doc_title", "to_name", "issue_date", "doc_no", "logo", "remarks", "subtotal", "tax", "total"):
        assert elements[slot_id].slot_id == slot_id

    to_name = elements["to_name"]
    assert isinstance(to_name, TextElement)
    assert to_name.data_source == KintoneSource(field_code="CustomerName")
    assert to_name.hidden is False
    assert (to_name.x, to_name.y, to_name.width, to_name.height) == (70, 99, 200, 18)
    assert to_name.region == "header"

    title = elements["doc_title"]
    assert title.data_source == StaticSource(value="御見積書")
    assert title.align_x == "center"

    logo = elements["logo"]
    assert isinstance(logo, ImageElement)
    assert logo.hidden is True
    assert logo.repeat_on_every_page is True

    assert elements["remarks"].hidden is True
    assert elements["total"].region == "footer"


def test_honorific_companion_sits_right_of_to_name(estimate_mapping):
    honorific = _by_id(_synthesize(estimate_mapping))["to_honorific"]
    assert (honorific.x, honorific.y, honorific.width, honorific.height) == (276, 99, 24, 18)
    assert honorific.font_size == 9
    assert honorific.data_source == StaticSource(value="御中")
    assert honorific.hidden is False


def test_honorific_removed_when_empty(estimate_mapping):
    estimate_mapping["header"]["to_honorific"] = {"kind": "staticText", "text": ""}
    existing = TextElement(id="to_honorific", slot_id="to_honorific", region="header", x=300, y=99)
    elements = _by_id(_synthesize(estimate_mapping, [existing]))
    assert "to_honorific" not in elements


def test_legacy_honorific_label_is_replaced(estimate_mapping):
    legacy = LabelElement(id="label_onchu", region="header", x=280, y=99, text="御中")
    elements = _by_id(_synthesize(estimate_mapping, [legacy]))
    assert "label_onchu" not in elements
    assert "to_honorific" in elements


def test_fixed_labels_present_with_schema_text(estimate_mapping):
    elements = _by_id(_synthesize(estimate_mapping))
    captions = {
        "date_label": "発行日",
        "doc_no_label": "見積番号",
        "subtotal_label": "小計",
        "tax_label": "消費税",
        "total_label_fixed": "合計",
    }
    for element_id, text in captions.items():
        assert isinstance(elements[element_id], LabelElement)
        assert elements[element_id].text == text
    assert elements["date_label"].slot_id == "date_label"
    assert elements["total_label_fixed"].region == "footer"


def test_fixed_label_keeps_geometry_but_resets_text(estimate_mapping):
    moved = LabelElement(id="tax_label", region="footer", x=12, y=730, width=90, text="Tax", hidden=True)
    label = _by_id(_synthesize(estimate_mapping, [moved]))["tax_label"]
    assert (label.x, label.y, label.width) == (12, 730, 90)
    assert label.text == "消費税"
    assert label.hidden is True


def test_table_element_from_mapping(estimate_mapping):
    table = _by_id(_synthesize(estimate_mapping))["items"]

    assert isinstance(table, TableElement)
    assert table.region == "body"
    assert (table.x, table.y, table.width) == (70, 270, 480)
    assert table.data_source == KintoneSubtableSource(field_code="Items")
    assert [column.width for column in table.columns] == [278, 58, 72, 72]
    assert [column.field_code for column in table.columns] == ["ItemName", "Qty", "UnitPrice", "Amount"]
    assert [column.title for column in table.columns] == ["品名", "数量", "単価", "金額"]
    assert {column.min_font_size for column in table.columns} == {9}
    assert table.show_grid is True
    assert (table.border_width, table.border_color_gray) == (0.9, 0.3)

    (row,) = table.summary.rows
    assert (row.field_code, row.column_id, row.kind) == ("Amount", "amount", "total")
    assert table.summary.style.total_fill_gray == 0.93


def test_existing_elements_keep_their_geometry(estimate_mapping):
    moved = TextElement(id="total", slot_id="total", region="footer", x=400, y=760, width=170, height=22, font_size=16)
    total = _by_id(_synthesize(estimate_mapping, [moved]))["total"]
    assert (total.x, total.y, total.width, total.height, total.font_size) == (400, 760, 170, 22, 16)
    assert total.data_source == KintoneSource(field_code="Total")
    assert total.font_weight == "bold"


def test_label_in_slot_becomes_text_and_is_clamped(estimate_mapping):
    old = LabelElement(id="to_name", region="header", x=10, y=400, width=100, height=18, text="Old")
    to_name = _by_id(_synthesize(estimate_mapping, [old]))["to_name"]
    assert isinstance(to_name, TextElement)
    assert (to_name.x, to_name.y, to_name.width) == (10, 232, 100)
    assert to_name.text is None
    assert to_name.data_source == KintoneSource(field_code="CustomerName")


def test_unbound_slot_with_static_text_stays_visible(estimate_mapping):
    note = TextElement(id="remarks", slot_id="remarks", region="footer", x=70, y=700, text="Valid for 30 days")
    remarks = _by_id(_synthesize(estimate_mapping, [note]))["remarks"]
    assert remarks.hidden is False
    assert remarks.text == "Valid for 30 days"


def test_company_slots_are_right_aligned(estimate_mapping):
    company = TextElement(id="company_name", slot_id="company_name", region="header", x=350, y=150, text="ACME")
    element = _by_id(_synthesize(estimate_mapping, [company]))["company_name"]
    assert element.align_x == "right"
    assert element.text == "ACME"


def test_unknown_elements_survive_in_order(estimate_mapping):
    stamp = ImageElement(id="stamp", region="footer", x=500, y=780, width=40, height=40)
    result = _synthesize(estimate_mapping, [stamp])
    assert result.elements[0] == stamp


def test_synthesis_is_idempotent(estimate_mapping):
    once = _synthesize(estimate_mapping)
    twice = get_adapter("estimate_v1").synthesize(once)
    assert tree_signature(once.elements) == tree_signature(twice.elements)
    assert once.mapping == twice.mapping


def test_compile_empty_document_uses_default_mapping(caplog):
    caplog.set_level(logging.INFO)
    result = compile_document(TemplateDocument(id="blank", structure_type="estimate_v1"))

    assert not result.validation.ok
    assert "footer.total" in result.validation.paths()
    assert result.changed is True
    elements = _by_id(result.document)
    assert elements["doc_title"].data_source == StaticSource(value="御見積書")
    assert elements["to_name"].hidden is True
    assert "items" not in elements
    assert "starting from the estimate_v1 default" in caplog.text

    again = compile_document(result.document)
    assert again.changed is False
    assert again.signature == result.signature


def test_element_bound_to_other_slot_keeps_its_binding(estimate_mapping):
    moved = TextElement(id="doc_no", slot_id="issue_date", region="header", x=300, y=140, width=150, height=16)
    once = _synthesize(estimate_mapping, [moved])
    elements = _by_id(once)

    assert elements["doc_no"].slot_id == "issue_date"
    assert elements["doc_no"].data_source == KintoneSource(field_code="IssueDate")
    assert (elements["doc_no"].x, elements["doc_no"].y) == (300, 140)
    doc_no = [element for element in once.elements if element.slot_id == "doc_no"]
    assert [element.id for element in doc_no] == ["doc_no_2"]
    assert doc_no[0].data_source == KintoneSource(field_code="EstimateNo")


def test_synthesis_is_idempotent_on_irregular_tree(estimate_mapping):
    elements = [
        TextElement(id="doc_no", slot_id="issue_date", region="header", x=300, y=140),
        LabelElement(id="to_name", region="header", x=10, y=400, text="Old"),
        LabelElement(id="label_onchu", region="header", x=280, y=99, text="御中"),
        TableElement(id="t1", x=33, y=300, width=400),
        TableElement(id="t2", x=33, y=500),
        TextElement(id="", region="footer", x=5, y=800, text="loose"),
        ImageElement(id="stamp", region="footer", x=500, y=780, width=40, height=40),
    ]
    once = _synthesize(estimate_mapping, elements)
    twice = get_adapter("estimate_v1").synthesize(once)
    thrice = get_adapter("estimate_v1").synthesize(twice)

    assert tree_signature(twice.elements) == tree_signature(once.elements)
    assert thrice.elements == twice.elements
    assert {element.slot_id for element in once.elements} >= {"issue_date", "doc_no", "to_name", "total"}
