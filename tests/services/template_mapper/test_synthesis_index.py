from __future__ import annotations

import logging

from reportflow.services.template_mapper.field_refs import image_url, record_field, static_text
from reportflow.services.template_mapper.models import (
    ImageElement,
    KintoneSource,
    LabelElement,
    StaticSource,
    TextElement,
)
from reportflow.services.template_mapper.regions import default_region_bounds
from reportflow.services.template_mapper.schema import CompanionDef, Geometry, SlotDef
from reportflow.services.template_mapper.synthesis import (
    ElementIndex,
    apply_companion,
    companion_fallback,
    has_static_text,
    reconcile_slot,
    resolve_data_source,
)

BOUNDS = default_region_bounds(842)
NAME_SLOT = SlotDef("to_name", "宛先名", "text", Geometry(x=70, y=99, width=200, height=18, font_size=12))
LOGO_SLOT = SlotDef("logo", "ロゴ", "image", Geometry(x=40, y=12, width=120, height=60), allowed_sources=("imageUrl",))


def test_index_drops_duplicate_ids(caplog):
    caplog.set_level(logging.WARNING)
    first = TextElement(id="a", x=1)
    index = ElementIndex([first, TextElement(id="a", x=2), TextElement(id="", x=3), TextElement(id="", x=4)])

    assert len(index) == 3
    assert index.get("a") is first
    assert "duplicate id 'a'" in caplog.text


def test_put_replacing_keeps_position():
    a, b, c = TextElement(id="a"), TextElement(id="b"), TextElement(id="c")
    index = ElementIndex([a, b, c])

    index.put(TextElement(id="renamed"), replacing=b)
    assert [element.id for element in index] == ["a", "renamed", "c"]

    index.put(TextElement(id="c", x=9), replacing=a)
    assert [element.id for element in index] == ["c", "renamed"]
    assert index.get("c").x == 9


def test_locate_prefers_slot_id():
    by_slot = TextElement(id="custom", slot_id="to_name")
    by_id = TextElement(id="to_name")
    index = ElementIndex([by_id, by_slot])
    assert index.locate("to_name") is by_slot
    assert ElementIndex([by_id]).locate("to_name") is by_id


def test_resolve_data_source():
    assert resolve_data_source(record_field("A")) == KintoneSource(field_code="A")
    assert resolve_data_source(static_text("x")) == StaticSource(value="x")
    assert resolve_data_source(image_url("u")) == StaticSource(value="u")
    assert resolve_data_source(None) == StaticSource(value="")


def test_has_static_text():
    assert has_static_text(TextElement(id="a", data_source=StaticSource(value="x")))
    assert has_static_text(LabelElement(id="a", text="x"))
    assert not has_static_text(TextElement(id="a", data_source=KintoneSource(field_code="A")))
    assert not has_static_text(None)


def test_reconcile_new_slot_uses_fallback():
    index = ElementIndex()
    element = reconcile_slot(index, NAME_SLOT, "header", record_field("Customer"), BOUNDS)
    assert (element.x, element.y, element.width, element.height, element.font_size) == (70, 99, 200, 18, 12)
    assert element.font_weight == "normal"
    assert element.hidden is False
    assert index.get("to_name") is element


def test_reconcile_ignores_disallowed_source():
    index = ElementIndex()
    element = reconcile_slot(index, LOGO_SLOT, "header", record_field("Logo"), BOUNDS)
    assert isinstance(element, ImageElement)
    assert element.hidden is True
    assert element.data_source == StaticSource(value="")


def test_reconcile_moves_element_into_region():
    stray = TextElement(id="to_name", region="footer", x=70, y=800, width=200, height=18)
    index = ElementIndex([stray])
    element = reconcile_slot(index, NAME_SLOT, "header", record_field("Customer"), BOUNDS)
    assert element.region == "header"
    assert element.y == 232
    assert element.slot_id == "to_name"


def test_companion_fallback_without_anchor_element():
    companion = CompanionDef(id="to_honorific", region="header", anchor_slot="to_name")
    geometry = companion_fallback(companion, None, NAME_SLOT.fallback)
    assert (geometry.x, geometry.y, geometry.width, geometry.height, geometry.font_size) == (276, 99, 24, 18, 9)


def test_companion_follows_moved_anchor():
    companion = CompanionDef(id="to_honorific", region="header", anchor_slot="to_name")
    index = ElementIndex([TextElement(id="to_name", slot_id="to_name", region="header", x=100, y=120, width=150)])
    element = apply_companion(index, companion, static_text("様"), BOUNDS, NAME_SLOT.fallback)
    assert (element.x, element.y, element.height) == (256, 120, 18)


def test_companion_kept_by_its_own_static_text():
    companion = CompanionDef(id="to_honorific", region="header", anchor_slot="to_name")
    existing = TextElement(id="to_honorific", region="header", x=276, y=99, data_source=StaticSource(value="様"))
    index = ElementIndex([existing])
    assert apply_companion(index, companion, None, BOUNDS, NAME_SLOT.fallback) is not None

    index = ElementIndex([existing.model_copy(update={"data_source": StaticSource(value="")})])
    assert apply_companion(index, companion, None, BOUNDS, NAME_SLOT.fallback) is None
    assert len(index) == 0


def test_locate_skips_element_bound_to_another_slot():
    taken = TextElement(id="doc_no", slot_id="issue_date")
    index = ElementIndex([taken])

    assert index.locate("issue_date") is taken
    assert index.locate("doc_no") is None
    assert index.unique_id("doc_no") == "doc_no_2"
    assert index.unique_id("free") == "free"


def test_slot_lookup_follows_mutations():
    first = TextElement(id="a", slot_id="to_name")
    second = TextElement(id="b", slot_id="to_name")
    index = ElementIndex([first, second])
    assert index.find_slot("to_name") is first

    index.remove_where(lambda e: e is first)
    assert index.find_slot("to_name") is second

    rebound = second.model_copy(update={"slot_id": "doc_no"})
    index.put(rebound, replacing=second)
    assert index.find_slot("to_name") is None
    assert index.find_slot("doc_no") is rebound

    added = TextElement(id="c", slot_id="to_name")
    index.put(added)
    assert index.find_slot("to_name") is added


def test_new_slot_element_does_not_overwrite_taken_id():
    taken = TextElement(id="to_name", slot_id="doc_title", region="header", x=1, y=1)
    index = ElementIndex([taken])
    element = reconcile_slot(index, NAME_SLOT, "header", record_field("Customer"), BOUNDS)

    assert element.id == "to_name_2"
    assert index.get("to_name") is taken
    assert len(index) == 2
