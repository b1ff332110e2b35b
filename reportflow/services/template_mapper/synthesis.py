"""Reconcile a mapping against an existing element tree.

The helpers here work on an :class:`ElementIndex`, a keyed view of the tree
that keeps the original order. Existing geometry and styling always win
over schema fallbacks; fallbacks only seed elements created from scratch.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Union

from .field_refs import (
    FieldRef,
    ImageUrlRef,
    RecordFieldRef,
    StaticTextRef,
    SubtableFieldRef,
    SubtableRef,
    is_bound,
)
from .mapping import CardListMapping, TableColumn, TableMapping
from .models import (
    CardField,
    CardListElement,
    ElementBase,
    ImageElement,
    KintoneSource,
    KintoneSubtableSource,
    LabelElement,
    RegionBounds,
    RenderColumn,
    StaticSource,
    SummaryRow,
    TableElement,
    TableSummary,
    TextElement,
)
from .regions import clamp_y_to_region
from .schema import CardListRegion, CompanionDef, FixedLabelDef, Geometry, SlotDef, TableRegion
from .widths import allocate_pixel_widths, normalize_width_pct

LOGGER = logging.getLogger(__name__)

Element = Union[TextElement, LabelElement, ImageElement, TableElement, CardListElement]

TEXT_DEFAULTS = {"width": 220, "height": 24, "font_size": 12, "font_weight": "normal"}
IMAGE_DEFAULTS = {"width": 120, "height": 60}
_TEXT_ONLY_KEYS = ("text", "font_size", "font_weight", "align_x")


class ElementIndex:
    """Ordered element tree keyed by id, with a secondary ``slotId`` lookup.

    The first element seen for an id wins; later duplicates are dropped with
    a warning. Elements with an empty id are kept in place but never keyed.
    When several elements share a ``slotId`` the first in tree order owns it.
    """

    def __init__(self, elements: Iterable[Element] = ()) -> None:
        self._items: Dict[object, Element] = {}
        self._slots: Dict[str, object] = {}
        for position, element in enumerate(elements):
            if not element.id:
                self._items[(None, position)] = element
                continue
            if element.id in self._items:
                LOGGER.warning("Dropping element with duplicate id %r", element.id)
                continue
            self._items[element.id] = element
        self._reindex_slots()

    def __iter__(self) -> Iterator[Element]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def _reindex_slots(self) -> None:
        slots: Dict[str, object] = {}
        for key, element in self._items.items():
            if element.slot_id:
                slots.setdefault(element.slot_id, key)
        self._slots = slots

    def get(self, element_id: str) -> Optional[Element]:
        if not element_id:
            return None
        return self._items.get(element_id)

    def find_slot(self, slot_id: str) -> Optional[Element]:
        key = self._slots.get(slot_id)
        return None if key is None else self._items.get(key)

    def locate(self, slot_id: str) -> Optional[Element]:
        """Element bound to ``slot_id``: by ``slotId`` first, else by id.

        The id fallback only matches an element not bound to another slot.
        """

        element = self.find_slot(slot_id)
        if element is not None:
            return element
        element = self.get(slot_id)
        if element is not None and element.slot_id not in (None, "", slot_id):
            return None
        return element

    def unique_id(self, base: str) -> str:
        """``base`` if free, else ``base_2``, ``base_3`` and so on."""

        candidate, suffix = base, 2
        while candidate in self._items:
            candidate = f"{base}_{suffix}"
            suffix += 1
        return candidate

    def _key_of(self, element: Element) -> object:
        for key, value in self._items.items():
            if value is element:
                return key
        return None

    def put(self, element: Element, *, replacing: Optional[Element] = None) -> None:
        """Insert or replace ``element``.

        With ``replacing`` the new element takes the old one's position even
        when the ids differ; any other element holding the new id is dropped.
        """

        key = self._key_of(replacing) if replacing is not None else None
        if key is None:
            new_key = element.id or (None, id(element))
            replaced = new_key in self._items
            self._items[new_key] = element
            if replaced:
                self._reindex_slots()
            elif element.slot_id:
                self._slots.setdefault(element.slot_id, new_key)
            return
        new_key = element.id or key
        items: Dict[object, Element] = {}
        for current, value in self._items.items():
            if current == key:
                items[new_key] = element
            elif current != new_key:
                items[current] = value
        self._items = items
        self._reindex_slots()

    def remove_where(self, predicate: Callable[[Element], bool]) -> int:
        doomed = [key for key, element in self._items.items() if predicate(element)]
        for key in doomed:
            del self._items[key]
        if doomed:
            self._reindex_slots()
        return len(doomed)

    def of_type(self, element_type: str) -> List[Element]:
        return [element for element in self._items.values() if element.type == element_type]

    def values(self) -> List[Element]:
        return list(self._items.values())


def resolve_data_source(ref: Optional[FieldRef]) -> Union[StaticSource, KintoneSource, KintoneSubtableSource]:
    """Turn a FieldRef into the concrete data source the renderer reads."""

    if isinstance(ref, RecordFieldRef):
        return KintoneSource(field_code=ref.field_code)
    if isinstance(ref, StaticTextRef):
        return StaticSource(value=ref.text)
    if isinstance(ref, ImageUrlRef):
        return StaticSource(value=ref.url)
    if isinstance(ref, SubtableRef):
        return KintoneSubtableSource(field_code=ref.field_code)
    if isinstance(ref, SubtableFieldRef):
        return KintoneSource(field_code=ref.field_code)
    return StaticSource(value="")


def has_static_text(element: Optional[ElementBase]) -> bool:
    if element is None:
        return False
    source = getattr(element, "data_source", None)
    if isinstance(source, StaticSource) and source.value.strip():
        return True
    text = getattr(element, "text", None)
    return isinstance(text, str) and text.strip() != ""


def _convert(element: Element, cls: type) -> Element:
    """Rebuild ``element`` as ``cls`` keeping identity, geometry and extras."""

    data = element.model_dump(exclude={"type"}, exclude_none=True)
    if cls is ImageElement:
        for key in _TEXT_ONLY_KEYS:
            data.pop(key, None)
    if cls is LabelElement:
        data.pop("data_source", None)
        data["text"] = data.get("text") or ""
    return cls.model_validate(data)


def _fill_geometry(element: Element, fallback: Geometry, defaults: Dict[str, object]) -> Dict[str, object]:
    """Updates that fill unset size and style attributes from the fallback."""

    updates: Dict[str, object] = {}
    for name in ("width", "height"):
        if getattr(element, name, None) is None:
            value = getattr(fallback, name)
            updates[name] = value if value is not None else defaults.get(name)
    for name, value in fallback.style().items():
        if getattr(element, name, None) is None:
            updates[name] = value
    for name, value in defaults.items():
        if name not in updates and hasattr(element, name) and getattr(element, name) is None:
            updates[name] = value
    return updates


def _clamped_y(element: Element, region_id: str, bounds: RegionBounds, updates: Dict[str, object]) -> object:
    height = updates.get("height", element.height)
    return clamp_y_to_region(element.y, region_id, bounds, height=height)


def _new_element(slot: SlotDef, region_id: str, bounds: RegionBounds) -> Element:
    fallback = slot.fallback
    if slot.element_type == "image":
        cls, defaults = ImageElement, IMAGE_DEFAULTS
    else:
        cls, defaults = TextElement, TEXT_DEFAULTS
    values: Dict[str, object] = dict(defaults)
    values.update({"width": fallback.width or defaults["width"], "height": fallback.height or defaults["height"]})
    values.update(fallback.style())
    if cls is ImageElement:
        for key in _TEXT_ONLY_KEYS:
            values.pop(key, None)
    y = clamp_y_to_region(fallback.y, region_id, bounds, height=values["height"])
    return cls(id=slot.id, slot_id=slot.id, region=region_id, x=fallback.x, y=y, **values)


def reconcile_slot(
    index: ElementIndex,
    slot: SlotDef,
    region_id: str,
    ref: Optional[FieldRef],
    bounds: RegionBounds,
) -> Element:
    """Patch or create the element for one schema slot and return it."""

    usable = ref if ref is not None and ref.kind in slot.allowed_sources else None
    if ref is not None and usable is None:
        LOGGER.debug("Slot %s.%s ignores %s binding", region_id, slot.id, ref.kind)

    existing = index.locate(slot.id)
    if existing is None:
        element = _new_element(slot, region_id, bounds)
        updates = {"data_source": resolve_data_source(usable), "hidden": not is_bound(usable)}
        if index.get(slot.id) is not None:
            # the slot id is taken by an element bound to another slot
            updates["id"] = index.unique_id(slot.id)
        element = element.model_copy(update=updates)
        index.put(element)
        return element

    target_cls = ImageElement if slot.element_type == "image" else TextElement
    base = existing if isinstance(existing, target_cls) else _convert(existing, target_cls)
    defaults = IMAGE_DEFAULTS if target_cls is ImageElement else TEXT_DEFAULTS

    updates = _fill_geometry(base, slot.fallback, defaults)
    updates.update({"slot_id": slot.id, "region": region_id})
    updates["y"] = _clamped_y(base, region_id, bounds, updates)
    if usable is not None:
        updates["data_source"] = resolve_data_source(usable)
        updates["hidden"] = not is_bound(usable)
        if isinstance(base, TextElement):
            updates["text"] = None
    else:
        updates["hidden"] = not has_static_text(base)

    element = base.model_copy(update=updates)
    index.put(element, replacing=existing)
    return element


def companion_fallback(companion: CompanionDef, anchor: Optional[Element], anchor_fallback: Geometry) -> Geometry:
    """Place a companion right of its anchor, sharing the anchor's top and height."""

    if anchor is not None:
        x, y = anchor.x, anchor.y
        width = anchor.width if anchor.width is not None else anchor_fallback.width or TEXT_DEFAULTS["width"]
        height = anchor.height if anchor.height is not None else anchor_fallback.height
    else:
        x, y = anchor_fallback.x, anchor_fallback.y
        width = anchor_fallback.width or TEXT_DEFAULTS["width"]
        height = anchor_fallback.height
    return Geometry(
        x=x + width + companion.gap,
        y=y,
        width=companion.width,
        height=height or TEXT_DEFAULTS["height"],
        font_size=companion.font_size,
    )


def apply_companion(
    index: ElementIndex,
    companion: CompanionDef,
    ref: Optional[FieldRef],
    bounds: RegionBounds,
    anchor_fallback: Geometry,
) -> Optional[Element]:
    """Show the companion when it has content, otherwise remove it from the tree."""

    usable = ref if ref is not None and ref.kind in companion.allowed_sources else None
    existing = index.locate(companion.id)
    shown = is_bound(usable) if usable is not None else has_static_text(existing)
    if not shown:
        removed = index.remove_where(lambda e: e.id == companion.id or e.slot_id == companion.id)
        if removed:
            LOGGER.debug("Removed empty companion %s", companion.id)
        return None

    anchor = index.locate(companion.anchor_slot)
    slot = SlotDef(
        id=companion.id,
        label=companion.id,
        kind="text",
        fallback=companion_fallback(companion, anchor, anchor_fallback),
        allowed_sources=companion.allowed_sources,
    )
    return reconcile_slot(index, slot, companion.region, usable, bounds)


def upsert_fixed_label(index: ElementIndex, label: FixedLabelDef, bounds: RegionBounds) -> LabelElement:
    """Write the schema caption, keeping existing geometry, visibility and extras."""

    existing = index.get(label.id)
    if existing is None:
        fallback = label.fallback
        values: Dict[str, object] = {
            "width": fallback.width or TEXT_DEFAULTS["width"],
            "height": fallback.height or TEXT_DEFAULTS["height"],
            "font_size": TEXT_DEFAULTS["font_size"],
        }
        values.update(fallback.style())
        element = LabelElement(
            id=label.id,
            slot_id=label.slot_id,
            region=label.region,
            x=fallback.x,
            y=clamp_y_to_region(fallback.y, label.region, bounds, height=values["height"]),
            text=label.text,
            **values,
        )
        index.put(element)
        return element

    base = existing if isinstance(existing, LabelElement) else _convert(existing, LabelElement)
    updates = _fill_geometry(base, label.fallback, {"font_size": TEXT_DEFAULTS["font_size"]})
    updates.update({"text": label.text, "region": label.region})
    if label.slot_id is not None:
        updates["slot_id"] = label.slot_id
    updates["y"] = _clamped_y(base, label.region, bounds, updates)
    element = base.model_copy(update=updates)
    index.put(element, replacing=existing)
    return element


def keep_single(index: ElementIndex, element_type: str, canonical_id: str) -> Optional[Element]:
    """Drop surplus elements of ``element_type``; the canonical id wins, else the first."""

    candidates = index.of_type(element_type)
    if not candidates:
        return None
    keep = next((e for e in candidates if e.id == canonical_id), candidates[0])
    dropped = index.remove_where(lambda e: e.type == element_type and e is not keep)
    if dropped:
        LOGGER.info("Dropped %d surplus %s element(s), kept %r", dropped, element_type, keep.id)
    return keep


def _base_element(index: ElementIndex, element_type: str, canonical_id: str) -> Optional[Element]:
    at_id = index.get(canonical_id)
    if at_id is not None and at_id.type == element_type:
        return at_id
    candidates = index.of_type(element_type)
    return candidates[0] if candidates else None


def find_summary_column(region: TableRegion, table: TableMapping) -> Optional[TableColumn]:
    """Column that feeds subtotal and total rows, or None when nothing matches."""

    bound = [column for column in table.columns if column.field_code]
    target = table.summary.target if table.summary else None
    if target is not None and target.field_code:
        for column in bound:
            if column.field_code == target.field_code:
                return column
    for column in bound:
        if column.id == region.summary_column_id:
            return column
    for column in bound:
        if column.field_code == region.summary_field_code:
            return column
    return None


def build_summary(region: TableRegion, table: TableMapping, previous: Optional[TableSummary]) -> Optional[TableSummary]:
    mode = table.resolved_summary_mode()
    if mode == "none":
        return None
    column = find_summary_column(region, table)
    if column is None:
        LOGGER.warning(
            "No amount column for table %r (looked for id %r or field %r); summary rows skipped",
            region.element_id,
            region.summary_column_id,
            region.summary_field_code,
            extra={"dedupe": True},
        )
        return None

    row = SummaryRow(
        field_code=column.field_code,
        column_id=column.id,
        kind="both" if mode == "everyPageSubtotal+lastTotal" else "total",
        label=region.summary_label_total,
        label_subtotal=region.summary_label_subtotal,
        label_total=region.summary_label_total,
    )
    style = previous.style if previous is not None and previous.style is not None else region.summary_style
    return TableSummary(mode=mode, rows=[row], style=style.model_copy())


def _render_columns(
    region: TableRegion,
    table: TableMapping,
    total_width: float,
    previous: Iterable[RenderColumn],
) -> List[RenderColumn]:
    columns = normalize_width_pct(table.columns)
    widths = allocate_pixel_widths([column.width_pct for column in columns], total_width)
    known = {column.id: column for column in previous}
    rendered: List[RenderColumn] = []
    for column, width in zip(columns, widths):
        values = {
            "id": column.id,
            "title": column.label or column.id,
            "field_code": column.field_code,
            "width": width,
            "align": column.align or "left",
            "min_font_size": region.min_font_size,
        }
        prior = known.get(column.id)
        rendered.append(prior.model_copy(update=values) if prior is not None else RenderColumn(**values))
    return rendered


def synthesize_table(
    index: ElementIndex,
    region: TableRegion,
    table: TableMapping,
    bounds: RegionBounds,
) -> Optional[TableElement]:
    """Emit the single table element for ``region``.

    Without a source binding or columns the existing table is left exactly
    as it is; only surplus table elements are dropped.
    """

    if not table.source_code or not table.columns:
        LOGGER.debug("Table %r has no source or columns; leaving it untouched", region.element_id)
        return keep_single(index, "table", region.element_id)

    base = _base_element(index, "table", region.element_id)
    fallback = region.fallback
    if isinstance(base, TableElement):
        element = base
    else:
        element = TableElement(id=region.element_id, x=fallback.x, y=fallback.y)
        base = None

    width = element.width if element.width is not None else fallback.width
    updates: Dict[str, object] = {
        "id": region.element_id,
        "region": "body",
        "width": width,
        "data_source": KintoneSubtableSource(field_code=table.source_code),
        "columns": _render_columns(region, table, width, element.columns),
        "summary": build_summary(region, table, element.summary),
    }
    defaults = {
        "row_height": region.row_height,
        "header_height": region.header_height,
        "show_grid": True,
        "border_width": region.border_width,
        "border_color_gray": region.border_color_gray,
    }
    for name, value in defaults.items():
        if getattr(element, name) is None and value is not None:
            updates[name] = value
    updates["y"] = clamp_y_to_region(element.y, "body", bounds)

    result = element.model_copy(update=updates)
    index.put(result, replacing=base)
    index.remove_where(lambda e: e.type == "table" and e is not result)
    return result


def synthesize_card_list(
    index: ElementIndex,
    region: CardListRegion,
    card_list: Optional[CardListMapping],
    bounds: RegionBounds,
) -> Optional[CardListElement]:
    """Emit the single card list element; a no-op while the source is unbound."""

    if card_list is None or not card_list.source_code:
        LOGGER.debug("Card list %r has no source; leaving it untouched", region.element_id)
        return keep_single(index, "cardList", region.element_id)

    base = _base_element(index, "cardList", region.element_id)
    fallback = region.fallback
    if isinstance(base, CardListElement):
        element = base
    else:
        element = CardListElement(id=region.element_id, x=fallback.x, y=fallback.y)
        base = None

    fields = []
    for card_field in region.fields:
        ref = card_list.fields.get(card_field.id)
        code = ref.field_code if isinstance(ref, SubtableFieldRef) else ""
        fields.append(CardField(id=card_field.id, label=card_field.label, field_code=code))

    updates: Dict[str, object] = {
        "id": region.element_id,
        "region": "body",
        "data_source": KintoneSubtableSource(field_code=card_list.source_code),
        "fields": fields,
    }
    defaults = {
        "width": fallback.width,
        "card_height": region.card_height,
        "gap_y": region.gap_y,
        "padding": region.padding,
        "border_width": fallback.border_width,
        "corner_radius": region.corner_radius,
    }
    for name, value in defaults.items():
        if getattr(element, name) is None and value is not None:
            updates[name] = value
    updates["y"] = clamp_y_to_region(element.y, "body", bounds)

    result = element.model_copy(update=updates)
    index.put(result, replacing=base)
    index.remove_where(lambda e: e.type == "cardList" and e is not result)
    return result


__all__ = [
    "Element",
    "ElementIndex",
    "apply_companion",
    "build_summary",
    "companion_fallback",
    "find_summary_column",
    "has_static_text",
    "keep_single",
    "reconcile_slot",
    "resolve_data_source",
    "synthesize_card_list",
    "synthesize_table",
    "upsert_fixed_label",
]
