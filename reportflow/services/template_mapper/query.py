"""Read-only queries over an element tree."""

from __future__ import annotations

import hashlib
import json
from typing import Any, Iterable, List, Optional

from .field_refs import FieldRef, ImageUrlRef, RecordFieldRef, StaticTextRef, SubtableFieldRef, SubtableRef
from .models import (
    CardListElement,
    ElementBase,
    KintoneSource,
    KintoneSubtableSource,
    StaticSource,
    TableElement,
)


def _subtable_code(element: ElementBase) -> str:
    source = getattr(element, "data_source", None)
    return source.field_code if isinstance(source, KintoneSubtableSource) else ""


def _matches_ref(element: ElementBase, ref: FieldRef) -> bool:
    source = getattr(element, "data_source", None)
    if isinstance(ref, RecordFieldRef):
        return isinstance(source, KintoneSource) and source.field_code == ref.field_code
    if isinstance(ref, StaticTextRef):
        return isinstance(source, StaticSource) and source.value == ref.text
    if isinstance(ref, ImageUrlRef):
        return isinstance(source, StaticSource) and source.value == ref.url
    if isinstance(ref, SubtableRef):
        return _subtable_code(element) == ref.field_code
    if isinstance(ref, SubtableFieldRef):
        if _subtable_code(element) != ref.subtable_code:
            return False
        if isinstance(element, TableElement):
            return any(column.field_code == ref.field_code for column in element.columns)
        if isinstance(element, CardListElement):
            return any(card_field.field_code == ref.field_code for card_field in element.fields)
    return False


def highlighted_element_ids(
    elements: Iterable[ElementBase],
    field_ref: Optional[FieldRef] = None,
    slot_id: Optional[str] = None,
) -> List[str]:
    """Ids of elements bound to ``slot_id`` or reading from ``field_ref``, in tree order."""

    matched: List[str] = []
    for element in elements:
        if slot_id and element.slot_id == slot_id:
            matched.append(element.id)
        elif field_ref is not None and _matches_ref(element, field_ref):
            matched.append(element.id)
    return matched


def normalized_elements(elements: Iterable[ElementBase]) -> List[dict[str, Any]]:
    """Wire form of the tree sorted by id, so ordering does not affect comparison."""

    wired = [element.to_wire() for element in elements]
    return sorted(wired, key=lambda item: (str(item.get("id", "")), json.dumps(item, sort_keys=True)))


def tree_signature(elements: Iterable[ElementBase]) -> str:
    payload = json.dumps(normalized_elements(elements), sort_keys=True, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


__all__ = ["highlighted_element_ids", "normalized_elements", "tree_signature"]
