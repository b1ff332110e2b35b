"""Field catalogs used to offer FieldRef choices to the user.

The compiler never reads a catalog; these builders normalize the shapes
returned by record-schema discovery into one model.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SUBTABLE_TYPE = "SUBTABLE"


class _CatalogModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldOption(_CatalogModel):
    code: str
    label: str
    type: Optional[str] = None


class SubtableOption(_CatalogModel):
    code: str
    label: str
    fields: List[FieldOption] = Field(default_factory=list)
    type: Optional[str] = None

    def field_codes(self) -> List[str]:
        return [option.code for option in self.fields]


class FieldCatalog(_CatalogModel):
    record_fields: List[FieldOption] = Field(default_factory=list)
    subtables: List[SubtableOption] = Field(default_factory=list)

    def subtable(self, code: str) -> Optional[SubtableOption]:
        return next((option for option in self.subtables if option.code == code), None)

    def record_field_codes(self) -> List[str]:
        return [option.code for option in self.record_fields]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _kind(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def build_catalog_from_properties(properties: Optional[Mapping[str, Any]]) -> FieldCatalog:
    """Build a catalog from kintone form properties, where subtables nest their fields."""

    if not isinstance(properties, Mapping):
        return FieldCatalog()

    record_fields: List[FieldOption] = []
    subtables: List[SubtableOption] = []
    for prop in properties.values():
        if not isinstance(prop, Mapping):
            continue
        code = _text(prop.get("code"))
        if not code:
            continue
        label = _text(prop.get("label")) or code
        kind = _kind(prop.get("type"))
        nested = prop.get("fields")
        if kind == SUBTABLE_TYPE and isinstance(nested, Mapping):
            fields = []
            for sub in nested.values():
                sub_code = _text(sub.get("code")) if isinstance(sub, Mapping) else ""
                if not sub_code:
                    continue
                sub_label = _text(sub.get("label")) or sub_code
                fields.append(FieldOption(code=sub_code, label=sub_label, type=_kind(sub.get("type"))))
            subtables.append(SubtableOption(code=code, label=label, fields=fields, type=kind))
            continue
        record_fields.append(FieldOption(code=code, label=label, type=kind))
    return FieldCatalog(record_fields=record_fields, subtables=subtables)


def build_catalog_from_flat_fields(fields: Optional[Iterable[Mapping[str, Any]]]) -> FieldCatalog:
    """Build a catalog from a flat field list using ``isSubtable`` and ``subtableCode``.

    A subtable member whose parent was not listed creates the parent on demand.
    """

    record_fields: List[FieldOption] = []
    subtables: Dict[str, SubtableOption] = {}
    for entry in fields or ():
        if not isinstance(entry, Mapping):
            continue
        code = _text(entry.get("code"))
        if not code:
            continue
        label = _text(entry.get("label")) or code
        kind = _kind(entry.get("type"))

        if kind == SUBTABLE_TYPE:
            subtables.setdefault(code, SubtableOption(code=code, label=label, type=kind))
            continue
        if entry.get("isSubtable"):
            parent_code = _text(entry.get("subtableCode"))
            if not parent_code:
                continue
            parent = subtables.setdefault(parent_code, SubtableOption(code=parent_code, label=parent_code))
            parent.fields.append(FieldOption(code=code, label=label, type=kind))
            continue
        record_fields.append(FieldOption(code=code, label=label, type=kind))
    return FieldCatalog(record_fields=record_fields, subtables=list(subtables.values()))


def extract_catalog_from_sample_data(sample: Optional[Mapping[str, Any]]) -> FieldCatalog:
    """Guess a catalog from one sample record: lists of objects become subtables."""

    if not isinstance(sample, Mapping):
        return FieldCatalog()

    record_fields: List[FieldOption] = []
    subtables: List[SubtableOption] = []
    for key, value in sample.items():
        if isinstance(value, list):
            first = value[0] if value else None
            if isinstance(first, Mapping):
                columns = [FieldOption(code=str(name), label=str(name)) for name in first]
                subtables.append(SubtableOption(code=str(key), label=str(key), fields=columns))
            continue
        record_fields.append(FieldOption(code=str(key), label=str(key)))
    return FieldCatalog(record_fields=record_fields, subtables=subtables)


__all__ = [
    "FieldCatalog",
    "FieldOption",
    "SubtableOption",
    "build_catalog_from_flat_fields",
    "build_catalog_from_properties",
    "extract_catalog_from_sample_data",
]
