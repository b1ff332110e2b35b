"""User-editable field mappings.

A mapping binds schema slots and table columns to data sources and carries
no geometry. Parsing is lenient: malformed references become unbound,
malformed column entries are dropped, so a half-edited mapping can always
be validated and synthesized.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .field_refs import FieldRef, SubtableFieldRef, SubtableRef, coerce_field_ref

LOGGER = logging.getLogger(__name__)

SUMMARY_MODES = ("none", "lastPageOnly", "everyPageSubtotal+lastTotal")
DEFAULT_SUMMARY_MODE = "lastPageOnly"
_ALIGN_VALUES = {"left", "center", "right"}
_FORMAT_VALUES = {"text", "number", "currency", "date"}


class _MappingModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


def _coerce_slot_map(value: Any) -> Dict[str, Optional[FieldRef]]:
    if not isinstance(value, Mapping):
        return {}
    return {str(key): coerce_field_ref(ref) for key, ref in value.items()}


def _coerce_kind(value: Any, kind: type) -> Any:
    ref = coerce_field_ref(value)
    return ref if isinstance(ref, kind) else None


class TableColumn(_MappingModel):
    """Mapping-side table column; ``widthPct`` is relative, not pixels."""

    id: str = ""
    label: str = ""
    value: Optional[FieldRef] = None
    width_pct: float = 0
    align: Optional[str] = None
    format: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def _value(cls, value: Any) -> Any:
        return coerce_field_ref(value)

    @field_validator("id", "label", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("width_pct", mode="before")
    @classmethod
    def _width(cls, value: Any) -> float:
        if isinstance(value, bool):
            return 0.0
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    @field_validator("align", mode="before")
    @classmethod
    def _align(cls, value: Any) -> Optional[str]:
        return value if value in _ALIGN_VALUES else None

    @field_validator("format", mode="before")
    @classmethod
    def _format(cls, value: Any) -> Optional[str]:
        return value if value in _FORMAT_VALUES else None

    @property
    def field_code(self) -> str:
        """Bound subtable field code, empty when the value is not a subtable field."""

        if isinstance(self.value, SubtableFieldRef):
            return self.value.field_code
        return ""


def _optional_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class TableSummaryConfig(_MappingModel):
    mode: Optional[str] = None
    target: Optional[SubtableFieldRef] = None
    footer_enabled: Optional[bool] = None

    @field_validator("mode", mode="before")
    @classmethod
    def _mode(cls, value: Any) -> Optional[str]:
        return _optional_text(value)

    @field_validator("footer_enabled", mode="before")
    @classmethod
    def _footer_enabled(cls, value: Any) -> Optional[bool]:
        return value if isinstance(value, bool) else None

    @field_validator("target", mode="before")
    @classmethod
    def _target(cls, value: Any) -> Any:
        return _coerce_kind(value, SubtableFieldRef)


class TableMapping(_MappingModel):
    source: Optional[SubtableRef] = None
    columns: List[TableColumn] = Field(default_factory=list)
    summary_mode: Optional[str] = None
    summary: Optional[TableSummaryConfig] = None

    @field_validator("source", mode="before")
    @classmethod
    def _source(cls, value: Any) -> Any:
        return _coerce_kind(value, SubtableRef)

    @field_validator("columns", mode="before")
    @classmethod
    def _columns(cls, value: Any) -> List[Any]:
        if not isinstance(value, (list, tuple)):
            return []
        return [col for col in value if isinstance(col, (Mapping, TableColumn))]

    @field_validator("summary_mode", mode="before")
    @classmethod
    def _summary_mode(cls, value: Any) -> Optional[str]:
        return _optional_text(value)

    @field_validator("summary", mode="before")
    @classmethod
    def _summary(cls, value: Any) -> Any:
        return value if isinstance(value, (Mapping, TableSummaryConfig)) else None

    @property
    def source_code(self) -> str:
        return self.source.field_code.strip() if self.source else ""

    def resolved_summary_mode(self) -> str:
        """``summaryMode`` wins over ``summary.mode``; unknown values fall back to the default."""

        raw = self.summary_mode or (self.summary.mode if self.summary else None) or DEFAULT_SUMMARY_MODE
        return raw if raw in SUMMARY_MODES else DEFAULT_SUMMARY_MODE


class CardListMapping(_MappingModel):
    source: Optional[SubtableRef] = None
    fields: Dict[str, Optional[FieldRef]] = Field(default_factory=dict)

    @field_validator("source", mode="before")
    @classmethod
    def _source(cls, value: Any) -> Any:
        return _coerce_kind(value, SubtableRef)

    @field_validator("fields", mode="before")
    @classmethod
    def _fields(cls, value: Any) -> Dict[str, Optional[FieldRef]]:
        return _coerce_slot_map(value)

    @property
    def source_code(self) -> str:
        return self.source.field_code.strip() if self.source else ""


class DocumentMapping(_MappingModel):
    """Mapping for slot/table/card structures: ``{header, table, footer, cardList?}``."""

    header: Dict[str, Optional[FieldRef]] = Field(default_factory=dict)
    table: TableMapping = Field(default_factory=TableMapping)
    footer: Dict[str, Optional[FieldRef]] = Field(default_factory=dict)
    card_list: Optional[CardListMapping] = None

    @field_validator("header", "footer", mode="before")
    @classmethod
    def _slots(cls, value: Any) -> Dict[str, Optional[FieldRef]]:
        return _coerce_slot_map(value)

    @field_validator("table", mode="before")
    @classmethod
    def _table(cls, value: Any) -> Any:
        return value if isinstance(value, (Mapping, TableMapping)) else {}

    @field_validator("card_list", mode="before")
    @classmethod
    def _card_list(cls, value: Any) -> Any:
        return value if isinstance(value, (Mapping, CardListMapping)) else None

    def slots(self, region_id: str) -> Dict[str, Optional[FieldRef]]:
        value = getattr(self, region_id, None)
        return value if isinstance(value, dict) else {}

    def slot(self, region_id: str, slot_id: str) -> Optional[FieldRef]:
        return self.slots(region_id).get(slot_id)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def parse_document_mapping(raw: Any) -> DocumentMapping:
    """Parse a raw mapping; never raises."""

    if isinstance(raw, DocumentMapping):
        return raw
    if not isinstance(raw, Mapping):
        return DocumentMapping()
    try:
        return DocumentMapping.model_validate(dict(raw))
    except ValidationError as exc:
        LOGGER.warning("Mapping could not be parsed, treating it as empty: %s", exc)
        return DocumentMapping()


__all__ = [
    "CardListMapping",
    "DEFAULT_SUMMARY_MODE",
    "DocumentMapping",
    "SUMMARY_MODES",
    "TableColumn",
    "TableMapping",
    "TableSummaryConfig",
    "parse_document_mapping",
]
