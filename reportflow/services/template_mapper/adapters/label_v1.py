"""Label sheet. Layout is owned by the label renderer; only the mapping is kept."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..models import TemplateDocument
from ..validate import ValidationOutcome
from .base import StructureAdapter

LABEL_SLOTS = ("title", "code", "qty", "qr", "extra")


def _field_code(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class LabelMapping(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    slots: Dict[str, Optional[str]] = Field(default_factory=lambda: {slot: None for slot in LABEL_SLOTS})
    copies_field_code: Optional[str] = None

    @field_validator("slots", mode="before")
    @classmethod
    def _slots(cls, value: Any) -> Dict[str, Optional[str]]:
        source = value if isinstance(value, Mapping) else {}
        return {slot: _field_code(source.get(slot)) for slot in LABEL_SLOTS}

    @field_validator("copies_field_code", mode="before")
    @classmethod
    def _copies(cls, value: Any) -> Optional[str]:
        return _field_code(value)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class LabelV1Adapter(StructureAdapter):
    structure_type = "label_v1"

    def create_default_mapping(self) -> LabelMapping:
        return LabelMapping()

    def parse_mapping(self, raw: Any) -> LabelMapping:
        if isinstance(raw, LabelMapping):
            return raw
        source = raw if isinstance(raw, Mapping) else {}
        return LabelMapping.model_validate(
            {"slots": source.get("slots"), "copiesFieldCode": source.get("copiesFieldCode")}
        )

    def validate(self, raw_mapping: Any) -> ValidationOutcome:
        return ValidationOutcome(ok=True)

    def synthesize(self, document: TemplateDocument, raw_mapping: Any = None) -> TemplateDocument:
        mapping = self.parse_mapping(document.mapping if raw_mapping is None else raw_mapping)
        return document.model_copy(update={"structure_type": self.structure_type, "mapping": mapping.to_wire()})
