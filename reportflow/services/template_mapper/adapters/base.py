from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from pydantic import BaseModel

from ..field_refs import FieldRef
from ..mapping import CardListMapping, DocumentMapping, TableMapping, DEFAULT_SUMMARY_MODE, parse_document_mapping
from ..models import TemplateDocument
from ..regions import resolve_region_bounds
from ..schema import CardListRegion, Geometry, RegionDef, SlotsRegion, StructureSchema, TableRegion
from ..synthesis import (
    ElementIndex,
    apply_companion,
    reconcile_slot,
    synthesize_card_list,
    synthesize_table,
    upsert_fixed_label,
)
from ..validate import ValidationOutcome, validate_mapping

LOGGER = logging.getLogger(__name__)


class StructureAdapter(ABC):
    """Schema, validator and synthesizer for one structure type."""

    structure_type: str = ""

    @property
    def regions(self) -> Tuple[RegionDef, ...]:
        return ()

    @abstractmethod
    def create_default_mapping(self) -> BaseModel:
        """Mapping used when a document is first given this structure type."""

    @abstractmethod
    def parse_mapping(self, raw: Any) -> BaseModel:
        """Normalize a raw mapping; malformed parts become unbound."""

    @abstractmethod
    def validate(self, raw_mapping: Any) -> ValidationOutcome:
        """Report what the user still has to bind. Never raises."""

    @abstractmethod
    def synthesize(self, document: TemplateDocument, raw_mapping: Any = None) -> TemplateDocument:
        """Return a new document whose element tree reflects the mapping."""


class RegionAdapter(StructureAdapter):
    """Adapter driven entirely by a :class:`StructureSchema`.

    Subclasses declare ``schema`` plus default bindings and may override
    ``_prepare`` and ``_finalize`` for structure specific cleanup.
    """

    schema: StructureSchema
    default_header: Dict[str, FieldRef] = {}
    default_footer: Dict[str, FieldRef] = {}

    @property
    def structure_type(self) -> str:  # type: ignore[override]
        return self.schema.structure_type

    @property
    def regions(self) -> Tuple[RegionDef, ...]:
        return self.schema.regions

    def create_default_mapping(self) -> DocumentMapping:
        mapping = DocumentMapping(
            header=dict(self.default_header),
            table=TableMapping(columns=[], summary_mode=DEFAULT_SUMMARY_MODE),
            footer=dict(self.default_footer),
        )
        if self.schema.card_list_region() is not None:
            mapping = mapping.model_copy(update={"card_list": CardListMapping()})
        return mapping

    def parse_mapping(self, raw: Any) -> DocumentMapping:
        return parse_document_mapping(raw)

    def validate(self, raw_mapping: Any) -> ValidationOutcome:
        mapping = None if raw_mapping is None else self.parse_mapping(raw_mapping)
        return validate_mapping(self.schema, mapping)

    def synthesize(self, document: TemplateDocument, raw_mapping: Any = None) -> TemplateDocument:
        mapping = self.parse_mapping(document.mapping if raw_mapping is None else raw_mapping)
        bounds = resolve_region_bounds(document)
        index = ElementIndex(document.elements)

        self._prepare(index, mapping)
        for region in self.schema.regions:
            if isinstance(region, SlotsRegion):
                for slot in region.slots:
                    reconcile_slot(index, slot, region.id, mapping.slot(region.id, slot.id), bounds)
            elif isinstance(region, TableRegion):
                synthesize_table(index, region, mapping.table, bounds)
            elif isinstance(region, CardListRegion):
                synthesize_card_list(index, region, mapping.card_list, bounds)

        for companion in self.schema.companions:
            ref = mapping.slot(companion.region, companion.id)
            apply_companion(index, companion, ref, bounds, self._slot_fallback(companion.anchor_slot))

        for label in self.schema.fixed_labels:
            upsert_fixed_label(index, label, bounds)
        self._finalize(index, mapping)

        LOGGER.debug("Synthesized %s: %d elements", self.structure_type, len(index))
        return document.model_copy(
            update={
                "structure_type": self.structure_type,
                "mapping": mapping.to_wire(),
                "elements": index.values(),
            }
        )

    def _slot_fallback(self, slot_id: str) -> Geometry:
        for region in self.schema.slot_regions():
            for slot in region.slots:
                if slot.id == slot_id:
                    return slot.fallback
        return Geometry(x=0, y=0)

    def _prepare(self, index: ElementIndex, mapping: DocumentMapping) -> None:
        """Hook run before reconciliation, used for legacy element cleanup."""

    def _finalize(self, index: ElementIndex, mapping: DocumentMapping) -> None:
        """Hook run after all regions, companions and labels are in place."""


__all__ = ["RegionAdapter", "StructureAdapter"]
