"""Validation layer for field mappings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .field_refs import FieldRef, SubtableFieldRef, is_bound
from .mapping import DocumentMapping
from .schema import CardListRegion, SlotDef, SlotsRegion, StructureSchema, TableRegion

_SOURCE_LABELS = {
    "recordField": "a record field",
    "staticText": "static text",
    "imageUrl": "an image URL",
}


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    path: str
    message: str


@dataclass(slots=True)
class ValidationOutcome:
    """Container for validation results."""

    ok: bool
    errors: List[ValidationIssue] = field(default_factory=list)

    @classmethod
    def from_issues(cls, issues: List[ValidationIssue]) -> "ValidationOutcome":
        return cls(ok=not issues, errors=list(issues))

    def paths(self) -> List[str]:
        return [issue.path for issue in self.errors]


def slot_accepts(slot: SlotDef, ref: Optional[FieldRef]) -> bool:
    """True when ``ref`` is of a source kind the slot allows and carries a payload."""

    return ref is not None and ref.kind in slot.allowed_sources and is_bound(ref)


def _describe_sources(slot: SlotDef) -> str:
    return " or ".join(_SOURCE_LABELS.get(kind, kind) for kind in slot.allowed_sources)


def _validate_slots(region: SlotsRegion, mapping: DocumentMapping) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    bound = mapping.slots(region.id)
    for slot in region.slots:
        if not slot.required:
            continue
        if slot_accepts(slot, bound.get(slot.id)):
            continue
        issues.append(
            ValidationIssue(
                path=f"{region.id}.{slot.id}",
                message=f"{slot.label}: bind {_describe_sources(slot)}",
            )
        )
    return issues


def _validate_table(region: TableRegion, mapping: DocumentMapping) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    table = mapping.table
    if region.source_required and not table.source_code:
        issues.append(ValidationIssue(path=f"{region.id}.source", message="Select the subtable for the line items"))

    count = len(table.columns)
    if count < region.min_cols or count > region.max_cols:
        if region.min_cols == region.max_cols:
            expected = f"exactly {region.min_cols}"
        else:
            expected = f"between {region.min_cols} and {region.max_cols}"
        issues.append(
            ValidationIssue(path=f"{region.id}.columns", message=f"The table needs {expected} columns (got {count})")
        )

    for idx, column in enumerate(table.columns):
        if isinstance(column.value, SubtableFieldRef) and is_bound(column.value):
            continue
        name = column.label or column.id or f"#{idx + 1}"
        issues.append(
            ValidationIssue(
                path=f"{region.id}.columns.{idx}.value",
                message=f"Column {name}: select a subtable field",
            )
        )
    return issues


def _validate_card_list(region: CardListRegion, mapping: DocumentMapping) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    card_list = mapping.card_list
    if region.source_required and (card_list is None or not card_list.source_code):
        issues.append(ValidationIssue(path=f"{region.id}.source", message="Select the subtable for the cards"))

    fields = card_list.fields if card_list is not None else {}
    for card_field in region.fields:
        if not card_field.required:
            continue
        ref = fields.get(card_field.id)
        if isinstance(ref, SubtableFieldRef) and is_bound(ref):
            continue
        issues.append(
            ValidationIssue(
                path=f"{region.id}.fields.{card_field.id}",
                message=f"{card_field.label}: select a subtable field",
            )
        )
    return issues


def validate_mapping(schema: StructureSchema, mapping: Optional[DocumentMapping]) -> ValidationOutcome:
    """Check ``mapping`` against ``schema``. Never raises and never mutates."""

    if mapping is None:
        return ValidationOutcome.from_issues([ValidationIssue(path="mapping", message="No mapping is set")])

    issues: List[ValidationIssue] = []
    for region in schema.regions:
        if isinstance(region, SlotsRegion):
            issues.extend(_validate_slots(region, mapping))
        elif isinstance(region, TableRegion):
            issues.extend(_validate_table(region, mapping))
        elif isinstance(region, CardListRegion):
            issues.extend(_validate_card_list(region, mapping))
    return ValidationOutcome.from_issues(issues)


__all__ = ["ValidationIssue", "ValidationOutcome", "slot_accepts", "validate_mapping"]
