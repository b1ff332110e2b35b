"""Static schema catalog types: regions, slots, table and card list definitions.

Schemas are declared once per structure type and never mutated. Fallback
geometry is top-origin and is only used when an element is first created.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Tuple, Union

from .models import SummaryStyle

SlotKind = Literal["text", "date", "number", "currency", "image", "multiline"]
AllowedSource = Literal["recordField", "staticText", "imageUrl"]


@dataclass(frozen=True)
class Geometry:
    """Position plus default styling for a newly created element."""

    x: float
    y: float
    width: Optional[float] = None
    height: Optional[float] = None
    font_size: Optional[float] = None
    font_weight: Optional[str] = None
    align_x: Optional[str] = None
    border_width: Optional[float] = None
    border_color_gray: Optional[float] = None
    fill_gray: Optional[float] = None
    repeat_on_every_page: Optional[bool] = None

    def style(self) -> Dict[str, Any]:
        """Non-geometry attributes that are set, keyed by element field name."""

        names = (
            "font_size",
            "font_weight",
            "align_x",
            "border_width",
            "border_color_gray",
            "fill_gray",
            "repeat_on_every_page",
        )
        return {name: getattr(self, name) for name in names if getattr(self, name) is not None}


@dataclass(frozen=True)
class SlotDef:
    id: str
    label: str
    kind: SlotKind
    fallback: Geometry
    required: bool = False
    allowed_sources: Tuple[AllowedSource, ...] = ("recordField",)

    @property
    def element_type(self) -> str:
        return "image" if self.kind == "image" else "text"


@dataclass(frozen=True)
class SlotsRegion:
    id: str
    label: str
    slots: Tuple[SlotDef, ...]
    kind: Literal["slots"] = "slots"


@dataclass(frozen=True)
class BaseColumnDef:
    id: str
    label: str
    kind: SlotKind
    default_width_pct: int
    required: bool = False


@dataclass(frozen=True)
class TableRegion:
    id: str
    label: str
    source_required: bool
    min_cols: int
    max_cols: int
    base_columns: Tuple[BaseColumnDef, ...]
    fallback: Geometry
    element_id: str = "items"
    row_height: float = 20
    header_height: float = 24
    border_width: Optional[float] = None
    border_color_gray: Optional[float] = None
    min_font_size: Optional[float] = None
    summary_column_id: str = "amount"
    summary_field_code: str = "Amount"
    summary_label_subtotal: str = "小計"
    summary_label_total: str = "合計"
    summary_style: SummaryStyle = field(default_factory=SummaryStyle)
    kind: Literal["table"] = "table"


@dataclass(frozen=True)
class CardFieldDef:
    id: str
    label: str
    kind: SlotKind = "text"
    required: bool = False


@dataclass(frozen=True)
class CardListRegion:
    id: str
    label: str
    source_required: bool
    fields: Tuple[CardFieldDef, ...]
    fallback: Geometry
    element_id: str = "cards"
    card_height: float = 90
    gap_y: float = 8
    padding: float = 8
    corner_radius: float = 4
    kind: Literal["cardList"] = "cardList"


RegionDef = Union[SlotsRegion, TableRegion, CardListRegion]


@dataclass(frozen=True)
class CompanionDef:
    """Decorative element placed right of an anchor slot and removed when empty."""

    id: str
    region: str
    anchor_slot: str
    allowed_sources: Tuple[AllowedSource, ...] = ("staticText", "recordField")
    gap: float = 6
    width: float = 24
    font_size: float = 9


@dataclass(frozen=True)
class FixedLabelDef:
    """Non-bindable caption, always present with schema text."""

    id: str
    region: str
    text: str
    fallback: Geometry
    slot_id: Optional[str] = None


@dataclass(frozen=True)
class StructureSchema:
    structure_type: str
    version: int
    regions: Tuple[RegionDef, ...]
    companions: Tuple[CompanionDef, ...] = ()
    fixed_labels: Tuple[FixedLabelDef, ...] = ()

    def slot_regions(self) -> Tuple[SlotsRegion, ...]:
        return tuple(r for r in self.regions if isinstance(r, SlotsRegion))

    def card_list_region(self) -> Optional[CardListRegion]:
        return next((r for r in self.regions if isinstance(r, CardListRegion)), None)


__all__ = [
    "AllowedSource",
    "BaseColumnDef",
    "CardFieldDef",
    "CardListRegion",
    "CompanionDef",
    "FixedLabelDef",
    "Geometry",
    "RegionDef",
    "SlotDef",
    "SlotKind",
    "SlotsRegion",
    "StructureSchema",
    "TableRegion",
]
