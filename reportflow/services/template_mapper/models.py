"""Render-ready element tree and document models exchanged with the renderer."""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Number = Union[int, float]
RegionName = Literal["header", "body", "footer"]
Align = Literal["left", "center", "right"]
FontWeight = Literal["normal", "bold"]


class WireModel(BaseModel):
    """Base for records crossing the editor / renderer boundary.

    Field names are snake_case in Python and camelCase on the wire. Unknown
    keys are kept so styling tweaks made elsewhere survive a round trip.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class StaticSource(WireModel):
    type: Literal["static"] = "static"
    value: str = ""


class KintoneSource(WireModel):
    type: Literal["kintone"] = "kintone"
    field_code: str = ""


class KintoneSubtableSource(WireModel):
    type: Literal["kintoneSubtable"] = "kintoneSubtable"
    field_code: str = ""


DataSource = Annotated[
    Union[StaticSource, KintoneSource, KintoneSubtableSource],
    Field(discriminator="type"),
]


class ElementBase(WireModel):
    id: str
    slot_id: Optional[str] = None
    region: Optional[RegionName] = None
    x: Number = 0
    y: Number = 0
    width: Optional[Number] = None
    height: Optional[Number] = None
    hidden: Optional[bool] = None
    repeat_on_every_page: Optional[bool] = None
    border_width: Optional[Number] = None
    border_color_gray: Optional[Number] = None
    fill_gray: Optional[Number] = None


class TextElement(ElementBase):
    type: Literal["text"] = "text"
    font_size: Optional[Number] = None
    font_weight: Optional[FontWeight] = None
    align_x: Optional[Align] = None
    text: Optional[str] = None
    data_source: Optional[DataSource] = None


class LabelElement(ElementBase):
    type: Literal["label"] = "label"
    font_size: Optional[Number] = None
    font_weight: Optional[FontWeight] = None
    align_x: Optional[Align] = None
    text: str = ""


class ImageElement(ElementBase):
    type: Literal["image"] = "image"
    data_source: Optional[DataSource] = None


class RenderColumn(WireModel):
    """Table column with an absolute width in canvas pixels."""

    id: str
    title: str = ""
    field_code: str = ""
    width: Number = 0
    align: Optional[Align] = None
    min_font_size: Optional[Number] = None


class SummaryRow(WireModel):
    op: Literal["sum"] = "sum"
    field_code: str
    column_id: str
    kind: Literal["subtotal", "total", "both"] = "total"
    label: Optional[str] = None
    label_subtotal: Optional[str] = None
    label_total: Optional[str] = None


class SummaryStyle(WireModel):
    subtotal_fill_gray: Optional[Number] = None
    total_fill_gray: Optional[Number] = None
    total_top_border_width: Optional[Number] = None
    border_color_gray: Optional[Number] = None


class TableSummary(WireModel):
    mode: Literal["lastPageOnly", "everyPageSubtotal+lastTotal"] = "lastPageOnly"
    rows: List[SummaryRow] = Field(default_factory=list)
    style: Optional[SummaryStyle] = None


class TableElement(ElementBase):
    type: Literal["table"] = "table"
    row_height: Optional[Number] = None
    header_height: Optional[Number] = None
    show_grid: Optional[bool] = None
    data_source: Optional[KintoneSubtableSource] = None
    columns: List[RenderColumn] = Field(default_factory=list)
    summary: Optional[TableSummary] = None


class CardField(WireModel):
    id: str
    label: Optional[str] = None
    field_code: str = ""


class CardListElement(ElementBase):
    type: Literal["cardList"] = "cardList"
    card_height: Optional[Number] = None
    gap_y: Optional[Number] = None
    padding: Optional[Number] = None
    corner_radius: Optional[Number] = None
    data_source: Optional[KintoneSubtableSource] = None
    fields: List[CardField] = Field(default_factory=list)


TemplateElement = Annotated[
    Union[TextElement, LabelElement, ImageElement, TableElement, CardListElement],
    Field(discriminator="type"),
]


class RegionBand(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    y_top: Number
    y_bottom: Number


class RegionBounds(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    header: RegionBand
    body: RegionBand
    footer: RegionBand

    def band(self, region: str) -> RegionBand:
        return getattr(self, region)


class TemplateDocument(WireModel):
    """A document: page setup, current element tree and its field mapping."""

    id: str = ""
    name: str = ""
    structure_type: Optional[str] = None
    page_size: str = "A4"
    orientation: Literal["portrait", "landscape"] = "portrait"
    elements: List[TemplateElement] = Field(default_factory=list)
    mapping: Optional[Dict[str, Any]] = None
    region_bounds: Optional[RegionBounds] = None
    footer_reserve_height: Optional[Number] = None


__all__ = [
    "CardField",
    "CardListElement",
    "DataSource",
    "ElementBase",
    "ImageElement",
    "KintoneSource",
    "KintoneSubtableSource",
    "LabelElement",
    "RegionBand",
    "RegionBounds",
    "RenderColumn",
    "StaticSource",
    "SummaryRow",
    "SummaryStyle",
    "TableElement",
    "TableSummary",
    "TemplateDocument",
    "TemplateElement",
    "TextElement",
    "WireModel",
]
