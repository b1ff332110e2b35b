"""Itemized list: bindable captions, 3 to 8 columns, optional totals."""

from __future__ import annotations

from ..field_refs import static_text
from ..mapping import DocumentMapping
from ..models import LabelElement, SummaryStyle
from ..schema import BaseColumnDef, CompanionDef, Geometry, SlotDef, SlotsRegion, StructureSchema, TableRegion
from ..synthesis import Element, ElementIndex
from .base import RegionAdapter

CAPTION_SOURCES = ("staticText", "recordField")

DOC_TITLE = SlotDef(
    "doc_title",
    "タイトル",
    "text",
    Geometry(x=50, y=45, width=320, height=32, font_size=24, font_weight="bold"),
    allowed_sources=CAPTION_SOURCES,
)
TO_NAME = SlotDef(
    "to_name",
    "宛先名",
    "text",
    Geometry(x=50, y=106, width=300, height=24, font_size=12, font_weight="bold"),
    required=True,
)
DATE_LABEL = SlotDef(
    "date_label",
    "日付ラベル",
    "text",
    Geometry(x=350, y=106, width=50, height=24, font_size=12),
    allowed_sources=CAPTION_SOURCES,
)
ISSUE_DATE = SlotDef(
    "issue_date",
    "日付",
    "date",
    Geometry(x=410, y=106, width=160, height=24, font_size=12),
    required=True,
)
DOC_NO = SlotDef("doc_no", "文書番号", "text", Geometry(x=350, y=80, width=220, height=20, font_size=10))
LOGO = SlotDef(
    "logo",
    "ロゴ",
    "image",
    Geometry(x=450, y=20, width=120, height=50),
    allowed_sources=("imageUrl",),
)

HEADER = SlotsRegion(id="header", label="Header", slots=(DOC_TITLE, TO_NAME, DATE_LABEL, ISSUE_DATE, DOC_NO, LOGO))

REMARKS = SlotDef(
    "remarks",
    "備考",
    "multiline",
    Geometry(x=50, y=700, width=220, height=80, font_size=10),
    allowed_sources=("recordField", "staticText"),
)
TOTAL_LABEL = SlotDef(
    "total_label",
    "合計ラベル",
    "text",
    Geometry(x=280, y=744, width=80, height=20, font_size=10),
    allowed_sources=("recordField", "staticText"),
)
TOTAL = SlotDef(
    "total",
    "合計",
    "currency",
    Geometry(x=370, y=740, width=200, height=24, font_size=14, font_weight="bold", align_x="right"),
)

TABLE = TableRegion(
    id="table",
    label="明細テーブル",
    source_required=True,
    min_cols=3,
    max_cols=8,
    base_columns=(
        BaseColumnDef("item_name", "品名", "text", 52, required=True),
        BaseColumnDef("qty", "数量", "number", 12),
        BaseColumnDef("unit_price", "単価", "currency", 18),
        BaseColumnDef("amount", "金額", "currency", 18),
    ),
    fallback=Geometry(x=50, y=260, width=520),
    summary_style=SummaryStyle(
        subtotal_fill_gray=0.96,
        total_fill_gray=0.92,
        total_top_border_width=1.5,
        border_color_gray=0.85,
    ),
)

FOOTER = SlotsRegion(
    id="footer",
    label="Footer",
    slots=(
        REMARKS,
        TOTAL_LABEL,
        SlotDef(
            "subtotal",
            "小計",
            "currency",
            Geometry(x=370, y=696, width=200, height=18, font_size=10, align_x="right"),
        ),
        SlotDef(
            "tax",
            "税",
            "currency",
            Geometry(x=370, y=716, width=200, height=18, font_size=10, align_x="right"),
        ),
        TOTAL,
    ),
)

HONORIFIC_COMPANION = CompanionDef(id="to_honorific", region="header", anchor_slot="to_name")

SCHEMA = StructureSchema(
    structure_type="list_v1",
    version=1,
    regions=(HEADER, TABLE, FOOTER),
    companions=(HONORIFIC_COMPANION,),
)


def is_legacy_caption(element: Element) -> bool:
    """Fixed captions from older layouts that are now bindable slots or companions."""

    if not isinstance(element, LabelElement):
        return False
    text = element.text.strip()
    if element.region == "header":
        if text == "御中":
            return True
        if element.slot_id:
            return False
        return text == "見積日" or "estimate_date_label" in element.id
    if element.region == "footer":
        return not element.slot_id and text == "合計"
    return False


class ListV1Adapter(RegionAdapter):
    schema = SCHEMA
    default_header = {
        "doc_title": static_text("御見積書"),
        "date_label": static_text("見積日"),
        "to_honorific": static_text("様"),
    }

    def _prepare(self, index: ElementIndex, mapping: DocumentMapping) -> None:
        index.remove_where(is_legacy_caption)
