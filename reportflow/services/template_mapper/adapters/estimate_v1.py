"""Estimate sheet: addressed header, fixed four-column table, totals footer."""

from __future__ import annotations

from ..field_refs import static_text
from ..mapping import DocumentMapping
from ..models import LabelElement, SummaryStyle, TextElement
from ..schema import (
    BaseColumnDef,
    CompanionDef,
    FixedLabelDef,
    Geometry,
    SlotDef,
    SlotsRegion,
    StructureSchema,
    TableRegion,
)
from ..synthesis import ElementIndex
from .base import RegionAdapter

HEADER = SlotsRegion(
    id="header",
    label="Header",
    slots=(
        SlotDef(
            "doc_title",
            "タイトル",
            "text",
            Geometry(x=0, y=24, width=595, height=28, font_size=22, font_weight="bold", align_x="center"),
            allowed_sources=("staticText", "recordField"),
        ),
        SlotDef(
            "to_name",
            "宛先名",
            "text",
            Geometry(x=70, y=99, width=200, height=18, font_size=12, font_weight="bold"),
            required=True,
        ),
        SlotDef(
            "issue_date",
            "発行日",
            "date",
            Geometry(x=430, y=106, width=150, height=16, font_size=10, align_x="right"),
            required=True,
        ),
        SlotDef(
            "doc_no",
            "見積番号",
            "text",
            Geometry(x=430, y=86, width=150, height=16, font_size=10, align_x="right"),
        ),
        SlotDef(
            "logo",
            "ロゴ",
            "image",
            Geometry(x=40, y=12, width=120, height=60, repeat_on_every_page=True),
            allowed_sources=("imageUrl",),
        ),
    ),
)

TABLE = TableRegion(
    id="table",
    label="明細テーブル",
    source_required=True,
    min_cols=4,
    max_cols=4,
    base_columns=(
        BaseColumnDef("item_name", "品名", "text", 58, required=True),
        BaseColumnDef("qty", "数量", "number", 12),
        BaseColumnDef("unit_price", "単価", "currency", 15),
        BaseColumnDef("amount", "金額", "currency", 15),
    ),
    fallback=Geometry(x=70, y=270, width=480),
    border_width=0.9,
    border_color_gray=0.3,
    min_font_size=9,
    summary_style=SummaryStyle(
        subtotal_fill_gray=0.95,
        total_fill_gray=0.93,
        total_top_border_width=1.2,
        border_color_gray=0.3,
    ),
)

FOOTER = SlotsRegion(
    id="footer",
    label="Footer",
    slots=(
        SlotDef(
            "remarks",
            "備考",
            "multiline",
            Geometry(x=70, y=700, width=270, height=80, font_size=10, border_width=0.8, border_color_gray=0.3),
            allowed_sources=("recordField", "staticText"),
        ),
        SlotDef(
            "subtotal",
            "小計",
            "currency",
            Geometry(x=430, y=700, width=150, height=16, font_size=10, align_x="right"),
        ),
        SlotDef(
            "tax",
            "税",
            "currency",
            Geometry(x=430, y=720, width=150, height=16, font_size=10, align_x="right"),
        ),
        SlotDef(
            "total",
            "合計",
            "currency",
            Geometry(x=430, y=738, width=150, height=20, font_size=14, font_weight="bold", fill_gray=0.93, align_x="right"),
            required=True,
        ),
    ),
)

_CAPTION = dict(width=60, height=16, font_size=10, align_x="right")

SCHEMA = StructureSchema(
    structure_type="estimate_v1",
    version=1,
    regions=(HEADER, TABLE, FOOTER),
    companions=(CompanionDef(id="to_honorific", region="header", anchor_slot="to_name"),),
    fixed_labels=(
        FixedLabelDef("date_label", "header", "発行日", Geometry(x=360, y=106, **_CAPTION), slot_id="date_label"),
        FixedLabelDef("doc_no_label", "header", "見積番号", Geometry(x=360, y=86, **_CAPTION)),
        FixedLabelDef("subtotal_label", "footer", "小計", Geometry(x=360, y=700, **_CAPTION)),
        FixedLabelDef("tax_label", "footer", "消費税", Geometry(x=360, y=720, **_CAPTION)),
        FixedLabelDef(
            "total_label_fixed",
            "footer",
            "合計",
            Geometry(x=360, y=740, font_weight="bold", fill_gray=0.93, **_CAPTION),
        ),
    ),
)

HONORIFIC_TEXT = "御中"


class EstimateV1Adapter(RegionAdapter):
    schema = SCHEMA
    default_header = {
        "doc_title": static_text("御見積書"),
        "date_label": static_text("発行日"),
        "to_honorific": static_text(HONORIFIC_TEXT),
    }

    def _prepare(self, index: ElementIndex, mapping: DocumentMapping) -> None:
        # the honorific is rendered as a companion of to_name, not as a loose label
        index.remove_where(
            lambda e: isinstance(e, LabelElement) and e.region == "header" and e.text.strip() == HONORIFIC_TEXT
        )

    def _finalize(self, index: ElementIndex, mapping: DocumentMapping) -> None:
        for element in index.values():
            if not isinstance(element, TextElement):
                continue
            if (element.slot_id or "").startswith("company_") and element.align_x != "right":
                index.put(element.model_copy(update={"align_x": "right"}), replacing=element)
