"""Card sheet: one card per subtable row, fields A to F."""

from __future__ import annotations

from ..field_refs import static_text
from ..schema import CardFieldDef, CardListRegion, Geometry, SlotsRegion, StructureSchema
from .base import RegionAdapter
from .list_v1 import HEADER, REMARKS, TOTAL, TOTAL_LABEL

CARD_LIST = CardListRegion(
    id="cardList",
    label="カード枠",
    source_required=True,
    fields=(
        CardFieldDef("fieldA", "Field A", required=True),
        CardFieldDef("fieldB", "Field B"),
        CardFieldDef("fieldC", "Field C"),
        CardFieldDef("fieldD", "Field D"),
        CardFieldDef("fieldE", "Field E"),
        CardFieldDef("fieldF", "Field F"),
    ),
    fallback=Geometry(x=50, y=260, width=495, border_width=0.8),
)

FOOTER = SlotsRegion(id="footer", label="Footer", slots=(REMARKS, TOTAL_LABEL, TOTAL))

SCHEMA = StructureSchema(
    structure_type="cards_v1",
    version=1,
    regions=(HEADER, CARD_LIST, FOOTER),
)


class CardsV1Adapter(RegionAdapter):
    schema = SCHEMA
    default_header = {
        "doc_title": static_text("Card"),
        "date_label": static_text("日付"),
    }
