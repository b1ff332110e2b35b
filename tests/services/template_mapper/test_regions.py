from __future__ import annotations

import logging

from reportflow.services.template_mapper.models import RegionBand, RegionBounds, TemplateDocument
from reportflow.services.template_mapper.regions import (
    bounds_are_valid,
    clamp_y_to_region,
    default_region_bounds,
    get_page_dimensions,
    resolve_region_bounds,
)


def _band(bounds: RegionBounds, region: str) -> tuple:
    band = bounds.band(region)
    return band.y_top, band.y_bottom


def test_default_bounds_for_a4_portrait():
    bounds = resolve_region_bounds(TemplateDocument())
    assert _band(bounds, "header") == (0, 250)
    assert _band(bounds, "body") == (250, 692)
    assert _band(bounds, "footer") == (692, 842)
    assert resolve_region_bounds() == bounds


def test_landscape_moves_footer_up():
    bounds = resolve_region_bounds(TemplateDocument(orientation="landscape"))
    assert _band(bounds, "body") == (250, 445)
    assert _band(bounds, "footer") == (445, 595)


def test_unknown_page_size_falls_back_to_a4():
    dims = get_page_dimensions("Letter", "portrait")
    assert (dims.width, dims.height) == (595, 842)


def test_footer_reserve_height_moves_footer_top():
    bounds = resolve_region_bounds(TemplateDocument(footer_reserve_height=200))
    assert _band(bounds, "body") == (250, 642)
    assert _band(bounds, "footer") == (642, 842)


def test_footer_reserve_height_out_of_range_is_ignored(caplog):
    caplog.set_level(logging.WARNING)
    bounds = resolve_region_bounds(TemplateDocument(id="doc", footer_reserve_height=900))
    assert bounds == default_region_bounds(842)
    assert "footerReserveHeight" in caplog.text


def test_valid_stored_bounds_win():
    stored = RegionBounds(
        header=RegionBand(y_top=0, y_bottom=200),
        body=RegionBand(y_top=200, y_bottom=700),
        footer=RegionBand(y_top=700, y_bottom=842),
    )
    assert resolve_region_bounds(TemplateDocument(region_bounds=stored)) == stored


def test_invalid_stored_bounds_fall_back_with_warning(caplog):
    caplog.set_level(logging.WARNING)
    overlapping = RegionBounds(
        header=RegionBand(y_top=0, y_bottom=300),
        body=RegionBand(y_top=250, y_bottom=692),
        footer=RegionBand(y_top=692, y_bottom=842),
    )
    assert not bounds_are_valid(overlapping, 842)

    bounds = resolve_region_bounds(TemplateDocument(id="doc", region_bounds=overlapping))
    assert bounds == default_region_bounds(842)
    assert "Ignoring invalid regionBounds" in caplog.text


def test_region_bounds_accept_wire_names():
    document = TemplateDocument.model_validate(
        {
            "regionBounds": {
                "header": {"yTop": 0, "yBottom": 220},
                "body": {"yTop": 220, "yBottom": 700},
                "footer": {"yTop": 700, "yBottom": 842},
            }
        }
    )
    assert _band(resolve_region_bounds(document), "header") == (0, 220)


def test_clamp_y_to_region():
    bounds = default_region_bounds(842)
    assert clamp_y_to_region(10, "footer", bounds) == 692
    assert clamp_y_to_region(900, "footer", bounds) == 842
    assert clamp_y_to_region(900, "footer", bounds, height=20) == 822
    assert clamp_y_to_region(300, "body", bounds) == 300
    assert clamp_y_to_region(400, "header", bounds, height=18) == 232


def test_clamp_keeps_top_when_element_is_taller_than_band():
    bounds = default_region_bounds(842)
    assert clamp_y_to_region(700, "footer", bounds, height=400) == 692
