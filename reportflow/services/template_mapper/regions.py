"""Vertical bands available to the header, body and footer regions.

Coordinates are top-origin canvas pixels: ``y`` is measured from the top
edge of the page to the top edge of an element, so a larger ``y`` sits
further down the page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .models import Number, RegionBand, RegionBounds, TemplateDocument

LOGGER = logging.getLogger(__name__)

PAGE_DIMENSIONS: dict[str, dict[str, tuple[int, int]]] = {
    "A4": {
        "portrait": (595, 842),
        "landscape": (842, 595),
    },
}
DEFAULT_PAGE_SIZE = "A4"

HEADER_HEIGHT = 250
FOOTER_HEIGHT = 150


@dataclass(frozen=True)
class PageDimensions:
    width: int
    height: int


def get_page_dimensions(page_size: str | None = None, orientation: str | None = None) -> PageDimensions:
    dims = PAGE_DIMENSIONS.get(page_size or DEFAULT_PAGE_SIZE)
    if dims is None:
        LOGGER.debug("Unknown page size %r, using %s", page_size, DEFAULT_PAGE_SIZE)
        dims = PAGE_DIMENSIONS[DEFAULT_PAGE_SIZE]
    width, height = dims["landscape" if orientation == "landscape" else "portrait"]
    return PageDimensions(width=width, height=height)


def default_region_bounds(page_height: Number) -> RegionBounds:
    footer_top = page_height - FOOTER_HEIGHT
    return RegionBounds(
        header=RegionBand(y_top=0, y_bottom=HEADER_HEIGHT),
        body=RegionBand(y_top=HEADER_HEIGHT, y_bottom=footer_top),
        footer=RegionBand(y_top=footer_top, y_bottom=page_height),
    )


def bounds_are_valid(bounds: RegionBounds, page_height: Number) -> bool:
    """Bands must be ordered header, body, footer without overlapping the page edges."""

    edges = [
        0,
        bounds.header.y_top,
        bounds.header.y_bottom,
        bounds.body.y_top,
        bounds.body.y_bottom,
        bounds.footer.y_top,
        bounds.footer.y_bottom,
        page_height,
    ]
    return all(lower <= upper for lower, upper in zip(edges, edges[1:]))


def resolve_region_bounds(document: TemplateDocument | None = None) -> RegionBounds:
    """Return the band of each region for ``document``.

    A stored ``regionBounds`` triple wins when valid; otherwise a stored
    ``footerReserveHeight`` moves the footer top; otherwise the defaults apply.
    """

    if document is None:
        return default_region_bounds(get_page_dimensions().height)

    height = get_page_dimensions(document.page_size, document.orientation).height
    defaults = default_region_bounds(height)

    override = document.region_bounds
    if override is not None:
        if bounds_are_valid(override, height):
            return override
        LOGGER.warning(
            "Ignoring invalid regionBounds on document %r: %s",
            document.id,
            override.model_dump(by_alias=True),
        )

    reserve = document.footer_reserve_height
    if reserve is not None:
        footer_top = height - reserve
        if defaults.body.y_top <= footer_top <= height:
            return RegionBounds(
                header=defaults.header,
                body=RegionBand(y_top=defaults.body.y_top, y_bottom=footer_top),
                footer=RegionBand(y_top=footer_top, y_bottom=height),
            )
        LOGGER.warning("Ignoring out-of-range footerReserveHeight=%s on document %r", reserve, document.id)

    return defaults


def clamp(value: Number, lower: Number, upper: Number) -> Number:
    return min(max(value, lower), upper)


def clamp_y_to_region(y: Number, region: str, bounds: RegionBounds, *, height: Number | None = None) -> Number:
    """Clamp a top-edge ``y`` so the element starts inside ``region``.

    With ``height`` the element's whole box is kept inside the band when it fits.
    """

    band = bounds.band(region)
    upper = band.y_bottom
    if height:
        upper = max(band.y_top, band.y_bottom - height)
    return clamp(y, band.y_top, upper)


__all__ = [
    "PAGE_DIMENSIONS",
    "PageDimensions",
    "bounds_are_valid",
    "clamp",
    "clamp_y_to_region",
    "default_region_bounds",
    "get_page_dimensions",
    "resolve_region_bounds",
]
