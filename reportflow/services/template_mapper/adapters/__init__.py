"""Structure adapters, one per supported structure type."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from reportflow.core.errors import UnknownStructureError

from .base import RegionAdapter, StructureAdapter
from .cards_v1 import CardsV1Adapter
from .estimate_v1 import EstimateV1Adapter
from .label_v1 import LabelMapping, LabelV1Adapter
from .list_v1 import ListV1Adapter

_LIST_V1 = ListV1Adapter()

ADAPTERS: Mapping[str, StructureAdapter] = MappingProxyType(
    {
        "estimate_v1": EstimateV1Adapter(),
        "list_v1": _LIST_V1,
        "line_items_v1": _LIST_V1,
        "cards_v1": CardsV1Adapter(),
        "label_v1": LabelV1Adapter(),
    }
)


def get_adapter(structure_type: Optional[str]) -> StructureAdapter:
    """Return the adapter for ``structure_type``; unknown types are a configuration error."""

    adapter = ADAPTERS.get(structure_type or "")
    if adapter is None:
        raise UnknownStructureError(structure_type)
    return adapter


def get_adapter_or_none(structure_type: Optional[str]) -> Optional[StructureAdapter]:
    return ADAPTERS.get(structure_type or "")


def structure_types() -> Tuple[str, ...]:
    return tuple(ADAPTERS)


__all__ = [
    "ADAPTERS",
    "CardsV1Adapter",
    "EstimateV1Adapter",
    "LabelMapping",
    "LabelV1Adapter",
    "ListV1Adapter",
    "RegionAdapter",
    "StructureAdapter",
    "get_adapter",
    "get_adapter_or_none",
    "structure_types",
]
