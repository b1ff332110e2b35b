"""Template mapper service package."""

from .adapters import StructureAdapter, get_adapter, get_adapter_or_none, structure_types
from .api import CompileResult, compile_document
from .mapping import DocumentMapping, TableColumn, parse_document_mapping
from .models import TemplateDocument
from .query import highlighted_element_ids, tree_signature
from .regions import clamp_y_to_region, resolve_region_bounds
from .validate import ValidationIssue, ValidationOutcome
from .widths import allocate_pixel_widths, normalize_width_pct, normalize_width_pct_keep_index

__all__ = [
    "CompileResult",
    "DocumentMapping",
    "StructureAdapter",
    "TableColumn",
    "TemplateDocument",
    "ValidationIssue",
    "ValidationOutcome",
    "allocate_pixel_widths",
    "clamp_y_to_region",
    "compile_document",
    "get_adapter",
    "get_adapter_or_none",
    "highlighted_element_ids",
    "normalize_width_pct",
    "normalize_width_pct_keep_index",
    "parse_document_mapping",
    "resolve_region_bounds",
    "structure_types",
    "tree_signature",
]
