"""Public API for the template mapper service."""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from .adapters import get_adapter
from .models import TemplateDocument
from .query import tree_signature
from .validate import ValidationOutcome

LOGGER = logging.getLogger(__name__)


class CompileResult(BaseModel):
    """Outcome of one mapping compilation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    document: TemplateDocument
    validation: ValidationOutcome
    changed: bool
    signature: str


def compile_document(document: TemplateDocument, mapping: Optional[Any] = None) -> CompileResult:
    """Validate and synthesize ``document`` against its structure type.

    The mapping falls back to the one stored on the document, then to the
    structure's default mapping. Invalid mappings are still synthesized.
    """

    adapter = get_adapter(document.structure_type)
    raw = mapping if mapping is not None else document.mapping
    if raw is None:
        LOGGER.info("Document %r has no mapping, starting from the %s default", document.id, adapter.structure_type)
        raw = adapter.create_default_mapping()

    validation = adapter.validate(raw)
    if not validation.ok:
        LOGGER.info("Mapping for %r has %d open issue(s)", document.id, len(validation.errors))

    before = tree_signature(document.elements)
    result = adapter.synthesize(document, raw)
    after = tree_signature(result.elements)
    return CompileResult(document=result, validation=validation, changed=before != after, signature=after)


__all__ = ["CompileResult", "compile_document"]
