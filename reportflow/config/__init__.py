"""Loading and saving of template document files.

Documents are stored as YAML or JSON using the camelCase wire names shared
with the renderer. JSON is a subset of YAML, so both are read through
``yaml.safe_load``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from reportflow.core.errors import DocumentLoadError
from reportflow.services.template_mapper.models import TemplateDocument

LOGGER = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = {".yaml", ".yml", ".json"}


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise DocumentLoadError(f"Document file not found: {path}")
    if path.suffix.lower() not in DOCUMENT_SUFFIXES:
        raise DocumentLoadError(f"Unsupported document format: {path.suffix or path.name}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise DocumentLoadError(f"Document file is not valid YAML/JSON: {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise DocumentLoadError("A document file must contain a mapping at the top level")
    return data


def parse_document(data: Dict[str, Any], *, source: str = "<memory>") -> TemplateDocument:
    try:
        return TemplateDocument.model_validate(data)
    except ValidationError as exc:
        raise DocumentLoadError(f"Invalid document {source}: {exc}") from exc


def load_document(path: str | Path) -> TemplateDocument:
    """Read and validate a document file."""

    doc_path = Path(path)
    document = parse_document(_load_yaml(doc_path), source=str(doc_path))
    LOGGER.debug("Loaded document %r (%d elements) from %s", document.id, len(document.elements), doc_path)
    return document


def dump_document(document: TemplateDocument, path: str | Path) -> Path:
    """Write ``document`` as JSON or YAML depending on the file suffix."""

    doc_path = Path(path)
    payload = document.to_wire()
    doc_path.parent.mkdir(parents=True, exist_ok=True)
    if doc_path.suffix.lower() == ".json":
        text = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
    else:
        text = yaml.safe_dump(payload, allow_unicode=True, sort_keys=False)
    doc_path.write_text(text, encoding="utf-8")
    LOGGER.info("Wrote document %r to %s", document.id, doc_path)
    return doc_path


__all__ = ["DOCUMENT_SUFFIXES", "dump_document", "load_document", "parse_document"]
