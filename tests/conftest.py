from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Iterator

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from reportflow.core import logger as core_logger

FIXTURE_DIR = ROOT / "tests" / "fixtures"


def _record(code: str) -> Dict[str, Any]:
    return {"kind": "recordField", "fieldCode": code}


def _static(text: str) -> Dict[str, Any]:
    return {"kind": "staticText", "text": text}


def _column(column_id: str, code: str, width: float, label: str = "", subtable: str = "Items") -> Dict[str, Any]:
    return {
        "id": column_id,
        "label": label,
        "value": {"kind": "subtableField", "subtableCode": subtable, "fieldCode": code},
        "widthPct": width,
    }


@pytest.fixture(autouse=True)
def _isolated_logging(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep log files out of the home directory and drop handlers between tests."""

    monkeypatch.setenv(core_logger.LOG_DIR_ENV, str(tmp_path / "logs"))
    core_logger.reset_logger()
    yield
    core_logger.reset_logger()


@pytest.fixture()
def estimate_mapping() -> Dict[str, Any]:
    return {
        "header": {
            "doc_title": _static("御見積書"),
            "to_name": _record("CustomerName"),
            "issue_date": _record("IssueDate"),
            "doc_no": _record("EstimateNo"),
            "to_honorific": _static("御中"),
        },
        "table": {
            "source": {"kind": "subtable", "fieldCode": "Items"},
            "columns": [
                _column("item_name", "ItemName", 58, "品名"),
                _column("qty", "Qty", 12, "数量"),
                _column("unit_price", "UnitPrice", 15, "単価"),
                _column("amount", "Amount", 15, "金額"),
            ],
            "summaryMode": "lastPageOnly",
        },
        "footer": {
            "subtotal": _record("Subtotal"),
            "tax": _record("Tax"),
            "total": _record("Total"),
        },
    }


@pytest.fixture()
def list_mapping(estimate_mapping: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "header": dict(estimate_mapping["header"], date_label=_static("見積日"), to_honorific=_static("様")),
        "table": dict(estimate_mapping["table"]),
        "footer": {"total_label": _static("合計"), "total": _record("Total")},
    }


@pytest.fixture()
def documents_dir() -> Path:
    return FIXTURE_DIR / "documents"
