"""
Ingestion layer — the record source for the matching engine.

Submodules:
  sheet_csv     — CSV parser for the benchmark results sheet
  sheet_client  — HTTP fetch of the sheet's CSV export (httpx)

``load_records(config)`` is the single entry point used by the CLI: it reads
``source.records_file`` when configured, otherwise fetches the sheet.  A
failed fetch is logged and yields no records; an empty recommendation is a
valid outcome downstream.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from carbon_advisor.ingestion.sheet_client import RecordSourceError, SheetClient
from carbon_advisor.ingestion.sheet_csv import parse_action_csv, parse_action_csv_text
from carbon_advisor.models.action import ActionRecord

if TYPE_CHECKING:
    from carbon_advisor.config import AppConfig

logger = logging.getLogger(__name__)


def load_records(
    config: "AppConfig",
    client: Optional[SheetClient] = None,
) -> list[ActionRecord]:
    """Load all benchmark records from the configured source.

    Args:
        config: Application config (``config.source`` is used).
        client: Optional sheet client override.

    Returns:
        All parsed records, or ``[]`` if the sheet could not be fetched.

    Raises:
        FileNotFoundError: If a configured ``records_file`` does not exist.
        ValueError: If the CSV lacks required columns.
    """
    if config.source.records_file:
        return parse_action_csv(Path(config.source.records_file))

    client = client or SheetClient(config.source)
    try:
        return client.fetch_records()
    except RecordSourceError as exc:
        logger.error("Benchmark fetch failed: %s", exc)
        return []


__all__ = [
    "RecordSourceError",
    "SheetClient",
    "load_records",
    "parse_action_csv",
    "parse_action_csv_text",
]
