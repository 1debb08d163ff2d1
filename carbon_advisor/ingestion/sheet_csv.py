"""
CSV parser for the industry benchmark results sheet.

Format — comma delimited, header row first, double-quoted fields may contain
commas.  Headers are the sheet's own column titles (see
``carbon_advisor.models.action.COLUMN_MAP``).

Required columns:
  案例公司產業別 (industry), 系統名稱 (system), 措施類型 (measure type)

Every other column is optional.  Cells are trimmed; short rows are padded
with empty strings; blank lines are skipped.  Numeric cells are parsed by
``ActionRecord`` itself, so a malformed number never rejects a row.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path

from carbon_advisor.models.action import ActionRecord

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = frozenset({
    "案例公司產業別", "系統名稱", "措施類型",
})


def parse_action_csv_text(text: str) -> list[ActionRecord]:
    """Parse CSV text into :class:`ActionRecord` objects.

    Args:
        text: Full CSV document including the header row.

    Returns:
        One record per non-blank data row; ``[]`` for an empty document or a
        header-only document.

    Raises:
        ValueError: If any required column is missing from the header.
    """
    text = text.lstrip("\ufeff")
    reader = csv.reader(io.StringIO(text))

    headers: list[str] | None = None
    for row in reader:
        if any(cell.strip() for cell in row):
            headers = [cell.strip() for cell in row]
            break

    if headers is None:
        logger.warning("Benchmark CSV is empty")
        return []

    missing = REQUIRED_CSV_COLUMNS - set(headers)
    if missing:
        raise ValueError(
            f"CSV missing required columns: {sorted(missing)}\n"
            f"Found columns: {sorted(headers)}"
        )

    records: list[ActionRecord] = []
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        cells = [cell.strip() for cell in row]
        cells += [""] * (len(headers) - len(cells))
        records.append(ActionRecord.from_row(dict(zip(headers, cells))))

    if not records:
        logger.warning("Benchmark CSV has a header but no data rows")
    else:
        logger.info("Parsed %d benchmark records", len(records))
    return records


def parse_action_csv(path: Path) -> list[ActionRecord]:
    """Parse a local CSV export of the benchmark sheet.

    Args:
        path: Path to the CSV file (must exist).

    Returns:
        Parsed records (see :func:`parse_action_csv_text`).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If required columns are missing.
    """
    if not path.exists():
        raise FileNotFoundError(f"Benchmark CSV file not found: {path}")

    with open(path, encoding="utf-8-sig", newline="") as f:
        text = f.read()

    logger.debug("Loaded benchmark CSV %s (%d bytes)", path.name, len(text))
    return parse_action_csv_text(text)
