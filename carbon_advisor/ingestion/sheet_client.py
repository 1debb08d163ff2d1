"""
Benchmark sheet client — fetches the results sheet as CSV over HTTP.

Source: a public Google Sheet exported through the Visualization API
(``/gviz/tq?tqx=out:csv&sheet=<name>``), which is the most stable export
path for publicly shared sheets.  No credentials are required.

The client performs one GET with the configured timeout.  There is no retry
or backoff; transport and HTTP status failures surface as
``RecordSourceError``.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from carbon_advisor.config import SourceConfig
from carbon_advisor.ingestion.sheet_csv import parse_action_csv_text
from carbon_advisor.models.action import ActionRecord

logger = logging.getLogger(__name__)


class RecordSourceError(RuntimeError):
    """The benchmark sheet could not be fetched."""


class SheetClient:
    """HTTP client for the benchmark results sheet.

    Usage::

        client = SheetClient(config.source)
        records = client.fetch_records()

    Attributes:
        url: CSV export URL.
        timeout_seconds: Request timeout.
    """

    def __init__(
        self,
        source: Optional[SourceConfig] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialise the client.

        Args:
            source: Source settings; defaults to ``SourceConfig()``.
            http_client: Optional pre-built ``httpx.Client`` (tests inject one
                backed by ``httpx.MockTransport``).
        """
        source = source or SourceConfig()
        self.url = source.export_url
        self.timeout_seconds = source.timeout_seconds
        self._http_client = http_client

    def fetch_csv_text(self) -> str:
        """GET the sheet export and return the CSV body.

        Raises:
            RecordSourceError: On transport failure or a non-2xx status.
        """
        try:
            # The gviz export answers with a redirect to the CSV body.
            get = self._http_client.get if self._http_client is not None else httpx.get
            resp = get(self.url, timeout=self.timeout_seconds, follow_redirects=True)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RecordSourceError(
                f"Benchmark sheet returned HTTP {exc.response.status_code}: {self.url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RecordSourceError(
                f"Could not reach benchmark sheet: {exc}"
            ) from exc

        logger.info("Fetched benchmark sheet (%d bytes)", len(resp.content))
        return resp.text

    def fetch_records(self) -> list[ActionRecord]:
        """Fetch and parse the sheet into action records.

        Raises:
            RecordSourceError: If the fetch fails.
            ValueError: If the CSV lacks required columns.
        """
        return parse_action_csv_text(self.fetch_csv_text())
