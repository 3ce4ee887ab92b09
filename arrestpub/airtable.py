"""
Records-store client.

A thin wrapper around the Airtable REST API. One client is built per base
from configuration and handed to the fetcher and advertisement service.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from arrestpub.config import Config
from arrestpub.log import get_logger
from arrestpub.model import RecordsStoreError

logger = get_logger(__name__)

META_API_URL = "https://api.airtable.com/v0/meta"

TOKEN_SCOPE_HINT = (
    "Check that the personal access token has the data.records:read, "
    "data.records:write and schema.bases:read scopes and access to base {base_id}"
)


class AirtableClient:
    """Client for one Airtable base."""

    def __init__(self, api_key: str, base_id: str, api_url: str = "https://api.airtable.com/v0",
                 timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_id = base_id
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def for_records(cls, cfg: Config, session: Optional[requests.Session] = None) -> "AirtableClient":
        """Build the client for the jail records base."""
        return cls(cfg.airtable.api_key, cfg.airtable.base_id, cfg.airtable.api_url,
                   cfg.http.timeout, session)

    @classmethod
    def for_ads(cls, cfg: Config, session: Optional[requests.Session] = None) -> "AirtableClient":
        """Build the client for the advertisement base, falling back to the records credentials."""
        api_key = cfg.ads.api_key or cfg.airtable.api_key
        base_id = cfg.ads.base_id or cfg.airtable.base_id
        return cls(api_key, base_id, cfg.airtable.api_url, cfg.http.timeout, session)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _table_url(self, table: str, record_id: Optional[str] = None) -> str:
        url = f"{self.api_url}/{self.base_id}/{quote(table, safe='')}"
        if record_id:
            url += f"/{record_id}"
        return url

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(method, url, headers=self._headers(),
                                            timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise RecordsStoreError(f"Records store request failed: {e}")

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            if response.status_code in (401, 403):
                logger.error(TOKEN_SCOPE_HINT.format(base_id=self.base_id))
            raise RecordsStoreError(
                f"Records store returned HTTP {response.status_code} for {method} {url}",
                status_code=response.status_code,
                payload=payload,
            )

        return response.json()

    def list_records(self, table: str, formula: Optional[str] = None,
                     sort: Optional[List[Dict[str, str]]] = None, view: Optional[str] = None,
                     max_records: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        List records from a table, following pagination.

        Args:
            table: Table name or id
            formula: filterByFormula expression
            sort: List of {"field": ..., "direction": "asc"|"desc"}
            view: View name or id
            max_records: Maximum number of records to return

        Returns:
            Raw records ({"id", "fields", "createdTime"})
        """
        params: Dict[str, Any] = {}
        if formula:
            params["filterByFormula"] = formula
        if view:
            params["view"] = view
        if max_records:
            params["maxRecords"] = max_records
        for i, entry in enumerate(sort or []):
            params[f"sort[{i}][field]"] = entry["field"]
            params[f"sort[{i}][direction]"] = entry.get("direction", "asc")

        records: List[Dict[str, Any]] = []
        url = self._table_url(table)
        while True:
            data = self._request("GET", url, params=params)
            records.extend(data.get("records", []))
            offset = data.get("offset")
            if not offset or (max_records and len(records) >= max_records):
                break
            params["offset"] = offset

        logger.debug(f"Fetched {len(records)} records from {table}")
        return records

    def get_record(self, table: str, record_id: str) -> Dict[str, Any]:
        """Fetch a single record."""
        return self._request("GET", self._table_url(table, record_id))

    def create_record(self, table: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Create a record and return it."""
        return self._request("POST", self._table_url(table), json={"fields": fields})

    def update_record(self, table: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Patch the given fields of a record."""
        return self._request("PATCH", self._table_url(table, record_id), json={"fields": fields})

    def get_base_schema(self) -> Dict[str, Any]:
        """Fetch table and field metadata for the base."""
        return self._request("GET", f"{META_API_URL}/bases/{self.base_id}/tables")
