"""Google Sheets values API client."""

from dataclasses import dataclass
from urllib.parse import quote

import httpx

from session_renderer.adapters.google_auth import TokenProvider
from session_renderer.domain.sessions import RawRow

SHEETS_BASE_URL = "https://sheets.googleapis.com/v4"


@dataclass
class HttpxSheetsClient:
    """HTTPX-backed reader returning header-aligned rows."""

    auth: TokenProvider
    http_client: httpx.AsyncClient
    header_row: int = 1
    base_url: str = SHEETS_BASE_URL

    @classmethod
    def create(cls, auth: TokenProvider, header_row: int = 1) -> "HttpxSheetsClient":
        """Create a Sheets client with a managed httpx session."""
        return cls(auth=auth, http_client=httpx.AsyncClient(), header_row=header_row)

    async def fetch_rows(self, spreadsheet_id: str, sheet_range: str) -> list[RawRow]:
        """Fetch a range and map each data row onto the header row."""
        url = (
            f"{self.base_url}/spreadsheets/{spreadsheet_id}"
            f"/values/{quote(sheet_range, safe='!:')}"
        )
        headers = await self.auth.authorization_headers()
        response = await self.http_client.get(
            url,
            headers=headers,
            params={"majorDimension": "ROWS"},
            timeout=30,
        )
        response.raise_for_status()
        values = response.json().get("values", [])
        return rows_from_values(values, self.header_row)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def rows_from_values(values: list[list[object]], header_row: int = 1) -> list[RawRow]:
    """Align raw cell lists with trimmed headers; missing cells become ''."""
    if len(values) < header_row:
        return []
    headers = [str(header).strip() for header in values[header_row - 1]]
    rows: list[RawRow] = []
    for raw in values[header_row:]:
        row: RawRow = {}
        for index, header in enumerate(headers):
            if not header:
                continue
            row[header] = str(raw[index]).strip() if index < len(raw) else ""
        rows.append(row)
    return rows
