"""Google Sheets client for reading and writing cell ranges."""

from __future__ import annotations

import logging
from typing import Any

from gworkspace_cli.core.models import RangeValues, SheetInfo, SpreadsheetInfo, UpdateResult

from .base import GoogleApiClient, path_segment

logger = logging.getLogger(__name__)


class GoogleSheetsClient(GoogleApiClient):
    """Client for the Sheets API v4."""

    API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"

    async def get_spreadsheet(self, spreadsheet_id: str) -> SpreadsheetInfo:
        """Fetch spreadsheet properties and its tabs."""
        data = await self._get_json(
            f"/{path_segment(spreadsheet_id)}",
            fields="spreadsheetId,properties,sheets.properties,spreadsheetUrl",
        )
        properties = data.get("properties", {})
        return SpreadsheetInfo(
            spreadsheet_id=data.get("spreadsheetId", spreadsheet_id),
            title=properties.get("title", ""),
            locale=properties.get("locale", ""),
            spreadsheet_url=data.get("spreadsheetUrl", ""),
            sheets=[_to_sheet(sheet.get("properties", {})) for sheet in data.get("sheets", [])],
        )

    async def read_range(self, spreadsheet_id: str, cell_range: str) -> RangeValues:
        """Read unformatted values from an A1 range."""
        data = await self._get_json(
            self._values_path(spreadsheet_id, cell_range),
            valueRenderOption="UNFORMATTED_VALUE",
            dateTimeRenderOption="FORMATTED_STRING",
        )
        return RangeValues(range=data.get("range", cell_range), values=data.get("values", []))

    async def write_range(
        self, spreadsheet_id: str, cell_range: str, values: list[list[Any]]
    ) -> UpdateResult:
        """Overwrite a range, parsing values as if typed by a user."""
        response = await self._request(
            "PUT",
            self._values_path(spreadsheet_id, cell_range),
            params={"valueInputOption": "USER_ENTERED"},
            json_body={"values": values},
        )
        result = _to_update(response.json(), cell_range)
        logger.info("Updated %d cell(s) in %s", result.updated_cells, result.updated_range)
        return result

    async def append_rows(
        self, spreadsheet_id: str, cell_range: str, values: list[list[Any]]
    ) -> UpdateResult:
        """Insert rows after the table found in ``cell_range``."""
        response = await self._request(
            "POST",
            f"{self._values_path(spreadsheet_id, cell_range)}:append",
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            json_body={"values": values},
        )
        result = _to_update(response.json().get("updates", {}), cell_range)
        logger.info("Appended %d row(s) to %s", result.updated_rows, result.updated_range)
        return result

    async def clear_range(self, spreadsheet_id: str, cell_range: str) -> str:
        """Clear values in a range and return the range Google cleared."""
        response = await self._request(
            "POST", f"{self._values_path(spreadsheet_id, cell_range)}:clear", json_body={}
        )
        return response.json().get("clearedRange", cell_range)

    async def create_spreadsheet(
        self, title: str, sheet_titles: list[str] | None = None
    ) -> SpreadsheetInfo:
        """Create a spreadsheet, optionally with named tabs."""
        body: dict[str, Any] = {"properties": {"title": title}}
        if sheet_titles:
            body["sheets"] = [{"properties": {"title": name}} for name in sheet_titles]
        response = await self._request("POST", "", json_body=body)
        data = response.json()
        logger.info("Created spreadsheet %s", data.get("spreadsheetId"))
        return SpreadsheetInfo(
            spreadsheet_id=data.get("spreadsheetId", ""),
            title=data.get("properties", {}).get("title", title),
            locale=data.get("properties", {}).get("locale", ""),
            spreadsheet_url=data.get("spreadsheetUrl", ""),
            sheets=[_to_sheet(sheet.get("properties", {})) for sheet in data.get("sheets", [])],
        )

    async def add_sheet(self, spreadsheet_id: str, title: str) -> SheetInfo:
        """Add a tab to an existing spreadsheet."""
        response = await self._request(
            "POST",
            f"/{path_segment(spreadsheet_id)}:batchUpdate",
            json_body={"requests": [{"addSheet": {"properties": {"title": title}}}]},
        )
        replies = response.json().get("replies") or [{}]
        properties = replies[0].get("addSheet", {}).get("properties", {})
        return _to_sheet({"title": title, **properties})

    @staticmethod
    def _values_path(spreadsheet_id: str, cell_range: str) -> str:
        return f"/{path_segment(spreadsheet_id)}/values/{path_segment(cell_range)}"


def _to_sheet(properties: dict[str, Any]) -> SheetInfo:
    grid = properties.get("gridProperties", {})
    return SheetInfo(
        sheet_id=properties.get("sheetId", 0),
        title=properties.get("title", ""),
        index=properties.get("index", 0),
        row_count=grid.get("rowCount", 0),
        column_count=grid.get("columnCount", 0),
    )


def _to_update(data: dict[str, Any], cell_range: str) -> UpdateResult:
    return UpdateResult(
        updated_range=data.get("updatedRange", cell_range),
        updated_rows=data.get("updatedRows", 0),
        updated_columns=data.get("updatedColumns", 0),
        updated_cells=data.get("updatedCells", 0),
    )


__all__ = ["GoogleSheetsClient"]
