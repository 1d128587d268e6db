"""Google Drive client used to list and export Workspace files."""

from __future__ import annotations

import logging

from gworkspace_cli.core.models import DriveFile

from .base import GoogleApiClient, GoogleApiError, path_segment

logger = logging.getLogger(__name__)

SPREADSHEET_MIME_TYPE = "application/vnd.google-apps.spreadsheet"
DOCUMENT_MIME_TYPE = "application/vnd.google-apps.document"

_FILE_FIELDS = "id, name, createdTime, modifiedTime, webViewLink"


class DriveClient(GoogleApiClient):
    """Client for the parts of the Drive API the CLI needs."""

    API_BASE = "https://www.googleapis.com/drive/v3"

    async def list_files(self, mime_type: str, max_results: int = 20) -> list[DriveFile]:
        """List files of one type, most recently modified first."""
        data = await self._get_json(
            "/files",
            q=f"mimeType='{mime_type}'",
            pageSize=max_results,
            fields=f"files({_FILE_FIELDS})",
            orderBy="modifiedTime desc",
        )
        files = [
            DriveFile(
                id=item["id"],
                name=item.get("name", ""),
                created_time=item.get("createdTime"),
                modified_time=item.get("modifiedTime"),
                web_view_link=item.get("webViewLink"),
            )
            for item in data.get("files", [])
        ]
        logger.info("Retrieved %d file(s) of type %s", len(files), mime_type)
        return files

    async def get_file_name(self, file_id: str) -> str:
        """Return the display name of a file."""
        data = await self._get_json(f"/files/{path_segment(file_id)}", fields="id,name")
        return data.get("name") or "document"

    async def export_file(self, file_id: str, mime_type: str) -> bytes:
        """Export a Workspace file to ``mime_type`` and return its bytes."""
        response = await self._request(
            "GET", f"/files/{path_segment(file_id)}/export", params={"mimeType": mime_type}
        )
        if not response.content:
            raise GoogleApiError(f"Export of {file_id} returned no data")
        return response.content


__all__ = ["DOCUMENT_MIME_TYPE", "SPREADSHEET_MIME_TYPE", "DriveClient"]
