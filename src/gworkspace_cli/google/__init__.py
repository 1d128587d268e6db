"""Adapters for the Google Workspace REST APIs."""

from .auth import (
    AccessTokenProvider,
    AuthError,
    GoogleOAuthClient,
    build_oauth_client,
    build_token_provider,
    find_token_path,
)
from .base import GoogleApiError
from .calendar import GoogleCalendarClient
from .docs import EXPORT_FORMATS, GoogleDocsClient, export_document
from .drive import DOCUMENT_MIME_TYPE, SPREADSHEET_MIME_TYPE, DriveClient
from .gmail import GmailClient
from .sheets import GoogleSheetsClient

__all__ = [
    "DOCUMENT_MIME_TYPE",
    "EXPORT_FORMATS",
    "SPREADSHEET_MIME_TYPE",
    "AccessTokenProvider",
    "AuthError",
    "DriveClient",
    "GmailClient",
    "GoogleApiError",
    "GoogleCalendarClient",
    "GoogleDocsClient",
    "GoogleOAuthClient",
    "GoogleSheetsClient",
    "build_oauth_client",
    "build_token_provider",
    "export_document",
    "find_token_path",
]
