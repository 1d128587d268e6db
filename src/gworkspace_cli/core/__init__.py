"""Core utilities for configuration, logging, and shared models."""

from .config import AppSettings, GoogleSettings, MailSettings, load_app_settings
from .logging import configure_logging

__all__ = [
    "AppSettings",
    "GoogleSettings",
    "MailSettings",
    "configure_logging",
    "load_app_settings",
]
