"""Gmail, Calendar, Sheets and Docs from the command line, with styled Markdown email."""

__version__ = "0.1.0"

__all__ = ["__version__"]
