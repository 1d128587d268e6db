"""Inline style profiles applied per HTML element."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

MONOSPACE = "font-family: 'Courier New', monospace;"


@dataclass(frozen=True, slots=True)
class StyleProfile:
    """Named mapping from element name to a CSS declaration string."""

    name: str
    elements: Mapping[str, str]

    def attrs(self, element: str) -> str:
        """Return the ``style`` attribute for ``element`` with a leading space."""
        declarations = self.elements.get(element)
        if not declarations:
            return ""
        return f' style="{declarations}"'


def _profile(name: str, elements: dict[str, str]) -> StyleProfile:
    return StyleProfile(name=name, elements=MappingProxyType(elements))


_SHARED = {
    "h4": "font-size: 16px; font-weight: 700; color: #000000; margin: 20px 0 8px 0;",
    "p": "font-size: 16px; line-height: 1.6; color: #000000; margin: 0 0 16px 0;",
    "pre": (
        "margin: 20px 0; padding: 20px; background: #f4f4f4; color: #1a1a1a; "
        f"overflow-x: auto; {MONOSPACE} font-size: 14px; line-height: 1.5; "
        "border-radius: 6px; border: 1px solid #d0d0d0;"
    ),
    "ul": "margin: 0 0 16px 0; padding-left: 24px;",
    "ol": "margin: 0 0 16px 0; padding-left: 24px;",
    "li": "font-size: 16px; line-height: 1.6; color: #000000; margin-bottom: 8px;",
    "table": "width: 100%; margin: 20px 0; border-collapse: collapse; font-size: 15px;",
    "strong": "font-weight: 700;",
    "em": "font-style: italic;",
}

CLIENT = _profile(
    "client",
    {
        **_SHARED,
        "h1": (
            "font-size: 32px; font-weight: 700; letter-spacing: -0.045em; "
            "line-height: 1.1; color: #000000; margin: 0 0 20px 0; "
            "padding-bottom: 20px; border-bottom: 2px solid #0e3b46;"
        ),
        "h2": (
            "font-size: 24px; font-weight: 700; letter-spacing: -0.03em; "
            "line-height: 1.2; color: #000000; margin: 32px 0 16px 0; "
            "padding-bottom: 8px; border-bottom: 1px solid #d4d3cf;"
        ),
        "h3": (
            "font-size: 18px; font-weight: 700; letter-spacing: -0.02em; "
            "line-height: 1.3; color: #000000; margin: 24px 0 12px 0;"
        ),
        "a": "color: #0e3b46; text-decoration: none; border-bottom: 1px solid #0e3b46;",
        "blockquote": (
            "margin: 20px 0; padding: 16px 20px; border-left: 3px solid #0e3b46; "
            "background: rgba(14, 59, 70, 0.03); font-style: italic; color: #000000;"
        ),
        "code": (
            f"{MONOSPACE} font-size: 14px; background: rgba(14, 59, 70, 0.06); "
            "padding: 2px 6px; border-radius: 3px; color: #000000;"
        ),
        "hr": "margin: 32px 0; border: none; height: 1px; background: #d4d3cf;",
        "th": (
            "padding: 10px 12px; text-align: left; border-bottom: 1px solid #d4d3cf; "
            f"{MONOSPACE} font-size: 12px; font-weight: 500; text-transform: uppercase; "
            "letter-spacing: 0.12em; color: #000000; background: rgba(14, 59, 70, 0.03);"
        ),
        "td": (
            "padding: 10px 12px; text-align: left; border-bottom: 1px solid #d4d3cf; "
            "font-size: 15px; color: #000000;"
        ),
    },
)

LABS = _profile(
    "labs",
    {
        **_SHARED,
        "h1": (
            "font-size: 36px; font-weight: 900; letter-spacing: -0.02em; "
            "line-height: 1.0; color: #000000; margin: 0 0 20px 0; "
            "padding-bottom: 20px; border-bottom: 2px solid #000000;"
        ),
        "h2": (
            "font-size: 22px; font-weight: 900; text-transform: uppercase; "
            "letter-spacing: 0.05em; line-height: 1.2; color: #000000; "
            "margin: 32px 0 16px 0; padding-bottom: 8px; border-bottom: 1px solid #000000;"
        ),
        "h3": (
            "font-size: 18px; font-weight: 700; line-height: 1.3; color: #000000; "
            "margin: 24px 0 12px 0;"
        ),
        "a": "color: #0055aa; text-decoration: underline;",
        "blockquote": (
            "margin: 20px 0; padding: 16px; background: white; "
            "border: 1px solid #000000; border-left: 4px solid #0055aa; color: #000000;"
        ),
        "code": (
            f"{MONOSPACE} font-size: 14px; background: #e6e4dc; padding: 2px 6px; "
            "border: 1px solid rgba(0, 0, 0, 0.2); color: #000000;"
        ),
        "hr": "margin: 32px 0; border: none; border-top: 2px solid #000000;",
        "th": (
            "padding: 10px 12px; text-align: left; border: 1px solid #000000; "
            f"{MONOSPACE} font-size: 11px; font-weight: 700; text-transform: uppercase; "
            "letter-spacing: 0.1em; background: #000000; color: #ffffff;"
        ),
        "td": (
            "padding: 10px 12px; text-align: left; border: 1px solid #000000; "
            "font-size: 15px; color: #000000;"
        ),
    },
)

PLAIN = _profile("plain", {})

PROFILES: Mapping[str, StyleProfile] = MappingProxyType(
    {profile.name: profile for profile in (CLIENT, LABS, PLAIN)}
)


def get_style_profile(name: str) -> StyleProfile:
    """Look up a profile by name, raising ``ValueError`` for unknown styles."""
    try:
        return PROFILES[name]
    except KeyError as exc:
        choices = ", ".join(sorted(PROFILES))
        raise ValueError(f"Unknown style '{name}' (expected one of: {choices})") from exc


__all__ = ["CLIENT", "LABS", "PLAIN", "PROFILES", "StyleProfile", "get_style_profile"]
