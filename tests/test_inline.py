"""Tests for inline Markdown formatting."""

from __future__ import annotations

from gworkspace_cli.rendering import escape_html, format_inline, get_style_profile


def test_escape_html_covers_quotes() -> None:
    assert escape_html("<a href='x'>&\"") == "&lt;a href=&#039;x&#039;&gt;&amp;&quot;"


def test_bold_italic_and_links() -> None:
    text = "**bold**, *italic* and [site](https://example.com)"

    assert format_inline(text) == (
        '<strong>bold</strong>, <em>italic</em> and <a href="https://example.com">site</a>'
    )


def test_code_spans_are_not_reinterpreted() -> None:
    assert format_inline("run `**x** <b>` now") == (
        "run <code>**x** &lt;b&gt;</code> now"
    )


def test_profile_adds_style_attributes() -> None:
    client = get_style_profile("client")

    assert format_inline("**x**", client) == '<strong style="font-weight: 700;">x</strong>'
    assert format_inline("`y`", client).startswith("<code style=")


def test_link_targets_keep_their_asterisks() -> None:
    assert format_inline("[*x*](http://a.com/*y*)") == (
        '<a href="http://a.com/*y*"><em>x</em></a>'
    )
