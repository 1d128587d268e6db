"""Tests for the Google Docs client and document export."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest
import respx

from gworkspace_cli.google import DriveClient, GoogleDocsClient, export_document
from gworkspace_cli.google.docs import extract_plain_text

BASE = GoogleDocsClient.API_BASE
DRIVE = DriveClient.API_BASE


def _cell(text: str) -> dict:
    return {"content": [{"paragraph": {"elements": [{"textRun": {"content": text}}]}}]}


BODY = {
    "content": [
        {"endIndex": 1, "sectionBreak": {}},
        {
            "endIndex": 13,
            "paragraph": {
                "elements": [
                    {"textRun": {"content": "Hello "}},
                    {"textRun": {"content": "world\n"}},
                ]
            },
        },
        {
            "endIndex": 30,
            "table": {
                "tableRows": [
                    {
                        "tableCells": [
                            _cell("a\n"),
                            _cell("b\n"),
                        ]
                    }
                ]
            },
        },
    ]
}


class StaticTokens:
    async def get_token(self) -> str:
        return "test-token"

    def invalidate(self) -> None:
        return None


@pytest.fixture
def docs() -> GoogleDocsClient:
    return GoogleDocsClient(StaticTokens())


def test_extract_plain_text_joins_cells_with_tabs() -> None:
    assert extract_plain_text(BODY) == "Hello world\na\n\tb\n"
    assert extract_plain_text({}) == ""


@respx.mock
def test_read_document_returns_text_and_end_index(docs: GoogleDocsClient) -> None:
    respx.get(f"{BASE}/doc1").respond(
        200, json={"documentId": "doc1", "title": "Notes", "body": BODY}
    )

    content = asyncio.run(docs.read_document("doc1"))

    assert content.title == "Notes"
    assert content.text.startswith("Hello world\n")
    assert content.end_index == 30


@respx.mock
def test_append_inserts_before_final_newline(docs: GoogleDocsClient) -> None:
    respx.get(f"{BASE}/doc1").respond(200, json={"documentId": "doc1", "body": BODY})
    update = respx.post(f"{BASE}/doc1:batchUpdate").respond(200, json={"replies": [{}]})

    index = asyncio.run(docs.append_text("doc1", "More\n"))

    assert index == 29
    assert json.loads(update.calls.last.request.content) == {
        "requests": [{"insertText": {"location": {"index": 29}, "text": "More\n"}}]
    }


@respx.mock
def test_insert_defaults_to_document_start(docs: GoogleDocsClient) -> None:
    update = respx.post(f"{BASE}/doc1:batchUpdate").respond(200, json={})

    index = asyncio.run(docs.insert_text("doc1", "Top\n"))

    assert index == 1
    request = json.loads(update.calls.last.request.content)
    assert request["requests"][0]["insertText"]["location"] == {"index": 1}


@respx.mock
def test_replace_reports_occurrences(docs: GoogleDocsClient) -> None:
    update = respx.post(f"{BASE}/doc1:batchUpdate").respond(
        200, json={"replies": [{"replaceAllText": {"occurrencesChanged": 3}}]}
    )

    changed = asyncio.run(docs.replace_text("doc1", "old", "new", match_case=True))

    assert changed == 3
    replace = json.loads(update.calls.last.request.content)["requests"][0]["replaceAllText"]
    assert replace == {
        "containsText": {"text": "old", "matchCase": True},
        "replaceText": "new",
    }


@respx.mock
def test_create_document(docs: GoogleDocsClient) -> None:
    route = respx.post(BASE).respond(
        200, json={"documentId": "new", "title": "Draft", "revisionId": "r1"}
    )

    created = asyncio.run(docs.create_document("Draft"))

    assert json.loads(route.calls.last.request.content) == {"title": "Draft"}
    assert (created.document_id, created.revision_id) == ("new", "r1")


@respx.mock
def test_export_names_file_after_title_in_directory(tmp_path: Path) -> None:
    respx.get(f"{DRIVE}/files/doc1").respond(200, json={"id": "doc1", "name": "Q1: plan/final"})
    export = respx.get(f"{DRIVE}/files/doc1/export").respond(200, content=b"%PDF-1.7")

    result = asyncio.run(export_document(DriveClient(StaticTokens()), "doc1", "pdf", tmp_path))

    target = tmp_path / "Q1_ plan_final.pdf"
    assert export.calls.last.request.url.params["mimeType"] == "application/pdf"
    assert target.read_bytes() == b"%PDF-1.7"
    assert result.path == str(target.resolve())
    assert result.size == 8


@respx.mock
def test_export_to_explicit_file_skips_name_lookup(tmp_path: Path) -> None:
    name_lookup = respx.get(f"{DRIVE}/files/doc1").respond(200, json={"name": "x"})
    respx.get(f"{DRIVE}/files/doc1/export").mock(
        return_value=httpx.Response(200, content=b"plain text")
    )

    target = tmp_path / "notes.txt"
    result = asyncio.run(export_document(DriveClient(StaticTokens()), "doc1", "txt", target))

    assert not name_lookup.called
    assert target.read_text(encoding="utf-8") == "plain text"
    assert result.format == "txt"


def test_export_rejects_unknown_format(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Invalid format: gif"):
        asyncio.run(export_document(DriveClient(StaticTokens()), "doc1", "gif", tmp_path))
