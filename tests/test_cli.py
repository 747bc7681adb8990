"""Tests for the kjvreader command line."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from kjvreader.__main__ import cli
from kjvreader.preferences import PreferenceStore
from kjvreader.sources.cache import LibraryCache


@pytest.fixture
def run(tmp_path, resources_root):
    """Invoke the CLI against an isolated data root and the fixture resources."""
    runner = CliRunner()
    base = [
        "--data-root",
        str(tmp_path / "data"),
        "--resources",
        str(resources_root),
        "--log-level",
        "error",
    ]

    def invoke(*args, input=None):
        return runner.invoke(cli, [*base, *args], input=input)

    return invoke


def _json(result):
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestReading:
    def test_read_chapter(self, run):
        data = _json(run("read", "Genesis", "1", "--json"))

        assert data["edition"] == "KJV-1611"
        assert [v["verse"] for v in data["verses"]] == [1, 2, 3]
        assert "Heauen" in data["verses"][0]["text"]

    def test_read_single_verse_modern(self, run):
        data = _json(run("--modern", "read", "John", "2", "1", "--json"))
        assert data["verses"][0]["text"].endswith("mother of Jesus was there.")

    def test_missing_verse_placeholder(self, run):
        data = _json(run("read", "Genesis", "1", "40", "--json"))
        assert data["verses"][0]["text"] == "Verse 40 text is not available."

    def test_unknown_book(self, run):
        result = run("read", "Hezekiah", "1")
        assert result.exit_code == 1
        assert "Book not found" in result.output

    def test_missing_chapter(self, run):
        result = run("read", "Genesis", "9")
        assert result.exit_code == 1

    def test_read_renders_panel(self, run):
        result = run("read", "Genesis", "1", "3")
        assert result.exit_code == 0, result.output
        assert "Let there be light" in result.output

    def test_edition_option(self, run):
        data = _json(run("--edition", "RV-1602", "read", "Juan", "1", "--json"))
        assert data["edition"] == "RV-1602"
        assert data["verses"][0]["text"].startswith("En el principio")

    def test_unknown_edition_option(self, run):
        result = run("--edition", "NIV", "books")
        assert result.exit_code == 1
        assert "NIV" in result.output


class TestListing:
    def test_editions(self, run):
        data = _json(run("editions", "--json"))
        assert [e["id"] for e in data] == ["KJV-1611", "RV-1602"]

    def test_books_by_section(self, run):
        data = _json(run("books", "--json"))
        assert data == {"ot": ["Genesis"], "nt": ["John"], "apocrypha": ["Tobit", "Odes"]}

    def test_books_single_section(self, run):
        assert _json(run("books", "--section", "apocrypha", "--json")) == {
            "apocrypha": ["Tobit", "Odes"]
        }

    def test_status(self, run):
        rows = {row["edition"]: row for row in _json(run("status", "--json"))}
        assert rows["KJV-1611"]["loaded"]
        assert rows["KJV-1611"]["total"] == 4

    def test_search(self, run):
        data = _json(run("search", "beginning", "-n", "2", "--json"))
        assert [r["reference"] for r in data] == ["Genesis 1:1", "John 1:1"]

    def test_search_no_results(self, run):
        result = run("search", "Nebuchadnezzar")
        assert result.exit_code == 0
        assert "No verses found" in result.output


class TestModernize:
    def test_argument(self, run):
        result = run("modernize", "Thou art in heauen")
        assert result.exit_code == 0
        assert result.output.strip() == "You are in heaven"

    def test_stdin(self, run):
        result = run("modernize", input="Vnto thee\n")
        assert result.exit_code == 0
        assert result.output.strip() == "To you"


class TestSettingsAndBookmarks:
    def test_modern_setting_persists(self, run):
        assert run("settings", "modern", "on").exit_code == 0

        data = _json(run("read", "John", "2", "1", "--json"))
        assert "Jesus" in data["verses"][0]["text"]

        data = _json(run("--archaic", "read", "John", "2", "1", "--json"))
        assert "Iesus" in data["verses"][0]["text"]

    def test_edition_setting_persists(self, run):
        assert run("settings", "edition", "RV-1602").exit_code == 0
        data = _json(run("books", "--json"))
        assert data["nt"] == ["Juan"]

    def test_edition_setting_does_not_load(self, run, store, catalog):
        result = run("settings", "edition", "RV-1602")

        assert result.exit_code == 0
        assert "Reina-Valera" in result.output
        assert PreferenceStore(store, catalog).selected_edition.id == "RV-1602"
        assert LibraryCache(store).cached_editions() == []

    def test_edition_setting_unknown(self, run):
        assert run("settings", "edition", "NIV").exit_code == 1

    def test_settings_show(self, run):
        result = run("settings", "show")
        assert result.exit_code == 0
        assert "KJV-1611" in result.output

    def test_bookmark_lifecycle(self, run):
        assert run("bookmarks", "add", "Genesis", "1", "1").exit_code == 0
        again = run("bookmarks", "add", "Genesis", "1", "1")
        assert "already bookmarked" in again.output

        items = _json(run("bookmarks", "list", "--json"))
        assert [i["book"] for i in items] == ["Genesis"]

        removed = run("bookmarks", "remove", items[0]["id"][:8])
        assert removed.exit_code == 0
        assert _json(run("bookmarks", "list", "--json")) == []

    def test_bookmark_unavailable_verse(self, run):
        result = run("bookmarks", "add", "Genesis", "1", "99")
        assert result.exit_code == 1

    def test_bookmarks_clear(self, run):
        run("bookmarks", "add", "Genesis", "1", "1")
        run("bookmarks", "add", "John", "1", "1")

        result = run("bookmarks", "clear", "--yes")

        assert result.exit_code == 0
        assert _json(run("bookmarks", "list", "--json")) == []


class TestReload:
    def test_reload_rereads_resources(self, run, resources_root):
        _json(run("read", "Genesis", "1", "--json"))

        genesis = resources_root / "Bible-kjv-1611-main" / "Genesis.json"
        data = json.loads(genesis.read_text(encoding="utf-8"))
        data["chapters"][0]["verses"][0]["text"] = "Changed."
        genesis.write_text(json.dumps(data), encoding="utf-8")

        cached = _json(run("read", "Genesis", "1", "1", "--json"))
        assert cached["verses"][0]["text"] != "Changed."

        assert run("reload").exit_code == 0
        fresh = _json(run("read", "Genesis", "1", "1", "--json"))
        assert fresh["verses"][0]["text"] == "Changed."
