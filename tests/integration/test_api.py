"""Integration tests for the reader HTTP API.

Runs the FastAPI app against the fixture resources:
1. Health and edition listing
2. Book lists and per-book counts
3. Verse lookup, including placeholders and modernization
4. Search and free-text normalization
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from kjvreader.api.main import create_app
from kjvreader.config import Settings
from kjvreader.services import build_services

RESOURCES_FIXTURE = Path(__file__).parent.parent / "fixtures" / "resources"


@pytest.fixture
def services(tmp_path):
    settings = Settings(data_root=tmp_path / "data", resources_root=RESOURCES_FIXTURE)
    services = build_services(settings)
    yield services
    services.close()


@pytest.fixture
def client(services):
    with TestClient(create_app(services)) as client:
        yield client


class TestMeta:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["api"] == "/api/v1"

    def test_health(self, client):
        data = client.get("/api/v1/health").json()
        assert data["status"] == "ok"
        assert data["store_connected"] is True

    def test_editions(self, client):
        data = client.get("/api/v1/editions").json()

        assert [e["id"] for e in data] == ["KJV-1611", "RV-1602"]
        kjv = data[0]
        assert kjv["current"] is True
        assert kjv["supports_modernization"] is True
        assert data[1]["supports_modernization"] is False


class TestBooks:
    def test_all_books(self, client):
        data = client.get("/api/v1/books").json()
        assert data["edition"] == "KJV-1611"
        assert data["books"] == ["Genesis", "John", "Tobit", "Odes"]

    @pytest.mark.parametrize(
        "section, expected",
        [("ot", ["Genesis"]), ("nt", ["John"]), ("apocrypha", ["Tobit", "Odes"])],
    )
    def test_sections(self, client, section, expected):
        data = client.get("/api/v1/books", params={"section": section}).json()
        assert data["books"] == expected

    def test_invalid_section(self, client):
        response = client.get("/api/v1/books", params={"section": "gospels"})
        assert response.status_code == 422

    def test_other_edition(self, client):
        data = client.get("/api/v1/books", params={"edition": "RV-1602"}).json()
        assert data["books"] == ["Juan"]

    def test_unknown_edition(self, client):
        response = client.get("/api/v1/books", params={"edition": "NIV"})
        assert response.status_code == 404

    def test_book_info(self, client):
        data = client.get("/api/v1/books/Genesis").json()
        assert data["id"] == "genesis"
        assert data["chapter_count"] == 2
        assert data["verse_counts"] == [3, 2]
        assert data["apocrypha"] is False

    def test_apocryphal_book_info(self, client):
        assert client.get("/api/v1/books/Odes").json()["apocrypha"] is True

    def test_unknown_book(self, client):
        assert client.get("/api/v1/books/Hezekiah").status_code == 404


class TestVerse:
    def test_verse(self, client):
        data = client.get(
            "/api/v1/verse", params={"book": "John", "chapter": 2, "verse": 1}
        ).json()

        assert data["available"] is True
        assert data["modernized"] is False
        assert data["text"].endswith("mother of Iesus was there.")

    def test_modern_override(self, client):
        data = client.get(
            "/api/v1/verse",
            params={"book": "John", "chapter": 2, "verse": 1, "modern": True},
        ).json()

        assert data["modernized"] is True
        assert data["text"].endswith("mother of Jesus was there.")

    def test_modern_ignored_for_unsupported_edition(self, client):
        data = client.get(
            "/api/v1/verse",
            params={
                "book": "Juan",
                "chapter": 1,
                "verse": 1,
                "edition": "RV-1602",
                "modern": True,
            },
        ).json()

        assert data["modernized"] is False
        assert data["text"].startswith("En el principio")

    def test_missing_verse_placeholder(self, client):
        data = client.get(
            "/api/v1/verse", params={"book": "Genesis", "chapter": 1, "verse": 31}
        ).json()

        assert data["available"] is False
        assert data["text"] == "Verse 31 text is not available."

    def test_invalid_numbers(self, client):
        response = client.get(
            "/api/v1/verse", params={"book": "Genesis", "chapter": 0, "verse": 1}
        )
        assert response.status_code == 422


class TestSearchAndNormalize:
    def test_search(self, client):
        data = client.get("/api/v1/search", params={"q": "beginning"}).json()

        assert data["count"] == 3
        assert [r["reference"] for r in data["results"]] == [
            "Genesis 1:1",
            "John 1:1",
            "John 1:2",
        ]

    def test_search_limit(self, client):
        data = client.get("/api/v1/search", params={"q": "beginning", "limit": 1}).json()
        assert data["count"] == 1

    def test_search_requires_query(self, client):
        assert client.get("/api/v1/search").status_code == 422

    def test_normalize(self, client):
        response = client.post("/api/v1/normalize", json={"text": "Thou art in heauen"})

        assert response.status_code == 200
        assert response.json() == {
            "text": "Thou art in heauen",
            "normalized": "You are in heaven",
        }
