"""Tests for PageRecord serialization."""

import json

import pytest

from pagescraper.core import parse_page

PAGE_URL = "https://example.com/page"
ANALYZED_AT = "2024-05-01T12:00:00+00:00"

_HTML = """
<html lang="en">
<head>
  <title>Record</title>
  <meta property="og:type" content="website">
  <meta name="twitter:card" content="summary">
</head>
<body>
  <h1>Top</h1><h3>Deep</h3>
  <p>a b c</p><p>d</p><p>e</p>
  <a href="/in">In</a><a href="https://out.example.org/x">Out</a>
  <img src="/i.png" alt="Icon">
</body>
</html>
"""


@pytest.fixture
def record():
    return parse_page(_HTML, PAGE_URL, analyzed_at=ANALYZED_AT)


class TestToDict:
    def test_top_level_groups(self, record):
        assert list(record.to_dict()) == [
            "url", "basicInfo", "structure", "links", "images", "metadata", "statistics", "status",
        ]

    def test_structure_lists_every_level(self, record):
        structure = record.to_dict()["structure"]
        assert structure["headings"] == {
            "h1": ["Top"], "h2": [], "h3": ["Deep"], "h4": [], "h5": [], "h6": [],
        }
        assert structure["totalSections"] == 2
        assert structure["paragraphs"] == ["a b c", "d", "e"]

    def test_links_and_summary(self, record):
        links = record.to_dict()["links"]
        assert links["items"] == [
            {"url": "https://example.com/in", "text": "In", "isExternal": False},
            {"url": "https://out.example.org/x", "text": "Out", "isExternal": True},
        ]
        assert links["summary"] == {"total": 2, "internal": 1, "external": 1}

    def test_images_and_metadata(self, record):
        data = record.to_dict()
        assert data["images"]["total"] == 1
        assert data["images"]["items"][0]["src"] == "https://example.com/i.png"
        assert data["metadata"] == {"openGraph": {"type": "website"}, "twitter": {"card": "summary"}}

    def test_statistics(self, record):
        assert record.to_dict()["statistics"] == {
            "totalParagraphs": 3,
            "totalWords": 5,
            "wordsPerParagraph": 1.67,
        }

    def test_is_json_serializable(self, record):
        text = json.dumps(record.to_dict(), ensure_ascii=False, indent=2)
        assert json.loads(text)["status"] == "success"


class TestToLegacyDict:
    def test_spanish_top_level_keys(self, record):
        assert list(record.to_legacy_dict()) == [
            "informacionBasica", "estructura", "enlaces", "imagenes", "metadatos", "estadisticas", "estado",
        ]

    def test_basic_info_carries_url(self, record):
        info = record.to_legacy_dict()["informacionBasica"]
        assert info["url"] == PAGE_URL
        assert info["titulo"] == "Record"
        assert info["fechaAnalisis"] == ANALYZED_AT

    def test_link_summary_keys(self, record):
        enlaces = record.to_legacy_dict()["enlaces"]
        assert enlaces["resumen"] == {"total": 2, "externos": 1, "internos": 1}
        assert enlaces["lista"][1] == {"url": "https://out.example.org/x", "texto": "Out", "esExterna": True}

    def test_words_per_paragraph_is_formatted_string(self, record):
        assert record.to_legacy_dict()["estadisticas"]["palabrasPorParrafo"] == "1.67"

    def test_words_per_paragraph_zero_without_paragraphs(self):
        legacy = parse_page("<h1>x</h1>", PAGE_URL).to_legacy_dict()
        assert legacy["estadisticas"]["palabrasPorParrafo"] == 0

    def test_status_marker(self, record):
        assert record.to_legacy_dict()["estado"] == "éxito"
