"""
Immutable data structures describing one analyzed page.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple, Union

HEADING_LEVELS: Tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")

STATUS_SUCCESS = "success"
LEGACY_STATUS_SUCCESS = "éxito"


def _frozen_mapping(values: Mapping[str, str] | None = None) -> Mapping[str, str]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True, slots=True)
class BasicInfo:
    """Single-value fields read from <head> and <html>."""
    title: str
    description: str
    language: str
    keywords: str
    analyzed_at: str


@dataclass(frozen=True, slots=True)
class Structure:
    """Headings per level and paragraphs, in document order."""
    headings: Mapping[str, Tuple[str, ...]]
    paragraphs: Tuple[str, ...]

    @property
    def total_sections(self) -> int:
        return sum(len(texts) for texts in self.headings.values())


@dataclass(frozen=True, slots=True)
class LinkEntry:
    """One resolved <a href> with its anchor text."""
    url: str
    text: str
    is_external: bool


@dataclass(frozen=True, slots=True)
class ImageEntry:
    """One resolved <img src> with its raw attributes or placeholders."""
    src: str
    alt: str
    title: str
    width: str
    height: str


@dataclass(frozen=True, slots=True)
class LinkSummary:
    """Link counts; internal is total minus external."""
    total: int
    internal: int
    external: int


@dataclass(frozen=True, slots=True)
class SocialMetadata:
    """Open Graph and Twitter Card properties keyed by their suffix."""
    open_graph: Mapping[str, str] = field(default_factory=_frozen_mapping)
    twitter: Mapping[str, str] = field(default_factory=_frozen_mapping)


@dataclass(frozen=True, slots=True)
class Statistics:
    """Paragraph and word counts for the page."""
    total_paragraphs: int
    total_words: int
    words_per_paragraph: Union[float, int]


@dataclass(frozen=True, slots=True)
class PageRecord:
    """Snapshot of one page fetch and extraction."""
    url: str
    basic_info: BasicInfo
    structure: Structure
    links: Tuple[LinkEntry, ...]
    images: Tuple[ImageEntry, ...]
    metadata: SocialMetadata
    statistics: Statistics
    status: str = STATUS_SUCCESS

    @property
    def link_summary(self) -> LinkSummary:
        external = sum(1 for link in self.links if link.is_external)
        return LinkSummary(
            total=len(self.links),
            internal=len(self.links) - external,
            external=external,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready representation with camelCase keys."""
        summary = self.link_summary
        return {
            "url": self.url,
            "basicInfo": {
                "title": self.basic_info.title,
                "description": self.basic_info.description,
                "language": self.basic_info.language,
                "keywords": self.basic_info.keywords,
                "analyzedAt": self.basic_info.analyzed_at,
            },
            "structure": {
                "headings": {level: list(self.structure.headings[level]) for level in HEADING_LEVELS},
                "paragraphs": list(self.structure.paragraphs),
                "totalSections": self.structure.total_sections,
            },
            "links": {
                "items": [
                    {"url": link.url, "text": link.text, "isExternal": link.is_external}
                    for link in self.links
                ],
                "summary": {
                    "total": summary.total,
                    "internal": summary.internal,
                    "external": summary.external,
                },
            },
            "images": {
                "items": [
                    {
                        "src": image.src,
                        "alt": image.alt,
                        "title": image.title,
                        "width": image.width,
                        "height": image.height,
                    }
                    for image in self.images
                ],
                "total": len(self.images),
            },
            "metadata": {
                "openGraph": dict(self.metadata.open_graph),
                "twitter": dict(self.metadata.twitter),
            },
            "statistics": {
                "totalParagraphs": self.statistics.total_paragraphs,
                "totalWords": self.statistics.total_words,
                "wordsPerParagraph": self.statistics.words_per_paragraph,
            },
            "status": self.status,
        }

    def to_legacy_dict(self) -> Dict[str, Any]:
        """
        Return the Spanish-keyed shape used by earlier scraper releases.

        Words per paragraph is a two-decimal string there, or 0 when the
        page has no paragraphs.
        """
        summary = self.link_summary
        stats = self.statistics
        words_per_paragraph: Union[str, int] = (
            f"{stats.words_per_paragraph:.2f}" if stats.total_paragraphs else 0
        )
        return {
            "informacionBasica": {
                "url": self.url,
                "titulo": self.basic_info.title,
                "descripcion": self.basic_info.description,
                "idioma": self.basic_info.language,
                "palabrasClave": self.basic_info.keywords,
                "fechaAnalisis": self.basic_info.analyzed_at,
            },
            "estructura": {
                "encabezados": {level: list(self.structure.headings[level]) for level in HEADING_LEVELS},
                "parrafos": list(self.structure.paragraphs),
                "totalSecciones": self.structure.total_sections,
            },
            "enlaces": {
                "lista": [
                    {"url": link.url, "texto": link.text, "esExterna": link.is_external}
                    for link in self.links
                ],
                "resumen": {
                    "total": summary.total,
                    "externos": summary.external,
                    "internos": summary.internal,
                },
            },
            "imagenes": {
                "lista": [
                    {
                        "src": image.src,
                        "alt": image.alt,
                        "titulo": image.title,
                        "ancho": image.width,
                        "alto": image.height,
                    }
                    for image in self.images
                ],
                "total": len(self.images),
            },
            "metadatos": {
                "openGraph": dict(self.metadata.open_graph),
                "twitter": dict(self.metadata.twitter),
            },
            "estadisticas": {
                "totalParrafos": stats.total_paragraphs,
                "totalPalabras": stats.total_words,
                "palabrasPorParrafo": words_per_paragraph,
            },
            "estado": LEGACY_STATUS_SUCCESS if self.status == STATUS_SUCCESS else self.status,
        }
