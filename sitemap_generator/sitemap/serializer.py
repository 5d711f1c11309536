"""
Renders sitemap entries into a sitemap.org 0.9 XML document.
"""

import logging
from pathlib import Path
from typing import Iterable, Union
from xml.sax.saxutils import escape

from .models import SitemapEntry


SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"

# Quotes are escaped as well so a <loc> value is safe in any XML context
_XML_ENTITIES = {'"': '&quot;', "'": '&apos;'}


class SitemapSerializer:
    """Serializes an ordered collection of SitemapEntry objects to XML."""

    def __init__(self, indent: str = "  "):
        self.indent = indent
        self.logger = logging.getLogger(__name__)

    def serialize(self, entries: Iterable[SitemapEntry]) -> str:
        """
        Render entries as a <urlset> document.

        Entries are written in the order given; nothing is sorted or merged.

        Args:
            entries: Sitemap entries in output order

        Returns:
            The XML document as a string
        """
        inner = self.indent * 2
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<urlset xmlns="{SITEMAP_NAMESPACE}">'
        ]

        count = 0
        for entry in entries:
            lines.append(f"{self.indent}<url>")
            lines.append(f"{inner}<loc>{escape(entry.url, _XML_ENTITIES)}</loc>")
            lines.append(f"{inner}<lastmod>{entry.last_modified.isoformat()}</lastmod>")
            lines.append(f"{inner}<changefreq>{entry.change_frequency.value}</changefreq>")
            lines.append(f"{inner}<priority>{entry.priority}</priority>")
            lines.append(f"{self.indent}</url>")
            count += 1

        lines.append('</urlset>')

        self.logger.debug(f"Serialized {count} sitemap entries")
        return "\n".join(lines)

    def write(self, entries: Iterable[SitemapEntry], path: Union[str, Path]) -> Path:
        """Serialize entries and write the document to a UTF-8 file."""
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as file:
            file.write(self.serialize(entries))

        self.logger.info(f"Sitemap written to {output_path}")
        return output_path
