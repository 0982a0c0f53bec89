"""Notion bookmark hydrator: enrich bookmark pages with scraped metadata."""

__version__ = "0.1.0"
