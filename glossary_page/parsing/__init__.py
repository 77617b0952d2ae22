"""
Glossary markup parsing exports.
"""

from .engine import GlossaryParser, HtmlGlossaryParser, normalise_whitespace
from .markup import render_document, render_item
from .models import (
    AboutLink,
    CardWidth,
    GlossaryDocument,
    GlossaryItem,
    ItemChildRole,
    PageConfig,
    ParsedPage,
    RelatedTerm,
    TagWithDescription,
    Term,
)

__all__ = [
    "AboutLink",
    "CardWidth",
    "GlossaryDocument",
    "GlossaryItem",
    "GlossaryParser",
    "HtmlGlossaryParser",
    "ItemChildRole",
    "PageConfig",
    "ParsedPage",
    "RelatedTerm",
    "TagWithDescription",
    "Term",
    "normalise_whitespace",
    "render_document",
    "render_item",
]
