"""
文檔模型模組

已解析的文檔樹類型，以及從Google Docs導出JSON構建文檔樹的加載器。
"""

from .base import (
    AutoText,
    BaselineOffset,
    Bullet,
    ColumnBreak,
    Document,
    EmbeddedObjectKind,
    Equation,
    Footnote,
    FootnoteRef,
    HorizontalRule,
    ImageURLTable,
    InlineObject,
    InlineObjectRef,
    ListDefinition,
    ListLevel,
    NamedStyleType,
    PageBreak,
    Paragraph,
    ParagraphElement,
    SectionBreak,
    StructuralElement,
    Table,
    TableCell,
    TableOfContents,
    TableRow,
    TextRun,
    TextStyle,
    UnknownParagraphElement,
    UnknownStructuralElement,
)
from .google_doc import GoogleDocLoader, load_google_doc

__all__ = [
    "AutoText",
    "BaselineOffset",
    "Bullet",
    "ColumnBreak",
    "Document",
    "EmbeddedObjectKind",
    "Equation",
    "Footnote",
    "FootnoteRef",
    "HorizontalRule",
    "ImageURLTable",
    "InlineObject",
    "InlineObjectRef",
    "ListDefinition",
    "ListLevel",
    "NamedStyleType",
    "PageBreak",
    "Paragraph",
    "ParagraphElement",
    "SectionBreak",
    "StructuralElement",
    "Table",
    "TableCell",
    "TableOfContents",
    "TableRow",
    "TextRun",
    "TextStyle",
    "UnknownParagraphElement",
    "UnknownStructuralElement",
    "GoogleDocLoader",
    "load_google_doc",
]
