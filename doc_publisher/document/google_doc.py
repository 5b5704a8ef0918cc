"""
Google文檔導出加載器
Google Docs Export Loader

將Google Docs API v1 導出的JSON（dict、.json 或 .json.gz 文件）轉換為文檔模型。
只做結構映射，不做任何網絡請求。
"""

import gzip
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config.logging_config import get_logger
from .base import (
    AutoText, BaselineOffset, Bullet, ColumnBreak, Document, EmbeddedObjectKind,
    Equation, Footnote, FootnoteRef, HorizontalRule, InlineObject, InlineObjectRef,
    ListDefinition, ListLevel, NamedStyleType, PageBreak, Paragraph,
    ParagraphElement, SectionBreak, StructuralElement, Table, TableCell,
    TableOfContents, TableRow, TextRun, TextStyle, UnknownParagraphElement,
    UnknownStructuralElement,
)
from ..utils.error_handling import DocumentLoadError

logger = get_logger(__name__)

# 段落元素鍵 -> 無內容元素類型
_MARKER_ELEMENTS = {
    "pageBreak": PageBreak,
    "horizontalRule": HorizontalRule,
    "columnBreak": ColumnBreak,
    "equation": Equation,
    "autoText": AutoText,
}


def format_color(optional_color: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    OptionalColor -> "#rrggbb"

    沒有color字段表示透明，返回None。
    """
    if not optional_color or "color" not in optional_color:
        return None
    rgb = optional_color["color"].get("rgbColor", {})
    channels = [rgb.get(name, 0.0) for name in ("red", "green", "blue")]
    return "#" + "".join(f"{round(c * 255):02x}" for c in channels)


class GoogleDocLoader:
    """Google Docs JSON -> Document"""

    def load(self, file_path: Union[str, Path]) -> Document:
        """
        從文件加載文檔

        Args:
            file_path: .json 或 .json.gz 文件路徑

        Returns:
            Document: 文檔模型

        Raises:
            DocumentLoadError: 文件內容不是有效的文檔JSON
        """
        path = Path(file_path)
        try:
            if path.suffix == ".gz":
                with gzip.open(path, "rt", encoding="utf-8") as f:
                    data = json.load(f)
            else:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
        except json.JSONDecodeError as e:
            raise DocumentLoadError(f"無法解析文檔JSON: {e}", file_path=str(path)) from e

        document = self.from_dict(data)
        logger.info(
            f"文檔加載完成: {path.name}",
            elements=len(document.content),
            footnotes=len(document.footnotes),
            inline_objects=len(document.inline_objects)
        )
        return document

    def from_dict(self, data: Any) -> Document:
        """從API響應的dict構建文檔模型"""
        if not isinstance(data, dict):
            raise DocumentLoadError(f"文檔數據必須是JSON對象，實際為 {type(data).__name__}")

        # 兼容 {"document": {...}} 形式的導出包
        if "body" not in data and isinstance(data.get("document"), dict):
            data = data["document"]

        body = data.get("body") or {}
        return Document(
            content=self._structural_elements(body.get("content", [])),
            lists={
                list_id: self._list_definition(list_id, raw)
                for list_id, raw in (data.get("lists") or {}).items()
            },
            footnotes={
                footnote_id: Footnote(
                    footnote_id=raw.get("footnoteId", footnote_id),
                    content=self._structural_elements(raw.get("content", []))
                )
                for footnote_id, raw in (data.get("footnotes") or {}).items()
            },
            inline_objects={
                object_id: self._inline_object(object_id, raw)
                for object_id, raw in (data.get("inlineObjects") or {}).items()
            },
            title=data.get("title", ""),
            document_id=data.get("documentId", ""),
        )

    # ------------------------------------------------------------------

    def _structural_elements(self, items: List[Dict[str, Any]]) -> List[StructuralElement]:
        return [self._structural_element(item) for item in items]

    def _structural_element(self, item: Dict[str, Any]) -> StructuralElement:
        if "paragraph" in item:
            return self._paragraph(item["paragraph"])
        if "table" in item:
            return self._table(item["table"])
        if "tableOfContents" in item:
            return TableOfContents(
                content=self._structural_elements(item["tableOfContents"].get("content", []))
            )
        if "sectionBreak" in item:
            return SectionBreak()
        kinds = [k for k in item if k not in ("startIndex", "endIndex")]
        return UnknownStructuralElement(kind=",".join(kinds))

    def _paragraph(self, raw: Dict[str, Any]) -> Paragraph:
        style = raw.get("paragraphStyle") or {}
        indent = (style.get("indentStart") or {}).get("magnitude") or 0.0

        bullet = None
        if raw.get("bullet"):
            bullet = Bullet(
                list_id=raw["bullet"].get("listId", ""),
                nesting_level=int(raw["bullet"].get("nestingLevel", 0))
            )

        return Paragraph(
            elements=[self._paragraph_element(el) for el in raw.get("elements", [])],
            named_style=NamedStyleType.from_value(style.get("namedStyleType", "NORMAL_TEXT")),
            bullet=bullet,
            indent_start=float(indent),
        )

    def _paragraph_element(self, item: Dict[str, Any]) -> ParagraphElement:
        if "textRun" in item:
            return self._text_run(item["textRun"])
        if "inlineObjectElement" in item:
            return InlineObjectRef(object_id=item["inlineObjectElement"].get("inlineObjectId", ""))
        if "footnoteReference" in item:
            return FootnoteRef(footnote_id=item["footnoteReference"].get("footnoteId", ""))
        for key, element_type in _MARKER_ELEMENTS.items():
            if key in item:
                return element_type()
        kinds = [k for k in item if k not in ("startIndex", "endIndex")]
        return UnknownParagraphElement(kind=",".join(kinds))

    def _text_run(self, raw: Dict[str, Any]) -> TextRun:
        style = raw.get("textStyle") or {}
        font = (style.get("weightedFontFamily") or {}).get("fontFamily")
        link = (style.get("link") or {}).get("url")

        try:
            offset = BaselineOffset(style.get("baselineOffset", "NONE"))
        except ValueError:
            offset = BaselineOffset.NONE

        return TextRun(
            content=raw.get("content", ""),
            style=TextStyle(
                bold=bool(style.get("bold")),
                italic=bool(style.get("italic")),
                strikethrough=bool(style.get("strikethrough")),
                underline=bool(style.get("underline")),
                small_caps=bool(style.get("smallCaps")),
                background_color=format_color(style.get("backgroundColor")),
                foreground_color=format_color(style.get("foregroundColor")),
                baseline_offset=offset,
                font_family=font,
            ),
            link=link,
        )

    def _table(self, raw: Dict[str, Any]) -> Table:
        rows = []
        for row in raw.get("tableRows", []):
            cells = [
                TableCell(content=self._structural_elements(cell.get("content", [])))
                for cell in row.get("tableCells", [])
            ]
            rows.append(TableRow(cells=cells))
        return Table(rows=rows)

    def _list_definition(self, list_id: str, raw: Dict[str, Any]) -> ListDefinition:
        levels = (raw.get("listProperties") or {}).get("nestingLevels", [])
        return ListDefinition(
            list_id=list_id,
            nesting_levels={
                index: ListLevel(has_fixed_glyph=bool(level.get("glyphSymbol")))
                for index, level in enumerate(levels)
            }
        )

    def _inline_object(self, object_id: str, raw: Dict[str, Any]) -> InlineObject:
        embedded = (raw.get("inlineObjectProperties") or {}).get("embeddedObject") or {}
        if "imageProperties" in embedded:
            kind = EmbeddedObjectKind.IMAGE
        elif "embeddedDrawingProperties" in embedded:
            kind = EmbeddedObjectKind.DRAWING
        elif "linkedContentReference" in embedded:
            kind = EmbeddedObjectKind.LINKED_CONTENT
        else:
            kind = EmbeddedObjectKind.UNKNOWN
        return InlineObject(object_id=object_id, kind=kind, title=embedded.get("title", ""))


def load_google_doc(file_path: Union[str, Path]) -> Document:
    """加載Google文檔導出文件的便捷函數"""
    return GoogleDocLoader().load(file_path)
