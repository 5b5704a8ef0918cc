"""
文檔模型
Document Model

已解析的富文本文檔樹：段落、文本片段、列表、腳注、表格和內嵌對象。
渲染期間不可變。

結構元素（StructuralElement）和段落元素（ParagraphElement）都是封閉的
聯合類型，渲染器按類型分派；無法識別的種類用Unknown*表示，只產生警告。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union


class NamedStyleType(Enum):
    """段落命名樣式"""
    TITLE = "TITLE"
    HEADING_1 = "HEADING_1"
    HEADING_2 = "HEADING_2"
    HEADING_3 = "HEADING_3"
    HEADING_4 = "HEADING_4"
    HEADING_5 = "HEADING_5"
    HEADING_6 = "HEADING_6"
    NORMAL_TEXT = "NORMAL_TEXT"
    SUBTITLE = "SUBTITLE"
    OTHER = "OTHER"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "NamedStyleType":
        """未知或缺失的樣式名映射為OTHER"""
        if not value:
            return cls.OTHER
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER

    @property
    def heading_level(self) -> int:
        """標題級別，0表示非標題"""
        return _HEADING_LEVELS.get(self, 0)


_HEADING_LEVELS = {
    NamedStyleType.TITLE: 1,
    NamedStyleType.HEADING_1: 1,
    NamedStyleType.HEADING_2: 2,
    NamedStyleType.HEADING_3: 3,
    NamedStyleType.HEADING_4: 4,
    NamedStyleType.HEADING_5: 5,
    NamedStyleType.HEADING_6: 6,
}


class BaselineOffset(Enum):
    """基線偏移"""
    NONE = "NONE"
    SUBSCRIPT = "SUBSCRIPT"
    SUPERSCRIPT = "SUPERSCRIPT"


class EmbeddedObjectKind(Enum):
    """內嵌對象類型"""
    IMAGE = "image"
    DRAWING = "drawing"
    LINKED_CONTENT = "linked_content"   # 鏈接的表格/圖表
    UNKNOWN = "unknown"


# ============ 文本樣式與段落元素 ============

@dataclass(frozen=True)
class TextStyle:
    """文本片段樣式；顏色只關心是否存在"""
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    small_caps: bool = False
    background_color: Optional[str] = None
    foreground_color: Optional[str] = None
    baseline_offset: BaselineOffset = BaselineOffset.NONE
    font_family: Optional[str] = None


@dataclass(frozen=True)
class TextRun:
    """連續的同樣式文本"""
    content: str
    style: TextStyle = field(default_factory=TextStyle)
    link: Optional[str] = None


@dataclass(frozen=True)
class InlineObjectRef:
    """內嵌對象引用"""
    object_id: str


@dataclass(frozen=True)
class FootnoteRef:
    """腳注引用"""
    footnote_id: str


@dataclass(frozen=True)
class PageBreak:
    pass


@dataclass(frozen=True)
class HorizontalRule:
    pass


@dataclass(frozen=True)
class ColumnBreak:
    pass


@dataclass(frozen=True)
class Equation:
    pass


@dataclass(frozen=True)
class AutoText:
    pass


@dataclass(frozen=True)
class UnknownParagraphElement:
    """無法識別的段落元素"""
    kind: str = ""


ParagraphElement = Union[
    TextRun, InlineObjectRef, FootnoteRef, PageBreak, HorizontalRule,
    ColumnBreak, Equation, AutoText, UnknownParagraphElement
]


# ============ 結構元素 ============

@dataclass(frozen=True)
class Bullet:
    """段落的列表歸屬"""
    list_id: str
    nesting_level: int = 0


@dataclass
class Paragraph:
    """段落"""
    elements: List[ParagraphElement] = field(default_factory=list)
    named_style: NamedStyleType = NamedStyleType.NORMAL_TEXT
    bullet: Optional[Bullet] = None
    indent_start: float = 0.0       # 起始縮進（磅），大於0且無項目符號時視為引用塊

    @property
    def is_block_quote(self) -> bool:
        return self.indent_start > 0 and self.bullet is None

    def has_page_break(self) -> bool:
        return any(isinstance(el, PageBreak) for el in self.elements)


@dataclass
class TableCell:
    content: List["StructuralElement"] = field(default_factory=list)


@dataclass
class TableRow:
    cells: List[TableCell] = field(default_factory=list)


@dataclass
class Table:
    rows: List[TableRow] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass
class TableOfContents:
    content: List["StructuralElement"] = field(default_factory=list)


@dataclass
class SectionBreak:
    pass


@dataclass
class UnknownStructuralElement:
    """無法識別的結構元素"""
    kind: str = ""


StructuralElement = Union[
    Paragraph, Table, TableOfContents, SectionBreak, UnknownStructuralElement
]


# ============ 文檔級表 ============

@dataclass(frozen=True)
class ListLevel:
    """列表層級屬性；沒有固定符號的層級是有序列表"""
    has_fixed_glyph: bool = False


@dataclass
class ListDefinition:
    list_id: str
    nesting_levels: Dict[int, ListLevel] = field(default_factory=dict)


@dataclass
class Footnote:
    footnote_id: str
    content: List[StructuralElement] = field(default_factory=list)


@dataclass
class InlineObject:
    object_id: str
    kind: EmbeddedObjectKind = EmbeddedObjectKind.IMAGE
    title: str = ""

    @property
    def is_image(self) -> bool:
        return self.kind in (EmbeddedObjectKind.IMAGE, EmbeddedObjectKind.DRAWING)


@dataclass
class Document:
    """完整文檔"""
    content: List[StructuralElement] = field(default_factory=list)
    lists: Dict[str, ListDefinition] = field(default_factory=dict)
    footnotes: Dict[str, Footnote] = field(default_factory=dict)
    inline_objects: Dict[str, InlineObject] = field(default_factory=dict)
    title: str = ""
    document_id: str = ""

    def iter_paragraphs(self) -> List[Paragraph]:
        """正文中的頂層段落"""
        return [el for el in self.content if isinstance(el, Paragraph)]


# 圖片URL表：內嵌對象ID -> 公開URL
ImageURLTable = Dict[str, str]
