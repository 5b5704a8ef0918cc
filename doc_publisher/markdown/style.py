"""
樣式解析器
Style Resolver

Markdown每段文字最多只能有一種強調：斜體、粗體、刪除線或等寬。
按 斜體 < 粗體 < 刪除線 < 等寬 的優先級選出唯一的包裹標記，
其餘無法表達的樣式記錄警告後丟棄。
"""

from typing import Iterable, Optional

from ..config.settings import RenderSettings, get_render_settings
from ..document.base import BaselineOffset, TextRun, TextStyle
from ..utils.error_handling import WarningCollector

DEFAULT_MONOSPACE_FONTS = ("courier new", "consolas", "roboto mono")

ITALIC = "*"
BOLD = "**"
MONOSPACE = "`"


def is_monospace(font_family: Optional[str], fonts: Iterable[str] = DEFAULT_MONOSPACE_FONTS) -> bool:
    """判斷字體是否為等寬字體（用於代碼檢測）"""
    if not font_family:
        return False
    return font_family.lower() in fonts


class StyleResolver:
    """將文本樣式映射為單一Markdown包裹標記"""

    def __init__(self, settings: Optional[RenderSettings] = None):
        self.settings = settings or get_render_settings()
        self.monospace_fonts = frozenset(self.settings.monospace_fonts)

    def is_monospace(self, style: TextStyle) -> bool:
        return is_monospace(style.font_family, self.monospace_fonts)

    def wrapper(self, style: TextStyle) -> str:
        """
        選出包裹標記，後出現的覆蓋前面的

        Args:
            style: 文本樣式

        Returns:
            str: 包裹標記，無強調時為空字符串
        """
        surround = ""
        if style.italic:
            surround = ITALIC
        if style.bold:
            surround = BOLD
        if style.strikethrough:
            surround = self.settings.strikethrough_marker
        if self.is_monospace(style):
            surround = MONOSPACE
        return surround

    def resolve(self, run: TextRun, warnings: WarningCollector) -> str:
        """返回包裹標記，並對無法表達的樣式記錄警告"""
        self.report_unsupported(run, warnings)
        return self.wrapper(run.style)

    def report_unsupported(self, run: TextRun, warnings: WarningCollector) -> None:
        """Markdown完全不支持的樣式；帶鏈接時顏色和下劃線屬於鏈接的默認外觀"""
        style = run.style
        if style.small_caps:
            warnings.unsupported("ignoring smallcaps", content=run.content)
        if style.background_color is not None:
            warnings.unsupported("ignoring background color", content=run.content)
        if style.foreground_color is not None and run.link is None:
            warnings.unsupported("ignoring foreground color", content=run.content)
        if style.underline and run.link is None:
            warnings.unsupported("ignoring underlining", content=run.content)
        if style.baseline_offset == BaselineOffset.SUBSCRIPT:
            warnings.unsupported("ignoring subscript", content=run.content)
        elif style.baseline_offset == BaselineOffset.SUPERSCRIPT:
            warnings.unsupported("ignoring superscript", content=run.content)

    def report_table_cell_emphasis(self, run: TextRun, warnings: WarningCollector) -> None:
        """表格單元格內不渲染任何強調"""
        style = run.style
        if style.italic:
            warnings.unsupported("ignoring italics in table cell", content=run.content)
        if style.bold:
            warnings.unsupported("ignoring bold text in table cell", content=run.content)
        if style.strikethrough:
            warnings.unsupported("ignoring strikethrough in table cell", content=run.content)
        if self.is_monospace(style):
            warnings.unsupported("ignoring monospace in table cell", content=run.content)
