"""
Markdown生成模組

此模組負責將文檔樹轉換為可發布的Markdown，支持行內LaTeX和宏定義頭部。

主要功能：
- 樣式解析（單一強調標記）
- 代碼塊、標題、列表、引用塊、表格
- 腳注去重和排序
- 圖片URL嵌入
- 宏定義提取和後處理
"""

from .generator import (
    MarkdownGenerator,
    RenderContext,
    RenderResult,
    RenderState,
    render_document,
    render_markdown,
    render_segments,
    split_at_page_breaks,
)
from .formatter import MarkdownFormatter, post_process
from .images import ImageResolver, image_object_ids, match_object_ids_to_urls
from .latex import LatexMacros, fix_latex_symbol, parse_newcommand, wrap_inline_latex
from .style import StyleResolver, is_monospace

__all__ = [
    "MarkdownGenerator",
    "RenderContext",
    "RenderResult",
    "RenderState",
    "render_document",
    "render_markdown",
    "render_segments",
    "split_at_page_breaks",
    "MarkdownFormatter",
    "post_process",
    "ImageResolver",
    "image_object_ids",
    "match_object_ids_to_urls",
    "LatexMacros",
    "fix_latex_symbol",
    "parse_newcommand",
    "wrap_inline_latex",
    "StyleResolver",
    "is_monospace",
]

__version__ = "1.0.0"
