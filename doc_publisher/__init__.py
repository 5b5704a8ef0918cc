"""
文檔發布工具
Doc Publisher

將已解析的富文本文檔（段落、文本片段、列表、腳注、表格、內嵌對象）
渲染為可發布到第三方博客平台的Markdown，支持行內LaTeX和宏定義頭部。

核心功能：
- 單一強調標記的樣式解析
- 代碼塊檢測
- 腳注去重和排序
- 內嵌對象到圖片URL的解析
- LaTeX宏定義提取和命令名改寫
- 兩遍空白規範化
"""

__version__ = "1.0.0"
__license__ = "MIT"

# 版本信息
VERSION = __version__
VERSION_INFO = tuple(int(x) for x in __version__.split('.'))

from .document import Document, GoogleDocLoader, load_google_doc
from .markdown import (
    MarkdownGenerator,
    RenderResult,
    render_document,
    render_markdown,
    render_segments,
    split_at_page_breaks,
)

__all__ = [
    "VERSION",
    "VERSION_INFO",
    "Document",
    "GoogleDocLoader",
    "load_google_doc",
    "MarkdownGenerator",
    "RenderResult",
    "render_document",
    "render_markdown",
    "render_segments",
    "split_at_page_breaks",
]
