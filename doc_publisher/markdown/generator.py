"""
Markdown生成器
Markdown Generator

遞歸遍歷文檔的結構元素，輸出Markdown：
- 整段等寬字體的普通段落合併為代碼塊
- 標題、引用塊、有序/無序列表前綴
- 腳注引用去重並按首次出現順序追加到文末
- 內嵌圖片按預先上傳好的URL表輸出
- 宏定義提取到 $$ 頭部，最後統一做後處理

渲染器本身是純函數：每次調用使用自己的狀態，不做I/O，可以多線程並行調用。
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Union

from ..config.logging_config import get_logger, log_performance
from ..config.settings import RenderSettings, get_render_settings
from ..document.base import (
    AutoText, Bullet, ColumnBreak, Document, EmbeddedObjectKind, Equation,
    FootnoteRef, HorizontalRule, InlineObjectRef, NamedStyleType, PageBreak,
    Paragraph, SectionBreak, StructuralElement, Table, TableCell,
    TableOfContents, TextRun,
)
from .formatter import MarkdownFormatter
from .images import ImageResolver
from .latex import LatexMacros, wrap_inline_latex
from .style import StyleResolver
from ..utils.error_handling import (
    RenderWarning, StructuralInconsistencyError, WarningCollector,
)
from ..utils.text_utils import indent_continuation, normalize_quotes, split_space

logger = get_logger(__name__)

CODE_FENCE = "```"


@dataclass
class RenderState:
    """單遍渲染（正文或一個腳注）的狀態，腳注使用獨立實例"""
    code_block: List[str] = field(default_factory=list)
    macros: LatexMacros = field(default_factory=LatexMacros)


@dataclass
class RenderContext:
    """整次渲染共享的狀態"""
    warnings: WarningCollector = field(default_factory=WarningCollector)
    footnote_ids: List[str] = field(default_factory=list)

    def add_footnote(self, footnote_id: str) -> None:
        """記錄腳注ID，只保留首次出現"""
        if footnote_id not in self.footnote_ids:
            self.footnote_ids.append(footnote_id)


@dataclass
class RenderResult:
    """渲染結果"""
    markdown: str
    warnings: List[RenderWarning] = field(default_factory=list)
    footnote_ids: List[str] = field(default_factory=list)
    latex_definitions: List[str] = field(default_factory=list)
    substitutions: Dict[str, str] = field(default_factory=dict)

    @property
    def warning_messages(self) -> List[str]:
        return [str(w) for w in self.warnings]


class MarkdownGenerator:
    """主要的Markdown生成器"""

    def __init__(
        self,
        document: Document,
        image_urls: Union[ImageResolver, Mapping[str, str], None] = None,
        settings: Optional[RenderSettings] = None
    ):
        self.document = document
        self.settings = settings or get_render_settings()
        self.styles = StyleResolver(self.settings)
        if isinstance(image_urls, ImageResolver):
            self.images = image_urls
        else:
            self.images = ImageResolver(image_urls)

    @log_performance("markdown_generate")
    def generate(
        self,
        elements: Optional[Sequence[StructuralElement]] = None,
        segment: Optional[int] = None
    ) -> RenderResult:
        """
        渲染整個文檔或其中一段

        Args:
            elements: 要渲染的結構元素，默認為整個正文
            segment: 分段序號，只用於日誌上下文

        Returns:
            RenderResult: 最終Markdown和渲染警告

        Raises:
            StructuralInconsistencyError: 項目符號引用了不存在的列表或層級
            LatexDecodeError: 文本中含有無法解碼的字符
        """
        if elements is None:
            elements = self.document.content

        doc_logger = logger.for_document(self.document.document_id, segment)
        ctx = RenderContext()
        state = RenderState()
        out: List[str] = []

        try:
            self._process(out, elements, ctx, state)
            rendered = self._process_footnotes(out, ctx, state)
        except Exception as e:
            doc_logger.error(f"Markdown生成失敗: {e}")
            raise

        formatter = MarkdownFormatter(state.macros.substitutions)
        markdown = formatter.format_content("".join(out), state.macros.header())

        doc_logger.info(
            f"Markdown生成完成: {len(elements)} 個結構元素",
            footnotes=len(rendered),
            warnings=len(ctx.warnings),
            latex_definitions=len(state.macros.definitions)
        )

        return RenderResult(
            markdown=markdown,
            warnings=list(ctx.warnings.warnings),
            footnote_ids=rendered,
            latex_definitions=[d.to_latex() for d in state.macros.definitions],
            substitutions=dict(state.macros.substitutions),
        )

    # ============ 結構元素 ============

    def _process(self, out: List[str], elements: Sequence[StructuralElement],
                 ctx: RenderContext, state: RenderState) -> None:
        for element in elements:
            if isinstance(element, Paragraph):
                self._process_paragraph(out, element, ctx, state)
                continue

            # 非段落元素都會結束正在累積的代碼塊
            self._flush_code_block(out, state)

            if isinstance(element, Table):
                self._process_table(out, element, ctx)
            elif isinstance(element, TableOfContents):
                ctx.warnings.unsupported("ignoring table of contents")
            elif isinstance(element, SectionBreak):
                ctx.warnings.unsupported("ignoring section break")
            else:
                ctx.warnings.unsupported(
                    f"encountered a body element of unknown type {type(element).__name__}"
                )

        self._flush_code_block(out, state)

    def _flush_code_block(self, out: List[str], state: RenderState) -> None:
        """把累積的代碼行輸出為圍欄代碼塊；沒有累積時什麼都不做"""
        if not state.code_block:
            return
        out.append(CODE_FENCE + "\n")
        out.append("".join(state.code_block))
        out.append(CODE_FENCE + "\n\n")
        state.code_block.clear()

    def _is_code_paragraph(self, paragraph: Paragraph) -> bool:
        if paragraph.named_style != NamedStyleType.NORMAL_TEXT or paragraph.bullet is not None:
            return False
        return all(
            isinstance(el, TextRun) and self.styles.is_monospace(el.style)
            for el in paragraph.elements
        )

    def _process_paragraph(self, out: List[str], paragraph: Paragraph,
                           ctx: RenderContext, state: RenderState) -> None:
        if self._is_code_paragraph(paragraph):
            # 代碼原樣保留，忽略樣式和鏈接
            state.code_block.extend(el.content for el in paragraph.elements)
            return

        self._flush_code_block(out, state)

        if paragraph.is_block_quote:
            out.append("> ")

        heading_level = paragraph.named_style.heading_level
        if heading_level:
            out.append("#" * heading_level + " ")

        if paragraph.bullet is not None:
            if heading_level:
                ctx.warnings.unsupported(
                    "found a heading that is part of a bulleted list, ignoring the bullet"
                )
            else:
                out.append(self._bullet_prefix(paragraph.bullet))

        for element in paragraph.elements:
            if isinstance(element, TextRun):
                self._process_text_run(out, element, ctx, state)
            elif isinstance(element, FootnoteRef):
                out.append(f"[^{element.footnote_id}]")
                ctx.add_footnote(element.footnote_id)
            elif isinstance(element, InlineObjectRef):
                self._process_inline_object(out, element, ctx)
            elif isinstance(element, HorizontalRule):
                out.append("\n\n---\n\n")
            elif isinstance(element, PageBreak):
                logger.debug("dropping page break")
            elif isinstance(element, ColumnBreak):
                ctx.warnings.unsupported("ignoring column break")
            elif isinstance(element, Equation):
                ctx.warnings.unsupported("ignoring equation")
            elif isinstance(element, AutoText):
                ctx.warnings.unsupported("ignoring auto text")
            else:
                ctx.warnings.unsupported(
                    f"encountered a paragraph element of unknown type {type(element).__name__}"
                )

        out.append("\n\n")

    def _bullet_prefix(self, bullet: Bullet) -> str:
        """列表縮進和標記；沒有固定符號的層級是有序列表"""
        list_definition = self.document.lists.get(bullet.list_id)
        if list_definition is None:
            raise StructuralInconsistencyError(
                f"paragraph references unknown list {bullet.list_id!r}",
                list_id=bullet.list_id,
                nesting_level=bullet.nesting_level
            )

        level = list_definition.nesting_levels.get(bullet.nesting_level)
        if level is None:
            raise StructuralInconsistencyError(
                f"list {bullet.list_id!r} has no nesting level {bullet.nesting_level}",
                list_id=bullet.list_id,
                nesting_level=bullet.nesting_level
            )

        marker = "* " if level.has_fixed_glyph else "1. "
        return "  " * bullet.nesting_level + marker

    # ============ 段落元素 ============

    def _process_inline_object(self, out: List[str], ref: InlineObjectRef, ctx: RenderContext) -> None:
        obj = self.document.inline_objects.get(ref.object_id)
        if obj is None:
            ctx.warnings.missing(
                f"could not find inline object for id {ref.object_id!r}", element_id=ref.object_id
            )
            return

        if obj.is_image:
            url = self.images.resolve(ref.object_id)
            if url is None:
                ctx.warnings.missing(
                    f"no image URL for inline object {ref.object_id!r}", element_id=ref.object_id
                )
                url = ""
            out.append(f"![{obj.title}]({url})")
        elif obj.kind == EmbeddedObjectKind.LINKED_CONTENT:
            ctx.warnings.unsupported("ignoring linked spreadsheet / chart", content=obj.title)
        else:
            ctx.warnings.unsupported(
                f"ignoring embedded object {ref.object_id!r} of unknown type", content=obj.title
            )

    def _process_text_run(self, out: List[str], run: TextRun,
                          ctx: RenderContext, state: RenderState) -> None:
        surround = self.styles.resolve(run, ctx.warnings)
        content = normalize_quotes(run.content)

        # Markdown中樣式必須逐行應用
        lines = content.split("\n")
        for i, line in enumerate(lines):
            if not line:
                continue

            # 宏定義行移入頭部，不在正文出現
            if state.macros.extract(line):
                continue

            if run.link is not None:
                out.append("[")

            # 強調標記不能與空白相鄰
            leading, middle, trailing = split_space(line)
            out.append(leading)
            if middle:
                out.append(surround)
                out.append(wrap_inline_latex(middle, len(leading)))
                out.append(surround)
            out.append(trailing)

            if run.link is not None:
                out.append(f"]({run.link})")

            if i + 1 < len(lines):
                out.append("\n")

    # ============ 表格 ============

    def _process_table(self, out: List[str], table: Table, ctx: RenderContext) -> None:
        for i, row in enumerate(table.rows):
            cells = [self._render_table_cell(cell, ctx) for cell in row.cells]
            out.append("| " + " | ".join(cells) + " |\n")

            # 第一行下面是 "| --- | --- |"
            if i == 0 and table.row_count > 1:
                out.append("| --- " * len(row.cells) + "|\n")

        out.append("\n")

    def _render_table_cell(self, cell: TableCell, ctx: RenderContext) -> str:
        parts = []
        for element in cell.content:
            if not isinstance(element, Paragraph):
                ctx.warnings.unsupported(
                    "table cell contained a non-paragraph structural element, ignoring"
                )
                continue
            parts.append(self._render_cell_paragraph(element, ctx))
        return " ".join(p for p in parts if p).strip()

    def _render_cell_paragraph(self, paragraph: Paragraph, ctx: RenderContext) -> str:
        """單元格內只保留純文本和鏈接"""
        if paragraph.named_style != NamedStyleType.NORMAL_TEXT:
            ctx.warnings.unsupported(f"ignoring {paragraph.named_style.value} inside table cell")
        if paragraph.bullet is not None:
            ctx.warnings.unsupported("ignoring bullets inside table cell")
        if paragraph.is_block_quote:
            ctx.warnings.unsupported("ignoring indent inside table cell")

        out: List[str] = []
        for element in paragraph.elements:
            if isinstance(element, TextRun):
                out.append(self._render_cell_text_run(element, ctx))
            elif isinstance(element, FootnoteRef):
                out.append(f"[^{element.footnote_id}]")
                ctx.add_footnote(element.footnote_id)
            elif isinstance(element, InlineObjectRef):
                ctx.warnings.unsupported(f"ignoring inline object {element.object_id!r} in table cell")
            elif isinstance(element, HorizontalRule):
                ctx.warnings.unsupported("ignoring horizontal rule in table cell")
            elif isinstance(element, PageBreak):
                logger.debug("dropping page break in table cell")
            else:
                ctx.warnings.unsupported(
                    f"ignoring {type(element).__name__} in table cell"
                )
        return "".join(out)

    def _render_cell_text_run(self, run: TextRun, ctx: RenderContext) -> str:
        self.styles.report_table_cell_emphasis(run, ctx.warnings)
        self.styles.report_unsupported(run, ctx.warnings)

        # 段落結尾的換行不算內容；單元格只能有一行
        content = normalize_quotes(run.content).rstrip("\n")
        if "\n" in content:
            ctx.warnings.unsupported("stripping newlines from content in table cell", content=run.content)
            content = content.replace("\n", " ")

        if run.link is None:
            return content
        return f"[{content}]({run.link})"

    # ============ 腳注 ============

    def _process_footnotes(self, out: List[str], ctx: RenderContext, state: RenderState) -> List[str]:
        """
        按首次引用順序追加腳注定義

        每個腳注用獨立的RenderState遞歸渲染，宏定義併入整篇文檔的頭部。
        腳注內引用的新腳注同樣追加在後面。

        Returns:
            List[str]: 實際輸出的腳注ID
        """
        rendered: List[str] = []
        index = 0
        while index < len(ctx.footnote_ids):
            footnote_id = ctx.footnote_ids[index]
            index += 1

            footnote = self.document.footnotes.get(footnote_id)
            if footnote is None:
                ctx.warnings.missing(
                    f"no content found for footnote {footnote_id!r} referenced in document",
                    element_id=footnote_id
                )
                continue

            footnote_state = RenderState()
            footnote_out: List[str] = []
            self._process(footnote_out, footnote.content, ctx, footnote_state)
            state.macros.merge(footnote_state.macros)

            # 多行腳注的續行必須縮進
            out.append(indent_continuation(
                "".join(footnote_out), f"[^{footnote_id}]: ", self.settings.footnote_indent
            ))
            out.append("\n")
            rendered.append(footnote_id)

        return rendered


# ============ 分段渲染 ============

def split_at_page_breaks(elements: Sequence[StructuralElement]) -> List[List[StructuralElement]]:
    """
    在分頁符處拆分結構元素

    含分頁符的段落屬於它所結束的那一段；不產生空段。
    """
    segments: List[List[StructuralElement]] = []
    current: List[StructuralElement] = []
    for element in elements:
        current.append(element)
        if isinstance(element, Paragraph) and element.has_page_break():
            segments.append(current)
            current = []
    if current:
        segments.append(current)
    return segments


def render_document(
    document: Document,
    image_urls: Union[ImageResolver, Mapping[str, str], None] = None,
    settings: Optional[RenderSettings] = None
) -> RenderResult:
    """渲染整個文檔"""
    return MarkdownGenerator(document, image_urls, settings).generate()


def render_markdown(
    document: Document,
    image_urls: Union[ImageResolver, Mapping[str, str], None] = None,
    settings: Optional[RenderSettings] = None
) -> str:
    """渲染整個文檔，只返回Markdown文本"""
    return render_document(document, image_urls, settings).markdown


def render_segments(
    document: Document,
    image_urls: Union[ImageResolver, Mapping[str, str], None] = None,
    segments: Optional[Sequence[Sequence[StructuralElement]]] = None,
    settings: Optional[RenderSettings] = None
) -> List[RenderResult]:
    """
    一個文檔輸出多個Markdown

    每段使用新的生成器實例，互不依賴，可以並行渲染。

    Args:
        document: 文檔
        image_urls: 圖片URL表
        segments: 結構元素分段；為None時按配置的分段方式拆分正文
        settings: 渲染配置

    Returns:
        List[RenderResult]: 與分段順序一致的渲染結果
    """
    settings = settings or get_render_settings()
    if segments is None:
        if settings.separate_by == "pagebreak":
            segments = split_at_page_breaks(document.content)
        else:
            segments = [document.content]

    numbered = len(segments) > 1

    def render_one(index: int, segment: Sequence[StructuralElement]) -> RenderResult:
        generator = MarkdownGenerator(document, image_urls, settings)
        return generator.generate(segment, segment=index + 1 if numbered else None)

    if not settings.parallel_segments or not numbered:
        return [render_one(i, segment) for i, segment in enumerate(segments)]

    max_workers = min(settings.max_workers, len(segments))
    results: List[Optional[RenderResult]] = [None] * len(segments)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {executor.submit(render_one, i, seg): i for i, seg in enumerate(segments)}
        for future in as_completed(future_to_index):
            results[future_to_index[future]] = future.result()

    logger.info(f"分段渲染完成: {len(segments)} 段, {max_workers} 個線程")
    return results
