"""
Markdown生成器單元測試

測試段落、代碼塊、列表、引用塊、鏈接、內嵌圖片和宏定義的渲染。
"""

from dataclasses import fields

import pytest

from conftest import code, para, run
from doc_publisher.document.base import (
    AutoText, BaselineOffset, Bullet, ColumnBreak, Document, EmbeddedObjectKind, Equation,
    HorizontalRule, InlineObject, InlineObjectRef, NamedStyleType, PageBreak, SectionBreak,
    TableOfContents, UnknownParagraphElement, UnknownStructuralElement,
)
from doc_publisher.markdown.generator import (
    MarkdownGenerator, RenderResult, render_document, render_markdown,
)
from doc_publisher.utils.error_handling import (
    LatexDecodeError, StructuralInconsistencyError, WarningCategory,
)


@pytest.mark.unit
class TestMarkdownGenerator:
    """Markdown生成器測試類"""

    @pytest.fixture(autouse=True)
    def setup(self, render_settings, lists):
        """設置測試方法"""
        self.settings = render_settings
        self.lists = lists

    def render(self, *content, image_urls=None, **kwargs):
        document = Document(content=list(content), lists=self.lists, **kwargs)
        return render_document(document, image_urls, self.settings)

    def test_scenario(self):
        """測試標題、粗體、代碼塊和普通段落的完整輸出"""
        result = self.render(
            para("Intro", style=NamedStyleType.HEADING_2),
            para(run("hello", bold=True), " world"),
            code("x=1"),
            para("done"),
        )

        assert result.markdown == "## Intro\n\n**hello** world\n\n```\nx=1```\n\ndone\n\n"
        assert result.warnings == []

    def test_generator_can_be_reused(self):
        """測試同一生成器多次渲染結果一致"""
        document = Document(content=[para(run("a", italic=True), "\n")])
        generator = MarkdownGenerator(document, settings=self.settings)

        assert generator.generate().markdown == generator.generate().markdown == "*a*\n\n"

    def test_consecutive_code_paragraphs(self):
        """測試連續等寬段落合併為一個代碼塊並保持原樣"""
        result = self.render(
            code("def f():\n"),
            code("    return \"*x*\"\n"),
            para("after\n"),
        )

        assert result.markdown == "```\ndef f():\n    return \"*x*\"\n```\n\nafter\n\n"

    def test_code_block_at_end_of_document(self):
        """測試文檔末尾的代碼塊也會輸出"""
        assert self.render(code("a\n")).markdown == "```\na\n```\n\n"

    def test_code_block_split_by_other_paragraph(self):
        """測試被普通段落打斷的代碼形成兩個代碼塊"""
        markdown = self.render(code("a\n"), para("text\n"), code("b\n")).markdown
        assert markdown == "```\na\n```\n\ntext\n\n```\nb\n```\n\n"

    def test_bulleted_monospace_is_not_code(self):
        """測試帶項目符號的等寬段落按行內代碼渲染"""
        markdown = self.render(
            para(run("x\n", font_family="Consolas"), bullet=Bullet("bullets", 0))
        ).markdown
        assert markdown == "* `x`\n\n"

    def test_mixed_font_paragraph_is_not_code(self):
        """測試部分等寬的段落不是代碼塊"""
        markdown = self.render(para("call ", run("f()", font_family="Consolas"), "\n")).markdown
        assert markdown == "call `f()`\n\n"

    @pytest.mark.parametrize("style,prefix", [
        (NamedStyleType.TITLE, "# "),
        (NamedStyleType.HEADING_1, "# "),
        (NamedStyleType.HEADING_3, "### "),
        (NamedStyleType.HEADING_6, "###### "),
        (NamedStyleType.SUBTITLE, ""),
    ])
    def test_headings(self, style, prefix):
        """測試標題級別前綴"""
        assert self.render(para("Head\n", style=style)).markdown == f"{prefix}Head\n\n"

    def test_lists(self):
        """測試無序、嵌套和有序列表前綴"""
        markdown = self.render(
            para("one\n", bullet=Bullet("bullets", 0)),
            para("two\n", bullet=Bullet("bullets", 1)),
            para("three\n", bullet=Bullet("numbers", 0)),
        ).markdown

        assert markdown == "* one\n\n  * two\n\n1. three\n\n"

    def test_heading_with_bullet(self):
        """測試列表中的標題忽略項目符號並記錄警告"""
        result = self.render(para("H\n", style=NamedStyleType.HEADING_2, bullet=Bullet("bullets", 0)))

        assert result.markdown == "## H\n\n"
        assert result.warning_messages == [
            "found a heading that is part of a bulleted list, ignoring the bullet"
        ]

    def test_unknown_list_is_fatal(self):
        """測試引用不存在的列表時中止渲染"""
        with pytest.raises(StructuralInconsistencyError) as exc_info:
            self.render(para("x\n", bullet=Bullet("missing", 0)))
        assert exc_info.value.list_id == "missing"

    def test_unknown_nesting_level_is_fatal(self):
        """測試引用不存在的層級時中止渲染"""
        with pytest.raises(StructuralInconsistencyError) as exc_info:
            self.render(para("x\n", bullet=Bullet("numbers", 3)))
        assert exc_info.value.nesting_level == 3

    def test_block_quote(self):
        """測試有縮進的段落輸出為引用塊"""
        assert self.render(para("quoted\n", indent=36.0)).markdown == "> quoted\n\n"

    def test_emphasis_excludes_surrounding_whitespace(self):
        """測試強調標記不與空白相鄰"""
        markdown = self.render(para("a", run(" bold ", bold=True), "b\n")).markdown
        assert markdown == "a **bold** b\n\n"

    def test_whitespace_only_run(self):
        """測試全空白的片段不加強調標記"""
        markdown = self.render(para("a", run("   ", bold=True), "b\n")).markdown
        assert markdown == "a   b\n\n"

    def test_styles_applied_per_line(self):
        """測試多行片段逐行加強調標記"""
        markdown = self.render(para(run("one\ntwo\n", italic=True))).markdown
        assert markdown == "*one*\n*two*\n\n"

    def test_links(self):
        """測試鏈接包裹在強調之外"""
        markdown = self.render(
            para(run("site", link="https://e.com", bold=True), " and ", run("plain", link="https://p.com"), "\n")
        ).markdown
        assert markdown == "[**site**](https://e.com) and [plain](https://p.com)\n\n"

    def test_typographic_quotes(self):
        """測試排版引號替換為直引號"""
        assert self.render(para("“hi”\n")).markdown == "\"hi\"\n\n"

    def test_horizontal_rule(self):
        """測試水平線"""
        markdown = self.render(para("above", HorizontalRule(), "below\n")).markdown
        assert markdown == "above\n\n---\n\nbelow\n\n"

    def test_page_break_dropped_silently(self):
        """測試分頁符不輸出也不記錄警告"""
        result = self.render(para("a", PageBreak(), "\n"))

        assert result.markdown == "a\n\n"
        assert result.warnings == []

    def test_unsupported_elements_warn(self):
        """測試不支持的元素記錄警告後跳過"""
        result = self.render(
            SectionBreak(),
            TableOfContents(content=[para("toc\n")]),
            para("text", ColumnBreak(), "\n"),
            UnknownStructuralElement(kind="mystery"),
        )

        assert result.markdown == "text\n\n"
        assert result.warning_messages == [
            "ignoring section break",
            "ignoring table of contents",
            "ignoring column break",
            "encountered a body element of unknown type UnknownStructuralElement",
        ]

    @pytest.mark.parametrize("element,message", [
        (Equation(), "ignoring equation"),
        (AutoText(), "ignoring auto text"),
        (ColumnBreak(), "ignoring column break"),
        (UnknownParagraphElement("x"), "encountered a paragraph element of unknown type UnknownParagraphElement"),
    ])
    def test_unsupported_paragraph_element_skipped(self, element, message):
        """測試不支持的段落元素不輸出並記錄一條警告"""
        result = self.render(para("a", element, "\n"))

        assert result.markdown == "a\n\n"
        assert result.warning_messages == [message]
        assert result.warnings[0].category == WarningCategory.UNSUPPORTED_FEATURE

    def test_unsupported_content_in_one_paragraph(self):
        """測試同一段落中多種不支持的內容依次警告，其餘文本照常輸出"""
        objects = {"o": InlineObject("o", EmbeddedObjectKind.UNKNOWN, title="t")}
        result = self.render(
            para(
                "a", Equation(), AutoText(), UnknownParagraphElement("x"),
                run("b\n", baseline_offset=BaselineOffset.SUBSCRIPT), InlineObjectRef("o"),
            ),
            inline_objects=objects,
        )

        assert result.markdown == "ab\n\n"
        assert result.warning_messages == [
            "ignoring equation",
            "ignoring auto text",
            "encountered a paragraph element of unknown type UnknownParagraphElement",
            "ignoring subscript on 'b\\n'",
            "ignoring embedded object 'o' of unknown type on 't'",
        ]

    def test_inline_image(self):
        """測試內嵌圖片輸出URL"""
        objects = {"img": InlineObject("img", EmbeddedObjectKind.IMAGE, title="Chart")}
        document = Document(content=[para(InlineObjectRef("img"), "\n")], inline_objects=objects)

        markdown = render_markdown(document, {"img": "https://cdn/x.png"}, self.settings)

        assert markdown == "![Chart](https://cdn/x.png)\n\n"

    def test_missing_image_url(self):
        """測試沒有URL的圖片輸出空鏈接且不中止渲染"""
        objects = {"img": InlineObject("img", EmbeddedObjectKind.DRAWING, title="Diagram")}
        result = self.render(para(InlineObjectRef("img"), "\n"), inline_objects=objects)

        assert result.markdown == "![Diagram]()\n\n"
        assert len(result.warnings) == 1
        assert result.warnings[0].category == WarningCategory.MISSING_REFERENCE
        assert result.warnings[0].element_id == "img"

    def test_missing_inline_object(self):
        """測試引用不存在的內嵌對象"""
        result = self.render(para("a", InlineObjectRef("ghost"), "\n"))

        assert result.markdown == "a\n\n"
        assert result.warning_messages == ["could not find inline object for id 'ghost'"]

    def test_linked_content_ignored(self):
        """測試鏈接的表格/圖表被忽略"""
        objects = {"chart": InlineObject("chart", EmbeddedObjectKind.LINKED_CONTENT)}
        result = self.render(para(InlineObjectRef("chart"), "\n"), inline_objects=objects)

        assert result.markdown == "\n"
        assert result.warnings[0].category == WarningCategory.UNSUPPORTED_FEATURE

    def test_inline_latex(self):
        """測試行內LaTeX自動包裹"""
        markdown = self.render(para("energy = \\alpha + 3\n")).markdown
        assert markdown == "energy = $\\alpha$ + 3\n\n"

    def test_macro_defined_after_use(self):
        """測試宏定義在引用之後也能完成替換"""
        result = self.render(
            para("x \\T1\n"),
            para("\\newcommand{\\T1}{Foo}\n"),
        )

        assert result.markdown == "$$\n\\newcommand{\\Tone}{Foo}\n$$\n\nx $\\Tone$\n\n"
        assert result.latex_definitions == ["\\newcommand{\\Tone}{Foo}"]
        assert result.substitutions == {"\\T1": "\\Tone"}
        assert "\\T1" not in result.markdown

    def test_undecodable_text_aborts(self):
        """測試無法解碼的文本中止渲染"""
        with pytest.raises(LatexDecodeError):
            self.render(para("bad \ud800\n"))

    def test_undecodable_position_counts_from_line_start(self):
        """測試解碼錯誤位置從行首計算，包括前導空白"""
        with pytest.raises(LatexDecodeError) as exc_info:
            self.render(para("first\n  x\ud800\n"))
        assert exc_info.value.position == 3

    def test_result_fields(self):
        """測試渲染結果只包含輸出和診斷信息，失敗一律拋出異常"""
        assert [f.name for f in fields(RenderResult)] == [
            "markdown", "warnings", "footnote_ids", "latex_definitions", "substitutions",
        ]
