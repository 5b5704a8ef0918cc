"""
pytest配置文件

定義全局fixtures和構建測試文檔的工具函數。
"""

import json
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator, Optional

from doc_publisher.config.settings import RenderSettings
from doc_publisher.document.base import (
    Bullet, Document, EmbeddedObjectKind, Footnote, FootnoteRef, InlineObject,
    InlineObjectRef, ListDefinition, ListLevel, NamedStyleType, Paragraph,
    TextRun, TextStyle,
)

MONO = TextStyle(font_family="Courier New")


# ============ 構建工具 ============

def run(content: str, link: Optional[str] = None, **style) -> TextRun:
    """構建文本片段"""
    return TextRun(content=content, style=TextStyle(**style), link=link)


def para(*elements, style: NamedStyleType = NamedStyleType.NORMAL_TEXT,
         bullet: Optional[Bullet] = None, indent: float = 0.0) -> Paragraph:
    """構建段落，字符串參數自動轉為無樣式文本片段"""
    items = [run(el) if isinstance(el, str) else el for el in elements]
    return Paragraph(elements=items, named_style=style, bullet=bullet, indent_start=indent)


def code(content: str) -> Paragraph:
    """整段等寬字體段落"""
    return Paragraph(elements=[TextRun(content=content, style=MONO)])


# ============ 基礎配置 Fixtures ============

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """創建臨時目錄"""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def render_settings() -> RenderSettings:
    """測試用渲染設置"""
    return RenderSettings()


# ============ 文檔 Fixtures ============

@pytest.fixture
def lists() -> dict:
    """一個無序列表和一個有序列表"""
    return {
        "bullets": ListDefinition("bullets", {
            0: ListLevel(has_fixed_glyph=True),
            1: ListLevel(has_fixed_glyph=True),
        }),
        "numbers": ListDefinition("numbers", {
            0: ListLevel(has_fixed_glyph=False),
        }),
    }


@pytest.fixture
def sample_document(lists) -> Document:
    """包含標題、列表、腳注、圖片、代碼和宏定義的樣例文檔"""
    return Document(
        title="樣例文檔",
        content=[
            para("Intro\n", style=NamedStyleType.HEADING_2),
            para(run("hello", bold=True), " world\n"),
            para("First point\n", bullet=Bullet("bullets", 0)),
            para("Nested point\n", bullet=Bullet("bullets", 1)),
            para("see note", FootnoteRef("fn1"), "\n"),
            para(InlineObjectRef("img1"), "\n"),
            code("x = 1\n"),
            code("y = 2\n"),
            para("\\newcommand{\\T1}{Foo}\n"),
            para("uses \\T1 here\n"),
        ],
        lists=lists,
        footnotes={
            "fn1": Footnote("fn1", [para("The note text.\n")]),
        },
        inline_objects={
            "img1": InlineObject("img1", EmbeddedObjectKind.IMAGE, title="A chart"),
        },
    )


@pytest.fixture
def sample_image_urls() -> dict:
    return {"img1": "https://images.example.com/chart.png"}


@pytest.fixture
def expected_sample_markdown() -> str:
    """sample_document 的完整渲染結果"""
    return (
        "$$\n"
        "\\newcommand{\\Tone}{Foo}\n"
        "$$\n"
        "\n"
        "## Intro\n"
        "\n"
        "**hello** world\n"
        "\n"
        "* First point\n"
        "\n"
        "  * Nested point\n"
        "\n"
        "see note[^fn1]\n"
        "\n"
        "![A chart](https://images.example.com/chart.png)\n"
        "\n"
        "```\n"
        "x = 1\n"
        "y = 2\n"
        "```\n"
        "\n"
        "uses $\\Tone$ here\n"
        "\n"
        "[^fn1]: The note text.\n"
        "\n"
    )


@pytest.fixture
def google_doc_json() -> dict:
    """Google Docs API v1 導出樣例"""
    return {
        "documentId": "doc-123",
        "title": "Exported",
        "body": {
            "content": [
                {"endIndex": 1, "sectionBreak": {"sectionStyle": {}}},
                {
                    "paragraph": {
                        "paragraphStyle": {"namedStyleType": "HEADING_1"},
                        "elements": [{"textRun": {"content": "Title here\n", "textStyle": {}}}],
                    }
                },
                {
                    "paragraph": {
                        "paragraphStyle": {"namedStyleType": "NORMAL_TEXT"},
                        "bullet": {"listId": "kix.list1", "nestingLevel": 1},
                        "elements": [
                            {"textRun": {
                                "content": "linked",
                                "textStyle": {
                                    "underline": True,
                                    "link": {"url": "https://example.com"},
                                    "foregroundColor": {"color": {"rgbColor": {"blue": 1.0}}},
                                },
                            }},
                            {"footnoteReference": {"footnoteId": "kix.fn1"}},
                            {"inlineObjectElement": {"inlineObjectId": "kix.obj1"}},
                            {"pageBreak": {}},
                            {"textRun": {"content": "\n", "textStyle": {}}},
                        ],
                    }
                },
                {
                    "paragraph": {
                        "paragraphStyle": {"namedStyleType": "NORMAL_TEXT"},
                        "elements": [{"textRun": {
                            "content": "code()\n",
                            "textStyle": {"weightedFontFamily": {"fontFamily": "Consolas", "weight": 400}},
                        }}],
                    }
                },
                {
                    "table": {
                        "rows": 1,
                        "columns": 1,
                        "tableRows": [{"tableCells": [{"content": [
                            {"paragraph": {"elements": [{"textRun": {"content": "cell\n"}}]}}
                        ]}]}],
                    }
                },
                {"somethingNew": {}},
            ]
        },
        "lists": {
            "kix.list1": {"listProperties": {"nestingLevels": [
                {"glyphType": "DECIMAL"},
                {"glyphSymbol": "●"},
            ]}}
        },
        "footnotes": {
            "kix.fn1": {"footnoteId": "kix.fn1", "content": [
                {"paragraph": {"elements": [{"textRun": {"content": "note\n"}}]}}
            ]}
        },
        "inlineObjects": {
            "kix.obj1": {"inlineObjectProperties": {"embeddedObject": {
                "title": "Photo",
                "imageProperties": {"contentUri": "https://lh3.example/abc"},
            }}},
            "kix.obj2": {"inlineObjectProperties": {"embeddedObject": {
                "linkedContentReference": {"sheetsChartReference": {}},
            }}},
        },
    }


@pytest.fixture
def google_doc_file(temp_dir: Path, google_doc_json: dict) -> Path:
    path = temp_dir / "document.json"
    path.write_text(json.dumps(google_doc_json), encoding="utf-8")
    return path
