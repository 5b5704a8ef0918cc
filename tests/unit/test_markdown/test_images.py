"""
圖片URL解析單元測試
"""

import pytest

from conftest import para
from doc_publisher.document.base import (
    Document, EmbeddedObjectKind, InlineObject, InlineObjectRef,
)
from doc_publisher.markdown.images import ImageResolver, image_object_ids, match_object_ids_to_urls
from doc_publisher.utils.error_handling import ImageAlignmentError


@pytest.mark.unit
class TestImageResolver:
    """圖片URL解析測試類"""

    def setup_method(self):
        """設置測試方法"""
        self.document = Document(
            content=[
                para(InlineObjectRef("img2"), "\n"),
                para("text", InlineObjectRef("chart"), InlineObjectRef("img1"), "\n"),
                para(InlineObjectRef("img2"), InlineObjectRef("unknown"), "\n"),
            ],
            inline_objects={
                "img1": InlineObject("img1", EmbeddedObjectKind.IMAGE),
                "img2": InlineObject("img2", EmbeddedObjectKind.DRAWING),
                "chart": InlineObject("chart", EmbeddedObjectKind.LINKED_CONTENT),
            },
        )

    def test_resolver_lookup(self):
        """測試按對象ID查詢URL"""
        resolver = ImageResolver({"a": "https://x/a.png"})

        assert resolver.resolve("a") == "https://x/a.png"
        assert resolver.resolve("b") is None
        assert "a" in resolver
        assert len(resolver) == 1

    def test_image_object_ids_in_document_order(self):
        """測試圖片對象按出現順序排列，重複引用也計入"""
        assert image_object_ids(self.document) == ["img2", "img1", "img2"]

    def test_match_object_ids_to_urls(self):
        """測試上傳結果對齊到對象ID"""
        table = match_object_ids_to_urls(self.document, ["https://u/1", "https://u/2", "https://u/3"])
        assert table == {"img2": "https://u/3", "img1": "https://u/2"}

    def test_count_mismatch(self):
        """測試數量不一致時報錯"""
        with pytest.raises(ImageAlignmentError) as exc_info:
            match_object_ids_to_urls(self.document, ["https://u/1"])
        assert "found 1 uploaded images but 3 image objects" in str(exc_info.value)

    def test_repeated_reference_needs_its_own_url(self):
        """測試重複引用的圖片按引用次數計數"""
        document = Document(
            content=[para(InlineObjectRef("img"), "\n"), para(InlineObjectRef("img"), "\n")],
            inline_objects={"img": InlineObject("img", EmbeddedObjectKind.IMAGE)},
        )

        with pytest.raises(ImageAlignmentError):
            match_object_ids_to_urls(document, ["https://u/1"])
        assert match_object_ids_to_urls(document, ["https://u/1", "https://u/2"]) == {"img": "https://u/2"}
