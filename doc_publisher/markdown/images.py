"""
圖片URL解析
Image URL Resolution

渲染器本身不做任何I/O：圖片上傳由外部完成，這裡只負責
- 按內嵌對象ID查詢已上傳圖片的公開URL
- 把按文檔順序排列的上傳結果對齊到內嵌對象ID
"""

from typing import Dict, List, Mapping, Optional, Sequence

from ..config.logging_config import get_logger
from ..document.base import Document, ImageURLTable, InlineObjectRef
from ..utils.error_handling import ImageAlignmentError

logger = get_logger(__name__)


class ImageResolver:
    """內嵌對象ID -> 圖片URL"""

    def __init__(self, image_urls: Optional[Mapping[str, str]] = None):
        self._urls: Dict[str, str] = dict(image_urls or {})

    def resolve(self, object_id: str) -> Optional[str]:
        return self._urls.get(object_id)

    def __contains__(self, object_id: str) -> bool:
        return object_id in self._urls

    def __len__(self) -> int:
        return len(self._urls)


def image_object_ids(document: Document) -> List[str]:
    """
    正文段落中引用的圖片/繪圖對象ID，按出現順序

    每次引用都計入，同一對象被引用兩次就出現兩次，與按文檔順序上傳的圖片一一對應。
    未在文檔內嵌對象表中登記的引用和鏈接內容（表格/圖表）不計入。
    """
    ids: List[str] = []
    for paragraph in document.iter_paragraphs():
        for element in paragraph.elements:
            if not isinstance(element, InlineObjectRef):
                continue
            obj = document.inline_objects.get(element.object_id)
            if obj is None or not obj.is_image:
                continue
            ids.append(element.object_id)
    return ids


def match_object_ids_to_urls(document: Document, image_urls: Sequence[str]) -> ImageURLTable:
    """
    把按文檔順序上傳的圖片URL對齊到內嵌對象ID

    同一對象被多次引用時，以最後一次引用對應的URL為準。

    Args:
        document: 文檔
        image_urls: 上傳後的URL，順序與圖片在文檔中出現的順序一致

    Returns:
        ImageURLTable: 對象ID -> URL

    Raises:
        ImageAlignmentError: URL數量與圖片對象數量不一致
    """
    object_ids = image_object_ids(document)
    if len(object_ids) != len(image_urls):
        raise ImageAlignmentError(
            f"found {len(image_urls)} uploaded images but {len(object_ids)} "
            f"image objects in the document"
        )

    table = dict(zip(object_ids, image_urls))
    logger.debug(f"圖片URL對齊完成: {len(table)} 個對象")
    return table
