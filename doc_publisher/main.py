"""
主應用程序入口點

協調文檔加載、圖片URL表和Markdown渲染的完整流程。
文檔抓取、圖片上傳和發布由外部完成，這裡只消費它們的結果。
"""

import json
import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

from .config.settings import RenderSettings, get_render_settings, get_settings
from .config.logging_config import get_logger, setup_logging, PerformanceLogger
from .document.base import Document
from .document.google_doc import GoogleDocLoader
from .markdown import RenderResult, render_segments, split_at_page_breaks
from .utils.error_handling import DocumentLoadError, RenderError

logger = get_logger(__name__)

INDEX_PLACEHOLDER = "INDEX"


class DocumentPublisher:
    """
    文檔發布處理引擎

    加載導出的文檔和圖片URL表，渲染為一個或多個Markdown文件。
    """

    def __init__(self, settings: Optional[RenderSettings] = None):
        self.settings = settings or get_render_settings()
        self.loader = GoogleDocLoader()
        self.performance_logger = PerformanceLogger()

    def load_image_urls(self, path: Optional[Union[str, Path]]) -> Dict[str, str]:
        """讀取 對象ID -> URL 的JSON映射"""
        if path is None:
            return {}
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise DocumentLoadError("圖片URL表必須是JSON對象", file_path=str(path))
        return {str(k): str(v) for k, v in data.items()}

    def render(
        self,
        document: Document,
        image_urls: Optional[Dict[str, str]] = None,
        separate_by: Optional[str] = None
    ) -> List[RenderResult]:
        """
        渲染文檔

        Args:
            document: 文檔
            image_urls: 圖片URL表
            separate_by: "pagebreak" 時按分頁符輸出多段，默認使用配置

        Returns:
            List[RenderResult]: 每段一個結果
        """
        separate_by = separate_by or self.settings.separate_by
        segments = None
        if separate_by == "pagebreak":
            segments = split_at_page_breaks(document.content)
        elif separate_by != "none":
            raise ValueError(f"invalid value for separate_by: {separate_by!r}")

        with self.performance_logger.measure("markdown_render"):
            return render_segments(document, image_urls, segments=segments, settings=self.settings)

    def process_document(
        self,
        file_path: Union[str, Path],
        image_map_path: Optional[Union[str, Path]] = None,
        output_path: Optional[str] = None,
        separate_by: Optional[str] = None
    ) -> List[str]:
        """
        處理單個導出文檔

        Args:
            file_path: 文檔JSON路徑
            image_map_path: 圖片URL表JSON路徑（可選）
            output_path: 輸出路徑；分段輸出時必須包含 INDEX
            separate_by: 分段方式

        Returns:
            List[str]: 寫出的文件路徑，輸出到stdout時為空
        """
        separate_by = separate_by or self.settings.separate_by
        if separate_by == "pagebreak" and (not output_path or INDEX_PLACEHOLDER not in output_path):
            raise ValueError(
                f"when separating by page break, output must be a filename containing {INDEX_PLACEHOLDER!r}"
            )

        logger.info(f"開始處理文檔: {file_path}")
        with self.performance_logger.measure("document_load"):
            document = self.loader.load(file_path)
        image_urls = self.load_image_urls(image_map_path)
        doc_logger = logger.for_document(document.document_id or Path(file_path).stem)

        results = self.render(document, image_urls, separate_by)
        for stage, timing in self.performance_logger.get_summary().items():
            doc_logger.debug(f"階段 {stage}: {timing.calls} 次, 共 {timing.total * 1000:.1f} ms")

        if output_path is None:
            for result in results:
                sys.stdout.write(result.markdown)
            return []

        written = []
        for n, result in enumerate(results, 1):
            target = Path(output_path.replace(INDEX_PLACEHOLDER, str(n)))
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(result.markdown, encoding="utf-8")
            doc_logger.info(f"Markdown已寫入: {target}", warnings=len(result.warnings))
            written.append(str(target))
        return written


def main(argv: Optional[List[str]] = None) -> int:
    """主函數 - 命令行界面"""

    import argparse

    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="doc-publisher",
        description=settings.app.description
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"{settings.app.name} {settings.app.version}"
    )

    parser.add_argument(
        "input_file",
        help="文檔JSON路徑（.json 或 .json.gz）"
    )

    parser.add_argument(
        "--images",
        help="內嵌對象ID到圖片URL的JSON映射"
    )

    parser.add_argument(
        "-o", "--output",
        help="輸出文件；分段輸出時必須包含 INDEX"
    )

    parser.add_argument(
        "--separate-by",
        choices=["none", "pagebreak"],
        default=None,
        help="分段方式"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="輸出DEBUG級別日誌"
    )

    args = parser.parse_args(argv)

    if args.verbose or settings.app.debug:
        setup_logging(settings.logging.model_copy(update={"level": "DEBUG"}))
    logger.debug(f"{settings.app.name} {settings.app.version} ({settings.app.environment})")

    try:
        publisher = DocumentPublisher(settings.render)
        publisher.process_document(
            file_path=args.input_file,
            image_map_path=args.images,
            output_path=args.output,
            separate_by=args.separate_by
        )
    except (RenderError, ValueError, OSError) as e:
        logger.error(f"主程序執行失敗: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
