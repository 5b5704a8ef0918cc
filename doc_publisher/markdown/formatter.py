"""
Markdown後處理
Markdown Post-Processing

第二遍處理：宏定義可能在定義之前就被引用，所以命令名替換只能在
正文和全部腳注渲染完成之後進行。
- 每行去除右側空白（左側空白有意義，保留）
- 連續兩個及以上空行壓縮為一個
- 對非空行整行應用命令名替換
"""

from typing import Mapping, Optional

from ..config.logging_config import get_logger

logger = get_logger(__name__)


class MarkdownFormatter:
    """Markdown格式化器"""

    def __init__(self, substitutions: Optional[Mapping[str, str]] = None):
        # 長的名字先替換，避免 \T1 先命中 \T10
        self.substitutions = sorted(
            (substitutions or {}).items(), key=lambda item: len(item[0]), reverse=True
        )

    def apply_substitutions(self, line: str) -> str:
        for old, new in self.substitutions:
            line = line.replace(old, new)
        return line

    def normalize(self, text: str) -> str:
        """
        逐行規範化空白並應用替換

        末尾的換行符不產生額外的空行，因此對已規範化的文本再次調用結果不變。

        Args:
            text: 第一遍渲染得到的原始文本

        Returns:
            str: 規範化後的文本，每行以換行符結束
        """
        lines = text.split("\n")
        if text.endswith("\n"):
            lines.pop()

        out = []
        empty_lines = 0
        for line in lines:
            line = line.rstrip()

            if not line:
                empty_lines += 1
                if empty_lines < 2:
                    out.append("\n")
                continue

            empty_lines = 0
            out.append(self.apply_substitutions(line) + "\n")

        return "".join(out)

    def format_content(self, body: str, header: str = "") -> str:
        """
        生成最終輸出：宏定義頭部 + 規範化後的正文

        Args:
            body: 第一遍渲染得到的正文（含腳注）
            header: $$ 宏定義頭部

        Returns:
            str: 最終Markdown
        """
        formatted = self.normalize(body)
        if header:
            formatted = self.apply_substitutions(header) + formatted
        logger.debug(f"後處理完成: {len(self.substitutions)} 個替換, 輸出 {len(formatted)} 字符")
        return formatted


def post_process(body: str, header: str = "", substitutions: Optional[Mapping[str, str]] = None) -> str:
    """後處理的便捷函數"""
    return MarkdownFormatter(substitutions).format_content(body, header)
