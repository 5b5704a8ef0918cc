"""
文本處理工具
Text Processing Utilities
"""

from typing import Tuple

# 排版引號 -> 直引號
_QUOTE_REPLACEMENTS = {
    "“": '"',
    "”": '"',
}


def normalize_quotes(text: str) -> str:
    """將排版雙引號替換為普通雙引號"""
    for fancy, plain in _QUOTE_REPLACEMENTS.items():
        text = text.replace(fancy, plain)
    return text


def split_space(text: str) -> Tuple[str, str, str]:
    """
    將字符串拆分為前導空白、中間內容、尾隨空白

    Markdown的強調標記不能與空白相鄰，所以包裹標記只能加在中間部分。
    全是空白的字符串返回 ("", "", text)。

    Args:
        text: 原始字符串

    Returns:
        Tuple[str, str, str]: (前導空白, 中間內容, 尾隨空白)
    """
    middle = text.strip()
    if not middle:
        return "", "", text

    start = len(text) - len(text.lstrip())
    end = len(text.rstrip())
    return text[:start], middle, text[end:]


def indent_continuation(text: str, prefix: str, indent: str) -> str:
    """
    以prefix開頭輸出text，後續每一行加上indent縮進，每行以換行符結束

    Args:
        text: 多行文本
        prefix: 第一行前綴
        indent: 續行縮進

    Returns:
        str: 縮進後的文本
    """
    lines = text.split("\n")
    parts = [prefix + lines[0] + "\n"]
    for line in lines[1:]:
        parts.append(indent + line + "\n")
    return "".join(parts)
