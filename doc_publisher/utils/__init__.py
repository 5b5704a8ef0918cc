"""
工具模組
Utilities Module

提供錯誤分類、警告收集和文本處理工具。
"""

from .error_handling import (
    WarningCategory,
    RenderWarning,
    WarningCollector,
    RenderError,
    StructuralInconsistencyError,
    LatexDecodeError,
    ImageAlignmentError,
    DocumentLoadError,
)
from .text_utils import normalize_quotes, split_space, indent_continuation

__all__ = [
    "WarningCategory",
    "RenderWarning",
    "WarningCollector",
    "RenderError",
    "StructuralInconsistencyError",
    "LatexDecodeError",
    "ImageAlignmentError",
    "DocumentLoadError",
    "normalize_quotes",
    "split_space",
    "indent_continuation",
]
