"""
錯誤處理模組
Error Handling Module

渲染過程的錯誤分類：
- 不支持的特性（下劃線、小型大寫、顏色、上下標、目錄等）：記錄警告並忽略
- 缺失的引用（腳注、內嵌對象）：記錄警告並輸出降級內容
- 結構不一致（項目符號引用了不存在的列表/層級）：致命錯誤
- 解碼錯誤（行內LaTeX掃描遇到無效字符）：致命錯誤
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..config.logging_config import get_logger

logger = get_logger(__name__)


class WarningCategory(Enum):
    """可恢復問題的分類"""
    UNSUPPORTED_FEATURE = "unsupported_feature"   # 目標格式無法表達的樣式或元素
    MISSING_REFERENCE = "missing_reference"       # 腳注或內嵌對象沒有對應條目


@dataclass
class RenderWarning:
    """單條渲染警告"""
    category: WarningCategory
    message: str
    content: Optional[str] = None       # 相關文本片段
    element_id: Optional[str] = None    # 相關腳注/對象ID

    def __str__(self) -> str:
        if self.content is not None:
            return f"{self.message} on {self.content!r}"
        return self.message


@dataclass
class WarningCollector:
    """收集一次渲染中的全部警告，並同步寫入日誌"""
    warnings: List[RenderWarning] = field(default_factory=list)
    counts: Dict[WarningCategory, int] = field(default_factory=dict)

    def unsupported(self, message: str, content: Optional[str] = None) -> RenderWarning:
        return self._add(WarningCategory.UNSUPPORTED_FEATURE, message, content=content)

    def missing(self, message: str, element_id: Optional[str] = None) -> RenderWarning:
        return self._add(WarningCategory.MISSING_REFERENCE, message, element_id=element_id)

    def _add(self, category: WarningCategory, message: str,
             content: Optional[str] = None, element_id: Optional[str] = None) -> RenderWarning:
        warning = RenderWarning(category, message, content=content, element_id=element_id)
        self.warnings.append(warning)
        self.counts[category] = self.counts.get(category, 0) + 1
        logger.warning(str(warning), category=category.value)
        return warning

    def extend(self, other: "WarningCollector") -> None:
        """合併另一個收集器的警告（不重複記錄日誌）"""
        self.warnings.extend(other.warnings)
        for category, count in other.counts.items():
            self.counts[category] = self.counts.get(category, 0) + count

    def messages(self) -> List[str]:
        return [str(w) for w in self.warnings]

    def __len__(self) -> int:
        return len(self.warnings)


class RenderError(Exception):
    """渲染器基礎錯誤"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class StructuralInconsistencyError(RenderError):
    """文檔樹內部不一致，例如項目符號引用了不存在的列表或層級"""

    def __init__(self, message: str, list_id: str = "", nesting_level: int = 0):
        self.list_id = list_id
        self.nesting_level = nesting_level
        super().__init__(message)


class LatexDecodeError(RenderError):
    """行內LaTeX掃描遇到無法解碼的字符"""

    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(message)


class ImageAlignmentError(RenderError):
    """上傳的圖片數量與文檔中的圖片對象數量不一致"""
    pass


class DocumentLoadError(RenderError):
    """文檔導出數據格式錯誤"""

    def __init__(self, message: str, file_path: str = ""):
        self.file_path = file_path
        super().__init__(message)
