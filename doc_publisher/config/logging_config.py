"""
日誌配置模組
Logging Configuration Module

渲染器的全部日誌都經過loguru：
- 控制台輸出，文本或JSON（serialize）格式
- 可選的輪轉日誌文件
- ContextLogger 綁定模組名，可派生帶文檔ID/分段序號的子記錄器
- 按渲染階段累計耗時，並行渲染分段時線程安全
"""

import sys
import time
import threading
import functools
from pathlib import Path
from dataclasses import dataclass
from typing import Optional, Dict, Any, List
from contextlib import contextmanager
from loguru import logger

from .settings import get_settings, LoggingSettings

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[logger_name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


class LogConfig:
    """按 LoggingSettings 安裝loguru輸出"""

    def __init__(self, settings: Optional[LoggingSettings] = None):
        self.settings = settings or get_settings().logging
        self.handler_ids: List[int] = []
        self._setup_logger()

    @property
    def serialize(self) -> bool:
        return self.settings.format == "json"

    def _setup_logger(self) -> None:
        logger.remove()
        # 直接使用loguru記錄的消息沒有綁定名稱
        logger.configure(extra={"logger_name": "doc_publisher"})

        self.handler_ids.append(logger.add(
            sys.stderr,
            format=TEXT_FORMAT,
            level=self.settings.level,
            colorize=not self.serialize,
            serialize=self.serialize,
            diagnose=False
        ))

        if self.settings.file_path:
            self.handler_ids.append(self._add_file_handler(Path(self.settings.file_path)))

    def _add_file_handler(self, file_path: Path) -> int:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        return logger.add(
            str(file_path),
            format=TEXT_FORMAT,
            level=self.settings.level,
            rotation=self.settings.rotation,
            retention=self.settings.retention,
            compression="gz",
            serialize=self.serialize,
            enqueue=True,
            colorize=False,
            diagnose=False
        )


class ContextLogger:
    """
    帶上下文的日誌記錄器

    關鍵字參數和上下文一起綁定為loguru的extra字段，
    JSON輸出時成為結構化字段。
    """

    def __init__(self, logger_name: str = "doc_publisher", **context: Any):
        self.name = logger_name
        self.context: Dict[str, Any] = dict(context)

    def add_context(self, **kwargs) -> "ContextLogger":
        """添加上下文信息，支持鏈式調用"""
        self.context.update(kwargs)
        return self

    def clear_context(self) -> "ContextLogger":
        self.context.clear()
        return self

    def for_document(self, document_id: str, segment: Optional[int] = None) -> "ContextLogger":
        """
        派生帶文檔上下文的記錄器，當前實例不變

        Args:
            document_id: 文檔ID
            segment: 分段序號（從1開始），整篇渲染時為None

        Returns:
            ContextLogger: 新的記錄器
        """
        context = {**self.context, "document_id": document_id}
        if segment is not None:
            context["segment"] = segment
        return ContextLogger(self.name, **context)

    def _emit(self, level: str, message: str, kwargs: Dict[str, Any]) -> None:
        extra = {**self.context, **kwargs, "logger_name": self.name}
        # depth=2 報告調用 debug()/info() 等方法的位置
        logger.bind(**extra).opt(depth=2).log(level, message)

    def debug(self, message: str, **kwargs) -> None:
        self._emit("DEBUG", message, kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._emit("INFO", message, kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._emit("WARNING", message, kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._emit("ERROR", message, kwargs)

    def critical(self, message: str, **kwargs) -> None:
        self._emit("CRITICAL", message, kwargs)


@dataclass
class StageTiming:
    """一個階段的累計耗時（秒）"""
    calls: int = 0
    total: float = 0.0
    slowest: float = 0.0

    def add(self, duration: float) -> None:
        self.calls += 1
        self.total += duration
        self.slowest = max(self.slowest, duration)

    @property
    def average(self) -> float:
        return self.total / self.calls if self.calls else 0.0


class PerformanceLogger:
    """按階段名累計耗時"""

    def __init__(self, logger_name: str = "performance"):
        self.logger = ContextLogger(logger_name)
        self._timings: Dict[str, StageTiming] = {}
        self._lock = threading.Lock()

    @contextmanager
    def measure(self, stage: str, **kwargs):
        """
        測量with塊的耗時

        Args:
            stage: 階段名稱，如 document_load、markdown_render
            **kwargs: 一併記錄的字段
        """
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.record(stage, time.perf_counter() - start_time, **kwargs)

    def record(self, stage: str, duration: float, **kwargs) -> None:
        with self._lock:
            self._timings.setdefault(stage, StageTiming()).add(duration)
        self.logger.debug(
            f"{stage} 耗時 {duration * 1000:.1f} ms",
            stage=stage,
            duration_ms=round(duration * 1000, 3),
            **kwargs
        )

    def get_summary(self) -> Dict[str, StageTiming]:
        """各階段耗時的快照"""
        with self._lock:
            return {
                stage: StageTiming(t.calls, t.total, t.slowest)
                for stage, t in self._timings.items()
            }


# 全局實例
_log_config: Optional[LogConfig] = None
_loggers: Dict[str, ContextLogger] = {}
_perf_logger: Optional[PerformanceLogger] = None


def setup_logging(settings: Optional[LoggingSettings] = None) -> LogConfig:
    """
    重新安裝日誌輸出

    Args:
        settings: 日誌配置，為None時使用全局配置

    Returns:
        LogConfig: 日誌配置實例
    """
    global _log_config
    _log_config = LogConfig(settings)
    return _log_config


def get_logger(name: str = "doc_publisher") -> ContextLogger:
    """同名記錄器只創建一次"""
    if name not in _loggers:
        _loggers[name] = ContextLogger(name)
    return _loggers[name]


def get_performance_logger() -> PerformanceLogger:
    global _perf_logger
    if _perf_logger is None:
        _perf_logger = PerformanceLogger()
    return _perf_logger


def log_performance(func_name: Optional[str] = None):
    """
    記錄函數耗時的裝飾器，失敗時同時記錄異常信息

    Args:
        func_name: 階段名稱，默認為函數名
    """
    def decorator(func):
        stage = func_name or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                get_performance_logger().record(
                    stage, time.perf_counter() - start_time, status="error", error=str(e)
                )
                raise
            get_performance_logger().record(stage, time.perf_counter() - start_time, status="success")
            return result
        return wrapper
    return decorator


def initialize_logging() -> None:
    setup_logging()
    get_logger(__name__).debug("日誌系統初始化完成")


# 模組加載時自動初始化
initialize_logging()
