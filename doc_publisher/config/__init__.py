"""
配置與日誌
Configuration and Logging

渲染選項、應用信息和日誌輸出都從環境變量（或 .env）讀取。
"""

from .settings import (
    Settings,
    AppSettings,
    RenderSettings,
    LoggingSettings,
    get_settings,
    get_render_settings,
)

from .logging_config import (
    setup_logging,
    get_logger,
    get_performance_logger,
    log_performance,
    LogConfig,
    ContextLogger,
    PerformanceLogger,
    StageTiming,
)

__all__ = [
    # 主要配置類
    "Settings",
    "AppSettings",
    "RenderSettings",
    "LoggingSettings",

    # 配置獲取函數
    "get_settings",
    "get_render_settings",

    # 日誌配置
    "setup_logging",
    "get_logger",
    "get_performance_logger",
    "log_performance",
    "LogConfig",
    "ContextLogger",
    "PerformanceLogger",
    "StageTiming",
]
