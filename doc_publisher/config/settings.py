"""
系統配置設置
System Configuration Settings

基於Pydantic的類型安全配置管理：
- 等寬字體白名單（代碼塊檢測）
- 刪除線標記、腳注縮進
- 分段輸出與並行渲染
- 日誌級別與輸出格式
"""

from typing import Optional, List, Literal
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from pathlib import Path
from functools import lru_cache


class AppSettings(BaseSettings):
    """應用程序基本配置"""

    name: str = Field(default="Doc Publisher", description="應用名稱")
    version: str = Field(default="1.0.0", description="應用版本")
    description: str = Field(default="將導出的Google文檔渲染為可發布的Markdown", description="命令行幫助中的描述")
    debug: bool = Field(default=False, description="調試模式")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="production", description="運行環境"
    )

    class Config:
        env_prefix = "APP_"
        case_sensitive = False


class RenderSettings(BaseSettings):
    """Markdown渲染配置"""

    # 代碼塊檢測用的等寬字體（大小寫不敏感）
    monospace_fonts: List[str] = Field(
        default=["courier new", "consolas", "roboto mono"],
        description="視為等寬的字體名稱"
    )

    strikethrough_marker: str = Field(default="-", description="刪除線包裹標記")
    footnote_indent: str = Field(default="    ", description="多行腳注的續行縮進")

    # 分段輸出
    separate_by: Literal["none", "pagebreak"] = Field(
        default="none", description="文檔分段方式"
    )
    parallel_segments: bool = Field(default=False, description="並行渲染各分段")
    max_workers: int = Field(default=4, ge=1, description="並行渲染的最大線程數")

    @field_validator("monospace_fonts")
    @classmethod
    def normalize_fonts(cls, fonts: List[str]) -> List[str]:
        """字體名統一為小寫"""
        return [font.strip().lower() for font in fonts if font.strip()]

    @field_validator("strikethrough_marker")
    @classmethod
    def validate_marker(cls, marker: str) -> str:
        """標記不能為空，也不能包含空白（Markdown強調標記必須緊貼文字）"""
        if not marker or any(ch.isspace() for ch in marker):
            raise ValueError(f"無效的刪除線標記: {marker!r}")
        return marker

    class Config:
        env_prefix = "RENDER_"
        case_sensitive = False


class LoggingSettings(BaseSettings):
    """日誌配置"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="日誌級別"
    )
    format: Literal["text", "json"] = Field(default="text", description="日誌格式")

    # 日誌文件（未配置時只輸出到stderr）
    file_path: Optional[Path] = Field(default=None, description="日誌文件路徑")
    rotation: str = Field(default="1 week", description="日誌輪轉")
    retention: str = Field(default="30 days", description="日誌保留時間")

    class Config:
        env_prefix = "LOG_"
        case_sensitive = False


class Settings(BaseSettings):
    """主配置類，包含所有子配置"""

    app: AppSettings = Field(default_factory=AppSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    def create_directories(self) -> None:
        """創建日誌目錄"""
        if self.logging.file_path:
            Path(self.logging.file_path).parent.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    """
    獲取配置實例（單例模式）

    Returns:
        Settings: 配置實例
    """
    settings = Settings()
    settings.create_directories()
    return settings


def get_render_settings() -> RenderSettings:
    """獲取渲染配置"""
    return get_settings().render
