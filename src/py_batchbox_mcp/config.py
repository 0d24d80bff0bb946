"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ConversionDefaults:
    """图片转换相关的默认配置"""

    # 编码质量（0.1-1.0，对应 JPEG 质量 10-100）
    QUALITY: float = 0.9
    MATTE_COLOR: str = "#FFFFFF"
    SCALE: float = 1.0
    TRIM_RIGHT: int = 0

    # 界面可调范围
    MIN_QUALITY_PERCENT: int = 10
    MAX_QUALITY_PERCENT: int = 100
    MIN_SCALE_PERCENT: int = 1
    MAX_SCALE_PERCENT: int = 100
    MAX_TRIM_RIGHT: int = 50

    # 导出文件名模板
    EXPORT_NAME_TEMPLATE: str = "BatchBox_Images_{date}.zip"


@dataclass(frozen=True)
class ArchiveDefaults:
    """归档相关的默认配置"""

    COMPRESS_LEVEL: int = 6
    # 读取条目数据时的分块大小，决定进度回调粒度
    CHUNK_SIZE: int = 256 * 1024


@dataclass(frozen=True)
class ScanDefaults:
    """目录扫描相关的默认配置"""

    # 每次读取目录条目的批大小
    READ_BATCH_SIZE: int = 100


@dataclass(frozen=True)
class ProcessingDefaults:
    """批处理相关的默认配置"""

    # 单个任务的超时秒数，None 表示不限制
    ITEM_TIMEOUT_SECONDS: float | None = None


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "py_batchbox.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.conversion = ConversionDefaults()
        self.archive = ArchiveDefaults()
        self.scan = ScanDefaults()
        self.processing = ProcessingDefaults()
        self.logging = LoggingDefaults()

        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        if quality := os.getenv("BATCHBOX_QUALITY"):
            object.__setattr__(self.conversion, "QUALITY", float(quality))

        if matte := os.getenv("BATCHBOX_MATTE_COLOR"):
            object.__setattr__(self.conversion, "MATTE_COLOR", matte)

        if level := os.getenv("BATCHBOX_COMPRESS_LEVEL"):
            object.__setattr__(self.archive, "COMPRESS_LEVEL", int(level))

        if batch_size := os.getenv("BATCHBOX_READ_BATCH_SIZE"):
            object.__setattr__(self.scan, "READ_BATCH_SIZE", int(batch_size))

        if timeout := os.getenv("BATCHBOX_ITEM_TIMEOUT"):
            object.__setattr__(self.processing, "ITEM_TIMEOUT_SECONDS", float(timeout))

        # 日志配置
        if log_level := os.getenv("BATCHBOX_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("BATCHBOX_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging,
                "ENABLE_FILE_LOGGING",
                enable_file_log.lower() in ("true", "1", "yes"),
            )

        if log_path := os.getenv("BATCHBOX_LOG_FILE"):
            object.__setattr__(self.logging, "LOG_FILE_PATH", log_path)


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
