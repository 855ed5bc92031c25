"""统一配置管理模块。

提供图像流水线的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CompressionDefaults:
    """编码相关的默认配置"""

    # 未指定质量时 JPEG 使用的质量
    JPEG_QUALITY: int = 100
    PNG_COMPRESS_LEVEL: int = 6

    # 重采样算法，对应 PIL.Image.Resampling 的成员名
    RESAMPLING: str = "LANCZOS"

    # 并发设置
    MAX_WORKERS: int = 4

    def get_format_defaults(self, format_name: str) -> dict[str, Any]:
        """获取格式特定的默认编码参数"""
        defaults = {
            "JPEG": {
                "quality": self.JPEG_QUALITY,
                "optimize": False,
                "progressive": False,
            },
            "PNG": {
                "compress_level": self.PNG_COMPRESS_LEVEL,
            },
            "GIF": {
                "optimize": False,
            },
        }
        return dict(defaults.get(format_name, {}))


@dataclass(frozen=True)
class ProcessingDefaults:
    """处理相关的默认配置"""

    # 目录处理时是否递归
    DEFAULT_RECURSIVE: bool = True

    # 执行器选择阈值：超过该任务数或平均大小时使用进程池
    PROCESS_POOL_TASK_THRESHOLD: int = 20
    PROCESS_POOL_SIZE_THRESHOLD_MB: float = 5.0

    # 暗角默认覆盖比例（从中心到边缘，开始变暗的位置）
    VIGNETTE_START: float = 0.5


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.compression = CompressionDefaults()
        self.processing = ProcessingDefaults()
        self.logging = LoggingDefaults()

        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        if jpeg_quality := os.getenv("IMGPIPE_JPEG_QUALITY"):
            object.__setattr__(self.compression, "JPEG_QUALITY", int(jpeg_quality))

        if max_workers := os.getenv("IMGPIPE_MAX_WORKERS"):
            object.__setattr__(self.compression, "MAX_WORKERS", int(max_workers))

        if resampling := os.getenv("IMGPIPE_RESAMPLING"):
            object.__setattr__(self.compression, "RESAMPLING", resampling.upper())

        if log_level := os.getenv("IMGPIPE_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

    def choose_executor_type(self, task_count: int, total_bytes: int) -> str:
        """根据任务数量和数据量选择执行器类型"""
        if task_count == 0:
            return "thread"
        avg_mb = total_bytes / task_count / 1024 / 1024
        if (
            task_count > self.processing.PROCESS_POOL_TASK_THRESHOLD
            or avg_mb > self.processing.PROCESS_POOL_SIZE_THRESHOLD_MB
        ):
            return "process"
        return "thread"


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
