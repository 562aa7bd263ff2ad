"""
日志配置

根据注册表中的 log.* 配置项设置 loguru 输出。
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from src.config.registry import ConfigRegistry


LEVELS = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "error": "ERROR",
}

TEXT_FORMAT = "<level>{level: <8}</level> | <level>{message}</level>"
TIMESTAMP_FORMAT = "<green>{time:HH:mm:ss}</green> | " + TEXT_FORMAT
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def _colorize(setting: str) -> Optional[bool]:
    """log.color: true/false 强制开关，auto 交给 loguru 检测终端"""
    setting = setting.lower()
    if setting in ("true", "yes", "1", "on"):
        return True
    if setting in ("false", "no", "0", "off"):
        return False
    return None


def setup_logging(registry: ConfigRegistry, sink=None) -> None:
    """
    设置日志系统

    Args:
        registry: 配置注册表
        sink: 控制台输出目标（默认 stderr）
    """
    # 移除默认处理器
    logger.remove()

    level_name = registry.get("log.level", "info").lower()
    if level_name != "none":
        level = LEVELS.get(level_name, "INFO")
        serialize = registry.get("log.format", "text").lower() == "json"
        fmt = TIMESTAMP_FORMAT if registry.get_bool("log.timestamp") else TEXT_FORMAT

        logger.add(
            sink if sink is not None else sys.stderr,
            level=level,
            format=fmt,
            colorize=_colorize(registry.get("log.color", "auto")),
            serialize=serialize,
        )

    # 文件输出（详细格式）
    log_file = registry.get("log.file")
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path),
            level="DEBUG",
            format=FILE_FORMAT,
            rotation="10 MB",
            retention="30 days",
            compression="zip"
        )
