"""
默认配置目录

从包内的 defaults.yaml 读取默认配置项并注册到注册表。
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from loguru import logger

from .registry import ConfigError, ConfigRegistry


DEFAULTS_FILE = Path(__file__).with_name("defaults.yaml")


def load_catalog(path: Optional[Union[str, Path]] = None) -> List[Dict[str, Any]]:
    """
    加载默认配置目录

    Args:
        path: 目录文件路径（默认为包内 defaults.yaml）

    Returns:
        配置项定义列表，按文件中的分组顺序排列

    Raises:
        ConfigError: 文件缺失或格式错误
    """
    catalog_file = Path(path) if path else DEFAULTS_FILE

    try:
        with open(catalog_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"无法读取配置目录 {catalog_file}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"配置目录 YAML 格式错误 {catalog_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"配置目录应为映射: {catalog_file}")

    entries = []
    for group, items in data.items():
        for item in items or []:
            if not isinstance(item, dict) or not item.get("key"):
                raise ConfigError(f"配置目录分组 '{group}' 中存在无效条目: {item!r}")
            entries.append(item)
    return entries


def _resolve_default(item: Dict[str, Any], environ: Mapping[str, str]) -> str:
    default = item.get("default")
    env_name = item.get("default_env")
    if env_name and environ.get(env_name):
        return environ[env_name]
    return "" if default is None else str(default)


def register_defaults(registry: ConfigRegistry,
                      path: Optional[Union[str, Path]] = None) -> int:
    """
    注册默认配置目录

    Returns:
        成功注册的配置项数量
    """
    environ = os.environ if registry.environ is None else registry.environ
    registered = 0
    for item in load_catalog(path):
        if registry.register(
            item["key"],
            _resolve_default(item, environ),
            item.get("type", "string"),
            item.get("description", ""),
            item.get("validation", ""),
        ):
            registered += 1

    logger.debug(f"默认配置目录注册完成: {registered} 项")
    return registered
