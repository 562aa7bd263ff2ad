"""
配置导出

将注册表中的非内部配置导出为 shell export 语句或 JSON 对象。
"""

import json
import shlex
from typing import List

from .registry import ConfigRegistry
from .sources import env_var_name


def export_env(registry: ConfigRegistry) -> List[str]:
    """
    导出为 shell 环境变量赋值语句

    Returns:
        按键名排序的 `export NAME=value` 行，值已做 shell 安全引用
    """
    return [
        f"export {env_var_name(entry.key)}={shlex.quote(entry.value)}"
        for entry in registry.entries()
    ]


def export_json(registry: ConfigRegistry, indent: int = 2) -> str:
    """导出为扁平 JSON 对象，所有值均为字符串"""
    data = {entry.key: entry.value for entry in registry.entries()}
    return json.dumps(data, ensure_ascii=False, indent=indent, sort_keys=True)
