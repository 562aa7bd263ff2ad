"""
配置展示

使用 rich 表格展示配置列表和单个配置项详情。
"""

import re
from typing import Optional

from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .registry import ConfigRegistry


MAX_DISPLAY_WIDTH = 20


def truncate(value: str, width: int = MAX_DISPLAY_WIDTH) -> str:
    """超长值截断显示（只影响显示，不改存储值）"""
    if len(value) > width:
        return value[:width - 3] + "..."
    return value


def build_list_table(registry: ConfigRegistry, pattern: Optional[str] = None) -> Table:
    """构建配置列表表格"""
    table = Table(title="⚙️ 配置列表")

    table.add_column("KEY", style="cyan")
    table.add_column("VALUE", style="magenta")
    table.add_column("SOURCE", style="yellow")
    table.add_column("LOCKED", style="dim")

    for entry in registry.entries(pattern):
        table.add_row(
            escape(entry.key),
            escape(truncate(entry.value)),
            entry.source,
            "true" if entry.locked else "false",
        )

    return table


def list_config(registry: ConfigRegistry, pattern: Optional[str] = None,
                console: Optional[Console] = None) -> bool:
    """
    显示配置列表

    Args:
        registry: 配置注册表
        pattern: 可选的键名过滤正则
        console: 输出控制台

    Returns:
        过滤正则无效时返回 False
    """
    console = console or Console()
    try:
        table = build_list_table(registry, pattern)
    except re.error as e:
        logger.error(f"list: 过滤规则无效 '{pattern}': {e}")
        return False

    console.print(table)
    return True


def build_show_table(registry: ConfigRegistry, key: str) -> Optional[Table]:
    """构建单个配置项详情表格，键没有值时返回 None"""
    entry = registry.entry(key)
    if entry is None or not entry.value:
        return None

    table = Table(title=f"Configuration: {escape(key)}", show_header=False)
    table.add_column("字段", style="cyan")
    table.add_column("值", style="white")

    table.add_row("Value", escape(entry.value))
    table.add_row("Default", escape(entry.default) if entry.default is not None else "N/A")
    table.add_row("Type", entry.type.value if entry.type else "unknown")
    table.add_row("Source", entry.source)
    table.add_row("Locked", "true" if entry.locked else "false")
    if entry.description:
        table.add_row("Description", escape(entry.description))
    if entry.validation:
        table.add_row("Validation", escape(entry.validation))

    return table


def show_config(registry: ConfigRegistry, key: str,
                console: Optional[Console] = None) -> bool:
    """显示单个配置项详情，键不存在时返回 False"""
    if not key:
        logger.error("show: 缺少配置键")
        return False

    table = build_show_table(registry, key)
    if table is None:
        logger.error(f"show: 未找到配置键: {key}")
        return False

    (console or Console()).print(table)
    return True
