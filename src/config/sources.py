"""
配置来源

负责在注册表与外部来源之间搬运配置，包括：
- 环境变量加载（UTIL_CONFIG_<KEY>）
- key=value 配置文件加载（逐行容错）
- 按搜索路径加载第一个可用配置文件
- 保存为 key=value 配置文件
"""

import os
import re
from datetime import datetime
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Union

from loguru import logger

from .registry import SOURCE_ENV, SOURCE_FILE_PREFIX, ConfigRegistry


ENV_PREFIX = "UTIL_CONFIG_"
FILE_OVERRIDE_VAR = "UTIL_CONFIG_FILE"

_LINE_RE = re.compile(r"^\s*([a-z0-9_.]+)\s*=\s*(.*)$")
_COMMENT_RE = re.compile(r"^\s*#")
_QUOTES = ('"', "'")


def env_var_name(key: str) -> str:
    """log.level -> UTIL_CONFIG_LOG_LEVEL"""
    return ENV_PREFIX + key.upper().replace(".", "_")


def load_from_environment(registry: ConfigRegistry,
                          environ: Optional[Mapping[str, str]] = None) -> int:
    """
    从环境变量加载所有已注册的配置项

    Returns:
        成功加载的配置项数量（不会失败）
    """
    environ = os.environ if environ is None else environ
    count = 0

    for key in registry.registered_keys():
        value = environ.get(env_var_name(key))
        if not value:
            continue
        if registry.set(key, value):
            registry.mark_source(key, SOURCE_ENV)
            logger.debug(f"从环境变量加载: {key} = {value}")
            count += 1

    if count > 0:
        logger.info(f"从环境变量加载了 {count} 项配置")
    return count


def _strip_quotes(value: str) -> str:
    """去掉一层成对的外层引号"""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def load_from_file(registry: ConfigRegistry, path: Union[str, Path]) -> bool:
    """
    从 key=value 配置文件加载

    空行和注释行跳过；格式错误或校验失败的行只记录警告，不中断加载。

    Returns:
        文件能打开即返回 True；路径为空、不存在或不可读时返回 False
    """
    if not path:
        logger.error("load_from_file: 缺少配置文件路径")
        return False

    file_path = Path(path).expanduser()
    if not file_path.is_file():
        logger.debug(f"配置文件不存在: {file_path}")
        return False

    try:
        # 只按 \n 分行，值中的其他控制字符原样保留
        with open(file_path, 'r', encoding='utf-8', newline='\n') as f:
            lines = [line.rstrip('\n') for line in f]
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"配置文件不可读: {file_path} - {e}")
        return False

    logger.info(f"正在加载配置文件: {file_path}")

    source = f"{SOURCE_FILE_PREFIX}{path}"
    count = 0
    for line_num, line in enumerate(lines, start=1):
        if not line.strip() or _COMMENT_RE.match(line):
            continue

        match = _LINE_RE.match(line)
        if not match:
            logger.warning(f"第 {line_num} 行: 格式无效: {line}")
            continue

        key, value = match.group(1), _strip_quotes(match.group(2))
        if registry.set(key, value):
            registry.mark_source(key, source)
            count += 1
        else:
            logger.warning(f"第 {line_num} 行: 无法设置 '{key}' = '{value}'")

    logger.success(f"从 {file_path} 加载了 {count} 项配置")
    return True


def default_search_paths(environ: Optional[Mapping[str, str]] = None) -> List[Path]:
    """配置文件默认搜索路径（按顺序）"""
    environ = os.environ if environ is None else environ
    home = Path.home()

    paths = []
    override = environ.get(FILE_OVERRIDE_VAR)
    if override:
        paths.append(Path(override).expanduser())
    paths.append(home / ".config" / "bash_util" / "config")
    paths.append(home / ".bash_util.conf")
    return paths


def load_from_files(registry: ConfigRegistry,
                    paths: Optional[Sequence[Union[str, Path]]] = None) -> Optional[Path]:
    """
    依次尝试搜索路径，加载第一个成功的配置文件

    Returns:
        已加载的文件路径；没有找到任何文件时返回 None（不视为错误）
    """
    if paths is None:
        paths = default_search_paths(registry.environ)

    for path in paths:
        if not path:
            continue
        if load_from_file(registry, path):
            return Path(path)
    return None


def _format_value(value: str) -> str:
    """为重新加载时会被改变的值加引号"""
    if _strip_quotes(value) != value or value != value.lstrip():
        return f'"{value}"'
    return value


def save_to_file(registry: ConfigRegistry, path: Union[str, Path]) -> bool:
    """
    将当前配置保存为 key=value 文件

    按键名排序写出所有非内部键，已注册的键附带描述和来源注释。
    """
    if not path:
        logger.error("save_to_file: 缺少配置文件路径")
        return False

    file_path = Path(path).expanduser()
    logger.info(f"正在保存配置到: {file_path}")

    # 含换行的值无法用 key=value 单行表示
    multiline = [e.key for e in registry.entries() if "\n" in e.value or "\r" in e.value]
    if multiline:
        logger.error(f"保存配置文件失败: 以下键的值含有换行: {', '.join(multiline)}")
        return False

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"创建目录失败: {file_path.parent} - {e}")
        return False

    lines = [
        "# Utility Library Configuration",
        f"# Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "",
    ]
    for entry in registry.entries():
        if entry.registered:
            lines.append(f"# {entry.description}")
            lines.append(f"# Source: {entry.source}")
        lines.append(f"{entry.key}={_format_value(entry.value)}")
        lines.append("")

    try:
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write("\n".join(lines) + "\n")
    except OSError as e:
        logger.error(f"保存配置文件失败: {file_path} - {e}")
        return False

    logger.success(f"配置已保存到 {file_path}")
    return True
