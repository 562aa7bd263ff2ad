"""
配置注册表

进程内的分层键值配置存储，包括：
- 配置项注册（默认值、类型、描述、校验规则）
- 类型校验与正则校验
- 读取/写入、锁定/解锁、重置为默认值
- 来源追踪（default / env / file:<path> / runtime）
- 从环境变量和配置文件批量加载，导出为文件、环境变量、JSON

所有值均以字符串存储，类型只在校验和读取时解释。
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from loguru import logger


# 内部保留键前缀（不参与列表、计数、导出）
INTERNAL_PREFIX = "_"
INITIALIZED_KEY = "_initialized"

SOURCE_DEFAULT = "default"
SOURCE_ENV = "env"
SOURCE_RUNTIME = "runtime"
SOURCE_FILE_PREFIX = "file:"

_INT_RE = re.compile(r"-?[0-9]+")
_UNSIGNED_INT_RE = re.compile(r"[0-9]+")
_BOOL_VALUES = {"true", "false", "yes", "no", "1", "0", "on", "off"}
_TRUE_VALUES = {"true", "yes", "1", "on"}


class ConfigError(Exception):
    """配置目录或注册表使用错误"""


class ConfigType(str, Enum):
    """配置值类型"""
    STRING = "string"
    INT = "int"
    BOOL = "bool"
    PATH = "path"
    LIST = "list"

    @classmethod
    def parse(cls, value: str) -> Optional["ConfigType"]:
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class ConfigMeta:
    """配置项元数据"""
    type: ConfigType
    description: str = ""
    validation: str = ""


@dataclass
class ConfigEntry:
    """单个配置项的只读快照"""
    key: str
    value: str
    default: Optional[str]
    type: Optional[ConfigType]
    description: str
    validation: str
    source: str
    locked: bool

    @property
    def registered(self) -> bool:
        return self.type is not None


def is_internal(key: str) -> bool:
    """内部键以保留前缀开头"""
    return key.startswith(INTERNAL_PREFIX)


class ConfigRegistry:
    """配置注册表"""

    def __init__(self, search_paths: Optional[Sequence[Union[str, Path]]] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        初始化配置注册表

        Args:
            search_paths: 配置文件搜索路径（None 表示使用默认搜索路径）
            environ: 环境变量映射（None 表示使用进程环境）
        """
        self.search_paths = list(search_paths) if search_paths is not None else None
        self.environ = environ

        self._values: Dict[str, str] = {}
        self._defaults: Dict[str, str] = {}
        self._meta: Dict[str, ConfigMeta] = {}
        self._sources: Dict[str, str] = {}
        self._locked: Dict[str, bool] = {}

    # ------------------------------------------------------------------
    # 注册与校验
    # ------------------------------------------------------------------

    def register(self, key: str, default: str = "", type: str = "string",
                 description: str = "", validation: str = "") -> bool:
        """
        注册配置项

        默认值和元数据总是覆盖；只有在当前没有值时才写入默认值。
        默认值本身不做校验。

        Args:
            key: 配置键（category.name）
            default: 默认值
            type: 类型 string/int/bool/path/list
            description: 描述
            validation: 可选的校验正则

        Returns:
            是否注册成功
        """
        if not key:
            logger.error("register: 缺少配置键")
            return False

        config_type = ConfigType.parse(type)
        if config_type is None:
            logger.error(f"register: 无效类型 '{type}' (键 '{key}')")
            return False

        default = "" if default is None else str(default)
        self._defaults[key] = default
        self._meta[key] = ConfigMeta(
            type=config_type,
            description=description or "",
            validation=validation or "",
        )

        if not self._values.get(key):
            self._values[key] = default
            self._sources[key] = SOURCE_DEFAULT

        logger.debug(f"注册配置: {key} = {default} ({config_type.value})")
        return True

    def validate(self, key: str, value: str) -> bool:
        """
        校验配置值

        未注册的键总是通过；已注册的键先做类型检查，再做正则检查。
        """
        meta = self._meta.get(key)
        if meta is None:
            return True

        value = "" if value is None else str(value)

        if meta.type == ConfigType.INT:
            if not _INT_RE.fullmatch(value):
                logger.debug(f"校验失败: '{value}' 不是整数")
                return False
        elif meta.type == ConfigType.BOOL:
            if value.lower() not in _BOOL_VALUES:
                logger.debug(f"校验失败: '{value}' 不是布尔值")
                return False
        elif meta.type == ConfigType.PATH:
            # 路径不检查存在性
            if not value:
                return True

        if meta.validation:
            # Python 的 $ 会匹配末尾换行之前的位置
            if "\n" in value:
                logger.debug(f"校验失败: '{value!r}' 含有换行")
                return False
            try:
                matched = re.search(meta.validation, value)
            except re.error as e:
                logger.error(f"校验规则无效 '{meta.validation}' (键 '{key}'): {e}")
                return False
            if not matched:
                logger.debug(f"校验失败: '{value}' 不匹配规则 '{meta.validation}'")
                return False

        return True

    # ------------------------------------------------------------------
    # 读写
    # ------------------------------------------------------------------

    def set(self, key: str, value: str) -> bool:
        """
        设置配置值

        Returns:
            是否设置成功（锁定或校验失败时返回 False，状态不变）
        """
        if not key:
            logger.error("set: 缺少配置键")
            return False

        if self._locked.get(key, False):
            logger.error(f"set: 键 '{key}' 已锁定，无法修改")
            return False

        if key not in self._meta:
            logger.warning(f"set: 设置未注册的键 '{key}'")

        value = "" if value is None else str(value)
        if not self.validate(key, value):
            logger.error(f"set: 校验失败 '{key}' = '{value}'")
            return False

        old_value = self._values.get(key, "")
        self._values[key] = value
        self._sources[key] = SOURCE_RUNTIME

        if old_value != value:
            logger.debug(f"配置变更: {key} = '{value}' (原值: '{old_value}')")
        return True

    def get(self, key: str, default: str = "") -> str:
        """获取配置值，值缺失或为空时返回调用方默认值"""
        if not key:
            return default
        return self._values.get(key) or default

    def get_bool(self, key: str) -> bool:
        """按布尔值读取：true/yes/1/on（不区分大小写）为真"""
        return self.get(key, "false").lower() in _TRUE_VALUES

    def get_int(self, key: str, default: Union[int, str] = 0) -> Union[int, str]:
        """
        按整数读取

        存储值为纯数字时返回 int，否则原样返回调用方默认值（不做校验）。
        """
        value = self.get(key, str(default))
        if _UNSIGNED_INT_RE.fullmatch(value):
            return int(value)
        return default

    def has(self, key: str) -> bool:
        """键是否有非空的当前值"""
        return bool(self._values.get(key))

    def default(self, key: str) -> Optional[str]:
        return self._defaults.get(key)

    def source(self, key: str) -> Optional[str]:
        return self._sources.get(key)

    def mark_source(self, key: str, source: str) -> None:
        """覆盖来源标记（供加载器在 set 成功后使用）"""
        if key in self._values:
            self._sources[key] = source

    # ------------------------------------------------------------------
    # 锁定与重置
    # ------------------------------------------------------------------

    def lock(self, key: str) -> bool:
        if not key:
            logger.error("lock: 缺少配置键")
            return False
        self._locked[key] = True
        logger.debug(f"锁定配置键: {key}")
        return True

    def unlock(self, key: str) -> bool:
        if not key:
            logger.error("unlock: 缺少配置键")
            return False
        self._locked[key] = False
        logger.debug(f"解锁配置键: {key}")
        return True

    def is_locked(self, key: str) -> bool:
        return self._locked.get(key, False)

    def reset(self, key: str) -> bool:
        """将配置项恢复为注册时的默认值"""
        if not key:
            logger.error("reset: 缺少配置键")
            return False

        if self._locked.get(key, False):
            logger.error(f"reset: 键 '{key}' 已锁定")
            return False

        # 空默认值视同未注册
        if not self._defaults.get(key):
            logger.error(f"reset: 键 '{key}' 未注册")
            return False

        self._values[key] = self._defaults[key]
        self._sources[key] = SOURCE_DEFAULT
        logger.info(f"重置配置: {key} = {self._values[key]}")
        return True

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def keys(self, pattern: Optional[str] = None) -> List[str]:
        """
        按字典序列出非内部键

        Args:
            pattern: 可选的正则，匹配键名（非锚定搜索）
        """
        keys = sorted(k for k in self._values if not is_internal(k))
        if pattern:
            regex = re.compile(pattern)
            keys = [k for k in keys if regex.search(k)]
        return keys

    def entry(self, key: str) -> Optional[ConfigEntry]:
        """获取单个配置项快照，键不存在时返回 None"""
        if key not in self._values:
            return None

        meta = self._meta.get(key)
        return ConfigEntry(
            key=key,
            value=self._values[key],
            default=self._defaults.get(key),
            type=meta.type if meta else None,
            description=meta.description if meta else "",
            validation=meta.validation if meta else "",
            source=self._sources.get(key, "unknown"),
            locked=self._locked.get(key, False),
        )

    def entries(self, pattern: Optional[str] = None) -> List[ConfigEntry]:
        return [self.entry(k) for k in self.keys(pattern)]

    def count(self) -> int:
        """非内部键的数量"""
        return sum(1 for k in self._values if not is_internal(k))

    def registered_keys(self) -> List[str]:
        return list(self._defaults)

    # ------------------------------------------------------------------
    # 初始化、加载与导出
    # ------------------------------------------------------------------

    @property
    def initialized(self) -> bool:
        return bool(self._values.get(INITIALIZED_KEY))

    def init(self) -> bool:
        """
        初始化配置系统（幂等）

        注册默认配置目录，标记并锁定初始化键，
        然后依次从环境变量和配置文件加载。
        """
        if self.initialized:
            logger.debug("配置系统已初始化")
            return True

        from .catalog import register_defaults

        logger.debug("正在初始化配置系统...")
        register_defaults(self)

        self._values[INITIALIZED_KEY] = "true"
        self._locked[INITIALIZED_KEY] = True

        self.load_from_environment()
        self.load_from_files()

        logger.debug(f"配置系统初始化完成，共 {self.count()} 项配置")
        return True

    def load_from_environment(self) -> int:
        from .sources import load_from_environment
        return load_from_environment(self, self.environ)

    def load_from_file(self, path: Union[str, Path]) -> bool:
        from .sources import load_from_file
        return load_from_file(self, path)

    def load_from_files(self) -> Optional[Path]:
        from .sources import load_from_files
        return load_from_files(self, self.search_paths)

    def save_to_file(self, path: Union[str, Path]) -> bool:
        from .sources import save_to_file
        return save_to_file(self, path)

    def list(self, pattern: Optional[str] = None, console=None) -> bool:
        from .display import list_config
        return list_config(self, pattern, console)

    def show(self, key: str, console=None) -> bool:
        from .display import show_config
        return show_config(self, key, console)

    def export_env(self) -> List[str]:
        from .export import export_env
        return export_env(self)

    def export_json(self) -> str:
        from .export import export_json
        return export_json(self)

    def __str__(self) -> str:
        """返回注册表的字符串表示"""
        locked = sum(1 for k in self.keys() if self.is_locked(k))
        return (f"ConfigRegistry("
                f"keys={self.count()}, "
                f"registered={len(self._defaults)}, "
                f"locked={locked}, "
                f"initialized={self.initialized})")

    def __repr__(self) -> str:
        return self.__str__()
