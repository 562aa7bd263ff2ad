"""
配置管理模块

提供带类型校验的分层键值配置注册表，以及环境变量/文件加载和导出。
"""

from typing import Optional

from .registry import ConfigEntry, ConfigError, ConfigRegistry, ConfigType

_registry: Optional[ConfigRegistry] = None


def get_registry() -> ConfigRegistry:
    """获取进程级配置注册表（首次使用时自动初始化）"""
    global _registry
    if _registry is None:
        _registry = ConfigRegistry()
        _registry.init()
    return _registry


__all__ = ['ConfigRegistry', 'ConfigEntry', 'ConfigError', 'ConfigType', 'get_registry']
