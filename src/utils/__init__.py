"""
通用工具模块
"""

from .logger import setup_logging

__all__ = ['setup_logging']
