"""
核心功能模块

包含配置管理等系统组件
"""

from .config import Config, SystemConfig, ValidationConfig

__all__ = [
    "Config",
    "SystemConfig",
    "ValidationConfig",
]
