"""
工具函数模块

提供项目中常用的工具函数和辅助功能
"""

from .text_utils import (
    coerce_text,
    strip_characters,
    truncate_text,
)

__all__ = [
    "coerce_text",
    "strip_characters",
    "truncate_text",
]
