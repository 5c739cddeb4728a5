"""
文本工具函数

提供输入值规范化与清理相关的工具函数
"""

from typing import Any, Optional


def coerce_text(value: Any) -> Optional[str]:
    """
    将边界输入转换为字符串

    Args:
        value: 原始输入值

    Returns:
        Optional[str]: 转换后的字符串；无法解析时返回None
    """
    if value is None:
        return ""

    if isinstance(value, str):
        return value

    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            return None

    return None


def strip_characters(text: str, chars: str) -> str:
    """移除文本中所有指定字符"""
    if not text or not chars:
        return text

    return text.translate({ord(ch): None for ch in chars})


def truncate_text(text: str, max_length: int = 50) -> str:
    """截断文本用于日志输出"""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
