"""
字段校验规则引擎

一个可配置的字段校验引擎：按字段注册有序规则，一次性收集所有字段的全部失败提示。
"""

__version__ = "0.1.0"

from .core.config import Config
from .rules import (
    ConfigError,
    FieldSpec,
    Rule,
    RuleEngine,
    RuleKind,
    ValidationResult,
    build_rule,
)

__all__ = [
    "Config",
    "ConfigError",
    "FieldSpec",
    "Rule",
    "RuleEngine",
    "RuleKind",
    "ValidationResult",
    "build_rule",
]
