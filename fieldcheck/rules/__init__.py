"""
规则引擎模块

负责字段校验规则的定义、注册与执行
"""

from .rule import (
    ConfigError,
    FieldSpec,
    Rule,
    RuleKind,
    build_rule,
    rule_from_definition,
)
from .result import ValidationResult
from .rule_engine import RuleEngine

__all__ = [
    "ConfigError",
    "FieldSpec",
    "Rule",
    "RuleKind",
    "build_rule",
    "rule_from_definition",
    "ValidationResult",
    "RuleEngine",
]
