"""
规则定义

定义规则类型、不可变的规则对象以及字段规则集合
"""

import re
from enum import Enum
from types import MappingProxyType
from dataclasses import dataclass
from typing import Dict, Any, Mapping, Optional, Tuple, Union


class ConfigError(Exception):
    """规则配置错误"""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        rule_name: Optional[str] = None,
    ):
        self.field_name = field_name
        self.rule_name = rule_name
        super().__init__(message)


class RuleKind(str, Enum):
    """内置规则类型"""

    NOT_EMPTY = "not-empty"
    LENGTH_RANGE = "length-range"
    CHARSET = "charset"
    PASSWORD_STRENGTH = "password-strength"
    EMAIL_SHAPE = "email-shape"
    SANITIZE_STRIP = "sanitize-strip"


DEFAULT_MESSAGES = {
    RuleKind.NOT_EMPTY: "不能为空",
    RuleKind.LENGTH_RANGE: "长度必须在 {min} 到 {max} 个字符之间",
    RuleKind.CHARSET: "包含不允许的字符",
    RuleKind.PASSWORD_STRENGTH: "密码强度不足",
    RuleKind.EMAIL_SHAPE: "邮箱格式不正确",
    RuleKind.SANITIZE_STRIP: "",
}

DEFAULT_STRIP_CHARS = "<>&'\""

CHAR_CLASS_PATTERN = re.compile(r"\[(?:\\.|[^\]\\])+\]", re.DOTALL)

# 邮箱只做形状检查：本地部分、单个@、至少一个点的域名、2-63个字母的顶级标签
EMAIL_PATTERN = re.compile(r"[^@\s]+@(?:[^@\s.]+\.)+[A-Za-z]{2,63}")


@dataclass(frozen=True)
class Rule:
    """单条规则（谓词或预处理转换）"""

    name: str
    parameters: Mapping[str, Any]
    message: str

    def __post_init__(self):
        kind = parse_kind(self.name)

        if not isinstance(self.parameters, Mapping):
            raise ConfigError(f"规则 {kind.value} 的参数必须是映射", rule_name=kind.value)
        if not isinstance(self.message, str):
            raise ConfigError(f"规则 {kind.value} 的 message 必须是字符串", rule_name=kind.value)

        params = dict(self.parameters)
        _NORMALIZED_CHECKS[kind](kind, params)

        object.__setattr__(self, "name", kind.value)
        object.__setattr__(self, "parameters", MappingProxyType(params))

    @property
    def kind(self) -> RuleKind:
        return RuleKind(self.name)

    @property
    def is_transform(self) -> bool:
        """是否为预处理转换规则"""
        return self.name == RuleKind.SANITIZE_STRIP.value


@dataclass(frozen=True)
class FieldSpec:
    """字段名及其有序规则序列"""

    field_name: str
    rules: Tuple[Rule, ...]

    @property
    def rule_names(self) -> Tuple[str, ...]:
        return tuple(rule.name for rule in self.rules)


def _require_int(kind: RuleKind, params: Dict[str, Any], key: str) -> int:
    if key not in params:
        raise ConfigError(f"规则 {kind.value} 缺少必要参数: {key}", rule_name=kind.value)
    value = params[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(
            f"规则 {kind.value} 参数 {key} 必须是非负整数: {value!r}",
            rule_name=kind.value,
        )
    return value


def _optional_bool(
    kind: RuleKind, params: Dict[str, Any], key: str, default: bool
) -> bool:
    value = params.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(
            f"规则 {kind.value} 参数 {key} 必须是布尔值: {value!r}",
            rule_name=kind.value,
        )
    return value


def _require_bool(kind: RuleKind, params: Dict[str, Any], key: str) -> bool:
    if key not in params:
        raise ConfigError(f"规则 {kind.value} 缺少必要参数: {key}", rule_name=kind.value)
    return _optional_bool(kind, params, key, False)


def _check_char_class(kind: RuleKind, allowed: Any) -> str:
    """只接受单个方括号字符类，外层包装后不会出现嵌套量词"""
    if not isinstance(allowed, str) or CHAR_CLASS_PATTERN.fullmatch(allowed) is None:
        raise ConfigError(
            f"规则 {kind.value} 的 pattern 必须是单个字符类（如 [A-Za-z0-9_]）: {allowed!r}",
            rule_name=kind.value,
        )
    return allowed


def _build_length_range(kind: RuleKind, params: Dict[str, Any]) -> Dict[str, Any]:
    min_length = _require_int(kind, params, "min")
    max_length = _require_int(kind, params, "max")
    if min_length > max_length:
        raise ConfigError(
            f"规则 {kind.value} 的 min ({min_length}) 大于 max ({max_length})",
            rule_name=kind.value,
        )
    return {"min": min_length, "max": max_length}


def _build_charset(kind: RuleKind, params: Dict[str, Any]) -> Dict[str, Any]:
    pattern = params.get("pattern")
    chars = params.get("chars")

    if (pattern is None) == (chars is None):
        raise ConfigError(
            f"规则 {kind.value} 需要且只能提供 pattern 或 chars 之一",
            rule_name=kind.value,
        )

    if chars is not None:
        if not isinstance(chars, str) or not chars:
            raise ConfigError(
                f"规则 {kind.value} 参数 chars 必须是非空字符串", rule_name=kind.value
            )
        allowed = "[" + "".join(re.escape(ch) for ch in chars) + "]"
    else:
        if not isinstance(pattern, str) or not pattern:
            raise ConfigError(
                f"规则 {kind.value} 参数 pattern 必须是非空字符串", rule_name=kind.value
            )
        allowed = _check_char_class(kind, pattern)

    # 整体锚定匹配，避免逐字符扫描
    try:
        compiled = re.compile(f"(?:{allowed})*")
    except re.error as e:
        raise ConfigError(
            f"规则 {kind.value} 的正则表达式无效: {e}", rule_name=kind.value
        ) from e

    return {"allowed": allowed, "compiled": compiled}


def _build_password_strength(
    kind: RuleKind, params: Dict[str, Any]
) -> Dict[str, Any]:
    min_length = 8
    if "min_length" in params:
        min_length = _require_int(kind, params, "min_length")

    return {
        "min_length": min_length,
        "require_upper": _optional_bool(kind, params, "require_upper", True),
        "require_lower": _optional_bool(kind, params, "require_lower", True),
        "require_digit": _optional_bool(kind, params, "require_digit", True),
        "require_symbol": _optional_bool(kind, params, "require_symbol", True),
    }


def _build_sanitize_strip(kind: RuleKind, params: Dict[str, Any]) -> Dict[str, Any]:
    chars = params.get("chars", DEFAULT_STRIP_CHARS)
    if not isinstance(chars, str) or not chars:
        raise ConfigError(
            f"规则 {kind.value} 参数 chars 必须是非空字符串", rule_name=kind.value
        )
    return {"chars": chars}


def _build_no_params(kind: RuleKind, params: Dict[str, Any]) -> Dict[str, Any]:
    return {}


_PARAMETER_BUILDERS = {
    RuleKind.NOT_EMPTY: (_build_no_params, ()),
    RuleKind.LENGTH_RANGE: (_build_length_range, ("min", "max")),
    RuleKind.CHARSET: (_build_charset, ("pattern", "chars")),
    RuleKind.PASSWORD_STRENGTH: (
        _build_password_strength,
        (
            "min_length",
            "require_upper",
            "require_lower",
            "require_digit",
            "require_symbol",
        ),
    ),
    RuleKind.EMAIL_SHAPE: (_build_no_params, ()),
    RuleKind.SANITIZE_STRIP: (_build_sanitize_strip, ("chars",)),
}


def _check_length_range(kind: RuleKind, params: Dict[str, Any]) -> None:
    _build_length_range(kind, params)


def _check_charset(kind: RuleKind, params: Dict[str, Any]) -> None:
    allowed = _check_char_class(kind, params.get("allowed"))
    compiled = params.get("compiled")
    if not isinstance(compiled, re.Pattern) or compiled.pattern != f"(?:{allowed})*":
        raise ConfigError(
            f"规则 {kind.value} 的 compiled 必须是由 allowed 生成的正则", rule_name=kind.value
        )


def _check_password_strength(kind: RuleKind, params: Dict[str, Any]) -> None:
    _require_int(kind, params, "min_length")
    for key in ("require_upper", "require_lower", "require_digit", "require_symbol"):
        _require_bool(kind, params, key)


def _check_sanitize_strip(kind: RuleKind, params: Dict[str, Any]) -> None:
    if "chars" not in params:
        raise ConfigError(f"规则 {kind.value} 缺少必要参数: chars", rule_name=kind.value)
    _build_sanitize_strip(kind, params)


def _check_no_params(kind: RuleKind, params: Dict[str, Any]) -> None:
    pass


# 直接构造Rule时，对已规范化的参数做校验
_NORMALIZED_CHECKS = {
    RuleKind.NOT_EMPTY: _check_no_params,
    RuleKind.LENGTH_RANGE: _check_length_range,
    RuleKind.CHARSET: _check_charset,
    RuleKind.PASSWORD_STRENGTH: _check_password_strength,
    RuleKind.EMAIL_SHAPE: _check_no_params,
    RuleKind.SANITIZE_STRIP: _check_sanitize_strip,
}


def parse_kind(name: Any) -> RuleKind:
    """解析规则类型名称"""
    try:
        return RuleKind(name)
    except ValueError:
        raise ConfigError(f"未知的规则类型: {name!r}", rule_name=str(name)) from None


def build_rule(
    kind: Union[str, RuleKind],
    parameters: Optional[Mapping[str, Any]] = None,
    message: Optional[str] = None,
) -> Rule:
    """
    构建并校验一条规则

    Args:
        kind: 规则类型名称
        parameters: 规则参数
        message: 失败提示，为空时使用默认提示

    Returns:
        Rule: 不可变规则对象

    Raises:
        ConfigError: 规则类型未知或参数无效
    """
    rule_kind = parse_kind(kind)
    params = dict(parameters or {})

    builder, allowed_keys = _PARAMETER_BUILDERS[rule_kind]
    unknown = sorted(set(params) - set(allowed_keys))
    if unknown:
        raise ConfigError(
            f"规则 {rule_kind.value} 包含未知参数: {', '.join(unknown)}",
            rule_name=rule_kind.value,
        )

    normalized = builder(rule_kind, params)

    if message is not None and not isinstance(message, str):
        raise ConfigError(
            f"规则 {rule_kind.value} 的 message 必须是字符串", rule_name=rule_kind.value
        )
    if not message:
        message = DEFAULT_MESSAGES[rule_kind].format(**normalized)

    return Rule(
        name=rule_kind.value,
        parameters=MappingProxyType(normalized),
        message=message,
    )


def rule_from_definition(definition: Union[Rule, Mapping[str, Any]]) -> Rule:
    """
    从配置定义构建规则

    定义格式: {"rule": "length-range", "min": 3, "max": 32, "message": "..."}
    """
    if isinstance(definition, Rule):
        return definition

    if not isinstance(definition, Mapping):
        raise ConfigError(f"规则定义必须是映射: {definition!r}")

    params = dict(definition)
    if "rule" not in params:
        raise ConfigError(f"规则定义缺少 rule 字段: {definition!r}")

    kind = params.pop("rule")
    message = params.pop("message", None)
    return build_rule(kind, params, message)
