"""
内置规则检查

每个检查函数接收规则与字段值，返回失败提示列表（空列表表示通过）
"""

from typing import List

from .rule import Rule, RuleKind, EMAIL_PATTERN
from ..utils.text_utils import strip_characters


PASSWORD_CONDITION_MESSAGES = {
    "min_length": "长度不足 {min_length} 个字符",
    "require_upper": "缺少大写字母",
    "require_lower": "缺少小写字母",
    "require_digit": "缺少数字",
    "require_symbol": "缺少特殊符号",
}


def _is_symbol(ch: str) -> bool:
    return not ch.isalnum() and not ch.isspace()


def check_not_empty(rule: Rule, value: str) -> List[str]:
    if not value.strip():
        return [rule.message]
    return []


def check_length_range(rule: Rule, value: str) -> List[str]:
    length = len(value)
    if length < rule.parameters["min"] or length > rule.parameters["max"]:
        return [rule.message]
    return []


def check_charset(rule: Rule, value: str) -> List[str]:
    if rule.parameters["compiled"].fullmatch(value) is None:
        return [rule.message]
    return []


def check_password_strength(rule: Rule, value: str) -> List[str]:
    """密码强度检查，每个未满足的条件单独给出提示"""
    params = rule.parameters
    failed = []

    if len(value) < params["min_length"]:
        failed.append("min_length")

    # 每类字符只做一次线性扫描
    if params["require_upper"] and not any(ch.isupper() for ch in value):
        failed.append("require_upper")
    if params["require_lower"] and not any(ch.islower() for ch in value):
        failed.append("require_lower")
    if params["require_digit"] and not any(ch.isdigit() for ch in value):
        failed.append("require_digit")
    if params["require_symbol"] and not any(_is_symbol(ch) for ch in value):
        failed.append("require_symbol")

    return [
        f"{rule.message}: {PASSWORD_CONDITION_MESSAGES[key].format(**params)}"
        for key in failed
    ]


def check_email_shape(rule: Rule, value: str) -> List[str]:
    if EMAIL_PATTERN.fullmatch(value) is None:
        return [rule.message]
    return []


def apply_sanitize_strip(rule: Rule, value: str) -> str:
    """预处理转换：返回移除指定字符后的新值"""
    return strip_characters(value, rule.parameters["chars"])


PREDICATES = {
    RuleKind.NOT_EMPTY: check_not_empty,
    RuleKind.LENGTH_RANGE: check_length_range,
    RuleKind.CHARSET: check_charset,
    RuleKind.PASSWORD_STRENGTH: check_password_strength,
    RuleKind.EMAIL_SHAPE: check_email_shape,
}

TRANSFORMS = {
    RuleKind.SANITIZE_STRIP: apply_sanitize_strip,
}
