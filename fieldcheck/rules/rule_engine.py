"""
规则引擎

按字段维护有序规则集合，对输入值逐字段执行全部规则并收集失败提示
"""

import logging
import threading
from collections import abc
from types import MappingProxyType
from typing import Dict, Any, Iterable, List, Mapping, Optional, Tuple, Union

from .rule import ConfigError, FieldSpec, Rule, rule_from_definition
from .result import ValidationResult
from .checks import PREDICATES, TRANSFORMS
from ..utils.text_utils import coerce_text, truncate_text


UNPARSEABLE_MESSAGE = "无法解析的输入值"
TOO_LONG_MESSAGE = "输入值长度超过上限 {max_value_length} 个字符"

RuleDefinition = Union[Rule, Mapping[str, Any]]


class RuleEngine:
    """字段校验规则引擎"""

    def __init__(self, max_value_length: int = 8192):
        self.logger = logging.getLogger(__name__)

        if (
            isinstance(max_value_length, bool)
            or not isinstance(max_value_length, int)
            or max_value_length <= 0
        ):
            self.logger.error(f"max_value_length 无效: {max_value_length!r}")
            raise ConfigError(f"max_value_length 必须是正整数: {max_value_length!r}")
        self.max_value_length = max_value_length

        # 配置快照只整体替换，不原地修改
        self._specs: Mapping[str, FieldSpec] = MappingProxyType({})
        self._write_lock = threading.Lock()

    @property
    def fields(self) -> Tuple[str, ...]:
        """已注册的字段名"""
        return tuple(self._specs.keys())

    def get_field_spec(self, field_name: str) -> Optional[FieldSpec]:
        return self._specs.get(field_name)

    def _build_field_spec(
        self, field_name: str, rules: Iterable[RuleDefinition]
    ) -> FieldSpec:
        if not isinstance(field_name, str) or not field_name:
            raise ConfigError(f"字段名必须是非空字符串: {field_name!r}")

        if not isinstance(rules, abc.Iterable) or isinstance(rules, (str, bytes, Mapping)):
            raise ConfigError(f"字段 {field_name} 的规则必须是列表", field_name=field_name)

        built = []
        for definition in rules:
            try:
                built.append(rule_from_definition(definition))
            except ConfigError as e:
                raise ConfigError(
                    f"字段 {field_name} 规则配置错误: {e}",
                    field_name=field_name,
                    rule_name=e.rule_name,
                ) from e

        if not built:
            raise ConfigError(f"字段 {field_name} 的规则列表为空", field_name=field_name)

        return FieldSpec(field_name=field_name, rules=tuple(built))

    def register(self, field_name: str, rules: Iterable[RuleDefinition]) -> FieldSpec:
        """
        注册（或替换）字段的规则列表

        Args:
            field_name: 字段名
            rules: 有序规则列表，元素为Rule或规则定义映射

        Returns:
            FieldSpec: 已注册的字段规则

        Raises:
            ConfigError: 规则列表为空或包含无效规则，原有配置保持不变
        """
        try:
            spec = self._build_field_spec(field_name, rules)
        except ConfigError as e:
            self.logger.error(f"字段规则注册失败: {e}")
            raise

        with self._write_lock:
            specs = dict(self._specs)
            specs[field_name] = spec
            self._specs = MappingProxyType(specs)

        self.logger.info(f"字段 {field_name} 注册了{len(spec.rules)}条规则: {list(spec.rule_names)}")
        return spec

    def register_many(
        self, fields: Mapping[str, Iterable[RuleDefinition]]
    ) -> List[FieldSpec]:
        """
        批量注册字段规则

        全部字段构建成功后才一次性替换配置，任一字段出错则不做任何修改
        """
        if not isinstance(fields, Mapping):
            raise ConfigError(f"字段配置必须是映射: {type(fields).__name__}")

        try:
            built = [self._build_field_spec(name, rules) for name, rules in fields.items()]
        except ConfigError as e:
            self.logger.error(f"批量注册失败: {e}")
            raise

        with self._write_lock:
            specs = dict(self._specs)
            for spec in built:
                specs[spec.field_name] = spec
            self._specs = MappingProxyType(specs)

        self.logger.info(f"批量注册完成，共{len(built)}个字段")
        return built

    def unregister(self, field_name: str) -> None:
        """移除字段规则"""
        with self._write_lock:
            if field_name not in self._specs:
                self.logger.error(f"字段未注册: {field_name}")
                raise ConfigError(f"字段未注册: {field_name}", field_name=field_name)

            specs = dict(self._specs)
            del specs[field_name]
            self._specs = MappingProxyType(specs)

        self.logger.info(f"字段 {field_name} 已移除")

    def validate(self, request: Any) -> ValidationResult:
        """
        校验输入值

        Args:
            request: 字段名到原始值的映射，缺失字段按空字符串处理

        Returns:
            ValidationResult: 所有字段的校验结果，不会因输入问题抛出异常
        """
        specs = self._specs

        errors: Dict[str, List[str]] = {}
        values: Dict[str, str] = {}

        if not isinstance(request, Mapping):
            self.logger.warning(f"校验请求不是映射: {type(request).__name__}")
            for field_name in specs:
                errors[field_name] = [UNPARSEABLE_MESSAGE]
            return ValidationResult(ok=not errors, errors=errors, values=values)

        unknown = [key for key in request if key not in specs]
        if unknown:
            self.logger.debug(f"忽略未注册字段: {unknown}")

        for field_name, spec in specs.items():
            raw = request.get(field_name)
            value = coerce_text(raw)

            if value is None:
                self.logger.debug(f"字段 {field_name} 的值无法解析: {type(raw).__name__}")
                errors[field_name] = [UNPARSEABLE_MESSAGE]
                continue

            if len(value) > self.max_value_length:
                self.logger.debug(f"字段 {field_name} 的值过长: {len(value)}")
                errors[field_name] = [
                    TOO_LONG_MESSAGE.format(max_value_length=self.max_value_length)
                ]
                continue

            value, messages = self._apply_rules(spec, value)
            errors[field_name] = messages
            values[field_name] = value

        ok = not any(errors.values())
        if not ok:
            failed = [name for name, messages in errors.items() if messages]
            self.logger.debug(f"校验未通过的字段: {failed}")

        return ValidationResult(ok=ok, errors=errors, values=values)

    def _apply_rules(self, spec: FieldSpec, value: str) -> Tuple[str, List[str]]:
        """按顺序执行字段规则，返回预处理后的值和失败提示"""
        messages: List[str] = []

        for rule in spec.rules:
            kind = rule.kind
            if rule.is_transform:
                transformed = TRANSFORMS[kind](rule, value)
                if transformed != value:
                    self.logger.debug(
                        f"字段 {spec.field_name} 预处理: "
                        f"{truncate_text(value)!r} -> {truncate_text(transformed)!r}"
                    )
                value = transformed
            else:
                messages.extend(PREDICATES[kind](rule, value))

        return value, messages

    def get_rules_summary(self) -> Dict[str, Any]:
        """获取规则摘要"""
        specs = self._specs
        return {
            "total_fields": len(specs),
            "total_rules": sum(len(spec.rules) for spec in specs.values()),
            "fields": {name: list(spec.rule_names) for name, spec in specs.items()},
            "max_value_length": self.max_value_length,
        }
