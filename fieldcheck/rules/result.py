"""
校验结果

定义字段校验的结构化结果
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List


@dataclass
class ValidationResult:
    """校验结果"""

    ok: bool
    errors: Dict[str, List[str]] = field(default_factory=dict)  # 字段 -> 失败提示
    values: Dict[str, str] = field(default_factory=dict)  # 字段 -> 预处理后的值

    @property
    def failed_fields(self) -> List[str]:
        """获取未通过校验的字段"""
        return [name for name, messages in self.errors.items() if messages]

    def messages_for(self, field_name: str) -> List[str]:
        """获取指定字段的失败提示"""
        return list(self.errors.get(field_name, []))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "errors": {name: list(messages) for name, messages in self.errors.items()},
            "values": dict(self.values),
        }
