"""
配置管理模块

负责加载、保存字段校验配置，并据此构建规则引擎
"""

import os
import yaml
import logging
from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from ..rules.rule import ConfigError
from ..rules.rule_engine import RuleEngine


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ValidationConfig:
    """校验配置"""

    max_value_length: int = 8192


@dataclass
class SystemConfig:
    """系统配置"""

    log_level: str = "INFO"
    log_file: str = ""


def default_fields() -> Dict[str, List[Dict[str, Any]]]:
    """默认字段规则：用户名、邮箱、密码"""
    return {
        "username": [
            {"rule": "sanitize-strip", "chars": "<>&'\""},
            {"rule": "not-empty"},
            {"rule": "length-range", "min": 3, "max": 32},
            {"rule": "charset", "pattern": "[A-Za-z0-9_]"},
        ],
        "email": [
            {"rule": "not-empty"},
            {"rule": "length-range", "min": 3, "max": 254},
            {"rule": "email-shape"},
        ],
        "password": [
            {
                "rule": "password-strength",
                "min_length": 8,
                "require_upper": True,
                "require_lower": True,
                "require_digit": True,
                "require_symbol": True,
            },
        ],
    }


class Config:
    """配置管理器"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._find_config_file()
        self.logger = logging.getLogger(__name__)

        # 默认配置
        self.validation = ValidationConfig()
        self.system = SystemConfig()
        self.fields: Dict[str, List[Dict[str, Any]]] = default_fields()

        # 加载配置
        if self.config_path and os.path.exists(self.config_path):
            self.load_config()
        else:
            self.logger.info(f"配置文件不存在，使用默认配置: {self.config_path}")

    def _find_config_file(self) -> str:
        """查找配置文件"""
        possible_paths = [
            "config/fields.yaml",
            "fields.yaml",
            ".fieldcheck/config.yaml",
            os.path.expanduser("~/.fieldcheck/config.yaml"),
        ]

        for path in possible_paths:
            if os.path.exists(path):
                return path

        return "config/fields.yaml"

    def load_config(self) -> None:
        """加载配置文件"""
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"配置加载失败: {e}")
            raise ConfigError(f"无法读取配置文件 {self.config_path}: {e}") from e

        if not config_data:
            self.logger.warning("配置文件为空，使用默认配置")
            return

        if not isinstance(config_data, dict):
            raise ConfigError(f"配置文件顶层必须是映射: {self.config_path}")

        # 加载校验配置
        if "validation" in config_data:
            validation_data = config_data["validation"] or {}
            if not isinstance(validation_data, dict):
                raise ConfigError("validation 配置必须是映射")
            self.validation.max_value_length = validation_data.get(
                "max_value_length", self.validation.max_value_length
            )
            max_length = self.validation.max_value_length
            if isinstance(max_length, bool) or not isinstance(max_length, int) or max_length <= 0:
                raise ConfigError(f"max_value_length 必须是正整数: {max_length!r}")

        # 加载系统配置
        if "system" in config_data:
            system_data = config_data["system"] or {}
            if not isinstance(system_data, dict):
                raise ConfigError("system 配置必须是映射")
            log_level = system_data.get("log_level", self.system.log_level)
            if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
                raise ConfigError(
                    f"log_level 必须是 {', '.join(LOG_LEVELS)} 之一: {log_level!r}"
                )
            log_file = system_data.get("log_file", self.system.log_file)
            if log_file is None:
                log_file = ""
            if not isinstance(log_file, str):
                raise ConfigError(f"log_file 必须是字符串: {log_file!r}")
            self.system.log_level = log_level
            self.system.log_file = log_file

        # 加载字段规则
        if "fields" in config_data:
            fields_data = config_data["fields"] or {}
            if not isinstance(fields_data, dict):
                raise ConfigError("fields 配置必须是字段名到规则列表的映射")
            self.fields = fields_data

        self.logger.info(f"配置加载成功: {self.config_path}")

    def get_config_dict(self) -> Dict[str, Any]:
        """获取配置字典"""
        return {
            "validation": self.validation.__dict__,
            "system": self.system.__dict__,
            "fields": self.fields,
        }

    def _write(self, config_data: Dict[str, Any]) -> None:
        # 确保目录存在
        config_dir = os.path.dirname(self.config_path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                config_data,
                f,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                indent=2,
            )

    def create_default_config(self) -> None:
        """创建默认配置文件"""
        default_config = {
            "validation": ValidationConfig().__dict__,
            "system": SystemConfig().__dict__,
            "fields": default_fields(),
        }
        self._write(default_config)
        self.logger.info(f"默认配置文件已创建: {self.config_path}")

    def save(self) -> None:
        """保存配置到文件"""
        self._write(self.get_config_dict())
        self.logger.info(f"配置已保存: {self.config_path}")

    def build_engine(self) -> RuleEngine:
        """
        根据配置构建规则引擎

        Returns:
            RuleEngine: 已注册全部字段规则的引擎

        Raises:
            ConfigError: 字段规则配置无效
        """
        engine = RuleEngine(max_value_length=self.validation.max_value_length)
        engine.register_many(self.fields)
        return engine
