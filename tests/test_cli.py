"""
CLI命令单元测试

测试init、info和validate命令的功能
"""

import json
import os
import shutil
import tempfile
import unittest

import yaml
from click.testing import CliRunner

from fieldcheck.cli import main


class TestCLI(unittest.TestCase):
    """CLI测试类"""

    def setUp(self):
        """测试前准备"""
        self.runner = CliRunner()
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.temp_dir, "fields.yaml")

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                {
                    "system": {"log_level": "WARNING"},
                    "fields": {
                        "username": [
                            {"rule": "not-empty"},
                            {"rule": "length-range", "min": 3, "max": 16},
                        ],
                        "email": [{"rule": "email-shape"}],
                    },
                },
                f,
                allow_unicode=True,
            )

    def tearDown(self):
        """测试后清理"""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_validate_success(self):
        """测试校验通过"""
        result = self.runner.invoke(
            main,
            [
                "-c",
                self.config_path,
                "validate",
                "-f",
                "username=alice",
                "-f",
                "email=alice@example.com",
            ],
        )

        self.assertEqual(result.exit_code, 0)
        self.assertIn("✅ username", result.output)
        self.assertIn("全部字段校验通过", result.output)

    def test_validate_failure(self):
        """测试校验未通过时退出码为1"""
        result = self.runner.invoke(
            main,
            ["-c", self.config_path, "validate", "-f", "email=plainaddress"],
        )

        self.assertEqual(result.exit_code, 1)
        self.assertIn("❌ username", result.output)
        self.assertIn("不能为空", result.output)
        self.assertIn("邮箱格式不正确", result.output)
        self.assertIn("2 个字段未通过校验", result.output)

    def test_validate_json_output(self):
        """测试JSON输出"""
        result = self.runner.invoke(
            main,
            [
                "-c",
                self.config_path,
                "validate",
                "--json",
                "-f",
                "username=al",
                "-f",
                "email=al@example.com",
            ],
        )

        self.assertEqual(result.exit_code, 1)
        data = json.loads(result.stdout)
        self.assertFalse(data["ok"])
        self.assertEqual(data["errors"]["username"], ["长度必须在 3 到 16 个字符之间"])
        self.assertEqual(data["errors"]["email"], [])

    def test_validate_input_file(self):
        """测试从输入文件读取字段值"""
        input_path = os.path.join(self.temp_dir, "input.json")
        with open(input_path, "w", encoding="utf-8") as f:
            json.dump({"username": "alice", "email": "alice@example.com"}, f)

        result = self.runner.invoke(
            main, ["-c", self.config_path, "validate", "-i", input_path]
        )

        self.assertEqual(result.exit_code, 0)

    def test_validate_field_overrides_input_file(self):
        input_path = os.path.join(self.temp_dir, "input.yaml")
        with open(input_path, "w", encoding="utf-8") as f:
            f.write("username: alice\nemail: alice@example.com\n")

        result = self.runner.invoke(
            main,
            ["-c", self.config_path, "validate", "-i", input_path, "-f", "email=bad"],
        )

        self.assertEqual(result.exit_code, 1)
        self.assertIn("❌ email", result.output)

    def test_validate_input_file_numeric_values(self):
        """测试输入文件中的数字按文本校验"""
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                {
                    "system": {"log_level": "WARNING"},
                    "fields": {
                        "zip": [
                            {"rule": "length-range", "min": 5, "max": 5},
                            {"rule": "charset", "pattern": "[0-9]"},
                        ],
                        "subscribe": [{"rule": "not-empty"}],
                    },
                },
                f,
            )
        input_path = os.path.join(self.temp_dir, "input.yaml")
        with open(input_path, "w", encoding="utf-8") as f:
            f.write("zip: 12345\nsubscribe: true\n")

        result = self.runner.invoke(
            main, ["-c", self.config_path, "validate", "--json", "-i", input_path]
        )

        self.assertEqual(result.exit_code, 0)
        data = json.loads(result.stdout)
        self.assertTrue(data["ok"])
        self.assertEqual(data["values"], {"zip": "12345", "subscribe": "true"})

    def test_validate_input_file_nested_value_unparseable(self):
        input_path = os.path.join(self.temp_dir, "input.json")
        with open(input_path, "w", encoding="utf-8") as f:
            json.dump({"username": ["alice"], "email": "alice@example.com"}, f)

        result = self.runner.invoke(
            main, ["-c", self.config_path, "validate", "-i", input_path]
        )

        self.assertEqual(result.exit_code, 1)
        self.assertIn("无法解析的输入值", result.output)

    def test_invalid_log_level(self):
        with open(self.config_path, "w", encoding="utf-8") as f:
            f.write("system:\n  log_level: 10\n")

        result = self.runner.invoke(main, ["-c", self.config_path, "info"])

        self.assertEqual(result.exit_code, 2)
        self.assertIn("配置错误", result.output)

    def test_validate_bad_field_format(self):
        result = self.runner.invoke(
            main, ["-c", self.config_path, "validate", "-f", "username"]
        )

        self.assertEqual(result.exit_code, 2)

    def test_validate_bad_input_file(self):
        input_path = os.path.join(self.temp_dir, "input.json")
        with open(input_path, "w", encoding="utf-8") as f:
            f.write("[1, 2, 3]")

        result = self.runner.invoke(
            main, ["-c", self.config_path, "validate", "-i", input_path]
        )

        self.assertEqual(result.exit_code, 2)

    def test_invalid_rule_config(self):
        """测试配置错误时退出码为2"""
        with open(self.config_path, "w", encoding="utf-8") as f:
            f.write("fields:\n  username:\n    - rule: regex\n")

        result = self.runner.invoke(
            main, ["-c", self.config_path, "validate", "-f", "username=alice"]
        )

        self.assertEqual(result.exit_code, 2)
        self.assertIn("配置错误", result.output)

    def test_info(self):
        """测试info命令"""
        result = self.runner.invoke(main, ["-c", self.config_path, "info"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("字段数: 2，规则数: 3", result.output)
        self.assertIn("username: not-empty, length-range", result.output)

    def test_init_creates_config(self):
        """测试init命令"""
        new_path = os.path.join(self.temp_dir, "sub", "config.yaml")

        result = self.runner.invoke(main, ["-c", new_path, "init"])

        self.assertEqual(result.exit_code, 0)
        self.assertTrue(os.path.exists(new_path))
        with open(new_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        self.assertIn("password", data["fields"])

    def test_init_does_not_overwrite(self):
        result = self.runner.invoke(main, ["-c", self.config_path, "init"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("配置文件已存在", result.output)
        with open(self.config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        self.assertNotIn("password", data["fields"])


if __name__ == "__main__":
    unittest.main()
