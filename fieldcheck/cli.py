"""
命令行界面

提供配置初始化、规则查看和字段校验功能
"""

import json
import yaml
import click
import logging
from pathlib import Path
from typing import Optional

from .core.config import Config
from .rules.rule import ConfigError


def setup_logging(log_level: str = "INFO", log_file: str = "") -> None:
    """设置日志"""
    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


@click.group()
@click.option("--config", "-c", help="配置文件路径")
@click.option("--verbose", "-v", is_flag=True, help="详细输出")
@click.pass_context
def main(ctx, config: Optional[str], verbose: bool):
    """字段校验规则引擎"""

    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = Config(config)
    except ConfigError as e:
        click.echo(f"❌ 配置错误: {e}", err=True)
        ctx.exit(2)

    # 设置日志
    system = ctx.obj["config"].system
    setup_logging("DEBUG" if verbose else system.log_level, system.log_file)

    if verbose:
        click.echo(f"配置文件: {ctx.obj['config'].config_path}")


@main.command()
@click.option("--force", is_flag=True, help="覆盖已存在的配置文件")
@click.pass_context
def init(ctx, force: bool):
    """创建默认配置文件"""
    config = ctx.obj["config"]

    if Path(config.config_path).exists() and not force:
        click.echo(f"⚠️ 配置文件已存在: {config.config_path}（使用 --force 覆盖）")
        return

    config.create_default_config()
    click.echo(f"✅ 配置文件已创建: {config.config_path}")


@main.command()
@click.pass_context
def info(ctx):
    """显示已配置的字段规则"""
    config = ctx.obj["config"]

    try:
        engine = config.build_engine()
    except ConfigError as e:
        click.echo(f"❌ 配置错误: {e}", err=True)
        ctx.exit(2)

    summary = engine.get_rules_summary()

    click.echo("=== 字段规则信息 ===")
    click.echo(f"配置文件: {config.config_path}")
    click.echo(f"输入长度上限: {summary['max_value_length']}")
    click.echo(f"字段数: {summary['total_fields']}，规则数: {summary['total_rules']}")
    for field_name, rule_names in summary["fields"].items():
        click.echo(f"  {field_name}: {', '.join(rule_names)}")


def _load_input_file(input_file: str) -> dict:
    path = Path(input_file)
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    data = data or {}
    if not isinstance(data, dict):
        raise ValueError("输入文件顶层必须是字段名到值的映射")
    return {name: _scalar_to_text(value) for name, value in data.items()}


def _scalar_to_text(value):
    """输入文件中的数字、布尔、日期等标量按文本校验；映射和列表原样保留"""
    if value is None or isinstance(value, (str, dict, list)):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@main.command()
@click.option(
    "--field", "-f", "field_values", multiple=True, help="字段值，格式为 name=value"
)
@click.option(
    "--input", "-i", "input_file", type=click.Path(exists=True), help="JSON/YAML 输入文件"
)
@click.option("--json", "as_json", is_flag=True, help="以JSON格式输出结果")
@click.pass_context
def validate(ctx, field_values: tuple, input_file: Optional[str], as_json: bool):
    """校验字段值"""
    config = ctx.obj["config"]

    try:
        engine = config.build_engine()
    except ConfigError as e:
        click.echo(f"❌ 配置错误: {e}", err=True)
        ctx.exit(2)

    request = {}
    if input_file:
        try:
            request.update(_load_input_file(input_file))
        except (ValueError, yaml.YAMLError) as e:
            click.echo(f"❌ 输入文件解析失败: {e}", err=True)
            ctx.exit(2)

    for item in field_values:
        if "=" not in item:
            click.echo(f"❌ 字段格式错误（应为 name=value）: {item}", err=True)
            ctx.exit(2)
        name, value = item.split("=", 1)
        request[name] = value

    result = engine.validate(request)

    if as_json:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        for field_name, messages in result.errors.items():
            if messages:
                click.echo(f"❌ {field_name}")
                for message in messages:
                    click.echo(f"    - {message}")
            else:
                click.echo(f"✅ {field_name}")

        if result.ok:
            click.echo("🎉 全部字段校验通过")
        else:
            click.echo(f"⚠️ {len(result.failed_fields)} 个字段未通过校验")

    if not result.ok:
        ctx.exit(1)


if __name__ == "__main__":
    main()
