#!/usr/bin/env python3
"""
util-config - 配置管理命令行

查看、修改、校验和导出工具库的分层键值配置
"""

import sys
from pathlib import Path

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

import click
from loguru import logger
from rich.console import Console

from src.config import ConfigRegistry
from src.utils.logger import setup_logging

console = Console()


@click.group()
@click.version_option(version="1.0.0", prog_name="util-config")
@click.option('--config', '-c', 'config_file', type=click.Path(dir_okay=False),
              help='额外加载的配置文件')
@click.option('--no-env', is_flag=True, help='忽略 UTIL_CONFIG_* 环境变量')
@click.pass_context
def cli(ctx: click.Context, config_file: str, no_env: bool):
    """⚙️ util-config - 工具库配置管理

    配置加载顺序：默认值 → 环境变量 → 第一个可用的配置文件 → --config
    """
    # 初始化期间只输出警告以上的日志
    logger.remove()
    logger.add(sys.stderr, level="WARNING")

    registry = ConfigRegistry(environ={} if no_env else None)
    registry.init()

    if config_file and not registry.load_from_file(config_file):
        console.print(f"[bold red]❌ 无法加载配置文件: {config_file}[/bold red]")
        sys.exit(1)

    setup_logging(registry)
    ctx.obj = registry


@cli.command()
@click.argument('key')
@click.option('--default', '-d', 'default', default='', help='键缺失时返回的默认值')
@click.option('--as', 'as_type', type=click.Choice(['string', 'bool', 'int']),
              default='string', help='读取方式')
@click.pass_obj
def get(registry: ConfigRegistry, key: str, default: str, as_type: str):
    """🔍 读取配置值"""
    if as_type == 'bool':
        value = registry.get_bool(key)
        click.echo("true" if value else "false")
        sys.exit(0 if value else 1)
    elif as_type == 'int':
        click.echo(registry.get_int(key, default or 0))
    else:
        click.echo(registry.get(key, default))


@cli.command(name='set')
@click.argument('key')
@click.argument('value')
@click.option('--save', '-s', 'save_path', type=click.Path(dir_okay=False),
              help='设置后保存到指定文件')
@click.pass_obj
def set_value(registry: ConfigRegistry, key: str, value: str, save_path: str):
    """✏️ 设置配置值

    不加 --save 时只做校验并在本次进程内生效，不会写入任何配置文件
    """
    if not registry.set(key, value):
        console.print(f"[bold red]❌ 设置失败: {key}[/bold red]")
        sys.exit(1)

    console.print(f"[green]✅ {key} = {value}[/green]")

    if not save_path:
        console.print("[yellow]⚠️ 未指定 --save，修改未持久化，进程结束后失效[/yellow]")
        return

    if not registry.save_to_file(save_path):
        console.print(f"[bold red]❌ 保存失败: {save_path}[/bold red]")
        sys.exit(1)
    console.print(f"[green]💾 配置已保存: {save_path}[/green]")


@cli.command()
@click.argument('key')
@click.pass_obj
def reset(registry: ConfigRegistry, key: str):
    """↩️ 恢复配置默认值"""
    if not registry.reset(key):
        console.print(f"[bold red]❌ 重置失败: {key}[/bold red]")
        sys.exit(1)
    console.print(f"[green]✅ {key} = {registry.get(key)}[/green]")


@cli.command()
@click.argument('key')
@click.argument('value')
@click.pass_obj
def validate(registry: ConfigRegistry, key: str, value: str):
    """🧪 校验配置值（不修改）"""
    if registry.validate(key, value):
        console.print(f"[green]✅ '{value}' 对 {key} 有效[/green]")
    else:
        console.print(f"[bold red]❌ '{value}' 对 {key} 无效[/bold red]")
        sys.exit(1)


@cli.command(name='list')
@click.argument('pattern', required=False)
@click.pass_obj
def list_keys(registry: ConfigRegistry, pattern: str):
    """📋 列出配置项"""
    if not registry.list(pattern, console=console):
        sys.exit(1)


@cli.command()
@click.argument('key')
@click.pass_obj
def show(registry: ConfigRegistry, key: str):
    """📄 显示配置项详情"""
    if not registry.show(key, console=console):
        console.print(f"[bold red]❌ 未找到配置键: {key}[/bold red]")
        sys.exit(1)


@cli.command()
@click.pass_obj
def count(registry: ConfigRegistry):
    """🔢 显示配置项数量"""
    click.echo(registry.count())


@cli.command()
@click.option('--format', '-f', 'fmt', type=click.Choice(['env', 'json']),
              default='env', help='导出格式')
@click.pass_obj
def export(registry: ConfigRegistry, fmt: str):
    """📤 导出配置"""
    if fmt == 'json':
        click.echo(registry.export_json())
    else:
        for line in registry.export_env():
            click.echo(line)


@cli.command()
@click.argument('path', type=click.Path(dir_okay=False))
@click.pass_obj
def save(registry: ConfigRegistry, path: str):
    """💾 保存当前配置到文件"""
    if not registry.save_to_file(path):
        console.print(f"[bold red]❌ 保存失败: {path}[/bold red]")
        sys.exit(1)
    console.print(f"[green]💾 配置已保存: {path}[/green]")


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️ 用户中断操作[/yellow]")
        sys.exit(0)
    except Exception as e:
        logger.error(f"程序异常退出: {e}")
        console.print(f"[bold red]💥 程序异常退出: {e}[/bold red]")
        sys.exit(1)
