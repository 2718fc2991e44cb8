"""CLI — 加锁 / 解锁 / 帮助 / 版本"""

from __future__ import annotations

import click

from bitpup import __version__
from bitpup.services.container import ServiceContainer


def register(group: click.Group) -> None:
    group.add_command(lock)
    group.add_command(unlock)
    group.add_command(help_cmd)
    group.add_command(version)


@click.command()
@click.pass_obj
def lock(svc: ServiceContainer) -> None:
    """加锁（阻止除 unlock 外的所有命令）"""
    svc.lock.lock()
    click.echo("bitpup 已锁定。")


@click.command()
@click.pass_obj
def unlock(svc: ServiceContainer) -> None:
    """解锁"""
    if svc.lock.unlock():
        click.echo("bitpup 已解锁。")
    else:
        click.echo("bitpup 未处于锁定状态。")


@click.command(name="help")
@click.pass_context
def help_cmd(ctx: click.Context) -> None:
    """显示帮助"""
    click.echo(ctx.find_root().get_help())


@click.command()
def version() -> None:
    """显示版本"""
    click.echo(f"bitpup {__version__}")
