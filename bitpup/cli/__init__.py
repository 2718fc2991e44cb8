"""bitpup 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
每次调用读取一次配置、构造一个 ServiceContainer 放入 ctx.obj，
并在执行任何子命令前检查全局锁（unlock 除外）。
"""

from __future__ import annotations

import click

from bitpup import __version__
from bitpup.core.config import init_config
from bitpup.core.exceptions import BitpupError
from bitpup.services.container import ServiceContainer
from bitpup.utils.logger import setup_logging_from_env


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="bitpup")
@click.option(
    "--config", "config_path", default="", envvar="BITPUP_CONFIG",
    help="配置文件路径（默认 /etc/bitpup.yml）",
)
@click.option("--base-dir", default="", help="覆盖配置中的 base_dir")
@click.pass_context
def main(ctx: click.Context, config_path: str, base_dir: str) -> None:
    """bitpup - 极简包管理器"""
    setup_logging_from_env()
    if ctx.obj is None:
        try:
            cfg = init_config(config_path, base_dir=base_dir)
        except BitpupError as e:
            raise click.ClickException(str(e)) from e
        ctx.obj = ServiceContainer(config=cfg)

    container: ServiceContainer = ctx.obj
    try:
        container.lock.ensure_unlocked(ctx.invoked_subcommand or "")
    except BitpupError as e:
        raise click.ClickException(str(e)) from e


# 注册各领域子命令
from bitpup.cli.cmd_pkg import register as _reg_pkg  # noqa: E402
from bitpup.cli.cmd_remote import register as _reg_remote  # noqa: E402
from bitpup.cli.cmd_misc import register as _reg_misc  # noqa: E402

_reg_pkg(main)
_reg_remote(main)
_reg_misc(main)
