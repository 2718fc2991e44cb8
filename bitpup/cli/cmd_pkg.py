"""CLI — 包安装 / 删除 / 更新 / 列表"""

from __future__ import annotations

import click

from bitpup.core.exceptions import BitpupError
from bitpup.core.pkg.models import InstallStatus, RemoveStatus
from bitpup.services.container import ServiceContainer
from bitpup.services.package_service import BatchReport


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(remove)
    group.add_command(update)
    group.add_command(list_packages)


_yes_option = click.option("-y", "--yes", is_flag=True, help="不询问，自动确认")
_root_option = click.option(
    "--root", "root_prefix", default="/", show_default=True,
    help="安装命令中 $ROOT 的替换值",
)
_insecure_option = click.option(
    "--insecure", is_flag=True, help="不校验远程源的 TLS 证书",
)


def _echo_report(report: BatchReport) -> None:
    """逐包输出结果；失败信息写 stderr"""
    for pid in report.unresolved:
        click.echo(f"远程源中未找到包: {pid}", err=True)
    for pid in report.not_installed:
        click.echo(f"未安装: {pid}", err=True)
    if report.aborted:
        click.echo("已取消。")
    for r in report.installs:
        if r.status == InstallStatus.INSTALLED:
            click.echo(f"    {r.package_id}: 已安装 v{r.version}")
        elif r.status == InstallStatus.ALREADY_INSTALLED:
            click.echo(f"    {r.package_id}: 已存在，跳过")
        elif r.status == InstallStatus.ABORTED:
            click.echo(f"    {r.package_id}: 已取消")
        else:
            click.echo(f"    {r.package_id}: 安装失败 - {r.reason}", err=True)
    for r in report.removals:
        if r.status == RemoveStatus.REMOVED:
            if r.owners == []:
                click.echo(f"    {r.package_id}: 已没有其它包依赖它")
            click.echo(f"    已删除 {r.package_id}")
        elif r.status == RemoveStatus.NOT_INSTALLED:
            click.echo(f"未安装: {r.package_id}", err=True)
        else:
            click.echo(f"    {r.package_id}: 已取消")


def _finish(ctx: click.Context, report: BatchReport) -> None:
    _echo_report(report)
    if not report.ok:
        ctx.exit(1)


@click.command()
@click.argument("packages", nargs=-1, required=True)
@_yes_option
@_root_option
@_insecure_option
@click.pass_context
def install(
    ctx: click.Context, packages: tuple[str, ...], yes: bool, root_prefix: str,
    insecure: bool,
) -> None:
    """安装一个或多个包（含传递依赖）"""
    svc: ServiceContainer = ctx.obj
    if insecure:
        svc.allow_insecure_tls()
    try:
        report = svc.packages.install(
            list(packages), auto_confirm=yes, root_prefix=root_prefix,
        )
    except BitpupError as e:
        raise click.ClickException(str(e)) from e
    _finish(ctx, report)


@click.command()
@click.argument("packages", nargs=-1, required=True)
@_yes_option
@click.pass_context
def remove(ctx: click.Context, packages: tuple[str, ...], yes: bool) -> None:
    """删除一个或多个包（不级联删除依赖）"""
    svc: ServiceContainer = ctx.obj
    _finish(ctx, svc.packages.remove(list(packages), auto_confirm=yes))


@click.command()
@click.argument("packages", nargs=-1)
@_root_option
@_insecure_option
@click.pass_context
def update(
    ctx: click.Context, packages: tuple[str, ...], root_prefix: str, insecure: bool,
) -> None:
    """更新已安装包；不指定包名时更新全部"""
    svc: ServiceContainer = ctx.obj
    if insecure:
        svc.allow_insecure_tls()
    try:
        report = svc.packages.update_all(list(packages), root_prefix=root_prefix)
    except BitpupError as e:
        raise click.ClickException(str(e)) from e
    _finish(ctx, report)


@click.command(name="list")
@click.pass_obj
def list_packages(svc: ServiceContainer) -> None:
    """列出已安装的包"""
    rows = svc.packages.installed()
    if not rows:
        click.echo("没有已安装的包。")
        return
    for pid, version in rows:
        click.echo(f"  {pid:24s} {version or '-'}")
