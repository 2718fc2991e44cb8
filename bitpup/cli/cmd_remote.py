"""CLI — 远程源管理"""

from __future__ import annotations

import click

from bitpup.core.exceptions import BitpupError
from bitpup.services.container import ServiceContainer


def register(group: click.Group) -> None:
    group.add_command(remote_add)
    group.add_command(list_remotes)


@click.command(name="remote-add")
@click.argument("url")
@click.argument("name", default="default")
@click.argument("channels", nargs=-1)
@click.pass_obj
def remote_add(svc: ServiceContainer, url: str, name: str, channels: tuple[str, ...]) -> None:
    """添加远程源（URL 或 ppa:<profile>/<ppa>）"""
    try:
        list_file = svc.registry.add_remote(url, name, channels)
    except BitpupError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"远程源已添加到 {list_file.parent}")
    if not channels:
        click.echo("提示: 未指定频道，该远程源不会产生候选地址。", err=True)


@click.command(name="remotes")
@click.pass_obj
def list_remotes(svc: ServiceContainer) -> None:
    """列出已配置的远程源及候选地址"""
    remotes = svc.registry.list_remotes()
    if not remotes:
        click.echo("未配置任何远程源。")
        return
    for r in remotes:
        click.echo(f"  {r.base_url}  pool={r.pool}  channels={','.join(r.channels) or '-'}")
        for url in r.candidate_urls(svc.registry.arch):
            click.echo(f"    -> {url}")
