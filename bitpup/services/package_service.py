"""包管理服务 — 按命令编排远程源、解析器与安装执行器

职责:
- install: 解析根包及依赖 → 展示计划并确认一次 → 按计划顺序逐包安装
- remove: 逐包删除
- update_all: 对每个已安装包（或指定的子集）独立做单根解析并重新安装；
  版本变化时先暂存旧版本，升级失败则恢复

批量命令中单个包的失败相互隔离：失败/未找到的包被记录，其余包照常处理，
全部处理完后由 BatchReport.ok 决定退出状态。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bitpup.core.exceptions import NoRemotesError, ValidationError
from bitpup.core.pkg.installer import PackageInstaller
from bitpup.core.pkg.models import (
    InstallResult,
    InstallStatus,
    RemoveResult,
    RemoveStatus,
    ResolveResult,
)
from bitpup.core.pkg.registry import RemoteRegistry
from bitpup.core.pkg.resolver import DependencyResolver
from bitpup.core.protocols import Prompter

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """批量命令的汇总结果"""

    installs: list[InstallResult] = field(default_factory=list)
    removals: list[RemoveResult] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)
    not_installed: list[str] = field(default_factory=list)
    aborted: bool = False

    @property
    def failed(self) -> list[InstallResult]:
        return [r for r in self.installs if r.failed]

    @property
    def missing(self) -> list[RemoveResult]:
        return [r for r in self.removals if r.status == RemoveStatus.NOT_INSTALLED]

    @property
    def ok(self) -> bool:
        return not (self.unresolved or self.not_installed or self.failed or self.missing)


class PackageService:
    """包管理服务"""

    def __init__(
        self,
        registry: RemoteRegistry,
        resolver: DependencyResolver,
        installer: PackageInstaller,
        prompter: Prompter,
    ) -> None:
        self.registry = registry
        self.resolver = resolver
        self.installer = installer
        self.prompter = prompter

    def _remotes(self) -> list[str]:
        remotes = self.registry.list_candidate_sources()
        if not remotes:
            raise NoRemotesError(
                "未配置任何远程源，请先执行 'bitpup remote-add <url> [name] [channels...]'"
            )
        return remotes

    def resolve(self, package_ids: list[str]) -> ResolveResult:
        """解析根包及其传递依赖

        Raises:
            NoRemotesError: 未配置远程源
        """
        return self.resolver.resolve(package_ids, self._remotes())

    def _describe_plan(self, result: ResolveResult) -> str:
        lines = ["即将安装:"]
        for m in result.plan:
            try:
                mark = " (已安装)" if self.installer.is_installed(m.id) else ""
            except ValidationError:
                # 非法包名留到安装阶段记为失败
                mark = ""
            lines.append(f"- {m.id} {m.version}{mark}".rstrip())
        lines.append("是否继续?")
        return "\n".join(lines)

    def install(
        self,
        package_ids: list[str],
        *,
        auto_confirm: bool = False,
        root_prefix: str = "/",
    ) -> BatchReport:
        """安装根包及依赖；整份计划只确认一次，之后逐包自动安装"""
        result = self.resolve(package_ids)
        report = BatchReport(unresolved=list(result.unresolved))
        if not result.plan:
            return report

        if not auto_confirm and not self.prompter.confirm(self._describe_plan(result)):
            logger.info("用户取消安装计划: %s", result.ids)
            report.aborted = True
            return report

        for manifest in result.plan:
            report.installs.append(self.installer.install(
                manifest, auto_confirm=True, root_prefix=root_prefix,
            ))
        return report

    def remove(self, package_ids: list[str], *, auto_confirm: bool = False) -> BatchReport:
        report = BatchReport()
        for pid in package_ids:
            report.removals.append(self.installer.remove(pid, auto_confirm=auto_confirm))
        return report

    def update_all(
        self, package_ids: list[str] | None = None, *, root_prefix: str = "/",
    ) -> BatchReport:
        """更新已安装包；package_ids 非空时只更新其中列出的包

        每个包各自做一次单根解析（不与其它包共享去重），计划中的包以自动确认方式安装。
        已安装快照记录的版本与远程版本不同（或快照缺失）时先暂存旧安装目录再安装，
        新版本安装失败则恢复旧版本，下次 update 会再次尝试升级。
        无法再解析的包记录警告并跳过，不影响其余包。
        """
        report = BatchReport()
        installed = self.installer.list_installed()
        if package_ids:
            report.not_installed = [p for p in package_ids if p not in installed]
            wanted = set(package_ids)
            installed = [p for p in installed if p in wanted]
        if not installed:
            logger.info("没有需要更新的包")
            return report

        remotes = self._remotes()
        for pid in installed:
            result = self.resolver.resolve([pid], remotes)
            target = next((m for m in result.plan if m.id == pid), None)
            if target is None:
                logger.warning("无法解析，跳过更新: %s", pid)
                report.unresolved.append(pid)
                continue
            report.unresolved.extend(u for u in result.unresolved if u != pid)

            current = self.installer.installed_snapshot(pid).get("version")
            upgrade = current is None or str(current) != target.version
            if upgrade:
                logger.info("升级 %s: %s -> %s", pid, current, target.version)
                self.installer.stash(pid)

            outcome: InstallResult | None = None
            try:
                for manifest in result.plan:
                    r = self.installer.install(
                        manifest, auto_confirm=True, root_prefix=root_prefix,
                    )
                    report.installs.append(r)
                    if manifest.id == pid:
                        outcome = r
            finally:
                if upgrade:
                    if outcome is not None and outcome.status == InstallStatus.INSTALLED:
                        self.installer.drop_stash(pid)
                    else:
                        logger.warning("升级失败，已恢复旧版本: %s", pid)
                        self.installer.restore(pid)
        return report

    def installed(self) -> list[tuple[str, str]]:
        """已安装包列表 [(id, version)]，无快照的包版本为空"""
        rows = []
        for pid in self.installer.list_installed():
            version = self.installer.installed_snapshot(pid).get("version", "")
            rows.append((pid, "" if version is None else str(version)))
        return rows
