"""安装执行器

单包安装流程:
  1. 安装目录已存在 → ALREADY_INSTALLED（幂等，重复执行安装计划是安全的）
  2. 非自动确认时展示包与依赖并请求确认，拒绝 → ABORTED
  3. 创建安装目录与数据目录
  4. 下载产物到安装目录（失败 → FAILED，默认不清理已创建的目录）
  5. 解压到全新的临时暂存目录并剥离一层顶层目录（失败时删除暂存目录与产物 → FAILED）
  6. 将暂存目录的顶层条目移入安装目录，删除暂存目录与产物
  7. 替换 $ROOT 后通过 shell 执行安装命令；非零退出默认视为 FAILED
  8. 为每个依赖追加所有权记录
  9. 写入已安装快照 → INSTALLED

清单未声明产物地址（纯依赖聚合包）时跳过 4-6 步。
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

import yaml

from bitpup.core.config import Config
from bitpup.core.exceptions import (
    BitpupError,
    ExtractError,
    InstallCommandError,
    ValidationError,
)
from bitpup.core.pkg.ledger import OwnershipLedger
from bitpup.core.pkg.models import (
    InstallResult,
    InstallStatus,
    PackageManifest,
    RemoveResult,
    RemoveStatus,
)
from bitpup.core.protocols import ArchiveExtractor, ArtifactDownloader, Prompter
from bitpup.utils.shell import CommandExecutor
from bitpup.utils.yaml_io import load_yaml, save_yaml

logger = logging.getLogger(__name__)

SNAPSHOT_FILE = ".thread.yml"


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


class PackageInstaller:
    """安装 / 删除执行器，逐包串行执行"""

    def __init__(
        self,
        config: Config,
        *,
        downloader: ArtifactDownloader,
        extractor: ArchiveExtractor,
        executor: CommandExecutor,
        ledger: OwnershipLedger,
        prompter: Prompter,
    ) -> None:
        self.config = config
        self.install_root = Path(config.install_dir)
        self.data_root = Path(config.data_dir)
        self.downloader = downloader
        self.extractor = extractor
        self.executor = executor
        self.ledger = ledger
        self.prompter = prompter

    # ------------------------------------------------------------------
    # 路径
    # ------------------------------------------------------------------

    @staticmethod
    def _check_id(package_id: str) -> None:
        if not package_id or "/" in package_id or package_id.startswith("."):
            raise ValidationError(f"非法包名: {package_id!r}")

    def package_dir(self, package_id: str) -> Path:
        self._check_id(package_id)
        return self.install_root / package_id

    def data_dir(self, package_id: str) -> Path:
        self._check_id(package_id)
        return self.data_root / package_id

    def is_installed(self, package_id: str) -> bool:
        return self.package_dir(package_id).exists()

    def list_installed(self) -> list[str]:
        """列出安装根目录下的全部包 id（忽略隐藏条目）"""
        if not self.install_root.is_dir():
            return []
        return sorted(
            d.name for d in self.install_root.iterdir()
            if d.is_dir() and not d.name.startswith(".")
        )

    def installed_snapshot(self, package_id: str) -> dict:
        """读取已安装快照，不存在或损坏时返回空字典"""
        path = self.package_dir(package_id) / SNAPSHOT_FILE
        try:
            return load_yaml(path)
        except (yaml.YAMLError, ValueError) as e:
            logger.warning("已安装快照损坏: %s - %s", path, e)
            return {}

    # ------------------------------------------------------------------
    # 安装
    # ------------------------------------------------------------------

    @staticmethod
    def _describe(manifest: PackageManifest) -> str:
        lines = ["即将安装:", f"- {manifest.id}"]
        if manifest.dependencies:
            lines.append("依赖:")
            lines.extend(f"- {d}" for d in manifest.dependencies)
        lines.append("是否继续?")
        return "\n".join(lines)

    def install(
        self,
        manifest: PackageManifest,
        *,
        auto_confirm: bool = False,
        root_prefix: str = "/",
    ) -> InstallResult:
        """安装单个已解析的包"""
        pid = manifest.id
        try:
            install_dir = self.package_dir(pid)
        except ValidationError as e:
            return InstallResult(pid, InstallStatus.FAILED, reason=str(e))

        if install_dir.exists():
            logger.info("已安装，跳过: %s", pid)
            return InstallResult(
                pid, InstallStatus.ALREADY_INSTALLED, version=manifest.version,
            )

        if not auto_confirm and not self.prompter.confirm(self._describe(manifest)):
            logger.info("用户取消安装: %s", pid)
            return InstallResult(pid, InstallStatus.ABORTED)

        try:
            install_dir.mkdir(parents=True, exist_ok=True)
            self.data_dir(pid).mkdir(parents=True, exist_ok=True)
            if manifest.artifact_url:
                self._deploy(manifest, install_dir)
            else:
                logger.info("%s 未声明产物地址，跳过下载", pid)
            self._run_commands(manifest, install_dir, root_prefix)
        except (BitpupError, OSError) as e:
            logger.error("安装失败 %s: %s", pid, e)
            if self.config.cleanup_on_failure:
                shutil.rmtree(install_dir, ignore_errors=True)
            return InstallResult(
                pid, InstallStatus.FAILED, version=manifest.version, reason=str(e),
            )

        for dep in manifest.dependencies:
            self.ledger.add_owner(dep, pid)
        save_yaml(install_dir / SNAPSHOT_FILE, manifest.to_snapshot())

        logger.info("已安装: %s v%s -> %s", pid, manifest.version, install_dir)
        return InstallResult(pid, InstallStatus.INSTALLED, version=manifest.version)

    def _staging(self, package_id: str) -> Path:
        base = self.config.staging_dir or None
        if base:
            Path(base).mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix=f"bitpup-extract-{package_id}-", dir=base))

    def _deploy(self, manifest: PackageManifest, install_dir: Path) -> None:
        """下载 → 解压到暂存目录 → 合并进安装目录"""
        archive = install_dir / f"{manifest.id}-{manifest.version}.choco.pkg"
        self.downloader.download(manifest.artifact_url, archive)

        staging = self._staging(manifest.id)
        try:
            try:
                self.extractor.extract(archive, staging, strip_components=1)
            finally:
                archive.unlink(missing_ok=True)
            for entry in sorted(staging.iterdir()):
                target = install_dir / entry.name
                if target.exists() or target.is_symlink():
                    _remove_path(target)
                shutil.move(str(entry), str(target))
        except OSError as e:
            raise ExtractError(f"合并产物失败 {manifest.id}: {e}") from e
        finally:
            shutil.rmtree(staging, ignore_errors=True)

    def _run_commands(
        self, manifest: PackageManifest, install_dir: Path, root_prefix: str,
    ) -> None:
        script = manifest.render_commands(root_prefix)
        if not script.strip():
            return
        logger.info("执行安装命令: %s", manifest.id)
        r = self.executor.execute(script, cwd=str(install_dir), shell=True)
        for line in r.stdout.splitlines():
            logger.info("  [%s] %s", manifest.id, line)
        if r.success:
            return
        msg = f"安装命令失败 (rc={r.returncode}): {r.stderr.strip()[:500]}"
        if self.config.fail_on_command_error:
            raise InstallCommandError(msg, r.returncode)
        logger.warning("%s: %s", manifest.id, msg)

    # ------------------------------------------------------------------
    # 删除
    # ------------------------------------------------------------------

    def remove(self, package_id: str, *, auto_confirm: bool = False) -> RemoveResult:
        """删除安装目录与数据目录；所有者仅作提示，不阻止删除，也不级联删除依赖"""
        try:
            install_dir = self.package_dir(package_id)
        except ValidationError:
            return RemoveResult(package_id, RemoveStatus.NOT_INSTALLED)
        if not install_dir.exists():
            return RemoveResult(package_id, RemoveStatus.NOT_INSTALLED)

        owners = self.ledger.owners(package_id)
        lines = ["即将删除:", f"- {package_id}"]
        if owners:
            lines.append(f"被以下包依赖: {', '.join(owners)}")
        elif owners is not None:
            lines.append("已没有其它包依赖它。")
        lines.append("是否继续?")
        if not auto_confirm and not self.prompter.confirm("\n".join(lines)):
            logger.info("用户取消删除: %s", package_id)
            return RemoveResult(package_id, RemoveStatus.ABORTED, owners=owners)

        shutil.rmtree(install_dir)
        data_dir = self.data_dir(package_id)
        if data_dir.exists():
            shutil.rmtree(data_dir)
        if self.config.prune_owners_on_remove:
            self.ledger.scrub_owner(package_id)

        logger.info("已删除: %s", package_id)
        return RemoveResult(package_id, RemoveStatus.REMOVED, owners=owners)

    # ------------------------------------------------------------------
    # 升级暂存
    # ------------------------------------------------------------------

    def _previous_dir(self, package_id: str) -> Path:
        # 包名不能以 "." 开头，隐藏目录不会与任何包冲突，也不会出现在 list_installed 中
        return self.install_root / f".{package_id}.previous"

    def stash(self, package_id: str) -> None:
        """升级前将旧安装目录移到隐藏位置，数据目录与所有权记录保持不变"""
        install_dir = self.package_dir(package_id)
        previous = self._previous_dir(package_id)
        if previous.exists():
            shutil.rmtree(previous)
        install_dir.rename(previous)
        logger.info("已暂存旧版本: %s", package_id)

    def restore(self, package_id: str) -> None:
        """升级失败时丢弃新安装目录，恢复暂存的旧版本"""
        install_dir = self.package_dir(package_id)
        previous = self._previous_dir(package_id)
        if not previous.exists():
            return
        if install_dir.exists():
            shutil.rmtree(install_dir)
        previous.rename(install_dir)
        logger.info("已恢复旧版本: %s", package_id)

    def drop_stash(self, package_id: str) -> None:
        self._check_id(package_id)
        previous = self._previous_dir(package_id)
        if previous.exists():
            shutil.rmtree(previous)
