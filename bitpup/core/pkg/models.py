"""包管理数据模型

数据类:
- RemoteSource: 远程源（base_url + pool + channels）
- PackageManifest: 线程清单解析结果，安装的基本单元
- ResolveResult: 依赖解析结果（安装计划 + 未解析包）
- InstallResult / RemoveResult: 单包安装/删除结果
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# 安装命令中的根前缀占位符
ROOT_TOKEN = "$ROOT"


@dataclass
class RemoteSource:
    """远程源定义，对应远程源列表文件中的一行"""

    base_url: str
    pool: str
    channels: list[str] = field(default_factory=list)
    list_file: str = ""  # 来源文件，仅用于展示

    def candidate_urls(self, arch: str) -> list[str]:
        """按频道展开候选 URL: base/pool/<pool>/<arch>/<channel>"""
        base = self.base_url.rstrip("/")
        return [f"{base}/pool/{self.pool}/{arch}/{ch}" for ch in self.channels]


def _scalar(value: Any) -> str:
    """宽松取标量：缺失/非标量返回空串，数字等转为字符串"""
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value)


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


@dataclass
class PackageManifest:
    """包清单

    id 是解析时使用的查找名（安装目录名、所有权记录的键），
    display_name 是线程清单中的 name 字段，两者可以不同，均需保留。
    """

    id: str
    display_name: str = ""
    version: str = ""
    install_commands: str = ""
    artifact_url: str = ""
    dependencies: list[str] = field(default_factory=list)
    source_url: str = ""  # 应答的远程源
    thread_url: str = ""  # 指针清单指向的线程清单地址

    @classmethod
    def from_thread(cls, package_id: str, data: Any, **extra: str) -> PackageManifest:
        """按固定 schema 宽松解析线程清单

        schema:
            name: <str>
            version: <str>
            install: {commands: <str>}
            source: {package: <str>}
            dependencies: [<str>, ...]

        任何字段缺失或类型不符都取默认值（空串 / 空列表），不报错。
        依赖列表保留声明顺序与重复项。
        """
        if not isinstance(data, dict):
            data = {}
        raw_deps = data.get("dependencies")
        deps = [
            _scalar(d) for d in raw_deps if _scalar(d)
        ] if isinstance(raw_deps, list) else []
        return cls(
            id=package_id,
            display_name=_scalar(data.get("name")),
            version=_scalar(data.get("version")),
            install_commands=_scalar(_section(data, "install").get("commands")),
            artifact_url=_scalar(_section(data, "source").get("package")),
            dependencies=deps,
            **extra,
        )

    def render_commands(self, root_prefix: str) -> str:
        """替换 $ROOT 占位符；根前缀为 "/" 时替换为空串"""
        prefix = "" if root_prefix == "/" else root_prefix
        return self.install_commands.replace(ROOT_TOKEN, prefix)

    def to_snapshot(self) -> dict[str, Any]:
        """已安装快照（写入安装目录，供 update / list 使用）"""
        return {
            "id": self.id,
            "name": self.display_name,
            "version": self.version,
            "install": {"commands": self.install_commands},
            "source": {"package": self.artifact_url},
            "dependencies": list(self.dependencies),
            "remote": self.source_url,
            "thread": self.thread_url,
        }


@dataclass
class ResolveResult:
    """依赖解析结果

    plan 满足: 每个包的依赖都排在它之前，每个包 id 至多出现一次。
    """

    plan: list[PackageManifest] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)

    @property
    def ids(self) -> list[str]:
        return [m.id for m in self.plan]


class InstallStatus(str, Enum):
    """单包安装结果状态"""
    INSTALLED = "installed"
    ALREADY_INSTALLED = "already_installed"
    ABORTED = "aborted"
    FAILED = "failed"


class RemoveStatus(str, Enum):
    """单包删除结果状态"""
    REMOVED = "removed"
    NOT_INSTALLED = "not_installed"
    ABORTED = "aborted"


@dataclass
class InstallResult:
    package_id: str
    status: InstallStatus
    version: str = ""
    reason: str = ""  # FAILED 时为错误描述

    @property
    def failed(self) -> bool:
        return self.status == InstallStatus.FAILED


@dataclass
class RemoveResult:
    package_id: str
    status: RemoveStatus
    owners: list[str] | None = None  # 删除时读取到的所有权记录
