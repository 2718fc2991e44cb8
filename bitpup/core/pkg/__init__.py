"""包管理核心

拆分说明:
- models.py: 数据模型
- registry.py: 远程源注册表
- fetcher.py: 两级清单拉取
- resolver.py: 依赖解析与安装排序
- installer.py: 安装 / 删除执行
- ledger.py: 所有权记录
"""

from bitpup.core.pkg.fetcher import ManifestFetcher
from bitpup.core.pkg.installer import PackageInstaller
from bitpup.core.pkg.ledger import OwnershipLedger
from bitpup.core.pkg.models import (
    InstallResult,
    InstallStatus,
    PackageManifest,
    RemoteSource,
    RemoveResult,
    RemoveStatus,
    ResolveResult,
)
from bitpup.core.pkg.registry import RemoteRegistry
from bitpup.core.pkg.resolver import DependencyResolver

__all__ = [
    "DependencyResolver",
    "InstallResult",
    "InstallStatus",
    "ManifestFetcher",
    "OwnershipLedger",
    "PackageInstaller",
    "PackageManifest",
    "RemoteRegistry",
    "RemoteSource",
    "RemoveResult",
    "RemoveStatus",
    "ResolveResult",
]
