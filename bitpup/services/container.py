"""服务容器 — 统一依赖注入，消除组件之间的裸构造

依赖关系图（→ 表示依赖）:
  packages  → registry, resolver, installer, prompter
  resolver  → fetcher → client
  installer → client, extractor, executor, ledger, prompter

Config 注入:
  容器接受 Config，每次命令调用构造一次并显式传递给各组件；
  若不提供，则使用全局 get_config() 作为后备。

协作方覆盖:
  client / extractor / executor / prompter 可通过构造参数替换，测试注入假实现即可。
  allow_insecure_tls() 让默认 UrlClient 跳过证书校验。

用法:
    container = ServiceContainer(config=Config(base_dir="/tmp/bit"))
    report = container.packages.install(["hello"], auto_confirm=True)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bitpup.core.config import Config
    from bitpup.core.lock import LockGate
    from bitpup.core.pkg.fetcher import ManifestFetcher
    from bitpup.core.pkg.installer import PackageInstaller
    from bitpup.core.pkg.ledger import OwnershipLedger
    from bitpup.core.pkg.registry import RemoteRegistry
    from bitpup.core.pkg.resolver import DependencyResolver
    from bitpup.services.package_service import PackageService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器 — 同一容器内的组件共享实例"""

    def __init__(
        self,
        config: Config | None = None,
        *,
        client: Any = None,
        extractor: Any = None,
        executor: Any = None,
        prompter: Any = None,
        arch: str = "",
    ) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from bitpup.core.config import get_config
            config = get_config()
        self._config = config
        self._overrides = {
            "client": client, "extractor": extractor,
            "executor": executor, "prompter": prompter,
        }
        self._arch = arch
        self._insecure = False

    @property
    def config(self) -> Config:
        return self._config

    # ---- 外部协作方 ----

    def _collaborator(self, name: str) -> Any:
        if name in self._instances:
            return self._instances[name]
        obj = self._overrides.get(name)
        if obj is None:
            if name == "client":
                from bitpup.utils.net import UrlClient
                obj = UrlClient(insecure=self._insecure)
            elif name == "extractor":
                from bitpup.utils.archive import TarExtractor
                obj = TarExtractor()
            elif name == "executor":
                from bitpup.utils.shell import LocalExecutor
                obj = LocalExecutor()
            else:
                from bitpup.utils.prompt import ConsolePrompter
                obj = ConsolePrompter()
        self._instances[name] = obj
        return obj

    def allow_insecure_tls(self) -> None:
        """关闭 TLS 证书校验（--insecure）；对已创建的网络客户端同样生效"""
        self._insecure = True
        client = self._instances.get("client", self._overrides["client"])
        if client is not None and hasattr(client, "insecure"):
            client.insecure = True
        logger.warning("已关闭 TLS 证书校验")

    @property
    def client(self) -> Any:
        return self._collaborator("client")

    @property
    def prompter(self) -> Any:
        return self._collaborator("prompter")

    # ---- 核心组件 ----

    @property
    def lock(self) -> LockGate:
        if "lock" not in self._instances:
            from bitpup.core.lock import LockGate
            self._instances["lock"] = LockGate(self._config.lock_file)
        return self._instances["lock"]  # type: ignore[return-value]

    @property
    def registry(self) -> RemoteRegistry:
        if "registry" not in self._instances:
            from bitpup.core.pkg.registry import RemoteRegistry
            self._instances["registry"] = RemoteRegistry(
                self._config.remotes_dir,
                arch=self._arch,
                ppa_base_url=self._config.ppa_base_url,
            )
        return self._instances["registry"]  # type: ignore[return-value]

    @property
    def fetcher(self) -> ManifestFetcher:
        if "fetcher" not in self._instances:
            from bitpup.core.pkg.fetcher import ManifestFetcher
            self._instances["fetcher"] = ManifestFetcher(
                self.client, pointer_ext=self._config.pointer_ext,
            )
        return self._instances["fetcher"]  # type: ignore[return-value]

    @property
    def resolver(self) -> DependencyResolver:
        if "resolver" not in self._instances:
            from bitpup.core.pkg.resolver import DependencyResolver
            self._instances["resolver"] = DependencyResolver(self.fetcher)
        return self._instances["resolver"]  # type: ignore[return-value]

    @property
    def ledger(self) -> OwnershipLedger:
        if "ledger" not in self._instances:
            from bitpup.core.pkg.ledger import OwnershipLedger
            self._instances["ledger"] = OwnershipLedger(self._config.ledger_dir)
        return self._instances["ledger"]  # type: ignore[return-value]

    @property
    def installer(self) -> PackageInstaller:
        if "installer" not in self._instances:
            from bitpup.core.pkg.installer import PackageInstaller
            self._instances["installer"] = PackageInstaller(
                self._config,
                downloader=self.client,
                extractor=self._collaborator("extractor"),
                executor=self._collaborator("executor"),
                ledger=self.ledger,
                prompter=self.prompter,
            )
        return self._instances["installer"]  # type: ignore[return-value]

    # ---- 服务层 ----

    @property
    def packages(self) -> PackageService:
        if "packages" not in self._instances:
            from bitpup.services.package_service import PackageService
            self._instances["packages"] = PackageService(
                registry=self.registry,
                resolver=self.resolver,
                installer=self.installer,
                prompter=self.prompter,
            )
        return self._instances["packages"]  # type: ignore[return-value]
