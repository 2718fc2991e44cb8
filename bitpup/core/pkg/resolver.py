"""依赖解析器

给定一个或多个根包，递归拉取全部传递依赖的清单，生成去重的、依赖在前的线性安装计划。

算法: 深度优先 + 后序追加，节点在下探依赖之前即标记为已访问：
  - 依赖总是先于依赖它的包进入计划
  - 经多条路径可达的包只出现一次，位置由首次到达它的路径决定
  - 依赖环不会死循环；环中先进入的节点最后安装（顺序取决于遍历入口）
  - 找不到的包记入 unresolved，不影响其它根包的解析

使用显式栈代替函数递归，病态长依赖链不会耗尽调用栈；产出顺序与递归写法完全一致。
"""

from __future__ import annotations

import logging
from typing import Iterator

from bitpup.core.pkg.fetcher import ManifestFetcher
from bitpup.core.pkg.models import PackageManifest, ResolveResult

logger = logging.getLogger(__name__)


class DependencyResolver:
    """依赖解析器 — 每次 resolve 独立，清单不跨调用缓存"""

    def __init__(self, fetcher: ManifestFetcher) -> None:
        self.fetcher = fetcher

    def resolve(self, root_ids: list[str], remotes: list[str]) -> ResolveResult:
        """解析根包及其传递依赖，返回 (安装计划, 未解析包)"""
        result = ResolveResult()
        visited: set[str] = set()
        # 栈帧: (清单, 尚未访问的依赖迭代器)
        stack: list[tuple[PackageManifest, Iterator[str]]] = []

        def enter(package_id: str) -> None:
            if package_id in visited:
                return
            visited.add(package_id)
            manifest = self.fetcher.find(package_id, remotes)
            if manifest is None:
                logger.warning("未找到包: %s", package_id)
                result.unresolved.append(package_id)
                return
            stack.append((manifest, iter(manifest.dependencies)))

        for root_id in root_ids:
            enter(root_id)
            while stack:
                manifest, deps = stack[-1]
                dep = next(deps, None)
                if dep is not None:
                    enter(dep)
                    continue
                stack.pop()
                result.plan.append(manifest)

        logger.info(
            "解析完成: 计划 %s, 未解析 %s", result.ids, result.unresolved,
        )
        return result
