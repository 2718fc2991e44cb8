"""清单拉取器

两级间接查找:
  1. 拉取指针清单 <remote>/<id>.<ext>，读取其中唯一字段 url
  2. 拉取 url 指向的线程清单，按固定 schema 宽松解析为 PackageManifest

指针层允许远程源把包查找重定向到任意托管位置。
任一阶段内容为空、指针缺少 url、网络错误或 YAML 语法错误都视为 NotFound（返回 None）；
线程清单中可选字段缺失不视为失败。
"""

from __future__ import annotations

import logging

import yaml

from bitpup.core.exceptions import ValidationError
from bitpup.core.pkg.models import PackageManifest
from bitpup.core.protocols import DocumentFetcher
from bitpup.utils.net import TRANSPORT_ERRORS
from bitpup.utils.yaml_io import parse_yaml

logger = logging.getLogger(__name__)


class ManifestFetcher:
    """清单拉取器 — 单个远程源上的两级查找 + 多远程源首个命中"""

    def __init__(self, client: DocumentFetcher, pointer_ext: str = "choco.yml") -> None:
        self.client = client
        self.pointer_ext = pointer_ext

    def _get(self, url: str) -> bytes:
        """拉取文档，失败按空内容处理"""
        try:
            return self.client.fetch(url)
        except (*TRANSPORT_ERRORS, ValidationError) as e:
            logger.warning("拉取失败: %s - %s", url, e)
            return b""

    def _load(self, url: str) -> object:
        content = self._get(url)
        if not content.strip():
            logger.debug("空文档: %s", url)
            return None
        try:
            return parse_yaml(content)
        except (yaml.YAMLError, ValueError) as e:
            logger.warning("清单解析失败: %s - %s", url, e)
            return None

    def pointer_url(self, package_id: str, remote: str) -> str:
        return f"{remote.rstrip('/')}/{package_id}.{self.pointer_ext}"

    def fetch_manifest(self, package_id: str, remote: str) -> PackageManifest | None:
        """在单个远程源上查找包，未找到返回 None"""
        pointer = self._load(self.pointer_url(package_id, remote))
        thread_url = pointer.get("url") if isinstance(pointer, dict) else None
        if not isinstance(thread_url, str) or not thread_url:
            logger.debug("指针清单缺少 url: %s @ %s", package_id, remote)
            return None

        thread = self._load(thread_url)
        if thread is None:
            return None

        manifest = PackageManifest.from_thread(
            package_id, thread, source_url=remote, thread_url=thread_url,
        )
        logger.info(
            "已解析: %s (name=%s, version=%s, deps=%s) @ %s",
            package_id, manifest.display_name, manifest.version,
            manifest.dependencies, remote,
        )
        return manifest

    def find(self, package_id: str, remotes: list[str]) -> PackageManifest | None:
        """按远程源顺序查找，首个成功者胜出，之后的远程源不再访问"""
        for remote in remotes:
            manifest = self.fetch_manifest(package_id, remote)
            if manifest is not None:
                return manifest
        return None
