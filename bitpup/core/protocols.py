"""外部协作方协议定义

核心只通过这些窄接口访问网络、归档和终端，具体实现位于 bitpup.utils；
测试注入内存假实现即可覆盖完整安装流程。命令执行协议见 bitpup.utils.shell。

使用 typing.Protocol 而非 ABC，现有类无需继承即可满足协议。
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class DocumentFetcher(Protocol):
    """清单文档拉取（指针清单 / 线程清单）"""

    def fetch(self, url: str) -> bytes:
        """返回文档原始内容；传输失败抛 bitpup.utils.net.TRANSPORT_ERRORS 之一"""
        ...


class ArtifactDownloader(Protocol):
    """包产物下载"""

    def download(self, url: str, dest: Path) -> None:
        """下载到 dest；失败抛 DownloadError"""
        ...


class ArchiveExtractor(Protocol):
    """归档解压"""

    def extract(self, archive: Path, dest: Path, strip_components: int = 1) -> None:
        """解压到 dest 并剥离前 strip_components 层路径；失败抛 ExtractError"""
        ...


class Prompter(Protocol):
    """交互确认"""

    def confirm(self, message: str) -> bool:
        ...
