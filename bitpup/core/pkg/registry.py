"""远程源注册表

职责:
- 递归收集远程源列表文件（remote.choco.list）并解析
- 检测本机架构并归一化
- 按 (远程源, 频道) 展开候选 URL
- remote-add: 追加远程源（支持 ppa: 简写）

列表文件每行格式:
    [choco] <baseURL> <poolName> [<channel> ...]
前导的来源类型标记 choco 可省略；# 开头为注释。
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path

from bitpup.core.exceptions import ValidationError
from bitpup.core.pkg.models import RemoteSource
from bitpup.utils.net import validate_url_scheme

logger = logging.getLogger(__name__)

LIST_FILENAME = "remote.choco.list"
SOURCE_TYPE = "choco"
PPA_PREFIX = "ppa:"

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "armhf",
}


def normalize_arch(machine: str) -> str:
    """平台原始架构名 -> 规范架构标记，未知架构原样返回"""
    raw = machine.strip()
    return _ARCH_ALIASES.get(raw.lower(), raw)


def detect_arch() -> str:
    return normalize_arch(platform.machine()) or "unknown"


def parse_remote_line(line: str, list_file: str = "") -> RemoteSource | None:
    """解析一行远程源定义，空行/注释/字段不足返回 None"""
    tokens = line.split()
    if not tokens or tokens[0].startswith("#"):
        return None
    if tokens[0] == SOURCE_TYPE:
        tokens = tokens[1:]
    if len(tokens) < 2:
        logger.debug("忽略无效远程源行: %r (%s)", line, list_file)
        return None
    return RemoteSource(
        base_url=tokens[0], pool=tokens[1],
        channels=tokens[2:], list_file=list_file,
    )


class RemoteRegistry:
    """远程源注册表 — 每次调用都重新读取配置，不跨命令缓存"""

    def __init__(
        self,
        remotes_dir: str | Path,
        *,
        arch: str = "",
        ppa_base_url: str = "http://ppa.wheedev.org",
    ) -> None:
        self.remotes_dir = Path(remotes_dir)
        self.arch = arch or detect_arch()
        self.ppa_base_url = ppa_base_url

    def _list_files(self) -> list[Path]:
        if not self.remotes_dir.is_dir():
            return []
        return sorted(self.remotes_dir.rglob(LIST_FILENAME))

    def list_remotes(self) -> list[RemoteSource]:
        """读取全部远程源定义（按文件路径、行顺序）"""
        remotes: list[RemoteSource] = []
        for path in self._list_files():
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                logger.warning("读取远程源列表失败: %s - %s", path, e)
                continue
            for line in text.splitlines():
                remote = parse_remote_line(line, list_file=str(path))
                if remote is not None:
                    remotes.append(remote)
        return remotes

    def list_candidate_sources(self) -> list[str]:
        """展开所有 (远程源, 频道) 为候选 URL；未配置远程源时返回空列表"""
        urls: list[str] = []
        for remote in self.list_remotes():
            urls.extend(remote.candidate_urls(self.arch))
        logger.info("候选源 %d 个 (arch=%s)", len(urls), self.arch)
        return urls

    def expand_url(self, url: str) -> str:
        """展开 ppa:<profile>/<ppa> 简写"""
        if url.startswith(PPA_PREFIX):
            path = url[len(PPA_PREFIX):].strip("/")
            if not path:
                raise ValidationError(f"无效的 PPA: {url}")
            return f"{self.ppa_base_url.rstrip('/')}/{path}"
        return url

    def add_remote(
        self, url: str, name: str = "default", channels: list[str] | tuple[str, ...] = (),
    ) -> Path:
        """追加远程源到 <remotes_dir>/<name>/remote.choco.list，返回列表文件路径"""
        base = self.expand_url(url)
        validate_url_scheme(base, context="remote-add")
        if not name or "/" in name or name in (".", ".."):
            raise ValidationError(f"无效的远程源名称: {name!r}")

        list_file = self.remotes_dir / name / LIST_FILENAME
        list_file.parent.mkdir(parents=True, exist_ok=True)
        line = " ".join([SOURCE_TYPE, base, name, *channels])
        with open(list_file, "a", encoding="utf-8") as f:
            f.write(line + "\n")
        logger.info("已添加远程源: %s -> %s", line, list_file)
        return list_file
