"""网络工具 — URL 安全校验 + 清单/产物下载

UrlClient 同时满足 DocumentFetcher 与 ArtifactDownloader 两个协议。
不设超时，远端挂起时整个命令随之阻塞。
"""

from __future__ import annotations

import http.client
import logging
import shutil
import ssl
import urllib.request
from pathlib import Path
from urllib.parse import urlparse

from bitpup import __version__
from bitpup.core.exceptions import DownloadError, ValidationError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = frozenset(("http", "https"))

USER_AGENT = f"bitpup/{__version__}"

# urlopen 可能抛出的全部传输层异常:
#   OSError (含 URLError / HTTPError)、ValueError (含 http.client.InvalidURL)、
#   http.client.HTTPException (如 IncompleteRead)
TRANSPORT_ERRORS = (OSError, ValueError, http.client.HTTPException)


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https，防止 file:// 等非预期协议访问

    Raises:
        ValidationError: URL 无法解析，或 scheme 不在白名单内
    """
    label = f" ({context})" if context else ""
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise ValidationError(f"无法解析的 URL{label}: {url!r} - {e}") from e
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 http/https: {url}"
        )


class UrlClient:
    """基于 urllib 的默认网络客户端

    insecure=True 时不校验 TLS 证书（install / update --insecure）。
    """

    def __init__(self, insecure: bool = False) -> None:
        self.insecure = insecure

    def _request(self, url: str) -> urllib.request.Request:
        return urllib.request.Request(url, headers={"User-Agent": USER_AGENT})

    def _ssl_context(self) -> ssl.SSLContext | None:
        if not self.insecure:
            return None
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        return ctx

    def _open(self, url: str):
        return urllib.request.urlopen(  # nosec B310
            self._request(url), context=self._ssl_context(),
        )

    def fetch(self, url: str) -> bytes:
        """拉取文档内容（指针清单 / 线程清单）

        Raises:
            ValidationError: URL 协议不合法
            OSError / ValueError / http.client.HTTPException: 传输失败，见 TRANSPORT_ERRORS
        """
        validate_url_scheme(url, context="manifest fetch")
        logger.debug("GET %s", url)
        with self._open(url) as resp:
            return resp.read()

    def download(self, url: str, dest: Path) -> None:
        """下载产物到 dest，失败时删除残留文件并抛 DownloadError"""
        validate_url_scheme(url, context="artifact download")
        dest.parent.mkdir(parents=True, exist_ok=True)
        logger.info("下载: %s -> %s", url, dest)
        try:
            with self._open(url) as resp, open(dest, "wb") as f:
                shutil.copyfileobj(resp, f)
        except TRANSPORT_ERRORS as e:
            dest.unlink(missing_ok=True)
            raise DownloadError(f"下载失败: {url} - {e}") from e
