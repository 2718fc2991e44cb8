"""包产物解压

包作者发布的归档约定只含一个顶层包装目录，解压时剥离前 N 层路径
（等价于 tar --strip-components=N）。使用 tarfile 的 "data" 过滤器，
拒绝绝对路径、越界路径与设备文件。
"""

from __future__ import annotations

import logging
import tarfile
from pathlib import Path, PurePosixPath

from bitpup.core.exceptions import ExtractError

logger = logging.getLogger(__name__)


def _strip(name: str, count: int) -> str:
    parts = PurePosixPath(name).parts[count:]
    return "/".join(parts)


class TarExtractor:
    """tar 归档解压器（支持 gz/bz2/xz 压缩，自动识别）"""

    def extract(self, archive: Path, dest: Path, strip_components: int = 1) -> None:
        """解压 archive 到 dest

        Raises:
            ExtractError: 文件不是合法 tar 归档，或成员被安全过滤器拒绝
        """
        try:
            with tarfile.open(archive) as tf:
                members = []
                for m in tf.getmembers():
                    name = _strip(m.name, strip_components)
                    if not name:
                        continue  # 顶层包装目录本身
                    changes: dict[str, str] = {"name": name}
                    if m.islnk():
                        changes["linkname"] = _strip(m.linkname, strip_components)
                    members.append(m.replace(**changes, deep=False))
                tf.extractall(path=str(dest), members=members, filter="data")  # noqa: S202
        except (OSError, KeyError, tarfile.TarError) as e:
            raise ExtractError(f"解压失败 {archive}: {e}") from e
        logger.info("已解压: %s -> %s (%d 个条目)", archive.name, dest, len(members))
