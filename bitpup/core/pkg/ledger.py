"""所有权记录

每个被依赖的包一份记录 <ledger_dir>/<id>.json:
    {"owners": ["A", "B"]}

安装时追加（集合并，重复追加幂等，从不递减）；删除时读取作为提示信息。
记录放在安装目录之外，写记录不会提前创建依赖包的安装目录。
文件级读-改-写没有跨进程加锁，并发执行的两个 bitpup 进程可能互相覆盖。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from bitpup.utils.yaml_io import load_json, save_json

logger = logging.getLogger(__name__)


class OwnershipLedger:
    """依赖包 -> 声明依赖它的包集合"""

    def __init__(self, ledger_dir: str | Path) -> None:
        self.ledger_dir = Path(ledger_dir)

    def _path(self, package_id: str) -> Path:
        # 包 id 直接作为文件名，拒绝路径穿越
        safe = package_id.replace("/", "_").replace("..", "_")
        return self.ledger_dir / f"{safe}.json"

    def _read(self, path: Path) -> dict:
        try:
            data = load_json(path)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("所有权记录损坏，按空记录处理: %s - %s", path, e)
            return {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _owner_list(data: dict) -> list[str]:
        owners = data.get("owners")
        if not isinstance(owners, list):
            return []
        return [o for o in owners if isinstance(o, str)]

    def owners(self, package_id: str) -> list[str] | None:
        """读取包的所有者列表；没有记录返回 None（区别于空列表）"""
        path = self._path(package_id)
        if not path.exists():
            return None
        return self._owner_list(self._read(path))

    def add_owner(self, package_id: str, owner: str) -> bool:
        """把 owner 并入 package_id 的记录，已存在返回 False"""
        path = self._path(package_id)
        data = self._read(path)
        owners = self._owner_list(data)
        if owner in owners:
            return False
        owners.append(owner)
        data["owners"] = owners
        save_json(path, data)
        logger.info("所有权记录: %s <- %s", package_id, owner)
        return True

    def scrub_owner(self, owner: str) -> list[str]:
        """从所有记录中移除 owner，返回被修改的记录 id"""
        touched: list[str] = []
        if not self.ledger_dir.is_dir():
            return touched
        for path in sorted(self.ledger_dir.glob("*.json")):
            data = self._read(path)
            owners = self._owner_list(data)
            if owner not in owners:
                continue
            data["owners"] = [o for o in owners if o != owner]
            save_json(path, data)
            touched.append(path.stem)
        if touched:
            logger.info("已从所有权记录中移除 %s: %s", owner, touched)
        return touched
