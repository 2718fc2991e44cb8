"""全局锁

锁状态即锁文件是否存在。由外部管理（lock / unlock 命令或管理员手工创建），
因此每次命令调用都重新检查，不做内存缓存。该锁仅为建议性：启动时检查一次，
不在命令执行期间持有。
"""

from __future__ import annotations

import logging
from pathlib import Path

from bitpup.core.exceptions import LockedError

logger = logging.getLogger(__name__)

# 锁开启时仍允许执行的命令
UNLOCKED_COMMANDS = frozenset(("unlock",))


class LockGate:
    """锁文件闸门"""

    def __init__(self, lock_file: str | Path) -> None:
        self.lock_file = Path(lock_file)

    def is_locked(self) -> bool:
        return self.lock_file.exists()

    def ensure_unlocked(self, command: str) -> None:
        """锁开启时拒绝除 unlock 外的命令"""
        if command in UNLOCKED_COMMANDS or not self.is_locked():
            return
        raise LockedError("bitpup 已锁定，请先执行 'bitpup unlock' 解锁")

    def lock(self) -> None:
        self.lock_file.parent.mkdir(parents=True, exist_ok=True)
        self.lock_file.write_text("locked\n", encoding="utf-8")
        logger.info("已加锁: %s", self.lock_file)

    def unlock(self) -> bool:
        """解锁，原本未加锁时返回 False"""
        if not self.is_locked():
            return False
        self.lock_file.unlink()
        logger.info("已解锁: %s", self.lock_file)
        return True
