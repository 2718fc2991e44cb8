"""统一异常体系

所有业务异常继承 BitpupError，CLI 层据此输出友好提示并以非零状态退出。
NotFound 以 None / 未解析列表表示；AlreadyInstalled / Aborted / NotInstalled 不是错误，
以结果状态表示（见 core.pkg.models）。
"""

from __future__ import annotations


class BitpupError(Exception):
    """bitpup 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(BitpupError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(BitpupError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"


class DownloadError(BitpupError):
    """包产物下载失败"""

    code = "DOWNLOAD_ERROR"


class ExtractError(BitpupError):
    """包产物解压失败"""

    code = "EXTRACT_ERROR"


class InstallCommandError(BitpupError):
    """安装命令以非零状态退出"""

    code = "INSTALL_COMMAND_ERROR"

    def __init__(self, message: str, returncode: int) -> None:
        super().__init__(message)
        self.returncode = returncode


class NoRemotesError(BitpupError):
    """未配置任何远程源"""

    code = "NO_REMOTES"


class LockedError(BitpupError):
    """全局锁已开启，阻止除 unlock 外的所有命令"""

    code = "LOCKED"
