"""集中配置管理

所有路径与策略开关集中在 Config 中，每次命令调用读取一次并显式传给各组件。
支持从 YAML 文件加载 + 编程式覆盖；未显式给出的目录按 base_dir 推导。

目录布局（base_dir 默认 /bit）:
    <base_dir>/Chocobitpup/remotes/<name>/remote.choco.list   远程源列表
    <base_dir>/Chocolaterie/<id>/                            安装目录
    <base_dir>/data/<id>/                                    包数据目录
    <base_dir>/ledger/<id>.json                              所有权记录
    <base_dir>/lock                                          全局锁
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from bitpup.core.exceptions import ConfigError
from bitpup.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

CONFIG_ENV = "BITPUP_CONFIG"
DEFAULT_CONFIG_FILE = "/etc/bitpup.yml"

# 推导目录: 字段名 -> base_dir 下的相对路径
_DERIVED_PATHS = {
    "install_dir": "Chocolaterie",
    "data_dir": "data",
    "remotes_dir": "Chocobitpup/remotes",
    "ledger_dir": "ledger",
    "lock_file": "lock",
}


@dataclass
class Config:
    """bitpup 运行配置"""

    # 目录
    base_dir: str = "/bit"
    install_dir: str = ""
    data_dir: str = ""
    remotes_dir: str = ""
    ledger_dir: str = ""
    lock_file: str = ""
    staging_dir: str = ""  # 为空时使用系统临时目录

    # 远程源
    pointer_ext: str = "choco.yml"
    ppa_base_url: str = "http://ppa.wheedev.org"

    # 策略
    fail_on_command_error: bool = True
    cleanup_on_failure: bool = False
    prune_owners_on_remove: bool = True

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name, rel in _DERIVED_PATHS.items():
            if not getattr(self, name):
                setattr(self, name, str(Path(self.base_dir) / rel))

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE, **overrides: object) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认值；overrides 优先于文件内容"""
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"配置文件无效: {path} - {e}") from e
        data.update({k: v for k, v in overrides.items() if v not in (None, "")})
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg


# 全局单例，仅作为 CLI 未显式传入配置时的后备
_current: Config | None = None


def default_config_path() -> str:
    return os.getenv(CONFIG_ENV, DEFAULT_CONFIG_FILE)


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "", **overrides: object) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    path = path or default_config_path()
    _current = Config.from_file(path, **overrides)
    logger.info("配置已加载: %s (base_dir=%s)", path, _current.base_dir)
    return _current
