"""配置加载测试"""

from __future__ import annotations

from pathlib import Path

import pytest

import bitpup.core.config as cfgmod
from bitpup.core.config import Config, init_config
from bitpup.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _reset_current(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cfgmod, "_current", None)


class TestConfig:
    def test_defaults(self) -> None:
        cfg = Config()
        assert cfg.install_dir == "/bit/Chocolaterie"
        assert cfg.remotes_dir == "/bit/Chocobitpup/remotes"
        assert cfg.data_dir == "/bit/data"
        assert cfg.ledger_dir == "/bit/ledger"
        assert cfg.lock_file == "/bit/lock"
        assert cfg.fail_on_command_error and cfg.prune_owners_on_remove
        assert not cfg.cleanup_on_failure

    def test_paths_follow_base_dir(self, tmp_path: Path) -> None:
        cfg = Config(base_dir=str(tmp_path))
        assert cfg.install_dir == str(tmp_path / "Chocolaterie")

    def test_explicit_path_kept(self) -> None:
        cfg = Config(base_dir="/b", install_dir="/opt/pkgs")
        assert cfg.install_dir == "/opt/pkgs"
        assert cfg.data_dir == "/b/data"


class TestFromFile:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        cfg = Config.from_file(str(tmp_path / "none.yml"))
        assert cfg.base_dir == "/bit"

    def test_load_and_extra(self, tmp_path: Path) -> None:
        f = tmp_path / "bitpup.yml"
        f.write_text(
            "base_dir: /srv/bit\ncleanup_on_failure: true\nmirror: cn\n",
            encoding="utf-8",
        )
        cfg = Config.from_file(str(f))
        assert cfg.base_dir == "/srv/bit"
        assert cfg.install_dir == "/srv/bit/Chocolaterie"
        assert cfg.cleanup_on_failure is True
        assert cfg.extra == {"mirror": "cn"}

    def test_overrides_win(self, tmp_path: Path) -> None:
        f = tmp_path / "bitpup.yml"
        f.write_text("base_dir: /srv/bit\n", encoding="utf-8")
        assert Config.from_file(str(f), base_dir="/x").base_dir == "/x"
        assert Config.from_file(str(f), base_dir="").base_dir == "/srv/bit"
        assert Config.from_file(str(f), base_dir=None).base_dir == "/srv/bit"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        f = tmp_path / "bitpup.yml"
        f.write_text("base_dir: [oops\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="配置文件无效"):
            Config.from_file(str(f))


class TestGlobalConfig:
    def test_get_config_default(self) -> None:
        assert cfgmod.get_config().base_dir == "/bit"

    def test_init_config_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        f = tmp_path / "env.yml"
        f.write_text(f"base_dir: {tmp_path}\n", encoding="utf-8")
        monkeypatch.setenv(cfgmod.CONFIG_ENV, str(f))
        cfg = init_config()
        assert cfg.base_dir == str(tmp_path)
        assert cfgmod.get_config() is cfg
