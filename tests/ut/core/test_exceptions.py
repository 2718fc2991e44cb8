"""异常体系测试"""

from __future__ import annotations

import pytest

from bitpup.core.exceptions import (
    BitpupError,
    ConfigError,
    DownloadError,
    ExtractError,
    InstallCommandError,
    LockedError,
    NoRemotesError,
    ValidationError,
)


@pytest.mark.parametrize(("cls", "code"), [
    (ConfigError, "CONFIG_ERROR"),
    (ValidationError, "VALIDATION_ERROR"),
    (DownloadError, "DOWNLOAD_ERROR"),
    (ExtractError, "EXTRACT_ERROR"),
    (NoRemotesError, "NO_REMOTES"),
    (LockedError, "LOCKED"),
])
def test_hierarchy_and_codes(cls: type[BitpupError], code: str) -> None:
    err = cls("msg")
    assert isinstance(err, BitpupError)
    assert err.code == code
    assert str(err) == "msg"


def test_install_command_error_keeps_returncode() -> None:
    err = InstallCommandError("失败", 7)
    assert err.returncode == 7
    assert err.code == "INSTALL_COMMAND_ERROR"
    with pytest.raises(BitpupError):
        raise err
