"""shell.py LocalExecutor 单元测试"""

from __future__ import annotations

import os

from bitpup.utils.shell import CommandResult, LocalExecutor


class TestLocalExecutor:
    def test_success(self, tmp_path) -> None:
        r = LocalExecutor().execute("echo hello", cwd=str(tmp_path))
        assert r.success
        assert "hello" in r.stdout

    def test_failure_returncode(self, tmp_path) -> None:
        r = LocalExecutor().execute("false", cwd=str(tmp_path))
        assert not r.success and r.returncode == 1

    def test_shell_script(self, tmp_path) -> None:
        r = LocalExecutor().execute(
            "echo one > out.txt && echo two >> out.txt; exit 3",
            cwd=str(tmp_path), shell=True,
        )
        assert r.returncode == 3
        assert (tmp_path / "out.txt").read_text().split() == ["one", "two"]

    def test_list_command(self, tmp_path) -> None:
        r = LocalExecutor().execute(["printf", "%s", "a b"], cwd=str(tmp_path))
        assert r.stdout == "a b"

    def test_env_passed(self, tmp_path) -> None:
        env = {**os.environ, "MY_TEST_VAR": "42"}
        r = LocalExecutor().execute("env", cwd=str(tmp_path), env=env)
        assert "MY_TEST_VAR=42" in r.stdout

    def test_stderr_captured(self, tmp_path) -> None:
        r = LocalExecutor().execute("echo oops >&2", cwd=str(tmp_path), shell=True)
        assert r.stderr.strip() == "oops"


def test_command_result_success() -> None:
    assert CommandResult(0, "", "").success
    assert not CommandResult(127, "", "not found").success
