"""测试共享 fixture — 内存远程源 + 记录型执行器/确认器

整体结构:

  FakeWeb                 ServiceContainer               测试用例
  ┌──────────────┐     ┌─────────────────────┐     ┌─────────────────────────┐
  │ publish()    │────>│ client   = FakeWeb  │<────│ web.publish(REMOTE, "A",│
  │  指针清单    │     │ executor = Recording│     │   deps=["B"])           │
  │  线程清单    │     │ prompter = Scripted │     │ container.packages      │
  │  产物 tar    │     │ extractor= Tar(真实)│     │   .install(["A"], ...)  │
  └──────────────┘     └─────────────────────┘     └─────────────────────────┘

远程源通过 registry.add_remote 写入真实的 remote.choco.list，架构固定为 amd64，
候选地址即 REMOTE 常量。
"""

from __future__ import annotations

import io
import shutil
import tarfile
from pathlib import Path

import pytest
import yaml

from bitpup.core.config import Config
from bitpup.core.exceptions import DownloadError
from bitpup.services.container import ServiceContainer
from bitpup.utils.shell import CommandResult

REMOTE_BASE = "http://repo.test"
REMOTE = "http://repo.test/pool/main/amd64/stable"


def build_tarball(dest: Path, files: dict[str, str], top: str = "pkg-1.0") -> Path:
    """构造带单个顶层包装目录的 tar.gz 产物"""
    dest.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(dest, "w:gz") as tf:
        for rel, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name=f"{top}/{rel}")
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
    return dest


class FakeWeb:
    """内存远程源：同时充当 DocumentFetcher 与 ArtifactDownloader"""

    def __init__(self, artifact_dir: Path) -> None:
        self.docs: dict[str, bytes] = {}
        self.artifacts: dict[str, Path] = {}
        self.requests: list[str] = []
        self.downloads: list[str] = []
        self.artifact_dir = artifact_dir

    def fetch(self, url: str) -> bytes:
        self.requests.append(url)
        if url not in self.docs:
            raise OSError(f"HTTP 404: {url}")
        return self.docs[url]

    def download(self, url: str, dest: Path) -> None:
        self.downloads.append(url)
        src = self.artifacts.get(url)
        if src is None:
            raise DownloadError(f"下载失败: {url}")
        shutil.copy(src, dest)

    def publish(
        self,
        remote: str,
        package_id: str,
        *,
        name: str | None = None,
        version: str = "1.0",
        deps: list[str] | None = None,
        commands: str = "",
        files: dict[str, str] | None = None,
        artifact: bool = True,
    ) -> str:
        """发布一个包（指针清单 + 线程清单 + 可选 tar 产物），返回线程清单地址"""
        thread_url = f"{remote}/threads/{package_id}-{version}.yml"
        artifact_url = ""
        if artifact:
            artifact_url = f"{remote}/files/{package_id}-{version}.tar.gz"
            self.artifacts[artifact_url] = build_tarball(
                self.artifact_dir / f"{len(self.artifacts)}-{package_id}.tar.gz",
                files or {"README": f"{package_id} {version}\n"},
                top=f"{package_id}-{version}",
            )
        thread = {
            "name": name or package_id,
            "version": version,
            "install": {"commands": commands},
            "source": {"package": artifact_url},
            "dependencies": list(deps or []),
        }
        self.docs[f"{remote}/{package_id}.choco.yml"] = yaml.dump({"url": thread_url}).encode()
        self.docs[thread_url] = yaml.dump(thread).encode()
        return thread_url


class RecordingExecutor:
    """记录调用的命令执行器，不启动真实 shell"""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.returncode = 0

    def execute(
        self,
        cmd: str | list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
        shell: bool = False,
    ) -> CommandResult:
        self.calls.append({"cmd": cmd, "cwd": cwd, "shell": shell})
        stderr = "boom" if self.returncode else ""
        return CommandResult(returncode=self.returncode, stdout="", stderr=stderr)


class ScriptedPrompter:
    """按预设回答确认，记录所有提示信息"""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.messages: list[str] = []

    def confirm(self, message: str) -> bool:
        self.messages.append(message)
        return self.answer


@pytest.fixture()
def web(tmp_path: Path) -> FakeWeb:
    return FakeWeb(tmp_path / "artifacts")


@pytest.fixture()
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture()
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


@pytest.fixture()
def config(tmp_path: Path) -> Config:
    return Config(
        base_dir=str(tmp_path / "bit"),
        staging_dir=str(tmp_path / "staging"),
    )


@pytest.fixture()
def container(
    config: Config,
    web: FakeWeb,
    executor: RecordingExecutor,
    prompter: ScriptedPrompter,
) -> ServiceContainer:
    """已配置一个远程源 (main/stable) 的容器"""
    c = ServiceContainer(
        config=config, client=web, executor=executor,
        prompter=prompter, arch="amd64",
    )
    c.registry.add_remote(REMOTE_BASE, "main", ["stable"])
    return c


@pytest.fixture()
def remote() -> str:
    """container fixture 配置的唯一候选地址"""
    return REMOTE


@pytest.fixture()
def make_tarball(tmp_path: Path):
    """构造 tar.gz 产物的工厂"""
    def _make(files: dict[str, str], top: str = "pkg-1.0", name: str = "pkg.tar.gz") -> Path:
        return build_tarball(tmp_path / "tarballs" / name, files, top=top)
    return _make
