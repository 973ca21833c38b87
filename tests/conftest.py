"""Pytest fixtures for the srpm-builder test suite."""

from collections.abc import Callable, Generator
from pathlib import Path
import subprocess
import tempfile
from typing import Any

import httpx
import pytest
from pytest import MonkeyPatch

SRPM_BYTES = b"\xed\xab\xee\xdb" + b"kernel-source" * 64


class FakeRuntime:
    """Stands in for the container runtime CLI behind subprocess.run."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.version_returncode = 0
        self.version = "24.0.7"
        self.images_returncode = 0
        self.image_id = "3f1c2a9d8e7b"
        self.run_returncode = 0
        self.produced: dict[str, bytes] = {
            "kernel-4.18.0-448.el8.x86_64.rpm": b"x" * (3 * 1024 * 1024),
            "kernel-devel-4.18.0-448.el8.x86_64.rpm": b"y" * (512 * 1024),
        }

    def __call__(self, command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(command))
        action = command[1]
        if action == "version":
            return subprocess.CompletedProcess(
                command, self.version_returncode, stdout=f"{self.version}\n", stderr=""
            )
        if action == "images":
            return subprocess.CompletedProcess(
                command, self.images_returncode, stdout=f"{self.image_id}\n", stderr=""
            )
        if action == "run":
            if self.run_returncode == 0:
                out_dir = Path(command[command.index("-v", 6) + 1].split(":")[0])
                for name, data in self.produced.items():
                    (out_dir / name).write_bytes(data)
            return subprocess.CompletedProcess(command, self.run_returncode)
        raise AssertionError(f"unexpected runtime command: {command}")

    def actions(self) -> list[str]:
        return [call[1] for call in self.calls]

    def run_command(self) -> list[str]:
        return next(call for call in self.calls if call[1] == "run")


@pytest.fixture
def fake_runtime(monkeypatch: MonkeyPatch) -> FakeRuntime:
    runtime = FakeRuntime()
    monkeypatch.setattr("subprocess.run", runtime)
    return runtime


@pytest.fixture
def srpm_file(tmp_path: Path) -> Path:
    path = tmp_path / "kernel.src.rpm"
    path.write_bytes(SRPM_BYTES)
    return path


@pytest.fixture
def temp_root(tmp_path: Path, monkeypatch: MonkeyPatch) -> Generator[Path, None, None]:
    """Redirects tempfile.mkdtemp into a directory the test can inspect."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    yield root


@pytest.fixture
def make_client() -> Generator[Callable[..., httpx.Client], None, None]:
    """A factory fixture for httpx clients backed by a MockTransport."""
    clients: list[httpx.Client] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def srpm_bytes() -> bytes:
    return SRPM_BYTES
