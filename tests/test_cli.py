from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from skylinectl import cli
from skylinectl.core.address_store import AddressStore
from skylinectl.core.errors import BuildError, TransferError
from skylinectl.core.model import BuiltArtifact, CloseReason, ProjectConfig
from skylinectl.core.service import DeployService

TITLE_ID = "0100000000010000"


class FakeSession:
    def __init__(self, transfer: FakeTransfer) -> None:
        self.transfer = transfer

    def __enter__(self) -> FakeSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def ensure_dir(self, path: str) -> None:
        return None

    def upload(self, local_path: Path, remote_path: str) -> None:
        self.transfer.uploads.append(remote_path)

    def list_dir(self, path: str) -> Iterator[str]:
        if self.transfer.entries is None:
            raise TransferError("550 No such file or directory")
        yield from self.transfer.entries

    def remove(self, path: str, *, missing_ok: bool = False) -> bool:
        return False

    def close(self) -> None:
        return None


class FakeTransfer:
    def __init__(self, entries: list[str] | None = None) -> None:
        self.entries = entries
        self.addresses: list[str] = []
        self.uploads: list[str] = []

    def connect(self, address: str) -> FakeSession:
        self.addresses.append(address)
        return FakeSession(self)


class FakeListenSession:
    close_reason = CloseReason.REMOTE_CLOSED

    def __init__(self, chunks: list[str]) -> None:
        self.chunks = chunks

    def __enter__(self) -> FakeListenSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def stream(self) -> Iterator[str]:
        yield from self.chunks

    def cancel(self) -> None:
        return None


class FakeListener:
    def __init__(self, chunks: list[str]) -> None:
        self.chunks = chunks
        self.addresses: list[str] = []

    def connect(self, address: str) -> FakeListenSession:
        self.addresses.append(address)
        return FakeListenSession(self.chunks)


class FakeBuilder:
    def __init__(self, artifact: Path, exit_code: int | None = None) -> None:
        self.artifact = artifact
        self.exit_code = exit_code

    def build(self, project: ProjectConfig, *, release: bool = True) -> BuiltArtifact:
        if self.exit_code is not None:
            raise BuildError("Build command exited with status 101", exit_code=self.exit_code)
        return BuiltArtifact(path=self.artifact, name=self.artifact.name)


runner = CliRunner()


@pytest.fixture
def env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    nro = tmp_path / "libplugin.nro"
    nro.write_bytes(b"NRO0")
    state = {
        "transfer": FakeTransfer(entries=["libplugin.nro"]),
        "listener": FakeListener(["[skyline] ready\n"]),
        "builder": FakeBuilder(nro),
    }

    def factory() -> DeployService:
        return DeployService(
            transfer=state["transfer"],
            listener=state["listener"],
            builder=state["builder"],
            address_store=AddressStore(tmp_path / ".switch"),
            project_root=tmp_path,
        )

    monkeypatch.setattr(cli, "DeployService", factory)
    return state


def test_install_command(env):
    result = runner.invoke(cli.app, ["install", "--ip", "192.168.1.10", "--title-id", TITLE_ID])
    assert result.exit_code == 0
    assert f"Uploaded /atmosphere/contents/{TITLE_ID}/romfs/skyline/plugins/libplugin.nro" in result.stdout
    assert env["transfer"].addresses == ["192.168.1.10"]

    shown = runner.invoke(cli.app, ["show-ip"])
    assert shown.exit_code == 0
    assert shown.stdout.strip() == "192.168.1.10"


def test_install_without_ip_is_clean_error(env):
    result = runner.invoke(cli.app, ["install", "--title-id", TITLE_ID])
    assert result.exit_code == 1
    assert "Error: No IP address was provided" in result.stderr
    assert "Traceback" not in result.stderr
    assert env["transfer"].addresses == []


def test_build_exit_code_propagates(env, tmp_path: Path):
    env["builder"] = FakeBuilder(tmp_path / "libplugin.nro", exit_code=101)
    result = runner.invoke(cli.app, ["install", "--ip", "192.168.1.10", "--title-id", TITLE_ID])
    assert result.exit_code == 101
    assert "Error: Build command exited with status 101" in result.stderr


def test_run_installs_then_streams_logs(env):
    result = runner.invoke(cli.app, ["run", "--ip", "192.168.1.10", "--title-id", TITLE_ID, "--debug"])
    assert result.exit_code == 0
    assert "Installed to 192.168.1.10" in result.stdout
    assert "[skyline] ready" in result.stdout
    assert result.stdout.index("Installed to") < result.stdout.index("[skyline] ready")
    assert env["listener"].addresses == ["192.168.1.10"]


def test_set_ip_and_bad_ip(env):
    result = runner.invoke(cli.app, ["set-ip", "192.168.1.20"])
    assert result.exit_code == 0
    assert "IP address set to 192.168.1.20" in result.stdout

    bad = runner.invoke(cli.app, ["set-ip", "192.168.1.300"])
    assert bad.exit_code == 1
    assert "Error:" in bad.stderr
    assert runner.invoke(cli.app, ["show-ip"]).stdout.strip() == "192.168.1.20"


def test_show_ip_unconfigured(env):
    result = runner.invoke(cli.app, ["show-ip"])
    assert result.exit_code == 1
    assert "Error: No IP address" in result.stderr


def test_listen_remote_close_exits_zero(env):
    runner.invoke(cli.app, ["set-ip", "192.168.1.10"])
    result = runner.invoke(cli.app, ["listen"])
    assert result.exit_code == 0
    assert "[skyline] ready" in result.stdout
    assert "remote_closed" in result.stderr


def test_list_command(env):
    result = runner.invoke(cli.app, ["list", "--ip", "192.168.1.10", "--title-id", TITLE_ID])
    assert result.exit_code == 0
    assert result.stdout.strip() == "libplugin.nro"


def test_list_missing_directory_prints_nothing(env):
    env["transfer"] = FakeTransfer(entries=None)
    result = runner.invoke(cli.app, ["list", "--ip", "192.168.1.10", "--title-id", TITLE_ID])
    assert result.exit_code == 1
    assert result.stdout == ""
    assert "Error: 550 No such file or directory" in result.stderr
