"""Stable public API for building tooling on top of skylinectl.

This module is the supported integration surface for third-party callers
(editor plugins, CI scripts, release packaging). Avoid importing from
private/internal modules unless intentionally depending on non-stable
internals.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from skylinectl.core.address_store import AddressStore, validate_address
from skylinectl.core.build import Builder, artifact_path
from skylinectl.core.errors import (
    AddressError,
    BadIpAddrError,
    BadTitleIdError,
    BuildError,
    CreateSwitchDirDeniedError,
    ListenConnectError,
    ListenError,
    ListenStreamError,
    LocalIoError,
    NoHomeDirError,
    NoIpFoundError,
    NoTitleIdError,
    PersistError,
    ProjectConfigError,
    ResolutionError,
    SidecarNotFoundError,
    SkylineError,
    TransferConnectError,
    TransferError,
    WriteIpDeniedError,
)
from skylinectl.core.model import (
    BuiltArtifact,
    CloseReason,
    DeployTarget,
    InstallResult,
    ListenOutcome,
    ProjectConfig,
    RemotePaths,
)
from skylinectl.core.paths import remote_paths
from skylinectl.core.service import DeployService
from skylinectl.transports.base import TransferClient
from skylinectl.transports.log_listener import LogListener

__all__ = [
    "SkylineError",
    "AddressError",
    "NoIpFoundError",
    "BadIpAddrError",
    "PersistError",
    "NoHomeDirError",
    "CreateSwitchDirDeniedError",
    "WriteIpDeniedError",
    "ResolutionError",
    "NoTitleIdError",
    "BadTitleIdError",
    "ProjectConfigError",
    "SidecarNotFoundError",
    "TransferError",
    "TransferConnectError",
    "LocalIoError",
    "ListenError",
    "ListenConnectError",
    "ListenStreamError",
    "BuildError",
    "BuiltArtifact",
    "CloseReason",
    "DeployTarget",
    "InstallResult",
    "ListenOutcome",
    "ProjectConfig",
    "RemotePaths",
    "artifact_path",
    "remote_paths",
    "validate_address",
    "Client",
]


class Client:
    """Public client for deploying plugins and reading device logs.

    A `Client` instance wraps address persistence, title id resolution, FTP
    installs and the log listener behind a stable API. Transports and the
    build step can be injected, which is how tests and alternative frontends
    drive it without a device.
    """

    def __init__(
        self,
        *,
        transfer: TransferClient | None = None,
        listener: LogListener | None = None,
        builder: Builder | None = None,
        config_dir: Path | None = None,
        project_root: Path | None = None,
    ) -> None:
        self._service = DeployService(
            transfer=transfer,
            listener=listener,
            builder=builder,
            address_store=AddressStore(config_dir),
            project_root=project_root,
        )

    def set_ip(self, ip: str) -> str:
        return self._service.set_ip(ip)

    def get_ip(self) -> str:
        return self._service.show_ip()

    def project(self) -> ProjectConfig:
        return self._service.load_project()

    def install(
        self,
        *,
        ip: str | None = None,
        title_id: str | None = None,
        release: bool = True,
        clear_existing: bool = False,
        artifact: Path | None = None,
    ) -> InstallResult:
        return self._service.install(
            ip,
            title_id,
            release=release,
            clear_existing=clear_existing,
            artifact=artifact,
        )

    def install_and_run(
        self,
        sink: Callable[[str], None],
        *,
        ip: str | None = None,
        title_id: str | None = None,
        release: bool = True,
        clear_existing: bool = False,
        artifact: Path | None = None,
        on_installed: Callable[[InstallResult], None] | None = None,
    ) -> tuple[InstallResult, ListenOutcome]:
        return self._service.install_and_run(
            ip,
            title_id,
            release=release,
            clear_existing=clear_existing,
            artifact=artifact,
            sink=sink,
            on_installed=on_installed,
        )

    def list_plugins(self, *, ip: str | None = None, title_id: str | None = None) -> list[str]:
        return self._service.list_plugins(ip, title_id)

    def listen(self, sink: Callable[[str], None], *, ip: str | None = None) -> ListenOutcome:
        return self._service.listen(ip, sink)
