"""Service layer used by CLI and the public API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from skylinectl.core.address_store import AddressStore
from skylinectl.core.build import Builder, CargoBuilder
from skylinectl.core.errors import LocalIoError
from skylinectl.core.installer import Installer
from skylinectl.core.model import BuiltArtifact, CloseReason, InstallResult, ListenOutcome, ProjectConfig
from skylinectl.core.project import load_project
from skylinectl.transports.base import TransferClient
from skylinectl.transports.log_listener import LogListener

LOGGER = logging.getLogger(__name__)


class DeployService:
    def __init__(
        self,
        *,
        transfer: TransferClient | None = None,
        listener: LogListener | None = None,
        builder: Builder | None = None,
        address_store: AddressStore | None = None,
        project_root: Path | None = None,
    ) -> None:
        self.address_store = address_store or AddressStore()
        self.installer = Installer(transfer=transfer, address_store=self.address_store)
        self.listener = listener or LogListener()
        self.builder = builder or CargoBuilder()
        self.project_root = project_root

    def load_project(self) -> ProjectConfig:
        return load_project(self.project_root)

    def set_ip(self, ip: str) -> str:
        return self.address_store.set(ip)

    def show_ip(self) -> str:
        return self.address_store.get()

    def install(
        self,
        ip: str | None = None,
        title_id: str | None = None,
        *,
        release: bool = True,
        clear_existing: bool = False,
        artifact: Path | None = None,
    ) -> InstallResult:
        project = self.load_project()
        target = self.installer.resolve_target(ip, title_id, project)

        if artifact is not None:
            if not artifact.is_file():
                raise LocalIoError(f"Artifact not found at {artifact}")
            built = BuiltArtifact(path=artifact, name=artifact.name)
        else:
            built = self.builder.build(project, release=release)

        return self.installer.install(target, built, project, clear_existing=clear_existing)

    def install_and_run(
        self,
        ip: str | None = None,
        title_id: str | None = None,
        *,
        release: bool = True,
        clear_existing: bool = False,
        artifact: Path | None = None,
        sink: Callable[[str], None],
        on_installed: Callable[[InstallResult], None] | None = None,
    ) -> tuple[InstallResult, ListenOutcome]:
        result = self.install(
            ip,
            title_id,
            release=release,
            clear_existing=clear_existing,
            artifact=artifact,
        )
        if on_installed is not None:
            on_installed(result)
        # The install step already stored the address; reuse it verbatim.
        outcome = self._listen_to(result.target.address, sink)
        return result, outcome

    def list_plugins(self, ip: str | None = None, title_id: str | None = None) -> list[str]:
        project = self.load_project()
        target = self.installer.resolve_target(ip, title_id, project)
        return self.installer.list(target)

    def listen(self, ip: str | None, sink: Callable[[str], None]) -> ListenOutcome:
        return self._listen_to(self.address_store.resolve(ip), sink)

    def _listen_to(self, address: str, sink: Callable[[str], None]) -> ListenOutcome:
        try:
            session = self.listener.connect(address)
        except KeyboardInterrupt:
            LOGGER.debug("Connecting to %s cancelled by operator", address)
            return ListenOutcome(address=address, reason=CloseReason.CANCELLED)

        with session:
            try:
                for text in session.stream():
                    sink(text)
            except KeyboardInterrupt:
                LOGGER.debug("Log stream from %s cancelled by operator", address)
                session.cancel()
        reason = session.close_reason or CloseReason.REMOTE_CLOSED
        return ListenOutcome(address=address, reason=reason)
