"""Pushes a built plugin and its sidecar files to the device over FTP."""

from __future__ import annotations

import logging
import posixpath

from skylinectl.core.address_store import AddressStore
from skylinectl.core.errors import SidecarNotFoundError
from skylinectl.core.identity import resolve_title_id
from skylinectl.core.model import BuiltArtifact, DeployTarget, InstallResult, ProjectConfig
from skylinectl.core.paths import remote_paths
from skylinectl.transports.base import TransferClient
from skylinectl.transports.ftp import FTPTransferClient

LOGGER = logging.getLogger(__name__)


class Installer:
    def __init__(
        self,
        *,
        transfer: TransferClient | None = None,
        address_store: AddressStore | None = None,
    ) -> None:
        self.transfer = transfer or FTPTransferClient()
        self.address_store = address_store or AddressStore()

    def resolve_target(
        self,
        ip: str | None,
        title_id: str | None,
        project: ProjectConfig,
        plugin_name: str = "",
    ) -> DeployTarget:
        """Resolve address and title id before any network activity."""
        address = self.address_store.resolve(ip)
        resolved_title_id = resolve_title_id(title_id, project.title_id)
        return DeployTarget(
            address=address,
            title_id=resolved_title_id,
            paths=remote_paths(resolved_title_id, plugin_name),
        )

    def install(
        self,
        target: DeployTarget,
        artifact: BuiltArtifact,
        project: ProjectConfig,
        *,
        clear_existing: bool = False,
    ) -> InstallResult:
        paths = remote_paths(target.title_id, artifact.name)
        sidecar = project.custom_npdm
        if sidecar is not None and not sidecar.is_file():
            raise SidecarNotFoundError(
                f"Custom NPDM file specified in Cargo.toml not found at {sidecar}"
            )

        uploaded: list[str] = []
        removed: list[str] = []
        LOGGER.info("Installing %s to %s on %s", artifact.name, paths.plugin_dir, target.address)
        with self.transfer.connect(target.address) as session:
            session.ensure_dir(paths.plugin_dir)
            if sidecar is not None:
                session.ensure_dir(posixpath.dirname(paths.sidecar_path))

            if clear_existing:
                stale = [paths.plugin_path]
                if sidecar is not None:
                    stale.append(paths.sidecar_path)
                for remote in stale:
                    if session.remove(remote, missing_ok=True):
                        removed.append(remote)

            session.upload(artifact.path, paths.plugin_path)
            uploaded.append(paths.plugin_path)
            if sidecar is not None:
                session.upload(sidecar, paths.sidecar_path)
                uploaded.append(paths.sidecar_path)

        return InstallResult(
            target=DeployTarget(address=target.address, title_id=target.title_id, paths=paths),
            uploaded=tuple(uploaded),
            removed=tuple(removed),
        )

    def list(self, target: DeployTarget) -> list[str]:
        with self.transfer.connect(target.address) as session:
            return sorted(session.list_dir(target.paths.plugin_dir))
