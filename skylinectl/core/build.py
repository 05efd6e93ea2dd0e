"""Build collaborator: runs the project's build command and locates the NRO."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from skylinectl.core.errors import BuildError, LocalIoError, ProjectConfigError
from skylinectl.core.model import BuiltArtifact, ProjectConfig

TARGET_TRIPLE = "aarch64-skyline-switch"
DEFAULT_BUILD_COMMAND: tuple[str, ...] = ("cargo", "skyline", "build")
LOGGER = logging.getLogger(__name__)


class Builder(Protocol):
    def build(self, project: ProjectConfig, *, release: bool = True) -> BuiltArtifact:
        """Build the project and return the local artifact to upload."""


def artifact_name(project: ProjectConfig) -> str:
    if not project.name:
        raise ProjectConfigError(
            f"No [package] name found in {project.root / 'Cargo.toml'}. "
            "Make sure you are within your plugin directory."
        )
    return f"lib{project.name.replace('-', '_')}.nro"


def artifact_path(project: ProjectConfig, *, release: bool = True) -> Path:
    """Local path of the built plugin, shared with release packaging."""
    profile = "release" if release else "debug"
    return project.root / "target" / TARGET_TRIPLE / profile / artifact_name(project)


class CargoBuilder:
    def __init__(self, *, command: Sequence[str] | None = None) -> None:
        self._command = tuple(command) if command else None

    def _command_for(self, project: ProjectConfig, release: bool) -> list[str]:
        command = list(self._command or project.build_command or DEFAULT_BUILD_COMMAND)
        if release:
            command.append("--release")
        return command

    def build(self, project: ProjectConfig, *, release: bool = True) -> BuiltArtifact:
        path = artifact_path(project, release=release)
        command = self._command_for(project, release)
        LOGGER.info("Building with: %s", " ".join(command))

        try:
            result = subprocess.run(command, cwd=project.root, check=False)
        except FileNotFoundError as exc:
            raise BuildError(f"Build command not found: {command[0]}") from exc
        except OSError as exc:
            raise BuildError(f"Could not start build command '{command[0]}': {exc}") from exc

        if result.returncode != 0:
            raise BuildError(
                f"Build command exited with status {result.returncode}",
                exit_code=result.returncode if result.returncode > 0 else 1,
            )

        if not path.is_file():
            raise LocalIoError(f"Build succeeded but no artifact was found at {path}")
        return BuiltArtifact(path=path, name=path.name)
