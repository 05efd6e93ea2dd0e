"""Core data models used across installer, listener, service, and CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RemotePaths:
    plugin_dir: str
    plugin_path: str
    sidecar_path: str


@dataclass(frozen=True)
class BuiltArtifact:
    path: Path
    name: str


@dataclass(frozen=True)
class ProjectConfig:
    root: Path
    name: str | None = None
    title_id: str | None = None
    custom_npdm: Path | None = None
    build_command: tuple[str, ...] | None = None


@dataclass(frozen=True)
class DeployTarget:
    address: str
    title_id: str
    paths: RemotePaths


@dataclass(frozen=True)
class InstallResult:
    target: DeployTarget
    uploaded: tuple[str, ...]
    removed: tuple[str, ...]


class ListenState(enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    WAITING_FOR_HANDSHAKE = "waiting_for_handshake"
    STREAMING = "streaming"
    CLOSED = "closed"


class CloseReason(enum.Enum):
    REMOTE_CLOSED = "remote_closed"
    CANCELLED = "cancelled"
    CONNECT_FAILURE = "connect_failure"
    ERROR = "error"


@dataclass(frozen=True)
class ListenOutcome:
    address: str
    reason: CloseReason
