"""Transport interfaces."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Protocol


class TransferSession(Protocol):
    def ensure_dir(self, path: str) -> None:
        """Create ``path`` and any missing parents; existing directories are fine."""

    def upload(self, local_path: Path, remote_path: str) -> None:
        """Upload a local file, overwriting the remote one."""

    def list_dir(self, path: str) -> Iterator[str]:
        """Yield entry names of a remote directory."""

    def remove(self, path: str, *, missing_ok: bool = False) -> bool:
        """Delete a remote file or empty directory; return False if it was absent."""

    def close(self) -> None:
        """Release the device-side connection."""

    def __enter__(self) -> TransferSession: ...

    def __exit__(self, *exc_info: object) -> None: ...


class TransferClient(Protocol):
    def connect(self, address: str) -> TransferSession:
        """Open an authenticated session to the device."""
