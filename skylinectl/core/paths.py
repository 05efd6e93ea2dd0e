"""Device-side paths for an installed plugin."""

from __future__ import annotations

import posixpath

from skylinectl.core.model import RemotePaths

DEVICE_APP_ROOT = "/atmosphere/contents"
SIDECAR_NAME = "main.npdm"


def title_root(title_id: str) -> str:
    return posixpath.join(DEVICE_APP_ROOT, title_id)


def plugin_dir(title_id: str) -> str:
    return posixpath.join(title_root(title_id), "romfs", "skyline", "plugins")


def remote_paths(title_id: str, plugin_name: str = "") -> RemotePaths:
    """Derive every remote path from the resolved title id and plugin file name."""
    directory = plugin_dir(title_id)
    return RemotePaths(
        plugin_dir=directory,
        plugin_path=posixpath.join(directory, posixpath.basename(plugin_name)) if plugin_name else directory,
        sidecar_path=posixpath.join(title_root(title_id), "exefs", SIDECAR_NAME),
    )
