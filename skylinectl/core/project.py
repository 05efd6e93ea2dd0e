"""Project metadata lookups from ``Cargo.toml``."""

from __future__ import annotations

import json
import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any

from jsonschema import ValidationError, validators

from skylinectl.core.errors import ProjectConfigError
from skylinectl.core.model import ProjectConfig

MANIFEST_NAME = "Cargo.toml"
LOGGER = logging.getLogger(__name__)


def _load_schema_validator() -> Any:
    schema_text = resources.files("skylinectl.schemas").joinpath("metadata.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_manifest(path: Path) -> dict[str, Any] | None:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise ProjectConfigError(f"Could not read {path}: {exc}") from exc

    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise ProjectConfigError(f"Invalid TOML in {path}: {exc}") from exc


def _skyline_metadata(doc: dict[str, Any], source: Path) -> dict[str, Any]:
    package = doc.get("package", {})
    if not isinstance(package, dict):
        raise ProjectConfigError(f"[package] in {source} must be a table")
    metadata = package.get("metadata", {})
    if not isinstance(metadata, dict):
        raise ProjectConfigError(f"[package.metadata] in {source} must be a table")
    skyline = metadata.get("skyline", {})

    validator = _load_schema_validator()
    try:
        validator.validate(skyline)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ProjectConfigError(
            f"[package.metadata.skyline] in {source} is invalid{where}: {exc.message}"
        ) from exc
    return skyline


def load_project(root: Path | None = None) -> ProjectConfig:
    """Read project metadata; a missing ``Cargo.toml`` yields empty lookups."""
    root = Path.cwd() if root is None else root
    manifest = root / MANIFEST_NAME
    doc = _read_manifest(manifest)
    if doc is None:
        LOGGER.debug("No %s in %s", MANIFEST_NAME, root)
        return ProjectConfig(root=root)

    skyline = _skyline_metadata(doc, manifest)
    name = doc.get("package", {}).get("name")
    title_id = skyline.get("titleid")
    custom_npdm = skyline.get("custom-npdm")
    build_command = skyline.get("build-command")

    return ProjectConfig(
        root=root,
        name=name if isinstance(name, str) else None,
        title_id=title_id.strip() if title_id else None,
        custom_npdm=root / custom_npdm if custom_npdm else None,
        build_command=tuple(build_command) if build_command else None,
    )
