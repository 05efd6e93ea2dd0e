"""Persisted device address (``~/.switch/ip_addr.txt``)."""

from __future__ import annotations

import ipaddress
import logging
import os
import re
import tempfile
from pathlib import Path

from skylinectl.core.errors import (
    BadIpAddrError,
    CreateSwitchDirDeniedError,
    NoHomeDirError,
    NoIpFoundError,
    WriteIpDeniedError,
)

IP_FILE_NAME = "ip_addr.txt"
_HOSTNAME_LABEL_RE = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$", re.IGNORECASE)
_NUMERIC_RE = re.compile(r"^[0-9.]+$")
LOGGER = logging.getLogger(__name__)


def validate_address(address: str) -> str:
    """Return the stripped address or raise ``BadIpAddrError``.

    Accepts IPv4, IPv6 and RFC 1123 hostnames. Anything made only of digits
    and dots has to be a real dotted-quad, so ``192.168.1`` and
    ``192.168.1.256`` are rejected rather than treated as hostnames.
    """
    candidate = address.strip()
    if not candidate:
        raise BadIpAddrError()

    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        pass
    else:
        return candidate

    if _NUMERIC_RE.match(candidate):
        raise BadIpAddrError(f"'{candidate}' is not a valid IPv4 address")

    hostname = candidate[:-1] if candidate.endswith(".") else candidate
    labels = hostname.split(".")
    if len(hostname) > 253 or not all(_HOSTNAME_LABEL_RE.match(label) for label in labels):
        raise BadIpAddrError(f"'{candidate}' is not a valid IP address or hostname")
    if labels[-1].isdigit():
        raise BadIpAddrError(f"'{candidate}' is not a valid IP address or hostname")
    return candidate


def _default_config_dir() -> Path:
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as exc:
        raise NoHomeDirError() from exc
    # Python 3.11 returns an unexpanded "~" instead of raising.
    if not home.is_absolute():
        raise NoHomeDirError()
    return home / ".switch"


class AddressStore:
    """Loads and saves the last used device address.

    Every call reads or writes the file directly; nothing is cached between
    calls, so each invocation sees what the previous one saved.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        self._config_dir = config_dir

    @property
    def config_dir(self) -> Path:
        if self._config_dir is not None:
            return self._config_dir
        return _default_config_dir()

    @property
    def path(self) -> Path:
        return self.config_dir / IP_FILE_NAME

    def get(self) -> str:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NoIpFoundError() from None
        except OSError as exc:
            raise NoIpFoundError(f"Could not read stored IP from {self.path}: {exc}") from exc

        address = content.strip()
        if not address:
            raise NoIpFoundError()
        try:
            return validate_address(address)
        except BadIpAddrError as exc:
            raise BadIpAddrError(f"Stored address in {self.path} is invalid: {exc}") from exc

    def set(self, address: str) -> str:
        address = validate_address(address)
        config_dir = self.config_dir

        try:
            config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CreateSwitchDirDeniedError(f"Could not create {config_dir}: {exc}") from exc

        try:
            fd, tmp_name = tempfile.mkstemp(dir=config_dir, prefix=".ip_addr.", suffix=".tmp")
        except OSError as exc:
            raise WriteIpDeniedError(f"Could not write IP to {self.path}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(address)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise WriteIpDeniedError(f"Could not write IP to {self.path}: {exc}") from exc

        LOGGER.debug("Stored device address %s in %s", address, self.path)
        return address

    def resolve(self, explicit: str | None) -> str:
        """Explicit address wins and becomes the new stored default."""
        if explicit is not None:
            return self.set(explicit)
        return self.get()
