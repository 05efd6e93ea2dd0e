"""FTP transport for the device's file server, built on ``ftplib``."""

from __future__ import annotations

import ftplib
import logging
import posixpath
from collections.abc import Iterator
from pathlib import Path

from skylinectl.core.errors import LocalIoError, TransferConnectError, TransferError

FTP_PORT = 5000
LOGGER = logging.getLogger(__name__)


def _message(exc: BaseException) -> str:
    return str(exc).strip() or exc.__class__.__name__


class FTPSession:
    """One open FTP control connection; close it on every exit path."""

    def __init__(self, ftp: ftplib.FTP, address: str) -> None:
        self._ftp = ftp
        self.address = address
        self.closed = False

    def __enter__(self) -> FTPSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._ftp.quit()
        except ftplib.all_errors:
            # Server already gone; drop the socket without the QUIT handshake.
            self._ftp.close()
        LOGGER.debug("Closed FTP session to %s", self.address)

    def is_dir(self, path: str) -> bool:
        try:
            original = self._ftp.pwd()
        except ftplib.all_errors as exc:
            raise TransferError(_message(exc)) from exc
        try:
            self._ftp.cwd(path)
        except ftplib.error_perm:
            return False
        except ftplib.all_errors as exc:
            raise TransferError(_message(exc)) from exc
        try:
            self._ftp.cwd(original)
        except ftplib.all_errors as exc:
            raise TransferError(_message(exc)) from exc
        return True

    def exists(self, path: str) -> bool:
        parent, name = posixpath.split(path.rstrip("/"))
        if not name:
            return True
        try:
            return name in set(self.list_dir(parent or "/"))
        except TransferError:
            # Listing a missing parent fails, which means the child is missing too.
            return False

    def ensure_dir(self, path: str) -> None:
        current = "/" if path.startswith("/") else ""
        for component in [part for part in path.split("/") if part]:
            current = posixpath.join(current, component)
            try:
                self._ftp.mkd(current)
                LOGGER.debug("Created remote directory %s", current)
            except ftplib.error_perm as exc:
                if self.is_dir(current):
                    continue
                raise TransferError(_message(exc)) from exc
            except ftplib.all_errors as exc:
                raise TransferError(_message(exc)) from exc

    def upload(self, local_path: Path, remote_path: str) -> None:
        try:
            handle = open(local_path, "rb")
        except OSError as exc:
            raise LocalIoError(f"Could not read {local_path}: {exc}") from exc

        with handle:
            try:
                self._ftp.storbinary(f"STOR {remote_path}", handle)
            except ftplib.all_errors as exc:
                raise TransferError(_message(exc)) from exc
        LOGGER.info("Uploaded %s to %s", local_path, remote_path)

    def list_dir(self, path: str) -> Iterator[str]:
        """Stream entry names over the data connection as they arrive."""
        try:
            self._ftp.sendcmd("TYPE A")
            conn = self._ftp.transfercmd(f"NLST {path}")
        except ftplib.all_errors as exc:
            raise TransferError(_message(exc)) from exc

        try:
            with conn, conn.makefile("r", encoding=self._ftp.encoding) as lines:
                for line in lines:
                    entry = line.rstrip("\r\n")
                    if entry:
                        name = posixpath.basename(entry.rstrip("/"))
                        if name not in (".", ".."):
                            yield name
            self._ftp.voidresp()
        except ftplib.all_errors as exc:
            raise TransferError(_message(exc)) from exc

    def remove(self, path: str, *, missing_ok: bool = False) -> bool:
        try:
            self._ftp.delete(path)
        except ftplib.error_perm as delete_exc:
            try:
                self._ftp.rmd(path)
            except ftplib.error_perm:
                if missing_ok and not self.exists(path):
                    LOGGER.debug("Nothing to remove at %s", path)
                    return False
                raise TransferError(_message(delete_exc)) from delete_exc
            except ftplib.all_errors as exc:
                raise TransferError(_message(exc)) from exc
        except ftplib.all_errors as exc:
            raise TransferError(_message(exc)) from exc
        LOGGER.info("Removed %s", path)
        return True


class FTPTransferClient:
    def __init__(
        self,
        *,
        port: int = FTP_PORT,
        timeout_s: float = 10.0,
        user: str | None = "anonymous",
        password: str = "",
    ) -> None:
        self.port = port
        self.timeout_s = timeout_s
        self.user = user
        self.password = password

    def connect(self, address: str) -> FTPSession:
        ftp = ftplib.FTP()
        try:
            ftp.connect(address, self.port, timeout=self.timeout_s)
            if self.user is not None:
                ftp.login(self.user, self.password)
        except ftplib.all_errors as exc:
            ftp.close()
            raise TransferConnectError(
                f"Could not connect to FTP server at {address}:{self.port}: {_message(exc)}"
            ) from exc
        LOGGER.debug("Connected to FTP server at %s:%s", address, self.port)
        return FTPSession(ftp, address)
