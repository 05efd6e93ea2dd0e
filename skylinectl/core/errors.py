"""Domain-specific errors for skylinectl."""

from __future__ import annotations


class SkylineError(Exception):
    """Base error for skylinectl."""

    default_message = "skylinectl failed"
    exit_code = 1

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class AddressError(SkylineError):
    """Base error for device address resolution."""


class NoIpFoundError(AddressError):
    """Raised when no address was given and none is stored."""

    default_message = (
        "No IP address was provided and none is configured. "
        "Pass --ip or run 'skylinectl set-ip <ip>' first."
    )


class BadIpAddrError(AddressError):
    """Raised when an address fails syntax validation."""

    default_message = "The IP address provided is not a valid IPv4/IPv6 address or hostname."


class PersistError(SkylineError):
    """Base error for persisting the device address."""


class NoHomeDirError(PersistError):
    """Raised when no home directory can be resolved."""

    default_message = "No home directory could be found"


class CreateSwitchDirDeniedError(PersistError):
    """Raised when the configuration directory cannot be created."""

    default_message = "Could not create $HOME/.switch"


class WriteIpDeniedError(PersistError):
    """Raised when the address file cannot be written."""

    default_message = "Could not write IP to file"


class ResolutionError(SkylineError):
    """Base error for project and title id resolution."""


class NoTitleIdError(ResolutionError):
    """Raised when the title id cannot be resolved from any source."""

    default_message = (
        "No title id was found. Pass --title-id or add it to Cargo.toml:\n\n"
        "[package.metadata.skyline]\n"
        'titleid = "01006A800016E000"'
    )


class BadTitleIdError(ResolutionError):
    """Raised when a title id is not 16 hexadecimal characters."""

    default_message = "Title ids must be exactly 16 hexadecimal characters"


class ProjectConfigError(ResolutionError):
    """Raised when Cargo.toml cannot be parsed or fails validation."""

    default_message = "Cargo.toml is formatted incorrectly"


class SidecarNotFoundError(ResolutionError):
    """Raised when a custom NPDM is declared but missing locally."""

    default_message = "Custom NPDM file specified in Cargo.toml not found at the specified path"


class TransferError(SkylineError):
    """Raised on FTP protocol failures; carries the server message verbatim."""

    default_message = "An FTP error occurred"


class TransferConnectError(TransferError):
    """Raised when the FTP connection or login fails."""


class LocalIoError(SkylineError):
    """Raised when a local file to upload cannot be read."""

    default_message = "Could not read local file"


class ListenError(SkylineError):
    """Base error for the log listener."""


class ListenConnectError(ListenError):
    """Raised when the device refuses or does not answer the log connection."""

    default_message = "Could not connect to the device log port"


class ListenStreamError(ListenError):
    """Raised when reading the log stream fails mid-session."""

    default_message = "Log stream failed"


class BuildError(SkylineError):
    """Raised when the external build command fails."""

    default_message = "Build failed"

    def __init__(self, message: str | None = None, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code
