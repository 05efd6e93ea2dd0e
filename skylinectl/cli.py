"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from skylinectl.core.errors import SkylineError
from skylinectl.core.model import InstallResult, ListenOutcome
from skylinectl.core.service import DeployService

app = typer.Typer(help="Install Skyline plugins to a Switch over FTP and read their logs")

IpOption = typer.Option(None, "--ip", "-i", help="IP address of the Switch; saved as the new default")
TitleIdOption = typer.Option(
    None,
    "--title-id",
    "-t",
    help="Title ID of the game, can be set in Cargo.toml under [package.metadata.skyline]",
)
DebugOption = typer.Option(False, "--debug", "-d", help="Build and install the debug profile")
CleanOption = typer.Option(False, "--clean", help="Delete the installed plugin and NPDM before uploading")
ArtifactOption = typer.Option(
    None,
    "--artifact",
    help="Upload an already built NRO instead of running the build command",
    dir_okay=False,
)


@app.callback()
def main(
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Log progress (-vv for debug)"),
) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _fail(exc: SkylineError) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=exc.exit_code)


def _echo_chunk(text: str) -> None:
    typer.echo(text, nl=False)


def _report_install(result: InstallResult) -> None:
    for remote in result.removed:
        typer.echo(f"Removed {remote}")
    for remote in result.uploaded:
        typer.echo(f"Uploaded {remote}")
    typer.echo(f"Installed to {result.target.address} ({result.target.title_id})")


def _report_listen(outcome: ListenOutcome) -> None:
    typer.echo(f"\nLog connection to {outcome.address} closed ({outcome.reason.value})", err=True)


@app.command("install")
def install(
    debug: bool = DebugOption,
    ip: str | None = IpOption,
    title_id: str | None = TitleIdOption,
    clean: bool = CleanOption,
    artifact: Path | None = ArtifactOption,
) -> None:
    """Build the current plugin and install it to a Switch over FTP."""
    try:
        result = DeployService().install(
            ip,
            title_id,
            release=not debug,
            clear_existing=clean,
            artifact=artifact,
        )
        _report_install(result)
    except SkylineError as exc:
        raise _fail(exc) from None


@app.command("run")
def run_plugin(
    debug: bool = DebugOption,
    ip: str | None = IpOption,
    title_id: str | None = TitleIdOption,
    clean: bool = CleanOption,
    artifact: Path | None = ArtifactOption,
) -> None:
    """Install the current plugin and listen for Skyline logging."""
    def _installed(result: InstallResult) -> None:
        _report_install(result)
        typer.echo("-" * 63, err=True)

    try:
        _, outcome = DeployService().install_and_run(
            ip,
            title_id,
            release=not debug,
            clear_existing=clean,
            artifact=artifact,
            sink=_echo_chunk,
            on_installed=_installed,
        )
        _report_listen(outcome)
    except SkylineError as exc:
        raise _fail(exc) from None


@app.command("set-ip")
def set_ip(ip: str) -> None:
    """Set the IP address of the Switch to install to."""
    try:
        stored = DeployService().set_ip(ip)
        typer.echo(f"IP address set to {stored}")
    except SkylineError as exc:
        raise _fail(exc) from None


@app.command("show-ip")
def show_ip() -> None:
    """Show the currently configured IP address."""
    try:
        typer.echo(DeployService().show_ip())
    except SkylineError as exc:
        raise _fail(exc) from None


@app.command("listen")
def listen(ip: str | None = IpOption) -> None:
    """Listen for logs output from a Switch running Skyline."""
    try:
        outcome = DeployService().listen(ip, _echo_chunk)
        _report_listen(outcome)
    except SkylineError as exc:
        raise _fail(exc) from None


@app.command("list")
def list_installed(
    ip: str | None = IpOption,
    title_id: str | None = TitleIdOption,
) -> None:
    """List the files in the plugin directory for the given game."""
    try:
        entries = DeployService().list_plugins(ip, title_id)
        if not entries:
            typer.echo("No plugins installed")
            return
        for entry in entries:
            typer.echo(entry)
    except SkylineError as exc:
        raise _fail(exc) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
