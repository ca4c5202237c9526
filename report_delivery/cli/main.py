"""
Main CLI entry point for Report Delivery.

This module provides the command-line interface using Click with Rich
formatting to create, inspect and exercise file server devices.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from report_delivery import __version__
from report_delivery.core.exceptions import ReportDeliveryError
from report_delivery.devices.file_server import OutputFileServerDevice
from report_delivery.models.config import FtpSecure, Protocol, load_settings
from report_delivery.models.report import ReportContext, ReportOutput
from report_delivery.security.encryption import get_password_cipher
from report_delivery.utils.helpers import sanitize_dict
from report_delivery.utils.logging import setup_logging

console = Console()


def _use_settings_cipher(ctx: click.Context, device: OutputFileServerDevice) -> OutputFileServerDevice:
    device.use_cipher(ctx.obj['cipher'])
    return device


def _load_device(ctx: click.Context, path: str) -> OutputFileServerDevice:
    return _use_settings_cipher(ctx, OutputFileServerDevice.load_from_file(path))


def _fail(error: Exception) -> None:
    console.print(f"[red]✗ {error}[/red]")
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='Settings file (YAML or JSON)')
@click.pass_context
def main(ctx: click.Context, version: bool, verbose: bool, config_path: Optional[str]):
    """
    Report Delivery

    Deliver rendered reports to FTP, FTPS, SFTP, SCP and WebDAV servers.
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose

    if version:
        console.print(f"Report Delivery version {__version__}")
        sys.exit(0)

    try:
        settings = load_settings(config_path)
        cipher = get_password_cipher(settings.password_key or "")
    except Exception as e:
        _fail(e)
    ctx.obj['settings'] = settings
    ctx.obj['cipher'] = cipher

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file,
        structured_logging=settings.structured_logging,
    )

    if ctx.invoked_subcommand is None:
        console.print(Panel(
            Text(f"Report Delivery {__version__}", style="bold blue"),
            border_style="blue"
        ))
        console.print("\n[yellow]Use --help to see available commands[/yellow]")


@main.command()
@click.argument('path', type=click.Path(dir_okay=False))
@click.option('--protocol', type=click.Choice([p.value for p in Protocol]), default=Protocol.FTP.value,
              show_default=True, help='File server protocol')
@click.option('--ftp-secure', type=click.Choice([s.value for s in FtpSecure]), default=FtpSecure.NONE.value,
              show_default=True, help='FTPS mode')
@click.option('--host', default='127.0.0.1', show_default=True, help='File server host name')
@click.option('--port', type=int, default=21, show_default=True, help='File server port')
@click.option('--user', default='', help='User name')
@click.option('--directory', 'directories', multiple=True, help='Allowed remote directory (repeatable)')
@click.pass_context
def create(ctx: click.Context, path: str, protocol: str, ftp_secure: str, host: str, port: int, user: str, directories):
    """Create a new file server device file."""
    if Path(path).exists():
        _fail(click.ClickException(f"File already exists: {path}"))

    try:
        device = OutputFileServerDevice.create(
            protocol=protocol,
            ftp_secure=ftp_secure,
            host_name=host,
            port_number=port,
            user_name=user,
            directories="\n".join(directories) if directories else "/",
        )
        _use_settings_cipher(ctx, device)
        device.validate()
        device.save_to_file(path)
    except (ReportDeliveryError, ValueError) as e:
        _fail(e)

    console.print(f"[green]✓ Device '{device.name}' created in {path}[/green]")


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def show(ctx: click.Context, path: str):
    """Show the settings of a device."""
    try:
        device = _load_device(ctx, path)
    except ReportDeliveryError as e:
        _fail(e)

    table = Table(title=device.full_name)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in sanitize_dict(device.model_dump(mode='json')).items():
        table.add_row(key, str(value))
    console.print(table)


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx: click.Context, path: str):
    """Validate a device file."""
    try:
        device = _load_device(ctx, path)
        device.validate()
    except ReportDeliveryError as e:
        _fail(e)

    console.print(f"[green]✓ Device '{device.name}' is valid[/green]")


@main.command('set-password')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True,
              help='Clear text password, stored encrypted')
@click.pass_context
def set_password(ctx: click.Context, path: str, password: str):
    """Store the password of a device, encrypted."""
    try:
        device = _load_device(ctx, path)
        device.clear_password = password
        if device.error:
            _fail(ReportDeliveryError(device.error))
        device.save_to_file()
    except ReportDeliveryError as e:
        _fail(e)

    console.print(f"[green]✓ Password of device '{device.name}' updated[/green]")


@main.command('test-connection')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def test_connection(ctx: click.Context, path: str):
    """Open and close a session with a device."""
    try:
        device = _load_device(ctx, path)
    except ReportDeliveryError as e:
        _fail(e)

    with console.status(f"Connecting to {device.host_name}:{device.port_number}..."):
        device.test_connection()

    if device.error:
        console.print(f"[red]✗ {device.information}[/red]")
        console.print(f"[dim]{device.error}[/dim]")
        sys.exit(1)
    console.print(f"[green]✓ {device.information}[/green]")


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.argument('result_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--folder', default=None, help='Remote folder, defaults to the first allowed directory')
@click.option('--name', 'result_file_name', default=None, help='Remote file name, defaults to the local name')
@click.option('--zip', 'zip_result', is_flag=True, help='Zip the file before sending it')
@click.pass_context
def send(ctx: click.Context, path: str, result_file: str, folder: Optional[str],
         result_file_name: Optional[str], zip_result: bool):
    """Send a file through a device as a report result."""
    try:
        device = _load_device(ctx, path)
        if folder is None:
            folder = device.directories_list[0] if device.directories_list else "/"
        output = ReportOutput(device=device, folder=folder, zip_result=zip_result)
        report = ReportContext(
            result_file_path=result_file,
            output=output,
            result_file_name=result_file_name,
        )
        device.process(report)
    except ReportDeliveryError as e:
        _fail(e)

    console.print(f"[green]✓ {output.information}[/green]")
    if ctx.obj.get('verbose', False):
        for message in report.messages:
            console.print(f"[dim]{message}[/dim]")


if __name__ == "__main__":
    main()
