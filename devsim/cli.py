"""
devsim CLI

Command-line interface for driving apps on iOS simulators.

Usage:
    devsim devices
    devsim launch com.example.app --device "iPhone 13"
    devsim open-url exp://127.0.0.1:8081
    devsim resolve-app-id ./my-project

Environment Variables:
    DEVSIM_DEFAULT_DEVICE - Simulator udid or name used when --device is omitted
    DEVSIM_XCRUN          - xcrun executable (default: xcrun)
"""

import json
import logging
import sys
from typing import Optional

import click

from . import __version__, simctl
from .config import ENV_DEFAULT_DEVICE, get_config
from .device_manager import AppleDeviceManager
from .devmenu import DevMenuController
from .exceptions import CommandError
from .models import DevMenuSettings
from .resolve_app_id import resolve_app_id


device_option = click.option(
    "--device", "-d",
    type=str,
    default=None,
    help=f"Simulator udid or name (env: {ENV_DEFAULT_DEVICE}, default: first booted)",
)


def _fail(error: CommandError) -> None:
    click.echo(f"Error: {error.message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(__version__)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log simctl calls")
def cli(verbose: bool):
    """devsim - iOS simulator tooling for app development"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command("devices")
@click.option("--booted", "-b", is_flag=True, default=False, help="Only booted simulators")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
def list_devices(booted: bool, as_json: bool):
    """List iOS simulators."""
    try:
        devices = simctl.get_booted_devices() if booted else simctl.list_devices()
    except CommandError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([d.to_dict() for d in devices], indent=2))
        return

    if not devices:
        click.echo("No simulators found")
        return

    name_width = max(max(len(d.name) for d in devices), 4)
    for d in devices:
        version = d.os_version or "?"
        click.echo(f"  {d.name:<{name_width}}  iOS {version:<6}  {d.state.value:<13}  {d.udid}")


@cli.command("app-version")
@click.argument("app_id", required=False)
@device_option
def app_version(app_id: Optional[str], device: Optional[str]):
    """Print the installed version of the launcher app."""
    app_id = app_id or get_config().launcher_app_id
    try:
        manager = AppleDeviceManager.resolve(device)
        version = manager.get_app_version(app_id)
    except CommandError as e:
        _fail(e)

    if version is None:
        click.echo(f"{app_id}: version unknown or not installed on {manager.name}")
        sys.exit(1)
    click.echo(version)


@cli.command("launch")
@click.argument("app_id")
@device_option
def launch(app_id: str, device: Optional[str]):
    """Launch an installed app by bundle identifier.

    Examples:
        devsim launch com.example.app
        devsim launch host.exp.Exponent --device "iPhone 13"
    """
    try:
        manager = AppleDeviceManager.resolve(device)
        manager.launch_application_id(app_id)
    except CommandError as e:
        _fail(e)
    click.echo(f"Opened {app_id} on {manager.name}")


@cli.command("open-url")
@click.argument("url")
@device_option
def open_url(url: str, device: Optional[str]):
    """Open a URL (or a bundle identifier) on a simulator."""
    try:
        manager = AppleDeviceManager.resolve(device)
        manager.open_url(url)
    except CommandError as e:
        _fail(e)
    click.echo(f"Opened {url} on {manager.name}")


@cli.command("install")
@click.argument("app_path", type=click.Path(exists=True))
@device_option
def install(app_path: str, device: Optional[str]):
    """Install a built .app bundle on a simulator."""
    try:
        manager = AppleDeviceManager.resolve(device)
        manager.install_app(app_path)
    except CommandError as e:
        _fail(e)
    click.echo(f"Installed {app_path} on {manager.name}")


@cli.command("uninstall")
@click.argument("app_id")
@device_option
def uninstall(app_id: str, device: Optional[str]):
    """Remove an app from a simulator."""
    try:
        manager = AppleDeviceManager.resolve(device)
        manager.uninstall_app(app_id)
    except CommandError as e:
        _fail(e)
    click.echo(f"Uninstalled {app_id} from {manager.name}")


@cli.command("resolve-app-id")
@click.argument(
    "project_root",
    type=click.Path(exists=True, file_okay=False),
    default=".",
)
def resolve_app_id_command(project_root: str):
    """Print the iOS bundle identifier of a project."""
    bundle_id = resolve_app_id(project_root)
    if bundle_id is None:
        click.echo(f"No bundle identifier found in {project_root}", err=True)
        sys.exit(1)
    click.echo(bundle_id)


@cli.group()
def devmenu():
    """Read and change dev menu settings of an app."""
    pass


def _controller(app_id: Optional[str], project_root: str, device: Optional[str]) -> DevMenuController:
    app_id = app_id or resolve_app_id(project_root)
    if not app_id:
        raise CommandError(
            "NO_APP_ID",
            f"No bundle identifier found in {project_root}, pass --app-id",
        )
    manager = AppleDeviceManager.resolve(device)
    return DevMenuController(manager.device, app_id)


app_id_option = click.option("--app-id", "-a", type=str, default=None, help="Bundle identifier (default: resolved from the project)")
project_option = click.option(
    "--project-root", "-p",
    type=click.Path(file_okay=False),
    default=".",
    help="Project used to resolve the bundle identifier",
)


@devmenu.command("get")
@app_id_option
@project_option
@device_option
def devmenu_get(app_id: Optional[str], project_root: str, device: Optional[str]):
    """Print the dev menu settings as JSON."""
    try:
        settings = _controller(app_id, project_root, device).get_settings()
    except CommandError as e:
        _fail(e)
    click.echo(json.dumps(settings.serialize(), indent=2))


@devmenu.command("set")
@click.argument("assignments", nargs=-1, required=True)
@app_id_option
@project_option
@device_option
def devmenu_set(assignments, app_id: Optional[str], project_root: str, device: Optional[str]):
    """Change dev menu settings.

    Examples:
        devsim devmenu set showsAtLaunch=true
        devsim devmenu set motionGestureEnabled=false touchGestureEnabled=false
    """
    values = {}
    for assignment in assignments:
        key, sep, raw = assignment.partition("=")
        if not sep or key not in DevMenuSettings.KEYS:
            raise click.BadParameter(
                f"expected one of {', '.join(DevMenuSettings.KEYS)} as KEY=true|false, got {assignment!r}",
                param_hint="ASSIGNMENTS",
            )
        if raw.lower() not in ("true", "false"):
            raise click.BadParameter(f"{key} must be true or false", param_hint="ASSIGNMENTS")
        values[key] = raw.lower() == "true"

    try:
        settings = _controller(app_id, project_root, device).set_settings(values)
    except CommandError as e:
        _fail(e)
    click.echo(json.dumps(settings.serialize(), indent=2))


def main():
    cli()


if __name__ == "__main__":
    main()
