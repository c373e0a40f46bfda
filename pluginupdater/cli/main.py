"""
Main CLI entry point for PluginUpdater.

This module defines the Click command group and its subcommands. The commands
are a thin host around UpdaterController: they load the configuration, run
one engine operation and print the results.
"""

import shlex
import subprocess
import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger

from pluginupdater.controllers.updater_controller import UpdaterController
from pluginupdater.models.outcome import UpdateOutcome
from pluginupdater.models.project import Platform
from pluginupdater.models.settings import Config, load_config
from pluginupdater.utils.app_info import AppInfo
from pluginupdater.utils.exception import ConfigError
from pluginupdater.utils.log_sink import configure_logging
from pluginupdater.utils.update_history import UpdateHistory

PLATFORM_CHOICES = ["spigot", "paper", "bungee", "bungeecord", "velocity"]


def _parse_platform(
    ctx: click.Context, param: click.Parameter, value: str
) -> Platform:
    # Paper runs Spigot plugins
    if value.lower() == "paper":
        return Platform.SPIGOT
    return Platform.from_name(value)


platform_option = click.option(
    "--platform",
    type=click.Choice(PLATFORM_CHOICES, case_sensitive=False),
    default="spigot",
    show_default=True,
    callback=_parse_platform,
    envvar="PLUGINUPDATER_PLATFORM",
    help="Server or proxy software the plugins directory belongs to.",
)

plugins_dir_option = click.option(
    "--plugins-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("plugins"),
    show_default=True,
    envvar="PLUGINUPDATER_PLUGINS_DIR",
    help="Plugins directory of the server.",
)


def _load_config() -> Config:
    try:
        return load_config(AppInfo().config_file)
    except ConfigError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)


def _build_controller(config: Config) -> UpdaterController:
    history = UpdateHistory(config.update_history, AppInfo().history_file)
    return UpdaterController(config, history=history)


def _echo_outcome(outcome: UpdateOutcome) -> None:
    if outcome.updated:
        click.secho(f"✓ {outcome.describe()}", fg="green")
    elif outcome.error:
        click.secho(f"✗ {outcome.describe()}", fg="red", err=True)
    else:
        click.echo(f"  {outcome.describe()}")


def run_restart_command(command: str) -> int:
    """
    Run the configured restart command after a successful update.

    :param command: shell-style command line, e.g. "systemctl restart minecraft"
    :return: exit code of the command, or -1 if it could not be started
    """
    args = shlex.split(command)
    if not args:
        logger.warning("Restart command is empty, skipping")
        return -1
    logger.info(f"Running restart command: {command}")
    try:
        return subprocess.run(args, check=False).returncode
    except OSError as e:
        logger.error(f"Failed to run restart command '{command}': {e}")
        return -1


@click.group()
@click.version_option(version=AppInfo().app_version, prog_name="PluginUpdater")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="PLUGINUPDATER_DATA_DIR",
    help="Folder holding config.json and history.log (defaults to the user data folder).",
)
@click.option("--debug", is_flag=True, help="Write debug messages to the log file.")
def cli(data_dir: Optional[Path], debug: bool) -> None:
    """PluginUpdater - keeps Geyser, LuckPerms, Via and friends up to date

    Downloads the latest builds of the enabled plugins into a server's
    plugins directory. Enable plugins in config.json, which is created with
    everything disabled on first run.
    """
    app_info = AppInfo()
    if data_dir is not None:
        app_info.use_storage_folder(data_dir)
    app_info.ensure_folders()
    configure_logging(app_info.user_log_folder / "pluginupdater.log", debug)


@cli.command("update")
@platform_option
@plugins_dir_option
@click.option(
    "--restart/--no-restart",
    default=True,
    show_default=True,
    help="Run postUpdate.restartCommand after an update if it is enabled.",
)
def update(platform: Platform, plugins_dir: Path, restart: bool) -> None:
    """Install the latest build of every enabled plugin.

    A GeyserModelEngine cleanup scheduled by a previous run is applied first.
    Exits with status 1 if any plugin failed.
    """
    config = _load_config()
    if not config.enabled:
        click.echo("PluginUpdater is disabled in config.json")
        return
    if not plugins_dir.is_dir():
        click.secho(
            f"Error: Plugins directory does not exist: {plugins_dir}",
            fg="red",
            err=True,
        )
        sys.exit(1)

    with _build_controller(config) as controller:
        controller.execute_cleanup_if_pending(platform, plugins_dir)
        outcomes = controller.check_and_update(platform, plugins_dir)

    if not outcomes:
        click.echo("No plugins are enabled. Edit config.json to enable some.")
        return

    for outcome in outcomes:
        _echo_outcome(outcome)

    updated = [o for o in outcomes if o.updated]
    if updated and config.post_update.notify_console:
        click.echo(f"{len(updated)} plugin(s) updated. Restart the server to apply.")
    if updated and restart and config.post_update.run_restart_command:
        run_restart_command(config.post_update.restart_command)

    if any(o.error for o in outcomes):
        sys.exit(1)


@cli.command("check")
@platform_option
@plugins_dir_option
def check(platform: Platform, plugins_dir: Path) -> None:
    """Show installed and latest builds without changing anything."""
    config = _load_config()
    with _build_controller(config) as controller:
        results = controller.check_versions(platform, plugins_dir)

    for info in results:
        name = info.project.api_name
        if not info.enabled:
            click.echo(f"  {name}: disabled")
        elif info.error:
            click.secho(f"✗ {name}: {info.error}", fg="red")
        elif info.update_available:
            build = f" (build #{info.build_number})" if info.build_number else ""
            click.secho(
                f"↑ {name}: {info.installed or 'not installed'} -> {info.latest}{build}",
                fg="yellow",
            )
        else:
            click.secho(f"✓ {name}: {info.installed}", fg="green")


@cli.command("cleanup")
@platform_option
@plugins_dir_option
def cleanup(platform: Platform, plugins_dir: Path) -> None:
    """Apply a pending GeyserModelEngine cleanup now."""
    config = _load_config()
    with _build_controller(config) as controller:
        removed = controller.execute_cleanup_if_pending(platform, plugins_dir)
    if removed is None:
        click.echo("No cleanup pending.")
    else:
        click.echo(f"Cleanup done, removed {removed} generated file(s).")


@cli.command("packtest")
@platform_option
@plugins_dir_option
def packtest(platform: Platform, plugins_dir: Path) -> None:
    """Schedule a GeyserModelEngine cleanup for the next startup."""
    config = _load_config()
    with _build_controller(config) as controller:
        scheduled = controller.simulate_update_marker(platform, plugins_dir)
    if scheduled:
        click.secho(
            "Cleanup scheduled. It runs on the next update or startup.", fg="green"
        )
    else:
        click.secho(
            "Cleanup was not scheduled, see the log for details.", fg="yellow"
        )
        sys.exit(1)


if __name__ == "__main__":
    cli()
