"""
Setup, configure and help commands, plus the click Group subclass used by
the top-level CLI (coloured command list and "did you mean" on typos).
"""

import asyncio
from dataclasses import dataclass

import click
from core.client import BridgeClient
from core.config import USER_CONFIG_FILE, load_bridge_config, save_bridge_config
from models.utils import find_similar_strings


@dataclass(frozen=True)
class CommandSection:
    """A heading of the quick reference and the usage lines under it."""
    name: str
    commands: list[tuple[str, str]]


COMMAND_SECTIONS = [
    CommandSection("SETUP", [
        ("configure", "Save bridge address and application key"),
        ("setup", "Show configuration and test the connection"),
    ]),
    CommandSection("INSPECTION", [
        ("home", "Zones with their grouped light and member lights"),
        ("light <light>", "Details of one light, including colour"),
    ]),
    CommandSection("CONTROL", [
        ("power <target> --on/--off", "Switch a light (or --group) on or off"),
        ("toggle <target>", "Flip a light (or --group) on/off"),
        ("brightness <target> <1-100>", "Set brightness in percent"),
        ("colour <target> <#rrggbb>", "Set colour from a hex value"),
        ("sweep <target> <from> <to>", "Fade between colours, throttled"),
    ]),
]


class ColouredGroup(click.Group):
    """click.Group with a coloured command list and suggestions for unknown commands."""

    max_suggestions = 3

    def _visible_commands(self, ctx):
        for name in self.list_commands(ctx):
            cmd = self.get_command(ctx, name)
            if cmd is not None and not cmd.hidden:
                yield name, cmd

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            typed = args[0] if args else ''
            if not typed or 'No such command' not in str(e):
                raise
            names = [name for name, _ in self._visible_commands(ctx)]
            suggestions = find_similar_strings(typed, names, limit=self.max_suggestions)
            if not suggestions:
                raise
            lines = [f"No such command '{typed}'.", "", click.style("Did you mean one of these?", fg='yellow')]
            lines += [click.style(f"  • {s}", fg='green') for s in suggestions]
            raise click.UsageError('\n'.join(lines) + '\n') from e

    def format_commands(self, ctx, formatter):
        rows = [(name, cmd.get_short_help_str(limit=500)) for name, cmd in self._visible_commands(ctx)]
        if not rows:
            return

        width = max(12, *(len(name) for name, _ in rows))
        formatter.write_paragraph()
        formatter.write_text(click.style('Commands:', fg='yellow', bold=True))
        with formatter.indentation():
            for name, short_help in rows:
                formatter.write_text(
                    f"{click.style(name.ljust(width), fg='green')}  {click.style(short_help, dim=True)}"
                )


@click.command(name='help')
def help_command():
    """Quick reference of all commands."""
    click.secho("\nHue Home - Quick Reference\n", fg='cyan', bold=True)

    for section in COMMAND_SECTIONS:
        click.secho(section.name, fg='yellow', bold=True)
        width = max(len(usage) for usage, _ in section.commands)
        for usage, description in section.commands:
            click.echo(f"  {click.style(usage.ljust(width), fg='green')}  {description}")
        click.echo()

    click.echo("Targets are light ids or names; add --group to address a zone's grouped light.")
    click.echo()


@click.command()
@click.option('--bridge-ip', prompt='Bridge IP address', help='Address of the Hue Bridge on the local network')
@click.option('--api-token', prompt='Application key', hide_input=True, help='hue-application-key issued by the bridge')
def configure_command(bridge_ip: str, api_token: str):
    """Save bridge address and application key.

    Credentials are written to ~/.hue_home/config.json (mode 600).
    HUE_BRIDGE_IP and HUE_APPLICATION_KEY in the environment take precedence.
    """
    if save_bridge_config(bridge_ip.strip(), api_token.strip()):
        click.secho(f"✓ Saved to {USER_CONFIG_FILE}", fg='green')
    else:
        click.secho("✗ Configuration not saved", fg='red')


@click.command()
def setup_command():
    """Show configuration and test the connection."""
    config = load_bridge_config()
    if config is None:
        click.secho("✗ No credentials configured", fg='red')
        click.echo("Run 'configure' or set HUE_BRIDGE_IP and HUE_APPLICATION_KEY.")
        return

    click.secho("\n=== Bridge Configuration ===\n", fg='cyan', bold=True)
    for label, value in [
        ("Bridge", config.bridge_ip),
        ("API base", config.base_url),
        ("Certificate", config.ca_bundle or 'self-signed (verification off)'),
        ("Settle delay", f"{config.settle_delay}s"),
        ("Throttle", f"{config.throttle_interval}s"),
    ]:
        click.echo(f"  {label + ':':<14} {value}")
    click.echo()

    response = asyncio.run(BridgeClient(config).fetch_collection('light'))
    if response.ok:
        click.secho(f"✓ Connected, {len(response.data)} lights found", fg='green')
        return

    click.secho("✗ Connection failed", fg='red')
    for message in response.error_messages():
        click.echo(f"  • {message}")
