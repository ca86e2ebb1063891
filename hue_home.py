#!/usr/bin/env python3
"""
Hue Home CLI

Zones, lights and colours on a Philips Hue Bridge (CLIP v2 API).
"""

import click

from commands.control import brightness_command, colour_command, power_command, sweep_command, toggle_command
from commands.inspection import home_command, light_command
from commands.setup import ColouredGroup, configure_command, help_command, setup_command


@click.group(
    cls=ColouredGroup,
    context_settings={
        'help_option_names': ['-h', '--help'],
        'max_content_width': 120,
    }
)
@click.version_option(version='0.1.0', prog_name='Hue Home')
def cli():
    """Hue Home - view zones and control lights on your Hue Bridge.

Credentials are read from HUE_BRIDGE_IP and HUE_APPLICATION_KEY, then
~/.hue_home/config.json. Start with 'configure', check with 'setup'.

'help' prints a quick reference; 'COMMAND --help' explains one command."""


COMMANDS = {
    'help': help_command,
    'configure': configure_command,
    'setup': setup_command,
    'home': home_command,
    'light': light_command,
    'power': power_command,
    'toggle': toggle_command,
    'brightness': brightness_command,
    'colour': colour_command,
    'sweep': sweep_command,
}

for name, command in COMMANDS.items():
    cli.add_command(command, name=name)


if __name__ == '__main__':
    cli()
