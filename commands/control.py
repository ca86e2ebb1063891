"""
Control commands for direct manipulation of lights and grouped lights.

Includes power, toggle, brightness, colour and colour sweeps. Every command
takes a light id or name; with --group it addresses the grouped light of
the named zone instead and waits the configured settle delay after a
successful write.
"""

import asyncio

import click
from commands.inspection import resolve_target
from core.actions import set_brightness, set_colour, set_power, toggle
from core.errors import BridgeError
from core.throttle import UpdateThrottle
from models.colour import parse_hex
from models.utils import get_client

group_option = click.option('--group', '-g', is_flag=True,
                            help="Target a zone's grouped light instead of a single light")


def _prepare(target: str, group: bool):
    """Return (client, resource_path, resource_id, settle_delay) or None."""
    client = get_client()
    if not client:
        return None

    resource_path = 'grouped_light' if group else 'light'
    resource_id = resolve_target(client, resource_path, target)
    if resource_id is None:
        return None

    settle_delay = client.config.settle_delay if group else 0
    return client, resource_path, resource_id, settle_delay


def _report(response, success: str) -> bool:
    """Print the outcome of a write; bridge errors are shown verbatim."""
    if response.errors:
        click.secho("✗ Hue errors:", fg='red')
        for message in response.error_messages():
            click.echo(f"  • {message}")
        return False
    click.secho(f"✓ {success}", fg='green')
    return True


def _run(coro, success: str) -> bool:
    try:
        response = asyncio.run(coro)
    except BridgeError as e:
        click.secho(f"✗ Bridge not updated: {e}", fg='red')
        return False
    return _report(response, success)


@click.command()
@click.argument('target')
@click.option('--on/--off', default=True, help='Turn on or off')
@group_option
def power_command(target: str, on: bool, group: bool):
    """Turn a light ON or OFF.

    \b
    Examples:
      hue-home power "Desk lamp" --on
      hue-home power "Living room" --off --group
    """
    prepared = _prepare(target, group)
    if not prepared:
        return

    client, resource_path, resource_id, settle_delay = prepared
    status = "ON" if on else "OFF"
    _run(set_power(client, resource_path, resource_id, on, settle_delay), f"{target} turned {status}")


@click.command()
@click.argument('target')
@group_option
def toggle_command(target: str, group: bool):
    """Flip a light between ON and OFF."""
    prepared = _prepare(target, group)
    if not prepared:
        return

    client, resource_path, resource_id, settle_delay = prepared
    _run(toggle(client, resource_path, resource_id, settle_delay), f"{target} toggled")


@click.command()
@click.argument('target')
@click.argument('brightness', type=float)
@group_option
def brightness_command(target: str, brightness: float, group: bool):
    """Set brightness of a light in percent (1-100).

    Values outside the light's range are rejected by the bridge, and its
    message is shown as-is.

    \b
    Examples:
      hue-home brightness "Desk lamp" 40
      hue-home brightness "Kitchen" 100 --group
    """
    prepared = _prepare(target, group)
    if not prepared:
        return

    client, resource_path, resource_id, settle_delay = prepared
    _run(set_brightness(client, resource_path, resource_id, brightness, settle_delay),
         f"{target} brightness set to {brightness:g}%")


async def _set_colour_in_gamut(client, resource_path, resource_id, rgb, settle_delay):
    gamut = None
    if resource_path == 'light':
        current = await client.get_light(resource_id)
        light = current.first()
        if light is not None and light.color is not None:
            gamut = light.color.gamut
    return await set_colour(client, resource_path, resource_id, rgb, gamut, settle_delay)


@click.command()
@click.argument('target')
@click.argument('colour')
@group_option
def colour_command(target: str, colour: str, group: bool):
    """Set colour of a light from a hex value.

    The colour is converted to xy chromaticity and moved inside the light's
    gamut. Brightness is not changed; black is rejected (use 'power --off').

    \b
    Examples:
      hue-home colour "Desk lamp" '#ff8800'
      hue-home colour "Living room" 00ffcc --group
    """
    try:
        rgb = parse_hex(colour)
        if rgb == (0, 0, 0):
            raise ValueError("Black has no chromaticity; use 'power --off' instead")
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='COLOUR')

    prepared = _prepare(target, group)
    if not prepared:
        return

    client, resource_path, resource_id, settle_delay = prepared
    _run(_set_colour_in_gamut(client, resource_path, resource_id, rgb, settle_delay),
         f"{target} colour set to {colour}")


def interpolate(start, end, steps: int):
    """Yield steps + 1 colours from start to end inclusive."""
    for i in range(steps + 1):
        t = i / steps if steps else 1.0
        yield tuple(round(a + (b - a) * t) for a, b in zip(start, end))


async def sweep(client, resource_path: str, resource_id: str, start, end,
                steps: int, duration: float, throttle: UpdateThrottle | None = None) -> int:
    """Stream a colour fade through an UpdateThrottle.

    Returns:
        Number of colours submitted (black steps are skipped)
    """
    throttle = throttle or UpdateThrottle(client, resource_path)
    submitted = 0
    try:
        for rgb in interpolate(start, end, steps):
            if rgb == (0, 0, 0):
                continue
            throttle.submit(resource_id, rgb)
            submitted += 1
            if steps:
                await asyncio.sleep(duration / steps)

        # Let the trailing update of the last window go out
        await asyncio.sleep(throttle.interval)
        await throttle.scheduler.drain()
    finally:
        throttle.cancel()
    return submitted


@click.command()
@click.argument('target')
@click.argument('start')
@click.argument('end')
@click.option('--steps', '-n', default=50, type=click.IntRange(1, 1000), help='Number of colour steps')
@click.option('--duration', '-d', default=5.0, type=float, help='Seconds for the whole fade')
@group_option
def sweep_command(target: str, start: str, end: str, steps: int, duration: float, group: bool):
    """Fade a light between two colours.

    Colours are submitted as fast as a colour picker would; at most one
    write per light is sent each throttle interval, always the latest one.

    \b
    Examples:
      hue-home sweep "Desk lamp" '#ff0000' '#0000ff' -n 100 -d 10
    """
    try:
        start_rgb = parse_hex(start)
        end_rgb = parse_hex(end)
    except ValueError as e:
        raise click.BadParameter(str(e))

    prepared = _prepare(target, group)
    if not prepared:
        return

    client, resource_path, resource_id, _ = prepared
    submitted = asyncio.run(sweep(client, resource_path, resource_id, start_rgb, end_rgb, steps, duration))
    click.secho(f"✓ Swept {target} through {submitted} colours", fg='green')
