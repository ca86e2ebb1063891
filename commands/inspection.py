"""
Inspection commands.

Commands for viewing zones, their grouped lights and member lights, and the
details of a single light.
"""

import asyncio

import click
from models.aggregate import build_zone_tree, grouped_light_id
from models.colour import to_hex, xy_to_display_rgb
from models.utils import find_resource, find_similar_strings, get_client


def format_state(resource) -> str:
    """One-line on/off, brightness and colour summary of a light or group."""
    if resource.on is None:
        return click.style('UNKNOWN', fg='yellow')

    if not resource.on.on:
        return click.style('OFF', fg='red')

    parts = [click.style('ON ', fg='green')]
    if resource.dimming is not None:
        parts.append(f"{resource.dimming.brightness:5.1f}%")
    if resource.color is not None:
        parts.append(to_hex(xy_to_display_rgb(resource.color.xy.x, resource.color.xy.y)))
    elif resource.color_temperature is not None and resource.color_temperature.mirek:
        parts.append(f"{resource.color_temperature.mirek} mirek")
    return '  '.join(parts)


def echo_errors(errors, heading: str = "Hue errors:"):
    click.secho(heading, fg='red', bold=True)
    for error in errors:
        click.echo(f"  • {error.description or 'Unknown error'}")


@click.command(name='home')
def home_command():
    """Show zones with their grouped light and member lights."""
    client = get_client()
    if not client:
        return

    home = asyncio.run(client.fetch_home())

    if not home.zones:
        click.echo("Looks like your home has no lights "
                   "(or there was an error while connecting to the bridge)")
        if home.errors:
            echo_errors(home.errors, "Unable to load your lights because:")
        return

    click.secho("\n=== Zones ===\n", fg='cyan', bold=True)

    for view in build_zone_tree(home.zones, home.lights, home.groups):
        header = click.style(view.name, bold=True)
        if view.group is not None:
            header += f"  [{format_state(view.group)}]"
        click.echo(header)

        if not view.lights:
            click.echo("  (no lights)")
        width = max((len(light.name) for light in view.lights), default=0)
        for light in view.lights:
            click.echo(f"  • {light.name.ljust(width)}  {format_state(light)}")
        click.echo()


@click.command(name='light')
@click.argument('target')
def light_command(target: str):
    """Show details of one light (id or name)."""
    client = get_client()
    if not client:
        return

    light_id = resolve_target(client, 'light', target)
    if light_id is None:
        return

    response = asyncio.run(client.get_light(light_id))
    light = response.first()
    if light is None:
        echo_errors(response.errors, "Light not found, try again:")
        return
    if response.errors:
        echo_errors(response.errors)

    click.secho(f"\n=== {light.name} ===\n", fg='cyan', bold=True)
    click.echo(f"  ID:          {light.id}")
    if light.metadata and light.metadata.archetype:
        click.echo(f"  Archetype:   {light.metadata.archetype}")
    click.echo(f"  State:       {format_state(light)}")

    if light.dimming is not None and light.dimming.min_dim_level is not None:
        click.echo(f"  Min dim:     {light.dimming.min_dim_level}%")
    if light.color is not None:
        xy = light.color.xy
        click.echo(f"  Colour xy:   ({xy.x:.4f}, {xy.y:.4f})")
        if light.color.gamut_type:
            click.echo(f"  Gamut:       {light.color.gamut_type}")
    if light.color_temperature is not None and light.color_temperature.mirek_schema is not None:
        schema = light.color_temperature.mirek_schema
        click.echo(f"  Mirek range: {schema.mirek_minimum}-{schema.mirek_maximum}")
    if light.effects is not None and light.effects.effect:
        click.echo(f"  Effect:      {light.effects.effect}")
    if light.powerup is not None:
        click.echo(f"  Power-up:    {light.powerup.preset}")
    click.echo()


def resolve_target(client, resource_path: str, target: str) -> str | None:
    """Turn a command-line target (id or name) into a resource id.

    Grouped lights have no names of their own, so for 'grouped_light' the
    target may also be the name of the zone that owns it.
    """
    lookup_path = 'zone' if resource_path == 'grouped_light' else resource_path
    response = asyncio.run(client.fetch_collection(lookup_path))
    if not response.ok:
        # Fall back to treating the target as an id
        return target

    resource = find_resource(response.data, target)
    if resource is None:
        if resource_path == 'grouped_light':
            return target
        click.echo(f"Error: {resource_path.replace('_', ' ').capitalize()} '{target}' not found.")
        suggestions = find_similar_strings(target, [r.name for r in response.data])
        if suggestions:
            click.echo("Did you mean one of these?")
            for suggestion in suggestions:
                click.echo(f"  - {suggestion}")
        return None

    if resource_path == 'grouped_light':
        group_id = grouped_light_id(resource)
        if group_id is None:
            click.echo(f"Error: Zone '{resource.name}' has no grouped light.")
        return group_id

    return resource.id
