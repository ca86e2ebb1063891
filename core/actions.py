"""State-change intents for lights and grouped lights.

Each intent builds a partial state document and PUTs it. Toggle reads the
current state first. Grouped-light writes can wait a settle delay before
returning, giving the physical lights time to report their new state
before anything re-reads the bridge.
"""

import asyncio

from core.client import failed_response
from core.errors import EmptyResult
from models.colour import clamp_to_gamut, rgb_to_xy
from models.types import HueResponse


def on_payload(on: bool) -> dict:
    return {'on': {'on': on}}


def brightness_payload(brightness: float) -> dict:
    """Turn on and set brightness (percent). Range checks are left to the bridge."""
    return {'on': {'on': True}, 'dimming': {'brightness': float(brightness)}}


def xy_payload(x: float, y: float) -> dict:
    return {'on': {'on': True}, 'color': {'xy': {'x': round(x, 4), 'y': round(y, 4)}}}


def colour_payload(rgb: tuple[int, int, int], gamut=None) -> dict:
    """Convert an RGB colour to an xy update, constrained to the light's gamut.

    Raises:
        ValueError: For black
    """
    x, y = clamp_to_gamut(*rgb_to_xy(*rgb), gamut)
    return xy_payload(x, y)


async def _settle(response: HueResponse, settle_delay: float):
    if settle_delay and not response.errors:
        await asyncio.sleep(settle_delay)


async def apply_state(client, resource_path: str, resource_id: str, partial_state: dict,
                      settle_delay: float = 0) -> HueResponse:
    """PUT a partial state and optionally wait for it to settle.

    Raises:
        TransportFailure, ProtocolFailure, EmptyResult: See BridgeClient.update
    """
    response = await client.update(resource_path, resource_id, partial_state)
    await _settle(response, settle_delay)
    return response


async def set_power(client, resource_path: str, resource_id: str, on: bool,
                    settle_delay: float = 0) -> HueResponse:
    return await apply_state(client, resource_path, resource_id, on_payload(on), settle_delay)


async def set_brightness(client, resource_path: str, resource_id: str, brightness: float,
                         settle_delay: float = 0) -> HueResponse:
    return await apply_state(client, resource_path, resource_id, brightness_payload(brightness), settle_delay)


async def set_colour(client, resource_path: str, resource_id: str, rgb: tuple[int, int, int],
                     gamut=None, settle_delay: float = 0) -> HueResponse:
    return await apply_state(client, resource_path, resource_id, colour_payload(rgb, gamut), settle_delay)


async def toggle(client, resource_path: str, resource_id: str, settle_delay: float = 0) -> HueResponse:
    """Flip the on/off state of a light or grouped light.

    When the current state cannot be read, the failed read response is
    returned and nothing is written.
    """
    current = await client.fetch_one(resource_path, resource_id)
    if not current.ok:
        return current

    resource = current.first()
    if resource.on is None:
        return failed_response(EmptyResult(f"{resource_path} {resource_id} has no on/off state"))

    return await set_power(client, resource_path, resource_id, not resource.on.on, settle_delay)
