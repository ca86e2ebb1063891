"""Join flat resource lists into the zone -> grouped light -> lights view.

Bridges hold tens of resources, so lookups are plain linear scans.
"""

from models.types import GroupedLight, Light, Zone, ZoneView

GROUPED_LIGHT = 'grouped_light'


def grouped_light_id(zone: Zone) -> str | None:
    """Return the rid of the zone's grouped_light service, if it has one."""
    for service in zone.services or ():
        if service.rtype == GROUPED_LIGHT:
            return service.rid
    return None


def zone_lights(zone: Zone, lights: list[Light]) -> list[Light]:
    """Lights referenced by the zone's children, in the order of ``lights``."""
    child_ids = {child.rid for child in zone.children}
    return [light for light in lights if light.id in child_ids]


def zone_group(zone: Zone, groups: list[GroupedLight]) -> GroupedLight | None:
    group_id = grouped_light_id(zone)
    if group_id is None:
        return None
    return next((group for group in groups if group.id == group_id), None)


def build_zone_tree(zones: list[Zone], lights: list[Light], groups: list[GroupedLight]) -> list[ZoneView]:
    """Resolve each zone's member lights and grouped light.

    A zone without a grouped_light service, or whose service points at a
    group missing from ``groups``, gets ``group=None``.
    """
    return [
        ZoneView(zone=zone, group=zone_group(zone, groups), lights=zone_lights(zone, lights))
        for zone in zones
    ]
