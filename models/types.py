"""Type definitions for Hue Home.

Resources returned by the Hue Bridge v2 API are parsed into frozen
dataclasses. Optional sub-objects the bridge leaves out are kept as None
rather than filled with defaults, so callers can tell "absent" from "zero".
"""

from dataclasses import dataclass, field
from typing import TypedDict

from core.errors import ApiFailure


class AuthCredentials(TypedDict):
    """Authentication credentials for Hue Bridge."""
    bridge_ip: str
    api_token: str


def _parse(cls, data):
    """Parse an optional sub-object, keeping absence as None."""
    if data is None:
        return None
    return cls.from_dict(data)


def _parse_list(cls, items) -> tuple:
    return tuple(cls.from_dict(item) for item in items or [])


@dataclass(frozen=True)
class ResourceIdentifier:
    """Reference to another resource on the bridge."""
    rid: str
    rtype: str

    @classmethod
    def from_dict(cls, data: dict) -> 'ResourceIdentifier':
        return cls(rid=data['rid'], rtype=data['rtype'])


@dataclass(frozen=True)
class ErrorDescription:
    """One entry of the envelope's error list."""
    description: str | None

    @classmethod
    def from_dict(cls, data: dict) -> 'ErrorDescription':
        return cls(description=data.get('description'))


@dataclass(frozen=True)
class Metadata:
    name: str
    archetype: str | None = None
    control_id: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> 'Metadata':
        return cls(
            name=data.get('name', 'Unknown'),
            archetype=data.get('archetype'),
            control_id=data.get('control_id'),
        )


@dataclass(frozen=True)
class On:
    on: bool

    @classmethod
    def from_dict(cls, data: dict) -> 'On':
        return cls(on=bool(data['on']))


@dataclass(frozen=True)
class Dimming:
    """Brightness in percent (0-100)."""
    brightness: float
    min_dim_level: float | None = None

    @classmethod
    def from_dict(cls, data: dict) -> 'Dimming':
        return cls(brightness=data['brightness'], min_dim_level=data.get('min_dim_level'))


@dataclass(frozen=True)
class MirekSchema:
    mirek_minimum: int
    mirek_maximum: int

    @classmethod
    def from_dict(cls, data: dict) -> 'MirekSchema':
        return cls(mirek_minimum=data['mirek_minimum'], mirek_maximum=data['mirek_maximum'])


@dataclass(frozen=True)
class ColorTemperature:
    mirek: int | None
    mirek_valid: bool
    mirek_schema: MirekSchema | None = None

    @classmethod
    def from_dict(cls, data: dict) -> 'ColorTemperature':
        return cls(
            mirek=data.get('mirek'),
            mirek_valid=bool(data.get('mirek_valid', False)),
            mirek_schema=_parse(MirekSchema, data.get('mirek_schema')),
        )


@dataclass(frozen=True)
class XyPosition:
    x: float
    y: float

    @classmethod
    def from_dict(cls, data: dict) -> 'XyPosition':
        return cls(x=float(data['x']), y=float(data['y']))

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Gamut:
    """Triangle of chromaticity points a light can reproduce."""
    red: XyPosition
    green: XyPosition
    blue: XyPosition

    @classmethod
    def from_dict(cls, data: dict) -> 'Gamut':
        return cls(
            red=XyPosition.from_dict(data['red']),
            green=XyPosition.from_dict(data['green']),
            blue=XyPosition.from_dict(data['blue']),
        )


@dataclass(frozen=True)
class Color:
    xy: XyPosition
    gamut: Gamut | None = None
    gamut_type: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> 'Color':
        return cls(
            xy=XyPosition.from_dict(data['xy']),
            gamut=_parse(Gamut, data.get('gamut')),
            gamut_type=data.get('gamut_type'),
        )


@dataclass(frozen=True)
class Dynamics:
    speed: float
    speed_valid: bool
    status: str | None = None
    status_values: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> 'Dynamics':
        return cls(
            speed=data.get('speed', 0.0),
            speed_valid=bool(data.get('speed_valid', False)),
            status=data.get('status'),
            status_values=tuple(data.get('status_values') or ()),
        )


@dataclass(frozen=True)
class Effects:
    effect: str | None
    effect_values: tuple[str, ...] = ()
    status: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> 'Effects':
        return cls(
            effect=data.get('effect'),
            effect_values=tuple(data.get('effect_values') or ()),
            status=data.get('status'),
        )


@dataclass(frozen=True)
class GradientPoint:
    color: Color | None

    @classmethod
    def from_dict(cls, data: dict) -> 'GradientPoint':
        return cls(color=_parse(Color, data.get('color')))


@dataclass(frozen=True)
class Gradient:
    points: tuple[GradientPoint, ...]
    mode: str | None = None
    points_capable: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> 'Gradient':
        return cls(
            points=_parse_list(GradientPoint, data.get('points')),
            mode=data.get('mode'),
            points_capable=data.get('points_capable'),
        )


@dataclass(frozen=True)
class PowerUp:
    """Power-restore policy (what a light does when mains power returns)."""
    preset: str
    configured: bool | None = None
    on_mode: str | None = None
    dimming: Dimming | None = None
    color: Color | None = None

    @classmethod
    def from_dict(cls, data: dict) -> 'PowerUp':
        on = data.get('on') or {}
        dimming = (data.get('dimming') or {}).get('dimming')
        color = (data.get('color') or {}).get('color')
        return cls(
            preset=data['preset'],
            configured=data.get('configured'),
            on_mode=on.get('mode'),
            dimming=_parse(Dimming, dimming),
            color=_parse(Color, color),
        )


@dataclass(frozen=True)
class Resource:
    """Fields shared by every addressable resource on the bridge."""
    id: str
    type: str
    id_v1: str | None = None
    metadata: Metadata | None = None
    owner: ResourceIdentifier | None = None
    services: tuple[ResourceIdentifier, ...] | None = None

    @staticmethod
    def _common(data: dict) -> dict:
        services = data.get('services')
        return {
            'id': data['id'],
            'type': data['type'],
            'id_v1': data.get('id_v1'),
            'metadata': _parse(Metadata, data.get('metadata')),
            'owner': _parse(ResourceIdentifier, data.get('owner')),
            'services': None if services is None else _parse_list(ResourceIdentifier, services),
        }

    @property
    def name(self) -> str:
        return self.metadata.name if self.metadata else 'Unknown'

    def identifier(self) -> ResourceIdentifier:
        return ResourceIdentifier(rid=self.id, rtype=self.type)


@dataclass(frozen=True)
class GroupedLight(Resource):
    """Aggregate control surface for the lights of a zone or room."""
    on: On | None = None
    dimming: Dimming | None = None
    color_temperature: ColorTemperature | None = None
    color: Color | None = None
    dynamics: Dynamics | None = None

    @classmethod
    def from_dict(cls, data: dict) -> 'GroupedLight':
        return cls(
            **cls._common(data),
            on=_parse(On, data.get('on')),
            dimming=_parse(Dimming, data.get('dimming')),
            color_temperature=_parse(ColorTemperature, data.get('color_temperature')),
            color=_parse(Color, data.get('color')),
            dynamics=_parse(Dynamics, data.get('dynamics')),
        )

    @property
    def is_on(self) -> bool:
        return bool(self.on and self.on.on)


@dataclass(frozen=True)
class Light(GroupedLight):
    mode: str | None = None
    gradient: Gradient | None = None
    effects: Effects | None = None
    powerup: PowerUp | None = None

    @classmethod
    def from_dict(cls, data: dict) -> 'Light':
        return cls(
            **cls._common(data),
            on=_parse(On, data.get('on')),
            dimming=_parse(Dimming, data.get('dimming')),
            color_temperature=_parse(ColorTemperature, data.get('color_temperature')),
            color=_parse(Color, data.get('color')),
            dynamics=_parse(Dynamics, data.get('dynamics')),
            mode=data.get('mode'),
            gradient=_parse(Gradient, data.get('gradient')),
            effects=_parse(Effects, data.get('effects')),
            powerup=_parse(PowerUp, data.get('powerup')),
        )


@dataclass(frozen=True)
class Zone(Resource):
    children: tuple[ResourceIdentifier, ...] = ()
    grouped_services: tuple[ResourceIdentifier, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> 'Zone':
        return cls(
            **cls._common(data),
            children=_parse_list(ResourceIdentifier, data.get('children')),
            grouped_services=_parse_list(ResourceIdentifier, data.get('grouped_services')),
        )


# Resource path -> model used to parse collection and single-item responses
RESOURCE_MODELS = {
    'light': Light,
    'grouped_light': GroupedLight,
    'zone': Zone,
}


@dataclass(frozen=True)
class HueResponse:
    """The ``{data, errors}`` envelope returned by every API call.

    ``failure`` is set only on responses synthesised by the client after a
    read failed, so an empty but successful fetch has ``failure is None``.
    """
    data: list = field(default_factory=list)
    errors: list[ErrorDescription] = field(default_factory=list)
    failure: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None and not self.errors

    def first(self):
        """Return the single item of a one-resource response, or None."""
        return self.data[0] if self.data else None

    def error_messages(self) -> list[str]:
        return [e.description or 'Unknown error' for e in self.errors]

    def raise_for_errors(self) -> 'HueResponse':
        """Raise the stored failure, or ApiFailure for bridge-reported errors."""
        if self.failure is not None:
            raise self.failure
        if self.errors:
            raise ApiFailure(self.errors)
        return self


@dataclass
class HomeData:
    """Result of fetching lights, zones and grouped lights together."""
    lights: list[Light] = field(default_factory=list)
    zones: list[Zone] = field(default_factory=list)
    groups: list[GroupedLight] = field(default_factory=list)
    errors: list[ErrorDescription] = field(default_factory=list)


@dataclass(frozen=True)
class ZoneView:
    """A zone with its grouped light and member lights resolved."""
    zone: Zone
    group: GroupedLight | None
    lights: list[Light]

    @property
    def id(self) -> str:
        return self.zone.id

    @property
    def name(self) -> str:
        return self.zone.name
