"""Pytest configuration and fixtures for Hue Home tests."""

from unittest.mock import MagicMock

import pytest

from core.client import BridgeClient
from core.config import BridgeConfig


GAMUT_C = {
    'red': {'x': 0.6915, 'y': 0.3038},
    'green': {'x': 0.17, 'y': 0.7},
    'blue': {'x': 0.1532, 'y': 0.0475},
}


def light_dict(light_id, name, on=True, brightness=80.0, xy=None):
    light = {
        'id': light_id,
        'id_v1': f'/lights/{light_id[-1]}',
        'type': 'light',
        'metadata': {'name': name, 'archetype': 'sultan_bulb'},
        'owner': {'rid': f'device-{light_id}', 'rtype': 'device'},
        'on': {'on': on},
        'dimming': {'brightness': brightness, 'min_dim_level': 0.2},
        'mode': 'normal',
    }
    if xy is not None:
        light['color'] = {
            'xy': {'x': xy[0], 'y': xy[1]},
            'gamut': GAMUT_C,
            'gamut_type': 'C',
        }
    return light


def zone_dict(zone_id, name, children, group_id=None):
    services = [{'rid': group_id, 'rtype': 'grouped_light'}] if group_id else []
    return {
        'id': zone_id,
        'type': 'zone',
        'metadata': {'name': name, 'archetype': 'living_room'},
        'children': [{'rid': rid, 'rtype': 'light'} for rid in children],
        'services': services,
    }


def group_dict(group_id, on=True, brightness=50.0):
    return {
        'id': group_id,
        'type': 'grouped_light',
        'owner': {'rid': 'zone-1', 'rtype': 'zone'},
        'on': {'on': on},
        'dimming': {'brightness': brightness},
    }


def envelope(data=None, errors=None):
    return {'data': data or [], 'errors': errors or []}


def http_response(payload, status_code=200):
    """Mock requests.Response whose json() returns payload."""
    response = MagicMock()
    response.status_code = status_code
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def bridge_config():
    return BridgeConfig(bridge_ip='192.168.1.110', application_key='test-key-123')


@pytest.fixture
def mock_session():
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture
def client(bridge_config, mock_session):
    return BridgeClient(bridge_config, session=mock_session)


@pytest.fixture
def home_payloads():
    """Raw collection bodies keyed by resource path."""
    return {
        'light': envelope([
            light_dict('light-a', 'Lamp A', xy=(0.6401, 0.33)),
            light_dict('light-b', 'Lamp B', on=False),
            light_dict('light-c', 'Lamp C'),
        ]),
        'zone': envelope([
            zone_dict('zone-1', 'Living room', ['light-b', 'light-a'], group_id='group-1'),
            zone_dict('zone-2', 'Hallway', ['light-c']),
        ]),
        'grouped_light': envelope([group_dict('group-1')]),
    }


@pytest.fixture
def route_requests(mock_session, home_payloads):
    """Answer session.request() from home_payloads by URL suffix.

    Returns the dict so tests can replace entries with exceptions or other
    payloads before making calls.
    """
    routes = dict(home_payloads)

    def fake_request(method, url, json=None, timeout=None):
        path = url.rsplit('/resource/', 1)[1]
        answer = routes[path]
        if isinstance(answer, Exception):
            raise answer
        return http_response(answer)

    mock_session.request.side_effect = fake_request
    return routes
