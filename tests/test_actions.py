"""Tests for state-change intents in core/actions.py"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.actions import (
    brightness_payload,
    colour_payload,
    on_payload,
    set_brightness,
    set_colour,
    set_power,
    toggle,
    xy_payload,
)
from core.errors import EmptyResult, TransportFailure
from models.types import ErrorDescription, Gamut, HueResponse, Light, ResourceIdentifier
from tests.conftest import GAMUT_C, light_dict


def ack(resource_id='light-a', rtype='light'):
    return HueResponse(data=[ResourceIdentifier(resource_id, rtype)])


@pytest.fixture
def bridge():
    client = MagicMock()
    client.update = AsyncMock(return_value=ack())
    client.fetch_one = AsyncMock()
    return client


class TestPayloads:
    """Test partial state documents."""

    def test_on_payload(self):
        assert on_payload(True) == {'on': {'on': True}}
        assert on_payload(False) == {'on': {'on': False}}

    def test_brightness_payload_turns_on(self):
        assert brightness_payload(40) == {'on': {'on': True}, 'dimming': {'brightness': 40.0}}

    def test_brightness_not_range_checked(self):
        # The bridge rejects it and its message is shown to the user
        assert brightness_payload(150)['dimming']['brightness'] == 150.0

    def test_xy_payload_rounds(self):
        payload = xy_payload(0.640074, 0.329970)
        assert payload['color'] == {'xy': {'x': 0.6401, 'y': 0.33}}
        assert payload['on'] == {'on': True}

    def test_colour_payload_red(self):
        payload = colour_payload((255, 0, 0))
        assert payload['color']['xy'] == pytest.approx({'x': 0.6401, 'y': 0.33}, abs=1e-4)

    def test_colour_payload_moved_into_gamut(self):
        gamut = Gamut.from_dict({
            'red': {'x': 0.675, 'y': 0.322},
            'green': {'x': 0.409, 'y': 0.518},
            'blue': {'x': 0.167, 'y': 0.04},
        })
        xy = colour_payload((0, 255, 0), gamut)['color']['xy']

        # Gamut A green is far from sRGB green
        assert xy['y'] <= 0.518 + 1e-4

    def test_colour_payload_black_rejected(self):
        with pytest.raises(ValueError):
            colour_payload((0, 0, 0))


class TestWrites:
    """Test PUT intents."""

    @pytest.mark.asyncio
    async def test_set_power(self, bridge):
        result = await set_power(bridge, 'light', 'light-a', False)

        bridge.update.assert_awaited_once_with('light', 'light-a', {'on': {'on': False}})
        assert result.ok

    @pytest.mark.asyncio
    async def test_set_brightness_grouped(self, bridge):
        await set_brightness(bridge, 'grouped_light', 'group-1', 25)

        bridge.update.assert_awaited_once_with(
            'grouped_light', 'group-1', {'on': {'on': True}, 'dimming': {'brightness': 25.0}}
        )

    @pytest.mark.asyncio
    async def test_set_colour_uses_gamut(self, bridge):
        gamut = Gamut.from_dict(GAMUT_C)

        await set_colour(bridge, 'light', 'light-a', (0, 0, 255), gamut)

        sent = bridge.update.call_args.args[2]
        assert sent['color']['xy']['y'] >= 0.0475 - 1e-4

    @pytest.mark.asyncio
    async def test_settle_delay_after_success(self, bridge):
        with patch('core.actions.asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
            await set_power(bridge, 'grouped_light', 'group-1', True, settle_delay=2.0)

        mock_sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_no_settle_when_bridge_reports_errors(self, bridge):
        bridge.update.return_value = HueResponse(errors=[ErrorDescription('device unreachable')])

        with patch('core.actions.asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
            result = await set_power(bridge, 'grouped_light', 'group-1', True, settle_delay=2.0)

        mock_sleep.assert_not_awaited()
        assert result.error_messages() == ['device unreachable']

    @pytest.mark.asyncio
    async def test_no_settle_by_default(self, bridge):
        with patch('core.actions.asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
            await set_power(bridge, 'light', 'light-a', True)

        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_failure_propagates(self, bridge):
        bridge.update.side_effect = TransportFailure('down')

        with pytest.raises(TransportFailure):
            await set_power(bridge, 'light', 'light-a', True)


class TestToggle:
    """Test read-then-write toggling."""

    @pytest.mark.asyncio
    async def test_on_becomes_off(self, bridge):
        bridge.fetch_one.return_value = HueResponse(data=[Light.from_dict(light_dict('light-a', 'A', on=True))])

        await toggle(bridge, 'light', 'light-a')

        bridge.fetch_one.assert_awaited_once_with('light', 'light-a')
        bridge.update.assert_awaited_once_with('light', 'light-a', {'on': {'on': False}})

    @pytest.mark.asyncio
    async def test_off_becomes_on(self, bridge):
        bridge.fetch_one.return_value = HueResponse(data=[Light.from_dict(light_dict('light-a', 'A', on=False))])

        await toggle(bridge, 'light', 'light-a')

        bridge.update.assert_awaited_once_with('light', 'light-a', {'on': {'on': True}})

    @pytest.mark.asyncio
    async def test_failed_read_writes_nothing(self, bridge):
        failed = HueResponse(errors=[ErrorDescription('Hue API error: timed out')], failure=TransportFailure('timed out'))
        bridge.fetch_one.return_value = failed

        result = await toggle(bridge, 'light', 'light-a')

        assert result is failed
        bridge.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_resource_without_on_state(self, bridge):
        data = light_dict('light-a', 'A')
        del data['on']
        bridge.fetch_one.return_value = HueResponse(data=[Light.from_dict(data)])

        result = await toggle(bridge, 'light', 'light-a')

        assert isinstance(result.failure, EmptyResult)
        assert not result.ok
        bridge.update.assert_not_called()
