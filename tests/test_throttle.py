"""Tests for UpdateThrottle in core/throttle.py

Time is simulated with FakeScheduler so no test waits on the wall clock.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.actions import colour_payload
from core.errors import ApiFailure, TransportFailure
from core.throttle import AsyncioScheduler, ThrottleState, UpdateThrottle
from models.types import ErrorDescription, HueResponse, ResourceIdentifier

E1 = (255, 0, 0)
E2 = (0, 255, 0)
E3 = (0, 0, 255)


class FakeTimer:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Logical clock in milliseconds; spawned coroutines are collected."""

    def __init__(self):
        self.now = 0
        self.timers = []
        self.spawned = []

    def call_later(self, delay, callback):
        timer = FakeTimer(self.now + delay * 1000, callback)
        self.timers.append(timer)
        return timer

    def spawn(self, coro):
        self.spawned.append(coro)

    def advance_to(self, ms):
        while True:
            due = sorted(
                (t for t in self.timers if not t.cancelled and t.when <= ms),
                key=lambda t: t.when,
            )
            if not due:
                break
            timer = due[0]
            self.timers.remove(timer)
            self.now = timer.when
            timer.callback()
        self.now = ms

    async def drain(self):
        for coro in self.spawned:
            await coro
        self.spawned = []

    def close(self):
        for coro in self.spawned:
            coro.close()


@pytest.fixture
def bridge():
    client = MagicMock()
    client.config.throttle_interval = 1.0
    client.update = AsyncMock(return_value=HueResponse(data=[ResourceIdentifier('light-a', 'light')]))
    return client


@pytest.fixture
def scheduler():
    fake = FakeScheduler()
    yield fake
    fake.close()


@pytest.fixture
def throttle(bridge, scheduler):
    return UpdateThrottle(bridge, interval=1.0, scheduler=scheduler, on_error=MagicMock())


def sent_states(bridge):
    return [call.args[2] for call in bridge.update.call_args_list]


class TestLeadingAndTrailing:
    """Test the leading/trailing send timeline."""

    def test_burst_sends_first_and_last(self, throttle, scheduler, bridge):
        throttle.submit('light-a', E1)
        scheduler.advance_to(100)
        throttle.submit('light-a', E2)
        scheduler.advance_to(150)
        throttle.submit('light-a', E3)

        assert sent_states(bridge) == [colour_payload(E1)]

        scheduler.advance_to(999)
        assert bridge.update.call_count == 1

        scheduler.advance_to(1000)
        assert sent_states(bridge) == [colour_payload(E1), colour_payload(E3)]

        scheduler.advance_to(5000)
        assert bridge.update.call_count == 2
        assert throttle.state('light-a') is ThrottleState.IDLE

    def test_cancel_drops_trailing_send(self, throttle, scheduler, bridge):
        throttle.submit('light-a', E1)
        scheduler.advance_to(100)
        throttle.submit('light-a', E2)
        scheduler.advance_to(120)
        throttle.cancel()
        scheduler.advance_to(150)
        throttle_state = throttle.state('light-a')
        scheduler.advance_to(5000)

        assert sent_states(bridge) == [colour_payload(E1)]
        assert throttle_state is ThrottleState.IDLE

    def test_single_event_sends_once(self, throttle, scheduler, bridge):
        throttle.submit('light-a', E1)
        scheduler.advance_to(3000)

        bridge.update.assert_called_once_with('light', 'light-a', colour_payload(E1))

    def test_trailing_send_opens_new_window(self, throttle, scheduler, bridge):
        throttle.submit('light-a', E1)
        scheduler.advance_to(500)
        throttle.submit('light-a', E2)
        scheduler.advance_to(1000)
        # Inside the window opened by the trailing send
        throttle.submit('light-a', E3)

        assert bridge.update.call_count == 2
        scheduler.advance_to(2000)
        assert sent_states(bridge)[-1] == colour_payload(E3)

    def test_event_after_window_fires_immediately(self, throttle, scheduler, bridge):
        throttle.submit('light-a', E1)
        scheduler.advance_to(1500)
        throttle.submit('light-a', E2)

        assert sent_states(bridge) == [colour_payload(E1), colour_payload(E2)]


class TestStateMachine:
    """Test per-id state transitions."""

    def test_transitions(self, throttle, scheduler):
        assert throttle.state('light-a') is ThrottleState.IDLE
        throttle.submit('light-a', E1)
        assert throttle.state('light-a') is ThrottleState.IMMEDIATE
        throttle.submit('light-a', E2)
        assert throttle.state('light-a') is ThrottleState.COOLDOWN
        scheduler.advance_to(1000)
        assert throttle.state('light-a') is ThrottleState.IMMEDIATE
        scheduler.advance_to(2000)
        assert throttle.state('light-a') is ThrottleState.IDLE

    def test_ids_are_independent(self, throttle, scheduler, bridge):
        throttle.submit('light-a', E1)
        throttle.submit('light-b', E2)
        throttle.submit('light-a', E3)

        assert [call.args[1] for call in bridge.update.call_args_list] == ['light-a', 'light-b']
        assert throttle.state('light-b') is ThrottleState.IMMEDIATE

        throttle.cancel('light-a')
        scheduler.advance_to(1000)

        assert bridge.update.call_count == 2
        assert throttle.state('light-b') is ThrottleState.IDLE

    def test_submit_after_cancel_starts_fresh(self, throttle, scheduler, bridge):
        throttle.submit('light-a', E1)
        throttle.submit('light-a', E2)
        throttle.cancel()
        throttle.submit('light-a', E3)

        assert sent_states(bridge) == [colour_payload(E1), colour_payload(E3)]
        scheduler.advance_to(1000)
        assert bridge.update.call_count == 2

    def test_black_rejected_before_queueing(self, throttle, bridge):
        with pytest.raises(ValueError):
            throttle.submit('light-a', (0, 0, 0))
        assert throttle.state('light-a') is ThrottleState.IDLE
        bridge.update.assert_not_called()

    def test_interval_defaults_to_config(self, bridge):
        bridge.config.throttle_interval = 0.25
        assert UpdateThrottle(bridge).interval == 0.25

    def test_grouped_light_path(self, bridge, scheduler):
        throttle = UpdateThrottle(bridge, 'grouped_light', interval=1.0, scheduler=scheduler)
        throttle.submit_state('group-1', {'on': {'on': False}})

        bridge.update.assert_called_once_with('grouped_light', 'group-1', {'on': {'on': False}})


class TestErrors:
    """Test reporting of failed throttled writes."""

    @pytest.mark.asyncio
    async def test_transport_failure_reported(self, throttle, scheduler, bridge):
        failure = TransportFailure('bridge unreachable')
        bridge.update.side_effect = failure

        throttle.submit('light-a', E1)
        await scheduler.drain()

        throttle.on_error.assert_called_once_with('light-a', failure)

    @pytest.mark.asyncio
    async def test_bridge_errors_reported_verbatim(self, throttle, scheduler, bridge):
        bridge.update.return_value = HueResponse(errors=[ErrorDescription('color out of gamut')])

        throttle.submit('light-a', E1)
        await scheduler.drain()

        resource_id, error = throttle.on_error.call_args.args
        assert resource_id == 'light-a'
        assert isinstance(error, ApiFailure)
        assert error.errors[0].description == 'color out of gamut'

    @pytest.mark.asyncio
    async def test_success_not_reported(self, throttle, scheduler):
        throttle.submit('light-a', E1)
        await scheduler.drain()

        throttle.on_error.assert_not_called()


class TestAsyncioScheduler:
    """Test the real scheduler on the running loop."""

    @pytest.mark.asyncio
    async def test_real_loop_burst(self, bridge):
        throttle = UpdateThrottle(bridge, interval=0.05, scheduler=AsyncioScheduler())
        throttle.submit('light-a', E1)
        throttle.submit('light-a', E2)
        throttle.submit('light-a', E3)

        await asyncio.sleep(0.1)
        await throttle.scheduler.drain()
        throttle.cancel()

        assert sent_states(bridge) == [colour_payload(E1), colour_payload(E3)]
