"""Rate limiting for streams of colour changes.

Dragging a colour picker produces dozens of events a second; the bridge
copes with roughly one write per second per light. UpdateThrottle sends the
first event of a burst at once, keeps only the latest event while the
window is open, and sends that one when the window closes.

Each resource id has its own window, tracked as a small state machine:

    IDLE --submit--> IMMEDIATE --submit--> COOLDOWN
    IMMEDIATE --window elapsed--> IDLE
    COOLDOWN --window elapsed (sends queued value)--> IMMEDIATE
    any --cancel--> IDLE (queued value dropped)
"""

import asyncio
from dataclasses import dataclass
from enum import Enum

import click

from core.actions import colour_payload
from core.errors import ApiFailure, BridgeError


class ThrottleState(Enum):
    IDLE = 'idle'
    IMMEDIATE = 'immediate'
    COOLDOWN = 'cooldown'


@dataclass
class _Window:
    state: ThrottleState = ThrottleState.IDLE
    pending: dict | None = None
    timer: object = None


class AsyncioScheduler:
    """Timers and tasks on the running event loop."""

    def __init__(self):
        self._tasks = set()

    def call_later(self, delay: float, callback):
        return asyncio.get_running_loop().call_later(delay, callback)

    def spawn(self, coro):
        task = asyncio.get_running_loop().create_task(coro)
        # Keep a reference until the task finishes
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self):
        """Wait for every send spawned so far."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))


def report_error(resource_id: str, error: BridgeError):
    click.echo(f"✗ Update of {resource_id} failed: {error}", err=True)


class UpdateThrottle:
    """Coalesce per-resource updates to at most one write per interval.

    Args:
        client: BridgeClient used for the writes
        resource_path: 'light' or 'grouped_light'
        interval: Window length in seconds (default: client config)
        scheduler: Object with call_later(delay, fn) and spawn(coro)
        on_error: Called with (resource_id, BridgeError) when a write fails
    """

    def __init__(self, client, resource_path: str = 'light', interval: float | None = None,
                 scheduler=None, on_error=report_error):
        self.client = client
        self.resource_path = resource_path
        self.interval = client.config.throttle_interval if interval is None else interval
        self.scheduler = scheduler or AsyncioScheduler()
        self.on_error = on_error
        self._windows: dict[str, _Window] = {}

    def state(self, resource_id: str) -> ThrottleState:
        window = self._windows.get(resource_id)
        return window.state if window else ThrottleState.IDLE

    def submit(self, resource_id: str, rgb: tuple[int, int, int], gamut=None):
        """Queue a colour change for a resource.

        Raises:
            ValueError: For black, which has no chromaticity
        """
        self.submit_state(resource_id, colour_payload(rgb, gamut))

    def submit_state(self, resource_id: str, partial_state: dict):
        """Queue any partial state document for a resource."""
        window = self._windows.get(resource_id)
        if window is None:
            window = _Window()
            self._windows[resource_id] = window
            self._fire(resource_id, window, partial_state)
        else:
            window.pending = partial_state
            window.state = ThrottleState.COOLDOWN

    def cancel(self, resource_id: str | None = None):
        """Stop scheduling without sending queued values.

        Args:
            resource_id: Window to close, or None for all of them
        """
        ids = [resource_id] if resource_id is not None else list(self._windows)
        for rid in ids:
            window = self._windows.pop(rid, None)
            if window and window.timer is not None:
                window.timer.cancel()

    def _fire(self, resource_id: str, window: _Window, partial_state: dict):
        window.state = ThrottleState.IMMEDIATE
        window.pending = None
        window.timer = self.scheduler.call_later(self.interval, lambda: self._elapsed(resource_id, window))
        # The request is created now so it is issued in submission order
        request = self.client.update(self.resource_path, resource_id, partial_state)
        self.scheduler.spawn(self._watch(resource_id, request))

    def _elapsed(self, resource_id: str, window: _Window):
        # A cancelled or replaced window must never fire
        if self._windows.get(resource_id) is not window:
            return

        window.timer = None
        if window.state is ThrottleState.COOLDOWN:
            self._fire(resource_id, window, window.pending)
        else:
            del self._windows[resource_id]

    async def _watch(self, resource_id: str, request):
        try:
            response = await request
        except BridgeError as e:
            self.on_error(resource_id, e)
            return

        if response.errors:
            self.on_error(resource_id, ApiFailure(response.errors))
