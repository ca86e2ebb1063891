"""BridgeClient for the Hue Bridge CLIP v2 API.

Every call returns the bridge's ``{data, errors}`` envelope as a
HueResponse. Reads never raise: a failed GET comes back as an empty
response carrying the failure. Writes raise TransportFailure,
ProtocolFailure or EmptyResult so a caller cannot mistake a lost PUT for a
successful one; errors reported by the bridge itself are returned verbatim.

TLS: the bridge serves a self-signed certificate. Unless a CA bundle is
configured, certificate verification is switched off on this client's own
session (and nowhere else). That is acceptable only because the bridge is a
known device on the local network; do not reuse this session for anything
else.
"""

import asyncio

import click
import requests
from requests.packages.urllib3.exceptions import InsecureRequestWarning

from core.config import BridgeConfig
from core.errors import BridgeError, EmptyResult, ProtocolFailure, TransportFailure
from models.types import (
    RESOURCE_MODELS,
    ErrorDescription,
    GroupedLight,
    HomeData,
    HueResponse,
    Light,
    ResourceIdentifier,
    Zone,
)

# Disable SSL warnings for self-signed certificate
requests.packages.urllib3.disable_warnings(InsecureRequestWarning)


def parse_envelope(payload, model=None, status_code: int | None = None) -> HueResponse:
    """Parse a decoded JSON body into a HueResponse.

    Args:
        payload: Decoded JSON body
        model: Class with a from_dict() used for each data item (raw dicts if None)
        status_code: HTTP status, reported in ProtocolFailure messages

    Raises:
        ProtocolFailure: If the body is not a well-formed envelope
    """
    if not isinstance(payload, dict):
        raise ProtocolFailure(f"Expected an envelope object, got {type(payload).__name__}", status_code)

    data = payload.get('data', [])
    errors = payload.get('errors', [])
    if not isinstance(data, list) or not isinstance(errors, list):
        raise ProtocolFailure("Envelope 'data' and 'errors' must be lists", status_code)

    try:
        items = [model.from_dict(item) for item in data] if model else list(data)
        error_list = [ErrorDescription.from_dict(e) for e in errors]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ProtocolFailure(f"Malformed resource in envelope: {e}", status_code) from e

    return HueResponse(data=items, errors=error_list)


def failed_response(failure: BridgeError) -> HueResponse:
    """Synthesise the soft result returned when a read fails."""
    return HueResponse(
        data=[],
        errors=[ErrorDescription(description=f"Hue API error: {failure}")],
        failure=failure,
    )


class BridgeClient:
    """Authenticated client for one bridge.

    Holds only immutable configuration and a requests session, so a single
    instance can be shared by concurrent callers. Blocking I/O runs in a
    worker thread; every public method is a coroutine.
    """

    def __init__(self, config: BridgeConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({'hue-application-key': config.application_key})
        # Trust the bridge's certificate: pinned bundle if given, else unverified
        self.session.verify = config.ca_bundle or False

    def _url(self, resource_path: str, resource_id: str | None = None) -> str:
        url = f"{self.config.base_url}/resource/{resource_path}"
        if resource_id:
            url = f"{url}/{resource_id}"
        return url

    def _request(self, method: str, url: str, body: dict | None = None, model=None) -> HueResponse:
        """Send one request and parse the envelope (blocking)."""
        try:
            response = self.session.request(method, url, json=body, timeout=self.config.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportFailure(f"{method} {url} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise ProtocolFailure(
                f"{method} {url} returned non-JSON body (HTTP {response.status_code})",
                response.status_code,
            ) from e

        # The bridge reports 4xx/5xx problems inside the envelope, so the
        # status code is only consulted when the body is unusable.
        return parse_envelope(payload, model, response.status_code)

    async def _get(self, url: str, model) -> HueResponse:
        try:
            result = await asyncio.to_thread(self._request, 'GET', url, None, model)
        except BridgeError as e:
            click.echo(f"Hue API error: {e}", err=True)
            return failed_response(e)

        if result.errors:
            click.echo(f"Error from api {url}: {', '.join(result.error_messages())}", err=True)
        return result

    async def fetch_collection(self, resource_path: str, model=None) -> HueResponse:
        """GET every resource of one type.

        Args:
            resource_path: Resource type, e.g. 'light', 'zone', 'grouped_light'
            model: Item class; defaults to the model registered for the path

        Returns:
            HueResponse; on failure empty data, one error and ``failure`` set
        """
        model = model or RESOURCE_MODELS.get(resource_path)
        return await self._get(self._url(resource_path), model)

    async def fetch_one(self, resource_path: str, resource_id: str, model=None) -> HueResponse:
        """GET a single resource by id.

        An envelope with no item and no bridge error is reported as an
        EmptyResult failure rather than a successful empty response.
        """
        model = model or RESOURCE_MODELS.get(resource_path)
        result = await self._get(self._url(resource_path, resource_id), model)
        if result.failure is None and not result.data and not result.errors:
            failure = EmptyResult(f"{resource_path} {resource_id} not found")
            click.echo(f"Hue API error: {failure}", err=True)
            return failed_response(failure)
        return result

    async def update(self, resource_path: str, resource_id: str, partial_state: dict) -> HueResponse:
        """PUT a partial state document.

        Returns:
            HueResponse of ResourceIdentifier; bridge errors are kept verbatim

        Raises:
            TransportFailure: The request did not complete
            ProtocolFailure: The reply was not a valid envelope
            EmptyResult: The bridge returned neither an identifier nor an error
        """
        url = self._url(resource_path, resource_id)
        try:
            result = await asyncio.to_thread(self._request, 'PUT', url, partial_state, ResourceIdentifier)
        except BridgeError as e:
            click.echo(f"Hue API error: {e}", err=True)
            raise

        if result.errors:
            click.echo(f"Error updating {resource_path} {resource_id}: {', '.join(result.error_messages())}", err=True)
        elif not result.data:
            raise EmptyResult(f"Update of {resource_path} {resource_id} returned no identifier")
        return result

    async def fetch_home(self) -> HomeData:
        """Fetch lights, zones and grouped lights concurrently.

        If any of the three fails, all lists are empty and the failures are
        reported in ``errors``; partial results are never merged.
        """
        lights, zones, groups = await asyncio.gather(
            self.fetch_collection('light'),
            self.fetch_collection('zone'),
            self.fetch_collection('grouped_light'),
        )

        errors = [e for response in (lights, zones, groups) if not response.ok for e in response.errors]
        if errors:
            click.echo("get home data failed", err=True)
            return HomeData(errors=errors)

        return HomeData(lights=lights.data, zones=zones.data, groups=groups.data)

    async def get_light(self, light_id: str) -> HueResponse:
        return await self.fetch_one('light', light_id, Light)

    async def get_grouped_light(self, group_id: str) -> HueResponse:
        return await self.fetch_one('grouped_light', group_id, GroupedLight)

    async def get_zones(self) -> HueResponse:
        return await self.fetch_collection('zone', Zone)

    async def update_light(self, light_id: str, partial_state: dict) -> HueResponse:
        return await self.update('light', light_id, partial_state)

    async def update_grouped_light(self, group_id: str, partial_state: dict) -> HueResponse:
        return await self.update('grouped_light', group_id, partial_state)
