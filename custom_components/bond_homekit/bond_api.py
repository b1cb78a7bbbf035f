"""Bond local HTTP API client for Bond HomeKit.

Wraps the hub's v2 REST API (http://docs-local.appbond.com/) on a shared
aiohttp session. Every failure is raised as BondApiError so callers only
have to handle one exception family.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from http import HTTPStatus
import logging
from typing import Any

import aiohttp

from .bond_device import BondDevice, BondState
from .const import (
    ACTION_CLOSE,
    ACTION_OPEN,
    ACTION_PRESET,
    ACTION_SET_BRIGHTNESS,
    ACTION_SET_FLAME,
    ACTION_SET_SPEED,
    ACTION_START_DIMMER,
    ACTION_STOP,
    ACTION_TOGGLE_DIRECTION,
    ACTION_TOGGLE_DOWN_LIGHT,
    ACTION_TOGGLE_LIGHT,
    ACTION_TOGGLE_POWER,
    ACTION_TOGGLE_UP_LIGHT,
    ACTION_TURN_OFF,
    ACTION_TURN_ON,
    DEFAULT_REQUEST_TIMEOUT,
)

_LOGGER = logging.getLogger(__name__)

TOKEN_HEADER = "BOND-Token"


class BondApiError(Exception):
    """Raised when a request to the Bond hub fails."""


class BondAuthError(BondApiError):
    """Raised when the hub rejects the local token."""


class BondApi:
    """Async client for one Bond hub."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        host: str,
        token: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """Initialize the client."""
        self._session = session
        self._host = host
        self._token = token
        self._timeout = timeout

    @property
    def host(self) -> str:
        """Return the hub address."""
        return self._host

    def _url(self, path: str) -> str:
        return f"http://{self._host}/v2/{path}"

    async def _request(
        self, method: str, path: str, payload: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Issue a request and return the decoded JSON body."""
        url = self._url(path)
        _LOGGER.debug("%s %s %s", method, url, payload)
        try:
            async with asyncio.timeout(self._timeout):
                async with self._session.request(
                    method,
                    url,
                    json=payload,
                    headers={TOKEN_HEADER: self._token},
                ) as response:
                    if response.status == HTTPStatus.UNAUTHORIZED:
                        raise BondAuthError(f"Unauthorized request to {url}")
                    if response.status >= HTTPStatus.BAD_REQUEST:
                        raise BondApiError(
                            f"{method} {url} failed with status {response.status}"
                        )
                    if response.status == HTTPStatus.NO_CONTENT:
                        return {}
                    body = await response.json(content_type=None)
        except TimeoutError as err:
            raise BondApiError(f"Timed out talking to {self._host}") from err
        except aiohttp.ClientError as err:
            raise BondApiError(f"Error talking to {self._host}: {err}") from err
        except ValueError as err:
            raise BondApiError(f"Invalid response from {self._host}: {err}") from err

        return body or {}

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def async_get_version(self) -> dict[str, Any]:
        """Return the hub's version payload (contains bondid, fw_ver)."""
        return await self._request("GET", "sys/version")

    async def async_get_device_ids(self) -> list[str]:
        """Return the ids of all devices registered on the hub."""
        data = await self._request("GET", "devices")
        return [key for key in data if not key.startswith("_")]

    async def async_get_device(self, device_id: str) -> BondDevice:
        """Fetch a device description including its properties."""
        data = await self._request("GET", f"devices/{device_id}")
        properties = await self._request("GET", f"devices/{device_id}/properties")
        return BondDevice.from_dict(
            {
                **data,
                "id": device_id,
                "properties": {
                    key: value
                    for key, value in properties.items()
                    if not key.startswith("_")
                },
            }
        )

    async def async_get_state(self, device: BondDevice) -> BondState:
        """Fetch the current state snapshot for a device."""
        data = await self._request("GET", f"devices/{device.id}/state")
        return BondState.from_dict(data)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def async_action(
        self, device: BondDevice, action: str, argument: Any = None
    ) -> None:
        """Invoke an action on a device."""
        payload = {} if argument is None else {"argument": argument}
        await self._request("PUT", f"devices/{device.id}/actions/{action}", payload)

    async def toggle_power(self, device: BondDevice) -> None:
        """Toggle device power."""
        await self.async_action(device, ACTION_TOGGLE_POWER)

    async def turn_on(self, device: BondDevice) -> None:
        """Turn the device on."""
        await self.async_action(device, ACTION_TURN_ON)

    async def turn_off(self, device: BondDevice) -> None:
        """Turn the device off."""
        await self.async_action(device, ACTION_TURN_OFF)

    async def toggle_light(self, device: BondDevice) -> None:
        """Toggle the main light."""
        await self.async_action(device, ACTION_TOGGLE_LIGHT)

    async def toggle_up_light(self, device: BondDevice) -> None:
        """Toggle the up light."""
        await self.async_action(device, ACTION_TOGGLE_UP_LIGHT)

    async def toggle_down_light(self, device: BondDevice) -> None:
        """Toggle the down light."""
        await self.async_action(device, ACTION_TOGGLE_DOWN_LIGHT)

    async def set_brightness(self, device: BondDevice, value: int) -> None:
        """Set light brightness (1-100)."""
        await self.async_action(device, ACTION_SET_BRIGHTNESS, value)

    async def set_flame(self, device: BondDevice, value: int) -> None:
        """Set fireplace flame level (1-100)."""
        await self.async_action(device, ACTION_SET_FLAME, value)

    async def set_speed(self, device: BondDevice, speed: int) -> None:
        """Set fan speed level."""
        await self.async_action(device, ACTION_SET_SPEED, speed)

    async def toggle_direction(self, device: BondDevice) -> None:
        """Reverse fan direction."""
        await self.async_action(device, ACTION_TOGGLE_DIRECTION)

    async def open(self, device: BondDevice) -> None:
        """Open shades."""
        await self.async_action(device, ACTION_OPEN)

    async def close(self, device: BondDevice) -> None:
        """Close shades."""
        await self.async_action(device, ACTION_CLOSE)

    async def preset(self, device: BondDevice) -> None:
        """Press the device's preset button."""
        await self.async_action(device, ACTION_PRESET)

    async def start_dimmer(self, device: BondDevice) -> None:
        """Start cycling light brightness."""
        await self.async_action(device, ACTION_START_DIMMER)

    async def stop(self, device: BondDevice) -> None:
        """Stop any in-progress action."""
        await self.async_action(device, ACTION_STOP)


@dataclass
class Bond:
    """A Bond hub: its API client plus what was discovered on it."""

    api: BondApi
    version: dict[str, Any] = field(default_factory=dict)
    devices: list[BondDevice] = field(default_factory=list)

    @property
    def bond_id(self) -> str | None:
        """Return the hub serial (bondid) if known."""
        return self.version.get("bondid")

    async def async_discover(self) -> list[BondDevice]:
        """Refresh hub version and the device list."""
        self.version = await self.api.async_get_version()
        device_ids = await self.api.async_get_device_ids()
        self.devices = [
            await self.api.async_get_device(device_id) for device_id in device_ids
        ]
        _LOGGER.info(
            "Discovered %d devices on Bond %s", len(self.devices), self.bond_id
        )
        return self.devices
