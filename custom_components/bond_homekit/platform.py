"""Bond hub platform: builds accessories and keeps them in sync."""
from __future__ import annotations

from collections.abc import Coroutine
from datetime import datetime, timedelta
import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import CALLBACK_TYPE, HomeAssistant
from homeassistant.helpers.event import async_track_time_interval

from .accessories import BondAccessory, create_accessory
from .accessory import Accessory
from .accessory_manager import BondAccessoryManager
from .bond_api import Bond, BondApiError
from .const import (
    CONF_INCLUDE_DIMMER,
    CONF_SCAN_INTERVAL,
    DEFAULT_INCLUDE_DIMMER,
    DEFAULT_SCAN_INTERVAL,
)

_LOGGER = logging.getLogger(__name__)


class BondPlatform:
    """Owns the accessories of one Bond hub."""

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        bond: Bond,
        manager: BondAccessoryManager,
    ) -> None:
        """Initialize the platform."""
        self.hass = hass
        self.entry = entry
        self.bond = bond
        self.manager = manager
        self.accessories: dict[str, BondAccessory] = {}
        self._unsub_refresh: CALLBACK_TYPE | None = None

    def _option(self, key: str, default: Any) -> Any:
        return self.entry.options.get(key, self.entry.data.get(key, default))

    @property
    def include_dimmer(self) -> bool:
        """Whether dimmer switches are exposed for fans that support them."""
        return bool(self._option(CONF_INCLUDE_DIMMER, DEFAULT_INCLUDE_DIMMER))

    @property
    def scan_interval(self) -> timedelta:
        """Return the state polling interval."""
        return timedelta(seconds=self._option(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL))

    # ------------------------------------------------------------------
    # Side channel
    # ------------------------------------------------------------------

    def debug(self, accessory: Accessory, message: str) -> None:
        """Log a debug message for an accessory."""
        _LOGGER.debug("[%s] %s", accessory.display_name, message)

    def error(self, accessory: Accessory, message: str) -> None:
        """Log an error for an accessory."""
        _LOGGER.error("[%s] %s", accessory.display_name, message)

    def async_create_task(self, target: Coroutine[Any, Any, None], name: str) -> None:
        """Run a hub command in the background."""
        self.entry.async_create_background_task(self.hass, target, name)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def async_setup(self) -> None:
        """Build an accessory per device and start polling."""
        devices = self.bond.devices
        for device in devices:
            accessory = self.manager.async_get_or_create(device)
            composition = create_accessory(self, self.bond, accessory)
            composition.observe()
            self.accessories[accessory.uuid] = composition

        self.manager.async_remove_stale(devices)
        await self.manager.async_save()

        await self.async_refresh()
        self._unsub_refresh = async_track_time_interval(
            self.hass, self._async_scheduled_refresh, self.scan_interval
        )
        _LOGGER.info(
            "Bond %s ready with %d accessories", self.bond.bond_id, len(self.accessories)
        )

    async def _async_scheduled_refresh(self, now: datetime) -> None:
        await self.async_refresh()

    async def async_refresh(self) -> None:
        """Poll every device and push its state into its accessory."""
        for composition in list(self.accessories.values()):
            try:
                state = await self.bond.api.async_get_state(composition.device)
            except BondApiError as err:
                self.error(composition.accessory, f"Error getting state: {err}")
                continue
            composition.update_state(state)

    async def async_unload(self) -> None:
        """Stop polling and persist accessories."""
        if self._unsub_refresh is not None:
            self._unsub_refresh()
            self._unsub_refresh = None
        for composition in self.accessories.values():
            composition.cancel()
        await self.manager.async_cleanup()
        self.accessories.clear()
