"""Manages persisted accessories for Bond HomeKit."""
from __future__ import annotations

import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from .accessory import Accessory
from .bond_device import BondDevice
from .const import STORAGE_KEY, STORAGE_VERSION

_LOGGER = logging.getLogger(__name__)


class BondAccessoryManager:
    """Keeps one accessory per Bond device and persists them across restarts."""

    def __init__(self, hass: HomeAssistant, config_entry: ConfigEntry) -> None:
        """Initialize the accessory manager."""
        self.hass = hass
        self.config_entry = config_entry
        self._store: Store[dict[str, Any]] = Store(
            hass, STORAGE_VERSION, f"{STORAGE_KEY}.{config_entry.entry_id}"
        )
        self._accessories: dict[str, Accessory] = {}

    async def async_setup(self) -> None:
        """Set up the accessory manager."""
        _LOGGER.info("Setting up Bond accessory manager")
        await self._load_data()

    async def async_cleanup(self) -> None:
        """Clean up the accessory manager."""
        _LOGGER.info("Cleaning up Bond accessory manager")
        await self.async_save()

    async def _load_data(self) -> None:
        """Load accessories from storage."""
        data = await self._store.async_load()
        if not data:
            _LOGGER.info("No cached accessories found, starting fresh")
            return

        for uuid, accessory_data in data.get("accessories", {}).items():
            try:
                self._accessories[uuid] = Accessory.from_dict(accessory_data)
            except (KeyError, ValueError) as err:
                _LOGGER.warning("Dropping unreadable cached accessory %s: %s", uuid, err)

        _LOGGER.info("Restored %d cached accessories", len(self._accessories))

    async def async_save(self) -> None:
        """Save accessories to storage."""
        await self._store.async_save(
            {
                "accessories": {
                    uuid: accessory.to_dict()
                    for uuid, accessory in self._accessories.items()
                }
            }
        )
        _LOGGER.debug("Saved %d accessories", len(self._accessories))

    def async_get_or_create(self, device: BondDevice) -> Accessory:
        """Return the accessory for a device, restoring or creating it.

        The device descriptor in the accessory context is always refreshed so
        capability changes on the hub are picked up on the next setup pass.
        """
        accessory = self._accessories.get(device.unique_id)
        if accessory is None:
            accessory = Accessory(device.unique_id, device.display_name)
            self._accessories[device.unique_id] = accessory
            _LOGGER.info("Created accessory %s for device %s", accessory, device.id)
        else:
            _LOGGER.debug("Restored accessory %s", accessory)

        accessory.display_name = device.display_name
        accessory.context["device"] = device.to_dict()
        return accessory

    def async_remove_stale(self, devices: list[BondDevice]) -> list[Accessory]:
        """Remove accessories whose device is no longer on the hub."""
        current = {device.unique_id for device in devices}
        stale = [
            accessory
            for uuid, accessory in self._accessories.items()
            if uuid not in current
        ]
        for accessory in stale:
            del self._accessories[accessory.uuid]
            _LOGGER.info("Removed stale accessory %s", accessory)
        return stale

    def get_accessory(self, uuid: str) -> Accessory | None:
        """Get an accessory by uuid."""
        return self._accessories.get(uuid)

    def get_all_accessories(self) -> list[Accessory]:
        """Get all accessories."""
        return list(self._accessories.values())
