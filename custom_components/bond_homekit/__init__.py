"""Bond HomeKit integration for Home Assistant.

Exposes the devices behind a Bond hub as smart-home accessories (fans,
lights, fireplaces, shades, switches and buttons), keeps them in sync with
the hub's state and relays accessory writes back to the hub.
"""
from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.typing import ConfigType

from .accessory_manager import BondAccessoryManager
from .bond_api import Bond, BondApi, BondApiError
from .const import (
    CONF_HOST,
    CONF_TOKEN,
    DOMAIN,
    SERVICE_LIST_ACCESSORIES,
    SERVICE_RELOAD,
)
from .platform import BondPlatform

_LOGGER = logging.getLogger(__name__)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the Bond HomeKit component."""
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Bond HomeKit from a config entry."""
    _LOGGER.info("Setting up Bond HomeKit for %s", entry.data[CONF_HOST])

    api = BondApi(
        async_get_clientsession(hass), entry.data[CONF_HOST], entry.data[CONF_TOKEN]
    )
    bond = Bond(api)
    try:
        await bond.async_discover()
    except BondApiError as error:
        raise ConfigEntryNotReady(
            f"Unable to reach Bond at {api.host}: {error}"
        ) from error

    manager = BondAccessoryManager(hass, entry)
    await manager.async_setup()

    platform = BondPlatform(hass, entry, bond, manager)
    await platform.async_setup()

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = {
        "platform": platform,
    }

    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    if not hass.services.has_service(DOMAIN, SERVICE_RELOAD):
        _async_register_services(hass)

    _LOGGER.info("Bond HomeKit setup complete")
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    _LOGGER.info("Unloading Bond HomeKit for %s", entry.data[CONF_HOST])

    if DOMAIN in hass.data and entry.entry_id in hass.data[DOMAIN]:
        platform: BondPlatform = hass.data[DOMAIN][entry.entry_id]["platform"]
        await platform.async_unload()

    if DOMAIN in hass.data:
        hass.data[DOMAIN].pop(entry.entry_id, None)

        # Remove services if this was the last entry
        if not hass.data[DOMAIN]:
            for service in (SERVICE_RELOAD, SERVICE_LIST_ACCESSORIES):
                if hass.services.has_service(DOMAIN, service):
                    hass.services.async_remove(DOMAIN, service)

    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry when options change."""
    await hass.config_entries.async_reload(entry.entry_id)


def _async_register_services(hass: HomeAssistant) -> None:
    """Register the integration services."""

    async def reload_service(call: ServiceCall) -> None:
        """Reload every Bond HomeKit entry."""
        _LOGGER.info("Reloading Bond HomeKit")
        for entry_id in list(hass.data.get(DOMAIN, {})):
            await hass.config_entries.async_reload(entry_id)

    async def list_accessories_service(call: ServiceCall) -> None:
        """Log all current accessories."""
        for entry_id, data in hass.data.get(DOMAIN, {}).items():
            platform: BondPlatform = data["platform"]
            _LOGGER.info(
                "Bond %s accessories: %s",
                platform.bond.bond_id or entry_id,
                [
                    f"{a.display_name} ({', '.join(s.kind.value for s in a.services)})"
                    for a in platform.manager.get_all_accessories()
                ],
            )

    hass.services.async_register(DOMAIN, SERVICE_RELOAD, reload_service)
    hass.services.async_register(DOMAIN, SERVICE_LIST_ACCESSORIES, list_accessories_service)
