"""Config flow for Bond HomeKit integration."""
import logging
from typing import Any

import voluptuous as vol

from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .bond_api import Bond, BondApi, BondApiError, BondAuthError
from .const import (
    CONF_HOST,
    CONF_INCLUDE_DIMMER,
    CONF_SCAN_INTERVAL,
    CONF_TOKEN,
    DEFAULT_INCLUDE_DIMMER,
    DEFAULT_SCAN_INTERVAL,
    DOMAIN,
)

_LOGGER = logging.getLogger(__name__)

SCAN_INTERVAL_VALIDATOR = vol.All(vol.Coerce(int), vol.Range(min=2, max=300))


async def validate_input(hass: HomeAssistant, data: dict[str, Any]) -> dict[str, Any]:
    """Check the host and token by talking to the hub.

    Returns the hub version payload; raises BondApiError on failure.
    """
    bond = Bond(
        BondApi(async_get_clientsession(hass), data[CONF_HOST], data[CONF_TOKEN])
    )
    await bond.async_discover()
    return bond.version


class BondHomeKitConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Bond HomeKit."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}

        if user_input is not None:
            try:
                version = await validate_input(self.hass, user_input)
            except BondAuthError:
                errors["base"] = "invalid_auth"
            except BondApiError as err:
                _LOGGER.debug("Cannot connect to %s: %s", user_input[CONF_HOST], err)
                errors["base"] = "cannot_connect"
            else:
                bond_id = version.get("bondid") or user_input[CONF_HOST]
                await self.async_set_unique_id(bond_id)
                self._abort_if_unique_id_configured(
                    updates={CONF_HOST: user_input[CONF_HOST]}
                )
                return self.async_create_entry(
                    title=f"Bond {bond_id}",
                    data=user_input,
                )

        data_schema = vol.Schema(
            {
                vol.Required(CONF_HOST): str,
                vol.Required(CONF_TOKEN): str,
                vol.Required(
                    CONF_SCAN_INTERVAL, default=DEFAULT_SCAN_INTERVAL
                ): SCAN_INTERVAL_VALIDATOR,
                vol.Required(
                    CONF_INCLUDE_DIMMER, default=DEFAULT_INCLUDE_DIMMER
                ): bool,
            }
        )

        return self.async_show_form(
            step_id="user",
            data_schema=data_schema,
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: ConfigEntry,
    ) -> OptionsFlow:
        """Get the options flow for this handler."""
        return BondHomeKitOptionsFlow()


class BondHomeKitOptionsFlow(OptionsFlow):
    """Handle options flow for Bond HomeKit."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage polling and accessory options."""
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        current = {**self.config_entry.data, **self.config_entry.options}

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Required(
                        CONF_SCAN_INTERVAL,
                        default=current.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
                    ): SCAN_INTERVAL_VALIDATOR,
                    vol.Required(
                        CONF_INCLUDE_DIMMER,
                        default=current.get(CONF_INCLUDE_DIMMER, DEFAULT_INCLUDE_DIMMER),
                    ): bool,
                }
            ),
        )
