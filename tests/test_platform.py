from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from conftest import make_accessory
from custom_components.bond_homekit.accessories import create_accessory
from custom_components.bond_homekit.bond_api import BondApiError
from custom_components.bond_homekit.bond_device import BondState
from custom_components.bond_homekit.platform import BondPlatform


def _platform(bond, options: dict | None = None, data: dict | None = None) -> BondPlatform:
    entry = MagicMock()
    entry.options = options or {}
    entry.data = data or {}
    return BondPlatform(MagicMock(), entry, bond, MagicMock())


def test_options_override_entry_data(bond) -> None:
    platform = _platform(
        bond,
        options={"scan_interval": 30},
        data={"scan_interval": 5, "include_dimmer": True},
    )

    assert platform.scan_interval.total_seconds() == 30
    assert platform.include_dimmer is True


def test_side_channel_logs_with_accessory_name(bond, caplog) -> None:
    platform = _platform(bond)
    accessory = make_accessory([], name="Porch")

    with caplog.at_level(logging.DEBUG):
        platform.debug(accessory, "Set power: True")
        platform.error(accessory, "Error setting power: boom")

    assert "[Porch] Set power: True" in caplog.text
    assert any(
        record.levelno == logging.ERROR and "[Porch] Error setting power: boom" in record.message
        for record in caplog.records
    )


@pytest.mark.asyncio
async def test_refresh_continues_past_failing_device(bond, api, caplog) -> None:
    platform = _platform(bond)
    fan = create_accessory(
        platform, bond, make_accessory(["ToggleLight"], device_type="LT", device_id="one")
    )
    broken = create_accessory(
        platform, bond, make_accessory(["TogglePower"], device_id="two", name="Garage")
    )
    platform.accessories = {
        fan.accessory.uuid: fan,
        broken.accessory.uuid: broken,
    }
    api.states = {"one": BondState(light=1), "two": BondApiError("offline")}

    await platform.async_refresh()

    assert fan.light.on.value is True
    assert "[Garage] Error getting state: offline" in caplog.text
