from __future__ import annotations

import pytest

from conftest import FakePlatform, make_accessory
from custom_components.bond_homekit.accessories import (
    CeilingFanAccessory,
    FireplaceAccessory,
    GenericAccessory,
    LightAccessory,
    ShadesAccessory,
    create_accessory,
    percentage_to_speed,
    speed_to_percentage,
)
from custom_components.bond_homekit.accessory import ServiceType
from custom_components.bond_homekit.bond_device import BondState

FAN_ACTIONS = [
    "TurnOn",
    "TurnOff",
    "SetSpeed",
    "ToggleDirection",
    "ToggleUpLight",
    "ToggleDownLight",
    "ToggleLight",
    "StartDimmer",
    "Stop",
    "Preset",
]


def test_speed_conversions() -> None:
    assert percentage_to_speed(0, 3) == 0
    assert percentage_to_speed(1, 3) == 1
    assert percentage_to_speed(34, 3) == 2
    assert percentage_to_speed(100, 3) == 3
    assert speed_to_percentage(1, 3) == 33
    assert speed_to_percentage(3, 3) == 100


@pytest.mark.parametrize(
    ("device_type", "expected"),
    [
        ("CF", CeilingFanAccessory),
        ("FP", FireplaceAccessory),
        ("MS", ShadesAccessory),
        ("LT", LightAccessory),
        ("GX", GenericAccessory),
        ("BD", GenericAccessory),
    ],
)
def test_create_accessory_by_type(platform, bond, device_type, expected) -> None:
    accessory = make_accessory(["TogglePower"], device_type=device_type)
    assert isinstance(create_accessory(platform, bond, accessory), expected)


def test_ceiling_fan_services(bond) -> None:
    platform = FakePlatform(include_dimmer=True)
    accessory = make_accessory(FAN_ACTIONS, device_type="CF")

    fan = CeilingFanAccessory(platform, bond, accessory)

    assert [light.sub_type for light in fan.lights] == ["UpLight", "DownLight"]
    assert fan.dimmer is not None
    assert len(fan.buttons) == 1
    kinds = sorted(s.kind.value for s in accessory.services)
    assert kinds == ["Fan", "Lightbulb", "Lightbulb", "Switch", "Switch"]


def test_ceiling_fan_without_dimmer_option(platform, bond) -> None:
    accessory = make_accessory(FAN_ACTIONS, device_type="CF")
    fan = CeilingFanAccessory(platform, bond, accessory)

    assert fan.dimmer is None


def test_ceiling_fan_state(platform, bond) -> None:
    accessory = make_accessory(
        ["SetSpeed", "ToggleDirection", "ToggleLight"],
        device_type="CF",
        properties={"max_speed": 4},
    )
    fan = CeilingFanAccessory(platform, bond, accessory)

    fan.update_state(BondState(power=1, speed=2, direction=-1, light=1))
    assert fan.fan.on.value is True
    assert fan.fan.rotation_speed.value == 50
    assert fan.fan.rotation_direction.value == 1
    assert fan.lights[0].on.value is True

    fan.update_state(BondState(power=0, speed=2, direction=1, light=0))
    assert fan.fan.on.value is False
    assert fan.fan.rotation_speed.value == 0
    assert fan.fan.rotation_direction.value == 0


@pytest.mark.asyncio
async def test_ceiling_fan_writes(platform, bond, api, completion) -> None:
    accessory = make_accessory(FAN_ACTIONS, device_type="CF")
    fan = CeilingFanAccessory(platform, bond, accessory)
    fan.observe()

    fan.fan.on.handle_write(True, completion)
    fan.fan.rotation_speed.handle_write(100, completion)
    fan.fan.rotation_speed.handle_write(0, completion)
    fan.fan.rotation_direction.handle_write(1, completion)
    fan.lights[0].on.handle_write(True, completion)
    await platform.drain()

    assert completion.results == [None] * 5
    assert api.calls == [
        ("turn_on", "abc123"),
        ("set_speed", "abc123", 3),
        ("turn_off", "abc123"),
        ("toggle_direction", "abc123"),
        ("toggle_up_light", "abc123"),
    ]


@pytest.mark.asyncio
async def test_preset_button_presses_once(platform, bond, api, completion) -> None:
    accessory = make_accessory(["TogglePower", "Open", "Close", "Preset"], device_type="MS")
    shades = ShadesAccessory(platform, bond, accessory)
    shades.observe()

    button = shades.buttons[0]
    button.on.handle_write(True, completion)
    button.on.handle_write(False, completion)
    await platform.drain()

    assert completion.results == [None, None]
    assert api.calls == [("preset", "abc123")]
    shades.cancel()
    assert button.pending_resets == 0


@pytest.mark.asyncio
async def test_shades_target_position(platform, bond, api, completion) -> None:
    accessory = make_accessory(["Open", "Close"], device_type="MS")
    shades = ShadesAccessory(platform, bond, accessory)
    shades.observe()

    shades.covering.target_position.handle_write(30, completion)
    assert shades.covering.target_position.value == 100
    shades.covering.target_position.handle_write(0, completion)
    await platform.drain()

    assert api.calls == [("open", "abc123"), ("close", "abc123")]

    shades.update_state(BondState(open=1))
    assert shades.covering.current_position.value == 100
    assert shades.covering.position_state.value == 2


def test_fireplace_state(platform, bond) -> None:
    accessory = make_accessory(["TogglePower", "SetFlame"], device_type="FP")
    fireplace = FireplaceAccessory(platform, bond, accessory)

    fireplace.update_state(BondState(power=1, flame=60))

    assert fireplace.flame.on.value is True
    assert fireplace.flame.flame.value == 60


@pytest.mark.asyncio
async def test_generic_power_uses_toggle_without_discrete_actions(
    platform, bond, api, completion
) -> None:
    accessory = make_accessory(["TogglePower"])
    generic = GenericAccessory(platform, bond, accessory)
    generic.observe()

    generic.power.on.handle_write(True, completion)
    await platform.drain()
    generic.update_state(BondState(power=0))

    assert api.calls == [("toggle_power", "abc123")]
    assert generic.power.on.value is False
    assert accessory.get_service_by_id(ServiceType.SWITCH, "Power") is not None


@pytest.mark.asyncio
async def test_zero_speed_toggles_power_without_turn_off(
    platform, bond, api, completion
) -> None:
    accessory = make_accessory(["TogglePower", "SetSpeed"], device_type="CF")
    fan = CeilingFanAccessory(platform, bond, accessory)
    fan.observe()

    fan.fan.rotation_speed.handle_write(0, completion)
    await platform.drain()

    assert completion.results == [None]
    assert api.calls == [("toggle_power", "abc123")]
