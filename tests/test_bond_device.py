from __future__ import annotations

from custom_components.bond_homekit.bond_device import (
    BondDevice,
    BondState,
    can_set_speed,
    has_brightness,
    has_flame,
    has_light,
    has_reverse_switch,
    has_separate_lights,
    max_speed,
)


def test_capabilities_follow_actions() -> None:
    device = BondDevice(
        id="1",
        name="Fan",
        type="CF",
        actions=["SetSpeed", "ToggleDirection", "ToggleLight", "SetBrightness"],
    )

    assert can_set_speed(device)
    assert has_reverse_switch(device)
    assert has_light(device)
    assert has_brightness(device)
    assert not has_flame(device)
    assert not has_separate_lights(device)


def test_separate_lights_need_both_toggles() -> None:
    device = BondDevice(id="1", name="Fan", actions=["ToggleUpLight"])
    assert not has_separate_lights(device)

    device.actions.append("ToggleDownLight")
    assert has_separate_lights(device)


def test_max_speed_defaults_and_tolerates_garbage() -> None:
    assert max_speed(BondDevice(id="1", name="Fan")) == 3
    assert max_speed(BondDevice(id="1", name="Fan", properties={"max_speed": 6})) == 6
    assert max_speed(BondDevice(id="1", name="Fan", properties={"max_speed": "x"})) == 3


def test_device_from_api_payload() -> None:
    device = BondDevice.from_dict(
        {
            "id": "7a1",
            "name": "Fireplace",
            "type": "FP",
            "location": "Den",
            "actions": ["TogglePower", "SetFlame"],
        }
    )

    assert device.display_name == "Den Fireplace"
    assert device.unique_id == "bond_homekit_7a1"
    assert has_flame(device)
    assert BondDevice.from_dict(device.to_dict()) == device


def test_state_ignores_unknown_fields() -> None:
    state = BondState.from_dict({"light": 1, "brightness": 40, "_": "a1b2", "timer": 0})

    assert state.light == 1
    assert state.brightness == 40
    assert state.flame is None
    assert state.up_light is None
