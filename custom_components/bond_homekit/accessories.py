"""Per-device-type accessory compositions for Bond HomeKit.

Each composition builds the service adapters a Bond device type needs and
wires the writes the adapters leave to their caller (fan power, speed and
direction, shade position, generic power and the extra buttons).
"""
from __future__ import annotations

from collections.abc import Coroutine
import logging
import math
from typing import TYPE_CHECKING, Any

from .accessory import Accessory, Completion
from .bond_api import Bond
from .bond_device import (
    BondState,
    has_dimmer,
    has_light,
    has_preset,
    has_separate_lights,
    max_speed,
)
from .const import (
    ACTION_TURN_OFF,
    ACTION_TURN_ON,
    DEVICE_TYPE_CEILING_FAN,
    DEVICE_TYPE_FIREPLACE,
    DEVICE_TYPE_LIGHT,
    DEVICE_TYPE_MOTORIZED_SHADES,
    POSITION_STATE_STOPPED,
    ROTATION_DIRECTION_CLOCKWISE,
    ROTATION_DIRECTION_COUNTER_CLOCKWISE,
    SUBTYPE_DIMMER,
    SUBTYPE_DOWN_LIGHT,
    SUBTYPE_POWER,
    SUBTYPE_PRESET,
    SUBTYPE_UP_LIGHT,
)
from .services import (
    ButtonService,
    FanService,
    FlameService,
    LightbulbService,
    SwitchService,
    WindowCoveringService,
    device_for,
    dispatch,
)

if TYPE_CHECKING:
    from .platform import BondPlatform

_LOGGER = logging.getLogger(__name__)


def speed_to_percentage(speed: int, top: int) -> int:
    """Convert a Bond speed level to a 0-100 rotation speed."""
    return max(0, min(100, round(speed * 100 / top)))


def percentage_to_speed(percentage: float, top: int) -> int:
    """Convert a 0-100 rotation speed to a Bond speed level (0 is off)."""
    if percentage <= 0:
        return 0
    return max(1, min(top, math.ceil(percentage * top / 100)))


class BondAccessory:
    """Base composition: owns the adapters for one accessory."""

    def __init__(self, platform: BondPlatform, bond: Bond, accessory: Accessory) -> None:
        """Initialize the composition."""
        self.platform = platform
        self.bond = bond
        self.accessory = accessory
        self.device = device_for(accessory)
        self.buttons: list[ButtonService] = []

    def observe(self) -> None:
        """Install write handlers."""

    def update_state(self, state: BondState) -> None:
        """Push a hub snapshot into the accessory."""

    def cancel(self) -> None:
        """Release scheduled work."""
        for button in self.buttons:
            button.cancel()

    def _add_preset_button(self) -> None:
        if not has_preset(self.device):
            return
        button = ButtonService(
            self.platform,
            self.accessory,
            f"{self.accessory.display_name} Preset",
            SUBTYPE_PRESET,
        )

        def _on_write(value: Any, completion: Completion) -> None:
            if not value:
                completion(None)
                return
            dispatch(
                self.platform,
                self.accessory,
                self.bond.api.preset(self.device),
                completion,
                "Pressed preset",
                "Error pressing preset",
            )

        button.on.on_write(_on_write)
        self.buttons.append(button)

    def _power_command(self, value: Any) -> Coroutine[Any, Any, None]:
        """Return the command that sets power, preferring discrete actions."""
        if self.device.supports(ACTION_TURN_ON) and self.device.supports(
            ACTION_TURN_OFF
        ):
            if value:
                return self.bond.api.turn_on(self.device)
            return self.bond.api.turn_off(self.device)
        return self.bond.api.toggle_power(self.device)


class CeilingFanAccessory(BondAccessory):
    """Ceiling fan with optional lights, dimmer and preset."""

    def __init__(self, platform: BondPlatform, bond: Bond, accessory: Accessory) -> None:
        """Build fan and light services."""
        super().__init__(platform, bond, accessory)
        name = accessory.display_name
        self.fan = FanService(platform, accessory)
        self.max_speed = max_speed(self.device)

        self.lights: list[LightbulbService] = []
        if has_separate_lights(self.device):
            self.lights.append(
                LightbulbService(platform, accessory, f"{name} Up Light", SUBTYPE_UP_LIGHT)
            )
            self.lights.append(
                LightbulbService(
                    platform, accessory, f"{name} Down Light", SUBTYPE_DOWN_LIGHT
                )
            )
        elif has_light(self.device):
            self.lights.append(LightbulbService(platform, accessory, f"{name} Light"))

        self.dimmer: SwitchService | None = None
        if platform.include_dimmer and has_dimmer(self.device):
            self.dimmer = SwitchService(
                platform, accessory, f"{name} Dimmer", SUBTYPE_DIMMER
            )

        self._add_preset_button()

    def observe(self) -> None:
        """Install write handlers on fan, lights and dimmer."""
        platform, accessory = self.platform, self.accessory

        def _on_power(value: Any, completion: Completion) -> None:
            dispatch(
                platform,
                accessory,
                self._power_command(value),
                completion,
                f"Set fan power: {value}",
                "Error setting fan power",
            )

        self.fan.on.on_write(_on_power)

        if self.fan.rotation_speed is not None:

            def _on_speed(value: Any, completion: Completion) -> None:
                speed = percentage_to_speed(value, self.max_speed)
                if speed == 0:
                    command = self._power_command(False)
                else:
                    command = self.bond.api.set_speed(self.device, speed)
                dispatch(
                    platform,
                    accessory,
                    command,
                    completion,
                    f"Set fan speed: {speed}",
                    "Error setting fan speed",
                )

            self.fan.rotation_speed.on_write(_on_speed)

        if self.fan.rotation_direction is not None:

            def _on_direction(value: Any, completion: Completion) -> None:
                dispatch(
                    platform,
                    accessory,
                    self.bond.api.toggle_direction(self.device),
                    completion,
                    f"Set fan direction: {value}",
                    "Error setting fan direction",
                )

            self.fan.rotation_direction.on_write(_on_direction)

        for light in self.lights:
            light.observe(platform, self.bond, accessory)

        if self.dimmer is not None:

            def _on_dimmer(value: Any, completion: Completion) -> None:
                if value:
                    command = self.bond.api.start_dimmer(self.device)
                else:
                    command = self.bond.api.stop(self.device)
                dispatch(
                    platform,
                    accessory,
                    command,
                    completion,
                    f"Set dimmer: {value}",
                    "Error setting dimmer",
                )

            self.dimmer.on.on_write(_on_dimmer)

    def update_state(self, state: BondState) -> None:
        """Push fan and light state."""
        if state.power is not None:
            self.fan.on.update_value(state.power == 1)
        if self.fan.rotation_speed is not None and state.speed is not None:
            speed = state.speed if state.power != 0 else 0
            self.fan.rotation_speed.update_value(
                speed_to_percentage(speed, self.max_speed)
            )
        if self.fan.rotation_direction is not None and state.direction is not None:
            self.fan.rotation_direction.update_value(
                ROTATION_DIRECTION_CLOCKWISE
                if state.direction == 1
                else ROTATION_DIRECTION_COUNTER_CLOCKWISE
            )
        for light in self.lights:
            light.update_state(state)


class FireplaceAccessory(BondAccessory):
    """Fireplace, with flame height when supported."""

    def __init__(self, platform: BondPlatform, bond: Bond, accessory: Accessory) -> None:
        """Build the flame service."""
        super().__init__(platform, bond, accessory)
        self.flame = FlameService(platform, accessory, accessory.display_name)

    def observe(self) -> None:
        """Install write handlers."""
        self.flame.observe(self.platform, self.bond, self.accessory)

    def update_state(self, state: BondState) -> None:
        """Push power and flame level."""
        if state.power is not None:
            self.flame.on.update_value(state.power == 1)
        self.flame.update_state(state)


class ShadesAccessory(BondAccessory):
    """Motorized shades, reported as fully open or fully closed."""

    def __init__(self, platform: BondPlatform, bond: Bond, accessory: Accessory) -> None:
        """Build the window covering service."""
        super().__init__(platform, bond, accessory)
        self.covering = WindowCoveringService(platform, accessory)
        self.covering.position_state.update_value(POSITION_STATE_STOPPED)
        self._add_preset_button()

    def observe(self) -> None:
        """Install the target position handler."""

        def _on_target(value: Any, completion: Completion) -> None:
            if value == 0:
                command = self.bond.api.close(self.device)
                position = 0
            else:
                command = self.bond.api.open(self.device)
                position = 100
            self.covering.target_position.update_value(position)
            dispatch(
                self.platform,
                self.accessory,
                command,
                completion,
                f"Set shades position: {position}",
                "Error setting shades position",
            )

        self.covering.target_position.on_write(_on_target)

    def update_state(self, state: BondState) -> None:
        """Push open/closed state."""
        if state.open is None:
            return
        position = 100 if state.open == 1 else 0
        self.covering.current_position.update_value(position)
        self.covering.target_position.update_value(position)
        self.covering.position_state.update_value(POSITION_STATE_STOPPED)


class LightAccessory(BondAccessory):
    """Standalone light."""

    def __init__(self, platform: BondPlatform, bond: Bond, accessory: Accessory) -> None:
        """Build the lightbulb service."""
        super().__init__(platform, bond, accessory)
        self.light = LightbulbService(platform, accessory, accessory.display_name)

    def observe(self) -> None:
        """Install write handlers."""
        self.light.observe(self.platform, self.bond, self.accessory)

    def update_state(self, state: BondState) -> None:
        """Push light state."""
        self.light.update_state(state)


class GenericAccessory(BondAccessory):
    """Anything else: a single power switch."""

    def __init__(self, platform: BondPlatform, bond: Bond, accessory: Accessory) -> None:
        """Build the power switch."""
        super().__init__(platform, bond, accessory)
        self.power = SwitchService(
            platform, accessory, accessory.display_name, SUBTYPE_POWER
        )

    def observe(self) -> None:
        """Install the power handler."""

        def _on_power(value: Any, completion: Completion) -> None:
            dispatch(
                self.platform,
                self.accessory,
                self._power_command(value),
                completion,
                f"Set power: {value}",
                "Error setting power",
            )

        self.power.on.on_write(_on_power)

    def update_state(self, state: BondState) -> None:
        """Push power state."""
        if state.power is not None:
            self.power.on.update_value(state.power == 1)


ACCESSORY_TYPES: dict[str, type[BondAccessory]] = {
    DEVICE_TYPE_CEILING_FAN: CeilingFanAccessory,
    DEVICE_TYPE_FIREPLACE: FireplaceAccessory,
    DEVICE_TYPE_MOTORIZED_SHADES: ShadesAccessory,
    DEVICE_TYPE_LIGHT: LightAccessory,
}


def create_accessory(
    platform: BondPlatform, bond: Bond, accessory: Accessory
) -> BondAccessory:
    """Build the composition matching the accessory's device type."""
    device = device_for(accessory)
    accessory_type = ACCESSORY_TYPES.get(device.type, GenericAccessory)
    _LOGGER.debug(
        "Building %s for %s (%s)", accessory_type.__name__, device.name, device.type
    )
    return accessory_type(platform, bond, accessory)
