"""Service adapters binding Bond devices to accessory services.

Each adapter looks up (or creates) its service on the accessory, binds the
characteristics the device supports, pushes hub state into them and relays
client writes back to the hub. Hub commands are fire-and-forget: the write
completes as soon as the command is dispatched and the outcome is only
logged.
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any

from .accessory import (
    Accessory,
    Characteristic,
    CharacteristicType,
    Completion,
    Service,
    ServiceType,
)
from .bond_api import Bond, BondApiError
from .bond_device import (
    BondDevice,
    BondState,
    can_set_speed,
    has_brightness,
    has_flame,
    has_reverse_switch,
)
from .const import BUTTON_RESET_DELAY, SUBTYPE_DOWN_LIGHT, SUBTYPE_UP_LIGHT

if TYPE_CHECKING:
    from .platform import BondPlatform


def device_for(accessory: Accessory) -> BondDevice:
    """Return the Bond device an accessory was built for."""
    return BondDevice.from_dict(accessory.context["device"])


def _find_or_add_service(
    accessory: Accessory,
    kind: ServiceType,
    name: str,
    sub_type: str | None = None,
) -> Service:
    """Look up a service by sub-identifier (or kind) and create it if absent."""
    if sub_type:
        service = accessory.get_service_by_id(kind, sub_type)
    else:
        service = accessory.get_service(kind)
    if service is None:
        service = accessory.add_service(kind, name, sub_type)
    return service


def _bind_optional(
    service: Service, kind: CharacteristicType, supported: bool
) -> Characteristic | None:
    """Bind a capability-dependent characteristic, pruning it when unsupported."""
    if supported:
        return service.get_characteristic(kind)
    if service.has_characteristic(kind):
        service.remove_characteristic(service.get_characteristic(kind))
    return None


async def _report(
    platform: BondPlatform,
    accessory: Accessory,
    command: Awaitable[None],
    success: str,
    failure: str,
) -> None:
    """Await a hub command and log its outcome."""
    try:
        await command
    except BondApiError as err:
        platform.error(accessory, f"{failure}: {err}")
    else:
        platform.debug(accessory, success)


def dispatch(
    platform: BondPlatform,
    accessory: Accessory,
    command: Awaitable[None],
    completion: Completion,
    success: str,
    failure: str,
) -> None:
    """Send a hub command in the background and acknowledge the write."""
    platform.async_create_task(
        _report(platform, accessory, command, success, failure),
        f"{accessory.display_name}: {success}",
    )
    completion(None)


class FanService:
    """Fan service with optional speed and direction."""

    def __init__(self, platform: BondPlatform, accessory: Accessory) -> None:
        """Bind the accessory's fan service."""
        device = device_for(accessory)
        service = _find_or_add_service(
            accessory, ServiceType.FAN, accessory.display_name
        )

        self.on = service.get_characteristic(CharacteristicType.ON)
        self.rotation_speed = _bind_optional(
            service, CharacteristicType.ROTATION_SPEED, can_set_speed(device)
        )
        self.rotation_direction = _bind_optional(
            service, CharacteristicType.ROTATION_DIRECTION, has_reverse_switch(device)
        )


class LightbulbService:
    """Light, optionally one zone of a multi-light device."""

    def __init__(
        self,
        platform: BondPlatform,
        accessory: Accessory,
        name: str,
        sub_type: str | None = None,
    ) -> None:
        """Bind a lightbulb service, reconciling brightness with capability."""
        device = device_for(accessory)
        service = _find_or_add_service(accessory, ServiceType.LIGHTBULB, name, sub_type)

        self.on = service.get_characteristic(CharacteristicType.ON)
        # Lights created before brightness was capability-checked may carry
        # a stray brightness characteristic; it is removed here.
        self.brightness = _bind_optional(
            service, CharacteristicType.BRIGHTNESS, has_brightness(device)
        )
        self.sub_type = sub_type

    def update_state(self, state: BondState) -> None:
        """Push a hub snapshot into the light characteristics."""
        if self.sub_type == SUBTYPE_UP_LIGHT:
            self.on.update_value(state.up_light == 1 and state.light == 1)
        elif self.sub_type == SUBTYPE_DOWN_LIGHT:
            self.on.update_value(state.down_light == 1 and state.light == 1)
        else:
            self.on.update_value(state.light == 1)

        if self.brightness is not None and state.brightness is not None:
            self.brightness.update_value(state.brightness)

    def observe(self, platform: BondPlatform, bond: Bond, accessory: Accessory) -> None:
        """Relay client writes to the hub."""
        device = device_for(accessory)
        self._observe_light(platform, bond, device, accessory)
        self._observe_light_brightness(platform, bond, device, accessory)

    def _observe_light(
        self,
        platform: BondPlatform,
        bond: Bond,
        device: BondDevice,
        accessory: Accessory,
    ) -> None:
        def _on_write(value: Any, completion: Completion) -> None:
            if self.sub_type == SUBTYPE_UP_LIGHT:
                command = bond.api.toggle_up_light(device)
            elif self.sub_type == SUBTYPE_DOWN_LIGHT:
                command = bond.api.toggle_down_light(device)
            else:
                command = bond.api.toggle_light(device)

            dispatch(
                platform,
                accessory,
                command,
                completion,
                f"Set light power: {value}",
                "Error setting light power",
            )

        self.on.on_write(_on_write)

    def _observe_light_brightness(
        self,
        platform: BondPlatform,
        bond: Bond,
        device: BondDevice,
        accessory: Accessory,
    ) -> None:
        if self.brightness is None:
            return

        def _on_write(value: Any, completion: Completion) -> None:
            if value == 0:
                # Same as turning the light off, which On already handles.
                completion(None)
                return

            dispatch(
                platform,
                accessory,
                bond.api.set_brightness(device, value),
                completion,
                f"Set light brightness: {value}",
                "Error setting light brightness",
            )

        self.brightness.on_write(_on_write)


class SwitchService:
    """On/off switch, one of possibly several on the accessory."""

    def __init__(
        self,
        platform: BondPlatform,
        accessory: Accessory,
        name: str,
        sub_type: str,
    ) -> None:
        """Bind the switch service identified by sub_type."""
        service = accessory.get_service_by_id(ServiceType.SWITCH, sub_type)
        if service is None:
            service = accessory.add_service(ServiceType.SWITCH, name, sub_type)
        if service.subtype is None:
            service.subtype = sub_type

        self.on = service.get_characteristic(CharacteristicType.ON)
        self.sub_type = sub_type


class ButtonService:
    """A switch that turns itself back off, standing in for a push button."""

    def __init__(
        self,
        platform: BondPlatform,
        accessory: Accessory,
        name: str,
        sub_type: str,
    ) -> None:
        """Bind the button's switch service and clear any persisted press."""
        service = accessory.get_service_by_id(ServiceType.SWITCH, sub_type)
        if service is None:
            service = accessory.add_service(ServiceType.SWITCH, name, sub_type)
        if service.subtype is None:
            service.subtype = sub_type

        self.on = service.get_characteristic(CharacteristicType.ON)
        self.on.update_value(False)
        self.sub_type = sub_type

        self._reset_handles: set[asyncio.TimerHandle] = set()
        self.on.add_write_listener(self._schedule_reset)

    def _schedule_reset(self, value: Any) -> None:
        """Revert to off once the press delay has passed."""
        handle: asyncio.TimerHandle | None = None

        def _reset() -> None:
            self._reset_handles.discard(handle)
            self.on.update_value(False)

        handle = asyncio.get_running_loop().call_later(BUTTON_RESET_DELAY, _reset)
        self._reset_handles.add(handle)

    @property
    def pending_resets(self) -> int:
        """Number of scheduled resets that have not fired yet."""
        return len(self._reset_handles)

    def cancel(self) -> None:
        """Drop scheduled resets and leave the button off."""
        for handle in self._reset_handles:
            handle.cancel()
        self._reset_handles.clear()
        self.on.update_value(False)


class WindowCoveringService:
    """Window covering positions."""

    def __init__(self, platform: BondPlatform, accessory: Accessory) -> None:
        """Bind the accessory's window covering service."""
        service = _find_or_add_service(
            accessory, ServiceType.WINDOW_COVERING, accessory.display_name
        )
        self.current_position = service.get_characteristic(
            CharacteristicType.CURRENT_POSITION
        )
        self.target_position = service.get_characteristic(
            CharacteristicType.TARGET_POSITION
        )
        self.position_state = service.get_characteristic(
            CharacteristicType.POSITION_STATE
        )


class FlameService:
    """Fireplace power, with a flame level when the device has one.

    A variable flame is exposed as a lightbulb whose brightness slider sets
    the flame height; a fixed flame is a plain switch.
    """

    def __init__(
        self,
        platform: BondPlatform,
        accessory: Accessory,
        name: str,
        sub_type: str | None = None,
    ) -> None:
        """Bind the lightbulb or switch service depending on flame support."""
        device = device_for(accessory)

        self.flame: Characteristic | None = None
        if has_flame(device):
            service = _find_or_add_service(
                accessory, ServiceType.LIGHTBULB, name, sub_type
            )
            self.flame = service.get_characteristic(CharacteristicType.BRIGHTNESS)
        else:
            service = _find_or_add_service(accessory, ServiceType.SWITCH, name, sub_type)

        self.on = service.get_characteristic(CharacteristicType.ON)
        self.sub_type = sub_type

    def update_state(self, state: BondState) -> None:
        """Push a hub snapshot into the flame level."""
        if self.flame is not None and state.flame is not None:
            self.flame.update_value(state.flame)

    def observe(self, platform: BondPlatform, bond: Bond, accessory: Accessory) -> None:
        """Relay client writes to the hub."""
        device = device_for(accessory)
        self._observe_power(platform, bond, device, accessory)
        self._observe_flame(platform, bond, device, accessory)

    def _observe_power(
        self,
        platform: BondPlatform,
        bond: Bond,
        device: BondDevice,
        accessory: Accessory,
    ) -> None:
        def _on_write(value: Any, completion: Completion) -> None:
            dispatch(
                platform,
                accessory,
                bond.api.toggle_power(device),
                completion,
                f"Set flame power: {value}",
                "Error setting flame power",
            )

        self.on.on_write(_on_write)

    def _observe_flame(
        self,
        platform: BondPlatform,
        bond: Bond,
        device: BondDevice,
        accessory: Accessory,
    ) -> None:
        if self.flame is None:
            return

        def _on_write(value: Any, completion: Completion) -> None:
            if value == 0:
                # Same as turning the flame off, which On already handles.
                completion(None)
                return

            dispatch(
                platform,
                accessory,
                bond.api.set_flame(device, value),
                completion,
                f"Set flame brightness: {value}",
                "Error setting flame brightness",
            )

        self.flame.on_write(_on_write)
