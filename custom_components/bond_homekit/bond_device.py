"""Bond device representation for Bond HomeKit."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from .const import (
    ACTION_PRESET,
    ACTION_SET_BRIGHTNESS,
    ACTION_SET_FLAME,
    ACTION_SET_SPEED,
    ACTION_START_DIMMER,
    ACTION_TOGGLE_DIRECTION,
    ACTION_TOGGLE_DOWN_LIGHT,
    ACTION_TOGGLE_LIGHT,
    ACTION_TOGGLE_UP_LIGHT,
    DEFAULT_MAX_SPEED,
    DEVICE_TYPE_GENERIC,
)


@dataclass
class BondDevice:
    """Represents a device registered on a Bond hub."""

    id: str
    name: str
    type: str = DEVICE_TYPE_GENERIC
    location: str | None = None
    actions: list[str] = field(default_factory=list)
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def unique_id(self) -> str:
        """Return unique ID for the accessory built from this device."""
        return f"bond_homekit_{self.id}"

    @property
    def display_name(self) -> str:
        """Return the name shown to the smart-home client."""
        if self.location:
            return f"{self.location} {self.name}"
        return self.name

    def supports(self, action: str) -> bool:
        """Check if the device accepts an action."""
        return action in self.actions

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "location": self.location,
            "actions": list(self.actions),
            "properties": dict(self.properties),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BondDevice":
        """Create from dictionary data (API payload or storage)."""
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            type=data.get("type", DEVICE_TYPE_GENERIC),
            location=data.get("location"),
            actions=list(data.get("actions", [])),
            properties=dict(data.get("properties", {})),
        )


@dataclass
class BondState:
    """A point-in-time state snapshot for one Bond device.

    Every field is optional; a field the hub did not report stays None and
    is skipped when pushed into characteristics.
    """

    power: int | None = None
    speed: int | None = None
    direction: int | None = None
    light: int | None = None
    up_light: int | None = None
    down_light: int | None = None
    brightness: int | None = None
    flame: int | None = None
    open: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BondState":
        """Create from a /state payload, ignoring keys we don't model."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


def can_set_speed(device: BondDevice) -> bool:
    """Device accepts discrete speed levels."""
    return device.supports(ACTION_SET_SPEED)


def has_reverse_switch(device: BondDevice) -> bool:
    """Device can reverse its rotation direction."""
    return device.supports(ACTION_TOGGLE_DIRECTION)


def has_light(device: BondDevice) -> bool:
    """Device has a main light."""
    return device.supports(ACTION_TOGGLE_LIGHT)


def has_separate_lights(device: BondDevice) -> bool:
    """Device has independently switchable up and down lights."""
    return device.supports(ACTION_TOGGLE_UP_LIGHT) and device.supports(
        ACTION_TOGGLE_DOWN_LIGHT
    )


def has_brightness(device: BondDevice) -> bool:
    """Device light is dimmable."""
    return device.supports(ACTION_SET_BRIGHTNESS)


def has_flame(device: BondDevice) -> bool:
    """Fireplace supports a variable flame height."""
    return device.supports(ACTION_SET_FLAME)


def has_preset(device: BondDevice) -> bool:
    """Device has a preset button."""
    return device.supports(ACTION_PRESET)


def has_dimmer(device: BondDevice) -> bool:
    """Device supports the hold-to-dim cycle."""
    return device.supports(ACTION_START_DIMMER)


def max_speed(device: BondDevice) -> int:
    """Return the highest speed level the device accepts."""
    try:
        return max(1, int(device.properties.get("max_speed", DEFAULT_MAX_SPEED)))
    except (TypeError, ValueError):
        return DEFAULT_MAX_SPEED
