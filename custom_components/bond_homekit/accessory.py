"""Accessory, service and characteristic registry for Bond HomeKit.

An in-process model of the smart-home accessory database: an accessory owns
services, a service owns characteristics, a characteristic holds one value
plus the hooks that relay client writes. Values pushed from the hub go
through update_value() and never reach the write hooks.
"""
from __future__ import annotations

from collections.abc import Callable
from enum import Enum
import logging
from typing import Any

_LOGGER = logging.getLogger(__name__)

Completion = Callable[[Exception | None], None]
WriteHandler = Callable[[Any, Completion], None]
WriteListener = Callable[[Any], None]


class ServiceType(str, Enum):
    """Service kinds used by the adapters."""

    FAN = "Fan"
    LIGHTBULB = "Lightbulb"
    SWITCH = "Switch"
    WINDOW_COVERING = "WindowCovering"


class CharacteristicType(str, Enum):
    """Characteristic kinds used by the adapters."""

    ON = "On"
    BRIGHTNESS = "Brightness"
    ROTATION_SPEED = "RotationSpeed"
    ROTATION_DIRECTION = "RotationDirection"
    CURRENT_POSITION = "CurrentPosition"
    TARGET_POSITION = "TargetPosition"
    POSITION_STATE = "PositionState"


_DEFAULT_VALUES: dict[CharacteristicType, Any] = {
    CharacteristicType.ON: False,
    CharacteristicType.BRIGHTNESS: 100,
    CharacteristicType.ROTATION_SPEED: 0,
    CharacteristicType.ROTATION_DIRECTION: 0,
    CharacteristicType.CURRENT_POSITION: 0,
    CharacteristicType.TARGET_POSITION: 0,
    CharacteristicType.POSITION_STATE: 2,
}


def _ignore_completion(error: Exception | None) -> None:
    """Completion used for programmatic writes nobody waits on."""


class Characteristic:
    """A single readable/writable value slot."""

    def __init__(self, kind: CharacteristicType, value: Any = None) -> None:
        """Initialize the characteristic."""
        self.kind = kind
        self.value = _DEFAULT_VALUES.get(kind) if value is None else value
        self._write_handler: WriteHandler | None = None
        self._write_listeners: list[WriteListener] = []

    def __repr__(self) -> str:
        return f"<Characteristic {self.kind.value}={self.value!r}>"

    def on_write(self, handler: WriteHandler) -> None:
        """Register the handler that relays client writes.

        The handler receives (value, completion) and must call completion
        exactly once. Registering again replaces the previous handler.
        """
        self._write_handler = handler

    def add_write_listener(self, listener: WriteListener) -> Callable[[], None]:
        """Observe accepted writes; returns a callable that removes the listener."""
        self._write_listeners.append(listener)

        def _remove() -> None:
            if listener in self._write_listeners:
                self._write_listeners.remove(listener)

        return _remove

    def update_value(self, value: Any) -> None:
        """Store a value reported by the hub without firing write hooks."""
        self.value = value

    def handle_write(self, value: Any, completion: Completion) -> None:
        """Apply a write coming from the smart-home client."""
        self.value = value
        for listener in list(self._write_listeners):
            listener(value)
        if self._write_handler is None:
            completion(None)
            return
        self._write_handler(value, completion)

    def set_value(self, value: Any) -> None:
        """Write a value as if a client had, without waiting for completion."""
        self.handle_write(value, _ignore_completion)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        return {"kind": self.kind.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Characteristic":
        """Create from dictionary data."""
        return cls(CharacteristicType(data["kind"]), data.get("value"))


class Service:
    """A group of characteristics representing one accessory function."""

    def __init__(
        self,
        kind: ServiceType,
        display_name: str,
        subtype: str | None = None,
    ) -> None:
        """Initialize the service."""
        self.kind = kind
        self.display_name = display_name
        self.subtype = subtype
        self._characteristics: dict[CharacteristicType, Characteristic] = {}

    def __repr__(self) -> str:
        return f"<Service {self.kind.value} {self.display_name!r} subtype={self.subtype!r}>"

    @property
    def characteristics(self) -> list[Characteristic]:
        """Return all characteristics on this service."""
        return list(self._characteristics.values())

    def has_characteristic(self, kind: CharacteristicType) -> bool:
        """Check whether a characteristic kind is present."""
        return kind in self._characteristics

    def get_characteristic(self, kind: CharacteristicType) -> Characteristic:
        """Return the characteristic of this kind, creating it if absent."""
        characteristic = self._characteristics.get(kind)
        if characteristic is None:
            characteristic = Characteristic(kind)
            self._characteristics[kind] = characteristic
        return characteristic

    def remove_characteristic(self, characteristic: Characteristic) -> None:
        """Remove a characteristic from the service."""
        if self._characteristics.get(characteristic.kind) is characteristic:
            del self._characteristics[characteristic.kind]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "kind": self.kind.value,
            "display_name": self.display_name,
            "subtype": self.subtype,
            "characteristics": [c.to_dict() for c in self._characteristics.values()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Service":
        """Create from dictionary data."""
        service = cls(
            ServiceType(data["kind"]),
            data.get("display_name", ""),
            data.get("subtype"),
        )
        for char_data in data.get("characteristics", []):
            characteristic = Characteristic.from_dict(char_data)
            service._characteristics[characteristic.kind] = characteristic
        return service


class Accessory:
    """A smart-home accessory exposing one Bond device."""

    def __init__(
        self,
        uuid: str,
        display_name: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the accessory."""
        self.uuid = uuid
        self.display_name = display_name
        self.context: dict[str, Any] = context if context is not None else {}
        self._services: list[Service] = []

    def __repr__(self) -> str:
        return f"<Accessory {self.display_name!r} ({self.uuid})>"

    @property
    def services(self) -> list[Service]:
        """Return all services on this accessory."""
        return list(self._services)

    def get_service(self, kind: ServiceType) -> Service | None:
        """Return the first service of a kind."""
        for service in self._services:
            if service.kind == kind:
                return service
        return None

    def get_service_by_id(self, kind: ServiceType, subtype: str) -> Service | None:
        """Return the service of a kind with a given sub-identifier."""
        for service in self._services:
            if service.kind == kind and service.subtype == subtype:
                return service
        return None

    def add_service(
        self, kind: ServiceType, display_name: str, subtype: str | None = None
    ) -> Service:
        """Create a service and attach it to the accessory."""
        if subtype is not None and self.get_service_by_id(kind, subtype):
            raise ValueError(
                f"{self.display_name} already has a {kind.value} service '{subtype}'"
            )
        service = Service(kind, display_name, subtype)
        self._services.append(service)
        _LOGGER.debug("Added %s to %s", service, self)
        return service

    def remove_service(self, service: Service) -> None:
        """Detach a service from the accessory."""
        if service in self._services:
            self._services.remove(service)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "uuid": self.uuid,
            "display_name": self.display_name,
            "context": dict(self.context),
            "services": [s.to_dict() for s in self._services],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Accessory":
        """Create from dictionary data."""
        accessory = cls(
            data["uuid"], data.get("display_name", ""), dict(data.get("context", {}))
        )
        accessory._services = [Service.from_dict(s) for s in data.get("services", [])]
        return accessory
