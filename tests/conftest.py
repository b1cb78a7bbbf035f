from __future__ import annotations

import asyncio
from typing import Any

import pytest

from custom_components.bond_homekit.accessory import Accessory
from custom_components.bond_homekit.bond_api import Bond, BondApiError
from custom_components.bond_homekit.bond_device import BondDevice, BondState


class FakePlatform:
    """Records side-channel messages and runs dispatched commands on the loop."""

    def __init__(self, include_dimmer: bool = False) -> None:
        self.include_dimmer = include_dimmer
        self.debugs: list[str] = []
        self.errors: list[str] = []
        self.tasks: list[asyncio.Task] = []

    def debug(self, accessory: Accessory, message: str) -> None:
        self.debugs.append(message)

    def error(self, accessory: Accessory, message: str) -> None:
        self.errors.append(message)

    def async_create_task(self, target, name: str) -> None:
        self.tasks.append(asyncio.get_running_loop().create_task(target, name=name))

    async def drain(self) -> None:
        await asyncio.gather(*self.tasks)


class FakeApi:
    """Stands in for BondApi; every command is recorded as (name, device_id, *args)."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.error: BondApiError | None = None
        self.states: dict[str, BondState] = {}

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)

        async def _command(device: BondDevice, *args: Any) -> None:
            self.calls.append((name, device.id, *args))
            if self.error is not None:
                raise self.error

        return _command

    async def async_get_state(self, device: BondDevice) -> BondState:
        state = self.states[device.id]
        if isinstance(state, Exception):
            raise state
        return state


class Completions:
    """Collects completion callback invocations."""

    def __init__(self) -> None:
        self.results: list[Exception | None] = []

    def __call__(self, error: Exception | None) -> None:
        self.results.append(error)


def make_accessory(
    actions: list[str],
    device_type: str = "GX",
    device_id: str = "abc123",
    name: str = "Living Room",
    properties: dict[str, Any] | None = None,
) -> Accessory:
    device = BondDevice(
        id=device_id,
        name=name,
        type=device_type,
        actions=actions,
        properties=properties or {},
    )
    accessory = Accessory(device.unique_id, device.display_name)
    accessory.context["device"] = device.to_dict()
    return accessory


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def bond(api: FakeApi) -> Bond:
    return Bond(api=api)


@pytest.fixture
def completion() -> Completions:
    return Completions()
