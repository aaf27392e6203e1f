from __future__ import annotations

from pathlib import Path

import pytest
from fakes import BusyRecorder, FakePreferences, FakeSessionFactory

from termroster.terminal import EventBus, SessionRegistry


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))
        if "property" in path.parts:
            item.add_marker(pytest.mark.property)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def factory() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture
def preferences() -> FakePreferences:
    return FakePreferences()


@pytest.fixture
def busy(bus: EventBus) -> BusyRecorder:
    return BusyRecorder().attach(bus)


@pytest.fixture
def registry(factory: FakeSessionFactory, preferences: FakePreferences, bus: EventBus, busy: BusyRecorder):
    with SessionRegistry(session_factory=factory, preferences=preferences, events=bus) as tracked:
        yield tracked
