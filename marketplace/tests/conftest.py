import pytest

from infrastructure.events import get_event_bus


@pytest.fixture(autouse=True)
def clean_event_bus():
    """Start every test with an empty published-event log on the in-memory bus."""
    bus = get_event_bus()
    bus.clear()
    yield bus
    bus.clear()
