from unittest.mock import Mock

import pytest
from django.test import override_settings

from infrastructure.events import InMemoryEventBus, RedisEventBus
from infrastructure.events.factory import create_event_bus


@pytest.mark.unit
class TestInMemoryEventBus:
    def setup_method(self):
        self.bus = InMemoryEventBus()

    def test_publish_records_envelope(self):
        self.bus.publish("order.placed", {"order_id": "abc"})

        assert len(self.bus.published) == 1
        message = self.bus.published[0]
        assert message["event_type"] == "order.placed"
        assert message["payload"] == {"order_id": "abc"}
        assert "occurred_at" in message

    def test_subscribers_receive_matching_events_only(self):
        placed = Mock()
        rated = Mock()
        self.bus.subscribe("order.placed", placed)
        self.bus.subscribe("rating.created", rated)

        self.bus.publish("order.placed", {"order_id": "abc"})

        placed.assert_called_once()
        assert placed.call_args[0][0]["payload"] == {"order_id": "abc"}
        rated.assert_not_called()

    def test_duplicate_subscription_is_ignored(self):
        handler = Mock()
        self.bus.subscribe("order.placed", handler)
        self.bus.subscribe("order.placed", handler)

        self.bus.publish("order.placed", {})

        handler.assert_called_once()

    def test_handler_error_does_not_stop_other_handlers(self):
        failing = Mock(side_effect=RuntimeError("boom"))
        working = Mock()
        self.bus.subscribe("order.placed", failing)
        self.bus.subscribe("order.placed", working)

        self.bus.publish("order.placed", {})

        working.assert_called_once()
        assert len(self.bus.published) == 1

    def test_events_of_type_and_clear(self):
        self.bus.publish("order.placed", {"n": 1})
        self.bus.publish("rating.created", {"n": 2})
        self.bus.publish("order.placed", {"n": 3})

        assert [m["payload"]["n"] for m in self.bus.events_of_type("order.placed")] == [1, 3]

        self.bus.clear()
        assert self.bus.published == []


@pytest.mark.unit
class TestEventBusFactory:
    def test_memory_backend(self):
        assert isinstance(create_event_bus("memory"), InMemoryEventBus)

    def test_redis_backend(self):
        assert isinstance(create_event_bus("redis"), RedisEventBus)

    @override_settings(INFRASTRUCTURE={"EVENT_BUS_BACKEND": "memory"})
    def test_backend_from_settings(self):
        assert isinstance(create_event_bus(), InMemoryEventBus)

    def test_invalid_backend(self):
        with pytest.raises(ValueError):
            create_event_bus("kafka")
