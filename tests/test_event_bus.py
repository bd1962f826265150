from __future__ import annotations

from typing import Any

from task_board.events.bus import EventBus


def test_emit_delivers_to_subscribers_and_history() -> None:
    bus = EventBus("proj")
    received: list[dict[str, Any]] = []
    bus.subscribe(received.append)

    event = bus.emit(channel="persistence", event_type="board.save_failed", entity_id="board", payload={"seq": 1})

    assert received == [event]
    assert event["project_id"] == "proj"
    assert event["id"].startswith("evt-")
    assert bus.list_recent() == [event]


def test_unsubscribe_stops_delivery() -> None:
    bus = EventBus()
    received: list[dict[str, Any]] = []
    unsubscribe = bus.subscribe(received.append)
    unsubscribe()
    unsubscribe()
    bus.emit(channel="board", event_type="board.replaced", entity_id="board", payload={})
    assert received == []


def test_failing_listener_does_not_block_others() -> None:
    bus = EventBus()
    received: list[str] = []

    def _bad(event: dict[str, Any]) -> None:
        raise RuntimeError("listener bug")

    bus.subscribe(_bad)
    bus.subscribe(lambda e: received.append(e["type"]))
    bus.emit(channel="board", event_type="board.replaced", entity_id="board", payload={})
    assert received == ["board.replaced"]


def test_history_is_bounded() -> None:
    bus = EventBus(history=3)
    for i in range(5):
        bus.emit(channel="board", event_type=f"e{i}", entity_id="board", payload={})
    assert [e["type"] for e in bus.list_recent()] == ["e2", "e3", "e4"]
    assert [e["type"] for e in bus.list_recent(limit=1)] == ["e4"]
    assert bus.list_recent(limit=0) == []
