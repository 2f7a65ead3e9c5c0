#!filepath: tests/core/test_event_log.py
from datetime import datetime

import pytest

from ibonarium.core.event_log import EventLog, LogEntry


def test_starts_empty(event_log):
    assert len(event_log) == 0
    assert event_log.entries() == ()
    assert event_log.capacity == 20


def test_never_exceeds_capacity_and_keeps_most_recent(event_log):
    for i in range(25):
        event_log.append(f"event {i}")

    assert len(event_log) == 20
    assert event_log.messages() == [f"event {i}" for i in range(5, 25)]


def test_insertion_order_and_timestamps(event_log):
    event_log.append("first")
    event_log.append("second")

    first, second = event_log.entries()
    assert first.message == "first"
    assert second.message == "second"
    assert first.timestamp < second.timestamp


def test_explicit_timestamp_is_kept(event_log):
    ts = datetime(2030, 5, 6, 7, 8, 9)
    entry = event_log.append("manual", timestamp=ts)

    assert entry.timestamp == ts
    assert entry.format() == "[07:08:09] manual"


def test_lines_are_formatted(event_log):
    event_log.append("[SYS] ready")
    assert event_log.lines() == ["[12:00:00] [SYS] ready"]


def test_listeners_receive_every_entry(event_log):
    received = []
    event_log.subscribe(received.append)

    event_log.append("a")
    event_log.append("b")

    assert [e.message for e in received] == ["a", "b"]
    assert all(isinstance(e, LogEntry) for e in received)


def test_broken_listener_does_not_block_append(event_log):
    def broken(entry):
        raise RuntimeError("widget gone")

    received = []
    event_log.subscribe(broken)
    event_log.subscribe(received.append)

    event_log.append("still logged")

    assert event_log.messages() == ["still logged"]
    assert len(received) == 1


def test_invalid_capacity():
    with pytest.raises(ValueError):
        EventLog(capacity=0)
