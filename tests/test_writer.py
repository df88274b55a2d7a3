"""Unit tests for trekprep.connected_systems.writer — write coalescing per task."""

import asyncio

import pytest

from trekprep.connected_systems.writer import CoalescingWriter
from trekprep.engine.errors import TrekPrepPersistenceError


class RecordingSender:
    def __init__(self, delay: float = 0.0, fail_keys=()):
        self.delay = delay
        self.fail_keys = set(fail_keys)
        self.sent = []
        self.active = {}
        self.max_active = {}

    async def __call__(self, key, fields):
        self.active[key] = self.active.get(key, 0) + 1
        self.max_active[key] = max(self.max_active.get(key, 0), self.active[key])
        try:
            await asyncio.sleep(self.delay)
            if key in self.fail_keys:
                raise TrekPrepPersistenceError("boom", status_code=500, task_id=key)
            self.sent.append((key, dict(fields)))
        finally:
            self.active[key] -= 1


class TestCoalescing:

    @pytest.mark.asyncio
    async def test_burst_collapses_into_latest_merge(self):
        sender = RecordingSender()
        writer = CoalescingWriter(sender, debounce_ms=50)
        writer.submit("t1", {"inputValue": "a"})
        writer.submit("t1", {"inputValue": "ab"})
        writer.submit("t1", {"status": "completed"})
        await writer.flush()

        assert sender.sent == [("t1", {"inputValue": "ab", "status": "completed"})]
        assert writer.sent == 1

    @pytest.mark.asyncio
    async def test_debounce_delays_send(self):
        sender = RecordingSender()
        writer = CoalescingWriter(sender, debounce_ms=200)
        writer.submit("t1", {"isNA": True})
        await asyncio.sleep(0.05)
        assert sender.sent == []
        assert writer.pending_keys == ["t1"]
        await writer.close()
        assert sender.sent == [("t1", {"isNA": True})]

    @pytest.mark.asyncio
    async def test_keys_are_independent(self):
        sender = RecordingSender()
        writer = CoalescingWriter(sender, debounce_ms=0)
        writer.submit("t1", {"inputValue": "a"})
        writer.submit("t2", {"inputValue": "b"})
        await writer.flush()
        assert sorted(sender.sent) == [("t1", {"inputValue": "a"}), ("t2", {"inputValue": "b"})]

    @pytest.mark.asyncio
    async def test_single_in_flight_write_per_key(self):
        sender = RecordingSender(delay=0.05)
        writer = CoalescingWriter(sender, debounce_ms=0)
        writer.submit("t1", {"inputValue": "first"})
        await asyncio.sleep(0.01)  # first write now in flight
        writer.submit("t1", {"inputValue": "second"})
        writer.submit("t1", {"inputValue": "third"})
        assert writer.in_flight == 1
        await writer.flush()

        assert sender.max_active["t1"] == 1
        assert sender.sent == [("t1", {"inputValue": "first"}), ("t1", {"inputValue": "third"})]


class TestFailures:

    @pytest.mark.asyncio
    async def test_failure_logged_and_swallowed(self, caplog):
        sender = RecordingSender(fail_keys={"t1"})
        writer = CoalescingWriter(sender, debounce_ms=0)
        writer.submit("t1", {"inputValue": "x"})
        writer.submit("t2", {"inputValue": "y"})
        await writer.flush()

        assert writer.failed == 1
        assert sender.sent == [("t2", {"inputValue": "y"})]
        assert "Persisting 't1' failed" in caplog.text

    @pytest.mark.asyncio
    async def test_key_usable_after_failure(self):
        sender = RecordingSender(fail_keys={"t1"})
        writer = CoalescingWriter(sender, debounce_ms=0)
        writer.submit("t1", {"inputValue": "x"})
        await writer.flush()
        sender.fail_keys.clear()
        writer.submit("t1", {"inputValue": "y"})
        await writer.flush()
        assert sender.sent == [("t1", {"inputValue": "y"})]

    @pytest.mark.asyncio
    async def test_unexpected_error_does_not_escape_close(self, caplog):
        sent = []

        async def send(key, fields):
            if key == "t1":
                raise ValueError("bad payload")
            sent.append((key, fields))

        writer = CoalescingWriter(send, debounce_ms=0)
        writer.submit("t1", {"inputValue": "x"})
        writer.submit("t2", {"inputValue": "y"})
        await writer.close()

        assert writer.failed == 1
        assert writer.in_flight == 0
        assert sent == [("t2", {"inputValue": "y"})]
        assert "Unexpected error persisting 't1'" in caplog.text


class TestClose:

    @pytest.mark.asyncio
    async def test_submit_after_close(self):
        writer = CoalescingWriter(RecordingSender(), debounce_ms=0)
        await writer.close()
        with pytest.raises(RuntimeError):
            writer.submit("t1", {})
