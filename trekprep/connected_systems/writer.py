"""
Write-coalescing persistence queue.

Each key (a task id) has at most one worker. A worker waits out the debounce
window, takes everything merged for its key so far, sends it, and loops while
more changes arrived during the send. So per key there is never more than one
write in flight, and intermediate states collapse into the latest merge.

A failed write is logged and dropped. Local state is never rolled back and
nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List

from trekprep.engine.errors import TrekPrepError

logger = logging.getLogger("trekprep.connected_systems.writer")

SendFn = Callable[[str, Dict[str, Any]], Awaitable[Any]]


class CoalescingWriter:
    """
    Debounced per-key writer.

    Usage:
        writer = CoalescingWriter(send, debounce_ms=500)
        writer.submit("mv-permit-1", {"isNA": True})
        ...
        await writer.close()
    """

    def __init__(self, send: SendFn, debounce_ms: int = 500):
        self._send = send
        self._debounce = max(0, debounce_ms) / 1000.0
        self._pending: Dict[str, Dict[str, Any]] = {}
        self._workers: Dict[str, asyncio.Task] = {}
        self._flush_now = asyncio.Event()
        self._closed = False
        self.sent = 0
        self.failed = 0

    @property
    def pending_keys(self) -> List[str]:
        return sorted(self._pending)

    @property
    def in_flight(self) -> int:
        return len(self._workers)

    def submit(self, key: str, fields: Dict[str, Any]) -> None:
        """Merge ``fields`` into the pending write for ``key``; must be called inside a running loop."""
        if self._closed:
            raise RuntimeError("CoalescingWriter is closed")
        self._pending.setdefault(key, {}).update(fields)
        if key not in self._workers:
            loop = asyncio.get_running_loop()
            self._workers[key] = loop.create_task(self._drain(key), name=f"persist:{key}")

    async def flush(self) -> None:
        """Skip the remaining debounce and wait until every pending write has been attempted."""
        self._flush_now.set()
        try:
            while self._workers:
                await asyncio.gather(*list(self._workers.values()))
        finally:
            self._flush_now.clear()

    async def close(self) -> None:
        await self.flush()
        self._closed = True

    async def _drain(self, key: str) -> None:
        try:
            while key in self._pending:
                await self._wait_debounce()
                fields = self._pending.pop(key)
                try:
                    await self._send(key, fields)
                    self.sent += 1
                except TrekPrepError as e:
                    self.failed += 1
                    logger.warning(f"Persisting '{key}' failed, keeping local state: {e.message}")
                except Exception:
                    self.failed += 1
                    logger.exception(f"Unexpected error persisting '{key}', keeping local state")
        finally:
            self._workers.pop(key, None)

    async def _wait_debounce(self) -> None:
        if self._debounce <= 0 or self._flush_now.is_set():
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(self._flush_now.wait(), timeout=self._debounce)
        except asyncio.TimeoutError:
            pass
