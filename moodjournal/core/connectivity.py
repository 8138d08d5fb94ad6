"""
Connectivity gate and probe.

ConnectivityGate holds the current online/offline state. Every mutating
sync operation calls require_online() before touching anything.

ConnectivityProbe is the push source: an asyncio task that checks the
Supabase REST endpoint on an interval and pushes the result into the gate.
"""

import asyncio
import logging
import threading
from typing import Callable, Optional

import httpx

from moodjournal.models.entry import NetworkUnavailableError

logger = logging.getLogger(__name__)

ConnectivityCallback = Callable[[bool], None]


class ConnectivityGate:
    """Thread-safe online flag with change subscribers."""

    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._lock = threading.Lock()
        self._subscribers: list[ConnectivityCallback] = []

    @property
    def is_online(self) -> bool:
        with self._lock:
            return self._online

    def subscribe(self, callback: ConnectivityCallback) -> Callable[[], None]:
        """Register a change callback. Returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def set_online(self, online: bool) -> None:
        """Update state; subscribers are notified only when it changes."""
        with self._lock:
            if self._online == online:
                return
            self._online = online
            subscribers = list(self._subscribers)

        logger.info("Connectivity changed: %s", "online" if online else "offline")
        for callback in subscribers:
            try:
                callback(online)
            except Exception:
                logger.warning("Connectivity subscriber failed", exc_info=True)

    def require_online(self) -> None:
        """Fail fast when offline."""
        if not self.is_online:
            raise NetworkUnavailableError()


class ConnectivityProbe:
    """
    Periodically checks reachability of the remote store.

    Any HTTP response (even 4xx) counts as reachable; transport errors and
    timeouts count as offline.
    """

    def __init__(
        self,
        gate: ConnectivityGate,
        url: str,
        interval: float = 15.0,
        timeout: float = 5.0,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.gate = gate
        self.url = url
        self.interval = interval
        self.timeout = timeout
        self.headers = headers or {}
        self._task: Optional[asyncio.Task] = None

    async def check_once(self, client: httpx.AsyncClient) -> bool:
        try:
            await client.get(self.url, headers=self.headers, timeout=self.timeout)
            online = True
        except httpx.HTTPError as e:
            logger.debug("Connectivity probe failed: %s", e)
            online = False
        self.gate.set_online(online)
        return online

    async def _run(self) -> None:
        async with httpx.AsyncClient() as client:
            while True:
                await self.check_once(client)
                await asyncio.sleep(self.interval)

    def start(self) -> None:
        """Spawn the probe loop on the running event loop."""
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
