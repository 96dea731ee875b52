import asyncio
from typing import Any, Dict, Optional, Set

import structlog
from fastapi import WebSocket

from ..store.provider import DocumentStore

logger = structlog.get_logger(__name__)


class ChangeHub:
    """Fans store change notifications out to connected websockets.

    Store listeners run on whatever thread committed the write, so events are
    handed to the event loop with ``call_soon_threadsafe``.
    """

    def __init__(self) -> None:
        # websocket -> outgoing queue
        self._connections: Dict[WebSocket, asyncio.Queue] = {}
        self._lock = asyncio.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._watching: Set[str] = set()
        self._unsubscribers = []

    def watch(self, store: DocumentStore, collections) -> None:
        for collection in collections:
            if collection in self._watching:
                continue
            self._watching.add(collection)
            primed = {"done": False}

            def _listener(docs, collection=collection, primed=primed):
                # the first call is the initial snapshot, not a change
                if not primed["done"]:
                    primed["done"] = True
                    return
                self.publish(collection, {"count": len(docs)})

            self._unsubscribers.append(store.subscribe(collection, _listener))

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._watching.clear()

    async def connect(self, ws: WebSocket) -> asyncio.Queue:
        self._loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        async with self._lock:
            self._connections[ws] = queue
        return queue

    async def disconnect(self, ws: WebSocket) -> None:
        async with self._lock:
            self._connections.pop(ws, None)

    def publish(self, event: str, payload: Any) -> None:
        loop = self._loop
        if loop is None or loop.is_closed() or not self._connections:
            return
        data = {"event": event, "data": payload}
        for queue in list(self._connections.values()):
            loop.call_soon_threadsafe(queue.put_nowait, data)

    @property
    def connection_count(self) -> int:
        return len(self._connections)


# Global singleton hub
hub = ChangeHub()
