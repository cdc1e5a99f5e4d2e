import asyncio
from typing import Any, Dict, Set

from loguru import logger

Event = Dict[str, Any]

class ChangeNotifier:
    """Fans change events out to every subscribed client queue.

    Delivery is best effort: a subscriber whose queue is full misses the
    event. Transport (websocket, SSE, ...) is left to the caller, which
    drains its queue and forwards the events.
    """

    def __init__(self, queue_size: int = 100) -> None:
        self.queue_size = queue_size
        self._subscribers: Set[asyncio.Queue] = set()

    def subscribe(self) -> asyncio.Queue:

        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.add(queue)
        logger.debug(f"Notifier subscriber added ({len(self._subscribers)} total)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:

        self._subscribers.discard(queue)
        logger.debug(f"Notifier subscriber removed ({len(self._subscribers)} total)")

    @property
    def subscriber_count(self) -> int:

        return len(self._subscribers)

    def broadcast(self, event: Event) -> None:

        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Dropping change event for a slow subscriber: {event}")

    def notify_structural_change(self, structure_id: int) -> None:

        self.broadcast({"type": "refresh", "structure_id": structure_id})

    def notify_comment_change(self, target_id: int) -> None:

        self.broadcast({"type": "comment", "target_id": target_id})
