"""In-process fan-out of appended messages to realtime subscribers."""

import asyncio
from typing import Dict, Set

from ..db.database_models import MessageDO
from ..utils.logger import get_app_logger


class MessageBroadcaster:
    """
    Per-conversation publish/subscribe hub.

    Each subscriber gets its own queue. Publishing never blocks: a subscriber
    whose queue is full misses the message and is expected to re-read the
    conversation history.
    """

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self.subscribers: Dict[str, Set[asyncio.Queue]] = {}
        self.logger = get_app_logger()

    def subscribe(self, conversation_id: str) -> asyncio.Queue:
        """Register a new subscriber queue for a conversation."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        if conversation_id not in self.subscribers:
            self.subscribers[conversation_id] = set()
        self.subscribers[conversation_id].add(queue)
        return queue

    def unsubscribe(self, conversation_id: str, queue: asyncio.Queue) -> None:
        """Remove a subscriber queue."""
        if conversation_id in self.subscribers:
            self.subscribers[conversation_id].discard(queue)
            if not self.subscribers[conversation_id]:
                del self.subscribers[conversation_id]

    def subscriber_count(self, conversation_id: str) -> int:
        return len(self.subscribers.get(conversation_id, ()))

    def publish(self, message: MessageDO) -> int:
        """
        Deliver a message to every subscriber of its conversation.

        Args:
            message: A message that has been durably appended

        Returns:
            Number of subscribers the message was delivered to
        """
        delivered = 0
        for queue in list(self.subscribers.get(message.conversation_id, ())):
            try:
                queue.put_nowait(message)
                delivered += 1
            except asyncio.QueueFull:
                self.logger.warning(
                    f"Subscriber queue full for conversation {message.conversation_id}, "
                    f"dropping message {message.id}"
                )
        return delivered
