import abc
import logging
import queue
import threading
from typing import Any, Optional

from csgsi.envconfig import POLL_INTERVAL

logger = logging.getLogger(__name__)


class QueueClosedError(RuntimeError):
    """A message was sent after the consumer stopped accepting them."""
    pass


class QueueConsumer(metaclass=abc.ABCMeta):
    """
    Abstract base class for consumers that process messages from a bounded
    FIFO queue on a single thread.

    Producers block while the queue is full. Once the consumer is stopped, or
    its ``run`` loop has exited for any reason, further sends raise
    ``QueueClosedError`` instead of blocking or dropping the message.

    Implementations must override the process_message method to handle
    specific message types.
    """

    def __init__(self, maxsize: int = 0,
                 poll_interval: float = POLL_INTERVAL) -> None:
        """
        Initialize a new queue consumer.

        Args:
            maxsize: Capacity of the queue; 0 means unbounded
            poll_interval: Seconds a blocked producer or idle consumer waits
                before rechecking whether the queue was closed
        """
        self._message_queue: queue.Queue = queue.Queue(maxsize)
        self._closed = threading.Event()
        # Held for each put, so nothing is enqueued after run() sees the
        # queue closed and empty.
        self._put_lock = threading.Lock()
        self.poll_interval = poll_interval

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def pending(self) -> int:
        """Return the approximate number of messages waiting."""
        return self._message_queue.qsize()

    def send_message(self, message: Any) -> None:
        """
        Send a message to this consumer's queue, waiting for a free slot.

        Args:
            message: The message to enqueue

        Raises:
            QueueClosedError: If the consumer is stopped
        """
        logger.debug("sending %s to %s", type(message).__name__,
                     type(self).__name__)
        while True:
            with self._put_lock:
                if self.closed:
                    raise QueueClosedError(
                        f"{type(self).__name__} is no longer accepting messages")
                try:
                    self._message_queue.put(message, timeout=self.poll_interval)
                    return
                except queue.Full:
                    pass
            logger.debug("%s queue is full, waiting", type(self).__name__)

    def _next_message(self) -> Optional[Any]:
        """
        Wait for the next message.

        Returns:
            A one-element tuple holding the message, or None once the queue
            is closed and drained
        """
        while True:
            try:
                return (self._message_queue.get(timeout=self.poll_interval),)
            except queue.Empty:
                with self._put_lock:
                    if self.closed and self._message_queue.empty():
                        return None

    def run(self) -> None:
        """
        Run the consumer, processing messages one at a time in arrival order.

        Returns once the consumer is stopped and every message sent before
        that has been processed. If process_message raises, the queue is
        closed and the exception propagates.
        """
        logger.debug("%s waiting on queue", type(self).__name__)
        try:
            while True:
                item = self._next_message()
                if item is None:
                    logger.info("%s drained its queue", type(self).__name__)
                    return
                self.process_message(item[0])
        finally:
            self._closed.set()

    def stop(self) -> None:
        """Stop accepting messages; run() exits after draining the queue."""
        self._closed.set()

    @abc.abstractmethod
    def process_message(self, message: Any) -> None:
        """
        Process one message from the queue.

        Args:
            message: The message to process
        """
        pass
