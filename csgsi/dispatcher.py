import logging
from typing import Callable, Iterable, List

from csgsi.envconfig import POLL_INTERVAL, QUEUE_SIZE
from csgsi.models import Update
from csgsi.queue_consumer import QueueConsumer

logger = logging.getLogger(__name__)

Listener = Callable[[Update], None]


class Dispatcher(QueueConsumer):
    """Fans each decoded update out to every registered listener.

    Listeners run one after another, in registration order, on the thread
    that calls ``run``. An exception from a listener is not caught: it ends
    the run and closes the queue.
    """

    def __init__(self, listeners: Iterable[Listener] = (),
                 maxsize: int = QUEUE_SIZE,
                 poll_interval: float = POLL_INTERVAL) -> None:
        super().__init__(maxsize, poll_interval)
        self.listeners: List[Listener] = list(listeners)

    def add_listener(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def send_update(self, update: Update) -> None:
        self.send_message(update)

    def process_message(self, message: Update) -> None:
        logger.debug("dispatching update to %d listeners", len(self.listeners))
        for listener in self.listeners:
            listener(message)
