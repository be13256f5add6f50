"""
In-process publish/subscribe for support desk events.

Handlers are keyed by event class name. Without an executor they run inline
in the publisher's thread; with one, each call is submitted to it and
publish() returns immediately. A failing handler is logged and skipped:
the write that produced the event has already committed.
"""

import logging
from collections import defaultdict
from concurrent.futures import Executor
from typing import Callable, Dict, List

from core.events import SupportEvent

logger = logging.getLogger(__name__)

Handler = Callable[[SupportEvent], None]


def _name_of(handler: Handler) -> str:
    return getattr(handler, "__name__", repr(handler))


class EventBus:
    """
    Usage:
        bus = EventBus(executor)
        bus.subscribe("IssueCreated", send_receipt)
        bus.publish(IssueCreated.create(issue=issue))

    Handlers for one event type are called (or submitted) in the order
    they subscribed.
    """

    def __init__(self, executor: Executor | None = None):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._executor = executor

    def subscribe(self, event_type: str, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def publish(self, event: SupportEvent) -> None:
        for handler in list(self._handlers.get(type(event).__name__, ())):
            if self._executor is None:
                self._run(handler, event)
                continue
            try:
                self._executor.submit(self._run, handler, event)
            except RuntimeError:
                # submit() after shutdown
                logger.error("Dropped %s for event %s: executor is shut down",
                             _name_of(handler), event.event_id)

    @staticmethod
    def _run(handler: Handler, event: SupportEvent) -> None:
        try:
            handler(event)
        except Exception:
            logger.exception("%s raised while handling %s %s",
                             _name_of(handler), type(event).__name__, event.event_id)
