"""Entity change notifications for the host application.

The host owns an ``EntityEventBus`` instance and emits a channel name
whenever entities of that kind change; views subscribe to the channels
they display and re-run their search over a fresh snapshot. There is no
module-level bus: every instance is independent.
"""

import logging
from typing import Callable, Dict, Iterable, List, Union

from polaris.normalize import EntityKind

logger = logging.getLogger(__name__)

Handler = Callable[[EntityKind], None]


class EntityEventBus:
    """Broadcast entity-channel updates to subscribed handlers with error isolation."""

    def __init__(self):
        self._handlers: Dict[EntityKind, List[Handler]] = {}

    def subscribe(
        self,
        channels: Union[EntityKind, str, Iterable[Union[EntityKind, str]]],
        handler: Handler,
    ) -> Callable[[], None]:
        """Subscribe *handler* to one or more channels.

        Returns:
            A callable that removes this subscription.
        """
        if isinstance(channels, (EntityKind, str)):
            channels = [channels]
        watched = [EntityKind(c) for c in channels]
        for channel in watched:
            handlers = self._handlers.setdefault(channel, [])
            if handler not in handlers:
                handlers.append(handler)

        def unsubscribe() -> None:
            for channel in watched:
                handlers = self._handlers.get(channel, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def emit(self, channel: Union[EntityKind, str]) -> int:
        """Notify every handler watching *channel*.

        Returns:
            Number of handlers that ran without raising.
        """
        channel = EntityKind(channel)
        delivered = 0
        for handler in list(self._handlers.get(channel, [])):
            try:
                handler(channel)
                delivered += 1
            except Exception as e:
                logger.error(
                    "Entity event handler failed for %s: %s", channel.value, e, exc_info=True
                )
        return delivered

    def handler_count(self, channel: Union[EntityKind, str, None] = None) -> int:
        if channel is None:
            return sum(len(h) for h in self._handlers.values())
        return len(self._handlers.get(EntityKind(channel), []))
