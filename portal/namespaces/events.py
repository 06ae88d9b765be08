"""In-process notifications about app namespace declaration changes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from portal.domain import AppNamespace

logger = logging.getLogger(__name__)


class AppNamespaceEventType(str, Enum):
    """Kinds of declaration changes published to listeners."""

    CREATED = "created"
    DELETED = "deleted"


@dataclass(frozen=True)
class AppNamespaceEvent:
    """Declaration change notification.

    Attributes:
        event_type: Kind of change.
        app_namespace: Declaration as stored after creation or before deletion.
        operator: Principal that performed the change.
    """

    event_type: AppNamespaceEventType
    app_namespace: AppNamespace
    operator: str


AppNamespaceEventListener = Callable[[AppNamespaceEvent], None]


class AppNamespaceEventPublisher:
    """Synchronous publisher delivering events to listeners in subscription order.

    A failing listener propagates its exception to the publishing caller and
    later listeners are not invoked.
    """

    def __init__(self):
        self._listeners: list[AppNamespaceEventListener] = []

    def events_subscribe(self, listener: AppNamespaceEventListener) -> None:
        """Register a listener.

        Args:
            listener: Callable invoked with each published event.

        Returns:
            None: Registration only.

        Raises:
            ValueError: Raised when the listener is missing.
        """

        if listener is None:
            raise ValueError("listener must not be None")
        self._listeners.append(listener)

    def events_publish(self, event: AppNamespaceEvent) -> None:
        for listener in tuple(self._listeners):
            listener(event)


def events_log_listener(event: AppNamespaceEvent) -> None:
    """Log declaration changes for operators."""

    logger.info(
        "app namespace %s: app_id=%s name=%s public=%s operator=%s",
        event.event_type.value,
        event.app_namespace.app_id,
        event.app_namespace.name,
        event.app_namespace.is_public,
        event.operator,
    )
