"""Notification sinks delivering proximity alerts off the pipeline."""

import asyncio
import logging
from collections.abc import Coroutine, Iterable
from typing import Any

import httpx

from defrost.core.notifier import NotificationRequest, NotificationSink, NotificationSinkError
from defrost.websocket.manager import ConnectionManager

logger = logging.getLogger(__name__)


class _BackgroundDelivery:
    """Schedules delivery coroutines on the running loop without awaiting them."""

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    def _schedule(self, coro: Coroutine[Any, Any, Any], identifier: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise NotificationSinkError("No running event loop for delivery") from None

        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._finished(t, identifier))

    def _finished(self, task: asyncio.Task, identifier: str) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Delivery of alert {identifier} failed: {error}")

    @property
    def pending(self) -> int:
        return len(self._tasks)


class WebSocketNotificationSink(_BackgroundDelivery):
    """
    Pushes alerts to connected UI clients.

    ``authorized`` stands in for the user's notification permission; while it
    is off every request is refused.
    """

    def __init__(self, manager: ConnectionManager, authorized: bool = True):
        super().__init__()
        self.manager = manager
        self.authorized = authorized

    def emit(self, request: NotificationRequest) -> None:
        if not self.authorized:
            raise NotificationSinkError("Notification permission not granted")
        self._schedule(self.manager.broadcast(request), request.identifier)


class WebhookNotificationSink(_BackgroundDelivery):
    """Posts alerts as JSON to an HTTP push gateway."""

    def __init__(self, url: str, timeout: float = 10.0):
        super().__init__()
        self.url = url
        self.timeout = timeout

    async def _post(self, request: NotificationRequest) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.url, json=request.model_dump(mode="json"))
            response.raise_for_status()

    def emit(self, request: NotificationRequest) -> None:
        self._schedule(self._post(request), request.identifier)


class CompositeNotificationSink:
    """Hands every request to each sink; fails only if all of them refuse."""

    def __init__(self, sinks: Iterable[NotificationSink]):
        self.sinks = list(sinks)

    def emit(self, request: NotificationRequest) -> None:
        errors: list[str] = []
        for sink in self.sinks:
            try:
                sink.emit(request)
            except Exception as e:
                errors.append(f"{type(sink).__name__}: {e}")

        if errors and len(errors) == len(self.sinks):
            raise NotificationSinkError("; ".join(errors))
        for error in errors:
            logger.warning(f"Partial delivery failure for {request.identifier}: {error}")
