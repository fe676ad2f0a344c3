"""
Notification Transports

A transport registers interest in a remote resource and pushes every event
for that registration to a callback:

    handle = transport.subscribe(address, port, path, callback)
    ...
    callback(handle, Notification(payload=b'...', kind=NotificationKind.DATA))
    ...
    transport.unsubscribe(handle)

Implementations:
- HttpObserveTransport: observes a peer over HTTP by polling (httpx)
- LoopbackTransport: in-process peer for simulation and tests
"""

import asyncio
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

import httpx

from activator.common.exceptions import TransportError
from activator.common.logging_setup import get_service_logger

logger = get_service_logger("observe.transport")

# Status codes meaning "this resource cannot be observed"
REJECT_STATUS_CODES = frozenset((405, 501))


class NotificationKind(str, Enum):
    """Classification of an inbound notification"""
    DATA = "data"  # normal payload
    ACCEPTED = "accepted"  # registration acknowledged
    REJECTED = "rejected"  # peer does not support observation
    ERROR = "error"  # peer answered with an error status
    TIMEOUT = "timeout"  # no reply within the transport's timeout

    @property
    def terminal(self) -> bool:
        return self in (NotificationKind.REJECTED, NotificationKind.ERROR, NotificationKind.TIMEOUT)


@dataclass(frozen=True)
class Notification:
    payload: bytes
    kind: NotificationKind


@dataclass(eq=False)
class SubscriptionHandle:
    """Opaque registration handle, owned by exactly one session"""
    address: str
    port: int
    path: str
    token: str = field(default_factory=lambda: secrets.token_hex(2))
    active: bool = True

    @property
    def url(self) -> str:
        return f"{self.address}:{self.port}/{self.path}"

    def to_dict(self) -> dict:
        return {"url": self.url, "token": self.token, "active": self.active}


NotificationCallback = Callable[[SubscriptionHandle, Notification], None]


class NotificationTransport(ABC):
    """Base class for notification transports"""

    @abstractmethod
    def subscribe(
        self,
        address: str,
        port: int,
        path: str,
        callback: NotificationCallback,
    ) -> SubscriptionHandle:
        """Register for notifications; returns a new handle"""

    @abstractmethod
    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        """Cancel a registration; the handle becomes inactive"""

    async def close(self) -> None:
        """Release transport resources"""


class HttpObserveTransport(NotificationTransport):
    """
    Observe a peer resource over HTTP.

    Each registration runs a polling task against
    http://{address}:{port}/{path}:
    - first 2xx reply -> ACCEPTED
    - later 2xx replies with a changed body -> DATA
    - 405/501 -> REJECTED, any other non-2xx status -> ERROR
    - max_retries consecutive request failures -> TIMEOUT

    The poll period follows the peer's Cache-Control max-age when present.
    Polling ends after any terminal notification.
    """

    def __init__(
        self,
        poll_interval_s: float = 5.0,
        request_timeout_s: float = 2.0,
        max_retries: int = 4,
        client: httpx.AsyncClient | None = None,
    ):
        self.poll_interval_s = poll_interval_s
        self.request_timeout_s = request_timeout_s
        self.max_retries = max_retries

        self._client = client
        self._owns_client = client is None
        self._tasks: dict[str, asyncio.Task] = {}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.request_timeout_s)
        return self._client

    def subscribe(
        self,
        address: str,
        port: int,
        path: str,
        callback: NotificationCallback,
    ) -> SubscriptionHandle:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            raise TransportError("subscribe requires a running event loop", address, port)

        handle = SubscriptionHandle(address=address, port=port, path=path.lstrip("/"))
        self._tasks[handle.token] = asyncio.create_task(self._observe(handle, callback))
        logger.debug(f"Polling http://{handle.url} (token {handle.token})")
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        handle.active = False
        task = self._tasks.pop(handle.token, None)
        if task and not task.done():
            task.cancel()

    async def close(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _max_age(self, response: httpx.Response) -> float | None:
        cache_control = response.headers.get("cache-control", "")
        for directive in cache_control.split(","):
            name, _, value = directive.strip().partition("=")
            if name.lower() == "max-age":
                try:
                    max_age = float(value)
                except ValueError:
                    return None
                return max_age if max_age > 0 else None
        return None

    async def _observe(self, handle: SubscriptionHandle, callback: NotificationCallback) -> None:
        url = f"http://{handle.url}"
        client = self._get_client()
        accepted = False
        last_body: bytes | None = None
        failures = 0
        interval = self.poll_interval_s

        try:
            while handle.active:
                try:
                    response = await client.get(url, timeout=self.request_timeout_s)
                except httpx.TransportError as e:
                    failures += 1
                    logger.debug(f"Poll {url} failed ({failures}/{self.max_retries}): {e}")
                    if failures >= self.max_retries:
                        self._finish(handle, callback, Notification(b"", NotificationKind.TIMEOUT))
                        return
                    await asyncio.sleep(interval)
                    continue

                failures = 0

                if not response.is_success:
                    # Redirects are not followed; anything but 2xx ends the registration
                    kind = (
                        NotificationKind.REJECTED
                        if response.status_code in REJECT_STATUS_CODES
                        else NotificationKind.ERROR
                    )
                    self._finish(handle, callback, Notification(response.content, kind))
                    return

                interval = self._max_age(response) or self.poll_interval_s
                body = response.content

                if not accepted:
                    accepted = True
                    callback(handle, Notification(body, NotificationKind.ACCEPTED))
                elif body != last_body:
                    callback(handle, Notification(body, NotificationKind.DATA))
                last_body = body

                await asyncio.sleep(interval)
        finally:
            if self._tasks.get(handle.token) is asyncio.current_task():
                del self._tasks[handle.token]

    def _finish(
        self,
        handle: SubscriptionHandle,
        callback: NotificationCallback,
        notification: Notification,
    ) -> None:
        handle.active = False
        callback(handle, notification)


class LoopbackTransport(NotificationTransport):
    """
    In-process transport.

    Subscriptions are keyed by path; publish() and the failure helpers
    deliver synchronously to every active subscriber of that path.
    """

    def __init__(self):
        self._subscriptions: dict[str, tuple[SubscriptionHandle, NotificationCallback]] = {}

    @property
    def active_handles(self) -> list[SubscriptionHandle]:
        return [handle for handle, _ in self._subscriptions.values()]

    def subscribe(
        self,
        address: str,
        port: int,
        path: str,
        callback: NotificationCallback,
    ) -> SubscriptionHandle:
        handle = SubscriptionHandle(address=address, port=port, path=path.lstrip("/"))
        self._subscriptions[handle.token] = (handle, callback)
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        handle.active = False
        self._subscriptions.pop(handle.token, None)

    def publish(self, path: str, payload: bytes | str) -> int:
        """Deliver a DATA notification; returns the number of subscribers reached"""
        if isinstance(payload, str):
            payload = payload.encode("ascii")

        delivered = 0
        for handle, callback in self._matching(path):
            callback(handle, Notification(payload, NotificationKind.DATA))
            delivered += 1
        return delivered

    def accept(self, path: str, payload: bytes = b"") -> None:
        """Acknowledge the registrations on path"""
        for handle, callback in self._matching(path):
            callback(handle, Notification(payload, NotificationKind.ACCEPTED))

    def reject(self, path: str) -> None:
        self._end(path, NotificationKind.REJECTED)

    def fail(self, path: str, payload: bytes = b"") -> None:
        self._end(path, NotificationKind.ERROR, payload)

    def time_out(self, path: str) -> None:
        self._end(path, NotificationKind.TIMEOUT)

    def _matching(self, path: str) -> list[tuple[SubscriptionHandle, NotificationCallback]]:
        path = path.lstrip("/")
        return [
            (handle, callback)
            for handle, callback in list(self._subscriptions.values())
            if handle.path == path and handle.active
        ]

    def _end(self, path: str, kind: NotificationKind, payload: bytes = b"") -> None:
        for handle, callback in self._matching(path):
            handle.active = False
            self._subscriptions.pop(handle.token, None)
            callback(handle, Notification(payload, kind))
