"""Live repository events over server-sent events.

Two ways to consume the stream:

- :func:`iter_events` is a pull-based async iterator; closing it (or leaving
  the ``async for`` loop) releases the connection.
- :class:`EventSubscription` drives the iterator from a background task and
  pushes each event to a handler until :meth:`EventSubscription.close` is
  called.

A frame whose payload does not decode is logged and skipped; the stream keeps
going. A dropped connection is logged and not re-established.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, replace

import httpx

from jul_client.core.mappers import map_jul_event
from jul_client.core.queries import build_query, repo_path
from jul_client.core.transport import JulApiError, Transport
from jul_client.models.events import JulEvent

logger = logging.getLogger(__name__)

type EventHandler = Callable[[JulEvent], Awaitable[None] | None]

EVENT_STREAM_CONTENT_TYPE = "text/event-stream"
DEFAULT_EVENT_NAME = "message"
HANDSHAKE_EVENT_NAME = "ready"


@dataclass(frozen=True, slots=True)
class ServerSentEvent:
    """One dispatched SSE frame."""

    data: str
    event: str = DEFAULT_EVENT_NAME
    id: str | None = None


async def iter_sse(lines: AsyncIterable[str]) -> AsyncIterator[ServerSentEvent]:
    """Group raw stream lines into frames.

    Comment lines (``:``) and unknown fields are ignored. A frame is dispatched
    on a blank line when it carries data; a trailing frame without its blank
    line is dropped.
    """
    data: list[str] = []
    event: str | None = None
    event_id: str | None = None
    async for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            if data:
                yield ServerSentEvent(
                    data="\n".join(data),
                    event=event or DEFAULT_EVENT_NAME,
                    id=event_id,
                )
            data, event, event_id = [], None, None
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "data":
            data.append(value)
        elif name == "event":
            event = value
        elif name == "id":
            event_id = value


def decode_event(frame: ServerSentEvent) -> JulEvent:
    """Decode one frame into a :class:`JulEvent`.

    The frame's ``id`` and ``event`` fields fill in ``event_id`` and ``type``
    when the JSON payload leaves them out. Raises ``ValueError`` when the
    payload is not JSON.
    """
    event = map_jul_event(json.loads(frame.data))
    if event.event_id is None and frame.id:
        event = replace(event, event_id=frame.id)
    if event.type is None and frame.event != DEFAULT_EVENT_NAME:
        event = replace(event, type=frame.event)
    return event


def stream_path(repo: str, since: str | None = None) -> str:
    return f"{repo_path(repo, '/events/stream')}{build_query([('since', since)])}"


async def iter_events(
    transport: Transport,
    repo: str,
    *,
    since: str | None = None,
) -> AsyncIterator[JulEvent]:
    """Yield repository events in the order the server sends them.

    Raises :class:`JulApiError` when the server refuses the stream and
    ``httpx.HTTPError`` when the connection fails.
    """
    headers = {"Accept": EVENT_STREAM_CONTENT_TYPE}
    async with transport.stream("GET", stream_path(repo, since), headers=headers) as response:
        logger.info("Event stream opened for %s", repo)
        async for frame in iter_sse(response.aiter_lines()):
            if frame.event == HANDSHAKE_EVENT_NAME:
                logger.debug("Event stream for %s ready at %s", repo, frame.data)
                continue
            try:
                event = decode_event(frame)
            except ValueError as exc:
                logger.warning("Skipping malformed event on %s stream: %s", repo, exc)
                continue
            yield event


class EventSubscription:
    """One open event stream delivering to a handler.

    Each subscription owns its own connection. :meth:`close` is the disposer
    and must be called on every exit path; ``async with`` does that.
    """

    def __init__(
        self,
        events: AsyncIterator[JulEvent],
        handler: EventHandler,
        *,
        repo: str,
    ) -> None:
        self.repo = repo
        self._events = events
        self._handler = handler
        self._task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> EventSubscription:
        """Begin delivering events; calling it again is a no-op."""
        if self._closed:
            msg = f"Event subscription for {self.repo} is closed"
            raise RuntimeError(msg)
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=f"jul-events:{self.repo}")
        return self

    async def wait(self) -> None:
        """Wait until the server ends the stream or the connection drops."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def close(self) -> None:
        """Stop delivery and release the connection. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._close_events()
        logger.info("Event subscription closed for %s", self.repo)

    async def __aenter__(self) -> EventSubscription:
        return self.start()

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _run(self) -> None:
        try:
            async for event in self._events:
                await self._deliver(event)
        except JulApiError as exc:
            logger.warning(
                "Event stream for %s rejected with status %s: %s", self.repo, exc.status, exc
            )
        except httpx.HTTPError as exc:
            logger.warning("Event stream for %s failed: %s", self.repo, exc)
        else:
            logger.info("Event stream for %s ended by server", self.repo)
        finally:
            await self._close_events()

    async def _deliver(self, event: JulEvent) -> None:
        try:
            result = self._handler(event)
            if inspect.isawaitable(result):
                await result
        except Exception:  # noqa: BLE001
            logger.exception("Event handler failed for %s event %s", self.repo, event.event_id)

    async def _close_events(self) -> None:
        aclose = getattr(self._events, "aclose", None)
        if aclose is not None:
            await aclose()
