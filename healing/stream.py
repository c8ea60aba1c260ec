"""
Progress Stream
===============

Per-session relay between the healing pipeline and at most one live
listener. The stream holds no business logic: producers publish events,
the attached sink (if any) receives them in emission order.

- attaching sends a ``connected`` event and replaces any previous sink
- publishing without a sink drops the event (no buffering, no replay)
- a failing sink is detached and the failure is printed, never raised
"""

import asyncio
from typing import AsyncIterator, Dict, Optional, Protocol

from .errors import StreamError
from .events import (
    CompileResult,
    CompileStarted,
    Complete,
    Connected,
    Error,
    FileEmitted,
    Fixing,
    ProgressEvent,
    Status,
    TerminalOutput,
)


class EventSink(Protocol):
    """Anything that can receive progress events without blocking"""

    def send(self, event: ProgressEvent) -> None:
        ...

    def close(self) -> None:
        ...


class QueueSink:
    """Sink backed by an asyncio queue, drained by an SSE response"""

    _CLOSED = None

    def __init__(self):
        self._queue: "asyncio.Queue[Optional[ProgressEvent]]" = asyncio.Queue()
        self.closed = False

    def send(self, event: ProgressEvent) -> None:
        if self.closed:
            raise StreamError("Sink is closed")
        self._queue.put_nowait(event)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._queue.put_nowait(self._CLOSED)

    async def events(self) -> AsyncIterator[ProgressEvent]:
        """Yield events until the sink is closed or a terminal event passes"""
        while True:
            event = await self._queue.get()
            if event is self._CLOSED:
                return
            yield event
            if event.terminal:
                return


class ProgressStream:
    """Session id -> sink registry with typed emitters"""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self._sinks: Dict[str, EventSink] = {}

    # ------------------------------------------------------------------
    # Listener management
    # ------------------------------------------------------------------

    def attach(self, session_id: str, sink: EventSink) -> None:
        previous = self._sinks.get(session_id)
        if previous is not None and previous is not sink:
            previous.close()
        self._sinks[session_id] = sink
        self.publish(session_id, Connected())

    def detach(self, session_id: str, sink: Optional[EventSink] = None) -> bool:
        """Remove the sink for a session.

        When ``sink`` is given, only that sink is removed; a newer listener
        that replaced it stays attached.
        """
        current = self._sinks.get(session_id)
        if current is None or (sink is not None and current is not sink):
            return False
        del self._sinks[session_id]
        current.close()
        return True

    def has_sink(self, session_id: str) -> bool:
        return session_id in self._sinks

    def publish(self, session_id: str, event: ProgressEvent) -> None:
        sink = self._sinks.get(session_id)
        if sink is None:
            return
        try:
            sink.send(event)
        except Exception as e:
            err = e if isinstance(e, StreamError) else StreamError(str(e))
            print(f"  ⚠️  Dropping listener for session {session_id}: {err}")
            self.detach(session_id, sink)

    def session(self, session_id: str) -> "SessionProgress":
        return SessionProgress(self, session_id)

    # ------------------------------------------------------------------
    # Typed emitters
    # ------------------------------------------------------------------

    def status(self, session_id: str, message: str, progress: Optional[int] = None) -> None:
        self.publish(session_id, Status(message=message, progress=progress))

    def file(self, session_id: str, path: str, content: str) -> None:
        self.publish(session_id, FileEmitted(path=path, content=content))

    def terminal(self, session_id: str, text: str, is_error: bool = False) -> None:
        self.publish(session_id, TerminalOutput(text=text, is_error=is_error))

    def compile_start(self, session_id: str, attempt: Optional[int] = None) -> None:
        self.publish(session_id, CompileStarted(attempt=attempt))

    def compile_result(
        self,
        session_id: str,
        success: bool,
        error_text: Optional[str] = None,
        warning_text: Optional[str] = None,
    ) -> None:
        self.publish(
            session_id,
            CompileResult(success=success, error_text=error_text, warning_text=warning_text),
        )

    def fixing(self, session_id: str, attempt: int, max_attempts: int) -> None:
        self.publish(session_id, Fixing(attempt=attempt, max_attempts=max_attempts))

    def complete(self, session_id: str, data: dict) -> None:
        self.publish(session_id, Complete(data=data))

    def error(self, session_id: str, message: str, error_code: Optional[str] = None) -> None:
        self.publish(session_id, Error(message=message, error_code=error_code))


class SessionProgress:
    """A ProgressStream bound to one session id"""

    def __init__(self, stream: ProgressStream, session_id: str):
        self.stream = stream
        self.session_id = session_id

    def status(self, message: str, progress: Optional[int] = None) -> None:
        self.stream.status(self.session_id, message, progress)

    def file(self, path: str, content: str) -> None:
        self.stream.file(self.session_id, path, content)

    def terminal(self, text: str, is_error: bool = False) -> None:
        self.stream.terminal(self.session_id, text, is_error)

    def compile_start(self, attempt: Optional[int] = None) -> None:
        self.stream.compile_start(self.session_id, attempt)

    def compile_result(
        self,
        success: bool,
        error_text: Optional[str] = None,
        warning_text: Optional[str] = None,
    ) -> None:
        self.stream.compile_result(self.session_id, success, error_text, warning_text)

    def fixing(self, attempt: int, max_attempts: int) -> None:
        self.stream.fixing(self.session_id, attempt, max_attempts)

    def complete(self, data: dict) -> None:
        self.stream.complete(self.session_id, data)

    def error(self, message: str, error_code: Optional[str] = None) -> None:
        self.stream.error(self.session_id, message, error_code)
