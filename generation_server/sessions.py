"""
Session Registry
================

Tracks generation sessions started through the HTTP surface. Each session
runs the pipeline as its own asyncio task; the start call never awaits it.

- one active session per id (a reused active id is rejected)
- finished sessions are kept for inspection, oldest dropped first
- an unexpected crash still ends the session with a terminal error event
"""

import asyncio
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from healing import (
    DuplicateSessionError,
    GenerationPipeline,
    GenerationRequest,
    ProgressStream,
    SessionOutcome,
)

INTERNAL_ERROR_MESSAGE = "Internal error during generation"


@dataclass
class SessionRecord:
    """State of one generation session"""
    session_id: str
    description: str
    category: str
    status: str = "running"  # running | succeeded | failed | crashed
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    outcome: Optional[SessionOutcome] = None
    task: Optional["asyncio.Task"] = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self.status == "running"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "sessionId": self.session_id,
            "description": self.description,
            "category": self.category,
            "status": self.status,
            "startedAt": self.started_at.isoformat(),
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
        }
        if self.outcome is not None:
            data["outcome"] = self.outcome.to_dict()
        return data


class SessionRegistry:
    """Spawn and track pipeline runs keyed by session id"""

    def __init__(
        self,
        pipeline: GenerationPipeline,
        stream: ProgressStream,
        max_finished: int = 100,
        verbose: bool = False,
    ):
        self.pipeline = pipeline
        self.stream = stream
        self.max_finished = max_finished
        self.verbose = verbose
        self._sessions: Dict[str, SessionRecord] = {}

    def start(self, request: GenerationRequest) -> SessionRecord:
        """Validate, register and spawn the session; returns immediately"""
        request.validate()
        existing = self._sessions.get(request.session_id)
        if existing is not None and existing.active:
            raise DuplicateSessionError(f"Session {request.session_id} is already running")

        record = SessionRecord(
            session_id=request.session_id,
            description=request.description,
            category=request.category,
        )
        self._sessions[request.session_id] = record
        record.task = asyncio.create_task(self._run(record, request))
        if self.verbose:
            print(f"  ▶ [{request.session_id}] Session started ({request.category})")
        return record

    async def _run(self, record: SessionRecord, request: GenerationRequest) -> None:
        try:
            outcome = await self.pipeline.run(request)
        except asyncio.CancelledError:
            record.status = "crashed"
            record.finished_at = datetime.now(timezone.utc)
            raise
        except Exception:
            print(f"  ✗ [{record.session_id}] Session crashed:")
            traceback.print_exc()
            record.status = "crashed"
            self.stream.error(record.session_id, INTERNAL_ERROR_MESSAGE, "internal_error")
        else:
            record.outcome = outcome
            record.status = "succeeded" if outcome.success else "failed"
        record.finished_at = datetime.now(timezone.utc)
        self._prune()

    def _prune(self) -> None:
        finished = [r for r in self._sessions.values() if not r.active]
        excess = len(finished) - self.max_finished
        if excess <= 0:
            return
        finished.sort(key=lambda r: r.finished_at or r.started_at)
        for record in finished[:excess]:
            del self._sessions[record.session_id]

    def get(self, session_id: str) -> Optional[SessionRecord]:
        return self._sessions.get(session_id)

    async def wait(self, session_id: str) -> Optional[SessionRecord]:
        """Await the session's task (tests and the CLI use this)"""
        record = self._sessions.get(session_id)
        if record is None:
            return None
        if record.task is not None:
            await asyncio.shield(record.task)
        return record

    def active_count(self) -> int:
        return sum(1 for r in self._sessions.values() if r.active)

    async def shutdown(self) -> None:
        """Cancel sessions still running when the server stops"""
        tasks = [r.task for r in self._sessions.values() if r.active and r.task]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
