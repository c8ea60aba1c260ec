"""HTTP routes: session start, live progress feed, one-shot generation, code lookup."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from healing import (
    DuplicateSessionError,
    GenerationError,
    GenerationRequest,
    QueueSink,
    StorageError,
)

from .schemas import (
    GenerateStartRequest,
    GenerateStartResponse,
    HealthResponse,
    OneShotGenerateRequest,
)

router = APIRouter(prefix="/api")
service_router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.post("/generation/generate-start", response_model=GenerateStartResponse)
async def generate_start(body: GenerateStartRequest, request: Request):
    """Register the session and return at once; progress goes to the stream."""
    missing = body.missing_fields()
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required fields: {', '.join(missing)}",
        )

    generation = GenerationRequest(
        session_id=body.sessionId,
        description=body.description,
        category=body.category,
        creator=body.creator or "user",
    )
    try:
        request.app.state.sessions.start(generation)
    except DuplicateSessionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return GenerateStartResponse(accepted=True, sessionId=body.sessionId)


@router.get("/generation/generate-stream/{session_id}")
async def generate_stream(session_id: str, request: Request, userId: Optional[str] = None):
    """Server-sent event feed for one session.

    Each message is ``data: <json>`` with a ``type`` field. The feed starts
    with ``connected``, carries only events published after attaching, and
    ends after ``complete`` or ``error``. Disconnecting detaches this
    listener; the session keeps running.
    """
    stream = request.app.state.stream
    sink = QueueSink()
    stream.attach(session_id, sink)
    if request.app.state.settings.verbose:
        print(f"  📡 [{session_id}] Listener attached (user={userId or 'anonymous'})")

    async def event_feed():
        try:
            async for event in sink.events():
                yield event.to_sse()
        finally:
            stream.detach(session_id, sink)

    return StreamingResponse(event_feed(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.get("/generation/sessions/{session_id}")
async def get_session(session_id: str, request: Request):
    record = request.app.state.sessions.get(session_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return record.to_dict()


@router.post("/test-generate")
async def one_shot_generate(body: OneShotGenerateRequest, request: Request):
    """Generate and store without compiling (manual smoke test)."""
    if not (body.description or "").strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing description")

    generator = request.app.state.pipeline.generator
    store = request.app.state.pipeline.store
    category = (body.category or "").strip() or "general"
    try:
        code = await generator.generate(body.description, category)
        cid = await store.put(
            code,
            {
                "generationId": "test",
                "description": body.description,
                "category": category,
                "creator": body.creator or "test",
            },
        )
    except (GenerationError, StorageError) as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": str(e), "errorCode": e.error_code},
        )
    return {"success": True, "code": code, "cid": cid}


@router.get("/code/{cid}")
async def get_code(cid: str, request: Request):
    try:
        code = await request.app.state.pipeline.store.get(cid)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True, "cid": cid, "code": code}


@service_router.get("/")
async def root(request: Request):
    settings = request.app.state.settings
    return {
        "service": "Self-healing contract generation service",
        "mockMode": settings.mock_mode,
        "endpoints": {
            "start": "POST /api/generation/generate-start",
            "stream": "GET /api/generation/generate-stream/{sessionId}",
            "session": "GET /api/generation/sessions/{sessionId}",
            "testGenerate": "POST /api/test-generate",
            "code": "GET /api/code/{cid}",
            "health": "GET /health",
        },
    }


@service_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    settings = request.app.state.settings
    return HealthResponse(
        status="ok",
        mockMode=settings.mock_mode,
        skipCompile=settings.skip_compile,
        toolchain=settings.toolchain,
        activeSessions=request.app.state.sessions.active_count(),
    )
