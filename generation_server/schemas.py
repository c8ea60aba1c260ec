"""Request/response models for the generation API."""

from typing import Optional

from pydantic import BaseModel, Field


class GenerateStartRequest(BaseModel):
    """Body of POST /api/generation/generate-start.

    Fields are optional at the schema level so missing ones produce the
    service's own 400 response instead of a 422.
    """

    sessionId: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    creator: Optional[str] = Field(default=None, description="Creator address or user id")

    def missing_fields(self) -> list:
        return [
            name
            for name in ("sessionId", "description", "category")
            if not (getattr(self, name) or "").strip()
        ]


class GenerateStartResponse(BaseModel):
    accepted: bool
    sessionId: str


class OneShotGenerateRequest(BaseModel):
    description: Optional[str] = None
    category: Optional[str] = "general"
    creator: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    mockMode: bool
    skipCompile: bool
    toolchain: str
    activeSessions: int
