"""
Generation Server
=================

FastAPI application exposing the generation pipeline. All long-lived
collaborators (progress stream, pipeline, session registry) are built once
here and shared through ``app.state``.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from healing import GenerationPipeline, ProgressStream
from pipeline_config import Settings, build_pipeline

from .routes import router, service_router
from .sessions import SessionRegistry


def create_app(
    settings: Optional[Settings] = None,
    stream: Optional[ProgressStream] = None,
    pipeline: Optional[GenerationPipeline] = None,
) -> FastAPI:
    """Build the app; pass ``pipeline``/``stream`` to inject test doubles"""
    if settings is None:
        settings = Settings.from_env()
        settings.validate()
    stream = stream or (pipeline.stream if pipeline else ProgressStream(verbose=settings.verbose))
    pipeline = pipeline or build_pipeline(settings, stream)
    sessions = SessionRegistry(pipeline, stream, verbose=settings.verbose)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await sessions.shutdown()

    app = FastAPI(
        title="Contract Generation API",
        description="Generate, self-heal and store MultiversX smart contracts",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.stream = stream
    app.state.pipeline = pipeline
    app.state.sessions = sessions

    app.include_router(router)
    app.include_router(service_router)
    return app


def print_banner(settings: Settings) -> None:
    print("=" * 70)
    print("CONTRACT GENERATION SERVER")
    print("=" * 70)
    print(f"  Port:        {settings.port}")
    print(f"  Generator:   {settings.generator_backend}{' (MOCK MODE)' if settings.mock_mode else ''}")
    print(f"  Store:       {settings.store_backend}")
    print(f"  Toolchain:   {settings.toolchain} ({settings.build_executor})")
    print(f"  Max fixes:   {settings.max_heal_attempts}")
    if settings.skip_compile:
        print("  ⚠️  SKIP_COMPILE enabled: generated code is stored without building")
    print("=" * 70)


def main() -> None:
    settings = Settings.from_env()
    settings.validate()
    print_banner(settings)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
