"""FastAPI application factory.

Responsibilities:
- Build the app around an injected `VoiceForgeConfig` and optional client.
- Share one orchestrator across requests; each request gets its own run.
- Drain background voice cleanup when the server shuts down.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .. import __version__
from ..config import VoiceForgeConfig
from ..provider_factory import ProviderFactory
from ..synthesis.orchestrator import SynthesisOrchestrator, VoiceClient
from .routes import router


def create_app(config: VoiceForgeConfig, client: VoiceClient | None = None) -> FastAPI:
    """Create the VoiceForge ASGI app.

    Args:
        config: Resolved settings; a missing API key makes every synthesis
            request fail with a configuration error.
        client: Provider client override; built from `config` when omitted.
    """

    if client is None and config.has_api_key:
        client = ProviderFactory.create_voice_client(config)
    orchestrator = (
        SynthesisOrchestrator(client, max_sample_bytes=config.max_sample_bytes)
        if client is not None
        else None
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if orchestrator is not None:
            await orchestrator.wait_for_background_cleanup()

    app = FastAPI(title="VoiceForge", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.orchestrator = orchestrator
    app.include_router(router)
    return app
