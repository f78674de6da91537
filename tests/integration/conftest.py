"""Integration-test fixtures for deterministic provider behavior."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _block_provider_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail loudly if an integration test reaches the real ElevenLabs transport."""

    def _refuse_request(method: str, url: str, **kwargs: object) -> None:
        """Raise instead of opening a network connection."""

        del kwargs
        raise AssertionError(f"Unexpected provider request in integration test: {method} {url}")

    monkeypatch.setattr("voiceforge.provider.elevenlabs_client.requests.request", _refuse_request)
    monkeypatch.delenv("ELEVENLABS_API_KEY", raising=False)
