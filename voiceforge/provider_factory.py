"""Provider factory for the voice generation client.

Responsibilities:
- Resolve the configured provider identifier to a concrete client.
- Keep the web layer and CLI independent from client construction.

Notes:
- Only `elevenlabs` is implemented at the moment.
"""

from __future__ import annotations

from .config import VoiceForgeConfig
from .provider.elevenlabs_client import ElevenLabsClient
from .synthesis.orchestrator import VoiceClient


class ProviderFactory:
    """Factory for provider-backed clients used by the orchestrator."""

    @staticmethod
    def create_voice_client(config: VoiceForgeConfig) -> VoiceClient:
        """Create a voice client for the configured provider identifier.

        Raises:
            ConfigurationError: The provider API key is missing.
            ValueError: The provider identifier is unsupported.
        """

        if config.provider == "elevenlabs":
            return ElevenLabsClient(
                api_key=config.api_key,
                base_url=config.base_url,
                model_id=config.model_id,
                timeout_seconds=config.request_timeout_seconds,
                clone_voice_name=config.clone_voice_name,
                clone_voice_description=config.clone_voice_description,
            )
        raise ValueError(f"Unsupported voice provider `{config.provider}`.")
