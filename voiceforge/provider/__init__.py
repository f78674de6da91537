"""Remote TTS provider clients."""

from .elevenlabs_client import ElevenLabsClient, ProviderRequestError, TransportError

__all__ = ["ElevenLabsClient", "ProviderRequestError", "TransportError"]
