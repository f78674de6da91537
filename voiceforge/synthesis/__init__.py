"""Voice generation request handling: validation and orchestration."""

from .orchestrator import (
    CleanupMode,
    SynthesisOrchestrator,
    SynthesisOutcome,
    SynthesisState,
    VoiceClient,
)
from .validation import MAX_AUDIO_SAMPLE_BYTES, is_form_encoding, validate_submission

__all__ = [
    "CleanupMode",
    "MAX_AUDIO_SAMPLE_BYTES",
    "SynthesisOrchestrator",
    "SynthesisOutcome",
    "SynthesisState",
    "VoiceClient",
    "is_form_encoding",
    "validate_submission",
]
