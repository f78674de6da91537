"""Shared typed data models for VoiceForge.

This package contains dataclasses used across handler modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    CLONED_TONE,
    STANDARD_TONE,
    AudioResult,
    AudioSample,
    CleanupResult,
    ClonedVoiceHandle,
    FormSubmission,
    SynthesisMode,
    SynthesisRequest,
    ToneSettings,
    tone_for_mode,
)

__all__ = [
    "AudioResult",
    "AudioSample",
    "CLONED_TONE",
    "CleanupResult",
    "ClonedVoiceHandle",
    "FormSubmission",
    "STANDARD_TONE",
    "SynthesisMode",
    "SynthesisRequest",
    "ToneSettings",
    "tone_for_mode",
]
