"""Core datatypes shared across VoiceForge modules.

Responsibilities:
- Represent inbound submissions and validated synthesis requests.
- Represent provider-side artifacts (cloned voices, tone settings, audio).
- Keep the orchestrator, web layer, and CLI free of cross-module imports.

Key types:
- `FormSubmission`, `AudioSample`, `SynthesisMode`, `SynthesisRequest`,
  `ToneSettings`, `ClonedVoiceHandle`, `AudioResult`, and `CleanupResult`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SynthesisMode(str, Enum):
    """Which voice source a request synthesizes with."""

    STANDARD = "standard"
    CLONING = "cloning"


@dataclass(frozen=True, slots=True)
class AudioSample:
    """An uploaded audio sample used to clone a voice.

    Attributes:
        filename: Client-supplied file name (may be empty).
        content_type: Client-declared MIME type of the upload.
        data: Raw sample bytes.
    """

    filename: str
    content_type: str | None
    data: bytes

    @property
    def size_bytes(self) -> int:
        """Return the sample size in bytes."""

        return len(self.data)


@dataclass(frozen=True, slots=True)
class FormSubmission:
    """Raw inbound submission before validation.

    Attributes:
        content_type: Declared `Content-Type` header value, if any.
        text: Raw `text` form field.
        voice: Raw `voice` form field.
        audio_sample: Uploaded `audioFile` part, when one was attached.
    """

    content_type: str | None
    text: str | None = None
    voice: str | None = None
    audio_sample: AudioSample | None = None


@dataclass(frozen=True, slots=True)
class SynthesisRequest:
    """A validated request to synthesize speech.

    Exactly one of `voice_id` and `audio_sample` is set, matching `mode`.
    """

    text: str
    mode: SynthesisMode
    voice_id: str | None = None
    audio_sample: AudioSample | None = None

    def __post_init__(self) -> None:
        """Enforce the mode/voice-source pairing."""

        if self.mode is SynthesisMode.STANDARD:
            if not self.voice_id or self.audio_sample is not None:
                raise ValueError("Standard requests need a voice id and no audio sample.")
        elif self.audio_sample is None or self.voice_id is not None:
            raise ValueError("Cloning requests need an audio sample and no voice id.")


@dataclass(frozen=True, slots=True)
class ToneSettings:
    """Provider voice settings controlling expressiveness.

    Attributes:
        stability: Lower values allow more variation between generations.
        similarity_boost: How closely output adheres to the source voice.
        style: Style exaggeration amount.
        use_speaker_boost: Whether to boost similarity to the original speaker.
    """

    stability: float
    similarity_boost: float
    style: float = 0.5
    use_speaker_boost: bool = True

    def as_payload(self) -> dict[str, float | bool]:
        """Return the provider `voice_settings` JSON object."""

        return {
            "stability": self.stability,
            "similarity_boost": self.similarity_boost,
            "style": self.style,
            "use_speaker_boost": self.use_speaker_boost,
        }


STANDARD_TONE = ToneSettings(stability=0.7, similarity_boost=0.7)
CLONED_TONE = ToneSettings(stability=0.5, similarity_boost=0.5)


def tone_for_mode(mode: SynthesisMode) -> ToneSettings:
    """Return the fixed tone settings for a synthesis mode."""

    if mode is SynthesisMode.CLONING:
        return CLONED_TONE
    return STANDARD_TONE


@dataclass(frozen=True, slots=True)
class ClonedVoiceHandle:
    """Provider voice created for, and owned by, a single request run."""

    voice_id: str


@dataclass(frozen=True, slots=True)
class AudioResult:
    """Synthesized audio ready to be returned to the caller."""

    audio_bytes: bytes
    mime_type: str
    suggested_filename: str


@dataclass(frozen=True, slots=True)
class CleanupResult:
    """Outcome of deleting a cloned voice; never raised, only observed."""

    voice_id: str
    deleted: bool
    detail: str | None = None
