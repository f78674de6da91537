"""Inbound submission validation.

Turns a raw `FormSubmission` into a `SynthesisRequest` or raises a
`ValidationError` subclass. Pure inspection: no I/O, no provider calls.
"""

from __future__ import annotations

from ..errors import MissingField, PayloadTooLarge, UnsupportedMediaType
from ..models.datatypes import FormSubmission, SynthesisMode, SynthesisRequest
from ..parsing import normalize_optional_string

SUPPORTED_FORM_ENCODINGS = ("multipart/form-data", "application/x-www-form-urlencoded")
MAX_AUDIO_SAMPLE_BYTES = 10 * 1024 * 1024


def is_form_encoding(content_type: str | None) -> bool:
    """Return whether a `Content-Type` value declares a supported form encoding."""

    if content_type is None:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type in SUPPORTED_FORM_ENCODINGS


def validate_submission(
    submission: FormSubmission,
    max_sample_bytes: int = MAX_AUDIO_SAMPLE_BYTES,
) -> SynthesisRequest:
    """Validate a submission and build the synthesis request it describes.

    Checks run in order: encoding, text, sample size (Cloning), voice id
    (Standard). An attached sample selects Cloning even when a voice id is
    also present.

    Raises:
        UnsupportedMediaType: The submission is not a form encoding.
        MissingField: `text` is blank, or Standard mode lacks `voice`.
        PayloadTooLarge: The sample exceeds `max_sample_bytes`.
    """

    if not is_form_encoding(submission.content_type):
        raise UnsupportedMediaType()

    text = submission.text or ""
    if not text.strip():
        raise MissingField("text", "Text is required")

    sample = submission.audio_sample
    if sample is not None:
        if sample.size_bytes > max_sample_bytes:
            raise PayloadTooLarge(sample.size_bytes, max_sample_bytes)
        return SynthesisRequest(text=text, mode=SynthesisMode.CLONING, audio_sample=sample)

    voice_id = normalize_optional_string(submission.voice)
    if voice_id is None:
        raise MissingField("voice", "Voice ID is required for standard TTS")
    return SynthesisRequest(text=text, mode=SynthesisMode.STANDARD, voice_id=voice_id)
