"""Shared pytest fixtures for the full VoiceForge test suite."""

from __future__ import annotations

import contextlib
from collections.abc import Iterator

import pytest
from loguru import logger

from voiceforge.models.datatypes import AudioSample, FormSubmission

MULTIPART = "multipart/form-data; boundary=test-boundary"


@pytest.fixture
def captured_logs() -> Iterator[list[str]]:
    """Collect loguru messages emitted while the test runs."""

    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(str(message).rstrip("\n")),
        format="{message}",
        level="DEBUG",
    )
    yield messages
    with contextlib.suppress(ValueError):
        logger.remove(handler_id)


@pytest.fixture
def small_sample() -> AudioSample:
    """Provide a 5 MB audio sample, inside the clone size limit."""

    return AudioSample(filename="me.mp3", content_type="audio/mpeg", data=b"\x00" * (5 * 1024 * 1024))


@pytest.fixture
def standard_submission() -> FormSubmission:
    """Provide a Standard-mode submission for voice `v1`."""

    return FormSubmission(content_type=MULTIPART, text="Hello", voice="v1")


@pytest.fixture
def cloning_submission(small_sample: AudioSample) -> FormSubmission:
    """Provide a Cloning-mode submission with a 5 MB sample."""

    return FormSubmission(content_type=MULTIPART, text="Hello", audio_sample=small_sample)
