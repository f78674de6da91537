"""Synthesis orchestration state machine.

Responsibilities:
- Drive one submission through validation, cloning, synthesis, and cleanup.
- Own a cloned voice for the lifetime of its run and always release it.
- Schedule success-path cleanup in the background; await it on failure.
- Convert every failure into a `VoiceForgeError` on the returned outcome.

Key types:
- `SynthesisState`, `CleanupMode`, `SynthesisRun`, `SynthesisOutcome`,
  `VoiceClient`, and `SynthesisOrchestrator`.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from ..errors import ValidationError, VoiceForgeError
from ..models.datatypes import (
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
from ..telemetry.logger import RequestLogger
from .validation import MAX_AUDIO_SAMPLE_BYTES, validate_submission


class VoiceClient(Protocol):
    """Protocol for the remote provider operations the orchestrator needs."""

    async def create_voice_from_sample(self, sample: AudioSample) -> str:
        """Create a provider voice from a sample and return its id."""

    async def synthesize(self, voice_id: str, text: str, tone: ToneSettings) -> bytes:
        """Return synthesized audio bytes."""

    async def delete_voice(self, voice_id: str) -> CleanupResult:
        """Delete a provider voice and report the outcome without raising."""


class SynthesisState(str, Enum):
    """States of one synthesis run."""

    VALIDATING = "validating"
    CLONE_PENDING = "clone_pending"
    DIRECT_SYNTHESIS = "direct_synthesis"
    SYNTHESIZING = "synthesizing"
    CLEANUP = "cleanup"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = frozenset({SynthesisState.DONE, SynthesisState.FAILED})


class CleanupMode(str, Enum):
    """How the delete of an owned voice relates to the caller's response."""

    BACKGROUND = "background"
    BLOCKING = "blocking"


_SUGGESTED_FILENAMES = {
    SynthesisMode.STANDARD: "generated-voice.mp3",
    SynthesisMode.CLONING: "cloned-voice.mp3",
}


@dataclass(slots=True)
class SynthesisRun:
    """Mutable state of one run; never shared between requests."""

    request_id: str
    submission: FormSubmission
    state: SynthesisState = SynthesisState.VALIDATING
    request: SynthesisRequest | None = None
    active_voice_id: str | None = None
    owned_voice: ClonedVoiceHandle | None = None
    cleanup_mode: CleanupMode | None = None
    cleanup_issued: bool = False
    audio: AudioResult | None = None
    error: VoiceForgeError | None = None
    history: list[SynthesisState] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class SynthesisOutcome:
    """Terminal result of a run: audio on `DONE`, an error on `FAILED`."""

    request_id: str
    state: SynthesisState
    mode: SynthesisMode | None
    audio: AudioResult | None
    error: VoiceForgeError | None
    cleanup_mode: CleanupMode | None
    history: tuple[SynthesisState, ...]

    @property
    def succeeded(self) -> bool:
        """Return whether the run ended in `DONE`."""

        return self.state is SynthesisState.DONE


_StepHandler = Callable[[SynthesisRun, RequestLogger], Awaitable[SynthesisState]]


class SynthesisOrchestrator:
    """Run synthesis requests against a provider client, one run per call.

    Remote calls are awaited in sequence. The only exception is the delete of
    a cloned voice after successful synthesis, which runs as a background task
    whose result is only logged.
    """

    def __init__(
        self,
        client: VoiceClient,
        *,
        max_sample_bytes: int = MAX_AUDIO_SAMPLE_BYTES,
        audio_mime_type: str = "audio/mpeg",
    ) -> None:
        """Initialize with an injected provider client and response settings."""

        self._client = client
        self._max_sample_bytes = max_sample_bytes
        self._audio_mime_type = audio_mime_type
        self._background_tasks: set[asyncio.Task[None]] = set()
        self._steps: dict[SynthesisState, _StepHandler] = {
            SynthesisState.VALIDATING: self._validate,
            SynthesisState.CLONE_PENDING: self._clone,
            SynthesisState.DIRECT_SYNTHESIS: self._use_catalog_voice,
            SynthesisState.SYNTHESIZING: self._synthesize,
            SynthesisState.CLEANUP: self._cleanup,
        }

    @property
    def pending_cleanup_count(self) -> int:
        """Return how many background deletes have not finished yet."""

        return sum(1 for task in self._background_tasks if not task.done())

    async def run(
        self,
        submission: FormSubmission,
        request_id: str | None = None,
    ) -> SynthesisOutcome:
        """Drive a submission to `DONE` or `FAILED` and return the outcome."""

        run = SynthesisRun(request_id=request_id or uuid.uuid4().hex, submission=submission)
        run_logger = RequestLogger(run.request_id)
        run.history.append(run.state)
        try:
            while run.state not in TERMINAL_STATES:
                try:
                    next_state = await self._steps[run.state](run, run_logger)
                except Exception as exc:
                    next_state = self._fail_unexpected(run, run_logger, exc)
                self._transition(run, run_logger, next_state)
        except asyncio.CancelledError:
            self._release_on_cancel(run, run_logger)
            raise

        return SynthesisOutcome(
            request_id=run.request_id,
            state=run.state,
            mode=run.request.mode if run.request is not None else None,
            audio=run.audio,
            error=run.error,
            cleanup_mode=run.cleanup_mode,
            history=tuple(run.history),
        )

    async def wait_for_background_cleanup(self) -> None:
        """Wait until every scheduled background delete has finished."""

        pending = [task for task in self._background_tasks if not task.done()]
        while pending:
            await asyncio.gather(*pending, return_exceptions=True)
            pending = [task for task in self._background_tasks if not task.done()]

    async def _validate(self, run: SynthesisRun, run_logger: RequestLogger) -> SynthesisState:
        """Validate the submission and pick the cloning or catalog path."""

        try:
            run.request = validate_submission(run.submission, self._max_sample_bytes)
        except ValidationError as exc:
            return self._fail(run, run_logger, exc)

        if run.request.mode is SynthesisMode.CLONING:
            return SynthesisState.CLONE_PENDING
        return SynthesisState.DIRECT_SYNTHESIS

    async def _clone(self, run: SynthesisRun, run_logger: RequestLogger) -> SynthesisState:
        """Create the cloned voice; nothing needs cleanup if this fails."""

        sample = self._validated(run).audio_sample
        if sample is None:
            raise VoiceForgeError("Cloning step reached without an audio sample.")
        try:
            voice_id = await self._client.create_voice_from_sample(sample)
        except VoiceForgeError as exc:
            return self._fail(run, run_logger, exc)

        run.owned_voice = ClonedVoiceHandle(voice_id=voice_id)
        run.active_voice_id = voice_id
        return SynthesisState.SYNTHESIZING

    async def _use_catalog_voice(
        self, run: SynthesisRun, run_logger: RequestLogger
    ) -> SynthesisState:
        """Use the caller's voice id without taking ownership of anything."""

        run.active_voice_id = self._validated(run).voice_id
        return SynthesisState.SYNTHESIZING

    async def _synthesize(self, run: SynthesisRun, run_logger: RequestLogger) -> SynthesisState:
        """Synthesize with mode-specific tone and route owned voices to cleanup."""

        request = self._validated(run)
        if run.active_voice_id is None:
            raise VoiceForgeError("Synthesis step reached without a voice id.")
        tone = tone_for_mode(request.mode)
        try:
            audio_bytes = await self._client.synthesize(run.active_voice_id, request.text, tone)
        except VoiceForgeError as exc:
            self._fail(run, run_logger, exc)
            if run.owned_voice is None:
                return SynthesisState.FAILED
            run.cleanup_mode = CleanupMode.BLOCKING
            return SynthesisState.CLEANUP

        run.audio = AudioResult(
            audio_bytes=audio_bytes,
            mime_type=self._audio_mime_type,
            suggested_filename=_SUGGESTED_FILENAMES[request.mode],
        )
        if run.owned_voice is None:
            return SynthesisState.DONE
        run.cleanup_mode = CleanupMode.BACKGROUND
        return SynthesisState.CLEANUP

    async def _cleanup(self, run: SynthesisRun, run_logger: RequestLogger) -> SynthesisState:
        """Delete the owned voice: detached on success, awaited on failure."""

        if run.owned_voice is None or run.cleanup_mode is None:
            raise VoiceForgeError("Cleanup step reached without an owned voice.")
        run.cleanup_issued = True
        if run.cleanup_mode is CleanupMode.BACKGROUND:
            self._spawn_background_cleanup(run.owned_voice, run_logger)
        else:
            await self._delete_owned_voice(run.owned_voice, CleanupMode.BLOCKING, run_logger)

        if run.error is None:
            return SynthesisState.DONE
        return SynthesisState.FAILED

    async def _delete_owned_voice(
        self,
        handle: ClonedVoiceHandle,
        mode: CleanupMode,
        run_logger: RequestLogger,
    ) -> None:
        """Delete a cloned voice and log the outcome; failures never propagate."""

        try:
            result = await self._client.delete_voice(handle.voice_id)
        except Exception as exc:
            run_logger.log_cleanup(
                handle.voice_id, mode.value, deleted=False, detail=str(exc) or type(exc).__name__
            )
            return
        run_logger.log_cleanup(handle.voice_id, mode.value, result.deleted, result.detail)

    def _spawn_background_cleanup(
        self, handle: ClonedVoiceHandle, run_logger: RequestLogger
    ) -> None:
        """Start a delete task the caller does not wait for."""

        task = asyncio.create_task(
            self._delete_owned_voice(handle, CleanupMode.BACKGROUND, run_logger),
            name=f"voice-cleanup-{handle.voice_id}",
        )
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    def _release_on_cancel(self, run: SynthesisRun, run_logger: RequestLogger) -> None:
        """Schedule deletion of an owned voice when the run is cancelled mid-flight."""

        if run.owned_voice is None or run.cleanup_issued:
            return
        run.cleanup_issued = True
        run.cleanup_mode = CleanupMode.BACKGROUND
        self._spawn_background_cleanup(run.owned_voice, run_logger)

    @staticmethod
    def _validated(run: SynthesisRun) -> SynthesisRequest:
        """Return the run's validated request or raise when validation has not run."""

        if run.request is None:
            raise VoiceForgeError("Synthesis step reached before validation.")
        return run.request

    def _fail(
        self, run: SynthesisRun, run_logger: RequestLogger, error: VoiceForgeError
    ) -> SynthesisState:
        """Record the run's error and return `FAILED`."""

        run.error = error
        run_logger.log_failure(run.state.value, error)
        return SynthesisState.FAILED

    def _fail_unexpected(
        self, run: SynthesisRun, run_logger: RequestLogger, exc: Exception
    ) -> SynthesisState:
        """Wrap an unexpected exception; an owned voice still gets a blocking delete."""

        run.error = VoiceForgeError(str(exc) or type(exc).__name__)
        run_logger.log_failure(run.state.value, exc)
        if run.owned_voice is not None and not run.cleanup_issued:
            run.cleanup_mode = CleanupMode.BLOCKING
            return SynthesisState.CLEANUP
        return SynthesisState.FAILED

    @staticmethod
    def _transition(
        run: SynthesisRun, run_logger: RequestLogger, target: SynthesisState
    ) -> None:
        """Move the run to `target`, recording and logging the transition."""

        run_logger.log_transition(run.state.value, target.value)
        run.state = target
        run.history.append(target)
