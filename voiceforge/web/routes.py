"""HTTP routes for voice generation and the voice catalog."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Request, Response

from ..config import VoiceForgeConfig
from ..errors import ConfigurationError, UnknownVoiceProfile, ValidationError, VoiceForgeError
from ..models.datatypes import FormSubmission
from ..synthesis.orchestrator import SynthesisOrchestrator
from ..telemetry.logger import RequestLogger
from ..tts.voices import STANDARD_VOICES, find_voice_profile
from .forms import read_submission
from .responses import error_response, outcome_response

router = APIRouter(prefix="/api")

_PREVIEW_ENCODING = "application/x-www-form-urlencoded"


def _ready_orchestrator(request: Request) -> SynthesisOrchestrator:
    """Return the app's orchestrator or raise when no credential is configured."""

    config: VoiceForgeConfig = request.app.state.config
    orchestrator: SynthesisOrchestrator | None = request.app.state.orchestrator
    if orchestrator is None or not config.has_api_key:
        raise ConfigurationError()
    return orchestrator


@router.post("/generate-voice")
async def generate_voice(request: Request) -> Response:
    """Synthesize speech from a form submission, cloning a voice when a sample is attached."""

    request_id = uuid.uuid4().hex
    try:
        orchestrator = _ready_orchestrator(request)
    except ConfigurationError as exc:
        return error_response(exc, request_id)

    try:
        submission = await read_submission(request)
    except ValidationError as exc:
        RequestLogger(request_id).log_failure("reading_form", exc)
        return error_response(exc, request_id)
    except Exception as exc:
        RequestLogger(request_id).log_failure("reading_form", exc)
        return error_response(VoiceForgeError(str(exc) or type(exc).__name__), request_id)

    outcome = await orchestrator.run(submission, request_id=request_id)
    return outcome_response(outcome)


@router.get("/voices")
async def list_voices() -> dict[str, list[dict[str, object]]]:
    """Return the static Standard-mode voice catalog."""

    return {"voices": [profile.as_payload() for profile in STANDARD_VOICES]}


@router.post("/voices/{voice_id}/preview")
async def preview_voice(voice_id: str, request: Request) -> Response:
    """Synthesize a catalog voice's canned preview text."""

    request_id = uuid.uuid4().hex
    try:
        orchestrator = _ready_orchestrator(request)
        profile = find_voice_profile(voice_id)
    except (ConfigurationError, UnknownVoiceProfile) as exc:
        return error_response(exc, request_id)

    submission = FormSubmission(
        content_type=_PREVIEW_ENCODING,
        text=profile.preview_text,
        voice=profile.voice_id,
    )
    outcome = await orchestrator.run(submission, request_id=request_id)
    return outcome_response(outcome)
