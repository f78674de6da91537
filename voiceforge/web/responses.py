"""Response formatting for synthesis outcomes.

Maps `DONE` outcomes to binary audio responses and failures to the
`{"error": ..., "details": ...}` JSON payload with the error's status code.
"""

from __future__ import annotations

from fastapi import Response
from fastapi.responses import JSONResponse

from ..errors import VoiceForgeError
from ..models.datatypes import AudioResult
from ..synthesis.orchestrator import SynthesisOutcome

REQUEST_ID_HEADER = "X-Request-ID"


def audio_response(result: AudioResult, request_id: str) -> Response:
    """Return synthesized audio as a downloadable attachment."""

    return Response(
        content=result.audio_bytes,
        media_type=result.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.suggested_filename}"',
            REQUEST_ID_HEADER: request_id,
        },
    )


def error_response(error: VoiceForgeError, request_id: str) -> JSONResponse:
    """Return the structured JSON payload for a handler error."""

    return JSONResponse(
        error.as_payload(),
        status_code=error.status_code,
        headers={REQUEST_ID_HEADER: request_id},
    )


def outcome_response(outcome: SynthesisOutcome) -> Response:
    """Format a terminal orchestrator outcome."""

    if outcome.succeeded and outcome.audio is not None:
        return audio_response(outcome.audio, outcome.request_id)
    error = outcome.error or VoiceForgeError("Synthesis finished without audio.")
    return error_response(error, outcome.request_id)
