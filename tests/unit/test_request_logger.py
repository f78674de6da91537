"""Unit tests for structured synthesis request logging."""

from __future__ import annotations

import io

from loguru import logger

from voiceforge.errors import SynthesisFailed
from voiceforge.telemetry.logger import RequestLogger, configure_logging


def test_transition_lines_are_deterministic(captured_logs: list[str]) -> None:
    """Transition events should carry request id and sorted context."""

    RequestLogger("req-1").log_transition("validating", "direct_synthesis")

    assert captured_logs == [
        "[synthesis] level=INFO request_id=req-1 event=transition "
        "source=validating target=direct_synthesis"
    ]


def test_failure_lines_include_kind_and_status(captured_logs: list[str]) -> None:
    """Provider failures should log type, kind, and status but not the detail text."""

    error = SynthesisFailed("quota for sk_secret", failure_kind="quota_exceeded", provider_status=429)
    RequestLogger("req-2").log_failure("synthesizing", error)

    assert captured_logs == [
        "[synthesis] level=ERROR request_id=req-2 event=failure error_type=SynthesisFailed "
        "failure_kind=quota_exceeded provider_status=429 state=synthesizing"
    ]


def test_failure_lines_skip_missing_metadata(captured_logs: list[str]) -> None:
    """Non-provider errors have no failure kind or status to report."""

    RequestLogger("req-3").log_failure("validating", ValueError("bad"))

    assert captured_logs == [
        "[synthesis] level=ERROR request_id=req-3 event=failure error_type=ValueError state=validating"
    ]


def test_cleanup_lines_sanitize_detail(captured_logs: list[str]) -> None:
    """Failed deletes should log a shell-safe detail token at WARNING."""

    request_logger = RequestLogger("req-4")
    request_logger.log_cleanup("c1", "background", deleted=True, detail=None)
    request_logger.log_cleanup("c1", "blocking", deleted=False, detail="server down!")

    assert captured_logs == [
        "[synthesis] level=INFO request_id=req-4 event=cleanup deleted=true mode=background voice_id=c1",
        "[synthesis] level=WARNING request_id=req-4 event=cleanup deleted=false "
        "detail=server_down_ mode=blocking voice_id=c1",
    ]


def test_configure_logging_replaces_handlers_and_filters_level() -> None:
    """Configured sink should receive messages at or above the chosen level only."""

    stream = io.StringIO()
    configure_logging("warning", sink=stream)
    try:
        logger.info("hidden")
        logger.warning("shown")
    finally:
        logger.remove()

    assert stream.getvalue() == "shown\n"
