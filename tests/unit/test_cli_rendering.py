"""Unit tests for CLI output and error rendering helpers."""

from __future__ import annotations

from pathlib import Path

import pytest
import typer

from voiceforge.cli_rendering import (
    echo_synthesis_summary,
    echo_voice_catalog,
    exit_with_command_error,
)
from voiceforge.errors import ConfigurationError, SynthesisFailed
from voiceforge.models.datatypes import AudioResult, SynthesisMode
from voiceforge.synthesis.orchestrator import SynthesisOutcome, SynthesisState
from voiceforge.tts.voices import STANDARD_VOICES


def test_exit_with_command_error_renders_domain_error_with_hint(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print summary, details, and hint before exiting with code 1."""

    error = ConfigurationError(
        "`port` must be between 1 and 65535.",
        summary="Invalid configuration",
        hint="Fix config schema/values and rerun.",
    )

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("serve", error)

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "serve failed: Invalid configuration" in captured.err
    assert "Details: `port` must be between 1 and 65535." in captured.err
    assert "Hint: Fix config schema/values and rerun." in captured.err


def test_exit_with_command_error_omits_missing_details(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Errors without detail or hint should render a single summary line."""

    with pytest.raises(typer.Exit):
        exit_with_command_error("generate", SynthesisFailed())

    captured = capsys.readouterr()
    assert captured.err.strip() == "generate failed: Speech generation failed"


def test_exit_with_command_error_renders_non_domain_fallback(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print fallback exception text for non-domain failures."""

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("generate", RuntimeError("disk full"))

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "generate failed: disk full" in captured.err


def test_echo_voice_catalog_prints_one_line_per_voice(capsys: pytest.CaptureFixture[str]) -> None:
    """Catalog rendering should list id, name, and tags for each voice."""

    echo_voice_catalog(STANDARD_VOICES)

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines == [
        "21m00Tcm4TlvDq8ikWAM  Rachel (American, Female, Professional)",
        "AZnzlk1XvdvUeBnXmlld  Domi (American, Female, Casual)",
        "EXAVITQu4vr4xnSDxMaL  Bella (British, Female, Friendly)",
    ]


def test_echo_synthesis_summary_reports_mode_and_path(capsys: pytest.CaptureFixture[str]) -> None:
    """Summary rendering should name the request, the mode, and the written file."""

    outcome = SynthesisOutcome(
        request_id="req-7",
        state=SynthesisState.DONE,
        mode=SynthesisMode.CLONING,
        audio=AudioResult(b"ID3", "audio/mpeg", "cloned-voice.mp3"),
        error=None,
        cleanup_mode=None,
        history=(SynthesisState.VALIDATING, SynthesisState.DONE),
    )

    echo_synthesis_summary(outcome, Path("out/cloned-voice.mp3"))

    output = capsys.readouterr().out
    assert "Request id: req-7" in output
    assert "Mode: cloning" in output
    assert f"Audio: {Path('out/cloned-voice.mp3')}" in output
