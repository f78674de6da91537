"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
the voice catalog, and synthesis results.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from .errors import VoiceForgeError
from .synthesis.orchestrator import SynthesisOutcome
from .tts.voices import VoiceProfile


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, VoiceForgeError):
        typer.secho(f"{command_name} failed: {exc.summary}", fg=typer.colors.RED, err=True)
        if exc.detail:
            typer.secho(f"Details: {exc.detail}", fg=typer.colors.RED, err=True)
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_voice_catalog(profiles: tuple[VoiceProfile, ...]) -> None:
    """Print one row per catalog voice: id, name, and tags."""

    for profile in profiles:
        tags = ", ".join(profile.tags)
        typer.echo(f"{profile.voice_id}  {profile.display_name} ({tags})")


def echo_synthesis_summary(outcome: SynthesisOutcome, output_path: Path) -> None:
    """Print where audio was written and which path produced it."""

    mode = outcome.mode.value if outcome.mode is not None else "unknown"
    typer.echo(f"Request id: {outcome.request_id}")
    typer.echo(f"Mode: {mode}")
    typer.echo(f"Audio: {output_path}")
