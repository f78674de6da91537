"""Command-line interface for VoiceForge.

Responsibilities:
- Expose user-facing commands for serving, listing voices, and one-off synthesis.
- Convert CLI arguments into `VoiceForgeConfig` and run the orchestrator.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import asyncio
import dataclasses
import mimetypes
from pathlib import Path
from typing import Annotated

import typer
import uvicorn

from .cli_rendering import echo_synthesis_summary, echo_voice_catalog, exit_with_command_error
from .cli_runtime import resolve_command_config
from .config import VoiceForgeConfig
from .credentials import create_credential_store
from .errors import ConfigurationError, ValidationError, VoiceForgeError
from .models.datatypes import AudioSample, FormSubmission
from .parsing import normalize_optional_string
from .provider_factory import ProviderFactory
from .synthesis.orchestrator import SynthesisOrchestrator, SynthesisOutcome, VoiceClient
from .telemetry.logger import configure_logging
from .tts.voices import STANDARD_VOICES
from .web.app import create_app

app = typer.Typer(
    name="voiceforge",
    no_args_is_help=True,
    help="VoiceForge CLI.",
)

_UVICORN_LOG_LEVELS = frozenset({"trace", "debug", "info", "warning", "error"})

ConfigFileOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with server/provider settings."),
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="ElevenLabs API key override. Prefer `--prompt-api-key` to avoid shell history.",
    ),
]
PromptApiKeyOption = Annotated[
    bool,
    typer.Option("--prompt-api-key", help="Prompt for API key with hidden input (never echoed)."),
]
StoreApiKeyOption = Annotated[
    bool,
    typer.Option(
        "--store-api-key/--no-store-api-key",
        help="Persist CLI-entered API key to secure credential storage.",
    ),
]


def _build_cli_submission(text: str, voice: str | None, sample: Path | None) -> FormSubmission:
    """Build the same submission shape the HTTP endpoint produces."""

    audio_sample = None
    if sample is not None:
        content_type, _ = mimetypes.guess_type(sample.name)
        audio_sample = AudioSample(
            filename=sample.name,
            content_type=content_type,
            data=sample.read_bytes(),
        )
    return FormSubmission(
        content_type="multipart/form-data",
        text=text,
        voice=voice,
        audio_sample=audio_sample,
    )


async def _run_generation(
    client: VoiceClient,
    config: VoiceForgeConfig,
    submission: FormSubmission,
) -> SynthesisOutcome:
    """Run one synthesis and wait for cloned-voice cleanup before returning."""

    orchestrator = SynthesisOrchestrator(client, max_sample_bytes=config.max_sample_bytes)
    outcome = await orchestrator.run(submission)
    await orchestrator.wait_for_background_cleanup()
    return outcome


@app.command("serve")
def serve_command(
    config_file: ConfigFileOption = None,
    host: Annotated[str | None, typer.Option("--host", help="Bind address override.")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port override.")] = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Run the voice generation HTTP server."""

    try:
        config = resolve_command_config(
            config_file=config_file,
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
            credential_store_factory=create_credential_store,
        )
        config = dataclasses.replace(
            config,
            host=host if host is not None else config.host,
            port=port if port is not None else config.port,
        )
        config.validate()
        configure_logging(config.log_level)
        web_app = create_app(config)
    except Exception as exc:
        exit_with_command_error("serve", exc)

    if not config.has_api_key:
        typer.secho(
            "No ElevenLabs API key configured; synthesis requests will fail.",
            fg=typer.colors.YELLOW,
            err=True,
        )
    uvicorn_log_level = config.log_level.lower()
    uvicorn.run(
        web_app,
        host=config.host,
        port=config.port,
        log_level=uvicorn_log_level if uvicorn_log_level in _UVICORN_LOG_LEVELS else "info",
    )


@app.command("voices")
def voices_command() -> None:
    """List the built-in Standard-mode voices."""

    echo_voice_catalog(STANDARD_VOICES)


@app.command("generate")
def generate_command(
    text: Annotated[str, typer.Argument(help="Text to synthesize.")],
    voice: Annotated[
        str | None,
        typer.Option("--voice", help="Catalog or provider voice id (Standard mode)."),
    ] = None,
    sample: Annotated[
        Path | None,
        typer.Option(
            "--sample",
            exists=True,
            dir_okay=False,
            help="Audio sample to clone a temporary voice from (Cloning mode).",
        ),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Output audio path (defaults to the suggested filename)."),
    ] = None,
    config_file: ConfigFileOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Synthesize one text to an audio file."""

    if voice is None and sample is None:
        exit_with_command_error(
            "generate",
            ValidationError(
                summary="Missing voice source",
                hint="Pass `--voice ID` (see `voiceforge voices`) or `--sample PATH`.",
            ),
        )

    try:
        config = resolve_command_config(
            config_file=config_file,
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
            credential_store_factory=create_credential_store,
        )
        configure_logging(config.log_level)
        if not config.has_api_key:
            raise ConfigurationError(
                hint="Set `ELEVENLABS_API_KEY`, use `--api-key`, or run "
                "`voiceforge credentials --set-api-key`."
            )
        client = ProviderFactory.create_voice_client(config)
        submission = _build_cli_submission(text, voice, sample)
        outcome = asyncio.run(_run_generation(client, config, submission))
    except Exception as exc:
        exit_with_command_error("generate", exc)

    if not outcome.succeeded or outcome.audio is None:
        exit_with_command_error(
            "generate",
            outcome.error or VoiceForgeError("Synthesis finished without audio."),
        )

    output_path = out if out is not None else Path(outcome.audio.suggested_filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(outcome.audio.audio_bytes)
    echo_synthesis_summary(outcome, output_path)


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage the securely stored ElevenLabs API key."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            ConfigurationError(
                "`--set-api-key` and `--clear-api-key` cannot be used together.",
                summary="Conflicting options",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "ElevenLabs API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                ConfigurationError(
                    "No API key entered.",
                    summary="Missing API key",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                ConfigurationError(
                    f"Failed to store API key securely: {exc}",
                    summary="Credential storage failed",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        removed = credential_store.clear_api_key()
        if removed:
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    has_stored_key = credential_store.get_api_key() is not None
    status = "present" if has_stored_key else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored ElevenLabs API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
