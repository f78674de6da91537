"""CLI config and credential resolution helpers.

This module isolates YAML/env config loading, API-key prompting, and secure
API-key persistence from the command wiring layer.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Protocol

import typer

from .config import ConfigLoader, RuntimeConfigSources, VoiceForgeConfig
from .credentials import create_credential_store
from .errors import ConfigurationError
from .parsing import normalize_optional_string


class CredentialStoreProtocol(Protocol):
    """Protocol for secure credential store operations used by CLI resolution."""

    def get_api_key(self) -> str | None:
        """Return currently stored API key, if available."""

    def set_api_key(self, api_key: str) -> None:
        """Persist API key value in secure storage."""


def load_base_config(config_file: Path | None) -> VoiceForgeConfig:
    """Load config from a YAML file when given, else from the environment."""

    if config_file is None:
        try:
            return ConfigLoader.from_env()
        except ValueError as exc:
            raise ConfigurationError(
                str(exc),
                summary="Invalid environment configuration",
                hint="Fix the `VOICEFORGE_*` variables and rerun.",
            ) from exc

    try:
        return ConfigLoader.from_yaml(config_file)
    except FileNotFoundError as exc:
        raise ConfigurationError(
            f"Config file not found: `{config_file}`.",
            summary="Invalid configuration",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid config file `{config_file}`: {exc}",
            summary="Invalid configuration",
            hint="Fix config schema/values and rerun.",
        ) from exc


def resolve_runtime_sources(
    api_key: str | None,
    prompt_api_key: bool,
    store_api_key: bool,
    credential_store_factory: Callable[[], CredentialStoreProtocol] = create_credential_store,
) -> RuntimeConfigSources:
    """Resolve CLI, secure-storage, and environment sources for the API key."""

    runtime_cli_values: dict[str, str] = {}
    normalized_api_key = normalize_optional_string(api_key)
    if normalized_api_key is not None:
        runtime_cli_values["api_key"] = normalized_api_key
    elif prompt_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "ElevenLabs API key (hidden; leave blank to skip)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is not None:
            runtime_cli_values["api_key"] = prompted_api_key

    credential_store = credential_store_factory()
    runtime_secure_values: dict[str, str] = {}
    stored_api_key = credential_store.get_api_key()
    if stored_api_key is not None:
        runtime_secure_values["api_key"] = stored_api_key

    if "api_key" in runtime_cli_values and store_api_key:
        try:
            credential_store.set_api_key(runtime_cli_values["api_key"])
            typer.echo("Stored API key in secure credential storage.")
        except Exception as exc:
            raise ConfigurationError(
                f"Failed to store API key securely: {exc}",
                summary="Credential storage failed",
                hint=(
                    "Install and configure a keyring backend, or rerun with "
                    "`--no-store-api-key` for one-off usage."
                ),
            ) from exc

    return RuntimeConfigSources(
        cli=runtime_cli_values,
        secure=runtime_secure_values,
        env=os.environ,
    )


def resolve_command_config(
    config_file: Path | None,
    api_key: str | None,
    prompt_api_key: bool,
    store_api_key: bool,
    credential_store_factory: Callable[[], CredentialStoreProtocol] = create_credential_store,
) -> VoiceForgeConfig:
    """Resolve the effective config for a command from all sources."""

    base_config = load_base_config(config_file)
    sources = resolve_runtime_sources(
        api_key=api_key,
        prompt_api_key=prompt_api_key,
        store_api_key=store_api_key,
        credential_store_factory=credential_store_factory,
    )
    try:
        return base_config.resolved_runtime(sources)
    except ValueError as exc:
        raise ConfigurationError(str(exc), summary="Invalid configuration") from exc
