"""Configuration model and loaders for VoiceForge.

Responsibilities:
- Define server/provider settings as a typed dataclass.
- Provide deterministic precedence resolution for runtime provider settings.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `VoiceForgeConfig`: normalized settings injected into the app and CLI.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `VoiceForgeConfig`.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import normalize_optional_string, parse_positive_float, parse_positive_int
from .provider.elevenlabs_client import DEFAULT_BASE_URL, DEFAULT_MODEL_ID
from .synthesis.validation import MAX_AUDIO_SAMPLE_BYTES

_SUPPORTED_PROVIDER_IDS = frozenset({"elevenlabs"})
_SUPPORTED_LOG_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"})


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class VoiceForgeConfig:
    """Settings for the voice generation server and provider client.

    Attributes:
        provider: Provider identifier; only `elevenlabs` is supported.
        api_key: Provider API key; requests fail upfront when it is missing.
        base_url: Provider REST base URL.
        model_id: Provider synthesis model identifier.
        max_sample_bytes: Upper bound for uploaded clone samples.
        request_timeout_seconds: Per-call provider timeout, `None` for none.
        clone_voice_name: Name given to temporary cloned voices.
        clone_voice_description: Description given to temporary cloned voices.
        host: Bind address for `voiceforge serve`.
        port: Bind port for `voiceforge serve`.
        log_level: Loguru level for the request log sink.
    """

    provider: str = "elevenlabs"
    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    model_id: str = DEFAULT_MODEL_ID
    max_sample_bytes: int = MAX_AUDIO_SAMPLE_BYTES
    request_timeout_seconds: float | None = None
    clone_voice_name: str = "Cloned Voice"
    clone_voice_description: str = "Voice cloned from audio sample"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    @property
    def has_api_key(self) -> bool:
        """Return whether a non-blank API key is configured."""

        return normalize_optional_string(self.api_key) is not None

    def validate(self) -> None:
        """Validate configuration values before the server or CLI uses them."""

        if self.provider not in _SUPPORTED_PROVIDER_IDS:
            supported = ", ".join(sorted(_SUPPORTED_PROVIDER_IDS))
            raise ValueError(
                f"Unsupported `provider` value `{self.provider}`; supported: {supported}."
            )
        self._require_non_empty(self.base_url, "base_url")
        self._require_non_empty(self.model_id, "model_id")
        self._require_non_empty(self.clone_voice_name, "clone_voice_name")
        self._require_non_empty(self.host, "host")
        if self.max_sample_bytes <= 0:
            raise ValueError("`max_sample_bytes` must be a positive integer.")
        if self.request_timeout_seconds is not None and self.request_timeout_seconds <= 0:
            raise ValueError("`request_timeout_seconds` must be a positive number.")
        if not 0 < self.port < 65536:
            raise ValueError("`port` must be between 1 and 65535.")
        if self.log_level.upper() not in _SUPPORTED_LOG_LEVELS:
            supported = ", ".join(sorted(_SUPPORTED_LOG_LEVELS))
            raise ValueError(f"Unsupported `log_level` `{self.log_level}`; supported: {supported}.")

    def resolved_runtime(self, sources: RuntimeConfigSources | None = None) -> VoiceForgeConfig:
        """Return a copy with provider settings resolved by source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field value.
        """

        resolved_sources = sources if sources is not None else RuntimeConfigSources()
        resolved = dataclasses.replace(
            self,
            api_key=self._resolve_optional_runtime_value(
                key="api_key",
                env_key="ELEVENLABS_API_KEY",
                default_value=self.api_key,
                sources=resolved_sources,
            ),
            base_url=self._resolve_runtime_value(
                key="base_url",
                env_key="VOICEFORGE_BASE_URL",
                default_value=self.base_url,
                sources=resolved_sources,
            ),
            model_id=self._resolve_runtime_value(
                key="model_id",
                env_key="VOICEFORGE_MODEL_ID",
                default_value=self.model_id,
                sources=resolved_sources,
            ),
        )
        resolved.validate()
        return resolved

    def _resolve_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str:
        """Resolve a required runtime value from sources in precedence order."""

        value = self._resolve_optional_runtime_value(key, env_key, default_value, sources)
        if value is None:
            raise ValueError(
                f"`{key}` could not be resolved from CLI, secure storage, env, or defaults."
            )
        return value

    def _resolve_optional_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve an optional runtime value from sources in precedence order."""

        cli_value = self._normalized_lookup(sources.cli, key)
        if cli_value is not None:
            return cli_value

        secure_value = self._normalized_lookup(sources.secure, key)
        if secure_value is not None:
            return secure_value

        env_value = self._normalized_lookup(sources.env, env_key)
        if env_value is not None:
            return env_value

        return normalize_optional_string(default_value)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        """Return a stripped mapping value for a key or `None` when missing/blank."""

        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `VoiceForgeConfig` from external sources."""

    _STRING_KEYS = (
        "provider",
        "api_key",
        "base_url",
        "model_id",
        "clone_voice_name",
        "clone_voice_description",
        "host",
        "log_level",
    )
    _SUPPORTED_YAML_KEYS = frozenset(
        {*_STRING_KEYS, "max_sample_bytes", "request_timeout_seconds", "port"}
    )
    _ENV_KEYS = {
        "provider": "VOICEFORGE_PROVIDER",
        "api_key": "ELEVENLABS_API_KEY",
        "base_url": "VOICEFORGE_BASE_URL",
        "model_id": "VOICEFORGE_MODEL_ID",
        "clone_voice_name": "VOICEFORGE_CLONE_VOICE_NAME",
        "clone_voice_description": "VOICEFORGE_CLONE_VOICE_DESCRIPTION",
        "host": "VOICEFORGE_HOST",
        "log_level": "VOICEFORGE_LOG_LEVEL",
        "max_sample_bytes": "VOICEFORGE_MAX_SAMPLE_BYTES",
        "request_timeout_seconds": "VOICEFORGE_REQUEST_TIMEOUT_SECONDS",
        "port": "VOICEFORGE_PORT",
    }

    @staticmethod
    def from_yaml(path: Path) -> VoiceForgeConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"YAML `{path}` includes unsupported key(s): {key_list}.")

        return ConfigLoader._build_config(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> VoiceForgeConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload = {
            key: env_map[env_key]
            for key, env_key in ConfigLoader._ENV_KEYS.items()
            if normalize_optional_string(env_map.get(env_key)) is not None
        }
        return ConfigLoader._build_config(payload, source_label="Environment")

    @staticmethod
    def _build_config(payload: Mapping[str, Any], source_label: str) -> VoiceForgeConfig:
        """Build a validated config from a normalized mapping payload."""

        values: dict[str, Any] = {}
        for key in ConfigLoader._STRING_KEYS:
            value = normalize_optional_string(payload.get(key))
            if value is not None:
                values[key] = value

        try:
            if normalize_optional_string(payload.get("max_sample_bytes")) is not None:
                values["max_sample_bytes"] = parse_positive_int(
                    payload["max_sample_bytes"], "max_sample_bytes"
                )
            if normalize_optional_string(payload.get("port")) is not None:
                values["port"] = parse_positive_int(payload["port"], "port")
            if normalize_optional_string(payload.get("request_timeout_seconds")) is not None:
                values["request_timeout_seconds"] = parse_positive_float(
                    payload["request_timeout_seconds"], "request_timeout_seconds"
                )
        except ValueError as exc:
            raise ValueError(f"{source_label} has an invalid value: {exc}") from exc

        config = VoiceForgeConfig(**values)
        config.validate()
        return config
