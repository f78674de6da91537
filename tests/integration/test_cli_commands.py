"""Integration tests for the VoiceForge CLI commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from pytest import MonkeyPatch
from typer.testing import CliRunner

from tests.fakes import FAKE_AUDIO, FakeVoiceClient
from voiceforge.cli import app
from voiceforge.errors import SynthesisFailed
from voiceforge.models.datatypes import CLONED_TONE, STANDARD_TONE


class InMemoryCredentialStore:
    """Simple in-memory credential store used for CLI tests."""

    def __init__(self, initial_api_key: str | None = None, available: bool = True) -> None:
        """Initialize the store with an optional pre-seeded API key."""

        self._api_key = initial_api_key
        self._available = available

    def is_available(self) -> bool:
        """Return availability flag expected by the CLI status command."""

        return self._available

    def get_api_key(self) -> str | None:
        """Return currently stored API key value."""

        return self._api_key

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized API key value."""

        self._api_key = api_key.strip()

    def clear_api_key(self) -> bool:
        """Clear API key and return whether one existed."""

        existed = self._api_key is not None
        self._api_key = None
        return existed


@pytest.fixture
def credential_store(monkeypatch: MonkeyPatch) -> InMemoryCredentialStore:
    """Route every CLI credential lookup to one in-memory store."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr("voiceforge.cli.create_credential_store", lambda: store)
    monkeypatch.setattr("voiceforge.cli.configure_logging", lambda *args, **kwargs: None)
    return store


@pytest.fixture
def fake_client(monkeypatch: MonkeyPatch) -> FakeVoiceClient:
    """Replace provider construction with a call-recording double."""

    client = FakeVoiceClient(clone_voice_id="c1")
    monkeypatch.setattr(
        "voiceforge.cli.ProviderFactory.create_voice_client",
        lambda config: client,
    )
    return client


def test_voices_command_lists_catalog() -> None:
    """`voices` should print one line per built-in voice."""

    result = CliRunner().invoke(app, ["voices"])

    assert result.exit_code == 0
    assert "21m00Tcm4TlvDq8ikWAM  Rachel (American, Female, Professional)" in result.output
    assert "EXAVITQu4vr4xnSDxMaL  Bella (British, Female, Friendly)" in result.output


def test_generate_standard_writes_audio_file(
    tmp_path: Path,
    credential_store: InMemoryCredentialStore,
    fake_client: FakeVoiceClient,
) -> None:
    """`generate --voice` should synthesize with that catalog voice."""

    output_path = tmp_path / "out" / "hello.mp3"
    result = CliRunner().invoke(
        app,
        [
            "generate",
            "Hello there",
            "--voice",
            "21m00Tcm4TlvDq8ikWAM",
            "--api-key",
            "cli-key",
            "--no-store-api-key",
            "--out",
            str(output_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert output_path.read_bytes() == FAKE_AUDIO
    assert "Mode: standard" in result.output
    assert fake_client.calls == [
        ("synthesize", "21m00Tcm4TlvDq8ikWAM", "Hello there", STANDARD_TONE)
    ]
    assert credential_store.get_api_key() is None


def test_generate_requires_voice_or_sample(
    tmp_path: Path,
    credential_store: InMemoryCredentialStore,
    fake_client: FakeVoiceClient,
) -> None:
    """`generate` with neither `--voice` nor `--sample` should exit 1 without provider calls."""

    output_path = tmp_path / "x.mp3"
    result = CliRunner().invoke(
        app,
        ["generate", "Hello", "--api-key", "k", "--no-store-api-key", "--out", str(output_path)],
    )

    assert result.exit_code == 1
    assert "generate failed: Missing voice source" in result.output
    assert "--voice ID" in result.output
    assert fake_client.calls == []
    assert not output_path.exists()


def test_generate_with_sample_clones_and_cleans_up(
    tmp_path: Path,
    credential_store: InMemoryCredentialStore,
    fake_client: FakeVoiceClient,
) -> None:
    """`generate --sample` should clone, synthesize, and delete before exiting."""

    sample_path = tmp_path / "me.mp3"
    sample_path.write_bytes(b"\x00" * 2048)
    output_path = tmp_path / "cloned.mp3"
    credential_store.set_api_key("stored-key")

    result = CliRunner().invoke(
        app,
        ["generate", "Hello", "--sample", str(sample_path), "--out", str(output_path)],
    )

    assert result.exit_code == 0, result.output
    assert "Mode: cloning" in result.output
    assert output_path.read_bytes() == FAKE_AUDIO
    assert fake_client.calls == [
        ("create", 2048),
        ("synthesize", "c1", "Hello", CLONED_TONE),
        ("delete", "c1"),
    ]
    assert fake_client.completed_deletes == ["c1"]


def test_generate_without_api_key_fails_with_hint(
    tmp_path: Path,
    credential_store: InMemoryCredentialStore,
    fake_client: FakeVoiceClient,
) -> None:
    """Missing credentials should exit 1 before any provider call."""

    result = CliRunner().invoke(
        app, ["generate", "Hello", "--voice", "v1", "--out", str(tmp_path / "x.mp3")]
    )

    assert result.exit_code == 1
    assert "generate failed: Server configuration error - API key missing" in result.output
    assert "Hint:" in result.output
    assert fake_client.calls == []


def test_generate_reports_provider_failure(
    tmp_path: Path,
    credential_store: InMemoryCredentialStore,
    fake_client: FakeVoiceClient,
) -> None:
    """Synthesis errors should be rendered with their provider detail."""

    fake_client.synthesis_error = SynthesisFailed("Voice not found")
    output_path = tmp_path / "x.mp3"

    result = CliRunner().invoke(
        app,
        ["generate", "Hello", "--voice", "missing", "--api-key", "k", "--no-store-api-key",
         "--out", str(output_path)],
    )

    assert result.exit_code == 1
    assert "generate failed: Speech generation failed" in result.output
    assert "Details: Voice not found" in result.output
    assert not output_path.exists()


def test_credentials_status_reports_storage_state(
    credential_store: InMemoryCredentialStore,
) -> None:
    """Status output should report availability and presence without the secret."""

    credential_store.set_api_key("secret-value")
    result = CliRunner().invoke(app, ["credentials"])

    assert result.exit_code == 0
    assert "Secure credential storage: available" in result.output
    assert "Stored ElevenLabs API key: present" in result.output
    assert "secret-value" not in result.output


def test_credentials_set_and_clear_api_key(credential_store: InMemoryCredentialStore) -> None:
    """`--set-api-key` should store a prompted key and `--clear-api-key` remove it."""

    runner = CliRunner()
    set_result = runner.invoke(app, ["credentials", "--set-api-key"], input="  new-key  \n")

    assert set_result.exit_code == 0, set_result.output
    assert "API key stored in secure credential storage." in set_result.output
    assert credential_store.get_api_key() == "new-key"

    clear_result = runner.invoke(app, ["credentials", "--clear-api-key"])

    assert clear_result.exit_code == 0
    assert "Stored API key cleared from secure credential storage." in clear_result.output
    assert credential_store.get_api_key() is None


def test_credentials_rejects_conflicting_flags(credential_store: InMemoryCredentialStore) -> None:
    """Setting and clearing in one invocation should fail."""

    result = CliRunner().invoke(app, ["credentials", "--set-api-key", "--clear-api-key"])

    assert result.exit_code == 1
    assert "credentials failed: Conflicting options" in result.output


def test_serve_rejects_invalid_port_before_starting(
    monkeypatch: MonkeyPatch,
    credential_store: InMemoryCredentialStore,
) -> None:
    """Invalid bind settings should fail without launching uvicorn."""

    def _fail_run(*args: object, **kwargs: object) -> None:
        """Fail the test if the server would start."""

        raise AssertionError("uvicorn.run should not be called")

    monkeypatch.setattr("voiceforge.cli.uvicorn.run", _fail_run)

    result = CliRunner().invoke(app, ["serve", "--port", "70000"])

    assert result.exit_code == 1
    assert "serve failed:" in result.output
    assert "`port` must be between 1 and 65535." in result.output


def test_serve_passes_resolved_settings_to_uvicorn(
    monkeypatch: MonkeyPatch,
    credential_store: InMemoryCredentialStore,
    fake_client: FakeVoiceClient,
) -> None:
    """`serve` should hand the app and bind settings to uvicorn."""

    captured: dict[str, object] = {}

    def _fake_run(web_app: object, **kwargs: object) -> None:
        """Record uvicorn arguments instead of serving."""

        captured["app"] = web_app
        captured.update(kwargs)

    monkeypatch.setattr("voiceforge.cli.uvicorn.run", _fake_run)

    result = CliRunner().invoke(
        app,
        ["serve", "--host", "0.0.0.0", "--port", "9100", "--api-key", "k", "--no-store-api-key"],
    )

    assert result.exit_code == 0, result.output
    assert captured["host"] == "0.0.0.0"
    assert captured["port"] == 9100
    assert captured["log_level"] == "info"
    assert captured["app"].state.orchestrator is not None  # type: ignore[attr-defined]
