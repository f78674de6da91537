"""ElevenLabs HTTP client for voice cloning, speech synthesis, and voice deletion.

Responsibilities:
- Send the three provider requests to ElevenLabs' REST API with `requests`.
- Run blocking transport calls in worker threads so callers stay cooperative.
- Fold HTTP and transport failures into `CloneFailed` / `SynthesisFailed`.
- Report voice deletion outcomes without ever raising.
"""

from __future__ import annotations

import asyncio
import json
import re
import socket
from typing import Any
from urllib.parse import quote

import requests

from ..errors import CloneFailed, ConfigurationError, SynthesisFailed
from ..models.datatypes import AudioSample, CleanupResult, ToneSettings
from ..parsing import normalize_optional_string

DEFAULT_BASE_URL = "https://api.elevenlabs.io/v1"
DEFAULT_MODEL_ID = "eleven_monolingual_v2"
DEFAULT_AUDIO_MIME_TYPE = "audio/mpeg"


class ProviderRequestError(RuntimeError):
    """Raised when an ElevenLabs request fails or returns a malformed body."""

    def __init__(
        self,
        detail: str,
        *,
        failure_kind: str = "http_error",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for stage-aware diagnostics."""

        super().__init__(detail)
        self.detail = detail
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


class TransportError(ProviderRequestError):
    """Raised when the provider cannot be reached or the request times out."""


class ElevenLabsClient:
    """Minimal requests-based ElevenLabs client used by the orchestrator."""

    _MAX_PROVIDER_MESSAGE_CHARS = 300

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        model_id: str = DEFAULT_MODEL_ID,
        timeout_seconds: float | None = None,
        clone_voice_name: str = "Cloned Voice",
        clone_voice_description: str = "Voice cloned from audio sample",
        audio_mime_type: str = DEFAULT_AUDIO_MIME_TYPE,
    ) -> None:
        """Initialize ElevenLabs HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        if not self.api_key:
            raise ConfigurationError(
                hint="Set `ELEVENLABS_API_KEY`, use `--api-key`, or store a key with "
                "`voiceforge credentials --set-api-key`."
            )
        self.base_url = base_url.rstrip("/")
        self.model_id = model_id
        self.timeout_seconds = timeout_seconds
        self.clone_voice_name = clone_voice_name
        self.clone_voice_description = clone_voice_description
        self.audio_mime_type = audio_mime_type

    async def create_voice_from_sample(self, sample: AudioSample) -> str:
        """Create a provider voice from an audio sample and return its id."""

        try:
            raw_payload = await asyncio.to_thread(self._post_clone_request, sample)
        except ProviderRequestError as exc:
            raise CloneFailed(
                exc.detail,
                failure_kind=exc.failure_kind,
                provider_status=exc.status_code,
            ) from exc

        voice_id = self._extract_voice_id(raw_payload)
        if voice_id is None:
            raise CloneFailed(
                "No voice_id returned from cloning API",
                failure_kind="malformed_response",
            )
        return voice_id

    async def synthesize(self, voice_id: str, text: str, tone: ToneSettings) -> bytes:
        """Return synthesized audio bytes for `text` spoken by `voice_id`."""

        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": tone.as_payload(),
        }
        try:
            audio_bytes = await asyncio.to_thread(
                self._send,
                "POST",
                f"/text-to-speech/{quote(voice_id, safe='')}",
                accept=self.audio_mime_type,
                json=payload,
            )
        except ProviderRequestError as exc:
            raise SynthesisFailed(
                exc.detail,
                failure_kind=exc.failure_kind,
                provider_status=exc.status_code,
            ) from exc

        if not audio_bytes:
            raise SynthesisFailed(
                "Provider returned an empty audio payload.",
                failure_kind="empty_response",
            )
        return audio_bytes

    async def delete_voice(self, voice_id: str) -> CleanupResult:
        """Delete a provider voice and report the outcome instead of raising."""

        try:
            await asyncio.to_thread(self._send, "DELETE", f"/voices/{quote(voice_id, safe='')}")
        except ProviderRequestError as exc:
            return CleanupResult(voice_id=voice_id, deleted=False, detail=exc.detail)
        return CleanupResult(voice_id=voice_id, deleted=True)

    def _post_clone_request(self, sample: AudioSample) -> bytes:
        """POST the multipart voice-clone request and return the raw response body."""

        return self._send(
            "POST",
            "/voices/add",
            data={
                "name": self.clone_voice_name,
                "description": self.clone_voice_description,
            },
            files=[
                (
                    "files",
                    (
                        sample.filename or "sample",
                        sample.data,
                        sample.content_type or "application/octet-stream",
                    ),
                )
            ],
        )

    def _send(
        self,
        method: str,
        endpoint_path: str,
        *,
        accept: str | None = None,
        **kwargs: Any,
    ) -> bytes:
        """Execute one ElevenLabs request and map failures consistently."""

        endpoint = f"{self.base_url}{endpoint_path}"
        headers = {"xi-api-key": self.api_key}
        if accept is not None:
            headers["Accept"] = accept
        try:
            response = requests.request(
                method,
                endpoint,
                headers=headers,
                timeout=self.timeout_seconds,
                **kwargs,
            )
            response.raise_for_status()
            return bytes(response.content)
        except requests.HTTPError as exc:
            raise self._http_error_to_provider_error(exc) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = "Provider request timed out."
            else:
                detail = self._short_message(self._redact_sensitive_tokens(str(exc)))
            raise TransportError(detail, failure_kind=failure_kind) from exc
        except TimeoutError as exc:
            raise TransportError("Provider request timed out.", failure_kind="timeout") from exc
        except Exception as exc:
            raise ProviderRequestError(
                f"Provider request failed: {self._short_message(str(exc))}",
                failure_kind="unknown",
            ) from exc

    @staticmethod
    def _extract_voice_id(raw_payload: bytes) -> str | None:
        """Extract a non-blank `voice_id` from a clone response body."""

        try:
            payload = json.loads(raw_payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        if not isinstance(payload, dict):
            return None
        return normalize_optional_string(payload.get("voice_id"))

    @staticmethod
    def _decode_error_body(exc: requests.HTTPError) -> str:
        """Decode an HTTP error body into a best-effort UTF-8 payload string."""

        response = exc.response
        if response is None:
            return ""
        try:
            return bytes(response.content).decode("utf-8", errors="replace").strip()
        except Exception:
            return ""

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        redacted = re.sub(r"\bsk_[A-Za-z0-9]{8,}\b", "[redacted-key]", text)
        return re.sub(
            r"(?i)xi-api-key['\"]?\s*[:=]\s*['\"]?[A-Za-z0-9_-]{8,}",
            "xi-api-key: [redacted-key]",
            redacted,
        )

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing provider message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> tuple[str, str | None]:
        """Extract the provider message (or raw body) and optional status code.

        ElevenLabs reports errors as `{"detail": {"status": ..., "message": ...}}`,
        `{"detail": "..."}`, or `{"message": "..."}`.
        """

        if not body:
            return "", None

        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(cls._redact_sensitive_tokens(body)), None

        provider_code: str | None = None
        message: str | None = None
        if isinstance(payload, dict):
            message = normalize_optional_string(payload.get("message"))
            detail = payload.get("detail")
            if isinstance(detail, dict):
                provider_code = normalize_optional_string(detail.get("status"))
                if message is None:
                    message = normalize_optional_string(detail.get("message"))
            elif message is None and isinstance(detail, str):
                message = normalize_optional_string(detail)

        if message is None:
            message = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)

        return cls._short_message(cls._redact_sensitive_tokens(message)), provider_code

    @staticmethod
    def _classify_http_failure(status_code: int, provider_code: str | None) -> str:
        """Classify ElevenLabs HTTP errors into deterministic diagnostic kinds."""

        normalized_code = provider_code.lower() if provider_code is not None else ""
        if status_code == 401 or normalized_code in {"invalid_api_key", "needs_authorization"}:
            return "invalid_api_key"
        if status_code == 429 or normalized_code == "quota_exceeded":
            return "quota_exceeded"
        if status_code == 404 or normalized_code == "voice_not_found":
            return "voice_not_found"
        if status_code in {408, 504}:
            return "timeout"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into deterministic diagnostic kinds."""

        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    @classmethod
    def _http_error_to_provider_error(cls, exc: requests.HTTPError) -> ProviderRequestError:
        """Convert HTTP errors into normalized provider exceptions with metadata."""

        status_code = exc.response.status_code if exc.response is not None else 0
        body = cls._decode_error_body(exc)
        provider_message, provider_code = cls._extract_provider_message(body)
        detail = provider_message or f"Request failed with status code {status_code}"
        return ProviderRequestError(
            detail,
            failure_kind=cls._classify_http_failure(status_code, provider_code),
            status_code=status_code,
            provider_code=provider_code,
        )
