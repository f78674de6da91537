"""Domain exceptions surfaced by the voice generation handler and CLI.

Every failure the handler can report is a `VoiceForgeError` carrying a short
human summary, an optional detail string, and the HTTP status it maps to.
"""

from __future__ import annotations


class VoiceForgeError(RuntimeError):
    """Base error with a user-facing summary and optional provider detail."""

    status_code: int = 500
    default_summary: str = "Internal server error"

    def __init__(
        self,
        detail: str | None = None,
        *,
        summary: str | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize an error with summary, detail, and optional CLI hint."""

        resolved_summary = summary or self.default_summary
        super().__init__(resolved_summary if detail is None else f"{resolved_summary}: {detail}")
        self.summary = resolved_summary
        self.detail = detail
        self.hint = hint

    def as_payload(self) -> dict[str, str]:
        """Return the JSON error body, omitting `details` when none is known."""

        payload = {"error": self.summary}
        if self.detail:
            payload["details"] = self.detail
        return payload


class ConfigurationError(VoiceForgeError):
    """Raised when the server cannot operate, e.g. the API key is missing."""

    default_summary = "Server configuration error - API key missing"


class ValidationError(VoiceForgeError):
    """Raised when an inbound submission is rejected before any remote call."""

    status_code = 400
    default_summary = "Invalid request"


class UnsupportedMediaType(ValidationError):
    """Raised when a submission is not a multipart or URL-encoded form."""

    default_summary = "Invalid Content-Type header"


class MalformedForm(ValidationError):
    """Raised when a declared form body cannot be parsed."""

    default_summary = "Invalid form data"


class MissingField(ValidationError):
    """Raised when a required form field is absent or blank."""

    def __init__(self, field: str, summary: str) -> None:
        """Initialize with the offending form field name."""

        super().__init__(summary=summary)
        self.field = field


class PayloadTooLarge(ValidationError):
    """Raised when an attached audio sample exceeds the configured limit."""

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        """Initialize with the observed sample size and the enforced limit."""

        limit_mb = limit_bytes // (1024 * 1024)
        super().__init__(summary=f"Audio file too large (max {limit_mb}MB)")
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class UnknownVoiceProfile(VoiceForgeError):
    """Raised when a catalog voice id does not exist."""

    status_code = 404
    default_summary = "Unknown voice profile"


class ProviderError(VoiceForgeError):
    """Raised when the remote TTS provider rejects or fails a request."""

    def __init__(
        self,
        detail: str | None = None,
        *,
        failure_kind: str = "unknown",
        provider_status: int | None = None,
    ) -> None:
        """Initialize provider failure metadata used for logging."""

        super().__init__(detail)
        self.failure_kind = failure_kind
        self.provider_status = provider_status


class CloneFailed(ProviderError):
    """Raised when a voice clone cannot be created from the uploaded sample."""

    default_summary = "Voice cloning failed"


class SynthesisFailed(ProviderError):
    """Raised when speech synthesis for a voice fails."""

    default_summary = "Speech generation failed"
