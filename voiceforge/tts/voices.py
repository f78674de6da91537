"""Voice profile catalog for Standard-mode synthesis.

Responsibilities:
- Represent pre-built provider voices and their descriptive tags.
- Expose the static catalog used by the web layer and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import UnknownVoiceProfile


@dataclass(frozen=True, slots=True)
class VoiceProfile:
    """Declarative profile of a pre-built provider voice.

    Attributes:
        voice_id: Provider-native voice identifier.
        display_name: Human-readable profile name.
        preview_text: Canned sentence used to preview the voice.
        accent: Descriptive accent tag.
        gender: Descriptive gender tag.
        style: Descriptive speaking-style tag.
    """

    voice_id: str
    display_name: str
    preview_text: str
    accent: str
    gender: str
    style: str

    @property
    def tags(self) -> tuple[str, ...]:
        """Return descriptive tags in display order."""

        return (self.accent, self.gender, self.style)

    def as_payload(self) -> dict[str, object]:
        """Return a JSON-serializable catalog entry."""

        return {
            "id": self.voice_id,
            "name": self.display_name,
            "previewText": self.preview_text,
            "accent": self.accent,
            "gender": self.gender,
            "style": self.style,
        }


STANDARD_VOICES: tuple[VoiceProfile, ...] = (
    VoiceProfile(
        voice_id="21m00Tcm4TlvDq8ikWAM",
        display_name="Rachel",
        preview_text="Hello, I'm Rachel. How can I help you today?",
        accent="American",
        gender="Female",
        style="Professional",
    ),
    VoiceProfile(
        voice_id="AZnzlk1XvdvUeBnXmlld",
        display_name="Domi",
        preview_text="Hey there, I'm Domi with my deep voice.",
        accent="American",
        gender="Female",
        style="Casual",
    ),
    VoiceProfile(
        voice_id="EXAVITQu4vr4xnSDxMaL",
        display_name="Bella",
        preview_text="Hi, I'm Bella. Nice to meet you!",
        accent="British",
        gender="Female",
        style="Friendly",
    ),
)


def find_voice_profile(voice_id: str) -> VoiceProfile:
    """Return the catalog profile for `voice_id` or raise `UnknownVoiceProfile`."""

    for profile in STANDARD_VOICES:
        if profile.voice_id == voice_id:
            return profile
    raise UnknownVoiceProfile(f"No catalog voice with id `{voice_id}`.")
