"""Text-to-speech voice catalog.

This package contains the static voice profiles offered in Standard mode.
"""

from .voices import STANDARD_VOICES, VoiceProfile, find_voice_profile

__all__ = ["STANDARD_VOICES", "VoiceProfile", "find_voice_profile"]
