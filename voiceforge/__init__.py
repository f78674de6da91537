"""Top-level package for VoiceForge.

VoiceForge turns text into speech through a remote provider, either with a
catalog voice or with a voice cloned on the fly from an uploaded sample. The
main orchestration entry point is `SynthesisOrchestrator`.
"""

from .synthesis.orchestrator import SynthesisOrchestrator

__all__ = ["SynthesisOrchestrator", "__version__"]

__version__ = "0.1.0"
