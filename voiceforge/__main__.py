"""Module entrypoint for running VoiceForge as ``python -m voiceforge``."""

from __future__ import annotations

from voiceforge.cli import main


if __name__ == "__main__":
    main()
