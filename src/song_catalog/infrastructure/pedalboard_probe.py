"""Audio duration probing backed by pedalboard."""

from __future__ import annotations

from pathlib import Path


class PedalboardDurationProbe:
    """Read the container header with pedalboard's decoder to measure length."""

    def duration_seconds(self, path: Path) -> float:
        from pedalboard.io import AudioFile

        with AudioFile(str(path), "r") as audio_file:
            if not audio_file.samplerate:
                return 0.0
            return audio_file.frames / audio_file.samplerate
