"""Add missing memory cues to rekordbox library exports.

The run controller and CLI live in `cuefix.fix_cues` (`python -m cuefix.fix_cues`).
"""

from __future__ import annotations

from .cues import CuePoint, CueTable, make_cue_marker
from .errors import CueFixError
from .transcode import CueTranscoder, ParseState, RunStats, transcode

__version__ = "0.1.0"

__all__ = [
    "CuePoint",
    "CueTable",
    "CueFixError",
    "CueTranscoder",
    "ParseState",
    "RunStats",
    "make_cue_marker",
    "transcode",
]
