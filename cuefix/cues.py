"""
cues.py: Per-track cue bookkeeping and synthesis of missing memory cues.

In rekordbox XML a POSITION_MARK with Num="-1" is a memory cue; any other Num
is a hot cue slot. A CueTable records, per exact Start string, which of the two
kinds a track has, and reports the positions that have a hot cue but no memory
cue.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from .tokens import StartElement, Token

logger = logging.getLogger(__name__)

POSITION_MARK = "POSITION_MARK"
MEMORY_CUE_NUM = "-1"


@dataclass
class CuePoint:
    hot_cue: bool = False
    cue: bool = False


class CueTable:
    """Cue kinds seen in one track, keyed by the literal Start attribute."""

    def __init__(self) -> None:
        self._points: Dict[str, CuePoint] = {}

    def __len__(self) -> int:
        return len(self._points)

    def __contains__(self, start: str) -> bool:
        return start in self._points

    def get(self, start: str) -> CuePoint:
        return self._points[start]

    def observe(self, mark: StartElement) -> bool:
        """
        Record a POSITION_MARK start token.

        Returns False (and records nothing) if the mark lacks Start or Num.
        """
        start = mark.get("Start")
        num = mark.get("Num")
        if not start or not num:
            logger.warning(f"Didn't understand: <{mark.name} {dict(mark.attrs)}>")
            return False

        point = self._points.setdefault(start, CuePoint())
        if num == MEMORY_CUE_NUM:
            point.cue = True
        else:
            point.hot_cue = True
        return True

    def missing_cues(self) -> List[str]:
        """Start positions with a hot cue and no memory cue, in first-seen order."""
        return [start for start, point in self._points.items() if point.hot_cue and not point.cue]


def make_cue_marker(start: str) -> StartElement:
    """Build a memory cue POSITION_MARK at `start`."""
    return StartElement(
        POSITION_MARK,
        (
            ("Name", ""),
            ("Type", "0"),
            ("Start", start),
            ("Num", MEMORY_CUE_NUM),
        ),
    )


def synthesize_cues(table: CueTable) -> Iterator[Tuple[str, Tuple[Token, Token]]]:
    """Yield `(start, (start_token, end_token))` for every missing memory cue."""
    for start in table.missing_cues():
        marker = make_cue_marker(start)
        yield start, (marker, marker.end())
