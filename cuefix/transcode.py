"""
transcode.py: Streaming state machine that adds missing memory cues.

Walks the token stream of a rekordbox library export:

    DJ_PLAYLISTS > COLLECTION > TRACK > POSITION_MARK

Every token is passed through unchanged and in order. The only exception is the
closing tag of a collection TRACK: it is held back until a memory cue has been
emitted for each of the track's hot cues that lacks one, and is then emitted
itself. Nothing outside the current track is ever buffered.

TRACK elements under PLAYLISTS are references (`<TRACK Key=.../>`) and are left
alone, since the TRACK state is only reachable from COLLECTION.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional

from .cues import POSITION_MARK, CueTable, synthesize_cues
from .tokens import EndElement, StartElement, Token

logger = logging.getLogger(__name__)

DJ_PLAYLISTS = "DJ_PLAYLISTS"
COLLECTION = "COLLECTION"
TRACK = "TRACK"


class ParseState(Enum):
    ROOT = "root"
    DJ_PLAYLISTS = "dj_playlists"
    COLLECTION = "collection"
    TRACK = "track"


@dataclass
class TrackScope:
    name: str
    cues: CueTable = field(default_factory=CueTable)


@dataclass(frozen=True)
class AddedCue:
    track: str
    start: str


@dataclass
class RunStats:
    tracks_seen: int = 0
    tracks_changed: int = 0
    cues_added: int = 0
    # Per-cue records grow with the document; only kept for the run report
    record_added: bool = False
    added: List[AddedCue] = field(default_factory=list)


class CueTranscoder:
    """One run's worth of state: parse context, current track and counters."""

    def __init__(self, stats: Optional[RunStats] = None) -> None:
        self.state = ParseState.ROOT
        self.track: Optional[TrackScope] = None
        self.stats = stats if stats is not None else RunStats()

    def process(self, token: Token) -> List[Token]:
        """Consume one token and return the tokens to write, in order."""
        if self.state is ParseState.ROOT:
            self._at_root(token)
        elif self.state is ParseState.DJ_PLAYLISTS:
            self._at_dj_playlists(token)
        elif self.state is ParseState.COLLECTION:
            self._at_collection(token)
        elif self.track is not None:
            return self._at_track(self.track, token)
        return [token]

    def _at_root(self, token: Token) -> None:
        if isinstance(token, StartElement) and token.local_name == DJ_PLAYLISTS:
            self.state = ParseState.DJ_PLAYLISTS

    def _at_dj_playlists(self, token: Token) -> None:
        if isinstance(token, StartElement) and token.local_name == COLLECTION:
            logger.debug("Found collection")
            self.state = ParseState.COLLECTION
        elif isinstance(token, EndElement) and token.local_name == DJ_PLAYLISTS:
            self.state = ParseState.ROOT

    def _at_collection(self, token: Token) -> None:
        if isinstance(token, StartElement) and token.local_name == TRACK:
            self.track = TrackScope(name=token.get("Name") or "")
            self.stats.tracks_seen += 1
            self.state = ParseState.TRACK
        elif isinstance(token, EndElement) and token.local_name == COLLECTION:
            self.state = ParseState.DJ_PLAYLISTS

    def _at_track(self, track: TrackScope, token: Token) -> List[Token]:
        if isinstance(token, StartElement) and token.local_name == POSITION_MARK:
            track.cues.observe(token)
            return [token]

        if isinstance(token, EndElement) and token.local_name == TRACK:
            out = self._close_track(track)
            # The end tag goes last, after any inserted cues
            out.append(token)
            return out

        return [token]

    def _close_track(self, track: TrackScope) -> List[Token]:
        out: List[Token] = []
        changed = False
        for start, pair in synthesize_cues(track.cues):
            out.extend(pair)
            logger.info(f"{track.name} : Adding cue at {start}")
            if not changed:
                changed = True
                self.stats.tracks_changed += 1
            self.stats.cues_added += 1
            if self.stats.record_added:
                self.stats.added.append(AddedCue(track.name, start))

        self.track = None
        self.state = ParseState.COLLECTION
        return out


def transcode(tokens: Iterable[Token], stats: Optional[RunStats] = None) -> Iterator[Token]:
    """Yield the output token stream for `tokens`, updating `stats` as it goes."""
    machine = CueTranscoder(stats)
    for token in tokens:
        yield from machine.process(token)
