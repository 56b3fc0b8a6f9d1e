"""
write_tokens.py: Push-based XML token writer.

Serializes tokens one at a time to a binary stream. The `>` of a start tag is
held back until the next token arrives, so that an element with no content is
written in the self-closing form rekordbox itself uses (`<POSITION_MARK .../>`).
"""

from __future__ import annotations

import codecs
import logging
from typing import BinaryIO, Optional
from xml.sax.saxutils import escape

from .errors import FlushError
from .tokens import (
    CharData,
    Comment,
    Doctype,
    EndElement,
    ProcInst,
    StartElement,
    Token,
    XmlDecl,
)

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

_TEXT_ENTITIES = {"\r": "&#13;"}
_ATTR_ENTITIES = {'"': "&quot;", "\n": "&#10;", "\r": "&#13;", "\t": "&#9;"}


def escape_text(text: str) -> str:
    return escape(text, _TEXT_ENTITIES)


def escape_attr(value: str) -> str:
    return escape(value, _ATTR_ENTITIES)


class TokenWriter:
    """Write XML tokens to `stream`, encoding as the document declares."""

    def __init__(self, stream: BinaryIO, encoding: str = DEFAULT_ENCODING):
        self._stream = stream
        self._encoder = self._make_encoder(encoding)
        self._open_start: Optional[StartElement] = None
        self._depth = 0

    @staticmethod
    def _make_encoder(encoding: str):
        try:
            return codecs.getincrementalencoder(encoding)(errors="xmlcharrefreplace")
        except LookupError:
            logger.warning(f"Unknown encoding {encoding!r}, writing {DEFAULT_ENCODING}")
            return codecs.getincrementalencoder(DEFAULT_ENCODING)(errors="xmlcharrefreplace")

    def _put(self, text: str) -> None:
        try:
            self._stream.write(self._encoder.encode(text))
        except OSError as e:
            raise FlushError(f"Write failed: {e}") from e

    def _close_start(self) -> None:
        if self._open_start is not None:
            self._put(">")
            self._open_start = None

    def write(self, token: Token) -> None:
        if isinstance(token, EndElement) and self._open_start is not None:
            # Nothing between start and end: collapse to <X/>
            self._open_start = None
            self._depth -= 1
            self._put("/>\n" if self._depth == 0 else "/>")
            return

        self._close_start()

        if isinstance(token, StartElement):
            attrs = "".join(f' {name}="{escape_attr(value)}"' for name, value in token.attrs)
            self._put(f"<{token.name}{attrs}")
            self._open_start = token
            self._depth += 1
        elif isinstance(token, EndElement):
            self._depth -= 1
            self._put(f"</{token.name}>\n" if self._depth == 0 else f"</{token.name}>")
        elif isinstance(token, CharData):
            self._put(escape_text(token.text))
        elif isinstance(token, Comment):
            self._put(f"<!--{token.text}-->" + self._top_level_newline())
        elif isinstance(token, ProcInst):
            body = f"{token.target} {token.data}" if token.data else token.target
            self._put(f"<?{body}?>" + self._top_level_newline())
        elif isinstance(token, XmlDecl):
            self._write_xml_decl(token)
        elif isinstance(token, Doctype):
            self._write_doctype(token)
        else:
            raise TypeError(f"Not a token: {token!r}")

    def _top_level_newline(self) -> str:
        # expat drops whitespace outside the root element
        return "\n" if self._depth == 0 else ""

    def _write_xml_decl(self, decl: XmlDecl) -> None:
        parts = [f'version="{decl.version}"']
        if decl.encoding:
            self._encoder = self._make_encoder(decl.encoding)
            parts.append(f'encoding="{decl.encoding}"')
        if decl.standalone != -1:
            parts.append(f'standalone="{"yes" if decl.standalone else "no"}"')
        self._put(f"<?xml {' '.join(parts)}?>\n")

    def _write_doctype(self, doctype: Doctype) -> None:
        if doctype.public_id:
            ident = f' PUBLIC "{doctype.public_id}" "{doctype.system_id or ""}"'
        elif doctype.system_id:
            ident = f' SYSTEM "{doctype.system_id}"'
        else:
            ident = ""
        self._put(f"<!DOCTYPE {doctype.name}{ident}>\n")

    def flush(self) -> None:
        """Close any pending start tag and flush the underlying stream."""
        self._close_start()
        try:
            self._stream.write(self._encoder.encode("", final=True))
            self._stream.flush()
        except OSError as e:
            raise FlushError(f"Flush failed: {e}") from e
