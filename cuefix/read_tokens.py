"""
read_tokens.py: Pull-based XML token reader.

Feeds the input to expat in fixed-size chunks and yields the tokens each chunk
produces, so only one chunk's worth of tokens is ever held in memory.
Consecutive character data is merged into a single CharData token.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Iterator, List, Optional
from xml.parsers import expat

from .errors import TokenReadError
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

CHUNK_SIZE = 64 * 1024


def read_tokens(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Iterator[Token]:
    """
    Yield the tokens of the XML document in `stream`, in document order.

    Raises:
        TokenReadError: if the stream cannot be read or is not well-formed XML
    """
    pending: List[Token] = []
    text: List[str] = []

    def flush_text() -> None:
        if text:
            pending.append(CharData("".join(text)))
            text.clear()

    def emit(token: Token) -> None:
        flush_text()
        pending.append(token)

    def on_xml_decl(version: str, encoding: Optional[str], standalone: int) -> None:
        emit(XmlDecl(version, encoding, standalone))

    def on_doctype(name: str, system_id: Optional[str], public_id: Optional[str], has_internal_subset: int) -> None:
        if has_internal_subset:
            logger.warning(f"DOCTYPE {name} has an internal subset; it will not be reproduced")
        emit(Doctype(name, system_id, public_id))

    def on_start(name: str, attributes: List[str]) -> None:
        # ordered_attributes gives a flat [name, value, name, value, ...] list
        attrs = tuple(zip(attributes[0::2], attributes[1::2]))
        emit(StartElement(name, attrs))

    def on_end(name: str) -> None:
        emit(EndElement(name))

    def on_comment(data: str) -> None:
        emit(Comment(data))

    def on_pi(target: str, data: str) -> None:
        emit(ProcInst(target, data))

    parser = expat.ParserCreate()
    parser.ordered_attributes = True
    parser.buffer_text = True
    parser.XmlDeclHandler = on_xml_decl
    parser.StartDoctypeDeclHandler = on_doctype
    parser.StartElementHandler = on_start
    parser.EndElementHandler = on_end
    parser.CharacterDataHandler = text.append
    parser.CommentHandler = on_comment
    parser.ProcessingInstructionHandler = on_pi

    while True:
        try:
            chunk = stream.read(chunk_size)
        except OSError as e:
            raise TokenReadError(f"Read failed: {e}") from e

        final = not chunk
        try:
            parser.Parse(chunk, final)
        except expat.ExpatError as e:
            raise TokenReadError(f"Parser error: {e}") from e

        if final:
            flush_text()

        batch = pending[:]
        pending.clear()
        yield from batch

        if final:
            return
