"""
tokens.py: XML token model shared by the reader, the writer and the transcoder.

A document is handled as a flat stream of these tokens, never as a tree.
Tokens are immutable; new ones are built rather than edited.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

Attr = Tuple[str, str]


def local_name(name: str) -> str:
    """Strip a `prefix:` from a qualified name."""
    return name.rpartition(":")[2]


@dataclass(frozen=True)
class StartElement:
    name: str
    attrs: Tuple[Attr, ...] = ()

    @property
    def local_name(self) -> str:
        return local_name(self.name)

    def get(self, name: str) -> Optional[str]:
        """Return the value of the first attribute whose local name is `name`."""
        for key, value in self.attrs:
            if local_name(key) == name:
                return value
        return None

    def end(self) -> EndElement:
        return EndElement(self.name)


@dataclass(frozen=True)
class EndElement:
    name: str

    @property
    def local_name(self) -> str:
        return local_name(self.name)


@dataclass(frozen=True)
class CharData:
    text: str


@dataclass(frozen=True)
class Comment:
    text: str


@dataclass(frozen=True)
class ProcInst:
    target: str
    data: str = ""


@dataclass(frozen=True)
class XmlDecl:
    version: str = "1.0"
    encoding: Optional[str] = None
    # -1 when absent, as reported by expat
    standalone: int = -1


@dataclass(frozen=True)
class Doctype:
    name: str
    system_id: Optional[str] = None
    public_id: Optional[str] = None


Token = Union[StartElement, EndElement, CharData, Comment, ProcInst, XmlDecl, Doctype]
