"""dungeon_ini — INI-style configuration grammar with a fused decoder.

``parse`` builds a generic :class:`Document`; ``decode`` walks the text
once and drives a typed target directly::

    @dataclass
    class Server:
        host: str
        port: u16

    @dataclass
    class Config:
        name: str
        server: Server

    decode("name = demo\\n[server]\\nhost = localhost\\nport = 8080\\n", Config)
"""

from .decoder import Deserializer, decode
from .document import Document
from .errors import (
    Custom,
    DecodeError,
    DungeonIniError,
    ExpectedAssignment,
    ExpectedBoolean,
    ExpectedCharacter,
    ExpectedIdentifier,
    ExpectedInteger,
    GrammarMismatch,
    MissingField,
    TrailingContent,
    UnknownField,
    UnsupportedKind,
)
from .grammar import document as _document
from .model import ANONYMOUS, Group, Key, Value
from .options import DecodeOptions
from .shapes import char, i8, i16, i32, i64, shape_for, u8, u16, u32, u64
from .visitor import MapAccess, SeqAccess, Visitor


def parse(text: str) -> Document:
    """Parse *text* into a section name → group mapping."""
    return _document(text)


__all__ = [
    "parse",
    "decode",
    "Document",
    "Deserializer",
    "DecodeOptions",
    "Visitor",
    "MapAccess",
    "SeqAccess",
    "shape_for",
    "ANONYMOUS",
    "Group",
    "Key",
    "Value",
    "i8",
    "i16",
    "i32",
    "i64",
    "u8",
    "u16",
    "u32",
    "u64",
    "char",
    "DungeonIniError",
    "DecodeError",
    "GrammarMismatch",
    "TrailingContent",
    "ExpectedAssignment",
    "ExpectedBoolean",
    "ExpectedCharacter",
    "ExpectedInteger",
    "ExpectedIdentifier",
    "UnsupportedKind",
    "Custom",
    "MissingField",
    "UnknownField",
]
