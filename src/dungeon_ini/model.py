"""Data model shared by the grammar, lookahead and decoding layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


# ---------------------------------------------------------------------------
# Keys and values
# ---------------------------------------------------------------------------

# A scalar is either a signed 64-bit integer or a run of text sliced from
# the source buffer.
Key = Union[int, str]

# Comma lists are flat: a list never contains another list.
Value = Union[int, str, "list[Key]"]

Group = dict[Key, Value]

ANONYMOUS = "_"

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

@dataclass(slots=True, frozen=True)
class Token:
    """A scalar together with the span it was read from."""

    value: Key
    start: int
    end: int

    @property
    def is_numeric(self) -> bool:
        return isinstance(self.value, int)


# ---------------------------------------------------------------------------
# Lookahead classification
# ---------------------------------------------------------------------------

@dataclass(slots=True, frozen=True)
class Section:
    name: str


@dataclass(slots=True, frozen=True)
class KeyIdent:
    key: Key


Ident = Union[Section, KeyIdent]


# ---------------------------------------------------------------------------
# Integer widths
# ---------------------------------------------------------------------------

@dataclass(slots=True, frozen=True)
class IntKind:
    name: str
    min: int
    max: int

    def __contains__(self, number: int) -> bool:
        return self.min <= number <= self.max


I8 = IntKind("i8", -(2**7), 2**7 - 1)
I16 = IntKind("i16", -(2**15), 2**15 - 1)
I32 = IntKind("i32", -(2**31), 2**31 - 1)
I64 = IntKind("i64", I64_MIN, I64_MAX)
U8 = IntKind("u8", 0, 2**8 - 1)
U16 = IntKind("u16", 0, 2**16 - 1)
U32 = IntKind("u32", 0, 2**32 - 1)
U64 = IntKind("u64", 0, 2**64 - 1)
