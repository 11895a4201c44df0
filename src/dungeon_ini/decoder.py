"""Decoding layer: a forward-only cursor that drives the visitor protocol.

:class:`Deserializer` answers one request per target shape and consumes
exactly the tokens that shape needs.  It never builds an intermediate
document; control flow between keys, nested sections and end of input is
decided with the non-consuming peeks from :mod:`dungeon_ini.lookahead`.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from .errors import (
    ExpectedAssignment,
    ExpectedBoolean,
    ExpectedCharacter,
    ExpectedIdentifier,
    ExpectedInteger,
    GrammarMismatch,
    TrailingContent,
    UnsupportedKind,
)
from .grammar import match_assignment, match_comma, match_eol, scalar
from .lookahead import ident, peek_eof, peek_ident
from .model import I64, Ident, IntKind, Section, Token
from .options import DecodeOptions
from .shapes import shape_for
from .visitor import MapAccess, SeqAccess, Shape, Visitor

logger = logging.getLogger(__name__)


_DECIMAL_RE = re.compile(r"[0-9]+")
_TRUE = frozenset({"true", "True", "TRUE", 1})
_FALSE = frozenset({"false", "False", "FALSE", 0})


class Deserializer:
    """Cursor over one input buffer.

    ``pos`` only ever moves forward.  ``section`` is the name of the last
    section header read as a map key; maps opened after it treat the next
    header as the end of their own entries.
    """

    def __init__(self, text: str, options: DecodeOptions | None = None) -> None:
        self.text = text
        self.pos = 0
        self.section: str | None = None
        self.options = options or DecodeOptions()
        # True between reading a section header as a key and opening its map.
        self._after_section = False

    @property
    def remaining(self) -> str:
        return self.text[self.pos:]

    def is_finished(self) -> bool:
        return peek_eof(self.text, self.pos)

    # -- Token helpers --------------------------------------------------

    def _scalar(self) -> Token:
        token, self.pos = scalar(self.text, self.pos)
        return token

    def _ident(self) -> Ident:
        result = ident(self.text, self.pos)
        if result is None:
            raise ExpectedIdentifier(self.remaining)
        classified, self.pos = result
        return classified

    def _assignment(self) -> None:
        after = match_assignment(self.text, self.pos)
        if after is None:
            raise ExpectedAssignment(self.remaining)
        self.pos = after

    def _comma(self) -> None:
        after = match_comma(self.text, self.pos)
        if after is None:
            raise GrammarMismatch(self.text, self.pos, "comma")
        self.pos = after

    def check_eol(self) -> bool:
        """Consume a line terminator if one is next."""
        terminator = match_eol(self.text, self.pos)
        if terminator is None:
            return False
        self.pos = terminator[1]
        return True

    def check_eof(self) -> bool:
        """Move to the end of input if only whitespace and comments remain."""
        if not peek_eof(self.text, self.pos):
            return False
        self.pos = len(self.text)
        return True

    # -- Scalar requests ------------------------------------------------

    def deserialize_int(self, visitor: Visitor, kind: IntKind = I64) -> Any:
        token = self._scalar()
        value = token.value
        if token.is_numeric:
            number = value
        elif _DECIMAL_RE.fullmatch(value):
            # Digit runs too long for i64 arrive as text.
            number = int(value)
        elif not value:
            raise ExpectedInteger(value, "cannot parse integer from empty string")
        else:
            raise ExpectedInteger(value, "invalid digit found in string")
        if number not in kind:
            raise ExpectedInteger(value, f"number does not fit in {kind.name}")
        return visitor.visit_int(number)

    def deserialize_bool(self, visitor: Visitor) -> Any:
        value = self._scalar().value
        if value in _TRUE:
            return visitor.visit_bool(True)
        if value in _FALSE:
            return visitor.visit_bool(False)
        raise ExpectedBoolean(value)

    def deserialize_char(self, visitor: Visitor) -> Any:
        token = self._scalar()
        if not token.is_numeric and token.value:
            return visitor.visit_char(token.value[0])
        raise ExpectedCharacter(token.value)

    def deserialize_str(self, visitor: Visitor) -> Any:
        token = self._scalar()
        if token.is_numeric:
            return visitor.visit_str(str(token.value))
        return visitor.visit_str(token.value)

    def deserialize_any(self, visitor: Visitor) -> Any:
        token = self._scalar()
        if token.is_numeric:
            return visitor.visit_int(token.value)
        return visitor.visit_str(token.value)

    def deserialize_identifier(self, visitor: Visitor) -> Any:
        classified = self._ident()
        if isinstance(classified, Section):
            self.section = classified.name
            self._after_section = True
            logger.debug("entering section [%s]", classified.name)
            return visitor.visit_str(classified.name)
        self._after_section = False
        if isinstance(classified.key, int):
            return visitor.visit_int(classified.key)
        return visitor.visit_str(classified.key)

    def deserialize_ignored_any(self, visitor: Visitor) -> Any:
        """Skip a value the target has no use for."""
        if self._after_section:
            return self.deserialize_map(visitor)
        _token, after = scalar(self.text, self.pos)
        if self.text.startswith(",", after):
            return self.deserialize_seq(visitor)
        return self.deserialize_any(visitor)

    # -- Unsupported requests -------------------------------------------

    def deserialize_float(self, visitor: Visitor, name: str = "f64") -> Any:
        raise UnsupportedKind(name)

    def deserialize_bytes(self, visitor: Visitor) -> Any:
        raise UnsupportedKind("bytes")

    def deserialize_unit(self, visitor: Visitor) -> Any:
        raise UnsupportedKind("unit")

    # -- Compound requests ----------------------------------------------

    def deserialize_map(self, visitor: Visitor) -> Any:
        self._after_section = False
        return visitor.visit_map(_Map(self, self.section))

    def deserialize_struct(self, name: str, fields: list[str], visitor: Visitor) -> Any:
        return self.deserialize_map(visitor)

    def deserialize_seq(self, visitor: Visitor) -> Any:
        return visitor.visit_seq(_Sequence(self))

    def deserialize_tuple(self, length: int, visitor: Visitor) -> Any:
        return self.deserialize_seq(visitor)

    def deserialize_tuple_struct(self, name: str, length: int, visitor: Visitor) -> Any:
        return self.deserialize_seq(visitor)

    def deserialize_enum(self, name: str, variants: list[str], visitor: Visitor) -> Any:
        # Text selects a variant by name, a number selects it by index.
        return visitor.visit_enum(self._scalar().value)

    def deserialize_option(self, visitor: Visitor) -> Any:
        # No null literal exists; absence is only a missing key.
        return visitor.visit_some(self)

    def deserialize_newtype(self, name: str, visitor: Visitor) -> Any:
        return visitor.visit_newtype(self)


# ---------------------------------------------------------------------------
# Access objects handed to visitors
# ---------------------------------------------------------------------------

class _Map(MapAccess):
    def __init__(self, de: Deserializer, enclosing: str | None) -> None:
        self.de = de
        self.enclosing = enclosing

    def next_key(self, visitor: Visitor) -> Any | None:
        de = self.de
        if de.check_eof():
            return None
        upcoming = peek_ident(de.text, de.pos)
        if isinstance(upcoming, Section):
            if self.enclosing is not None:
                # A sibling header: this section is over, leave it unread.
                logger.debug("leaving section [%s] before [%s]", self.enclosing, upcoming.name)
                return None
            return de.deserialize_identifier(visitor)
        if upcoming is None:
            raise ExpectedIdentifier(de.remaining)
        key = de.deserialize_identifier(visitor)
        de._assignment()
        return key

    def next_value(self, shape: Shape) -> Any:
        value = shape.deserialize(self.de)
        self.de.check_eol()
        return value


class _Sequence(SeqAccess):
    def __init__(self, de: Deserializer) -> None:
        self.de = de
        self.first = True

    def next_element(self, shape: Shape) -> Any | None:
        de = self.de
        if de.check_eol() or de.check_eof():
            return None
        if isinstance(peek_ident(de.text, de.pos), Section):
            return None
        if not self.first:
            de._comma()
        self.first = False
        return shape.deserialize(de)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def decode(text: str, target: Any, options: DecodeOptions | None = None) -> Any:
    """Decode *text* straight into an instance of *target*.

    *target* is a Python type understood by :func:`dungeon_ini.shapes.shape_for`
    or any object with a ``deserialize(de)`` method.  Input left over after
    the target is complete raises :class:`TrailingContent`.
    """
    shape = target if hasattr(target, "deserialize") else shape_for(target)
    de = Deserializer(text, options)
    logger.debug("decoding %d characters into %r", len(text), target)
    value = shape.deserialize(de)
    if not de.is_finished():
        raise TrailingContent(de.remaining)
    return value
