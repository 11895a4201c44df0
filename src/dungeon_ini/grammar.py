"""Grammar layer: stateless recognizers over a text buffer.

Every recognizer takes the whole source and a start offset and returns
the recognized value together with the offset just past it.  Failures
raise :class:`GrammarMismatch` naming the rule and the offset.  Helpers
prefixed with ``match_`` return ``None`` instead of raising so that the
lookahead layer can test a rule without committing to it.
"""

from __future__ import annotations

import re

from .document import Document
from .errors import GrammarMismatch
from .model import ANONYMOUS, I64_MAX, Group, Key, Token, Value


_SPACE_RE = re.compile(r"[ \t]*")
_WHITESPACE_RE = re.compile(r"\s*")
_RUN_RE = re.compile(r"[\w \t]*")
_DIGITS_RE = re.compile(r"[0-9]+")
_COMMENT_RE = re.compile(r"\s*;([^\r\n]*)")
_LINE_BREAKS_RE = re.compile(r"(?:[ \t]*\r?\n)+")
_ASSIGN_RE = re.compile(r"[ \t]*=[ \t]*")
_COMMA_RE = re.compile(r"[ \t]*,[ \t]*")


# ---------------------------------------------------------------------------
# Whitespace, comments and line terminators
# ---------------------------------------------------------------------------

def skip_space(text: str, pos: int) -> int:
    """Skip spaces and tabs (never line breaks)."""
    return _SPACE_RE.match(text, pos).end()


def blank(text: str, pos: int) -> int:
    """Skip whitespace, line breaks and whole-line ``;`` comments."""
    while True:
        pos = _WHITESPACE_RE.match(text, pos).end()
        if not text.startswith(";", pos):
            return pos
        pos = _COMMENT_RE.match(text, pos).end()


def match_eol(text: str, pos: int) -> tuple[str | None, int] | None:
    comment = None
    m = _COMMENT_RE.match(text, pos)
    if m is not None:
        comment = m.group(1)
        pos = m.end()
    m = _LINE_BREAKS_RE.match(text, pos)
    if m is None:
        return None
    return comment, m.end()


def eol(text: str, pos: int) -> tuple[str | None, int]:
    """Line terminator: optional ``; comment`` then one or more line breaks.

    Returns the comment text (discarded by every caller in this package)
    and the offset after the last line break.
    """
    result = match_eol(text, pos)
    if result is None:
        raise GrammarMismatch(text, pos, "eol")
    return result


def match_assignment(text: str, pos: int) -> int | None:
    m = _ASSIGN_RE.match(text, pos)
    return m.end() if m else None


def match_comma(text: str, pos: int) -> int | None:
    m = _COMMA_RE.match(text, pos)
    return m.end() if m else None


# ---------------------------------------------------------------------------
# Scalars and values
# ---------------------------------------------------------------------------

def scalar(text: str, pos: int) -> tuple[Token, int]:
    """Read one scalar token.

    A maximal run of word characters, spaces and tabs is taken and its
    trailing whitespace trimmed.  A run made only of decimal digits is an
    integer; anything else (including an empty run) is text.  The returned
    offset is past the whole run, trailing whitespace included.
    """
    start = skip_space(text, pos)
    end = _RUN_RE.match(text, start).end()
    raw = text[start:end].rstrip()
    stop = start + len(raw)
    if _DIGITS_RE.fullmatch(raw):
        number = int(raw)
        # Overflowing digit runs stay text, the decoder reports them.
        if number <= I64_MAX:
            return Token(number, start, stop), end
    return Token(raw, start, stop), end


def values(text: str, pos: int) -> tuple[list[Key], int]:
    """One or more comma separated scalars."""
    token, pos = scalar(text, pos)
    items = [token.value]
    while text.startswith(",", pos):
        token, pos = scalar(text, pos + 1)
        items.append(token.value)
    return items, pos


def value(text: str, pos: int) -> tuple[Value, int]:
    token, after = scalar(text, pos)
    if text.startswith(",", after):
        return values(text, pos)
    return token.value, after


def key_value(text: str, pos: int) -> tuple[Key, Value, int]:
    token, pos = scalar(text, pos)
    if token.value == "":
        raise GrammarMismatch(text, token.start, "key")
    after = match_assignment(text, pos)
    if after is None:
        raise GrammarMismatch(text, pos, "assignment")
    val, pos = value(text, after)
    return token.value, val, pos


# ---------------------------------------------------------------------------
# Groups and sections
# ---------------------------------------------------------------------------

def group_body(text: str, pos: int) -> tuple[Group, int]:
    """Key/value lines up to the next section header or end of input."""
    group: Group = {}
    while True:
        pos = blank(text, pos)
        if pos >= len(text) or text.startswith("[", pos):
            return group, pos
        key, val, pos = key_value(text, pos)
        group[key] = val
        terminator = match_eol(text, pos)
        if terminator is not None:
            pos = terminator[1]


def match_section(text: str, pos: int) -> tuple[str, int] | None:
    if not text.startswith("[", pos):
        return None
    m = _RUN_RE.match(text, pos + 1)
    name = m.group().strip()
    pos = m.end()
    if not name or not text.startswith("]", pos):
        return None
    return name, pos + 1


def section(text: str, pos: int) -> tuple[str, int]:
    """``[name]``.

    The name run takes spaces, so a trailing word such as ``[bar junk]``
    stays part of the name.
    """
    result = match_section(text, pos)
    if result is None:
        raise GrammarMismatch(text, pos, "section")
    return result


def group(text: str, pos: int) -> tuple[str, Group, int]:
    name, pos = section(text, pos)
    terminator = match_eol(text, pos)
    if terminator is not None:
        pos = terminator[1]
    body, pos = group_body(text, pos)
    return name, body, pos


# ---------------------------------------------------------------------------
# Whole document
# ---------------------------------------------------------------------------

def document(text: str) -> Document:
    """Parse *text* into a :class:`Document`.

    Key/value lines before the first header land in the ``"_"`` group.
    A later section or key with the same name replaces the earlier one.
    """
    anonymous, pos = group_body(text, 0)
    doc = Document()
    while pos < len(text):
        name, body, pos = group(text, pos)
        doc.insert(name, body)
    if anonymous:
        doc.insert(ANONYMOUS, anonymous)
    return doc
