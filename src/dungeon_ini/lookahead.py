"""Lookahead classifier used by the decoder to choose its next step."""

from __future__ import annotations

from .grammar import blank, match_eol, match_section, scalar
from .model import Ident, KeyIdent, Section


def ident(text: str, pos: int) -> tuple[Ident, int] | None:
    """Classify the next meaningful token.

    A section header is consumed together with its optional line
    terminator.  Returns ``None`` when neither a header nor a non-empty
    scalar starts at *pos*.
    """
    pos = blank(text, pos)
    header = match_section(text, pos)
    if header is not None:
        name, pos = header
        terminator = match_eol(text, pos)
        if terminator is not None:
            pos = terminator[1]
        return Section(name), pos
    token, after = scalar(text, pos)
    if token.value == "":
        return None
    return KeyIdent(token.value), after


# ---------------------------------------------------------------------------
# Non-consuming peeks
# ---------------------------------------------------------------------------

def peek_ident(text: str, pos: int) -> Ident | None:
    result = ident(text, pos)
    return result[0] if result is not None else None


def peek_eof(text: str, pos: int) -> bool:
    """True when only whitespace and comments remain."""
    return blank(text, pos) >= len(text)


def peek_eol(text: str, pos: int) -> bool:
    return match_eol(text, pos) is not None
