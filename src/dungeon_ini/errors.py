"""Exception types raised by the grammar and decoding layers."""

from __future__ import annotations


class DungeonIniError(Exception):
    """Base class for every error raised by dungeon_ini."""


class DecodeError(DungeonIniError):
    """Base class for errors raised by ``parse`` and ``decode``."""


# ---------------------------------------------------------------------------
# Grammar layer
# ---------------------------------------------------------------------------

class GrammarMismatch(DecodeError):
    """A grammar rule did not match at *position* in *source*."""

    def __init__(self, source: str, position: int, rule: str) -> None:
        self.source = source
        self.position = position
        self.rule = rule
        super().__init__(
            f"grammar error ({rule}) at {self.line}:{self.col}: {self.remaining[:40]!r}"
        )

    @property
    def remaining(self) -> str:
        return self.source[self.position:]

    @property
    def line(self) -> int:
        return self.source.count("\n", 0, self.position) + 1

    @property
    def col(self) -> int:
        return self.position - (self.source.rfind("\n", 0, self.position) + 1) + 1


# ---------------------------------------------------------------------------
# Decoding layer
# ---------------------------------------------------------------------------

class TrailingContent(DecodeError):
    def __init__(self, remaining: str) -> None:
        self.remaining = remaining
        super().__init__(f"junk at end of input: {remaining[:40]!r}")


class ExpectedAssignment(DecodeError):
    def __init__(self, found: str) -> None:
        self.found = found
        super().__init__(f"expected assignment, found {found[:40]!r}")


class ExpectedBoolean(DecodeError):
    def __init__(self, found: int | str) -> None:
        self.found = found
        super().__init__(f"expected bool, found {found!r}")


class ExpectedCharacter(DecodeError):
    def __init__(self, found: int | str) -> None:
        self.found = found
        super().__init__(f"expected char, found {found!r}")


class ExpectedInteger(DecodeError):
    def __init__(self, found: int | str, reason: str) -> None:
        self.found = found
        self.reason = reason
        super().__init__(f"expected number, found {found!r}: {reason}")


class ExpectedIdentifier(DecodeError):
    def __init__(self, remaining: str) -> None:
        self.remaining = remaining
        super().__init__(f"expected identifier, found {remaining[:40]!r}")


class UnsupportedKind(DecodeError):
    """The requested shape cannot be expressed by the grammar."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} is not supported")


class Custom(DecodeError):
    """Validation error raised by a target shape rather than the decoder."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MissingField(Custom):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"missing field `{name}`")


class UnknownField(Custom):
    def __init__(self, name: int | str, expected: list[str]) -> None:
        self.name = name
        self.expected = expected
        super().__init__(
            f"unknown field `{name}`, expected one of {', '.join(expected) or '(none)'}"
        )
