"""Visitor protocol driven by :class:`dungeon_ini.decoder.Deserializer`.

The decoder never builds Python objects itself.  For each request it reads
exactly the tokens the request needs and hands them to a :class:`Visitor`,
which decides what object to produce.  Compound requests hand the visitor
an access object (:class:`MapAccess` / :class:`SeqAccess`) that it pulls
entries from until the decoder reports ``None``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol

from .errors import Custom

if TYPE_CHECKING:
    from .decoder import Deserializer


class Shape(Protocol):
    """Anything that knows which request to issue for one target type."""

    def deserialize(self, de: Deserializer) -> Any: ...


class Visitor:
    """Base visitor: every visit is a type error unless overridden."""

    expecting = "a value"

    def invalid_type(self, found: str) -> Custom:
        return Custom(f"invalid type: {found}, expected {self.expecting}")

    def visit_int(self, value: int) -> Any:
        raise self.invalid_type(f"integer `{value}`")

    def visit_str(self, value: str) -> Any:
        raise self.invalid_type(f"string {value!r}")

    def visit_bool(self, value: bool) -> Any:
        raise self.invalid_type(f"boolean `{str(value).lower()}`")

    def visit_char(self, value: str) -> Any:
        raise self.invalid_type(f"character {value!r}")

    def visit_map(self, access: MapAccess) -> Any:
        raise self.invalid_type("map")

    def visit_seq(self, access: SeqAccess) -> Any:
        raise self.invalid_type("sequence")

    def visit_enum(self, variant: int | str) -> Any:
        raise self.invalid_type("enum")

    def visit_some(self, de: Deserializer) -> Any:
        raise self.invalid_type("Option value")

    def visit_newtype(self, de: Deserializer) -> Any:
        raise self.invalid_type("newtype struct")


class MapAccess(ABC):
    @abstractmethod
    def next_key(self, visitor: Visitor) -> Any | None:
        """Visit the next key, or return ``None`` when the map has ended."""

    @abstractmethod
    def next_value(self, shape: Shape) -> Any:
        """Decode the value belonging to the key just returned."""


class SeqAccess(ABC):
    @abstractmethod
    def next_element(self, shape: Shape) -> Any | None:
        """Decode the next element, or return ``None`` at the end."""
