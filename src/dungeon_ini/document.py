"""Document — the generic result of :func:`dungeon_ini.parse`."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from .model import ANONYMOUS, Group


@dataclass
class Document(Mapping[str, Group]):
    """Section name → :data:`Group` mapping built by one ``parse`` call."""

    groups: dict[str, Group] = field(default_factory=dict)

    # -- Mapping protocol -----------------------------------------------

    def __getitem__(self, name: str) -> Group:
        return self.groups[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)

    # -- Convenience accessors ------------------------------------------

    @property
    def anonymous(self) -> Group:
        """Key/value pairs that appeared before the first section header."""
        return self.groups.get(ANONYMOUS, {})

    def sections(self) -> dict[str, Group]:
        """Named sections only, without the anonymous group."""
        return {name: g for name, g in self.groups.items() if name != ANONYMOUS}

    # -- Building -------------------------------------------------------

    def insert(self, name: str, group: Group) -> None:
        # Later duplicates replace earlier ones.
        self.groups[name] = group
