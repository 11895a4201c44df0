"""Decoder configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DecodeOptions:
    """Knobs accepted by :func:`dungeon_ini.decode`.

    ``deny_unknown_fields`` makes a dataclass target reject keys (and
    sections) it has no field for, instead of skipping them.
    """

    deny_unknown_fields: bool = False
