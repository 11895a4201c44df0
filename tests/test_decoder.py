"""Tests for the decoding layer (Deserializer driven directly)."""

import pytest

from dungeon_ini.decoder import Deserializer
from dungeon_ini.errors import (
    Custom,
    ExpectedAssignment,
    ExpectedBoolean,
    ExpectedCharacter,
    ExpectedIdentifier,
    ExpectedInteger,
    GrammarMismatch,
    UnsupportedKind,
)
from dungeon_ini.model import U8, U64
from dungeon_ini.visitor import Visitor


class Recorder(Visitor):
    """Visitor that records what the decoder handed it."""

    def visit_int(self, value):
        return ("int", value)

    def visit_str(self, value):
        return ("str", value)

    def visit_bool(self, value):
        return ("bool", value)

    def visit_char(self, value):
        return ("char", value)

    def visit_enum(self, variant):
        return ("enum", variant)

    def visit_some(self, de):
        return ("some", de.deserialize_any(self))

    def visit_newtype(self, de):
        return ("newtype", de.deserialize_int(self))

    def visit_seq(self, access):
        items = []
        while True:
            item = access.next_element(Element())
            if item is None:
                return items
            items.append(item)

    def visit_map(self, access):
        entries = []
        while True:
            key = access.next_key(self)
            if key is None:
                return entries
            if key in (("str", "sub"), ("str", "other")):
                entries.append((key, access.next_value(Nested())))
            else:
                entries.append((key, access.next_value(Element())))


class Element:
    def deserialize(self, de):
        return de.deserialize_any(Recorder())


class Nested:
    def deserialize(self, de):
        return de.deserialize_map(Recorder())


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text", ["true", "True", "TRUE", "1"])
def test_bool_true_literals(text):
    assert Deserializer(text).deserialize_bool(Recorder()) == ("bool", True)

@pytest.mark.parametrize("text", ["false", "False", "FALSE", "0"])
def test_bool_false_literals(text):
    assert Deserializer(text).deserialize_bool(Recorder()) == ("bool", False)

@pytest.mark.parametrize("text, found", [("yes", "yes"), ("2", 2), ("tRUE", "tRUE")])
def test_bool_rejects_other_tokens(text, found):
    with pytest.raises(ExpectedBoolean) as exc:
        Deserializer(text).deserialize_bool(Recorder())
    assert exc.value.found == found


def test_int_from_number():
    assert Deserializer("42").deserialize_int(Recorder()) == ("int", 42)

def test_int_from_text_fails():
    with pytest.raises(ExpectedInteger) as exc:
        Deserializer("forty").deserialize_int(Recorder())
    assert exc.value.found == "forty"

def test_int_from_empty_fails():
    with pytest.raises(ExpectedInteger):
        Deserializer("\n").deserialize_int(Recorder())

def test_int_width_overflow():
    with pytest.raises(ExpectedInteger) as exc:
        Deserializer("300").deserialize_int(Recorder(), U8)
    assert "u8" in str(exc.value)

def test_u64_beyond_i64_range():
    text = str(2**64 - 1)
    assert Deserializer(text).deserialize_int(Recorder(), U64) == ("int", 2**64 - 1)


def test_char_first_character():
    assert Deserializer("xyz").deserialize_char(Recorder()) == ("char", "x")

def test_char_rejects_number():
    with pytest.raises(ExpectedCharacter) as exc:
        Deserializer("7").deserialize_char(Recorder())
    assert exc.value.found == 7

def test_char_rejects_empty():
    with pytest.raises(ExpectedCharacter):
        Deserializer("").deserialize_char(Recorder())


def test_str_stringifies_numbers():
    assert Deserializer("42").deserialize_str(Recorder()) == ("str", "42")

def test_str_text():
    assert Deserializer("tom foo").deserialize_str(Recorder()) == ("str", "tom foo")

def test_any():
    assert Deserializer("7").deserialize_any(Recorder()) == ("int", 7)
    assert Deserializer("seven").deserialize_any(Recorder()) == ("str", "seven")


@pytest.mark.parametrize(
    "request_kind, name",
    [("deserialize_float", "f64"), ("deserialize_bytes", "bytes"), ("deserialize_unit", "unit")],
)
def test_unsupported_requests(request_kind, name):
    de = Deserializer("1")
    with pytest.raises(UnsupportedKind) as exc:
        getattr(de, request_kind)(Recorder())
    assert exc.value.name == name
    assert de.pos == 0


# ---------------------------------------------------------------------------
# Enum / option / newtype
# ---------------------------------------------------------------------------

def test_enum_by_name():
    assert Deserializer("thing_a").deserialize_enum("E", [], Recorder()) == ("enum", "thing_a")

def test_enum_by_index():
    assert Deserializer("3").deserialize_enum("E", [], Recorder()) == ("enum", 3)

def test_option_is_always_present():
    assert Deserializer("x").deserialize_option(Recorder()) == ("some", ("str", "x"))

def test_newtype_decodes_inner():
    assert Deserializer("5").deserialize_newtype("N", Recorder()) == ("newtype", ("int", 5))


# ---------------------------------------------------------------------------
# Sequences
# ---------------------------------------------------------------------------

def test_seq_stops_at_line_end():
    de = Deserializer("1,2,  3\nnext = 4")
    assert de.deserialize_seq(Recorder()) == [("int", 1), ("int", 2), ("int", 3)]
    assert de.remaining == "next = 4"

def test_seq_stops_at_end_of_input():
    de = Deserializer("one, two, three")
    assert de.deserialize_seq(Recorder()) == [("str", "one"), ("str", "two"), ("str", "three")]
    assert de.is_finished()

def test_seq_empty_before_newline():
    assert Deserializer("\nk = v").deserialize_seq(Recorder()) == []

def test_seq_missing_comma():
    with pytest.raises(GrammarMismatch) as exc:
        Deserializer("1 2 ! 3").deserialize_seq(Recorder())
    assert exc.value.rule == "comma"


# ---------------------------------------------------------------------------
# Maps
# ---------------------------------------------------------------------------

def test_map_keys_and_values():
    entries = Deserializer("a = 1\nb = two\n8 = great\n").deserialize_map(Recorder())
    assert entries == [
        (("str", "a"), ("int", 1)),
        (("str", "b"), ("str", "two")),
        (("int", 8), ("str", "great")),
    ]

def test_map_top_level_section_becomes_nested_map():
    de = Deserializer("a = 1\n[sub]\nx = 2\n[other]\ny = 3\n")
    entries = de.deserialize_map(Recorder())
    assert entries[0] == (("str", "a"), ("int", 1))
    assert entries[1] == (("str", "sub"), [(("str", "x"), ("int", 2))])
    assert entries[2] == (("str", "other"), [(("str", "y"), ("int", 3))])
    assert de.section == "other"

def test_nested_map_stops_at_sibling_header():
    de = Deserializer("[sub]\nx = 2\n[next]\ny = 3\n")
    # Consume the [sub] header as a key, then open its map.
    assert de.deserialize_identifier(Recorder()) == ("str", "sub")
    assert de.deserialize_map(Recorder()) == [(("str", "x"), ("int", 2))]
    assert de.remaining.startswith("[next]")

def test_map_missing_assignment():
    with pytest.raises(ExpectedAssignment) as exc:
        Deserializer("a = 1\nb : 2\n").deserialize_map(Recorder())
    assert exc.value.found == ": 2\n"

def test_map_malformed_identifier():
    with pytest.raises(ExpectedIdentifier) as exc:
        Deserializer("a = 1\n!!!\n").deserialize_map(Recorder())
    assert exc.value.remaining == "!!!\n"

def test_map_tolerates_missing_final_newline():
    de = Deserializer("a = 1")
    assert de.deserialize_map(Recorder()) == [(("str", "a"), ("int", 1))]
    assert de.is_finished()


def test_visitor_default_rejects():
    with pytest.raises(Custom) as exc:
        Deserializer("1").deserialize_int(Visitor())
    assert "invalid type: integer `1`" in str(exc.value)
