"""Target shapes: visitors derived from Python type hints.

:func:`shape_for` turns a type such as ``list[u8]`` or a dataclass into a
:class:`~dungeon_ini.visitor.Shape` that issues the matching request to a
:class:`~dungeon_ini.decoder.Deserializer` and builds the Python value
from what the decoder visits it with.

Fixed-width integers and single characters have no builtin Python type,
so they are spelled with ``Annotated`` aliases exported here::

    @dataclass
    class Limits:
        retries: u8
        marker: char
"""

from __future__ import annotations

import dataclasses
import types
from enum import Enum
from functools import cached_property
from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    NewType,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from .errors import Custom, ExpectedInteger, MissingField, UnknownField
from .model import I8, I16, I32, I64, U8, U16, U32, U64, IntKind
from .visitor import MapAccess, SeqAccess, Shape, Visitor

if TYPE_CHECKING:
    from .decoder import Deserializer
    from .options import DecodeOptions


# ---------------------------------------------------------------------------
# Annotated aliases
# ---------------------------------------------------------------------------

class _CharMarker:
    def __repr__(self) -> str:
        return "char"


CHAR = _CharMarker()

i8 = Annotated[int, I8]
i16 = Annotated[int, I16]
i32 = Annotated[int, I32]
i64 = Annotated[int, I64]
u8 = Annotated[int, U8]
u16 = Annotated[int, U16]
u32 = Annotated[int, U32]
u64 = Annotated[int, U64]
char = Annotated[str, CHAR]


# ---------------------------------------------------------------------------
# Ignored — singleton produced for skipped input
# ---------------------------------------------------------------------------

class _IgnoredType:
    """Sentinel produced for values nobody asked for."""

    _instance: _IgnoredType | None = None

    def __new__(cls) -> _IgnoredType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Ignored"

    def __bool__(self) -> bool:
        return False


Ignored = _IgnoredType()


# ---------------------------------------------------------------------------
# Scalar shapes
# ---------------------------------------------------------------------------

class IntShape(Visitor):
    def __init__(self, kind: IntKind = I64) -> None:
        self.kind = kind
        self.expecting = f"integer ({kind.name})"

    def deserialize(self, de: Deserializer) -> int:
        return de.deserialize_int(self, self.kind)

    def visit_int(self, value: int) -> int:
        return value


class BoolShape(Visitor):
    expecting = "a boolean"

    def deserialize(self, de: Deserializer) -> bool:
        return de.deserialize_bool(self)

    def visit_bool(self, value: bool) -> bool:
        return value


class CharShape(Visitor):
    expecting = "a character"

    def deserialize(self, de: Deserializer) -> str:
        return de.deserialize_char(self)

    def visit_char(self, value: str) -> str:
        return value


class StrShape(Visitor):
    expecting = "a string"

    def deserialize(self, de: Deserializer) -> str:
        return de.deserialize_str(self)

    def visit_str(self, value: str) -> str:
        return value


class AnyShape(Visitor):
    """One scalar, kept as ``int`` or ``str``."""

    def deserialize(self, de: Deserializer) -> int | str:
        return de.deserialize_any(self)

    def visit_int(self, value: int) -> int:
        return value

    def visit_str(self, value: str) -> str:
        return value


class FloatShape(Visitor):
    def deserialize(self, de: Deserializer) -> Any:
        return de.deserialize_float(self)


class BytesShape(Visitor):
    def deserialize(self, de: Deserializer) -> Any:
        return de.deserialize_bytes(self)


class UnitShape(Visitor):
    def deserialize(self, de: Deserializer) -> Any:
        return de.deserialize_unit(self)


class IgnoredShape(Visitor):
    """Accepts anything and drains compound values."""

    def deserialize(self, de: Deserializer) -> _IgnoredType:
        return de.deserialize_ignored_any(self)

    def visit_int(self, value: int) -> _IgnoredType:
        return Ignored

    def visit_str(self, value: str) -> _IgnoredType:
        return Ignored

    def visit_map(self, access: MapAccess) -> _IgnoredType:
        while access.next_key(self) is not None:
            access.next_value(self)
        return Ignored

    def visit_seq(self, access: SeqAccess) -> _IgnoredType:
        while access.next_element(_ANY) is not None:
            pass
        return Ignored


IGNORE = IgnoredShape()
_ANY = AnyShape()


# ---------------------------------------------------------------------------
# Wrapper shapes
# ---------------------------------------------------------------------------

class OptionShape(Visitor):
    def __init__(self, inner: Shape) -> None:
        self.inner = inner

    def deserialize(self, de: Deserializer) -> Any:
        return de.deserialize_option(self)

    def visit_some(self, de: Deserializer) -> Any:
        return self.inner.deserialize(de)


class NewtypeShape(Visitor):
    def __init__(self, new_type: NewType, inner: Shape) -> None:
        self.new_type = new_type
        self.inner = inner

    def deserialize(self, de: Deserializer) -> Any:
        return de.deserialize_newtype(self.new_type.__name__, self)

    def visit_newtype(self, de: Deserializer) -> Any:
        return self.new_type(self.inner.deserialize(de))


# ---------------------------------------------------------------------------
# Sequences and tuples
# ---------------------------------------------------------------------------

class SeqShape(Visitor):
    expecting = "a sequence"

    def __init__(self, element: Shape, factory: type = list) -> None:
        self.element = element
        self.factory = factory

    def deserialize(self, de: Deserializer) -> Any:
        return de.deserialize_seq(self)

    def visit_seq(self, access: SeqAccess) -> Any:
        items = []
        while True:
            item = access.next_element(self.element)
            if item is None:
                break
            items.append(item)
        return self.factory(items)


class TupleShape(Visitor):
    """Fixed-length positional shape; ``named`` is set for NamedTuples."""

    def __init__(self, elements: list[Shape], named: type | None = None) -> None:
        self.elements = elements
        self.named = named
        self.expecting = f"a tuple of size {len(elements)}"

    def deserialize(self, de: Deserializer) -> Any:
        if self.named is not None:
            return de.deserialize_tuple_struct(self.named.__name__, len(self.elements), self)
        return de.deserialize_tuple(len(self.elements), self)

    def visit_seq(self, access: SeqAccess) -> Any:
        items = []
        for index, element in enumerate(self.elements):
            item = access.next_element(element)
            if item is None:
                raise Custom(f"invalid length {index}, expected {self.expecting}")
            items.append(item)
        if self.named is not None:
            return self.named(*items)
        return tuple(items)


# ---------------------------------------------------------------------------
# Maps
# ---------------------------------------------------------------------------

class _MapKey(Visitor):
    """Converts an ``int``/``str`` key to the map's declared key type."""

    def __init__(self, key_type: Any) -> None:
        self.kind: IntKind | None = None
        if get_origin(key_type) is Annotated:
            key_type, *extras = get_args(key_type)
            self.kind = next((e for e in extras if isinstance(e, IntKind)), None)
        if key_type not in (str, int, Any):
            raise TypeError(f"unsupported map key type {key_type!r}")
        self.key_type = key_type
        self.expecting = f"a {getattr(key_type, '__name__', key_type)} key"

    def convert(self, key: int | str) -> Any:
        if self.key_type is str:
            return str(key)
        if self.key_type is int:
            if not isinstance(key, int):
                raise self.invalid_type(f"string {key!r}")
            if self.kind is not None and key not in self.kind:
                raise ExpectedInteger(key, f"number does not fit in {self.kind.name}")
        return key

    def visit_int(self, value: int) -> Any:
        return self.convert(value)

    def visit_str(self, value: str) -> Any:
        return self.convert(value)


class DictShape(Visitor):
    expecting = "a map"

    def __init__(self, key_type: Any, value: Shape) -> None:
        self.key = _MapKey(key_type)
        self.value = value

    def deserialize(self, de: Deserializer) -> dict:
        return de.deserialize_map(self)

    def visit_map(self, access: MapAccess) -> dict:
        result = {}
        while True:
            key = access.next_key(self.key)
            if key is None:
                break
            result[key] = access.next_value(self.value)
        return result


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class EnumShape(Visitor):
    def __init__(self, enum: type[Enum]) -> None:
        self.enum = enum
        self.members = list(enum)
        self.expecting = f"variant of {enum.__name__}"

    def deserialize(self, de: Deserializer) -> Enum:
        return de.deserialize_enum(
            self.enum.__name__, [m.name for m in self.members], self
        )

    def visit_enum(self, variant: int | str) -> Enum:
        if isinstance(variant, int):
            if 0 <= variant < len(self.members):
                return self.members[variant]
            raise Custom(
                f"invalid value: integer `{variant}`, "
                f"expected variant index 0 <= i < {len(self.members)}"
            )
        member = self.enum.__members__.get(variant)
        if member is not None:
            return member
        for member in self.members:
            if member.value == variant:
                return member
        raise Custom(
            f"unknown variant `{variant}`, expected one of "
            + ", ".join(f"`{m.name}`" for m in self.members)
        )


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class _Field:
    name: str
    key: str
    shape: Shape
    has_default: bool
    flatten: bool = False

    @property
    def optional(self) -> bool:
        return isinstance(self.shape, OptionShape)


class StructShape:
    """Dataclass target decoded from a map of field name → value.

    Field shapes are resolved on first use so dataclasses may refer to
    themselves or to classes defined later.  A field declared with
    ``metadata={"flatten": True}`` must be a ``dict`` and collects every
    key that matches no other field.
    """

    def __init__(self, cls: type) -> None:
        self.cls = cls

    @cached_property
    def fields(self) -> dict[str, _Field]:
        hints = get_type_hints(self.cls, include_extras=True)
        fields: dict[str, _Field] = {}
        for f in dataclasses.fields(self.cls):
            if not f.init:
                continue
            key = f.metadata.get("rename", f.name)
            has_default = (
                f.default is not dataclasses.MISSING
                or f.default_factory is not dataclasses.MISSING
            )
            fields[key] = _Field(
                f.name, key, shape_for(hints[f.name]), has_default, f.metadata.get("flatten", False)
            )
        return fields

    @cached_property
    def flatten(self) -> _Field | None:
        flattened = [f for f in self.fields.values() if f.flatten]
        if not flattened:
            return None
        if len(flattened) > 1 or not isinstance(flattened[0].shape, DictShape):
            raise TypeError(f"{self.cls.__name__}: only one dict field may be flattened")
        return flattened[0]

    def deserialize(self, de: Deserializer) -> Any:
        return de.deserialize_struct(
            self.cls.__name__, list(self.fields), _StructVisitor(self, de.options)
        )


class _FieldKey(Visitor):
    expecting = "field identifier"

    def __init__(self, fields: dict[str, _Field]) -> None:
        self.fields = fields

    def visit_str(self, value: str) -> _Field | str:
        found = self.fields.get(value)
        return value if found is None or found.flatten else found

    def visit_int(self, value: int) -> _Field | int:
        found = self.fields.get(str(value))
        return value if found is None or found.flatten else found


class _StructVisitor(Visitor):
    def __init__(self, struct: StructShape, options: DecodeOptions) -> None:
        self.struct = struct
        self.options = options
        self.expecting = f"struct {struct.cls.__name__}"

    def visit_map(self, access: MapAccess) -> Any:
        fields = self.struct.fields
        flatten = self.struct.flatten
        field_key = _FieldKey(fields)
        values: dict[str, Any] = {}
        extra: dict[Any, Any] = {}
        while True:
            key = access.next_key(field_key)
            if key is None:
                break
            if isinstance(key, _Field):
                values[key.name] = access.next_value(key.shape)
            elif flatten is not None:
                extra[flatten.shape.key.convert(key)] = access.next_value(flatten.shape.value)
            elif self.options.deny_unknown_fields:
                raise UnknownField(key, list(fields))
            else:
                access.next_value(IGNORE)

        if flatten is not None:
            values[flatten.name] = extra
        for f in fields.values():
            if f.name in values or f.has_default:
                continue
            if f.optional:
                values[f.name] = None
            else:
                raise MissingField(f.key)
        return self.struct.cls(**values)


# ---------------------------------------------------------------------------
# Type hint → shape
# ---------------------------------------------------------------------------

_CACHE: dict[Any, Shape] = {}

_SIMPLE: dict[Any, Shape] = {
    Any: AnyShape(),
    bool: BoolShape(),
    int: IntShape(I64),
    str: StrShape(),
    float: FloatShape(),
    bytes: BytesShape(),
    bytearray: BytesShape(),
    None: UnitShape(),
    type(None): UnitShape(),
}


def shape_for(tp: Any) -> Shape:
    """Return the (cached) shape used to decode values of type *tp*."""
    shape = _CACHE.get(tp)
    if shape is None:
        shape = _CACHE[tp] = _build(tp)
    return shape


def _build(tp: Any) -> Shape:
    simple = _SIMPLE.get(tp)
    if simple is not None:
        return simple

    origin = get_origin(tp)
    args = get_args(tp)

    if origin is Annotated:
        base, *extras = args
        for extra in extras:
            if isinstance(extra, IntKind):
                return IntShape(extra)
            if extra is CHAR:
                return CharShape()
        return shape_for(base)

    if origin is Union or origin is types.UnionType:
        present = [a for a in args if a is not type(None)]
        if len(present) == 1 and len(args) == 2:
            return OptionShape(shape_for(present[0]))
        raise TypeError(f"unsupported union {tp!r}; only Optional[T] is decodable")

    if isinstance(tp, NewType):
        return NewtypeShape(tp, shape_for(tp.__supertype__))

    if tp is list or origin is list:
        return SeqShape(shape_for(args[0] if args else Any))
    if tp is tuple or origin is tuple:
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            return SeqShape(shape_for(args[0] if args else Any), tuple)
        return TupleShape([shape_for(a) for a in args])
    if tp is dict or origin is dict:
        key_type, value_type = args if args else (Any, Any)
        return DictShape(key_type, shape_for(value_type))

    if isinstance(tp, type) and origin is None:
        if issubclass(tp, Enum):
            return EnumShape(tp)
        if issubclass(tp, tuple) and hasattr(tp, "_fields"):
            hints = get_type_hints(tp, include_extras=True)
            return TupleShape([shape_for(hints.get(name, Any)) for name in tp._fields], tp)
        if dataclasses.is_dataclass(tp):
            return StructShape(tp)

    raise TypeError(f"no shape for {tp!r}")
