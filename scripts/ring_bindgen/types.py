"""
Type classification and conversion module

Maps declared type expressions onto the closed set of marshalling
categories, and provides the Ring <-> native conversion snippets each
category embeds in a trampoline.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .codegen import tag_const
from .errors import UnsupportedTypeError


@dataclass(frozen=True)
class Integer:
    """Integer of a fixed width; fallback marks an unrecognized type"""
    width: int
    signed: bool
    fallback: bool = False


@dataclass(frozen=True)
class Float:
    width: int


@dataclass(frozen=True)
class Boolean:
    pass


@dataclass(frozen=True)
class Text:
    pass


@dataclass(frozen=True)
class Opaque:
    """Handle to a boxed instance of a declared struct"""
    struct: str


TypeCategory = Union[Integer, Float, Boolean, Text, Opaque]

INT_TYPES = {
    'i8': (8, True), 'i16': (16, True), 'i32': (32, True),
    'i64': (64, True), 'i128': (128, True), 'isize': (64, True),
    'u8': (8, False), 'u16': (16, False), 'u32': (32, False),
    'u64': (64, False), 'u128': (128, False), 'usize': (64, False),
}

FLOAT_TYPES = {'f32': 32, 'f64': 64}

# Unrecognized types are cast like a signed 64-bit integer
FALLBACK = Integer(64, True, fallback=True)


def is_int_type(type_str: str) -> bool:
    """Check if type is a fixed-width integer type"""
    return type_str in INT_TYPES


def is_float_type(type_str: str) -> bool:
    """Check if type is a float type"""
    return type_str in FLOAT_TYPES


def strip_ref(type_str: str) -> str:
    """Remove reference, lifetime and mut qualifiers

    Examples:
        &'a mut Counter -> Counter
        &str -> str
    """
    if not type_str.startswith('&'):
        return type_str
    tokens = type_str[1:].split()
    while tokens and (tokens[0].startswith("'") or tokens[0] == 'mut'):
        tokens.pop(0)
    return ' '.join(tokens)


def is_text_type(type_str: str) -> bool:
    """Check if type is an owned or borrowed string"""
    if type_str == 'String':
        return True
    return type_str.startswith('&') and strip_ref(type_str) in ('str', 'String')


class TypeClassifier:
    """Classifies type expressions for one binding unit

    In lenient mode an unrecognized type falls back to a signed 64-bit
    integer and is recorded in `fallbacks`; in strict mode it raises
    UnsupportedTypeError.
    """

    def __init__(self, struct_names: Iterable[str], strict: bool = False):
        self.struct_names = set(struct_names)
        self.strict = strict
        self.fallbacks: list[tuple[str, str]] = []

    def classify(self, type_str: str, owner: Optional[str] = None, where: str = '') -> TypeCategory:
        if is_int_type(type_str):
            width, signed = INT_TYPES[type_str]
            return Integer(width, signed)
        if is_float_type(type_str):
            return Float(FLOAT_TYPES[type_str])
        if type_str == 'bool':
            return Boolean()
        if type_str == 'str' or is_text_type(type_str):
            return Text()

        base = strip_ref(type_str)
        if base == 'Self' and owner:
            return Opaque(owner)
        if base in self.struct_names:
            return Opaque(base)

        if self.strict:
            raise UnsupportedTypeError(f'unsupported type {type_str!r}', where)
        self.fallbacks.append((where, type_str))
        return FALLBACK


class TypeConverter:
    """Generates Ring <-> native conversion code for each category"""

    def check(self, cat: TypeCategory, idx: int) -> str:
        """Condition that holds when stack slot idx can carry cat"""
        if isinstance(cat, Text):
            return f'p.is_string({idx})'
        if isinstance(cat, Opaque):
            return f'p.is_pointer({idx})'
        return f'p.is_number({idx})'

    def ring_to_native(self, cat: TypeCategory, idx: int) -> str:
        """Expression extracting stack slot idx as a native value"""
        if isinstance(cat, Integer):
            return f'to_int(p.get_number({idx}), {cat.width}, {cat.signed})'
        if isinstance(cat, Float):
            return f'to_float(p.get_number({idx}), {cat.width})'
        if isinstance(cat, Boolean):
            return f'p.get_number({idx}) != 0.0'
        if isinstance(cat, Text):
            return f'str(p.get_string({idx}))'
        return f'p.get_pointer({idx}, {tag_const(cat.struct)})'

    def native_to_ring(self, cat: TypeCategory, expr: str) -> str:
        """Statement writing expr to the return slot"""
        if isinstance(cat, Boolean):
            return f'p.ret_number(1.0 if {expr} else 0.0)'
        if isinstance(cat, Text):
            return f'p.ret_string(str({expr}))'
        if isinstance(cat, Opaque):
            return f'p.ret_pointer({expr}, {tag_const(cat.struct)})'
        return f'p.ret_number(float({expr}))'

    def ring_type(self, cat: Optional[TypeCategory]) -> str:
        """Ring-side type name used in API stubs"""
        if cat is None:
            return 'nil'
        if isinstance(cat, Text):
            return 'string'
        if isinstance(cat, Opaque):
            return f'cpointer<{cat.struct}>'
        return 'number'
