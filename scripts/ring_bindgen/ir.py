"""
IR (Intermediate Representation) module

In-memory form of one binding unit: an optional name prefix, the native
module implementing the bodies, and the ordered declarations. Units are
built from declaration text (see schema.py) or from a JSON document.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union
import json
import os

from .errors import DeclarationError


class Receiver(Enum):
    """How a method takes its receiver"""
    NONE = 'none'
    VALUE = 'self'
    REF = '&self'
    MUT_REF = '&mut self'


@dataclass
class ParamInfo:
    """Function or method parameter"""
    name: str
    type: str


@dataclass
class FieldInfo:
    """Struct field information"""
    name: str
    type: str
    public: bool = False
    doc: str = ''


@dataclass
class FuncInfo:
    """Free function declaration"""
    name: str
    params: list[ParamInfo]
    return_type: Optional[str] = None
    doc: str = ''
    source: str = ''


@dataclass
class StructInfo:
    """Struct type information"""
    name: str
    fields: list[FieldInfo]
    doc: str = ''
    source: str = ''

    def public_fields(self) -> list[FieldInfo]:
        return [f for f in self.fields if f.public]


@dataclass
class MethodInfo:
    """Method declared in an impl block"""
    name: str
    receiver: Receiver
    params: list[ParamInfo]
    return_type: Optional[str] = None
    public: bool = False
    doc: str = ''

    @property
    def has_receiver(self) -> bool:
        return self.receiver is not Receiver.NONE


@dataclass
class ImplInfo:
    """Method block attached to a struct by name"""
    struct: str
    methods: list[MethodInfo]
    source: str = ''


@dataclass
class Passthrough:
    """Verbatim text copied unchanged into the output"""
    text: str


Declaration = Union[FuncInfo, StructInfo, ImplInfo, Passthrough]


@dataclass
class BindingUnit:
    """One generation request"""
    prefix: Optional[str] = None
    native: Optional[str] = None
    decls: list[Declaration] = field(default_factory=list)
    name: str = ''

    @classmethod
    def load(cls, path: str) -> 'BindingUnit':
        """Load a unit from a declaration file (.json or declaration text)"""
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
        if path.endswith('.json'):
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise DeclarationError(f'invalid JSON: {e.msg}', e.lineno, e.colno) from e
            unit = cls.from_dict(data)
        else:
            from .schema import parse_unit
            unit = parse_unit(text)
        if not unit.name:
            unit.name = _stem(path)
        return unit

    @classmethod
    def from_dict(cls, data: dict) -> 'BindingUnit':
        """Create a unit from a JSON IR dictionary

        Missing keys, values of the wrong shape and unknown receivers are
        reported as a DeclarationError naming the offending entry.
        """
        if not isinstance(data, dict):
            raise DeclarationError('JSON IR must be an object')

        decls = []
        for index, decl in enumerate(data.get('decls', [])):
            try:
                decls.append(cls._decl_from_dict(decl))
            except KeyError as e:
                raise DeclarationError(f'missing key {e.args[0]!r}', decl=f'decls[{index}]') from e
            except (TypeError, ValueError, AttributeError) as e:
                raise DeclarationError(f'malformed declaration: {e}', decl=f'decls[{index}]') from e

        unit = cls(
            prefix=data.get('prefix') or None,
            native=data.get('native') or None,
            decls=decls,
            name=data.get('name', ''),
        )
        for kind in ('prefix', 'native'):
            value = getattr(unit, kind)
            message = directive_error(kind, value) if value is not None else None
            if message:
                raise DeclarationError(message)
        return unit

    @classmethod
    def _decl_from_dict(cls, decl: dict) -> Declaration:
        from .schema import parse_type

        kind = decl.get('kind')
        if kind == 'func':
            return FuncInfo(
                name=decl['name'],
                params=cls._parse_params(decl, parse_type),
                return_type=_optional_type(decl.get('return'), parse_type),
                doc=decl.get('doc', ''),
            )
        if kind == 'struct':
            return StructInfo(
                name=decl['name'],
                fields=[FieldInfo(
                    name=f['name'],
                    type=parse_type(f['type']),
                    public=f.get('pub', False),
                    doc=f.get('doc', ''),
                ) for f in decl.get('fields', [])],
                doc=decl.get('doc', ''),
            )
        if kind == 'impl':
            return ImplInfo(
                struct=decl['struct'],
                methods=[MethodInfo(
                    name=m['name'],
                    receiver=Receiver(m.get('receiver') or 'none'),
                    params=cls._parse_params(m, parse_type),
                    return_type=_optional_type(m.get('return'), parse_type),
                    public=m.get('pub', False),
                    doc=m.get('doc', ''),
                ) for m in decl.get('methods', [])],
            )
        if kind == 'passthrough':
            return Passthrough(text=decl['text'])
        raise DeclarationError(f'unknown declaration kind {kind!r}')

    @staticmethod
    def _parse_params(decl: dict, parse_type) -> list[ParamInfo]:
        return [ParamInfo(name=p['name'], type=parse_type(p['type']))
                for p in decl.get('params', [])]

    def funcs(self) -> list[FuncInfo]:
        return [d for d in self.decls if isinstance(d, FuncInfo)]

    def structs(self) -> list[StructInfo]:
        return [d for d in self.decls if isinstance(d, StructInfo)]

    def impls(self) -> list[ImplInfo]:
        return [d for d in self.decls if isinstance(d, ImplInfo)]

    def get_struct(self, name: str) -> Optional[StructInfo]:
        for struct in self.structs():
            if struct.name == name:
                return struct
        return None

    def struct_names(self) -> set[str]:
        return {s.name for s in self.structs()}


def _optional_type(type_str: Optional[str], parse_type) -> Optional[str]:
    if not type_str:
        return None
    parsed = parse_type(type_str)
    return None if parsed == '()' else parsed


def _stem(path: str) -> str:
    return os.path.basename(path).split('.', 1)[0]


def directive_error(kind: str, value: str) -> Optional[str]:
    """Why a prefix or native module name cannot be used, or None

    Examples:
        (prefix, my-lib) -> "prefix 'my-lib' is not a valid identifier"
        (native, pkg.mod) -> None
    """
    if kind == 'prefix':
        if value == '' or value.isidentifier():
            return None
        return f'prefix {value!r} is not a valid identifier'
    if all(part.isidentifier() for part in value.split('.')):
        return None
    return f'native module {value!r} is not a valid module name'
