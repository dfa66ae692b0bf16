"""
ring_bindgen - Ring extension binding generator

Turns declarations of functions, structs and impl blocks into trampolines
that marshal Ring's stack-based call protocol onto a native Python module,
plus the name table Ring resolves calls through at load time.
"""

from .ir import (
    BindingUnit, FuncInfo, StructInfo, FieldInfo, ImplInfo, MethodInfo,
    ParamInfo, Passthrough, Receiver,
)
from .errors import GenerationError, DeclarationError, UnsupportedTypeError, DuplicateNameError
from .schema import parse_unit, parse_type
from .types import TypeCategory, Integer, Float, Boolean, Text, Opaque, TypeClassifier, TypeConverter
from .codegen import CodeGen, external_name
from .shadow import ShadowIndex
from .trampoline import Trampoline, TrampolineKind, TrampolineGenerator
from .registry import RegistrationEntry, RegistrationTable
from .func import FuncGenerator
from .struct import StructGenerator
from .method import MethodGenerator
from .stubs import RingStubGenerator
from .generator import Generator, GeneratedModule

__all__ = [
    'BindingUnit', 'FuncInfo', 'StructInfo', 'FieldInfo', 'ImplInfo', 'MethodInfo',
    'ParamInfo', 'Passthrough', 'Receiver',
    'GenerationError', 'DeclarationError', 'UnsupportedTypeError', 'DuplicateNameError',
    'parse_unit', 'parse_type',
    'TypeCategory', 'Integer', 'Float', 'Boolean', 'Text', 'Opaque', 'TypeClassifier', 'TypeConverter',
    'CodeGen', 'external_name',
    'ShadowIndex',
    'Trampoline', 'TrampolineKind', 'TrampolineGenerator',
    'RegistrationEntry', 'RegistrationTable',
    'FuncGenerator',
    'StructGenerator',
    'MethodGenerator',
    'RingStubGenerator',
    'Generator', 'GeneratedModule',
]
