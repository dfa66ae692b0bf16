"""
Struct binding generation module

Generates the type tag, constructor, destructor and field accessors for
struct types. User methods take precedence: the default constructor is
skipped when the struct has its own `new`, and an accessor is skipped when
a method of the same name already provides it.
"""

import keyword
from typing import TYPE_CHECKING

from .codegen import CodeGen, attr_expr, external_name, local_var, tag_const, tag_value
from .errors import GenerationError
from .trampoline import RECEIVER_VAR, Trampoline, TrampolineKind
from .types import Opaque

if TYPE_CHECKING:
    from .ir import StructInfo, FieldInfo
    from .shadow import ShadowIndex
    from .trampoline import TrampolineGenerator
    from .types import TypeClassifier


class StructGenerator:
    """Generates struct bindings"""

    def __init__(self, classifier: 'TypeClassifier', tramp_gen: 'TrampolineGenerator',
                 shadow: 'ShadowIndex', prefix: str):
        self.classifier = classifier
        self.tramp_gen = tramp_gen
        self.shadow = shadow
        self.prefix = prefix

    def generate_tag(self, struct: 'StructInfo', gen: CodeGen):
        """Emit the module constant holding the struct's type tag"""
        if not tag_const(struct.name).isidentifier():
            raise GenerationError('struct name is not a valid identifier', f'struct {struct.name}')
        gen.line(f'{tag_const(struct.name)} = {tag_value(self.prefix, struct.name)!r}')

    def generate(self, struct: 'StructInfo', gen: CodeGen):
        """Generate all bindings for a struct"""
        self._gen_destructor(struct, gen)
        if not self.shadow.has_custom_new(struct.name):
            self._gen_default_constructor(struct, gen)

        for field in struct.public_fields():
            cat = self.classifier.classify(field.type, owner=struct.name,
                                           where=f'{struct.name}.{field.name}')
            if not self.shadow.getter_shadowed(struct.name, field.name):
                self._gen_getter(struct, field, cat, gen)
            if not self.shadow.setter_shadowed(struct.name, field.name):
                self._gen_setter(struct, field, cat, gen)

    def _gen_default_constructor(self, struct: 'StructInfo', gen: CodeGen):
        """Generate zero-argument constructor boxing a default instance"""
        self.tramp_gen.emit(Trampoline(
            kind=TrampolineKind.DEFAULT_NEW,
            external_name=external_name(self.prefix, 'new', struct.name),
            call=f'{attr_expr("native", struct.name)}()',
            returns=Opaque(struct.name),
            doc=struct.doc,
            decl=f'struct {struct.name}',
        ), gen)

    def _gen_destructor(self, struct: 'StructInfo', gen: CodeGen):
        """Generate destructor releasing the handle"""
        self.tramp_gen.emit(Trampoline(
            kind=TrampolineKind.DELETE,
            external_name=external_name(self.prefix, 'delete', struct.name),
            call=f'p.free_pointer(1, {tag_const(struct.name)})',
            receiver=struct.name,
            decl=f'struct {struct.name}',
        ), gen)

    def _gen_getter(self, struct: 'StructInfo', field: 'FieldInfo', cat, gen: CodeGen):
        """Generate field getter"""
        self.tramp_gen.emit(Trampoline(
            kind=TrampolineKind.GETTER,
            external_name=external_name(self.prefix, f'get_{field.name}', struct.name),
            call=attr_expr(RECEIVER_VAR, field.name),
            receiver=struct.name,
            returns=cat,
            doc=field.doc,
            decl=f'{struct.name}.{field.name}',
        ), gen)

    def _gen_setter(self, struct: 'StructInfo', field: 'FieldInfo', cat, gen: CodeGen):
        """Generate field setter"""
        value = local_var(field.name)
        if keyword.iskeyword(field.name):
            call = f'setattr({RECEIVER_VAR}, {field.name!r}, {value})'
        else:
            call = f'{RECEIVER_VAR}.{field.name} = {value}'
        self.tramp_gen.emit(Trampoline(
            kind=TrampolineKind.SETTER,
            external_name=external_name(self.prefix, f'set_{field.name}', struct.name),
            call=call,
            params=[(field.name, cat)],
            receiver=struct.name,
            doc=field.doc,
            decl=f'{struct.name}.{field.name}',
        ), gen)
