"""
Method binding generation module

Generates trampolines for impl blocks: a custom constructor for `new` and
one trampoline per public method taking a receiver. Static methods other
than `new` are not exported.
"""

from typing import TYPE_CHECKING

from .codegen import CodeGen, attr_expr, external_name, local_var
from .errors import GenerationError
from .trampoline import RECEIVER_VAR, Trampoline, TrampolineKind
from .types import Opaque

if TYPE_CHECKING:
    from .ir import ImplInfo, MethodInfo
    from .trampoline import TrampolineGenerator
    from .types import TypeClassifier


class MethodGenerator:
    """Generates impl block bindings"""

    def __init__(self, classifier: 'TypeClassifier', tramp_gen: 'TrampolineGenerator', prefix: str):
        self.classifier = classifier
        self.tramp_gen = tramp_gen
        self.prefix = prefix

    def generate(self, impl: 'ImplInfo', gen: CodeGen):
        """Generate wrappers for every exported method of impl"""
        if impl.struct not in self.classifier.struct_names:
            raise GenerationError('impl block for undeclared struct', f'impl {impl.struct}')

        for method in impl.methods:
            if not method.public:
                continue
            if method.name == 'new':
                self._gen_custom_constructor(impl.struct, method, gen)
            elif method.has_receiver:
                self._gen_method(impl.struct, method, gen)

    def _params(self, struct_name: str, method: 'MethodInfo', decl: str):
        return [(p.name, self.classifier.classify(p.type, owner=struct_name,
                                                  where=f'{decl}({p.name})'))
                for p in method.params]

    def _gen_custom_constructor(self, struct_name: str, method: 'MethodInfo', gen: CodeGen):
        """Generate constructor calling the user's `new`"""
        decl = f'{struct_name}::new'
        args = ', '.join(local_var(p.name) for p in method.params)
        ctor = attr_expr(attr_expr('native', struct_name), 'new')
        self.tramp_gen.emit(Trampoline(
            kind=TrampolineKind.CUSTOM_NEW,
            external_name=external_name(self.prefix, 'new', struct_name),
            call=f'{ctor}({args})',
            params=self._params(struct_name, method, decl),
            returns=Opaque(struct_name),
            doc=method.doc,
            decl=decl,
        ), gen)

    def _gen_method(self, struct_name: str, method: 'MethodInfo', gen: CodeGen):
        """Generate instance method wrapper"""
        decl = f'{struct_name}::{method.name}'
        returns = None
        if method.return_type:
            returns = self.classifier.classify(method.return_type, owner=struct_name,
                                               where=f'{decl} return')
        args = ', '.join(local_var(p.name) for p in method.params)
        self.tramp_gen.emit(Trampoline(
            kind=TrampolineKind.METHOD,
            external_name=external_name(self.prefix, method.name, struct_name),
            call=f'{attr_expr(RECEIVER_VAR, method.name)}({args})',
            params=self._params(struct_name, method, decl),
            receiver=struct_name,
            returns=returns,
            doc=method.doc,
            decl=decl,
        ), gen)
