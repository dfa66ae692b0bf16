"""
Function binding generation module

Generates trampolines for free functions.
"""

from typing import TYPE_CHECKING

from .codegen import CodeGen, attr_expr, external_name, local_var
from .trampoline import Trampoline, TrampolineKind

if TYPE_CHECKING:
    from .ir import FuncInfo
    from .trampoline import TrampolineGenerator
    from .types import TypeClassifier


class FuncGenerator:
    """Generates function wrapper bindings"""

    def __init__(self, classifier: 'TypeClassifier', tramp_gen: 'TrampolineGenerator', prefix: str):
        self.classifier = classifier
        self.tramp_gen = tramp_gen
        self.prefix = prefix

    def generate(self, func: 'FuncInfo', gen: CodeGen):
        """Generate wrapper for a function"""
        decl = f'fn {func.name}'
        params = [(p.name, self.classifier.classify(p.type, where=f'{decl}({p.name})'))
                  for p in func.params]
        returns = None
        if func.return_type:
            returns = self.classifier.classify(func.return_type, where=f'{decl} return')

        args = ', '.join(local_var(p.name) for p in func.params)
        self.tramp_gen.emit(Trampoline(
            kind=TrampolineKind.FUNCTION,
            external_name=external_name(self.prefix, func.name),
            call=f'{attr_expr("native", func.name)}({args})',
            params=params,
            returns=returns,
            doc=func.doc,
            decl=decl,
        ), gen)
