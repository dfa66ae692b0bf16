"""
Trampoline generation module

A trampoline is the function the host runtime calls. Each one runs the
same protocol against its call context `p`:

1. check the argument count,
2. check every slot's type left to right (and the tag of every handle),
3. extract and cast the arguments,
4. call the native function or method,
5. write the single return slot, if there is a result.

Any failed check reports through `p.error` and returns before anything is
extracted, so a rejected call has no side effects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .codegen import CodeGen, local_var, tag_const, trampoline_ident
from .errors import GenerationError
from .registry import RegistrationTable
from .types import TypeCategory, TypeConverter, Opaque

RECEIVER_VAR = 'obj'


class TrampolineKind(Enum):
    FUNCTION = 'function'
    DEFAULT_NEW = 'default constructor'
    CUSTOM_NEW = 'constructor'
    DELETE = 'destructor'
    GETTER = 'getter'
    SETTER = 'setter'
    METHOD = 'method'


@dataclass
class Trampoline:
    """Everything needed to emit one trampoline"""
    kind: TrampolineKind
    external_name: str
    call: str
    params: list[tuple[str, TypeCategory]] = field(default_factory=list)
    receiver: Optional[str] = None
    returns: Optional[TypeCategory] = None
    doc: str = ''
    decl: str = ''

    @property
    def ident(self) -> str:
        return trampoline_ident(self.external_name)

    @property
    def arity(self) -> int:
        """Expected argument count; slot 1 holds the receiver if any"""
        return len(self.params) + (1 if self.receiver else 0)

    def slots(self) -> list[tuple[int, str, TypeCategory]]:
        """(stack index, local variable, category) for every argument"""
        slots = []
        if self.receiver:
            slots.append((1, RECEIVER_VAR, Opaque(self.receiver)))
        offset = len(slots) + 1
        for i, (name, cat) in enumerate(self.params):
            slots.append((i + offset, local_var(name), cat))
        return slots


class TrampolineGenerator:
    """Writes trampolines and records them in the registration table"""

    def __init__(self, table: RegistrationTable, ignores: Optional[set[str]] = None):
        self.table = table
        self.ignores = ignores or set()
        self.type_conv = TypeConverter()
        self.emitted: list[Trampoline] = []

    def emit(self, tramp: Trampoline, gen: CodeGen):
        """Register and write a trampoline unless its name is ignored"""
        if tramp.external_name in self.ignores:
            return
        if not tramp.ident.isidentifier():
            raise GenerationError(
                f'external name {tramp.external_name!r} is not a valid identifier', tramp.decl)
        for name, _cat in tramp.params:
            if not local_var(name).isidentifier():
                raise GenerationError(f'parameter name {name!r} is not a valid identifier',
                                      tramp.decl)
        self.table.add(tramp.external_name, tramp.ident, tramp.decl)
        self.emitted.append(tramp)

        for doc_line in tramp.doc.splitlines():
            gen.line(f'# {doc_line}'.rstrip())
        with gen.block(f'def {tramp.ident}(p):'):
            self._gen_arity_check(tramp, gen)
            for idx, _var, cat in tramp.slots():
                self._gen_slot_check(tramp, idx, cat, gen)
            if tramp.kind is not TrampolineKind.DELETE:
                for idx, var, cat in tramp.slots():
                    gen.line(f'{var} = {self.type_conv.ring_to_native(cat, idx)}')
            self._gen_call(tramp, gen)
        gen.line()
        gen.line()

    def _gen_arity_check(self, tramp: Trampoline, gen: CodeGen):
        with gen.block(f'if p.paracount() != {tramp.arity}:'):
            gen.line('p.error(BAD_PARACOUNT)')
            gen.line('return')

    def _gen_slot_check(self, tramp: Trampoline, idx: int, cat: TypeCategory, gen: CodeGen):
        with gen.block(f'if not {self.type_conv.check(cat, idx)}:'):
            gen.line('p.error(BAD_PARATYPE)')
            gen.line('return')
        if not isinstance(cat, Opaque):
            return
        if tramp.kind is TrampolineKind.DELETE:
            # Deleting a null handle is a no-op
            with gen.block(f'if p.is_null({idx}):'):
                gen.line('return')
        with gen.block(f'if not p.check_pointer({idx}, {tag_const(cat.struct)}):'):
            gen.line(f"p.error('Invalid {cat.struct} pointer')")
            gen.line('return')

    def _gen_call(self, tramp: Trampoline, gen: CodeGen):
        if tramp.returns is None:
            gen.line(tramp.call)
            return
        gen.line(f'result = {tramp.call}')
        gen.line(self.type_conv.native_to_ring(tramp.returns, 'result'))
