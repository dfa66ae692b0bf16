"""
Main generator module

Orchestrates all components to generate a complete binding module:
declarations are classified and shadow-resolved up front, trampolines are
written in declaration order, and the registration table closes the
module.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from .codegen import CodeGen
from .errors import DuplicateNameError, GenerationError
from .func import FuncGenerator
from .ir import BindingUnit, FuncInfo, ImplInfo, Passthrough, StructInfo, directive_error
from .method import MethodGenerator
from .registry import RegistrationTable
from .shadow import ShadowIndex
from .struct import StructGenerator
from .stubs import RingStubGenerator
from .trampoline import Trampoline, TrampolineGenerator
from .types import TypeClassifier

HEADER = '''\
# machine generated by ring_bindgen, do not edit
#
# Trampolines add no locking: calling them concurrently on the same
# handle is a data race the caller must prevent.
'''


@dataclass
class GeneratedModule:
    """Result of generating one binding unit"""
    name: str
    source: str
    stubs: str
    table: RegistrationTable
    trampolines: list[Trampoline]
    warnings: list[str] = field(default_factory=list)


class Generator:
    """Main binding generator"""

    def __init__(self, output_root: str = '.', strict: bool = False,
                 native: Optional[str] = None, stubs: bool = True):
        self.output_root = output_root
        self.strict = strict
        self.native = native
        self.stubs = stubs
        self._ignores: set[str] = set()

    def ignore(self, *names: str):
        """Skip trampolines with these external names"""
        self._ignores.update(names)

    def prepare(self):
        """Prepare output directory"""
        print('=== Generating Ring bindings:')
        os.makedirs(self.output_root, exist_ok=True)

    def generate_all(self, paths: list[str]) -> list[str]:
        """Generate bindings for every declaration file"""
        self.prepare()
        return [self.generate_file(path) for path in paths]

    def generate_file(self, path: str) -> str:
        """Generate bindings for a single declaration file"""
        unit = BindingUnit.load(path)
        module = self.generate_unit(unit)

        output = os.path.join(self.output_root, f'ring_{module.name}.py')
        print(f'  {path} => {output}')
        for warning in module.warnings:
            print(f'  >> warning: {warning}')

        with open(output, 'w', newline='\n') as f:
            f.write(module.source)
        if self.stubs:
            stubs_output = os.path.join(self.output_root, f'{module.name}.ring')
            with open(stubs_output, 'w', newline='\n') as f:
                f.write(module.stubs)
        return output

    def generate_unit(self, unit: BindingUnit) -> GeneratedModule:
        """Generate the binding module for a unit, without writing it"""
        native = self.native or unit.native
        if not native:
            raise GenerationError("no native module given (use a 'native' directive)")
        for kind, value in (('prefix', unit.prefix or ''), ('native', native)):
            message = directive_error(kind, value)
            if message:
                raise GenerationError(message)
        name = unit.name or native

        self._check_structs(unit)
        classifier = TypeClassifier(unit.struct_names(), strict=self.strict)
        shadow = ShadowIndex.resolve(unit)
        table = RegistrationTable()
        tramp_gen = TrampolineGenerator(table, self._ignores)

        struct_gen = StructGenerator(classifier, tramp_gen, shadow, unit.prefix)
        func_gen = FuncGenerator(classifier, tramp_gen, unit.prefix)
        method_gen = MethodGenerator(classifier, tramp_gen, unit.prefix)

        gen = CodeGen()
        gen.raw(HEADER)
        gen.line(f'"""Ring bindings for {name}"""')
        gen.line()
        gen.line('from ring_bindgen.convert import to_float, to_int')
        gen.line('from ring_bindgen.host import BAD_PARACOUNT, BAD_PARATYPE')
        gen.line()
        gen.line(f'import {native} as native')
        gen.line()

        # Original declarations, unchanged
        for decl in unit.decls:
            if isinstance(decl, Passthrough):
                gen.line()
                gen.raw(decl.text)
            elif decl.source:
                gen.line()
                for source_line in decl.source.splitlines():
                    gen.line(f'# {source_line}'.rstrip())
        gen.line()

        structs = unit.structs()
        for struct in structs:
            struct_gen.generate_tag(struct, gen)
        if structs:
            gen.line()
        gen.line()

        for decl in unit.decls:
            if isinstance(decl, StructInfo):
                struct_gen.generate(decl, gen)
            elif isinstance(decl, FuncInfo):
                func_gen.generate(decl, gen)
            elif isinstance(decl, ImplInfo):
                method_gen.generate(decl, gen)

        table.generate(gen)

        stubs = RingStubGenerator(name, native).generate(tramp_gen.emitted)
        warnings = [f'{where}: unrecognized type {type_str!r} marshalled as a number'
                    for where, type_str in classifier.fallbacks]
        return GeneratedModule(
            name=name,
            source=gen.output(),
            stubs=stubs,
            table=table,
            trampolines=tramp_gen.emitted,
            warnings=warnings,
        )

    @staticmethod
    def _check_structs(unit: BindingUnit):
        """Two structs with one name would share a type tag"""
        seen = set()
        for struct in unit.structs():
            if struct.name in seen:
                raise DuplicateNameError('struct declared twice', f'struct {struct.name}')
            seen.add(struct.name)
