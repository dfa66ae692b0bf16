"""
Registration table module

Collects (external name, trampoline) pairs in generation order and emits
the table the host runtime reads at load time.
"""

from dataclasses import dataclass
from typing import Iterator

from .codegen import CodeGen
from .errors import DuplicateNameError


@dataclass(frozen=True)
class RegistrationEntry:
    """One name -> entry point pair"""
    external_name: str
    entry_point: str
    decl: str = ''

    @property
    def name_bytes(self) -> bytes:
        """External name as a NUL-terminated byte string"""
        return self.external_name.encode('utf-8') + b'\0'


class RegistrationTable:
    """Ordered, duplicate-free set of registration entries"""

    def __init__(self):
        self._entries: list[RegistrationEntry] = []
        self._owners: dict[str, str] = {}

    def add(self, external_name: str, entry_point: str, decl: str = '') -> RegistrationEntry:
        if external_name in self._owners:
            owner = self._owners[external_name]
            raise DuplicateNameError(
                f'external name {external_name!r} already generated for {owner}', decl)
        entry = RegistrationEntry(external_name, entry_point, decl)
        self._entries.append(entry)
        self._owners[external_name] = decl
        return entry

    def __iter__(self) -> Iterator[RegistrationEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, external_name: str) -> bool:
        return external_name in self._owners

    def names(self) -> list[str]:
        return [e.external_name for e in self._entries]

    def generate(self, gen: CodeGen):
        """Emit RING_FUNCS and the ring_libinit entry point"""
        gen.line('RING_FUNCS = (')
        gen.indent()
        for entry in self._entries:
            gen.line(f'({entry.name_bytes!r}, {entry.entry_point}),')
        gen.dedent()
        gen.line(')')
        gen.line()
        gen.line()
        with gen.block('def ring_libinit(state):'):
            gen.line('"""Register every trampoline with the host runtime"""')
            with gen.block('for name, func in RING_FUNCS:'):
                gen.line('state.register(name, func)')
