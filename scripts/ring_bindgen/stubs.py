"""
Ring API stub generation module

Writes a .ring file listing every generated function with its Ring-side
parameter types, for reference from Ring code and editors.
"""

from typing import TYPE_CHECKING

from .trampoline import TrampolineKind
from .types import TypeConverter

if TYPE_CHECKING:
    from .trampoline import Trampoline

SECTION_TITLES = {
    TrampolineKind.FUNCTION: 'Functions',
    TrampolineKind.DEFAULT_NEW: 'Constructors',
    TrampolineKind.CUSTOM_NEW: 'Constructors',
    TrampolineKind.DELETE: 'Destructors',
    TrampolineKind.GETTER: 'Fields',
    TrampolineKind.SETTER: 'Fields',
    TrampolineKind.METHOD: 'Methods',
}


class RingStubGenerator:
    """Generates the Ring API listing for one binding unit"""

    def __init__(self, unit_name: str, native: str):
        self.unit_name = unit_name
        self.native = native
        self.type_conv = TypeConverter()

    def generate(self, trampolines: list['Trampoline']) -> str:
        """Generate complete stub file"""
        lines = []
        lines.append(f'# Ring API for {self.unit_name} (native module: {self.native})')
        lines.append('# Auto-generated, do not edit')

        section = None
        for tramp in trampolines:
            title = SECTION_TITLES[tramp.kind]
            if title != section:
                section = title
                lines.append('')
                lines.append(f'# --- {title}')
            lines.extend(self._gen_entry(tramp))

        lines.append('')
        return '\n'.join(lines)

    def _gen_entry(self, tramp: 'Trampoline') -> list[str]:
        params = []
        if tramp.receiver:
            params.append(f'{tramp.receiver.lower()}: cpointer<{tramp.receiver}>')
        for name, cat in tramp.params:
            params.append(f'{name}: {self.type_conv.ring_type(cat)}')

        signature = f'# {tramp.external_name}({", ".join(params)})'
        if tramp.returns is not None:
            signature += f' -> {self.type_conv.ring_type(tramp.returns)}'

        lines = [signature]
        for doc_line in tramp.doc.splitlines():
            lines.append(f'#     {doc_line}'.rstrip())
        return lines
