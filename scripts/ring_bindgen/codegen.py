"""
Code generation utilities

Provides the indenting line writer and the naming policy shared by all
generators.
"""

import keyword
from typing import Optional


class CodeGen:
    """Code generation helper with indentation support"""

    def __init__(self):
        self._lines: list[str] = []
        self._indent: int = 0
        self._indent_str: str = '    '  # 4 spaces

    def line(self, text: str = ''):
        """Add a line with current indentation"""
        if text:
            self._lines.append(self._indent_str * self._indent + text)
        else:
            self._lines.append('')

    def raw(self, text: str):
        """Add raw text without indentation processing"""
        self._lines.append(text)

    def indent(self):
        """Increase indentation"""
        self._indent += 1

    def dedent(self):
        """Decrease indentation"""
        if self._indent > 0:
            self._indent -= 1

    def block(self, header: str):
        """Context manager for an indented suite"""
        return _BlockContext(self, header)

    def output(self) -> str:
        """Get generated code as string"""
        return '\n'.join(self._lines) + '\n'


class _BlockContext:
    """Context manager for indented code blocks"""

    def __init__(self, gen: CodeGen, header: str):
        self._gen = gen
        self._header = header

    def __enter__(self):
        self._gen.line(self._header)
        self._gen.indent()
        return self

    def __exit__(self, *args):
        self._gen.dedent()


def prefix_segment(prefix: Optional[str]) -> str:
    """Leading segment contributed by the unit prefix

    Examples:
        mylib -> mylib_
        '' -> ''
    """
    return f'{prefix}_' if prefix else ''


def external_name(prefix: Optional[str], member: str, struct_name: Optional[str] = None) -> str:
    """Name the host runtime uses to look up a trampoline

    Examples:
        (mylib, add) -> mylib_add
        (mylib, get_value, Counter) -> mylib_counter_get_value
        (None, delete, Counter) -> counter_delete
    """
    name = prefix_segment(prefix)
    if struct_name:
        name += struct_name.lower() + '_'
    return name + member


def trampoline_ident(ext_name: str) -> str:
    """Python identifier of the trampoline registered as ext_name"""
    return f'ring_{ext_name}'


def tag_const(struct_name: str) -> str:
    """Module constant holding a structure's type tag

    Examples:
        Counter -> COUNTER_TYPE
    """
    return f'{struct_name.upper()}_TYPE'


def tag_value(prefix: Optional[str], struct_name: str) -> str:
    """Runtime-visible type tag of a structure

    Examples:
        (mylib, Counter) -> mylib.Counter
        (None, Counter) -> Counter
    """
    return f'{prefix}.{struct_name}' if prefix else struct_name


def local_var(name: str) -> str:
    """Local variable holding an extracted argument"""
    return f'arg_{name}'


def attr_expr(obj: str, name: str) -> str:
    """Attribute access that stays valid when name is a Python keyword"""
    if keyword.iskeyword(name):
        return f'getattr({obj}, {name!r})'
    return f'{obj}.{name}'
