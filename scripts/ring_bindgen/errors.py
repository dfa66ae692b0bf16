"""
Generation-time error types

Every error raised while turning declarations into bindings derives from
GenerationError. Nothing is written when one is raised.
"""


class GenerationError(Exception):
    """Generation failed; no output is valid"""

    def __init__(self, message: str, decl: str = ''):
        self.decl = decl
        if decl:
            message = f'{decl}: {message}'
        super().__init__(message)


class DeclarationError(GenerationError):
    """Declaration text violates the grammar"""

    def __init__(self, message: str, line: int = -1, column: int = -1, decl: str = ''):
        self.line = line
        self.column = column
        if line > 0:
            message = f'{message} (line {line}, column {column})'
        super().__init__(message, decl)


class UnsupportedTypeError(GenerationError):
    """Type cannot be marshalled (strict mode only)"""


class DuplicateNameError(GenerationError):
    """Two trampolines derive the same external name"""
