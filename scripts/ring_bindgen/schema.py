"""
Declaration text parser

Turns declaration text into a BindingUnit. The grammar lives in
declarations.lark; the lark parse tree is converted into IR objects by
UnitTransformer.
"""

from typing import Optional

from lark import Lark, Token, Transformer, v_args, exceptions as lark_exc

from .errors import DeclarationError
from .ir import (
    BindingUnit, FuncInfo, StructInfo, FieldInfo, ImplInfo, MethodInfo,
    ParamInfo, Passthrough, Receiver, directive_error,
)

_parser: Optional[Lark] = None


def get_parser() -> Lark:
    """Get or create the declaration parser"""
    global _parser
    if _parser is None:
        _parser = Lark.open(
            'declarations.lark',
            rel_to=__file__,
            parser='lalr',
            start=['unit', 'type'],
            propagate_positions=True,
        )
    return _parser


def parse_unit(text: str) -> BindingUnit:
    """Parse declaration text into a BindingUnit"""
    try:
        tree = get_parser().parse(text, start='unit')
    except lark_exc.UnexpectedInput as e:
        raise _syntax_error(e) from e

    items = UnitTransformer(text).transform(tree)

    unit = BindingUnit()
    seen_decl = False
    for item in items:
        if isinstance(item, _Directive):
            if seen_decl:
                raise DeclarationError(f"'{item.kind}' must precede all other items",
                                       item.line, item.column)
            if getattr(unit, item.kind) is not None:
                raise DeclarationError(f"duplicate '{item.kind}' directive",
                                       item.line, item.column)
            message = directive_error(item.kind, item.value)
            if message:
                raise DeclarationError(message, item.line, item.column)
            setattr(unit, item.kind, item.value)
        else:
            seen_decl = True
            unit.decls.append(item)
    return unit


def parse_type(text: str) -> str:
    """Parse a type expression and return its normalized spelling

    Examples:
        '& mut Counter' -> '&mut Counter'
        "&'a str" -> "&'a str"
        'Vec< u8 >' -> 'Vec<u8>'
    """
    try:
        tree = get_parser().parse(text, start='type')
    except lark_exc.UnexpectedInput as e:
        raise DeclarationError(f'unparseable type {text!r}') from e
    result = UnitTransformer(text).transform(tree)
    if isinstance(result, Token):
        return str(result)
    return result


def _syntax_error(e: lark_exc.UnexpectedInput) -> DeclarationError:
    if isinstance(e, lark_exc.UnexpectedToken):
        if e.token.type == '$END':
            message = 'unexpected end of declarations'
        else:
            message = f'unexpected {e.token.type} {str(e.token)!r}'
    elif isinstance(e, lark_exc.UnexpectedCharacters):
        message = f'unexpected character {e.char!r}'
    else:
        message = 'unexpected end of declarations'
    return DeclarationError(message, getattr(e, 'line', -1), getattr(e, 'column', -1))


class _Directive:
    def __init__(self, kind: str, value: str, meta):
        self.kind = kind
        self.value = value
        self.line = meta.line
        self.column = meta.column


class _Leading:
    def __init__(self, doc: str, attrs: list[str]):
        self.doc = doc
        self.attrs = attrs


class _Vis:
    def __init__(self, public: bool):
        self.public = public


class _Ret:
    def __init__(self, type_str: str):
        self.type = type_str


def _unquote(token: Token) -> str:
    return token[1:-1].encode('latin-1', 'backslashreplace').decode('unicode_escape')


def _doc_line(token: Token) -> str:
    text = token[3:]
    return text[1:] if text.startswith(' ') else text


def _parts(children):
    """Split rule children into leading, vis, name, lists and return type"""
    leading = _Leading('', [])
    public = False
    name = None
    lists = []
    ret = None
    for child in children:
        if isinstance(child, _Leading):
            leading = child
        elif isinstance(child, _Vis):
            public = child.public
        elif isinstance(child, Token) and child.type == 'NAME':
            name = str(child)
        elif isinstance(child, _Ret):
            ret = child.type
        elif isinstance(child, list):
            lists.append(child)
    return leading, public, name, lists, ret


class UnitTransformer(Transformer):
    """Converts the lark parse tree into IR objects"""

    def __init__(self, text: str):
        super().__init__()
        self._text = text

    def _source(self, meta) -> str:
        if getattr(meta, 'empty', True):
            return ''
        return self._text[meta.start_pos:meta.end_pos]

    def unit(self, children):
        return list(children)

    @v_args(meta=True)
    def prefix_directive(self, meta, children):
        return _Directive('prefix', _unquote(children[0]), meta)

    @v_args(meta=True)
    def native_directive(self, meta, children):
        return _Directive('native', _unquote(children[0]), meta)

    def passthrough(self, children):
        return Passthrough(text=str(children[0])[2:-2].strip('\n'))

    @v_args(meta=True)
    def function(self, meta, children):
        leading, _public, name, lists, ret = _parts(children)
        return FuncInfo(
            name=name,
            params=lists[0] if lists else [],
            return_type=ret,
            doc=leading.doc,
            source=self._source(meta),
        )

    @v_args(meta=True)
    def struct_decl(self, meta, children):
        leading, _public, name, lists, _ret = _parts(children)
        return StructInfo(
            name=name,
            fields=lists[0] if lists else [],
            doc=leading.doc,
            source=self._source(meta),
        )

    @v_args(meta=True)
    def impl_block(self, meta, children):
        name = next(str(c) for c in children if isinstance(c, Token) and c.type == 'NAME')
        methods = [c for c in children if isinstance(c, MethodInfo)]
        return ImplInfo(struct=name, methods=methods, source=self._source(meta))

    def method(self, children):
        leading, public, name, lists, ret = _parts(children)
        receiver = Receiver.NONE
        params = []
        if lists:
            params = [p for p in lists[0] if isinstance(p, ParamInfo)]
            receivers = [p for p in lists[0] if isinstance(p, Receiver)]
            if receivers:
                receiver = receivers[0]
        return MethodInfo(
            name=name,
            receiver=receiver,
            params=params,
            return_type=ret,
            public=public,
            doc=leading.doc,
        )

    def leading(self, children):
        docs = [_doc_line(t) for t in children if t.type == 'DOC']
        attrs = [str(t) for t in children if t.type == 'ATTR']
        return _Leading('\n'.join(docs), attrs)

    def vis(self, children):
        return _Vis(children[0].type == 'PUB')

    def field_list(self, children):
        return list(children)

    def field(self, children):
        leading, public, name, _lists, _ret = _parts(children[:-1])
        return FieldInfo(name=name, type=self._type_str(children[-1]),
                         public=public, doc=leading.doc)

    def param_list(self, children):
        return list(children)

    def param(self, children):
        return ParamInfo(name=str(children[0]), type=self._type_str(children[1]))

    def method_params(self, children):
        if len(children) == 1 and isinstance(children[0], list):
            return children[0]
        return list(children)

    def receiver(self, children):
        kinds = {t.type for t in children}
        if 'REF' not in kinds:
            return Receiver.VALUE
        return Receiver.MUT_REF if 'MUT' in kinds else Receiver.REF

    def ret(self, children):
        type_str = self._type_str(children[0])
        return None if type_str == '()' else _Ret(type_str)

    # Types are normalized to a canonical spelling

    @staticmethod
    def _type_str(node) -> str:
        return str(node)

    def ref_type(self, children):
        text = '&'
        for child in children[1:-1]:
            text += f'{child} '
        return text + self._type_str(children[-1])

    def path_type(self, children):
        names = [str(c) for c in children if isinstance(c, Token)]
        text = '::'.join(names)
        if children and not isinstance(children[-1], Token):
            text += children[-1]
        return text

    def generic_args(self, children):
        return '<' + ', '.join(self._type_str(c) for c in children) + '>'

    def array_type(self, children):
        inner = self._type_str(children[0])
        if len(children) > 1:
            return f'[{inner}; {children[1]}]'
        return f'[{inner}]'

    def tuple_type(self, children):
        inner = [self._type_str(c) for c in children]
        if len(inner) == 1:
            return f'({inner[0]},)'
        return '(' + ', '.join(inner) + ')'
