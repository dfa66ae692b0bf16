import pytest

from ring_bindgen import (
    BindingUnit, DeclarationError, FuncInfo, ImplInfo, Passthrough, Receiver, StructInfo,
    parse_type, parse_unit,
)


def test_counter_unit_structure(counter_unit):
    assert counter_unit.prefix == 'mylib'
    assert counter_unit.native is None
    kinds = [type(d) for d in counter_unit.decls]
    assert kinds == [FuncInfo, FuncInfo, StructInfo, ImplInfo, StructInfo]


def test_function_params_return_and_doc(counter_unit):
    add = counter_unit.funcs()[0]
    assert add.name == 'add'
    assert [(p.name, p.type) for p in add.params] == [('a', 'i32'), ('b', 'i32')]
    assert add.return_type == 'i32'
    assert add.doc == 'Adds two numbers'
    assert add.source.startswith('/// Adds two numbers')
    assert add.source.endswith('fn add(a: i32, b: i32) -> i32;')


def test_struct_fields_visibility(counter_unit):
    counter = counter_unit.get_struct('Counter')
    assert [(f.name, f.type, f.public) for f in counter.fields] == [
        ('value', 'i64', True),
        ('name', 'String', True),
        ('secret', 'u8', False),
    ]
    assert [f.name for f in counter.public_fields()] == ['value', 'name']
    assert counter.source.startswith('#[derive(Default)]')


def test_impl_receivers(counter_unit):
    impl = counter_unit.impls()[0]
    assert impl.struct == 'Counter'
    methods = {m.name: m for m in impl.methods}
    assert methods['increment'].receiver is Receiver.MUT_REF
    assert methods['is_zero'].receiver is Receiver.REF
    assert methods['reset_all'].receiver is Receiver.NONE
    assert not methods['reset_all'].has_receiver
    assert methods['helper'].public is False
    assert [(p.name, p.type) for p in methods['describe'].params] == [('other', '&Counter')]
    assert methods['clone_counter'].return_type == 'Self'
    assert methods['increment'].return_type is None


def test_restricted_visibility_is_private():
    unit = parse_unit('''
        struct Point { pub(crate) x: f64, pub y: f64 }
    ''')
    assert [f.public for f in unit.structs()[0].fields] == [False, True]


def test_value_receiver_and_unit_return():
    unit = parse_unit('''
        struct Token {}
        impl Token {
            pub fn consume(mut self) -> ();
            pub fn peek(&'a self) -> u8;
        }
    ''')
    consume, peek = unit.impls()[0].methods
    assert consume.receiver is Receiver.VALUE
    assert consume.return_type is None
    assert peek.receiver is Receiver.REF


def test_native_directive_and_passthrough():
    unit = parse_unit('''
        prefix: "dt";
        native: "dt_native";
        %%
        SCALE = 1000
        %%
        fn now() -> i64;
    ''')
    assert unit.prefix == 'dt'
    assert unit.native == 'dt_native'
    assert isinstance(unit.decls[0], Passthrough)
    assert unit.decls[0].text.strip() == 'SCALE = 1000'


def test_comments_are_ignored():
    unit = parse_unit('''
        // free functions
        fn one() -> i32; /* trailing */
    ''')
    assert [f.name for f in unit.funcs()] == ['one']
    assert unit.funcs()[0].doc == ''


def test_prefix_after_items_is_rejected():
    with pytest.raises(DeclarationError, match="'prefix' must precede"):
        parse_unit('''
            fn one() -> i32;
            prefix: "late";
        ''')


def test_duplicate_prefix_is_rejected():
    with pytest.raises(DeclarationError, match="duplicate 'prefix'"):
        parse_unit('prefix: "a"; prefix: "b";')


def test_syntax_error_reports_position():
    with pytest.raises(DeclarationError) as excinfo:
        parse_unit('fn ok() -> i32;\nfn broken(a i32);\n')
    assert excinfo.value.line == 2


def test_unterminated_declaration():
    with pytest.raises(DeclarationError, match='end of declarations'):
        parse_unit('fn broken(a: i32)')


@pytest.mark.parametrize('text, expected', [
    ('i32', 'i32'),
    ('& mut Counter', '&mut Counter'),
    ("&'a str", "&'a str"),
    ('Vec< Vec<u8> >', 'Vec<Vec<u8>>'),
    ('std::string::String', 'std::string::String'),
    ('HashMap<String, i64>', 'HashMap<String, i64>'),
    ('[u8; 4]', '[u8; 4]'),
    ('[u8]', '[u8]'),
    ('(i32, f64)', '(i32, f64)'),
    ('()', '()'),
])
def test_parse_type_normalizes(text, expected):
    assert parse_type(text) == expected


def test_unparseable_type():
    with pytest.raises(DeclarationError, match='unparseable type'):
        parse_type('fn(i32) -> i32')


def test_json_ir():
    unit = BindingUnit.from_dict({
        'prefix': 'mylib',
        'native': 'mylib_native',
        'decls': [
            {'kind': 'func', 'name': 'add', 'return': 'i32',
             'params': [{'name': 'a', 'type': 'i32'}, {'name': 'b', 'type': 'i32'}]},
            {'kind': 'struct', 'name': 'Counter',
             'fields': [{'name': 'value', 'type': 'i64', 'pub': True}]},
            {'kind': 'impl', 'struct': 'Counter', 'methods': [
                {'name': 'bump', 'receiver': '&mut self', 'pub': True,
                 'params': [{'name': 'by', 'type': '& mut i32'}]},
            ]},
        ],
    })
    assert unit.prefix == 'mylib'
    assert unit.funcs()[0].return_type == 'i32'
    assert unit.structs()[0].fields[0].public
    method = unit.impls()[0].methods[0]
    assert method.receiver is Receiver.MUT_REF
    assert method.params[0].type == '&mut i32'


def test_json_unknown_kind():
    with pytest.raises(DeclarationError, match='unknown declaration kind'):
        BindingUnit.from_dict({'decls': [{'kind': 'enum', 'name': 'E'}]})


def test_load_text_file(tmp_path):
    path = tmp_path / 'shapes.ring.decl'
    path.write_text('native: "shapes_native";\nfn area(w: f64, h: f64) -> f64;\n')
    unit = BindingUnit.load(str(path))
    assert unit.name == 'shapes'
    assert unit.native == 'shapes_native'


def test_prefix_must_be_identifier():
    with pytest.raises(DeclarationError, match="prefix 'my-lib' is not a valid identifier \\(line 1"):
        parse_unit('prefix: "my-lib";\nfn add(a: i32, b: i32) -> i32;')


def test_native_must_be_module_name():
    with pytest.raises(DeclarationError, match="native module 'my lib' is not a valid module name"):
        parse_unit('native: "my lib";\nfn ping();')
    assert parse_unit('native: "pkg.impl";\nfn ping();').native == 'pkg.impl'


def test_json_missing_key():
    with pytest.raises(DeclarationError, match="decls\\[1\\]: missing key 'name'"):
        BindingUnit.from_dict({'decls': [
            {'kind': 'func', 'name': 'ok'},
            {'kind': 'func'},
        ]})


def test_json_missing_param_type():
    with pytest.raises(DeclarationError, match="decls\\[0\\]: missing key 'type'"):
        BindingUnit.from_dict({'decls': [
            {'kind': 'func', 'name': 'add', 'params': [{'name': 'a'}]},
        ]})


def test_json_unknown_receiver():
    with pytest.raises(DeclarationError, match='decls\\[0\\]: malformed declaration'):
        BindingUnit.from_dict({'decls': [
            {'kind': 'impl', 'struct': 'Counter', 'methods': [
                {'name': 'bump', 'receiver': 'self*'},
            ]},
        ]})


def test_json_wrong_shape():
    with pytest.raises(DeclarationError, match='decls\\[0\\]: malformed declaration'):
        BindingUnit.from_dict({'decls': ['func']})
    with pytest.raises(DeclarationError, match='JSON IR must be an object'):
        BindingUnit.from_dict(['func'])


def test_json_bad_prefix():
    with pytest.raises(DeclarationError, match="prefix 'my-lib' is not a valid identifier"):
        BindingUnit.from_dict({'prefix': 'my-lib', 'decls': []})


def test_load_invalid_json(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text('{"native": "x", "decls": [')
    with pytest.raises(DeclarationError, match='invalid JSON: Expecting value \\(line 1'):
        BindingUnit.load(str(path))
