import importlib
import importlib.util
import itertools
import textwrap

import pytest

from ring_bindgen import Generator, parse_unit
from ring_bindgen.host import RingState

_module_ids = itertools.count()

COUNTER_DECLS = '''
prefix: "mylib";

/// Adds two numbers
fn add(a: i32, b: i32) -> i32;

fn greet(name: &str) -> String;

#[derive(Default)]
pub struct Counter {
    pub value: i64,
    pub name: String,
    secret: u8,
}

impl Counter {
    pub fn increment(&mut self);
    pub fn add(&mut self, amount: i32);
    pub fn is_zero(&self) -> bool;
    pub fn label(&self) -> String;
    pub fn clone_counter(&self) -> Self;
    pub fn describe(&self, other: &Counter) -> String;
    pub fn reset_all();
    fn helper(&self);
}

pub struct Timer {
    pub ticks: u32,
}
'''

COUNTER_NATIVE = '''
calls = []


def add(a, b):
    calls.append(('add', a, b))
    return a + b


def greet(name):
    return 'Hello, ' + name + '!'


class Counter:
    def __init__(self, value=0, name=''):
        self.value = value
        self.name = name
        self.secret = 0

    @staticmethod
    def new(name, initial):
        calls.append(('new', name, initial))
        return Counter(initial, name)

    def increment(self):
        calls.append(('increment',))
        self.value += 1

    def add(self, amount):
        calls.append(('counter.add', amount))
        self.value += amount

    def is_zero(self):
        return self.value == 0

    def label(self):
        return f'{self.name}={self.value}'

    def clone_counter(self):
        return Counter(self.value, self.name)

    def describe(self, other):
        return f'{self.label()} vs {other.label()}'

    def get_value(self):
        return self.value


class Timer:
    def __init__(self):
        self.ticks = 0
'''


@pytest.fixture
def counter_unit():
    return parse_unit(COUNTER_DECLS)


@pytest.fixture
def build(tmp_path, monkeypatch):
    """Generate, import and load a binding module into a fresh RingState"""
    monkeypatch.syspath_prepend(str(tmp_path))

    def _build(decls: str, native_src: str, **gen_kwargs):
        module_id = next(_module_ids)
        native_name = f'native_impl_{module_id}'
        (tmp_path / f'{native_name}.py').write_text(textwrap.dedent(native_src))
        importlib.invalidate_caches()

        unit = parse_unit(textwrap.dedent(decls))
        unit.name = f'unit_{module_id}'
        module = Generator(native=native_name, **gen_kwargs).generate_unit(unit)

        path = tmp_path / f'ring_{module.name}.py'
        path.write_text(module.source)
        spec = importlib.util.spec_from_file_location(f'ring_{module.name}', path)
        generated = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(generated)

        state = RingState().load(generated)
        state.native = importlib.import_module(native_name)
        return state

    return _build


@pytest.fixture
def counter_state(build):
    return build(COUNTER_DECLS, COUNTER_NATIVE)
