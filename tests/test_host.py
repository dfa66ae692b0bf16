import math

import pytest

from ring_bindgen.convert import int_bounds, to_float, to_int
from ring_bindgen.host import Handle, HandleTable, Kind, RingCall, RingError, RingState, to_value


def test_handle_table_box_and_lookup():
    table = HandleTable()
    obj = object()
    handle = table.box(obj, 'mylib.Counter')
    assert table.lookup(handle, 'mylib.Counter') is obj
    assert table.valid(handle, 'mylib.Counter')
    assert not table.valid(handle, 'mylib.Timer')
    assert table.lookup(handle, 'mylib.Timer') is None
    assert len(table) == 1


def test_handle_table_release():
    table = HandleTable()
    handle = table.box('payload', 'T')
    assert table.release(handle, 'T')
    assert not table.release(handle, 'T')
    assert table.lookup(handle, 'T') is None
    assert len(table) == 0

    reused = table.box('other', 'T')
    assert reused.index == handle.index
    assert reused.generation == handle.generation + 1


def test_handle_table_rejects_forged_handles():
    table = HandleTable()
    table.box('payload', 'T')
    assert not table.valid(Handle(5, 0, 'T'), 'T')
    assert not table.valid(Handle(0, 3, 'T'), 'T')
    assert not table.valid(None, 'T')


@pytest.mark.parametrize('obj, kind, payload', [
    (3, Kind.NUMBER, 3.0),
    (2.5, Kind.NUMBER, 2.5),
    (True, Kind.NUMBER, 1.0),
    ('text', Kind.STRING, 'text'),
    (None, Kind.POINTER, None),
])
def test_to_value(obj, kind, payload):
    value = to_value(obj)
    assert value.kind is kind
    assert value.payload == payload


def test_to_value_rejects_other_types():
    with pytest.raises(TypeError, match='cannot pass list to Ring'):
        to_value([1, 2])


def test_call_context_first_error_wins():
    ctx = RingCall(RingState(), [to_value(1)])
    ctx.error('first')
    ctx.error('second')
    assert ctx.error_message == 'first'
    with pytest.raises(IndexError):
        ctx.get_number(2)


def test_register_strips_nul():
    state = RingState()
    state.register(b'mylib_ping\0', lambda p: p.ret_string('pong'))
    assert state.functions() == ['mylib_ping']
    assert state.call('mylib_ping') == 'pong'


def test_unknown_function():
    with pytest.raises(RingError, match='Calling function without definition: nope'):
        RingState().call('nope')


@pytest.mark.parametrize('width, signed, bounds', [
    (8, True, (-128, 127)),
    (8, False, (0, 255)),
    (32, True, (-2**31, 2**31 - 1)),
    (64, False, (0, 2**64 - 1)),
])
def test_int_bounds(width, signed, bounds):
    assert int_bounds(width, signed) == bounds


def test_to_int():
    assert to_int(1e20, 64, True) == 2**63 - 1
    assert to_int(-1e20, 64, True) == -2**63
    assert to_int(-0.9, 32, False) == 0
    assert to_int(41.99, 16, False) == 41
    assert to_int(float('-inf'), 8, True) == -128
    assert to_int(float('nan'), 8, False) == 0


def test_to_float():
    assert to_float(0.1, 64) == 0.1
    assert to_float(0.5, 32) == 0.5
    assert to_float(-1e39, 32) == -math.inf
    assert math.isnan(to_float(float('nan'), 32))
