"""
Reference host runtime

Implements the call protocol generated trampolines expect: arguments in
1-based stack slots tagged as number, string or C pointer, one return
slot, and an error-report call. RingState loads a generated module
through its ring_libinit table and dispatches calls by name.

C pointers are handles into a HandleTable. A handle carries its slot
index, the slot's generation and the type tag it was boxed with;
releasing a slot bumps its generation, so a stale or foreign handle is
rejected instead of dereferenced.

Nothing here is thread-safe. Calling trampolines concurrently, in
particular on the same handle, is a data race the caller must prevent.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol

BAD_PARACOUNT = 'Bad parameters count!'
BAD_PARATYPE = 'Bad parameter type!'


class RingError(Exception):
    """A trampoline reported an error through the call context"""


class CallContext(Protocol):
    """Primitives a trampoline may call on its context"""

    def paracount(self) -> int: ...
    def is_number(self, idx: int) -> bool: ...
    def is_string(self, idx: int) -> bool: ...
    def is_pointer(self, idx: int) -> bool: ...
    def is_null(self, idx: int) -> bool: ...
    def check_pointer(self, idx: int, tag: str) -> bool: ...
    def get_number(self, idx: int) -> float: ...
    def get_string(self, idx: int) -> str: ...
    def get_pointer(self, idx: int, tag: str) -> Any: ...
    def free_pointer(self, idx: int, tag: str) -> None: ...
    def ret_number(self, value: float) -> None: ...
    def ret_string(self, value: str) -> None: ...
    def ret_pointer(self, obj: Any, tag: str) -> None: ...
    def error(self, message: str) -> None: ...


@dataclass(frozen=True)
class Handle:
    """Opaque reference to a boxed native object"""
    index: int
    generation: int
    tag: str


class _Slot:
    __slots__ = ('generation', 'tag', 'obj', 'live')

    def __init__(self):
        self.generation = 0
        self.tag = ''
        self.obj = None
        self.live = False


class HandleTable:
    """Arena of boxed objects addressed by generation-stamped handles"""

    def __init__(self):
        self._slots: list[_Slot] = []
        self._free: list[int] = []

    def box(self, obj: Any, tag: str) -> Handle:
        """Store obj and return a new handle to it"""
        if self._free:
            index = self._free.pop()
            slot = self._slots[index]
        else:
            index = len(self._slots)
            slot = _Slot()
            self._slots.append(slot)
        slot.tag = tag
        slot.obj = obj
        slot.live = True
        return Handle(index, slot.generation, tag)

    def _slot(self, handle: Optional[Handle], tag: str) -> Optional[_Slot]:
        if handle is None or handle.tag != tag:
            return None
        if not 0 <= handle.index < len(self._slots):
            return None
        slot = self._slots[handle.index]
        if not slot.live or slot.generation != handle.generation or slot.tag != tag:
            return None
        return slot

    def lookup(self, handle: Optional[Handle], tag: str) -> Optional[Any]:
        """Object behind handle, or None if it is null, stale or of another tag"""
        slot = self._slot(handle, tag)
        return slot.obj if slot else None

    def valid(self, handle: Optional[Handle], tag: str) -> bool:
        return self._slot(handle, tag) is not None

    def release(self, handle: Optional[Handle], tag: str) -> bool:
        """Invalidate handle; returns False if it was not live"""
        slot = self._slot(handle, tag)
        if slot is None:
            return False
        slot.obj = None
        slot.live = False
        slot.generation += 1
        self._free.append(handle.index)
        return True

    def __len__(self) -> int:
        return sum(1 for slot in self._slots if slot.live)


class Kind(Enum):
    NUMBER = 'number'
    STRING = 'string'
    POINTER = 'cpointer'


@dataclass(frozen=True)
class Value:
    """One tagged stack slot"""
    kind: Kind
    payload: Any


def to_value(obj: Any) -> Value:
    """Wrap a Python value as a stack slot

    bool, int and float become numbers (doubles); str becomes a string;
    a Handle or None becomes a C pointer (None is the null pointer).
    """
    if isinstance(obj, bool):
        return Value(Kind.NUMBER, 1.0 if obj else 0.0)
    if isinstance(obj, (int, float)):
        return Value(Kind.NUMBER, float(obj))
    if isinstance(obj, str):
        return Value(Kind.STRING, obj)
    if obj is None or isinstance(obj, Handle):
        return Value(Kind.POINTER, obj)
    raise TypeError(f'cannot pass {type(obj).__name__} to Ring')


class RingCall:
    """Call context handed to a trampoline"""

    def __init__(self, state: 'RingState', args: list[Value]):
        self._state = state
        self._args = args
        self.result: Any = None
        self.error_message: Optional[str] = None

    def _arg(self, idx: int) -> Value:
        if not 1 <= idx <= len(self._args):
            raise IndexError(f'no argument at stack index {idx}')
        return self._args[idx - 1]

    def paracount(self) -> int:
        return len(self._args)

    def is_number(self, idx: int) -> bool:
        return self._arg(idx).kind is Kind.NUMBER

    def is_string(self, idx: int) -> bool:
        return self._arg(idx).kind is Kind.STRING

    def is_pointer(self, idx: int) -> bool:
        return self._arg(idx).kind is Kind.POINTER

    def is_null(self, idx: int) -> bool:
        return self.is_pointer(idx) and self._arg(idx).payload is None

    def check_pointer(self, idx: int, tag: str) -> bool:
        return self.is_pointer(idx) and self._state.handles.valid(self._arg(idx).payload, tag)

    def get_number(self, idx: int) -> float:
        return self._arg(idx).payload

    def get_string(self, idx: int) -> str:
        return self._arg(idx).payload

    def get_pointer(self, idx: int, tag: str) -> Any:
        return self._state.handles.lookup(self._arg(idx).payload, tag)

    def free_pointer(self, idx: int, tag: str):
        self._state.handles.release(self._arg(idx).payload, tag)

    def ret_number(self, value: float):
        self.result = float(value)

    def ret_string(self, value: str):
        self.result = str(value)

    def ret_pointer(self, obj: Any, tag: str):
        self.result = self._state.handles.box(obj, tag)

    def error(self, message: str):
        if self.error_message is None:
            self.error_message = message


class RingState:
    """Host runtime holding the function table and the handle table"""

    def __init__(self):
        self._funcs: dict[str, Callable[[CallContext], None]] = {}
        self.handles = HandleTable()

    def register(self, name: bytes, func: Callable[[CallContext], None]):
        """Add one registration table entry (NUL-terminated name)"""
        self._funcs[name.rstrip(b'\0').decode('utf-8')] = func

    def load(self, module) -> 'RingState':
        """Register everything a generated module exports"""
        module.ring_libinit(self)
        return self

    def functions(self) -> list[str]:
        return list(self._funcs)

    def call(self, name: str, *args: Any) -> Any:
        """Call a registered function; raises RingError if it reports one"""
        func = self._funcs.get(name)
        if func is None:
            raise RingError(f'Calling function without definition: {name}')
        ctx = RingCall(self, [to_value(arg) for arg in args])
        func(ctx)
        if ctx.error_message is not None:
            raise RingError(ctx.error_message)
        return ctx.result
