"""
Numeric casts used by generated trampolines

The host passes every number as a double. These helpers narrow it to the
declared native type the way Rust's `as` does: truncate toward zero,
saturate at the type's bounds, NaN becomes 0.

Integers above 2**53 in magnitude do not survive the trip through a
double exactly; that is a property of the call protocol, not of these
helpers.
"""

import math
import struct


def int_bounds(width: int, signed: bool) -> tuple[int, int]:
    """Smallest and largest value of an integer type"""
    if signed:
        return -(1 << (width - 1)), (1 << (width - 1)) - 1
    return 0, (1 << width) - 1


def to_int(value: float, width: int, signed: bool) -> int:
    """Cast a double to a fixed-width integer"""
    if math.isnan(value):
        return 0
    lo, hi = int_bounds(width, signed)
    if value <= lo:
        return lo
    if value >= hi:
        return hi
    return math.trunc(value)


def to_float(value: float, width: int) -> float:
    """Cast a double to a float of the given width"""
    value = float(value)
    if width == 64:
        return value
    try:
        return struct.unpack('<f', struct.pack('<f', value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)
