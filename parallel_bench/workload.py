import math

from numba import njit

# Per-element cost knob: number of sin+cos rounds
ITERATIONS = 500


@njit(nogil=True)
def _compute(x, iterations):
    val = x
    for _ in range(iterations):
        val = math.sin(val) + math.cos(val)
    return val


@njit(nogil=True)
def apply_block(data, out, start, stop, iterations):
    # writes out[start:stop] only
    for i in range(start, stop):
        out[i] = _compute(data[i], iterations)


def compute(x, iterations=ITERATIONS):
    """Apply ``sin(x) + cos(x)`` to x repeatedly and return the final value."""
    return _compute(float(x), iterations)
