"""Escape-time evaluation of the quadratic map ``z -> z*z + c``."""

from __future__ import annotations

# |z|^2 beyond which the orbit is known to diverge (radius 2)
ESCAPE_NORM_SQR = 4.0


def escape_time(c: complex, limit: int) -> int | None:
    """Try to decide whether ``c`` belongs to the Mandelbrot set.

    Iterates at most ``limit`` times from ``z = 0``. If the orbit leaves the circle
    of radius two, return the index of the iteration on which that was noticed.
    Return ``None`` when ``limit`` iterations could not prove ``c`` is outside.
    """

    z = 0j
    for i in range(limit):
        z = z * z + c
        if z.real * z.real + z.imag * z.imag > ESCAPE_NORM_SQR:
            return i
    return None


def intensity(escape: int | None) -> int:
    """Map an escape result to an 8-bit gray level.

    Points that escape after ``k`` iterations get ``255 - k``; points that never
    escape are black. Counts above 255 wrap modulo 256.
    """

    if escape is None:
        return 0
    return (255 - escape) % 256
