"""Column-major 4x4 matrix helpers, stored as flat lists of 16 floats (glTF layout)."""

from __future__ import annotations

import math
from typing import Iterable, Sequence


IDENTITY: tuple[float, ...] = (1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0)


def mat4_identity() -> list[float]:
    return list(IDENTITY)


def mat4_is_identity(m: Sequence[float]) -> bool:
    return len(m) == 16 and all(m[i] == IDENTITY[i] for i in range(16))


def mat4_multiply(a: Sequence[float], b: Sequence[float]) -> list[float]:
    out = [0.0] * 16
    for col in range(4):
        for row in range(4):
            out[col * 4 + row] = (
                a[0 * 4 + row] * b[col * 4 + 0]
                + a[1 * 4 + row] * b[col * 4 + 1]
                + a[2 * 4 + row] * b[col * 4 + 2]
                + a[3 * 4 + row] * b[col * 4 + 3]
            )
    return out


def mat4_translation(t: Iterable[float]) -> list[float]:
    tx, ty, tz = t
    return [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, tx, ty, tz, 1]


def mat4_scale(s: Iterable[float]) -> list[float]:
    sx, sy, sz = s
    return [sx, 0, 0, 0, 0, sy, 0, 0, 0, 0, sz, 0, 0, 0, 0, 1]


def mat4_rot_x(rad: float) -> list[float]:
    c = math.cos(rad)
    s = math.sin(rad)
    return [1.0, 0.0, 0.0, 0.0, 0.0, c, s, 0.0, 0.0, -s, c, 0.0, 0.0, 0.0, 0.0, 1.0]


def mat4_rot_y(rad: float) -> list[float]:
    c = math.cos(rad)
    s = math.sin(rad)
    return [c, 0.0, -s, 0.0, 0.0, 1.0, 0.0, 0.0, s, 0.0, c, 0.0, 0.0, 0.0, 0.0, 1.0]


def mat4_rot_z(rad: float) -> list[float]:
    c = math.cos(rad)
    s = math.sin(rad)
    return [c, s, 0.0, 0.0, -s, c, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0]


def mat4_transpose(m: Sequence[float]) -> list[float]:
    return [m[row * 4 + col] for col in range(4) for row in range(4)]


def mat4_inverse(m: Sequence[float]) -> list[float] | None:
    """Gauss-Jordan inverse; None when the matrix is singular."""
    a = [list(m[i * 4 : i * 4 + 4]) + [1.0 if j == i else 0.0 for j in range(4)] for i in range(4)]
    for col in range(4):
        pivot = col
        if abs(a[col][col]) < 1e-12:
            pivot = max(range(col, 4), key=lambda r: abs(a[r][col]))
        if abs(a[pivot][col]) < 1e-12:
            return None
        a[col], a[pivot] = a[pivot], a[col]
        p = a[col][col]
        a[col] = [v / p for v in a[col]]
        for r in range(4):
            if r != col and a[r][col] != 0.0:
                f = a[r][col]
                a[r] = [rv - f * cv for rv, cv in zip(a[r], a[col])]
    return [a[i][4 + j] for i in range(4) for j in range(4)]


def mat4_multiply_by_point(m: Sequence[float], p: Sequence[float]) -> tuple[float, float, float]:
    x, y, z = p
    tx = m[0] * x + m[4] * y + m[8] * z + m[12]
    ty = m[1] * x + m[5] * y + m[9] * z + m[13]
    tz = m[2] * x + m[6] * y + m[10] * z + m[14]
    return (tx, ty, tz)


def mat4_multiply_by_vector(m: Sequence[float], v: Sequence[float]) -> tuple[float, float, float]:
    x, y, z = v
    return (
        m[0] * x + m[4] * y + m[8] * z,
        m[1] * x + m[5] * y + m[9] * z,
        m[2] * x + m[6] * y + m[10] * z,
    )


def normalize(v: Sequence[float]) -> tuple[float, float, float]:
    x, y, z = v
    length = math.sqrt(x * x + y * y + z * z)
    if length == 0.0:
        return (x, y, z)
    return (x / length, y / length, z / length)
