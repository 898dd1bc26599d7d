"""Rotation quaternions with the scalar component first."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

Vector3 = Tuple[float, float, float]
Matrix3 = Tuple[Vector3, Vector3, Vector3]

FDEGTORAD = 0.01745329251994  # pi / 180
FRADTODEG = 57.2957795130823  # 180 / pi
ONEOVER48 = 1.0 / 48.0
ONEOVER3840 = 1.0 / 3840.0

SMALLQ0 = 0.01
"""Below this scalar component the matrix conversion uses the diagonal."""

CORRUPTQUAT = 0.001
"""Quaternions with a smaller norm are treated as corrupt."""


def _vector(values: Iterable[float]) -> Vector3:
    items = tuple(float(v) for v in values)
    if len(items) != 3:
        raise ValueError(f"rotation vector needs 3 components, got {len(items)}")
    return items  # type: ignore[return-value]


def _matrix(rows: Sequence[Sequence[float]]) -> Matrix3:
    result = tuple(tuple(float(v) for v in row) for row in rows)
    if len(result) != 3 or any(len(row) != 3 for row in result):
        raise ValueError("rotation matrix must be 3x3")
    return result  # type: ignore[return-value]


@dataclass(frozen=True)
class Quaternion:
    """A quaternion q0 + q1 i + q2 j + q3 k."""

    q0: float = 1.0
    q1: float = 0.0
    q2: float = 0.0
    q3: float = 0.0

    @classmethod
    def identity(cls) -> "Quaternion":
        """Return the unit quaternion representing no rotation."""
        return cls(1.0, 0.0, 0.0, 0.0)

    def __iter__(self):
        return iter((self.q0, self.q1, self.q2, self.q3))

    def __mul__(self, other: object) -> "Quaternion":
        if not isinstance(other, Quaternion):
            return NotImplemented
        a0, a1, a2, a3 = self
        b0, b1, b2, b3 = other
        return Quaternion(
            a0 * b0 - a1 * b1 - a2 * b2 - a3 * b3,
            a0 * b1 + a1 * b0 + a2 * b3 - a3 * b2,
            a0 * b2 - a1 * b3 + a2 * b0 + a3 * b1,
            a0 * b3 + a1 * b2 - a2 * b1 + a3 * b0,
        )

    def normalized(self) -> "Quaternion":
        """Return the unit quaternion with a non-negative scalar component.

        A quaternion whose norm is too small to trust becomes the identity.
        """
        norm = math.sqrt(sum(c * c for c in self))
        if norm > CORRUPTQUAT:
            scale = 1.0 / norm
            q = Quaternion(*(c * scale for c in self))
        else:
            q = Quaternion.identity()
        if q.q0 < 0.0:
            q = Quaternion(-q.q0, -q.q1, -q.q2, -q.q3)
        return q

    @classmethod
    def from_rotation_vector_deg(
        cls, rvecdeg: Iterable[float], scaling: float = 1.0
    ) -> "Quaternion":
        """Build a unit rotation quaternion from a rotation vector in degrees.

        The rotation angle is multiplied by *scaling*; -1 gives the inverse.
        """
        x, y, z = _vector(rvecdeg)
        etadeg = scaling * math.sqrt(x * x + y * y + z * z)
        etarad = etadeg * FDEGTORAD
        etarad2 = etarad * etarad

        if etarad2 <= 0.02:
            sinhalfeta = etarad * (0.5 - ONEOVER48 * etarad2)
        elif etarad2 <= 0.06:
            etarad4 = etarad2 * etarad2
            sinhalfeta = etarad * (
                0.5 - ONEOVER48 * etarad2 + ONEOVER3840 * etarad4
            )
        else:
            sinhalfeta = math.sin(0.5 * etarad)

        if etadeg != 0.0:
            factor = scaling * sinhalfeta / etadeg
            q1, q2, q3 = x * factor, y * factor, z * factor
        else:
            q1 = q2 = q3 = 0.0

        vecsq = q1 * q1 + q2 * q2 + q3 * q3
        q0 = math.sqrt(1.0 - vecsq) if vecsq <= 1.0 else 0.0
        return cls(q0, q1, q2, q3)

    @classmethod
    def from_rotation_matrix(cls, r: Sequence[Sequence[float]]) -> "Quaternion":
        """Build the orientation quaternion of a normalized rotation matrix."""
        m = _matrix(r)
        q0sq = 0.25 * (1.0 + m[0][0] + m[1][1] + m[2][2])
        q0 = math.sqrt(abs(q0sq))

        if q0 > SMALLQ0:
            recip4q0 = 0.25 / q0
            return cls(
                q0,
                recip4q0 * (m[1][2] - m[2][1]),
                recip4q0 * (m[2][0] - m[0][2]),
                recip4q0 * (m[0][1] - m[1][0]),
            )

        # Near 180 degrees the matrix is almost symmetric: take magnitudes
        # from the diagonal and signs from the off-diagonal differences.
        q1 = math.sqrt(abs(0.5 * (1.0 + m[0][0]) - q0sq))
        q2 = math.sqrt(abs(0.5 * (1.0 + m[1][1]) - q0sq))
        q3 = math.sqrt(abs(0.5 * (1.0 + m[2][2]) - q0sq))
        if m[1][2] - m[2][1] < 0.0:
            q1 = -q1
        if m[2][0] - m[0][2] < 0.0:
            q2 = -q2
        if m[0][1] - m[1][0] < 0.0:
            q3 = -q3
        return cls(q0, q1, q2, q3)

    def to_rotation_matrix(self) -> Matrix3:
        """Return the rotation matrix, assuming the quaternion is normalized."""
        q0, q1, q2, q3 = self
        t = 2.0 * q0
        q0q0, q0q1, q0q2, q0q3 = t * q0, t * q1, t * q2, t * q3
        t = 2.0 * q1
        q1q1, q1q2, q1q3 = t * q1, t * q2, t * q3
        t = 2.0 * q2
        q2q2, q2q3 = t * q2, t * q3
        q3q3 = 2.0 * q3 * q3
        return (
            (q0q0 + q1q1 - 1.0, q1q2 + q0q3, q1q3 - q0q2),
            (q1q2 - q0q3, q0q0 + q2q2 - 1.0, q2q3 + q0q1),
            (q1q3 + q0q2, q2q3 - q0q1, q0q0 + q3q3 - 1.0),
        )

    def to_rotation_vector_deg(self) -> Vector3:
        """Return the rotation vector in degrees, angle in -180..180."""
        if self.q0 >= 1.0 or self.q0 <= -1.0:
            etarad = 0.0
            etadeg = 0.0
        else:
            etarad = 2.0 * math.acos(self.q0)
            etadeg = etarad * FRADTODEG

        if etadeg >= 180.0:
            etadeg -= 360.0
            etarad = etadeg * FDEGTORAD

        sinhalfeta = math.sin(0.5 * etarad)
        if sinhalfeta == 0.0:
            return (0.0, 0.0, 0.0)
        factor = etadeg / sinhalfeta
        return (self.q1 * factor, self.q2 * factor, self.q3 * factor)