"""NED orientation from accelerometer and magnetometer readings, and Euler angles."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from nedfusion.angles import acos_deg, asin_deg, atan2_deg
from nedfusion.quaternion import FRADTODEG

Vector3 = Tuple[float, float, float]
Matrix3 = Tuple[Vector3, Vector3, Vector3]

SMALLMODULUS = 0.01
"""Below this modulus the rotation vector is near 0 or 180 degrees."""

IDENTITY: Matrix3 = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


def _vector(values: Iterable[float], what: str) -> Vector3:
    items = tuple(float(v) for v in values)
    if len(items) != 3:
        raise ValueError(f"{what} needs 3 components, got {len(items)}")
    return items  # type: ignore[return-value]


def _matrix(rows: Sequence[Sequence[float]]) -> Matrix3:
    result = tuple(tuple(float(v) for v in row) for row in rows)
    if len(result) != 3 or any(len(row) != 3 for row in result):
        raise ValueError("rotation matrix must be 3x3")
    return result  # type: ignore[return-value]


def _from_columns(cx: Vector3, cy: Vector3, cz: Vector3) -> Matrix3:
    return tuple(zip(cx, cy, cz))  # type: ignore[return-value]


def _cross(a: Vector3, b: Vector3) -> Vector3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _norm(v: Vector3) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


@dataclass(frozen=True)
class NedAngles:
    """NED Euler angles in degrees.

    phi is roll, theta pitch, psi yaw, rho compass heading and chi the
    tilt from vertical.
    """

    phi: float
    theta: float
    psi: float
    rho: float
    chi: float


def tilt_3dof_ned(gp: Iterable[float]) -> Matrix3:
    """Return the NED rotation matrix from an accelerometer reading alone."""
    gx, gy, gz = _vector(gp, "gp")
    mod_gyz = gy * gy + gz * gz
    mod_gxyz = mod_gyz + gx * gx

    if mod_gxyz == 0.0:
        # Free fall: no solution is possible.
        return IDENTITY

    if mod_gyz == 0.0:
        # Vertical up or down gimbal lock.
        if gx >= 0.0:
            return ((0.0, 0.0, 1.0), (0.0, 1.0, 0.0), (-1.0, 0.0, 0.0))
        return ((0.0, 0.0, -1.0), (0.0, 1.0, 0.0), (1.0, 0.0, 0.0))

    mod_gyz = math.sqrt(mod_gyz)
    mod_gxyz = math.sqrt(mod_gxyz)
    recip = 1.0 / mod_gxyz
    ratio = mod_gxyz / mod_gyz

    rxz, ryz, rzz = gx * recip, gy * recip, gz * recip
    return (
        (mod_gyz * recip, 0.0, rxz),
        (-rxz * ryz * ratio, rzz * ratio, ryz),
        (-rxz * rzz * ratio, -ryz * ratio, rzz),
    )


def magnetometer_matrix_ned(bc: Iterable[float]) -> Matrix3:
    """Return the flat-eCompass NED rotation matrix from a magnetometer reading."""
    bx, by, _ = _vector(bc, "bc")
    mod_bxy = math.sqrt(bx * bx + by * by)
    if mod_bxy == 0.0:
        return IDENTITY
    c = bx / mod_bxy
    s = by / mod_bxy
    return ((c, -s, 0.0), (s, c, 0.0), (0.0, 0.0, 1.0))


def ecompass_ned(bc: Iterable[float], gp: Iterable[float]) -> Tuple[Matrix3, float]:
    """Return the 6DOF NED rotation matrix and the inclination angle in degrees.

    Degenerate inputs give the identity matrix and zero inclination.
    """
    b = _vector(bc, "bc")
    g = _vector(gp, "gp")

    col_y = _cross(g, b)
    col_x = _cross(col_y, g)
    columns = (col_x, col_y, g)
    moduli = tuple(_norm(c) for c in columns)

    if any(m == 0.0 for m in moduli):
        return IDENTITY, 0.0

    normed = tuple(
        tuple(v / m for v in col) for col, m in zip(columns, moduli)
    )
    r = _from_columns(*normed)  # type: ignore[arg-type]

    mod_b = _norm(b)
    delta = 0.0
    if mod_b != 0.0:
        g_dot_b = g[0] * b[0] + g[1] * b[1] + g[2] * b[2]
        delta = asin_deg(g_dot_b / (moduli[2] * mod_b))
    return r, delta


def ned_angles_deg(r: Sequence[Sequence[float]]) -> NedAngles:
    """Extract NED Euler angles in degrees from a rotation matrix."""
    m = _matrix(r)
    theta = asin_deg(-m[0][2])

    phi = atan2_deg(m[1][2], m[2][2])
    if phi == 180.0:
        phi = -180.0

    if theta == 90.0:
        psi = atan2_deg(m[2][1], m[1][1]) + phi
    elif theta == -90.0:
        psi = atan2_deg(-m[2][1], m[1][1]) - phi
    else:
        psi = atan2_deg(m[0][1], m[0][0])

    if psi < 0.0:
        psi += 360.0
    if psi >= 360.0:
        psi = 0.0

    chi = acos_deg(m[2][2])
    return NedAngles(phi=phi, theta=theta, psi=psi, rho=psi, chi=chi)


def rotation_vector_deg_from_matrix(r: Sequence[Sequence[float]]) -> Vector3:
    """Return the rotation vector in degrees of a rotation matrix."""
    m = _matrix(r)
    trace = m[0][0] + m[1][1] + m[2][2]
    if trace >= 3.0:
        etadeg = 0.0
    elif trace <= -1.0:
        etadeg = 180.0
    else:
        etadeg = math.acos(0.5 * (trace - 1.0)) * FRADTODEG

    x = m[1][2] - m[2][1]
    y = m[2][0] - m[0][2]
    z = m[0][1] - m[1][0]
    modulus = math.sqrt(x * x + y * y + z * z)

    if modulus > SMALLMODULUS:
        factor = etadeg / modulus
        return (x * factor, y * factor, z * factor)
    if trace >= 0.0:
        # Nearly the identity: differences are 2 * n * eta (rad).
        factor = 0.5 * FRADTODEG
        return (x * factor, y * factor, z * factor)

    # Near 180 degrees the matrix is almost symmetric.
    rx = 180.0 * math.sqrt(abs(0.5 * (m[0][0] + 1.0)))
    ry = 180.0 * math.sqrt(abs(0.5 * (m[1][1] + 1.0)))
    rz = 180.0 * math.sqrt(abs(0.5 * (m[2][2] + 1.0)))
    if x < 0.0:
        rx = -rx
    if y < 0.0:
        ry = -ry
    if z < 0.0:
        rz = -rz
    return (rx, ry, rz)