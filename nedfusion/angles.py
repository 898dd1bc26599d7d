"""Fast approximate inverse trigonometric functions returning degrees."""

from __future__ import annotations

import math

TAN15DEG = 0.26794919243  # 2 - sqrt(3)
TAN30DEG = 0.57735026919  # 1 / sqrt(3)

# Modified Pade[3/2] coefficients.
PADE_A = 96.644395816
PADE_B = 25.086941612
PADE_C = 1.6867633134


def atan_15deg(x: float) -> float:
    """Approximate atan(x) in degrees for |x| <= tan(15 deg)."""
    x2 = x * x
    return x * (PADE_A + x2 * PADE_B) / (PADE_C + x2)


def atan_deg(x: float) -> float:
    """Approximate atan(x) in degrees, in the range -90 to 90."""
    negative = x < 0.0
    if negative:
        x = -x
    exceeds_one = x > 1.0
    if exceeds_one:
        x = 1.0 / x
    mapped = x > TAN15DEG
    if mapped:
        x = (x - TAN30DEG) / (1.0 + TAN30DEG * x)

    angle = atan_15deg(x)
    if mapped:
        angle += 30.0
    if exceeds_one:
        angle = 90.0 - angle
    if negative:
        angle = -angle
    return angle


def atan2_deg(y: float, x: float) -> float:
    """Approximate atan2(y, x) in degrees, in the range -180 to 180."""
    if x == 0.0:
        if y > 0.0:
            return 90.0
        if y < 0.0:
            return -90.0
        return 0.0
    if x > 0.0:
        return atan_deg(y / x)
    if y > 0.0:
        return 180.0 + atan_deg(y / x)
    return -180.0 + atan_deg(y / x)


def asin_deg(x: float) -> float:
    """Approximate asin(x) in degrees, clamped to -90..90."""
    if x >= 1.0:
        return 90.0
    if x <= -1.0:
        return -90.0
    return atan_deg(x / math.sqrt(1.0 - x * x))


def acos_deg(x: float) -> float:
    """Approximate acos(x) in degrees, clamped to 0..180."""
    if x >= 1.0:
        return 0.0
    if x <= -1.0:
        return 180.0
    if x == 0.0:
        return 90.0
    ratio = math.sqrt(1.0 - x * x) / x
    if x > 0.0:
        return atan_deg(ratio)
    return 180.0 + atan_deg(ratio)