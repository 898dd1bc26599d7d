"""Sensor reading containers and magnetic calibration state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Tuple

Vector3 = Tuple[float, float, float]
Matrix3 = Tuple[Vector3, Vector3, Vector3]

SENSORFS = 100
"""Sensor sampling rate (Hz)."""

OVERSAMPLE_RATIO = 4
"""Number of fast gyro samples integrated per filter step."""

MAGBUFFSIZE = 650
"""Capacity of the magnetometer reading buffer."""

G_PER_COUNT = 0.0001220703125  # 1/8192
UT_PER_COUNT = 0.1
DEG_PER_SEC_PER_COUNT = 0.0625  # 1/16

ZERO_VECTOR: Vector3 = (0.0, 0.0, 0.0)
IDENTITY_MATRIX: Matrix3 = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


def _vector(values: Iterable[float], what: str = "vector") -> Vector3:
    """Return *values* as a tuple of exactly three floats."""
    items = tuple(float(v) for v in values)
    if len(items) != 3:
        raise ValueError(f"{what} needs 3 components, got {len(items)}")
    return items  # type: ignore[return-value]


def _scaled(values: Iterable[float], scale: float, what: str) -> Vector3:
    x, y, z = _vector(values, what)
    return (x * scale, y * scale, z * scale)


@dataclass
class AccelSensor:
    """Accelerometer readings in g."""

    gp: Vector3 = ZERO_VECTOR
    gp_fast: Vector3 = ZERO_VECTOR

    def __post_init__(self) -> None:
        self.gp = _vector(self.gp, "gp")
        self.gp_fast = _vector(self.gp_fast, "gp_fast")

    @classmethod
    def from_counts(cls, counts: Iterable[float]) -> "AccelSensor":
        """Build readings from raw accelerometer counts."""
        g = _scaled(counts, G_PER_COUNT, "accelerometer counts")
        return cls(gp=g, gp_fast=g)


@dataclass
class MagSensor:
    """Calibrated magnetometer readings in microtesla."""

    bc: Vector3 = ZERO_VECTOR
    bc_fast: Vector3 = ZERO_VECTOR

    def __post_init__(self) -> None:
        self.bc = _vector(self.bc, "bc")
        self.bc_fast = _vector(self.bc_fast, "bc_fast")

    @classmethod
    def from_counts(cls, counts: Iterable[float]) -> "MagSensor":
        """Build readings from magnetometer counts."""
        b = _scaled(counts, UT_PER_COUNT, "magnetometer counts")
        return cls(bc=b, bc_fast=b)


def _zero_fast_samples() -> Tuple[Vector3, ...]:
    return tuple(ZERO_VECTOR for _ in range(OVERSAMPLE_RATIO))


@dataclass
class GyroSensor:
    """Gyroscope readings in degrees per second."""

    yp: Vector3 = ZERO_VECTOR
    yp_fast: Tuple[Vector3, ...] = field(default_factory=_zero_fast_samples)

    def __post_init__(self) -> None:
        self.yp = _vector(self.yp, "yp")
        fast = tuple(_vector(s, "yp_fast sample") for s in self.yp_fast)
        if len(fast) != OVERSAMPLE_RATIO:
            raise ValueError(
                f"yp_fast needs {OVERSAMPLE_RATIO} samples, got {len(fast)}"
            )
        self.yp_fast = fast

    @classmethod
    def from_counts(cls, samples: Iterable[Iterable[float]]) -> "GyroSensor":
        """Build readings from OVERSAMPLE_RATIO raw gyro count triples.

        The slow reading is the average of the fast samples.
        """
        fast = tuple(
            _scaled(s, DEG_PER_SEC_PER_COUNT, "gyro counts") for s in samples
        )
        if len(fast) != OVERSAMPLE_RATIO:
            raise ValueError(
                f"gyro needs {OVERSAMPLE_RATIO} samples, got {len(fast)}"
            )
        mean = tuple(sum(axis) / OVERSAMPLE_RATIO for axis in zip(*fast))
        return cls(yp=mean, yp_fast=fast)  # type: ignore[arg-type]


@dataclass
class MagCalibration:
    """Current magnetic calibration: hard and soft iron terms and field strength."""

    v: Vector3 = ZERO_VECTOR
    inv_w: Matrix3 = IDENTITY_MATRIX
    b: float = 0.0
    four_b_sq: float = 0.0
    fit_error: float = 0.0
    fit_error_age: float = 0.0
    valid_mag_cal: int = 0

    def __post_init__(self) -> None:
        self.v = _vector(self.v, "v")
        rows = tuple(_vector(r, "inv_w row") for r in self.inv_w)
        if len(rows) != 3:
            raise ValueError(f"inv_w needs 3 rows, got {len(rows)}")
        self.inv_w = rows  # type: ignore[assignment]

    def set_field(self, b: float) -> None:
        """Set the geomagnetic field magnitude and the derived 4*B*B term."""
        b = float(b)
        if b < 0.0:
            raise ValueError("field magnitude cannot be negative")
        self.b = b
        self.four_b_sq = 4.0 * b * b