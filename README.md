# nedfusion

Orientation estimation for 9-DOF inertial sensors in the aerospace NED
(north, east, down) frame. A 12-state Kalman filter fuses accelerometer,
magnetometer and gyroscope readings. It tracks orientation error, gyro
offset, linear acceleration and magnetic disturbance.

## Modules

- `nedfusion.sensors` holds the reading containers.
  - `AccelSensor` has the fields `gp` and `gp_fast`, in g.
  - `MagSensor` has the fields `bc` and `bc_fast`, in µT.
  - `GyroSensor` has the fields `yp` and `yp_fast`, in deg/s. `yp_fast`
    holds exactly `OVERSAMPLE_RATIO` (4) samples.
  - `MagCalibration` has the fields `v`, `inv_w`, `b`, `four_b_sq`,
    `fit_error`, `fit_error_age` and `valid_mag_cal`.

  The `from_counts` class methods scale raw counts as follows:
  - accelerometer counts by 1/8192 g;
  - magnetometer counts by 0.1 µT;
  - gyro counts by 1/16 deg/s. `GyroSensor.yp` is the mean of the four
    fast samples.

  `MagCalibration.set_field(b)` sets the field magnitude and `four_b_sq`.
  It rejects negative values with `ValueError`. A vector with the wrong
  number of components also raises `ValueError`.
- `nedfusion.angles` has fast approximations of inverse trigonometric
  functions, with results in degrees: `atan_15deg`, `atan_deg`,
  `atan2_deg`, `asin_deg` and `acos_deg`. The `asin_deg` and `acos_deg`
  functions clamp arguments outside -1..1.
- `nedfusion.quaternion` has the immutable `Quaternion` type (`q0` is the
  scalar part). It provides:
  - `identity()`;
  - multiplication with `*`;
  - `normalized()`, which returns a result with `q0` ≥ 0, or the identity
    when the norm is below 0.001;
  - `from_rotation_vector_deg(rvecdeg, scaling)` and
    `to_rotation_vector_deg()`;
  - `from_rotation_matrix(r)` and `to_rotation_matrix()`.
- `nedfusion.orientation` builds orientations from static readings.
  - `tilt_3dof_ned(gp)` gives a tilt matrix from the accelerometer only.
  - `magnetometer_matrix_ned(bc)` gives a flat compass matrix.
  - `ecompass_ned(bc, gp)` gives a 6-DOF eCompass matrix together with
    the inclination angle.
  - `ned_angles_deg(r)` returns `NedAngles`, which holds roll `phi`,
    pitch `theta`, yaw `psi`, compass `rho` and tilt `chi`.
  - `rotation_vector_deg_from_matrix(r)` gives a rotation vector in
    degrees.

  Degenerate inputs give the identity matrix.
- `nedfusion.kalman` has `KalmanFilter`, the gyro-buffered 9-DOF filter.
  It assumes a 100 Hz sensor rate and integrates four fast gyro samples
  per step.

## Usage

```python
from nedfusion.sensors import AccelSensor, MagSensor, GyroSensor, MagCalibration
from nedfusion.kalman import KalmanFilter

kf = KalmanFilter()
magcal = MagCalibration()
magcal.set_field(50.0)
magcal.valid_mag_cal = 1

accel = AccelSensor.from_counts((0, 0, 8192))
mag = MagSensor.from_counts((300, 0, 400))
gyro = GyroSensor.from_counts([(0, 0, 0)] * 4)

kf.update(accel, mag, gyro, magcal)
q = kf.orientation()
print(q.to_rotation_vector_deg())
print(kf.angles)
```

### Filter behaviour

- After the first update with a non-zero `valid_mag_cal`, the filter locks
  once to the eCompass orientation.
- Magnetometer corrections are applied only while `valid_mag_cal` is
  non-zero and the estimated disturbance power stays below `four_b_sq`.
- `request_reset()` makes the next `update` reinitialise the filter and
  return without processing the readings.
- `reset()` reinitialises the filter at once.

## What it does not do

This package has no command-line program. It does not read from serial
ports, solve for a magnetic calibration, or draw anything. You compute the
calibration values elsewhere and fill in `MagCalibration` yourself.

## Tests

The tests use pytest. You can install them with the `test` extra.