import pytest

from nedfusion.sensors import (
    OVERSAMPLE_RATIO,
    AccelSensor,
    GyroSensor,
    MagCalibration,
    MagSensor,
)


def test_accel_from_counts_one_g():
    accel = AccelSensor.from_counts((8192, 0, -8192))
    assert accel.gp == pytest.approx((1.0, 0.0, -1.0))
    assert accel.gp_fast == accel.gp


def test_accel_from_counts_wrong_length():
    with pytest.raises(ValueError):
        AccelSensor.from_counts((1, 2))


def test_mag_from_counts_scaling():
    mag = MagSensor.from_counts((10, -20, 0))
    assert mag.bc == pytest.approx((1.0, -2.0, 0.0))
    assert mag.bc_fast == mag.bc


def test_mag_from_counts_wrong_length():
    with pytest.raises(ValueError):
        MagSensor.from_counts((1, 2, 3, 4))


def test_gyro_constant_samples_average_to_same():
    samples = [(16, -32, 48)] * OVERSAMPLE_RATIO
    gyro = GyroSensor.from_counts(samples)
    assert gyro.yp == pytest.approx((1.0, -2.0, 3.0))
    assert all(s == pytest.approx(gyro.yp) for s in gyro.yp_fast)
    assert len(gyro.yp_fast) == OVERSAMPLE_RATIO


def test_gyro_slow_reading_is_mean_of_fast():
    samples = [(16 * i, 0, -16 * i) for i in range(OVERSAMPLE_RATIO)]
    gyro = GyroSensor.from_counts(samples)
    for axis in range(3):
        mean = sum(s[axis] for s in gyro.yp_fast) / OVERSAMPLE_RATIO
        assert gyro.yp[axis] == pytest.approx(mean)


def test_gyro_wrong_sample_count():
    with pytest.raises(ValueError):
        GyroSensor.from_counts([(0, 0, 0)] * (OVERSAMPLE_RATIO + 1))


def test_gyro_default_has_zero_samples():
    gyro = GyroSensor()
    assert len(gyro.yp_fast) == OVERSAMPLE_RATIO
    assert all(s == (0.0, 0.0, 0.0) for s in gyro.yp_fast)


def test_magcal_set_field():
    cal = MagCalibration()
    cal.set_field(50.0)
    assert cal.b == 50.0
    assert cal.four_b_sq == pytest.approx(10000.0)


def test_magcal_negative_field_rejected():
    with pytest.raises(ValueError):
        MagCalibration().set_field(-1.0)


def test_magcal_defaults_identity_and_invalid():
    cal = MagCalibration()
    assert cal.inv_w[0][0] == 1.0 and cal.inv_w[0][1] == 0.0
    assert cal.valid_mag_cal == 0


def test_magcal_bad_vector_rejected():
    with pytest.raises(ValueError):
        MagCalibration(v=(1.0, 2.0))