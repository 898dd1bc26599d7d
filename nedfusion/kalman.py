"""Twelve-state Kalman filter fusing accelerometer, magnetometer and gyroscope."""

from __future__ import annotations

import math

import numpy as np

from nedfusion.angles import asin_deg
from nedfusion.orientation import NedAngles, ecompass_ned, ned_angles_deg
from nedfusion.quaternion import FDEGTORAD, Quaternion
from nedfusion.sensors import (
    OVERSAMPLE_RATIO,
    SENSORFS,
    AccelSensor,
    GyroSensor,
    MagCalibration,
    MagSensor,
)

# Noise variances.
FQVA = 2e-6  # accelerometer noise g^2
FQVM = 0.1  # magnetometer noise uT^2
FQVG = 0.3  # gyro noise (deg/s)^2
FQWB = 1e-9  # gyro offset drift (deg/s)^2
FQWA = 1e-4  # linear acceleration drift g^2
FQWD = 0.5  # magnetic disturbance drift uT^2

# Initial values of the Qw covariance matrix.
FQWINITTHTH = 2000e-5
FQWINITBB = 250e-3
FQWINITTHB = 0.0
FQWINITAA = 10e-5
FQWINITDD = 600e-3

# Decay factors of linear acceleration and magnetic disturbance.
FCA = 0.5
FCD = 0.5

# Limits of the geomagnetic inclination angle (65 degrees).
SINDELTAMAX = 0.9063078
COSDELTAMAX = 0.4226183

DEFAULTB = 50.0
"""Default geomagnetic field strength (uT)."""

_AXES = np.arange(3)


def _skew(v: np.ndarray) -> np.ndarray:
    """Return the measurement block -alpha(v)x scaled to radians."""
    return FDEGTORAD * np.array(
        [
            [0.0, v[2], -v[1]],
            [-v[2], 0.0, v[0]],
            [v[1], -v[0], 0.0],
        ]
    )


def _mirror_upper(a: np.ndarray) -> np.ndarray:
    """Return the symmetric matrix built from the on and above diagonal part of *a*."""
    upper = np.triu(a)
    return upper + np.triu(upper, 1).T


class KalmanFilter:
    """9DOF orientation filter tracking gyro offset, linear acceleration and
    magnetic disturbance errors in the NED frame."""

    def __init__(self) -> None:
        self.a_se_pl = np.zeros(3)
        self.a_se_mi = np.zeros(3)
        self.a_gl_pl = np.zeros(3)
        self.d_err_gl_pl = np.zeros(3)
        self.omega = np.zeros(3)
        self.r_vec_pl = np.zeros(3)
        self.g_se_gy_mi = np.zeros(3)
        self.m_se_gy_mi = np.zeros(3)
        self.g_err_se_mi = np.zeros(3)
        self.m_err_se_mi = np.zeros(3)
        self.k = np.zeros((12, 6))
        self.p_plus = np.zeros((12, 12))
        self.r_mi = np.eye(3)
        self.q_mi = Quaternion.identity()
        self.delta_q = Quaternion.identity()
        self.angles = NedAngles(phi=0.0, theta=0.0, psi=0.0, rho=0.0, chi=0.0)
        self.reset()

    def reset(self) -> None:
        """Reinitialise orientation, error estimates and covariances."""
        self.first_orientation_lock = False

        self.fast_deltat = 1.0 / SENSORFS
        self.deltat = OVERSAMPLE_RATIO * self.fast_deltat
        self.deltatsq = self.deltat * self.deltat
        self.casq = FCA * FCA
        self.cdsq = FCD * FCD
        self.qwb_plus_qvg = FQWB + FQVG

        self.c = np.zeros((6, 12))
        self.c[0:3, 6:9] = np.eye(3)
        self.c[3:6, 9:12] = -np.eye(3)

        self.r_pl = np.eye(3)
        self.q_pl = Quaternion.identity()
        self.th_err_pl = np.zeros(3)
        self.b_err_pl = np.zeros(3)
        self.a_err_se_pl = np.zeros(3)
        self.d_err_se_pl = np.zeros(3)
        self.b_pl = np.zeros(3)

        self.delta_pl = 0.0
        self.m_gl = np.array([DEFAULTB, 0.0, 0.0])

        d2 = FDEGTORAD * FDEGTORAD * self.deltatsq
        self.qv_aa = FQVA + FQWA + d2 * (FQWB + FQVG)
        self.qv_mm = FQVM + FQWD + d2 * DEFAULTB * DEFAULTB * (FQWB + FQVG)

        qw = np.zeros((12, 12))
        qw[_AXES, _AXES] = FQWINITTHTH
        qw[_AXES + 3, _AXES + 3] = FQWINITBB
        qw[_AXES, _AXES + 3] = FQWINITTHB
        qw[_AXES + 3, _AXES] = FQWINITTHB
        qw[_AXES + 6, _AXES + 6] = FQWINITAA
        qw[_AXES + 9, _AXES + 9] = FQWINITDD
        self.qw = qw

        self.reset_pending = False

    def request_reset(self) -> None:
        """Ask for a reinitialisation on the next call to update."""
        self.reset_pending = True

    def orientation(self) -> Quaternion:
        """Return the a posteriori orientation quaternion."""
        return self.q_pl

    def update(
        self,
        accel: AccelSensor,
        mag: MagSensor,
        gyro: GyroSensor,
        magcal: MagCalibration,
    ) -> None:
        """Run one filter step on the latest sensor readings."""
        if self.reset_pending:
            self.reset()
            return

        valid_cal = bool(magcal.valid_mag_cal)
        gp_fast = np.asarray(accel.gp_fast, dtype=float)
        bc_fast = np.asarray(mag.bc_fast, dtype=float)

        # One-off lock to the eCompass orientation after the first valid calibration.
        if valid_cal and not self.first_orientation_lock:
            r, delta = ecompass_ned(mag.bc_fast, accel.gp_fast)
            self.r_pl = np.array(r)
            self.delta_pl = delta
            self.q_pl = Quaternion.from_rotation_matrix(r)
            self.first_orientation_lock = True

        # A priori orientation from the integrated fast gyro readings.
        self.omega = np.asarray(gyro.yp, dtype=float) - self.b_pl
        q_mi = self.q_pl
        for sample in gyro.yp_fast:
            rvec = (np.asarray(sample, dtype=float) - self.b_pl) * self.fast_deltat
            self.delta_q = Quaternion.from_rotation_vector_deg(rvec, 1.0)
            q_mi = q_mi * self.delta_q
        self.q_mi = q_mi
        self.r_mi = np.array(q_mi.to_rotation_matrix())

        # A priori gravity and geomagnetic estimates and their errors.
        self.g_se_gy_mi = self.r_mi[:, 2].copy()
        self.a_se_mi = FCA * self.a_se_pl
        self.g_err_se_mi = gp_fast + self.a_se_mi - self.g_se_gy_mi
        self.m_se_gy_mi = (
            self.r_mi[:, 0] * self.m_gl[0] + self.r_mi[:, 2] * self.m_gl[2]
        )
        self.m_err_se_mi = bc_fast - self.m_se_gy_mi

        # Variable entries of the measurement matrix.
        g_block = _skew(self.g_se_gy_mi)
        m_block = _skew(self.m_se_gy_mi)
        self.c[0:3, 0:3] = g_block
        self.c[3:6, 0:3] = m_block
        self.c[0:3, 3:6] = -self.deltat * g_block
        self.c[3:6, 3:6] = -self.deltat * m_block

        # Kalman gain K = Qw C^T inv(C Qw C^T + Qv); only the leading 3x3
        # block of the innovation covariance is inverted.
        qw_ct = self.qw @ self.c.T
        s = _mirror_upper(self.c @ qw_ct)
        s[_AXES, _AXES] += self.qv_aa
        s[_AXES + 3, _AXES + 3] += self.qv_mm
        s[0:3, 0:3] = np.linalg.inv(s[0:3, 0:3])
        self.k = qw_ct @ s

        # A posteriori error estimate from the accelerometer error.
        k = self.k
        g_err = self.g_err_se_mi
        m_err = self.m_err_se_mi
        self.th_err_pl = k[0:3, 0:3] @ g_err
        self.b_err_pl = k[3:6, 0:3] @ g_err
        self.a_err_se_pl = k[6:9, 0:3] @ g_err
        self.d_err_se_pl = k[9:12, 0:3] @ g_err + k[9:12, 3:6] @ m_err

        d_power = float(self.d_err_se_pl @ self.d_err_se_pl)
        jamming = valid_cal and d_power > magcal.four_b_sq
        use_mag = valid_cal and not jamming
        if use_mag:
            self.th_err_pl = self.th_err_pl + k[0:3, 3:6] @ m_err
            self.b_err_pl = self.b_err_pl + k[3:6, 3:6] @ m_err
            self.a_err_se_pl = self.a_err_se_pl + k[6:9, 3:6] @ m_err

        # Apply the corrections.
        self.delta_q = Quaternion.from_rotation_vector_deg(self.th_err_pl, -1.0)
        self.q_pl = (self.q_mi * self.delta_q).normalized()
        self.r_pl = np.array(self.q_pl.to_rotation_matrix())
        self.r_vec_pl = np.array(self.q_pl.to_rotation_vector_deg())

        self.b_pl = self.b_pl - self.b_err_pl
        self.a_se_pl = self.a_se_mi - self.a_err_se_pl

        a_gl = self.r_pl.T @ gp_fast
        self.a_gl_pl = np.array([-a_gl[0], -a_gl[1], -(a_gl[2] - 1.0)])

        if use_mag:
            d_gl = self.r_pl.T @ self.d_err_se_pl
            self.d_err_gl_pl[0] = d_gl[0]
            self.d_err_gl_pl[2] = d_gl[2]
            fopp = self.m_gl[2] - self.d_err_gl_pl[2]
            fadj = max(self.m_gl[0] - self.d_err_gl_pl[0], 0.0)
            fhyp = math.sqrt(fopp * fopp + fadj * fadj)
            if fhyp != 0.0:
                sindelta = fopp / fhyp
                cosdelta = fadj / fhyp
                if sindelta > SINDELTAMAX:
                    sindelta, cosdelta = SINDELTAMAX, COSDELTAMAX
                elif sindelta < -SINDELTAMAX:
                    sindelta, cosdelta = -SINDELTAMAX, COSDELTAMAX
                self.delta_pl = asin_deg(sindelta)
                self.m_gl[0] = magcal.b * cosdelta
                self.m_gl[2] = magcal.b * sindelta

        self.angles = ned_angles_deg(self.r_pl)

        # P+ = Qw - K (C Qw), kept symmetric from its upper triangle.
        self.p_plus = _mirror_upper(self.qw - k @ (self.c @ self.qw))

        # Qw for the next step from the a posteriori covariance.
        p = self.p_plus
        qw = np.zeros((12, 12))
        qw[_AXES, _AXES] = p[_AXES, _AXES] + self.deltatsq * (
            p[_AXES + 3, _AXES + 3] + self.qwb_plus_qvg
        )
        qw[_AXES + 3, _AXES + 3] = p[_AXES + 3, _AXES + 3] + FQWB
        cross = -self.deltat * qw[_AXES + 3, _AXES + 3]
        qw[_AXES, _AXES + 3] = cross
        qw[_AXES + 3, _AXES] = cross
        qw[_AXES + 6, _AXES + 6] = self.casq * p[_AXES + 6, _AXES + 6] + FQWA
        qw[_AXES + 9, _AXES + 9] = self.cdsq * p[_AXES + 9, _AXES + 9] + FQWD
        self.qw = qw