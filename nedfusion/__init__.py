"""NED-frame orientation estimation: sensor containers, fast angle functions,
quaternions, static orientation and a 12-state Kalman filter."""

__version__ = "0.1.0"
__all__ = ["sensors", "angles", "quaternion", "orientation", "kalman"]