[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nedfusion"
version = "0.1.0"
description = "NED-frame orientation estimation with a 12-state Kalman filter for accelerometer, magnetometer and gyroscope data"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["imu", "sensor fusion", "kalman filter", "quaternion", "magnetometer", "ecompass", "ned"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["nedfusion"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
