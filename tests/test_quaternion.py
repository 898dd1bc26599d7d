import math

import pytest

from nedfusion.quaternion import Quaternion

ROTATION_VECTORS = [
    (0.0, 0.0, 0.0),
    (1.0, 2.0, -3.0),
    (10.0, 0.0, 0.0),
    (0.0, -12.0, 5.0),
    (30.0, 40.0, 50.0),
    (-100.0, 20.0, 60.0),
    (0.0, 0.0, 170.0),
]


def _norm(q):
    return math.sqrt(sum(c * c for c in q))


def _matmul(a, b):
    return [[sum(a[i][k] * b[k][j] for k in range(3)) for j in range(3)] for i in range(3)]


def _transpose(a):
    return [[a[j][i] for j in range(3)] for i in range(3)]


def test_identity_components():
    assert tuple(Quaternion.identity()) == (1.0, 0.0, 0.0, 0.0)


def test_identity_is_neutral_for_multiplication():
    q = Quaternion(0.5, 0.5, -0.5, 0.5)
    assert q * Quaternion.identity() == q
    assert Quaternion.identity() * q == q


def test_multiplication_is_associative():
    a = Quaternion.from_rotation_vector_deg((10.0, 20.0, 30.0))
    b = Quaternion.from_rotation_vector_deg((-40.0, 5.0, 15.0))
    c = Quaternion.from_rotation_vector_deg((0.0, 70.0, -20.0))
    left = tuple((a * b) * c)
    right = tuple(a * (b * c))
    assert left == pytest.approx(right, abs=1e-6)


def test_multiplication_preserves_norm():
    a = Quaternion(1.0, 2.0, 3.0, 4.0)
    b = Quaternion(-2.0, 0.5, 1.0, 3.0)
    assert _norm(a * b) == pytest.approx(_norm(a) * _norm(b))


def test_multiplication_with_other_type_raises():
    with pytest.raises(TypeError):
        Quaternion.identity() * 2.0


def test_normalized_has_unit_norm_and_nonnegative_scalar():
    q = Quaternion(-2.0, 1.0, 0.5, -3.0).normalized()
    assert _norm(q) == pytest.approx(1.0)
    assert q.q0 >= 0.0
    assert q.q1 < 0.0 and q.q3 > 0.0


def test_normalized_corrupt_becomes_identity():
    assert Quaternion(0.0, 0.0001, 0.0, 0.0).normalized() == Quaternion.identity()


def test_quarter_turn_about_z():
    q = Quaternion.from_rotation_vector_deg((0.0, 0.0, 90.0))
    half = math.sqrt(0.5)
    assert tuple(q) == pytest.approx((half, 0.0, 0.0, half), abs=1e-6)
    r = q.to_rotation_matrix()
    assert r[0][1] == pytest.approx(1.0)
    assert r[1][0] == pytest.approx(-1.0)
    assert r[2][2] == pytest.approx(1.0)


@pytest.mark.parametrize("rvec", ROTATION_VECTORS)
def test_rotation_vector_round_trip(rvec):
    q = Quaternion.from_rotation_vector_deg(rvec)
    assert _norm(q) == pytest.approx(1.0, abs=1e-9)
    back = tuple(q.to_rotation_vector_deg())
    assert back == pytest.approx(rvec, abs=1e-5)


@pytest.mark.parametrize("rvec", ROTATION_VECTORS)
def test_negative_scaling_gives_conjugate(rvec):
    q = Quaternion.from_rotation_vector_deg(rvec, 1.0)
    inv = Quaternion.from_rotation_vector_deg(rvec, -1.0)
    assert tuple(inv) == pytest.approx((q.q0, -q.q1, -q.q2, -q.q3), abs=1e-6)
    assert tuple(q * inv) == pytest.approx((1.0, 0.0, 0.0, 0.0), abs=1e-6)


def test_rotation_vector_wrong_length_raises():
    with pytest.raises(ValueError):
        Quaternion.from_rotation_vector_deg((1.0, 2.0))


@pytest.mark.parametrize("rvec", ROTATION_VECTORS)
def test_rotation_matrix_is_orthonormal(rvec):
    r = Quaternion.from_rotation_vector_deg(rvec).to_rotation_matrix()
    product = _matmul(r, _transpose(r))
    for i in range(3):
        for j in range(3):
            assert product[i][j] == pytest.approx(1.0 if i == j else 0.0, abs=1e-9)


@pytest.mark.parametrize("rvec", ROTATION_VECTORS)
def test_rotation_matrix_round_trip(rvec):
    q = Quaternion.from_rotation_vector_deg(rvec)
    back = Quaternion.from_rotation_matrix(q.to_rotation_matrix())
    assert tuple(back) == pytest.approx(tuple(q), abs=1e-6)


def test_matrix_of_product_is_product_of_matrices():
    a = Quaternion.from_rotation_vector_deg((20.0, -10.0, 35.0))
    b = Quaternion.from_rotation_vector_deg((-5.0, 60.0, 10.0))
    expected = _matmul(b.to_rotation_matrix(), a.to_rotation_matrix())
    actual = (a * b).to_rotation_matrix()
    for i in range(3):
        for j in range(3):
            assert actual[i][j] == pytest.approx(expected[i][j], abs=1e-9)


def test_from_matrix_half_turn_uses_diagonal():
    q = Quaternion(0.0, 1.0, 0.0, 0.0)
    back = Quaternion.from_rotation_matrix(q.to_rotation_matrix())
    assert tuple(back) == pytest.approx((0.0, 1.0, 0.0, 0.0), abs=1e-6)


def test_from_identity_matrix():
    r = Quaternion.identity().to_rotation_matrix()
    assert Quaternion.from_rotation_matrix(r) == Quaternion.identity()


def test_from_matrix_wrong_shape_raises():
    with pytest.raises(ValueError):
        Quaternion.from_rotation_matrix(((1.0, 0.0), (0.0, 1.0)))


def test_identity_rotation_vector_is_zero():
    assert tuple(Quaternion.identity().to_rotation_vector_deg()) == (0.0, 0.0, 0.0)