import numpy as np
import pytest
from scipy.special import hankel1, jv, y0

from ews.base.medium import AcousticMedium
from ews.modal.special import (
    cartesian_to_polar, hankel, outgoing_basis_function, outgoing_translation_matrix,
    radial_basis, regular_basis_function, regular_translation_matrix
)


@pytest.fixture
def acoustic():
    return AcousticMedium(density=1.0, wavespeed=2.0)


def outgoing_wave_field(a, k, x):
    order = (len(a) - 1) // 2
    r, theta = cartesian_to_polar(x)
    ms = np.arange(-order, order + 1)
    return np.sum(a * hankel1(ms, k * r) * np.exp(1j * ms * theta))


def test_cartesian_to_polar():
    r, theta = cartesian_to_polar((0.0, -2.0))
    assert r == pytest.approx(2.0)
    assert theta == pytest.approx(-np.pi / 2)


def test_hankel_is_first_kind():
    x = 1.7
    assert hankel(0, x) == pytest.approx(jv(0, x) + 1j * y0(x))


@pytest.mark.parametrize("regular", [True, False])
def test_radial_derivatives(regular):
    orders = np.arange(-3, 4)
    x, h = 2.3, 1e-5

    forward = radial_basis(orders, x + h, regular)
    backward = radial_basis(orders, x - h, regular)
    np.testing.assert_allclose(radial_basis(orders, x, regular, 1), (forward - backward) / (2 * h), rtol=1e-7, atol=1e-9)

    forward = radial_basis(orders, x + h, regular, 1)
    backward = radial_basis(orders, x - h, regular, 1)
    np.testing.assert_allclose(radial_basis(orders, x, regular, 2), (forward - backward) / (2 * h), rtol=1e-7, atol=1e-9)


def test_basis_functions(acoustic):
    omega, x = 3.0, (0.4, -0.9)
    r, theta = cartesian_to_polar(x)
    k = acoustic.wavenumber(omega)

    regular = regular_basis_function(acoustic, omega)(2, x)
    outgoing = outgoing_basis_function(acoustic, omega)(2, x)
    assert regular.shape == outgoing.shape == (5,)
    assert regular[3] == pytest.approx(jv(1, k * r) * np.exp(1j * theta))
    assert outgoing[0] == pytest.approx(hankel1(-2, k * r) * np.exp(-2j * theta))


def test_outgoing_translation(acoustic):
    omega = 3.0
    k = acoustic.wavenumber(omega)
    a = np.array([0.3, -1.0j, 1.0, 0.5, 0.2 + 0.1j])
    shift = np.array([1.1, 0.6])
    y = np.array([-0.2, 0.15])

    V = outgoing_translation_matrix(acoustic, 2, 30, omega, shift)
    assert V.shape == (61, 5)

    expanded = regular_basis_function(acoustic, omega)(30, y) @ (V @ a)
    assert expanded == pytest.approx(outgoing_wave_field(a, k, shift + y), rel=1e-10)


def test_outgoing_translation_far_field(acoustic):
    omega = 3.0
    k = acoustic.wavenumber(omega)
    a = np.array([1.0, 0.0, -0.5j])
    shift = np.array([-0.4, 0.3])
    y = np.array([1.5, 1.0])

    U = regular_translation_matrix(acoustic, 1, 40, omega, shift)
    expanded = outgoing_basis_function(acoustic, omega)(40, y) @ (U @ a)
    assert expanded == pytest.approx(outgoing_wave_field(a, k, shift + y), rel=1e-10)


def test_regular_translation(acoustic):
    omega = 2.0
    a = np.array([0.5, 1.0, -1.0j])
    shift = np.array([0.7, -1.2])
    y = np.array([0.3, 0.9])
    regular = regular_basis_function(acoustic, omega)

    U = regular_translation_matrix(acoustic, 1, 30, omega, shift)
    assert regular(30, y) @ (U @ a) == pytest.approx(regular(1, shift + y) @ a, rel=1e-10)


def test_zero_regular_translation_is_identity(acoustic):
    U = regular_translation_matrix(acoustic, 2, 2, 1.0, (0.0, 0.0))
    np.testing.assert_allclose(U, np.eye(5))


def test_zero_outgoing_translation(acoustic):
    with pytest.raises(ValueError):
        outgoing_translation_matrix(acoustic, 2, 2, 1.0, (0.0, 0.0))
